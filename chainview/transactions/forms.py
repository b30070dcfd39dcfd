import re

from django import forms
from django.core.exceptions import ValidationError


TX_HASH_PATTERN = re.compile(r'0x[0-9a-fA-F]{64}')
ADDRESS_PATTERN = re.compile(r'0x[0-9a-fA-F]{40}')


class SearchForm(forms.Form):
    query = forms.CharField(
        label='Transaction Hash or Address',
        max_length=66,
        widget=forms.TextInput(attrs={
            'placeholder': 'Search by transaction hash or address...',
            'type': 'search',
            'autocomplete': 'off',
        }))

    def clean(self):
        cleaned_data = super().clean()
        query = (cleaned_data.get('query') or '').strip()
        if TX_HASH_PATTERN.fullmatch(query):
            cleaned_data['kind'] = 'transaction'
        elif ADDRESS_PATTERN.fullmatch(query):
            cleaned_data['kind'] = 'address'
        elif 'query' in cleaned_data:
            error_message = 'Enter a transaction hash (0x + 64 hex) or an address (0x + 40 hex).'
            self.add_error('query', ValidationError(error_message))
        cleaned_data['query'] = query
        return cleaned_data
