from django.shortcuts import render
from django.views.generic import TemplateView

from transactions.forms import SearchForm


class Index(TemplateView):
    template = 'main/index.html'

    def get(self, request):
        return render(request, self.template, {'form': SearchForm()})
