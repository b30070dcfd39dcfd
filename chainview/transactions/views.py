import logging

from django.conf import settings
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.views.generic import FormView, TemplateView, View

from .forms import SearchForm
from .models import EthereumData, StateChange, Transaction
from main.exceptions import ExplorerAPIError
from main.state import Event, FetchState, ViewState, transition
from main.utils import ExplorerAPI


logger = logging.getLogger(__name__)


class TransactionSearch(FormView):
    template = 'transactions/search.html'
    redirect_map = {
        'transaction': 'transactions:detail',
        'address': 'history:table',
    }

    def get(self, request: HttpRequest):
        form = SearchForm()
        return render(request, self.template, {'form': form})

    def post(self, request: HttpRequest):
        form = SearchForm(request.POST)
        if form.is_valid():
            kind = form.cleaned_data['kind']
            return redirect(self.redirect_map[kind], form.cleaned_data['query'])
        return render(request, self.template, {'form': form})


class TransactionDetail(TemplateView):
    template = 'transactions/detail.html'
    div_templates = {
        ViewState.LOADING: 'transactions/detail_loading.html',
        ViewState.ERROR: 'transactions/detail_error.html',
        ViewState.NOT_FOUND: 'transactions/detail_not_found.html',
        ViewState.LOADED: 'transactions/detail_loaded.html',
    }

    def get(self, request: HttpRequest, tx_hash: str):
        # The full page is the loading shell; htmx then asks for the resolved div
        is_hx_request = 'HX-Request' in request.headers
        state = FetchState()
        if is_hx_request:
            state = self.load_transaction(state, tx_hash)

        context = {
            'tx_hash': tx_hash,
            'state': state,
            'transaction': state.data,
            'ethereum': EthereumData(),
            'poll_seconds': settings.MARKET_POLL_SECONDS,
        }
        template = self.div_templates[state.view] if is_hx_request else self.template
        return render(request, template, context)

    def load_transaction(self, state: FetchState, tx_hash: str) -> FetchState:
        state = transition(state, Event.STARTED)
        generation = state.generation
        api = ExplorerAPI()
        try:
            data = api.get_transaction_detail(tx_hash)
        except ExplorerAPIError as e:
            logger.error(f'Error fetching transaction {tx_hash}: {e.message}')
            return transition(state, Event.FAILED, generation, error=e.message)

        if not isinstance(data, dict):
            return transition(state, Event.SUCCEEDED, generation, data=None)
        transaction = Transaction.from_api(data)
        transaction.hash = transaction.hash or tx_hash
        return transition(state, Event.SUCCEEDED, generation, data=transaction)


class MarketSnapshot(View):
    template = 'transactions/market.html'

    def get(self, request: HttpRequest):
        api = ExplorerAPI()
        try:
            data = api.get_ethereum_data()
        except ExplorerAPIError as e:
            logger.error(f'Error fetching Ethereum data: {e.message}')
            # htmx leaves the current snapshot in place on 204
            return HttpResponse(status=204)
        return render(request, self.template, {'ethereum': EthereumData.from_api(data)})


class StateChanges(View):
    template = 'transactions/state_changes.html'

    def get(self, request: HttpRequest, tx_hash: str):
        state = transition(FetchState(loading=False, data=[]), Event.STARTED)
        generation = state.generation
        api = ExplorerAPI()
        try:
            changes = api.get_state_changes(tx_hash)
        except ExplorerAPIError as e:
            logger.error(f'Error fetching state changes for {tx_hash}: {e.message}')
            state = transition(state, Event.FAILED, generation, error=e.message)
        else:
            state = transition(state, Event.SUCCEEDED, generation, data=StateChange.from_api_list(changes))

        context = {
            'tx_hash': tx_hash,
            'state': state,
            'state_changes': state.data,
        }
        return render(request, self.template, context)
