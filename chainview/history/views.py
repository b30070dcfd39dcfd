import logging

from django.conf import settings
from django.contrib import messages
from django.core.paginator import Paginator
from django.http import HttpRequest
from django.shortcuts import render
from django.views.generic import View

from .models import HistoryTransaction, Pager
from main.exceptions import ExplorerAPIError, RequestFailure
from main.utils import ExplorerAPI


logger = logging.getLogger(__name__)


class HistoryTable(View):
    template = 'history/history.html'
    div_template = 'history/history_table.html'
    session_key = 'history'

    def get(self, request: HttpRequest, address: str):
        # Full page loads always fetch; htmx page flips reuse the held list
        is_hx_request = 'HX-Request' in request.headers
        held_lists = request.session.get(self.session_key, {})
        held = held_lists.get(address)
        if not is_hx_request or held is None:
            held = self.load_transactions(request, address)
            request.session[self.session_key] = self.hold(held_lists, address, held)

        rows = [HistoryTransaction.from_api(tx) for tx in held if isinstance(tx, dict)]
        paginator = Paginator(rows, settings.HISTORY_PAGE_SIZE)
        page = paginator.get_page(request.GET.get('page'))

        context = {
            'address': address,
            'page': page,
            'pager': Pager.for_page(page),
            'transactions': page.object_list,
        }
        template = self.div_template if is_hx_request else self.template
        return render(request, template, context)

    def hold(self, held_lists: dict, address: str, transactions: list) -> dict:
        # one list per address, most recent last; the oldest fall out
        held_lists = {key: value for key, value in held_lists.items() if key != address}
        held_lists[address] = transactions
        limit = settings.HISTORY_HELD_ADDRESSES
        return dict(list(held_lists.items())[-limit:])

    def load_transactions(self, request: HttpRequest, address: str) -> list:
        api = ExplorerAPI()
        try:
            transactions = api.get_address_transactions(address)
        except ExplorerAPIError as e:
            logger.error(f'Error fetching transactions for {address}: {e.message}')
            title = 'Error' if isinstance(e, RequestFailure) else 'Error fetching transactions'
            messages.error(request, f'{title}: {e.message}')
            return []
        logger.info(f'{len(transactions)} transactions fetched for {address}')
        return transactions
