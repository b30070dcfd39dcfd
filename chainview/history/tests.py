import time

import pytest
from django.core.paginator import Paginator
from requests import ConnectionError as RequestsConnectionError

from history.models import HistoryTransaction, Pager


ADDRESS = '0x' + 'ab' * 20
OTHER_ADDRESS = '0x' + 'cd' * 20


def make_transactions(count: int) -> list:
    now = int(time.time())
    return [
        {
            'from': ADDRESS,
            'to': '0x' + f'{i:040x}',
            'amount': i / 10,
            'timestamp': now - 3661,
            'hash': '0x' + f'{i:064x}',
        }
        for i in range(count)
    ]


class TestPager:
    @pytest.mark.parametrize('count, total', [(0, 1), (1, 1), (50, 1), (51, 2), (120, 3)])
    def test_total_pages(self, count, total):
        page = Paginator(list(range(count)), 50).get_page(1)
        assert Pager.for_page(page).total == total

    def test_first_page_bounds(self):
        pager = Pager(current=1, total=3)
        assert not pager.has_previous
        assert pager.previous == 1
        assert pager.has_next
        assert pager.next == 2

    def test_last_page_bounds(self):
        pager = Pager(current=3, total=3)
        assert pager.has_previous
        assert pager.previous == 2
        assert not pager.has_next
        assert pager.next == 3


class TestHistoryTransaction:
    def test_from_api(self):
        tx = HistoryTransaction.from_api({'from': '0x1', 'to': '0x2', 'amount': '0.5', 'timestamp': 1700000000})
        assert tx.amount == 0.5
        assert tx.timestamp == 1700000000
        assert tx.hash is None

    def test_missing_fields(self):
        tx = HistoryTransaction.from_api({})
        assert tx.from_address == ''
        assert tx.amount == 0.0
        assert tx.timestamp is None


class TestHistoryTableView:
    @pytest.fixture
    def url(self):
        return f'/history/{ADDRESS}/'

    def test_first_page(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, {'transactions': make_transactions(120)})
        response = client.get(url)
        content = response.content.decode()
        assert response.status_code == 200
        assert len(response.context['transactions']) == 50
        assert 'Page 1 of 3' in content
        assert '1 hrs ago' in content
        assert '0.100000 ETH' in content
        assert '0xabab...abab' in content

    def test_paging_does_not_refetch(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, {'transactions': make_transactions(120)})
        client.get(url)
        response = client.get(f'{url}?page=3', HTTP_HX_REQUEST='true')
        assert api_session.get.call_count == 1
        assert len(response.context['transactions']) == 20
        assert response.context['pager'] == Pager(current=3, total=3)
        assert 'Page 3 of 3' in response.content.decode()

    def test_page_is_clamped(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, {'transactions': make_transactions(120)})
        client.get(url)
        response = client.get(f'{url}?page=9', HTTP_HX_REQUEST='true')
        assert response.context['pager'].current == 3
        response = client.get(f'{url}?page=zero', HTTP_HX_REQUEST='true')
        assert response.context['pager'].current == 1

    def test_address_change_refetches(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, {'transactions': make_transactions(3)})
        client.get(url)
        client.get(f'/history/{OTHER_ADDRESS}/?page=1', HTTP_HX_REQUEST='true')
        assert api_session.get.call_count == 2
        api_session.get.assert_called_with(
            'http://history.test/api/transactions', params={'address': OTHER_ADDRESS}
        )

    def test_mount_refetches(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, {'transactions': make_transactions(3)})
        client.get(url)
        client.get(url)
        assert api_session.get.call_count == 2

    def test_boundary_buttons_disabled(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, {'transactions': make_transactions(10)})
        content = client.get(url).content.decode()
        assert 'Page 1 of 1' in content
        assert content.count('disabled') == 2

    def test_empty_list(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, {'transactions': []})
        content = client.get(url).content.decode()
        assert 'No transactions found' in content
        assert 'Page 1 of 0' not in content

    def test_backend_error_notifies(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(500, {'message': 'Upstream unavailable'})
        content = client.get(url).content.decode()
        assert 'Error fetching transactions: Upstream unavailable' in content
        assert 'No transactions found' in content

    def test_network_error_notifies(self, client, api_session, url):
        api_session.get.side_effect = RequestsConnectionError('refused')
        content = client.get(url).content.decode()
        assert 'Error: Failed to fetch transactions from API.' in content

    def test_rows_without_hash(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, {'transactions': [
            {'from': '', 'to': None, 'amount': 1, 'timestamp': int(time.time()) + 60},
        ]})
        content = client.get(url).content.decode()
        assert 'Invalid Address' in content
        assert 'Just now' in content

    def test_unreadable_timestamp_is_unknown(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, {'transactions': [
            {'from': ADDRESS, 'to': OTHER_ADDRESS, 'amount': 1, 'timestamp': 'garbage'},
        ]})
        content = client.get(url).content.decode()
        assert '<td>Unknown</td>' in content
        assert 'days ago' not in content

    def test_two_addresses_keep_their_own_lists(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, {'transactions': make_transactions(120)})
        client.get(url)
        api_session.get.return_value = response_factory(200, {'transactions': make_transactions(10)})
        client.get(f'/history/{OTHER_ADDRESS}/')

        response = client.get(f'{url}?page=2', HTTP_HX_REQUEST='true')
        assert api_session.get.call_count == 2
        assert response.context['pager'] == Pager(current=2, total=3)

        response = client.get(f'/history/{OTHER_ADDRESS}/?page=1', HTTP_HX_REQUEST='true')
        assert api_session.get.call_count == 2
        assert response.context['pager'] == Pager(current=1, total=1)

    def test_oldest_held_address_is_released(self, client, api_session, response_factory, settings, url):
        settings.HISTORY_HELD_ADDRESSES = 2
        api_session.get.return_value = response_factory(200, {'transactions': make_transactions(3)})
        third_address = '0x' + 'ef' * 20
        client.get(url)
        client.get(f'/history/{OTHER_ADDRESS}/')
        client.get(f'/history/{third_address}/')
        assert list(client.session['history']) == [OTHER_ADDRESS, third_address]

        client.get(f'{url}?page=1', HTTP_HX_REQUEST='true')
        assert api_session.get.call_count == 4

    def test_unreadable_body_notifies_generic_error(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, undecodable=True)
        content = client.get(url).content.decode()
        assert 'Error: Failed to fetch transactions from API.' in content
        assert 'Error fetching transactions' not in content
