import pytest
from requests import ConnectionError as RequestsConnectionError

from main.state import FetchState, ViewState
from transactions.forms import SearchForm
from transactions.models import EthereumData, GasMetrics, StateChange, Transaction
from transactions.views import TransactionDetail


TX_HASH = '0x' + 'ab' * 32
ADDRESS = '0x' + '12' * 20

TRANSACTION_RECORD = {
    'Transaction Hash': TX_HASH,
    'Status': 'Success',
    'Block': 19000000,
    'Timestamp': '2024-01-01 00:00:00',
    'From': ADDRESS,
    'Interacted With (To)': '0x' + '34' * 20,
    'Value': '1.5 ETH',
    'Transaction Fee': '0.0021 ETH',
    'Gas Used': '21000',
    'Gas Price': '100 Gwei',
    'Gas_Metrics': {
        'gasUsed': 21000,
        'gasLimit': 30000,
        'gasPrice': '100',
        'avgGasPrice': 40.5,
        'gasEfficiency': '70%',
        'priceDifference': '+146%',
        'riskScore': '86.2',
    },
}


class TestModels:
    def test_transaction_from_api(self):
        transaction = Transaction.from_api(TRANSACTION_RECORD)
        assert transaction.hash == TX_HASH
        assert transaction.block == 19000000
        assert transaction.receiver == '0x' + '34' * 20
        assert transaction.gas_metrics.gas_limit == 30000
        assert transaction.gas_metrics.avg_gas_price == 40.5
        assert transaction.gas_risk == 'High'

    def test_missing_gas_metrics_is_low_risk(self):
        record = {key: value for key, value in TRANSACTION_RECORD.items() if key != 'Gas_Metrics'}
        transaction = Transaction.from_api(record)
        assert transaction.gas_metrics is None
        assert transaction.gas_risk == 'Low'

    def test_gas_metrics_risk_levels(self):
        assert GasMetrics(risk_score='50').risk_level == 'Medium'
        assert GasMetrics(risk_score='n/a').risk_level == 'Low'

    def test_ethereum_data_parses_each_field(self):
        data = EthereumData.from_api({'jcoPrice': '3120.55', 'jcoChange': 'oops', 'gasPrice': 17})
        assert data == EthereumData(price=3120.55, change=0.0, gas_price=17.0)

    def test_ethereum_data_defaults_to_zero(self):
        assert EthereumData.from_api({}) == EthereumData(0.0, 0.0, 0.0)

    def test_state_changes_skip_non_records(self):
        changes = StateChange.from_api_list([
            {'address': ADDRESS, 'before': '1', 'after': '2', 'difference': '+1'},
            'garbage',
            None,
        ])
        assert changes == [StateChange(ADDRESS, '1', '2', '+1')]


class TestSearchForm:
    def test_transaction_hash(self):
        form = SearchForm({'query': f' {TX_HASH} '})
        assert form.is_valid()
        assert form.cleaned_data['kind'] == 'transaction'
        assert form.cleaned_data['query'] == TX_HASH

    def test_address(self):
        form = SearchForm({'query': ADDRESS})
        assert form.is_valid()
        assert form.cleaned_data['kind'] == 'address'

    def test_invalid_query(self):
        form = SearchForm({'query': '0xnothex'})
        assert not form.is_valid()
        assert 'query' in form.errors


class TestTransactionSearchView:
    def test_hash_redirects_to_detail(self, client):
        response = client.post('/transaction/', {'query': TX_HASH})
        assert response.status_code == 302
        assert response.url == f'/transaction/{TX_HASH}/'

    def test_address_redirects_to_history(self, client):
        response = client.post('/transaction/', {'query': ADDRESS})
        assert response.status_code == 302
        assert response.url == f'/history/{ADDRESS}/'

    def test_invalid_query_rerenders_form(self, client):
        response = client.post('/transaction/', {'query': 'hello'})
        assert response.status_code == 200
        assert 'Enter a transaction hash' in response.content.decode()


class TestTransactionDetailView:
    @pytest.fixture
    def url(self):
        return f'/transaction/{TX_HASH}/'

    def test_full_page_is_loading_shell(self, client, api_session, url):
        response = client.get(url)
        content = response.content.decode()
        assert response.status_code == 200
        assert 'data-state="loading"' in content
        assert 'every 30s' in content
        assert content.count('hx-trigger="load, every') == 1
        api_session.get.assert_not_called()

    def test_loaded(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, TRANSACTION_RECORD)
        response = client.get(url, HTTP_HX_REQUEST='true')
        content = response.content.decode()
        assert 'data-state="loaded"' in content
        assert '1.5 ETH' in content
        assert 'risk-high' in content
        assert response.context['state'].view is ViewState.LOADED

    def test_not_found_response_is_error_view(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(404, {'detail': 'Not found'})
        response = client.get(url, HTTP_HX_REQUEST='true')
        content = response.content.decode()
        assert 'data-state="error"' in content
        assert 'Transaction not found' in content
        assert 'href="/transaction/"' in content

    def test_empty_body_error(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, {})
        response = client.get(url, HTTP_HX_REQUEST='true')
        assert 'No transaction data received' in response.content.decode()

    def test_network_failure(self, client, api_session, url):
        api_session.get.side_effect = RequestsConnectionError('refused')
        response = client.get(url, HTTP_HX_REQUEST='true')
        assert 'Failed to fetch transaction details' in response.content.decode()

    def test_non_record_body_is_not_found_view(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, ['unexpected'])
        response = client.get(url, HTTP_HX_REQUEST='true')
        content = response.content.decode()
        assert 'data-state="not_found"' in content
        assert 'Transaction Not Found' in content

    def test_load_transaction_fills_missing_hash(self, api_session, response_factory):
        api_session.get.return_value = response_factory(200, {'Status': 'Pending'})
        state = TransactionDetail().load_transaction(FetchState(), TX_HASH)
        assert state.data.hash == TX_HASH


class TestMarketSnapshotView:
    def test_snapshot(self, client, api_session, response_factory):
        api_session.get.return_value = response_factory(
            200, {'jcoPrice': '3120.5', 'jcoChange': '-1.25', 'gasPrice': '17'}
        )
        response = client.get('/transaction/market/', HTTP_HX_REQUEST='true')
        content = response.content.decode()
        assert response.status_code == 200
        assert '3120.50' in content
        assert '-1.25' in content
        assert 'market-change-down' in content

    def test_malformed_fields_default_to_zero(self, client, api_session, response_factory):
        api_session.get.return_value = response_factory(200, {'jcoPrice': 'n/a'})
        response = client.get('/transaction/market/', HTTP_HX_REQUEST='true')
        assert response.context['ethereum'] == EthereumData(0.0, 0.0, 0.0)

    def test_failure_keeps_previous_snapshot(self, client, api_session, response_factory):
        api_session.get.return_value = response_factory(503, {'detail': 'down'})
        response = client.get('/transaction/market/', HTTP_HX_REQUEST='true')
        assert response.status_code == 204
        assert response.content == b''


class TestStateChangesView:
    @pytest.fixture
    def url(self):
        return f'/transaction/{TX_HASH}/state/'

    def test_state_changes(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, [
            {'address': ADDRESS, 'before': '10 ETH', 'after': '8.5 ETH', 'difference': '-1.5 ETH'},
        ])
        response = client.get(url, HTTP_HX_REQUEST='true')
        content = response.content.decode()
        assert '0x1212...1212' in content
        assert '-1.5 ETH' in content
        api_session.get.assert_called_once_with(
            f'http://explorer.test/api/transaction/{TX_HASH}/state', params=None
        )

    def test_detail_message_is_shown(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(404, {'detail': 'No trace for transaction'})
        response = client.get(url, HTTP_HX_REQUEST='true')
        assert response.status_code == 200
        assert 'No trace for transaction' in response.content.decode()

    def test_malformed_body_is_empty(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, {'unexpected': True})
        response = client.get(url, HTTP_HX_REQUEST='true')
        assert response.context['state_changes'] == []
        assert 'No state changes found' in response.content.decode()

    def test_every_request_fetches_again(self, client, api_session, response_factory, url):
        api_session.get.return_value = response_factory(200, [])
        client.get(url, HTTP_HX_REQUEST='true')
        client.get(url, HTTP_HX_REQUEST='true')
        assert api_session.get.call_count == 2

    def test_network_failure_message(self, client, api_session, url):
        api_session.get.side_effect = RequestsConnectionError('connection reset')
        response = client.get(url, HTTP_HX_REQUEST='true')
        assert response.status_code == 200
        assert 'Failed to fetch state changes. Please try again later.' in response.content.decode()
