import math
import time

import pytest
from requests import ConnectionError as RequestsConnectionError

from main.exceptions import EmptyPayload, FetchFailure, NotFound, RequestFailure
from main.state import Event, FetchState, ViewState, transition
from main.utils import ExplorerAPI, Formatter, parse_decimal


class TestFormatter:
    @pytest.fixture
    def formatter(self):
        return Formatter()

    @pytest.mark.parametrize('score, level', [
        ('80', 'High'),
        ('99.5', 'High'),
        ('79.99', 'Medium'),
        ('50', 'Medium'),
        ('49.9', 'Low'),
        ('0', 'Low'),
        ('-10', 'Low'),
        (85, 'High'),
        ('85 points', 'High'),
        ('not a number', 'Low'),
        ('NaN', 'Low'),
        ('', 'Low'),
        (None, 'Low'),
    ])
    def test_risk_level(self, formatter, score, level):
        assert formatter.risk_level(score) == level

    def test_address_truncation(self, formatter):
        assert formatter.address('0x1234567890abcdef') == '0x1234...cdef'
        assert formatter.address('') == 'Invalid Address'
        assert formatter.address(None) == 'Invalid Address'

    def test_short_address_does_not_raise(self, formatter):
        assert formatter.address('0x12') == '0x12...0x12'

    def test_non_string_address_does_not_raise(self, formatter):
        assert formatter.address(12345678901) == '123456...8901'
        assert formatter.address(0) == 'Invalid Address'

    def test_relative_time_units(self, formatter):
        now = 1_700_000_000
        assert formatter.relative_time(now, now=now) == '0 secs ago'
        assert formatter.relative_time(now - 59, now=now) == '59 secs ago'
        assert formatter.relative_time(now - 60, now=now) == '1 mins ago'
        assert formatter.relative_time(now - 3599, now=now) == '59 mins ago'
        assert formatter.relative_time(now - 3661, now=now) == '1 hrs ago'
        assert formatter.relative_time(now - 86399, now=now) == '23 hrs ago'
        assert formatter.relative_time(now - 86400 * 3 - 5, now=now) == '3 days ago'

    def test_relative_time_future_timestamp(self, formatter):
        now = 1_700_000_000
        assert formatter.relative_time(now + 10, now=now) == 'Just now'

    def test_relative_time_against_wall_clock(self, formatter):
        assert formatter.relative_time(int(time.time()) + 10) == 'Just now'
        assert formatter.relative_time(time.time()) == '0 secs ago'

    def test_relative_time_unusable_timestamp(self, formatter):
        assert formatter.relative_time(None) == 'Unknown'
        assert formatter.relative_time('soon') == 'Unknown'

    def test_amount(self, formatter):
        assert formatter.amount(1.5) == '1.500000'
        assert formatter.amount('0.1234567') == '0.123457'
        assert formatter.amount(None) == '0.000000'


class TestParseDecimal:
    def test_numbers_pass_through(self):
        assert parse_decimal(12) == 12.0
        assert parse_decimal(1.25) == 1.25

    def test_leading_prefix_is_read(self):
        assert parse_decimal('  42.5 gwei') == 42.5
        assert parse_decimal('1e3') == 1000.0
        assert parse_decimal('-Infinity') == -math.inf

    def test_unparseable_is_nan(self):
        assert math.isnan(parse_decimal('gwei 42'))
        assert math.isnan(parse_decimal(None))
        assert math.isnan(parse_decimal(True))


class TestFetchState:
    def test_initial_state_is_loading(self):
        assert FetchState().view is ViewState.LOADING

    def test_loading_takes_precedence_over_error(self):
        state = FetchState(loading=True, error='Transaction not found')
        assert state.view is ViewState.LOADING

    def test_error_takes_precedence_over_data(self):
        state = FetchState(loading=False, error='Failed', data={'hash': '0x1'})
        assert state.view is ViewState.ERROR

    def test_missing_data_is_not_found(self):
        assert FetchState(loading=False).view is ViewState.NOT_FOUND

    def test_started_clears_error_and_bumps_generation(self):
        state = FetchState(loading=False, error='Failed', generation=3)
        started = transition(state, Event.STARTED)
        assert started.loading is True
        assert started.error is None
        assert started.generation == 4

    def test_success_and_failure(self):
        state = transition(FetchState(), Event.STARTED)
        loaded = transition(state, Event.SUCCEEDED, state.generation, data='tx')
        assert loaded.view is ViewState.LOADED
        failed = transition(state, Event.FAILED, state.generation, error='Failed')
        assert failed.view is ViewState.ERROR
        assert failed.error == 'Failed'

    def test_stale_completion_is_discarded(self):
        first = transition(FetchState(), Event.STARTED)
        second = transition(first, Event.STARTED)
        after_stale = transition(second, Event.SUCCEEDED, first.generation, data='old')
        assert after_stale == second
        assert after_stale.view is ViewState.LOADING

        fresh = transition(after_stale, Event.SUCCEEDED, second.generation, data='new')
        assert fresh.data == 'new'
        assert transition(fresh, Event.FAILED, first.generation, error='late') == fresh


class TestExplorerAPI:
    @pytest.fixture
    def api(self, api_session):
        return ExplorerAPI()

    def test_transaction_detail(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(200, {'Transaction Hash': '0xabc'})
        assert api.get_transaction_detail('0xabc') == {'Transaction Hash': '0xabc'}
        api_session.get.assert_called_once_with(
            'http://explorer.test/api/transaction_detail/0xabc', params=None
        )

    def test_transaction_detail_not_found(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(404, {'detail': 'nope'})
        with pytest.raises(NotFound) as excinfo:
            api.get_transaction_detail('0xabc')
        assert excinfo.value.message == 'Transaction not found'

    def test_transaction_detail_server_error(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(500, {'detail': 'boom'})
        with pytest.raises(FetchFailure) as excinfo:
            api.get_transaction_detail('0xabc')
        assert excinfo.value.message == 'Failed to fetch transaction details'
        assert excinfo.value.status_code == 500

    def test_transaction_detail_empty_body(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(200, None)
        with pytest.raises(EmptyPayload) as excinfo:
            api.get_transaction_detail('0xabc')
        assert excinfo.value.message == 'No transaction data received'

    def test_transaction_detail_network_error(self, api, api_session):
        api_session.get.side_effect = RequestsConnectionError('connection refused')
        with pytest.raises(FetchFailure) as excinfo:
            api.get_transaction_detail('0xabc')
        assert excinfo.value.message == 'Failed to fetch transaction details'

    def test_transaction_detail_undecodable_body(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(200, undecodable=True)
        with pytest.raises(FetchFailure):
            api.get_transaction_detail('0xabc')

    def test_ethereum_data_requires_object(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(200, ['not', 'an', 'object'])
        with pytest.raises(EmptyPayload):
            api.get_ethereum_data()

    def test_state_changes_detail_message(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(400, {'detail': 'Trace unavailable'})
        with pytest.raises(FetchFailure) as excinfo:
            api.get_state_changes('0xabc')
        assert excinfo.value.message == 'Trace unavailable'

    def test_state_changes_generic_message(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(502, undecodable=True)
        with pytest.raises(FetchFailure) as excinfo:
            api.get_state_changes('0xabc')
        assert excinfo.value.message == 'Failed to fetch state changes'

    def test_state_changes_non_list_body(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(200, {'changes': []})
        assert api.get_state_changes('0xabc') == []

    def test_address_transactions_use_history_host(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(200, {'transactions': [{'from': '0x1'}]})
        assert api.get_address_transactions('0xdef') == [{'from': '0x1'}]
        api_session.get.assert_called_once_with(
            'http://history.test/api/transactions', params={'address': '0xdef'}
        )

    def test_address_transactions_backend_message(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(500, {'message': 'Rate limited'})
        with pytest.raises(FetchFailure) as excinfo:
            api.get_address_transactions('0xdef')
        assert excinfo.value.message == 'Rate limited'

    def test_address_transactions_missing_list(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(200, {})
        with pytest.raises(FetchFailure) as excinfo:
            api.get_address_transactions('0xdef')
        assert excinfo.value.message == 'Failed to fetch data from API.'
        assert not isinstance(excinfo.value, RequestFailure)

    def test_address_transactions_unreadable_body(self, api, api_session, response_factory):
        api_session.get.return_value = response_factory(200, undecodable=True)
        with pytest.raises(RequestFailure) as excinfo:
            api.get_address_transactions('0xdef')
        assert excinfo.value.message == 'Failed to fetch transactions from API.'

    def test_state_changes_network_error(self, api, api_session):
        api_session.get.side_effect = RequestsConnectionError('connection reset')
        with pytest.raises(RequestFailure) as excinfo:
            api.get_state_changes('0xabc')
        assert excinfo.value.message == 'Failed to fetch state changes. Please try again later.'


class TestIndex:
    def test_index_renders_search_form(self, client):
        response = client.get('/')
        assert response.status_code == 200
        assert 'name="query"' in response.content.decode()
