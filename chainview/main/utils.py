import logging
import math
import re
import time
from datetime import datetime, timezone
from json.decoder import JSONDecodeError

from django.conf import settings
from requests import RequestException, Response, Session

from .exceptions import EmptyPayload, FetchFailure, NotFound, RequestFailure


api_logger = logging.getLogger('api_logger')

# leading decimal prefix, read the way a browser's parseFloat reads it
_DECIMAL_PREFIX = re.compile(r'\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))')


def parse_decimal(value) -> float:
    """Parse a number out of an API value, returning NaN when there is none."""
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    match = _DECIMAL_PREFIX.match(str(value))
    if match is None:
        return math.nan
    return float(match.group(1).replace('Infinity', 'inf'))


class ExplorerAPI():
    # The detail endpoints and the address history endpoint live on different hosts
    def __init__(self, base: str=None, history_base: str=None) -> None:
        self._base = (base or settings.EXPLORER_API_URL).rstrip('/')
        self._history_base = (history_base or settings.HISTORY_API_URL).rstrip('/')
        self._session = self._create_session()

    def _create_session(self) -> Session:
        session = Session()
        session.headers.update({'Accept': 'application/json'})
        return session

    def _log_error(self, url: str, status_code: int, extra: str='', exc_info: int=0) -> None:
        timestamp = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')
        message = f'{timestamp} | URL: {url} | Status Code: {status_code}'
        message += f' | {extra}' if extra else ''
        api_logger.error(message, exc_info=exc_info)

    def _log_warning(self, url: str, status_code: int, extra: str='') -> None:
        timestamp = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')
        message = f'{timestamp} | URL: {url} | Status Code: {status_code}'
        message += f' | {extra}' if extra else ''
        api_logger.warning(message)

    def _request(self, url: str, params: dict=None, failure_message: str='') -> Response:
        try:
            response = self._session.get(url, params=params)
        except RequestException as e:
            self._log_error(url, 0, str(e), exc_info=1)
            raise RequestFailure(failure_message or str(e), url) from e
        return response

    def _handle_response(self, response: Response) -> tuple:
        url = response.url
        status_code = response.status_code
        try:
            data = response.json()
        except JSONDecodeError:
            data = None
            if response.ok:
                self._log_error(url, status_code, 'Undecodable Response', exc_info=1)
                raise RequestFailure('Received an unreadable response', url, status_code)
        if not response.ok:
            self._log_error(url, status_code)
        return data, url, status_code, response.ok

    def _call(self, url: str, params: dict=None, failure_message: str='') -> tuple:
        response = self._request(url, params, failure_message)
        return self._handle_response(response)

    def get_transaction_detail(self, tx_hash: str) -> dict:
        url = f'{self._base}/api/transaction_detail/{tx_hash}'
        failure_message = 'Failed to fetch transaction details'
        try:
            data, url, status_code, ok = self._call(url, failure_message=failure_message)
        except FetchFailure as e:
            raise FetchFailure(failure_message, e.url, e.status_code) from e
        if status_code == 404:
            raise NotFound('Transaction not found', url, status_code)
        if not ok:
            raise FetchFailure(failure_message, url, status_code)
        if not data:
            self._log_warning(url, status_code, 'Unexpected Null Response')
            raise EmptyPayload('No transaction data received', url, status_code)
        return data

    def get_ethereum_data(self) -> dict:
        url = f'{self._base}/api/ethereum_data'
        failure_message = 'Failed to fetch Ethereum data'
        data, url, status_code, ok = self._call(url, failure_message=failure_message)
        if not ok:
            raise FetchFailure(failure_message, url, status_code)
        if not isinstance(data, dict):
            self._log_warning(url, status_code, 'Unexpected Null Response')
            raise EmptyPayload('No Ethereum data received', url, status_code)
        return data

    def get_state_changes(self, tx_hash: str) -> list:
        url = f'{self._base}/api/transaction/{tx_hash}/state'
        data, url, status_code, ok = self._call(
            url, failure_message='Failed to fetch state changes. Please try again later.'
        )
        if not ok:
            detail = data.get('detail') if isinstance(data, dict) else None
            raise FetchFailure(str(detail or 'Failed to fetch state changes'), url, status_code)
        if not isinstance(data, list):
            self._log_warning(url, status_code, 'Expected a list of state changes')
            return []
        return data

    def get_address_transactions(self, address: str) -> list:
        url = f'{self._history_base}/api/transactions'
        try:
            data, url, status_code, ok = self._call(
                url, params={'address': address},
                failure_message='Failed to fetch transactions from API.'
            )
        except RequestFailure as e:
            raise RequestFailure('Failed to fetch transactions from API.', e.url, e.status_code) from e
        transactions = data.get('transactions') if isinstance(data, dict) else None
        if not ok or not isinstance(transactions, list):
            message = data.get('message') if isinstance(data, dict) else None
            raise FetchFailure(str(message or 'Failed to fetch data from API.'), url, status_code)
        return transactions


class Formatter():
    risk_thresholds = (
        (80, 'High'),
        (50, 'Medium'),
    )

    def address(self, value: str) -> str:
        if not value:
            return 'Invalid Address'
        value = str(value)
        return f'{value[:6]}...{value[-4:]}'

    def relative_time(self, timestamp, now: float=None) -> str:
        seconds_since = parse_decimal(timestamp)
        if not math.isfinite(seconds_since):
            return 'Unknown'
        now = time.time() if now is None else now
        elapsed = now - seconds_since
        if elapsed < 0:
            return 'Just now'

        seconds = math.floor(elapsed)
        if seconds < 60:
            return f'{seconds} secs ago'
        minutes = seconds // 60
        if minutes < 60:
            return f'{minutes} mins ago'
        hours = minutes // 60
        if hours < 24:
            return f'{hours} hrs ago'
        return f'{hours // 24} days ago'

    def risk_level(self, risk_score) -> str:
        # NaN fails every comparison and lands on Low
        score = parse_decimal(risk_score)
        for threshold, level in self.risk_thresholds:
            if score >= threshold:
                return level
        return 'Low'

    def amount(self, value, places: int=6) -> str:
        number = parse_decimal(value)
        if math.isnan(number):
            number = 0.0
        return f'{number:.{places}f}'
