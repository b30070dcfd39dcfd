import math
from dataclasses import dataclass
from typing import Optional

from main.utils import Formatter, parse_decimal

# Nothing here is stored; these wrap the backend's JSON records for the templates.

formatter = Formatter()


def _number(value, default: float=0.0) -> float:
    number = parse_decimal(value)
    return default if math.isnan(number) else number


def _integer(value) -> int:
    number = _number(value)
    return int(number) if math.isfinite(number) else 0


def _text(value) -> str:
    return '' if value is None else str(value)


@dataclass
class GasMetrics:
    gas_used: int = 0
    gas_limit: int = 0
    gas_price: str = ''
    avg_gas_price: float = 0.0
    gas_efficiency: str = ''
    price_difference: str = ''
    risk_score: str = ''

    @classmethod
    def from_api(cls, data: dict) -> 'GasMetrics':
        return cls(
            gas_used=_integer(data.get('gasUsed')),
            gas_limit=_integer(data.get('gasLimit')),
            gas_price=_text(data.get('gasPrice')),
            avg_gas_price=_number(data.get('avgGasPrice')),
            gas_efficiency=_text(data.get('gasEfficiency')),
            price_difference=_text(data.get('priceDifference')),
            risk_score=_text(data.get('riskScore')),
        )

    @property
    def risk_level(self) -> str:
        return formatter.risk_level(self.risk_score)


@dataclass
class Transaction:
    hash: str
    status: str = ''
    block: int = 0
    timestamp: str = ''
    sender: str = ''
    receiver: str = ''
    value: str = ''
    fee: str = ''
    gas_used: str = ''
    gas_price: str = ''
    gas_metrics: Optional[GasMetrics] = None

    @classmethod
    def from_api(cls, data: dict) -> 'Transaction':
        metrics = data.get('Gas_Metrics')
        return cls(
            hash=_text(data.get('Transaction Hash')),
            status=_text(data.get('Status')),
            block=_integer(data.get('Block')),
            timestamp=_text(data.get('Timestamp')),
            sender=_text(data.get('From')),
            receiver=_text(data.get('Interacted With (To)')),
            value=_text(data.get('Value')),
            fee=_text(data.get('Transaction Fee')),
            gas_used=_text(data.get('Gas Used')),
            gas_price=_text(data.get('Gas Price')),
            gas_metrics=GasMetrics.from_api(metrics) if isinstance(metrics, dict) else None,
        )

    @property
    def gas_risk(self) -> str:
        if self.gas_metrics is None:
            return 'Low'
        return self.gas_metrics.risk_level


@dataclass
class EthereumData:
    price: float = 0.0
    change: float = 0.0
    gas_price: float = 0.0

    @classmethod
    def from_api(cls, data: dict) -> 'EthereumData':
        # each field falls back to zero on its own
        return cls(
            price=_number(data.get('jcoPrice')),
            change=_number(data.get('jcoChange')),
            gas_price=_number(data.get('gasPrice')),
        )

    @property
    def change_direction(self) -> str:
        return 'up' if self.change >= 0 else 'down'


@dataclass
class StateChange:
    address: str = ''
    before: str = ''
    after: str = ''
    difference: str = ''

    @classmethod
    def from_api(cls, data: dict) -> 'StateChange':
        return cls(**{name: _text(data.get(name)) for name in ('address', 'before', 'after', 'difference')})

    @classmethod
    def from_api_list(cls, items: list) -> 'list[StateChange]':
        return [cls.from_api(item) for item in items if isinstance(item, dict)]

