import math
from dataclasses import dataclass
from typing import Optional

from django.core.paginator import Page

from main.utils import parse_decimal


@dataclass
class HistoryTransaction:
    from_address: str
    to_address: str
    amount: float
    timestamp: Optional[int]
    hash: Optional[str] = None
    block: Optional[str] = None
    fee: Optional[str] = None
    method: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict) -> 'HistoryTransaction':
        amount = parse_decimal(data.get('amount'))
        timestamp = parse_decimal(data.get('timestamp'))
        return cls(
            from_address=data.get('from') or '',
            to_address=data.get('to') or '',
            amount=0.0 if math.isnan(amount) else amount,
            timestamp=int(timestamp) if math.isfinite(timestamp) else None,
            hash=data.get('hash'),
            block=data.get('block'),
            fee=data.get('fee'),
            method=data.get('method'),
        )


@dataclass
class Pager:
    """Previous/next bounds for a page of the history table."""
    current: int
    total: int

    @classmethod
    def for_page(cls, page: Page) -> 'Pager':
        return cls(current=page.number, total=page.paginator.num_pages)

    @property
    def has_previous(self) -> bool:
        return self.current > 1

    @property
    def has_next(self) -> bool:
        return self.current < self.total

    @property
    def previous(self) -> int:
        return max(self.current - 1, 1)

    @property
    def next(self) -> int:
        return min(self.current + 1, self.total)
