"""
Fetch state for a single page concern.

A concern (the transaction record, the state-change list, ...) moves through
started/succeeded/failed events. ``transition`` is the only place that builds
a new state, and ``FetchState.view`` is the only place that decides which of
the four page states is shown.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional


class ViewState(Enum):
    LOADING = 'loading'
    ERROR = 'error'
    NOT_FOUND = 'not_found'
    LOADED = 'loaded'


class Event(Enum):
    STARTED = 'started'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


@dataclass(frozen=True)
class FetchState:
    loading: bool = True
    error: Optional[str] = None
    data: Any = None
    generation: int = 0

    @property
    def view(self) -> ViewState:
        # loading wins over a leftover error, error wins over leftover data
        if self.loading:
            return ViewState.LOADING
        if self.error:
            return ViewState.ERROR
        if self.data is None:
            return ViewState.NOT_FOUND
        return ViewState.LOADED


def transition(state: FetchState, event: Event, generation: int=None,
               data: Any=None, error: str=None) -> FetchState:
    """Apply ``event`` to ``state``.

    STARTED issues a new generation; read it back from the returned state and
    pass it with the matching SUCCEEDED/FAILED event. Completions carrying any
    other generation are stale and leave the state untouched.
    """
    if event is Event.STARTED:
        return replace(state, loading=True, error=None, generation=state.generation + 1)

    if generation != state.generation:
        return state

    if event is Event.SUCCEEDED:
        return replace(state, loading=False, error=None, data=data)
    if event is Event.FAILED:
        return replace(state, loading=False, error=error or 'An error occurred')
    raise ValueError(f'Unknown fetch event: {event}')
