"""Processing status state machine shown to the user during a batch."""
from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from snapsheet.core.models import ProcessingState, ProcessingStatus

logger = logging.getLogger(__name__)

StatusListener = Callable[[ProcessingState], None]


class StatusTracker:
    """Holds the current ``ProcessingState`` and notifies listeners on change.

    Terminal states schedule a return to IDLE after ``reset_delay`` seconds.
    Everything runs on one thread, so the reset is stored as a deadline and
    applied the next time the state is read.
    """

    def __init__(self, reset_delay: float = 4.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.reset_delay = reset_delay
        self._clock = clock
        self._state = ProcessingState()
        self._reset_at: Optional[float] = None
        self._listeners: List[StatusListener] = []

    def subscribe(self, listener: StatusListener) -> None:
        self._listeners.append(listener)

    @property
    def state(self) -> ProcessingState:
        if self._reset_at is not None and self._clock() >= self._reset_at:
            self._transition(ProcessingState())
        return self._state

    @property
    def reset_pending(self) -> bool:
        return self._reset_at is not None

    def processing(self, message: str) -> None:
        self._transition(ProcessingState(ProcessingStatus.PROCESSING, message))

    def finish(self, status: ProcessingStatus, message: str) -> None:
        """Enter a terminal state and schedule the return to IDLE."""

        if status not in (ProcessingStatus.SUCCESS, ProcessingStatus.ERROR):
            raise ValueError(f"{status} is not a terminal status")
        self._transition(ProcessingState(status, message))
        self._reset_at = self._clock() + self.reset_delay

    def reset(self) -> None:
        self._transition(ProcessingState())

    def _transition(self, state: ProcessingState) -> None:
        self._reset_at = None
        self._state = state
        logger.debug("Status -> %s: %s", state.status.value, state.message or "")
        for listener in self._listeners:
            listener(state)
