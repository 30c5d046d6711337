# core/state.py
"""
In-memory UI state and the only code allowed to change it.

Pipelines never write to the state directly: they dispatch events, and the
store applies them one at a time through ``reduce``. Itinerary events carry a
ticket so that a slow, superseded request cannot overwrite the result of a
newer submission.
"""

import itertools
import threading
from collections import deque
from dataclasses import dataclass, replace
from typing import Deque, Optional, Tuple

from core.models import ChatMessage, Itinerary, Speaker


@dataclass(frozen=True)
class PlannerState:
    itinerary: Optional[Itinerary] = None
    planning: bool = False
    planning_ticket: int = 0
    transcript: Tuple[ChatMessage, ...] = ()
    chats_in_flight: int = 0

    @property
    def typing(self) -> bool:
        return self.chats_in_flight > 0


# ──────────────────────────────────────────────────────────────────────────────
# Events
# ──────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class PlanningStarted:
    ticket: int


@dataclass(frozen=True)
class ItineraryCommitted:
    ticket: int
    itinerary: Itinerary


@dataclass(frozen=True)
class PlanningSettled:
    ticket: int


@dataclass(frozen=True)
class ChatSent:
    text: str


@dataclass(frozen=True)
class ChatReplied:
    text: str


@dataclass(frozen=True)
class ChatSettled:
    pass


def reduce(state: PlannerState, event) -> PlannerState:
    if isinstance(event, PlanningStarted):
        if event.ticket < state.planning_ticket:
            return state
        return replace(state, itinerary=None, planning=True, planning_ticket=event.ticket)

    if isinstance(event, ItineraryCommitted):
        if event.ticket != state.planning_ticket:
            return state  # superseded
        return replace(state, itinerary=event.itinerary)

    if isinstance(event, PlanningSettled):
        if event.ticket != state.planning_ticket:
            return state
        return replace(state, planning=False)

    if isinstance(event, ChatSent):
        return replace(
            state,
            transcript=state.transcript + (ChatMessage(Speaker.USER, event.text),),
            chats_in_flight=state.chats_in_flight + 1,
        )

    if isinstance(event, ChatReplied):
        return replace(
            state,
            transcript=state.transcript + (ChatMessage(Speaker.ASSISTANT, event.text),),
        )

    if isinstance(event, ChatSettled):
        return replace(state, chats_in_flight=max(0, state.chats_in_flight - 1))

    raise TypeError(f"Unknown event: {event!r}")


class Store:
    """Serializes every state change through a single queue."""

    def __init__(self, state: Optional[PlannerState] = None):
        self._state = state or PlannerState()
        self._queue: Deque = deque()
        self._drain_lock = threading.Lock()
        self._ticket_lock = threading.Lock()
        self._tickets = itertools.count(1)

    @property
    def state(self) -> PlannerState:
        return self._state

    def issue_ticket(self) -> int:
        with self._ticket_lock:
            return next(self._tickets)

    def dispatch(self, event) -> PlannerState:
        self._queue.append(event)
        # Whoever holds the lock drains the queue; everyone else just enqueues.
        while self._queue:
            if not self._drain_lock.acquire(blocking=False):
                break
            try:
                while self._queue:
                    self._state = reduce(self._state, self._queue.popleft())
            finally:
                self._drain_lock.release()
        return self._state
