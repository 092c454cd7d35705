from __future__ import annotations

from enum import Enum

from .errors import WriterStateError


class WriterState(Enum):
    INITIAL = "initial"
    DOCUMENT_OPENED = "document_opened"
    GRAPH_OPENED = "graph_opened"
    GRAPH_CLOSED = "graph_closed"
    DOCUMENT_CLOSED = "document_closed"
    CLOSED = "closed"


# CLOSED is reachable from every other state.
TRANSITIONS: dict[WriterState, frozenset[WriterState]] = {
    WriterState.INITIAL: frozenset({WriterState.DOCUMENT_OPENED, WriterState.CLOSED}),
    WriterState.DOCUMENT_OPENED: frozenset(
        {WriterState.GRAPH_OPENED, WriterState.DOCUMENT_CLOSED, WriterState.CLOSED}
    ),
    WriterState.GRAPH_OPENED: frozenset({WriterState.GRAPH_CLOSED, WriterState.CLOSED}),
    WriterState.GRAPH_CLOSED: frozenset(
        {WriterState.DOCUMENT_CLOSED, WriterState.CLOSED}
    ),
    WriterState.DOCUMENT_CLOSED: frozenset({WriterState.CLOSED}),
    WriterState.CLOSED: frozenset(),
}


def is_transition_allowed(current: WriterState, target: WriterState) -> bool:
    return target in TRANSITIONS[current]


class StateMachine:
    """Current writer state, changed only through the transition table."""

    def __init__(self) -> None:
        self._state = WriterState.INITIAL

    @property
    def state(self) -> WriterState:
        return self._state

    def transition(self, target: WriterState) -> None:
        if not is_transition_allowed(self._state, target):
            raise WriterStateError(
                f"Transition from state {self._state.name} to {target.name} is forbidden"
            )
        self._state = target

    def expect(self, expected: WriterState) -> None:
        if self._state is not expected:
            raise WriterStateError(
                "The writer is in an invalid state "
                f"(actual: {self._state.name}, expected: {expected.name})"
            )

    def expect_not(self, forbidden: WriterState) -> None:
        if self._state is forbidden:
            raise WriterStateError(f"The writer is already in state {forbidden.name}")
