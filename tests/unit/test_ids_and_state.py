import itertools

import pytest

from graphml_gen.errors import GraphMLError, WriterStateError
from graphml_gen.ids import IdAllocator
from graphml_gen.state import StateMachine, WriterState, is_transition_allowed


ALLOWED = {
    (WriterState.INITIAL, WriterState.DOCUMENT_OPENED),
    (WriterState.DOCUMENT_OPENED, WriterState.GRAPH_OPENED),
    (WriterState.DOCUMENT_OPENED, WriterState.DOCUMENT_CLOSED),
    (WriterState.GRAPH_OPENED, WriterState.GRAPH_CLOSED),
    (WriterState.GRAPH_CLOSED, WriterState.DOCUMENT_CLOSED),
    (WriterState.INITIAL, WriterState.CLOSED),
    (WriterState.DOCUMENT_OPENED, WriterState.CLOSED),
    (WriterState.GRAPH_OPENED, WriterState.CLOSED),
    (WriterState.GRAPH_CLOSED, WriterState.CLOSED),
    (WriterState.DOCUMENT_CLOSED, WriterState.CLOSED),
}


def machine_in(state: WriterState) -> StateMachine:
    """Drive a fresh machine to `state` through allowed transitions only."""
    path = {
        WriterState.INITIAL: [],
        WriterState.DOCUMENT_OPENED: [WriterState.DOCUMENT_OPENED],
        WriterState.GRAPH_OPENED: [WriterState.DOCUMENT_OPENED, WriterState.GRAPH_OPENED],
        WriterState.GRAPH_CLOSED: [
            WriterState.DOCUMENT_OPENED,
            WriterState.GRAPH_OPENED,
            WriterState.GRAPH_CLOSED,
        ],
        WriterState.DOCUMENT_CLOSED: [
            WriterState.DOCUMENT_OPENED,
            WriterState.GRAPH_OPENED,
            WriterState.GRAPH_CLOSED,
            WriterState.DOCUMENT_CLOSED,
        ],
        WriterState.CLOSED: [WriterState.CLOSED],
    }[state]
    machine = StateMachine()
    for target in path:
        machine.transition(target)
    return machine


@pytest.mark.parametrize(
    "current,target", list(itertools.product(list(WriterState), list(WriterState)))
)
def test_transition_table(current, target):
    assert is_transition_allowed(current, target) == ((current, target) in ALLOWED)

    machine = machine_in(current)
    if (current, target) in ALLOWED:
        machine.transition(target)
        assert machine.state is target
    else:
        with pytest.raises(WriterStateError) as excinfo:
            machine.transition(target)
        # Rejected transitions name both states and change nothing.
        assert current.name in str(excinfo.value)
        assert target.name in str(excinfo.value)
        assert machine.state is current


def test_expect_reports_actual_and_expected_state():
    machine = StateMachine()
    with pytest.raises(WriterStateError, match="actual: INITIAL, expected: GRAPH_OPENED"):
        machine.expect(WriterState.GRAPH_OPENED)


def test_state_error_is_a_graphml_error():
    assert issubclass(WriterStateError, GraphMLError)
    assert issubclass(WriterStateError, RuntimeError)


def test_top_level_ids_are_flat():
    ids = IdAllocator()
    assert ids.next_node_id() == "n0"
    assert ids.next_node_id() == "n1"
    assert ids.next_edge_id() == "e0"
    assert ids.next_edge_id() == "e1"


def test_nested_ids_are_prefixed_by_the_open_groups():
    ids = IdAllocator()
    outer = ids.next_node_id()
    ids.push(outer)
    inner = ids.next_node_id()
    ids.push(inner)
    leaf = ids.next_node_id()

    assert outer == "n0"
    assert inner == "n0::n1"
    assert leaf == "n0::n1::n2"
    assert ids.depth == 2
    assert ids.current_scope == inner

    assert ids.pop() == inner
    assert ids.pop() == outer
    assert ids.depth == 0
    assert ids.current_scope is None
    # The counter is shared by every depth.
    assert ids.next_node_id() == "n3"


def test_node_and_edge_counters_are_independent():
    ids = IdAllocator()
    ids.next_edge_id()
    ids.next_edge_id()
    assert ids.next_node_id() == "n0"
    assert ids.next_edge_id() == "e2"


def test_pop_outside_a_group_fails():
    with pytest.raises(WriterStateError):
        IdAllocator().pop()


def test_known_ids():
    ids = IdAllocator()
    node_id = ids.next_node_id()
    assert not ids.is_known(node_id)
    ids.register(node_id)
    assert ids.is_known(node_id)
    assert not ids.is_known("n42")
