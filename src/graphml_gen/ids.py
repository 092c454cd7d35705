from __future__ import annotations

from typing import Optional

from .constants import EDGE_ID_PREFIX, NODE_ID_PREFIX, SCOPE_SEPARATOR
from .errors import WriterStateError


class IdAllocator:
    """Allocate node, group and edge ids for one document.

    Node ids issued inside a group are prefixed with the id of the innermost
    open group: "n0", then "n0::n1" inside group n0, then "n0::n1::n2" inside
    group n0::n1. One counter is shared by all depths, so no id repeats.
    """

    def __init__(self) -> None:
        self._node_seq = 0
        self._edge_seq = 0
        self._scopes: list[str] = []
        self._known: set[str] = set()

    @property
    def depth(self) -> int:
        return len(self._scopes)

    @property
    def current_scope(self) -> Optional[str]:
        return self._scopes[-1] if self._scopes else None

    @property
    def scopes(self) -> tuple[str, ...]:
        return tuple(self._scopes)

    def next_node_id(self) -> str:
        node_id = f"{NODE_ID_PREFIX}{self._node_seq}"
        self._node_seq += 1
        if self._scopes:
            return f"{self._scopes[-1]}{SCOPE_SEPARATOR}{node_id}"
        return node_id

    def next_edge_id(self) -> str:
        edge_id = f"{EDGE_ID_PREFIX}{self._edge_seq}"
        self._edge_seq += 1
        return edge_id

    def push(self, group_id: str) -> None:
        self._scopes.append(group_id)

    def pop(self) -> str:
        if not self._scopes:
            raise WriterStateError("The writer isn't inside a group")
        return self._scopes.pop()

    def register(self, node_id: str) -> None:
        self._known.add(node_id)

    def is_known(self, node_id: str) -> bool:
        return node_id in self._known
