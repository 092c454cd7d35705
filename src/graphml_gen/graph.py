from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional, Protocol

from .styles import EdgeStyle, GroupStyles, NodeStyle
from .writer import GraphMLWriter, Sink


class Node:
    """A node of a DirectedGraph. A node with children is rendered as a group."""

    def __init__(self, graph: DirectedGraph, node_id: str, data: Any) -> None:
        self._graph = graph
        self._id = node_id
        self._data = data
        self._parent: Optional[Node] = None
        # Insertion ordered; values unused.
        self._children: dict[str, Node] = {}

    def __repr__(self) -> str:
        return f"Node(id={self._id!r}, data={self._data!r})"

    @property
    def id(self) -> str:
        return self._id

    @property
    def data(self) -> Any:
        return self._data

    @property
    def graph(self) -> DirectedGraph:
        return self._graph

    @property
    def parent(self) -> Optional[Node]:
        return self._parent

    @property
    def children(self) -> list[Node]:
        return list(self._children.values())

    @property
    def is_group(self) -> bool:
        return bool(self._children)

    @property
    def label(self) -> str:
        return str(self._data) if self._data is not None else self._id

    def ancestors(self) -> Iterator[Node]:
        node = self._parent
        while node is not None:
            yield node
            node = node._parent

    def set_parent(self, parent: Optional[Node]) -> None:
        """Move this node under `parent`, or back to the root when None."""
        if parent is not None:
            if parent._graph is not self._graph:
                raise ValueError(f"Node {parent.id!r} doesn't belong to the same graph")
            if parent is self or any(a is self for a in parent.ancestors()):
                raise ValueError(
                    f"Node {self.id!r} can't be moved under {parent.id!r}: it would create a cycle"
                )

        if self._parent is not None:
            del self._parent._children[self._id]
        else:
            del self._graph._roots[self._id]

        self._parent = parent

        if parent is not None:
            parent._children[self._id] = self
        else:
            self._graph._roots[self._id] = self

    def add_child(self, node: Node) -> None:
        if node is None:
            raise TypeError("The given node is None")
        node.set_parent(self)

    def detach(self) -> None:
        """Move this node to the root of the graph (it stays in the graph)."""
        self.set_parent(None)


@dataclass(frozen=True)
class Edge:
    id: str
    source: Node
    target: Node
    data: Any = None


class Renderer(Protocol):
    """Decides how each element of a DirectedGraph is drawn."""

    def node_label(self, node: Node) -> str: ...

    def node_style(self, node: Node) -> NodeStyle: ...

    def edge_style(self, edge: Edge) -> EdgeStyle: ...

    def group_styles(self, node: Node) -> GroupStyles: ...

    def is_group_open(self, node: Node) -> bool: ...


class DefaultRenderer:
    """Default styles everywhere; groups are rendered closed."""

    def node_label(self, node: Node) -> str:
        return node.label

    def node_style(self, node: Node) -> NodeStyle:
        return NodeStyle()

    def edge_style(self, edge: Edge) -> EdgeStyle:
        return EdgeStyle()

    def group_styles(self, node: Node) -> GroupStyles:
        return GroupStyles()

    def is_group_open(self, node: Node) -> bool:
        return False


class DirectedGraph:
    """In-memory directed graph whose nodes can nest into groups.

    `to_graphml()` flattens it into GraphMLWriter calls: a depth-first walk
    writes each group around its children, then every edge is written.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, Node] = {}
        self._roots: dict[str, Node] = {}
        self._edges: dict[str, Edge] = {}
        self._node_seq = 0
        self._edge_seq = 0

    # --- Nodes --- #

    def add_node(self, data: Any) -> Node:
        if data is None:
            raise TypeError("The given node data is None")
        self._node_seq += 1
        node = Node(self, f"n{self._node_seq}", data)
        self._nodes[node.id] = node
        self._roots[node.id] = node
        return node

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    @property
    def roots(self) -> list[Node]:
        """Nodes without a parent, in insertion order."""
        return list(self._roots.values())

    def node_count(self) -> int:
        return len(self._nodes)

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def find_node(self, data: Any) -> Optional[Node]:
        for node in self._nodes.values():
            if node.data is data or node.data == data:
                return node
        return None

    def has_node(self, node: Node) -> bool:
        return self._nodes.get(node.id) is node

    # --- Edges --- #

    def add_edge(self, source: Node, target: Node, data: Any = None) -> Edge:
        if source is None or target is None:
            raise TypeError("The given source or target node is None")
        if not self.has_node(source):
            raise ValueError(f"The given source node {source.id!r} doesn't belong to this graph")
        if not self.has_node(target):
            raise ValueError(f"The given target node {target.id!r} doesn't belong to this graph")

        self._edge_seq += 1
        edge = Edge(f"e{self._edge_seq}", source, target, data)
        self._edges[edge.id] = edge
        return edge

    @property
    def edges(self) -> list[Edge]:
        return list(self._edges.values())

    def edge_count(self) -> int:
        return len(self._edges)

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        return self._edges.get(edge_id)

    def find_edge(self, data: Any) -> Optional[Edge]:
        for edge in self._edges.values():
            if edge.data is data or (data is not None and edge.data == data):
                return edge
        return None

    # --- GraphML --- #

    def _write_node(
        self,
        writer: GraphMLWriter,
        node: Node,
        renderer: Optional[Renderer],
        written: dict[str, str],
    ) -> None:
        label = renderer.node_label(node) if renderer is not None else node.label

        if not node.is_group:
            if renderer is not None:
                writer.node_style = renderer.node_style(node)
            written[node.id] = writer.node(label)
            return

        # Groups are open unless a renderer says otherwise.
        open_ = True
        if renderer is not None:
            writer.group_styles = renderer.group_styles(node)
            open_ = renderer.is_group_open(node)

        written[node.id] = writer.group(label, open_)
        for child in node.children:
            self._write_node(writer, child, renderer, written)
        writer.close_group()

    def write_to(self, writer: GraphMLWriter, renderer: Optional[Renderer] = None) -> dict[str, str]:
        """Write the graph with an opened writer; return graph id -> writer id."""
        written: dict[str, str] = {}

        writer.open_graph()
        for node in self.roots:
            self._write_node(writer, node, renderer, written)

        for edge in self._edges.values():
            if renderer is not None:
                writer.edge_style = renderer.edge_style(edge)
            writer.edge(written[edge.source.id], written[edge.target.id])

        writer.close_graph()
        return written

    def to_graphml(self, sink: Sink, renderer: Optional[Renderer] = None) -> dict[str, str]:
        with GraphMLWriter(sink) as writer:
            return self.write_to(writer, renderer)
