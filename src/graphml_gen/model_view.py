from __future__ import annotations

from typing import Any, Iterator, Optional

from .graph import DirectedGraph, Edge, Node
from .styles import EdgeStyle, GroupStyles, NodeStyle


def iter_node_items(items: Any) -> Iterator[dict[str, Any]]:
    """Yield node mappings depth first, children right after their parent."""
    for item in items or []:
        if not isinstance(item, dict):
            continue
        yield item
        yield from iter_node_items(item.get("children"))


def build_node_index(model: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Index node mappings by ID, nested children included."""
    index: dict[str, dict[str, Any]] = {}
    for item in iter_node_items(model.get("nodes")):
        node_id = item.get("id")
        if isinstance(node_id, str) and node_id:
            index[node_id] = item

    return index


class ModelRenderer:
    """Renderer for graphs built by `build_graph()`.

    Node data is the model id; edge data is the edge mapping. Styles are the
    model defaults (`styles` section) updated with each element's `style`.
    """

    def __init__(self, model: dict[str, Any]) -> None:
        styles = model.get("styles") or {}
        self._items = build_node_index(model)

        self._node_style = NodeStyle()
        self._node_style.update(**(styles.get("node") or {}))

        self._edge_style = EdgeStyle()
        self._edge_style.update(**(styles.get("edge") or {}))

        self._group_styles = GroupStyles()
        self._group_styles.update(**(styles.get("group") or {}))
        open_style = self._group_styles.open_style
        open_style.update(**(styles.get("group_open") or {}))
        self._group_styles.open_style = open_style
        closed_style = self._group_styles.closed_style
        closed_style.update(**(styles.get("group_closed") or {}))
        self._group_styles.closed_style = closed_style

    def _item(self, node: Node) -> dict[str, Any]:
        return self._items.get(node.data, {})

    def node_label(self, node: Node) -> str:
        label = self._item(node).get("label")
        return str(label) if label is not None else str(node.data)

    def node_style(self, node: Node) -> NodeStyle:
        style = self._node_style.copy()
        style.update(**(self._item(node).get("style") or {}))
        return style

    def edge_style(self, edge: Edge) -> EdgeStyle:
        style = self._edge_style.copy()
        if isinstance(edge.data, dict):
            style.update(**(edge.data.get("style") or {}))
        return style

    def group_styles(self, node: Node) -> GroupStyles:
        styles = self._group_styles.copy()
        styles.update(**(self._item(node).get("style") or {}))
        return styles

    def is_group_open(self, node: Node) -> bool:
        return bool(self._item(node).get("open", True))


def build_graph(model: dict[str, Any]) -> tuple[DirectedGraph, ModelRenderer]:
    """Build the in-memory graph of a (validated) model and its renderer."""
    graph = DirectedGraph()
    by_id: dict[str, Node] = {}

    def add(items: Any, parent: Optional[Node]) -> None:
        for item in items or []:
            if not isinstance(item, dict):
                continue
            node = graph.add_node(item["id"])
            by_id[item["id"]] = node
            if parent is not None:
                parent.add_child(node)
            add(item.get("children"), node)

    add(model.get("nodes"), None)

    for edge in model.get("edges", []) or []:
        if not isinstance(edge, dict):
            continue
        ends = []
        for end in ("from", "to"):
            node = by_id.get(edge.get(end))
            if node is None:
                raise ValueError(f"edge.{end} references unknown node id {edge.get(end)!r}")
            ends.append(node)
        graph.add_edge(ends[0], ends[1], data=edge)

    return graph, ModelRenderer(model)
