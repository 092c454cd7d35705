from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, Iterator, Optional, Union

from lxml import etree

from .constants import (
    EDGE_DEFAULT,
    GROUP_GRAPH_SUFFIX,
    ID_EDGE_GRAPHICS,
    ID_NODE_DESCRIPTION,
    ID_NODE_GRAPHICS,
    ID_NODE_URL,
    KEY_DECLARATIONS,
    NS_GRAPHML,
    NS_XSI,
    NS_Y,
    NSMAP,
    ROOT_GRAPH_ID,
    SCHEMA_LOCATION,
)
from .errors import GraphMLError, WriterStateError
from .graphml_fmt import gml_bool, gml_float, gml_int, gml_number, gml_text
from .ids import IdAllocator
from .state import StateMachine, WriterState
from .styles import (
    EdgeStyle,
    GeneralStyle,
    GroupStyle,
    GroupStyles,
    LabelStyle,
    NodeStyle,
    ShapeStyle,
)

if TYPE_CHECKING:
    from .graph import DirectedGraph, Renderer

logger = logging.getLogger(__name__)

Sink = Union[str, Path, IO[bytes]]

# Fragments are serialized standalone by lxml, so each one carries these
# declarations again. yEd reads them like the single root declaration.
_FRAGMENT_NSMAP = {None: NS_GRAPHML, "y": NS_Y}


def _g(tag: str) -> str:
    return f"{{{NS_GRAPHML}}}{tag}"


def _y(tag: str) -> str:
    return f"{{{NS_Y}}}{tag}"


# --- Fragment builders --- #


def _append_general(parent: Any, style: GeneralStyle, x: float, y: float) -> None:
    # The x & y of the geometry are recomputed when the graph is laid out in yEd.
    etree.SubElement(
        parent,
        _y("Geometry"),
        {
            "height": gml_float(style.height),
            "width": gml_float(style.width),
            "x": gml_float(x),
            "y": gml_float(y),
        },
    )

    fill = etree.SubElement(parent, _y("Fill"))
    if style.fill_color is not None:
        fill.set("color", style.fill_color)
    if style.fill_color2 is not None:
        fill.set("color2", style.fill_color2)
    fill.set("transparent", gml_bool(style.transparent_fill))

    etree.SubElement(
        parent,
        _y("BorderStyle"),
        {
            "color": style.border_color,
            "type": style.border_type.value,
            "width": gml_float(style.border_width),
        },
    )


def _append_label(parent: Any, style: LabelStyle, text: str) -> None:
    label = etree.SubElement(parent, _y("NodeLabel"))
    # "alignement" is the attribute name yEd expects.
    label.set("alignement", style.text_alignment.value)
    label.set("autoSizePolicy", style.size_policy.value)
    label.set("fontFamily", style.font_family)
    label.set("fontSize", str(style.font_size))
    label.set("fontStyle", style.font_style.value)
    label.set("modelName", style.placement.value)
    label.set("modelPosition", style.position.value)

    if style.border_distance != 0.0:
        label.set("borderDistance", gml_float(style.border_distance))
    if style.rotation_angle != 0.0:
        label.set("rotationAngle", gml_float(style.rotation_angle))

    if style.background_color is not None:
        label.set("backgroundColor", style.background_color)
    else:
        label.set("hasBackgroundColor", "false")
    if style.line_color is not None:
        label.set("lineColor", style.line_color)
    else:
        label.set("hasLineColor", "false")

    if style.has_insets():
        label.set("bottomInset", str(style.bottom_inset))
        label.set("topInset", str(style.top_inset))
        label.set("leftInset", str(style.left_inset))
        label.set("rightInset", str(style.right_inset))

    label.set("textColor", style.text_color)
    label.set("visible", gml_bool(style.visible))
    if style.underlined_text:
        label.set("underlinedText", "true")

    label.text = gml_text(text)


def _append_shape(parent: Any, style: ShapeStyle) -> None:
    etree.SubElement(parent, _y("Shape"), {"type": style.shape.value})

    if style.has_shadow():
        etree.SubElement(
            parent,
            _y("DropShadow"),
            {
                "color": style.shadow_color,
                "offsetX": str(style.shadow_offset_x),
                "offsetY": str(style.shadow_offset_y),
            },
        )


def _append_node_style(
    parent: Any, style: Union[NodeStyle, GroupStyle], text: str, x: float, y: float
) -> None:
    _append_general(parent, style.general_style, x, y)
    _append_label(parent, style.label_style, text)
    _append_shape(parent, style.shape_style)


def _append_insets(parent: Any, tag: str, value: float) -> None:
    attrs: dict[str, str] = {}
    for side in ("bottom", "left", "right", "top"):
        attrs[side] = gml_int(value)
        attrs[f"{side}F"] = gml_float(value)
    etree.SubElement(parent, _y(tag), attrs)


def _append_group_realizer(
    parent: Any, style: GroupStyle, text: str, closed: bool, x: float, y: float
) -> None:
    realizer = etree.SubElement(parent, _y("GroupNode"))
    _append_node_style(realizer, style, text, x, y)
    etree.SubElement(
        realizer,
        _y("State"),
        {
            "closed": gml_bool(closed),
            "closedHeight": gml_float(style.closed_height),
            "closedWidth": gml_float(style.closed_width),
            "innerGraphDisplayEnabled": gml_bool(not closed),
        },
    )
    _append_insets(realizer, "Insets", style.insets)
    _append_insets(realizer, "BorderInsets", style.border_insets)


def _append_edge_style(parent: Any, style: EdgeStyle) -> None:
    # The path is left to yEd; only its end points offsets are written.
    etree.SubElement(
        parent,
        _y("Path"),
        {"sx": gml_float(0.0), "sy": gml_float(0.0), "tx": gml_float(0.0), "ty": gml_float(0.0)},
    )
    etree.SubElement(
        parent,
        _y("LineStyle"),
        {
            "color": style.color,
            "type": style.line_type.value,
            "width": gml_float(style.width),
        },
    )
    etree.SubElement(
        parent,
        _y("Arrows"),
        {"source": style.source_arrow.value, "target": style.target_arrow.value},
    )
    etree.SubElement(parent, _y("BendStyle"), {"smoothed": gml_bool(style.smoothed)})


def _require_label(label: Any) -> str:
    if label is None:
        raise TypeError("The given label is None")
    return str(label)


# --- Writer --- #


class GraphMLWriter:
    """Stream a yEd GraphML document made of nodes, nested groups and edges.

    Calls must follow the document structure::

        with GraphMLWriter("out.graphml") as writer:
            writer.open_graph()
            group_id = writer.group("A")
            x = writer.node("X")
            y = writer.node("Y")
            writer.close_group()
            writer.edge(x, y)
            writer.close_graph()

    Each fragment is written with the style current at the time of the call.
    Out of sequence calls raise WriterStateError, sink failures GraphMLError.
    The writer owns the sink: `close()` must be called exactly once.
    """

    def __init__(
        self,
        sink: Sink,
        *,
        encoding: str = "utf-8",
        pretty_print: bool = True,
        close_sink: bool = True,
    ) -> None:
        if sink is None:
            raise TypeError("The given sink is None")

        self._sink = str(sink) if isinstance(sink, Path) else sink
        self._encoding = encoding
        self._pretty_print = pretty_print
        self._close_sink = close_sink

        self._machine = StateMachine()
        self._ids = IdAllocator()

        self._node_style = NodeStyle()
        self._edge_style = EdgeStyle()
        self._group_styles = GroupStyles()

        self._xmlfile: Any = None
        self._out: Any = None
        # Element contexts still open, innermost last.
        self._open: list[Any] = []

    def __enter__(self) -> GraphMLWriter:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self.state is not WriterState.CLOSED:
            self.close()

    # --- Properties --- #

    @property
    def state(self) -> WriterState:
        return self._machine.state

    @property
    def depth(self) -> int:
        """Number of groups currently open (0 inside the root graph)."""
        return self._ids.depth

    @property
    def node_style(self) -> NodeStyle:
        return self._node_style.copy()

    @node_style.setter
    def node_style(self, style: NodeStyle) -> None:
        if style is None:
            raise TypeError("The given style is None")
        self._node_style.apply(style)

    @property
    def edge_style(self) -> EdgeStyle:
        return self._edge_style.copy()

    @edge_style.setter
    def edge_style(self, style: EdgeStyle) -> None:
        if style is None:
            raise TypeError("The given style is None")
        self._edge_style.apply(style)

    @property
    def group_styles(self) -> GroupStyles:
        return self._group_styles.copy()

    @group_styles.setter
    def group_styles(self, styles: GroupStyles) -> None:
        if styles is None:
            raise TypeError("The given styles are None")
        self._group_styles.apply(styles)

    @property
    def open_group_style(self) -> GroupStyle:
        return self._group_styles.open_style

    @open_group_style.setter
    def open_group_style(self, style: GroupStyle) -> None:
        self._group_styles.open_style = style

    @property
    def closed_group_style(self) -> GroupStyle:
        return self._group_styles.closed_style

    @closed_group_style.setter
    def closed_group_style(self, style: GroupStyle) -> None:
        self._group_styles.closed_style = style

    # --- Internal helpers --- #

    @contextmanager
    def _writing(self, what: str) -> Iterator[None]:
        try:
            yield
        except (OSError, ValueError, etree.LxmlError) as e:
            raise GraphMLError(f"Failed to write the {what}: {e}") from e

    def _write(self, element: Any) -> None:
        self._out.write(element, pretty_print=self._pretty_print)

    def _break_line(self) -> None:
        # Pretty printed fragments end with a newline but element starts do not.
        if self._pretty_print:
            self._out.write("\n")

    def _enter(self, tag: str, attrib: dict[str, str]) -> None:
        ctx = self._out.element(tag, attrib)
        ctx.__enter__()
        self._open.append(ctx)
        self._break_line()

    def _leave(self) -> None:
        self._open.pop().__exit__(None, None, None)
        if self._open:
            self._break_line()

    # --- Document --- #

    def open_document(self) -> None:
        """Write the XML declaration, the graphml root and the key prologue."""
        self._machine.expect(WriterState.INITIAL)

        with self._writing("document prologue"):
            self._xmlfile = etree.xmlfile(self._sink, encoding=self._encoding)
            self._out = self._xmlfile.__enter__()
            self._out.write_declaration()

            root = self._out.element(
                _g("graphml"),
                {f"{{{NS_XSI}}}schemaLocation": SCHEMA_LOCATION},
                nsmap=NSMAP,
            )
            root.__enter__()
            self._open.append(root)
            self._break_line()

            for key in KEY_DECLARATIONS:
                self._write(etree.Element(_g("key"), key, nsmap=_FRAGMENT_NSMAP))

        self._machine.transition(WriterState.DOCUMENT_OPENED)
        logger.debug("GraphML document opened")

    def close_document(self) -> None:
        """Close a document whose graph is closed, or which has no graph."""
        if self.state not in (WriterState.DOCUMENT_OPENED, WriterState.GRAPH_CLOSED):
            raise WriterStateError(
                f"The writer is in an invalid state (actual: {self.state.name}, "
                f"expected: {WriterState.DOCUMENT_OPENED.name} or "
                f"{WriterState.GRAPH_CLOSED.name})"
            )

        with self._writing("document end"):
            self._leave()  # </graphml>
            xmlfile, self._xmlfile = self._xmlfile, None
            xmlfile.__exit__(None, None, None)

        self._machine.transition(WriterState.DOCUMENT_CLOSED)
        logger.debug("GraphML document closed")

    # --- Graph --- #

    def open_graph(self) -> None:
        if self.state is WriterState.INITIAL:
            self.open_document()

        self._machine.expect(WriterState.DOCUMENT_OPENED)

        with self._writing("graph"):
            self._enter(_g("graph"), {"edgedefault": EDGE_DEFAULT, "id": ROOT_GRAPH_ID})

        self._machine.transition(WriterState.GRAPH_OPENED)

    graph = open_graph

    def close_graph(self) -> None:
        """Close the root graph, then the document."""
        self._machine.expect(WriterState.GRAPH_OPENED)
        if self._ids.depth:
            raise WriterStateError(
                f"The writer is inside {self._ids.depth} group(s). Close the group(s) first"
            )

        with self._writing("graph end"):
            self._leave()  # </graph>

        self._machine.transition(WriterState.GRAPH_CLOSED)
        self.close_document()

    # --- Node --- #

    def node(self, label: str, x: float = 0.0, y: float = 0.0) -> str:
        """Write a node styled with the current node style and return its id."""
        text = _require_label(label)
        x, y = gml_number(x, "x"), gml_number(y, "y")
        self._machine.expect(WriterState.GRAPH_OPENED)

        node_id = self._ids.next_node_id()

        node = etree.Element(_g("node"), {"id": node_id}, nsmap=_FRAGMENT_NSMAP)
        data = etree.SubElement(node, _g("data"), {"key": ID_NODE_GRAPHICS})
        shape_node = etree.SubElement(data, _y("ShapeNode"))
        _append_node_style(shape_node, self._node_style, text, x, y)

        with self._writing(f"node {node_id!r}"):
            self._write(node)

        self._ids.register(node_id)
        return node_id

    # --- Group --- #

    def group(self, label: str, open: bool = True, x: float = 0.0, y: float = 0.0) -> str:
        """Open a group node and its nested graph; return the group id.

        Both the open and the closed realizers are written; `open` selects
        the one yEd displays first. Close it with `close_group()`.
        """
        text = _require_label(label)
        x, y = gml_number(x, "x"), gml_number(y, "y")
        self._machine.expect(WriterState.GRAPH_OPENED)

        # A group is also a node.
        group_id = self._ids.next_node_id()

        url = etree.Element(_g("data"), {"key": ID_NODE_URL}, nsmap=_FRAGMENT_NSMAP)
        description = etree.Element(
            _g("data"), {"key": ID_NODE_DESCRIPTION}, nsmap=_FRAGMENT_NSMAP
        )
        graphics = etree.Element(_g("data"), {"key": ID_NODE_GRAPHICS}, nsmap=_FRAGMENT_NSMAP)
        proxy = etree.SubElement(graphics, _y("ProxyAutoBoundsNode"))
        realizers = etree.SubElement(proxy, _y("Realizers"), {"active": "0" if open else "1"})
        styles = self._group_styles
        _append_group_realizer(realizers, styles.open_style, text, False, x, y)
        _append_group_realizer(realizers, styles.closed_style, text, True, x, y)

        with self._writing(f"group {group_id!r}"):
            self._enter(
                _g("node"),
                {"id": group_id, "yfiles.foldertype": "group" if open else "folder"},
            )
            self._write(url)
            self._write(description)
            self._write(graphics)
            self._enter(
                _g("graph"),
                {"edgedefault": EDGE_DEFAULT, "id": group_id + GROUP_GRAPH_SUFFIX},
            )

        self._ids.push(group_id)
        self._ids.register(group_id)
        return group_id

    def close_group(self) -> None:
        self._machine.expect(WriterState.GRAPH_OPENED)
        if not self._ids.depth:
            raise WriterStateError("The writer isn't inside a group. Invalid method call")

        with self._writing("group end"):
            self._leave()  # </graph>
            self._leave()  # </node>

        self._ids.pop()

    # --- Edge --- #

    def edge(self, source_id: str, target_id: str) -> str:
        """Write an edge styled with the current edge style and return its id."""
        if not self._ids.is_known(source_id):
            raise ValueError(f"The (source) node with given id {source_id!r} doesn't exist")
        if not self._ids.is_known(target_id):
            raise ValueError(f"The (target) node with given id {target_id!r} doesn't exist")
        self._machine.expect(WriterState.GRAPH_OPENED)

        edge_id = self._ids.next_edge_id()

        edge = etree.Element(
            _g("edge"),
            {"id": edge_id, "source": source_id, "target": target_id},
            nsmap=_FRAGMENT_NSMAP,
        )
        data = etree.SubElement(edge, _g("data"), {"key": ID_EDGE_GRAPHICS})
        polyline = etree.SubElement(data, _y("PolyLineEdge"))
        _append_edge_style(polyline, self._edge_style)

        with self._writing(f"edge {edge_id!r}"):
            self._write(edge)

        return edge_id

    # --- Release --- #

    def close(self) -> None:
        """Release the sink. Errors raised while releasing are logged."""
        self._machine.expect_not(WriterState.CLOSED)

        if self._open:
            logger.warning(
                "Closing the writer with %d element(s) still open; the document is incomplete",
                len(self._open),
            )
        while self._open:
            ctx = self._open.pop()
            try:
                ctx.__exit__(None, None, None)
            except Exception as e:
                logger.warning("Failed to end an open element: %s", e)

        if self._xmlfile is not None:
            xmlfile, self._xmlfile = self._xmlfile, None
            try:
                xmlfile.__exit__(None, None, None)
            except Exception as e:
                logger.warning("Failed to finalize the document: %s", e)

        if self._close_sink and hasattr(self._sink, "close"):
            try:
                self._sink.close()
            except Exception as e:
                logger.warning("Failed to close the sink: %s", e)

        self._out = None
        self._machine.transition(WriterState.CLOSED)


def write_graphml(
    path: Path, graph: DirectedGraph, renderer: Optional[Renderer] = None
) -> None:
    """Write a DirectedGraph to a GraphML file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    graph.to_graphml(path, renderer)
