from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Callable, ClassVar, Optional

from .graphml_fmt import (
    gml_color,
    gml_integral,
    gml_non_negative,
    gml_number,
    gml_optional_color,
    gml_positive,
)
from .vocab import (
    Alignment,
    Arrow,
    FontStyle,
    LineType,
    Placement,
    Position,
    Shape,
    SizePolicy,
    coerce_enum,
)

Check = Callable[[Any], Any]


# --- Field checks --- #


def _positive(what: str) -> Check:
    return lambda value: float(gml_positive(value, what))


def _positive_int(what: str) -> Check:
    return lambda value: int(gml_positive(gml_integral(value, what), what))


def _non_negative(what: str) -> Check:
    return lambda value: float(gml_non_negative(value, what))


def _int(what: str) -> Check:
    return lambda value: gml_integral(value, what)


def _number(what: str) -> Check:
    return lambda value: gml_number(value, what)


def _color(what: str) -> Check:
    def check(value: Any) -> str:
        if value is None:
            raise TypeError(f"The given {what} is None")
        return gml_color(value)

    return check


def _optional_color(_: str) -> Check:
    return gml_optional_color


def _enum(enum_cls: type, what: str) -> Check:
    return lambda value: coerce_enum(enum_cls, value, what)


def _flag(what: str) -> Check:
    def check(value: Any) -> bool:
        if not isinstance(value, bool):
            raise TypeError(f"The given {what} must be a bool, got {type(value).__name__}")
        return value

    return check


def _name(what: str) -> Check:
    def check(value: Any) -> str:
        if not isinstance(value, str) or not value:
            raise ValueError(f"The given {what} must be a non-empty string, got {value!r}")
        return value

    return check


def _instance(cls: type, what: str) -> Check:
    def check(value: Any) -> Any:
        if not isinstance(value, cls):
            raise TypeError(
                f"The given {what} must be a {cls.__name__}, got {type(value).__name__}"
            )
        return value

    return check


# --- Base record --- #


class _Style:
    """Mutable style record validating every assignment.

    Subclasses are dataclasses; `_checks` maps a field name to a function
    returning the normalized value or raising ValueError/TypeError.
    """

    _checks: ClassVar[dict[str, Check]] = {}

    def __setattr__(self, name: str, value: Any) -> None:
        check = self._checks.get(name)
        if check is not None:
            value = check(value)
        object.__setattr__(self, name, value)

    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in fields(self))

    @classmethod
    def from_style(cls, other: Any) -> Any:
        """Copy constructor: a new style with every field of `other`."""
        style = cls()
        style.apply(other)
        return style

    def validate(self) -> None:
        """Re-run every field check; raises like the failing assignment would."""
        for name, check in self._checks.items():
            check(getattr(self, name))

    def apply(self, other: Any) -> None:
        """Overwrite every field of this style with the values of `other`.

        `other` is validated first, so a failing apply changes nothing.
        """
        if not isinstance(other, type(self)):
            raise TypeError(
                f"Cannot apply {type(other).__name__} to {type(self).__name__}"
            )
        other.validate()
        for name in self.field_names():
            setattr(self, name, getattr(other, name))

    def copy(self) -> Any:
        return type(self).from_style(self)

    def update(self, **changes: Any) -> None:
        """Set several fields at once; unknown names raise ValueError."""
        known = set(self.field_names())
        unknown = sorted(k for k in changes if k not in known)
        if unknown:
            raise ValueError(
                f"Unknown {type(self).__name__} field(s): {', '.join(unknown)}"
            )
        for name, value in changes.items():
            setattr(self, name, value)

    def as_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.field_names()}


# --- Aspects --- #


@dataclass
class GeneralStyle(_Style):
    """Geometry, fill and border of a node."""

    _checks: ClassVar[dict[str, Check]] = {
        "height": _positive("height"),
        "width": _positive("width"),
        "fill_color": _optional_color("fill color"),
        "fill_color2": _optional_color("second fill color"),
        "border_color": _color("border color"),
        "border_type": _enum(LineType, "border type"),
        "border_width": _positive("border width"),
        "transparent_fill": _flag("transparent fill"),
    }

    # x & y are not style properties, they are passed per node.
    height: float = 40.0
    width: float = 40.0
    fill_color: Optional[str] = "#99CC00"
    fill_color2: Optional[str] = None
    border_color: str = "#000000"
    border_type: LineType = LineType.LINE
    border_width: float = 1.0
    transparent_fill: bool = False


@dataclass
class ShapeStyle(_Style):
    """Shape type and drop shadow of a node.

    The drop shadow is only rendered with a color and a non-zero offset.
    """

    _checks: ClassVar[dict[str, Check]] = {
        "shape": _enum(Shape, "shape"),
        "shadow_color": _optional_color("shadow color"),
        "shadow_offset_x": _int("shadow offset x"),
        "shadow_offset_y": _int("shadow offset y"),
    }

    shape: Shape = Shape.RECTANGLE
    shadow_color: Optional[str] = "#B3A691"
    shadow_offset_x: int = 0
    shadow_offset_y: int = 0

    def has_shadow(self) -> bool:
        return self.shadow_color is not None and (
            self.shadow_offset_x != 0 or self.shadow_offset_y != 0
        )


@dataclass
class LabelStyle(_Style):
    """Text styling of a node label.

    A missing background or line color is written as hasBackgroundColor /
    hasLineColor "false". Insets are only written when one of them is set,
    border distance and rotation angle only when non-zero.
    """

    _checks: ClassVar[dict[str, Check]] = {
        "visible": _flag("visibility"),
        "text_color": _color("text color"),
        "background_color": _optional_color("background color"),
        "line_color": _optional_color("line color"),
        "text_alignment": _enum(Alignment, "text alignment"),
        "font_style": _enum(FontStyle, "font style"),
        "font_family": _name("font family"),
        "font_size": _positive_int("font size"),
        "underlined_text": _flag("underlined text"),
        "placement": _enum(Placement, "placement"),
        "position": _enum(Position, "position"),
        "left_inset": _int("left inset"),
        "right_inset": _int("right inset"),
        "top_inset": _int("top inset"),
        "bottom_inset": _int("bottom inset"),
        "size_policy": _enum(SizePolicy, "size policy"),
        "border_distance": _non_negative("border distance"),
        "rotation_angle": _number("rotation angle"),
    }

    visible: bool = True
    text_color: str = "#000000"
    background_color: Optional[str] = None
    line_color: Optional[str] = None
    text_alignment: Alignment = Alignment.CENTER
    font_style: FontStyle = FontStyle.PLAIN
    font_family: str = "Dialog"
    font_size: int = 12
    underlined_text: bool = False
    placement: Placement = Placement.INTERNAL
    position: Position = Position.CENTER
    left_inset: int = 0
    right_inset: int = 0
    top_inset: int = 0
    bottom_inset: int = 0
    size_policy: SizePolicy = SizePolicy.CONTENT
    border_distance: float = 0.0
    rotation_angle: float = 0.0

    def has_insets(self) -> bool:
        return any((self.top_inset, self.bottom_inset, self.left_inset, self.right_inset))

    def set_insets(self, value: int) -> None:
        self.left_inset = value
        self.right_inset = value
        self.top_inset = value
        self.bottom_inset = value


# --- Composite styles --- #


class _Forward:
    """Data descriptor exposing a field of an embedded aspect."""

    def __init__(self, name: str, *path: str) -> None:
        self.name = name
        self.path = path

    def _target(self, obj: Any) -> Any:
        for attr in self.path:
            obj = getattr(obj, attr)
        return obj

    def __get__(self, obj: Any, objtype: Optional[type] = None) -> Any:
        if obj is None:
            return self
        return getattr(self._target(obj), self.name)

    def __set__(self, obj: Any, value: Any) -> None:
        setattr(self._target(obj), self.name, value)


def _forwarded_names(cls: type) -> tuple[str, ...]:
    return tuple(
        name
        for klass in reversed(cls.__mro__)
        for name, attr in vars(klass).items()
        if isinstance(attr, _Forward)
    )


def _node_accessors(prefix: tuple[str, ...]) -> dict[str, _Forward]:
    """Build forwarding descriptors for every aspect field.

    `prefix` is the attribute chain leading to the NodeStyle that holds the
    aspects (empty for NodeStyle itself).
    """
    general = prefix + ("general_style",)
    shape = prefix + ("shape_style",)
    label = prefix + ("label_style",)
    names = {
        general: [f.name for f in fields(GeneralStyle)],
        shape: [f.name for f in fields(ShapeStyle)],
        label: [f.name for f in fields(LabelStyle)],
    }
    accessors: dict[str, _Forward] = {}
    for path, attrs in names.items():
        for attr in attrs:
            accessors[attr] = _Forward(attr, *path)
    return accessors


@dataclass
class NodeStyle(_Style):
    """Style of plain nodes: a general, a shape and a label aspect.

    Every aspect field is also readable and writable directly on the node
    style (`style.width = 80`, `style.font_size`), forwarding to the aspect.
    """

    _checks: ClassVar[dict[str, Check]] = {
        "general_style": _instance(GeneralStyle, "general style"),
        "shape_style": _instance(ShapeStyle, "shape style"),
        "label_style": _instance(LabelStyle, "label style"),
    }

    general_style: GeneralStyle = field(default_factory=GeneralStyle)
    shape_style: ShapeStyle = field(default_factory=ShapeStyle)
    label_style: LabelStyle = field(default_factory=LabelStyle)

    def validate(self) -> None:
        super().validate()
        self.general_style.validate()
        self.shape_style.validate()
        self.label_style.validate()

    def apply(self, other: Any) -> None:
        if not isinstance(other, NodeStyle):
            raise TypeError(f"Cannot apply {type(other).__name__} to NodeStyle")
        other.validate()
        self.label_style.apply(other.label_style)
        self.general_style.apply(other.general_style)
        self.shape_style.apply(other.shape_style)

    def style_names(self) -> tuple[str, ...]:
        return _forwarded_names(type(self))

    def update(self, **changes: Any) -> None:
        known = set(self.style_names())
        unknown = sorted(k for k in changes if k not in known)
        if unknown:
            raise ValueError(f"Unknown {type(self).__name__} field(s): {', '.join(unknown)}")
        for name, value in changes.items():
            setattr(self, name, value)

    def as_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.style_names()}

    def has_insets(self) -> bool:
        return self.label_style.has_insets()

    def set_insets(self, value: int) -> None:
        self.label_style.set_insets(value)

    def has_shadow(self) -> bool:
        return self.shape_style.has_shadow()


for _attr, _descriptor in _node_accessors(()).items():
    setattr(NodeStyle, _attr, _descriptor)


def _group_node_style() -> NodeStyle:
    style = NodeStyle()
    style.update(
        height=80.0,
        width=140.0,
        fill_color="#F5F5F5",
        transparent_fill=False,
        border_color="#000000",
        border_type=LineType.DASHED,
        border_width=1.0,
        shape=Shape.ROUNDED_RECTANGLE,
        font_family="Dialog",
        font_size=15,
        font_style=FontStyle.BOLD,
        background_color="#99CCFF",
        line_color=None,
        text_alignment=Alignment.CENTER,
        text_color="#000000",
        visible=True,
        size_policy=SizePolicy.NODE_WIDTH,
        placement=Placement.INTERNAL,
        position=Position.TOP,
        underlined_text=False,
        # The group has rounded corners.
        border_distance=1.0,
    )
    return style


@dataclass
class GroupStyle(_Style):
    """Style of one realizer (open or closed) of a group node.

    Holds a NodeStyle with group defaults plus the group-only fields, and
    exposes the same flat accessors as NodeStyle.
    """

    _checks: ClassVar[dict[str, Check]] = {
        "insets": _non_negative("insets"),
        "border_insets": _non_negative("border insets"),
        "closed_height": _positive("closed height"),
        "closed_width": _positive("closed width"),
        "_node": _instance(NodeStyle, "node style"),
    }

    _node: NodeStyle = field(default_factory=_group_node_style, repr=False)
    insets: float = 15.0
    border_insets: float = 0.0
    closed_height: float = 50.0
    closed_width: float = 50.0

    @property
    def node_style(self) -> NodeStyle:
        return self._node.copy()

    @node_style.setter
    def node_style(self, style: NodeStyle) -> None:
        if style is None:
            raise TypeError("The given style is None")
        self._node.apply(style)

    def validate(self) -> None:
        super().validate()
        self._node.validate()

    def apply(self, other: Any) -> None:
        if not isinstance(other, GroupStyle):
            raise TypeError(f"Cannot apply {type(other).__name__} to GroupStyle")
        other.validate()
        self._node.apply(other._node)
        self.insets = other.insets
        self.border_insets = other.border_insets
        self.closed_height = other.closed_height
        self.closed_width = other.closed_width

    def group_names(self) -> tuple[str, ...]:
        return ("insets", "border_insets", "closed_height", "closed_width")

    def style_names(self) -> tuple[str, ...]:
        return _forwarded_names(type(self)) + self.group_names()

    def update(self, **changes: Any) -> None:
        known = set(self.style_names())
        unknown = sorted(k for k in changes if k not in known)
        if unknown:
            raise ValueError(f"Unknown GroupStyle field(s): {', '.join(unknown)}")
        for name, value in changes.items():
            setattr(self, name, value)

    def as_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.style_names()}

    def has_insets(self) -> bool:
        return self._node.has_insets()

    def set_insets(self, value: int) -> None:
        self._node.set_insets(value)

    def has_shadow(self) -> bool:
        return self._node.has_shadow()


for _attr, _descriptor in _node_accessors(("_node",)).items():
    setattr(GroupStyle, _attr, _descriptor)

# Group-level accessors to the aspects of the embedded node style.
GroupStyle.general_style = property(lambda self: self._node.general_style)
GroupStyle.shape_style = property(lambda self: self._node.shape_style)
GroupStyle.label_style = property(lambda self: self._node.label_style)


@dataclass
class GroupStyles:
    """The open and closed realizer styles used for every group."""

    _open: GroupStyle = field(default_factory=GroupStyle)
    _closed: GroupStyle = field(default_factory=GroupStyle)

    @property
    def open_style(self) -> GroupStyle:
        return self._open.copy()

    @open_style.setter
    def open_style(self, style: GroupStyle) -> None:
        if style is None:
            raise TypeError("The given style is None")
        self._open.apply(style)

    @property
    def closed_style(self) -> GroupStyle:
        return self._closed.copy()

    @closed_style.setter
    def closed_style(self, style: GroupStyle) -> None:
        if style is None:
            raise TypeError("The given style is None")
        self._closed.apply(style)

    @classmethod
    def from_style(cls, other: GroupStyles) -> GroupStyles:
        styles = cls()
        styles.apply(other)
        return styles

    def validate(self) -> None:
        for style in (self._open, self._closed):
            if not isinstance(style, GroupStyle):
                raise TypeError(
                    f"The given group style must be a GroupStyle, got {type(style).__name__}"
                )
            style.validate()

    def apply(self, other: GroupStyles) -> None:
        if not isinstance(other, GroupStyles):
            raise TypeError(f"Cannot apply {type(other).__name__} to GroupStyles")
        # Both sides are checked before either is written.
        other.validate()
        self._open.apply(other._open)
        self._closed.apply(other._closed)

    def copy(self) -> GroupStyles:
        return GroupStyles.from_style(self)

    def update(self, **changes: Any) -> None:
        """Set the same fields on both the open and the closed style."""
        # Validate on a scratch copy first so both sides change or neither.
        for style in (self._open.copy(), self._closed.copy()):
            style.update(**changes)
        self._open.update(**changes)
        self._closed.update(**changes)


@dataclass
class EdgeStyle(_Style):
    _checks: ClassVar[dict[str, Check]] = {
        "color": _color("edge color"),
        "line_type": _enum(LineType, "line type"),
        "width": _positive("edge width"),
        "source_arrow": _enum(Arrow, "source arrow"),
        "target_arrow": _enum(Arrow, "target arrow"),
        "smoothed": _flag("smoothed flag"),
    }

    color: str = "#000000"
    line_type: LineType = LineType.LINE
    width: float = 1.0
    source_arrow: Arrow = Arrow.NONE
    target_arrow: Arrow = Arrow.STANDARD
    smoothed: bool = False
