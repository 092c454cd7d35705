from __future__ import annotations

from enum import Enum
from typing import TypeVar, Union


class LineType(str, Enum):
    LINE = "line"
    DASHED = "dashed"
    DOTTED = "dotted"
    DASHED_DOTTED = "dashed_dotted"


class Arrow(str, Enum):
    NONE = "none"
    STANDARD = "standard"
    DELTA = "delta"
    WHITE_DELTA = "white_delta"
    DIAMOND = "diamond"
    WHITE_DIAMOND = "white_diamond"
    SHORT = "short"
    PLAIN = "plain"
    CONCAVE = "concave"
    CONVEX = "convex"
    CIRCLE = "circle"
    TRANSPARENT_CIRCLE = "transparent_circle"
    DASH = "dash"
    SKEWED_DASH = "skewed_dash"
    T_SHAPE = "t_shape"
    CROWS_FOOT_ONE_MANDATORY = "crows_foot_one_mandatory"
    CROWS_FOOT_MANY_MANDATORY = "crows_foot_many_mandatory"
    CROWS_FOOT_ONE_OPTIONAL = "crows_foot_one_optional"
    CROWS_FOOT_MANY_OPTIONAL = "crows_foot_many_optional"
    CROWS_FOOT_ONE = "crows_foot_one"
    CROWS_FOOT_MANY = "crows_foot_many"
    CROWS_FOOT_OPTIONAL = "crows_foot_optional"


class Shape(str, Enum):
    RECTANGLE = "rectangle"
    TRIANGLE = "triangle"
    ROUNDED_RECTANGLE = "roundrectangle"
    ELLIPSE = "ellipse"
    PARALLELOGRAM = "parallelogram"
    HEXAGON = "hexagon"
    RECTANGLE_3D = "rectangle3d"
    OCTAGON = "octagon"
    DIAMOND = "diamond"
    TRAPEZOID = "trapezoid"
    TRAPEZOID_2 = "trapezoid2"


class Alignment(str, Enum):
    CENTER = "center"
    LEFT = "left"
    RIGHT = "right"


class FontStyle(str, Enum):
    PLAIN = "plain"
    BOLD = "bold"
    ITALIC = "italic"
    BOLD_AND_ITALIC = "bolditalic"


class Placement(str, Enum):
    """Label model names (the `modelName` attribute of a node label)."""

    INTERNAL = "internal"
    CUSTOM = "custom"
    EDGE_OPPOSITE = "edge_opposite"
    EIGHT_POSITION = "eight_pos"
    FREE = "free"
    CORNERS = "corners"
    SANDWICH = "sandwich"
    SIDES = "sides"


class Position(str, Enum):
    """Label model positions (the `modelPosition` attribute of a node label)."""

    CENTER = "c"
    TOP = "t"
    BOTTOM = "b"
    LEFT = "l"
    RIGHT = "r"
    TOP_LEFT = "tl"
    TOP_RIGHT = "tr"
    BOTTOM_LEFT = "bl"
    BOTTOM_RIGHT = "br"
    NORTH_WEST = "nw"
    NORTH_EAST = "ne"
    SOUTH_WEST = "sw"
    SOUTH_EAST = "se"
    NORTH = "n"
    SOUTH = "s"
    EAST = "e"
    WEST = "w"


class SizePolicy(str, Enum):
    CONTENT = "content"
    NODE_WIDTH = "node_width"
    NODE_HEIGHT = "node_height"
    NODE_SIZE = "node_size"


E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: type[E], value: Union[E, str], what: str) -> E:
    """Return the `enum_cls` member for a member, its wire value or its name.

    `what` only feeds the error message.
    """
    if isinstance(value, enum_cls):
        return value
    if value is None:
        raise TypeError(f"The given {what} is None")
    if isinstance(value, str):
        for member in enum_cls:
            if value == member.value or value.upper() == member.name:
                return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise ValueError(f"Unknown {what}: {value!r} (expected one of: {allowed})")
