from __future__ import annotations

import math
import re
from typing import Optional, Sequence, Union

ColorLike = Union[str, Sequence[int]]

# "#RRGGBB" or "#RRGGBBAA"
COLOR_RE = re.compile(r"^#(?:[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")

# Characters XML 1.0 cannot carry, even escaped.
_XML_INVALID_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def gml_color(value: ColorLike) -> str:
    """Normalize a color to "#RRGGBB" (opaque) or "#RRGGBBAA".

    Accepts hex strings or (r, g, b[, a]) tuples with 0-255 components.
    """
    if isinstance(value, str):
        if not COLOR_RE.match(value):
            raise ValueError(f"Not a #RRGGBB or #RRGGBBAA color: {value!r}")
        out = value.upper()
        if len(out) == 9 and out.endswith("FF"):
            out = out[:7]
        return out

    parts = tuple(value)
    if len(parts) not in (3, 4) or not all(
        isinstance(p, int) and 0 <= p <= 255 for p in parts
    ):
        raise ValueError(f"Not an (r, g, b[, a]) color with 0-255 components: {value!r}")
    if len(parts) == 4 and parts[3] == 255:
        parts = parts[:3]
    return "#" + "".join(f"{p:02X}" for p in parts)


def gml_optional_color(value: Optional[ColorLike]) -> Optional[str]:
    return None if value is None else gml_color(value)


def gml_float(value: float) -> str:
    return f"{value:.1f}"


def gml_int(value: float) -> str:
    # Integer rendering of a float dimension ("bottom" next to "bottomF").
    return f"{value:.0f}"


def gml_bool(value: bool) -> str:
    return "true" if value else "false"


def gml_text(text: object) -> str:
    """Make text safe for element content (markup escaping is left to lxml)."""
    return _XML_INVALID_RE.sub("", str(text))


def gml_number(value: float, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"The given {what} must be a number, got {type(value).__name__}")
    # yEd can't read "nan" or "inf".
    if not math.isfinite(value):
        raise ValueError(f"The given {what} ({value}) must be a finite number")
    return float(value)


def gml_positive(value: float, what: str) -> float:
    if not gml_number(value, what) > 0:
        raise ValueError(f"The given {what} ({value}) must be positive")
    return value


def gml_non_negative(value: float, what: str) -> float:
    if gml_number(value, what) < 0:
        raise ValueError(f"The given {what} ({value}) must be positive or zero")
    return value


def gml_integral(value: float, what: str) -> int:
    """Return `value` as an int; integral floats (3.0) are accepted."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"The given {what} must be an int, got {type(value).__name__}")
    return value
