"""Name grammar -- the token heuristics applied to node and component names.

Everything that reads meaning out of a name lives here: generic-shape noise
detection, ``Key=Value`` variant syntax, base-name extraction and the
path segments used to name a feature.  Grouping and scoring only call these
helpers, so tuning a pattern never touches their logic.
"""

from __future__ import annotations

import re

# Names the design tool generates for unnamed shapes.
NOISE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^Vector$", re.IGNORECASE),
    re.compile(r"^Rectangle \d+$", re.IGNORECASE),
    re.compile(r"^Ellipse \d+$", re.IGNORECASE),
    re.compile(r"^Line \d+$", re.IGNORECASE),
    re.compile(r"^Frame \d+$", re.IGNORECASE),
    re.compile(r"^Group \d+$", re.IGNORECASE),
    re.compile(r"^image$", re.IGNORECASE),
    re.compile(r"^Intersect$", re.IGNORECASE),
    re.compile(r"^Union$", re.IGNORECASE),
    re.compile(r"^Subtract$", re.IGNORECASE),
)

NOISE_NODE_TYPES: frozenset[str] = frozenset({
    "VECTOR", "BOOLEAN_OPERATION", "LINE", "REGULAR_POLYGON", "STAR", "SLICE",
})

UNGROUPED = "Ungrouped"

_VARIANT_MARKER = re.compile(r"[A-Za-z]+=")
_VARIANT_PAIR = re.compile(r"([A-Za-z]+)=([^,/]+)")


def is_noise_name(name: str) -> bool:
    """True for auto-generated shape names like ``Rectangle 12``."""
    return any(pattern.search(name) for pattern in NOISE_PATTERNS)


def is_noise_type(node_type: str) -> bool:
    return node_type in NOISE_NODE_TYPES


def is_noise(name: str, node_type: str) -> bool:
    """A change is noise only when both its name and its type are generic."""
    return is_noise_name(name) and is_noise_type(node_type)


def is_variant_name(name: str) -> bool:
    return bool(_VARIANT_MARKER.search(name))


def variant_tokens(name: str) -> list[str]:
    """``"Button/Type=Primary, State=Hover"`` -> ``["Type=Primary", "State=Hover"]``."""
    return [f"{key}={value.strip()}" for key, value in _VARIANT_PAIR.findall(name)]


def parse_variant_properties(name: str) -> dict[str, str]:
    """``"Type=Primary, State=Hover"`` -> ``{"Type": "Primary", "State": "Hover"}``."""
    return {key: value.strip() for key, value in _VARIANT_PAIR.findall(name)}


def variant_value(name: str, prop: str) -> str | None:
    """Value of one variant property in *name*, or None.  Property match is exact."""
    return parse_variant_properties(name).get(prop)


def base_name(name: str) -> str:
    """Text before the first ``/``, or the whole name."""
    head, sep, _tail = name.partition("/")
    return head if sep else name


def meaningful_segments(path: list[str]) -> list[str]:
    """Drop the document-root segment and every noise-named segment."""
    return [segment for segment in path[1:] if not is_noise_name(segment)]


def feature_name(path: list[str]) -> tuple[str, str]:
    """Return ``(feature name, display path)`` for a change path.

    The display path joins the first three meaningful segments, so the
    document root and generated layer names never appear in it.
    """
    meaningful = meaningful_segments(path)
    if not meaningful:
        return UNGROUPED, " > ".join(path)
    return meaningful[0], " > ".join(meaningful[:3])
