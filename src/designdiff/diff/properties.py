"""Property comparison between two versions of the same node."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from ..models import DocumentNode, PropertyChange

# Optional attributes copied into a projection when present, in report order.
_PAINT_KEYS = ("fills", "strokes", "stroke_weight", "corner_radius", "effects")
_LAYOUT_KEYS = (
    "layout_mode",
    "primary_axis_sizing_mode",
    "counter_axis_sizing_mode",
    "padding_left",
    "padding_right",
    "padding_top",
    "padding_bottom",
    "item_spacing",
)
_TEXT_KEYS = ("characters", "style")
_COMPONENT_KEYS = ("component_id", "component_property_definitions")

_PADDING_KEYS = frozenset({"padding_left", "padding_right", "padding_top", "padding_bottom"})

_MISSING = object()


def project(node: DocumentNode) -> dict[str, Any]:
    """Return the comparable subset of *node*'s attributes.

    Only the bounding-box size is kept; position never appears in a
    projection.
    """
    props: dict[str, Any] = {
        "name": node.name,
        "type": node.type,
        "visible": node.visible,
    }
    for key in (*_PAINT_KEYS, *_LAYOUT_KEYS, *_TEXT_KEYS, *_COMPONENT_KEYS):
        value = getattr(node, key)
        if value is not None:
            props[key] = value
    box = node.absolute_bounding_box
    if box is not None:
        props["size"] = {"width": box.width, "height": box.height}
    return props


def values_equal(a: Any, b: Any) -> bool:
    """Structural equality over mappings, sequences and primitives."""
    if a is _MISSING or b is _MISSING:
        return a is b
    if isinstance(a, Mapping) or isinstance(b, Mapping):
        if not (isinstance(a, Mapping) and isinstance(b, Mapping)):
            return False
        if a.keys() != b.keys():
            return False
        return all(values_equal(a[key], b[key]) for key in a)
    if isinstance(a, (list, tuple)) or isinstance(b, (list, tuple)):
        if not (isinstance(a, (list, tuple)) and isinstance(b, (list, tuple))):
            return False
        if len(a) != len(b):
            return False
        return all(values_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    return a == b


def diff_projections(before: dict[str, Any], after: dict[str, Any]) -> list[PropertyChange]:
    """List every key whose value differs, old keys first, then new-only keys."""
    changes: list[PropertyChange] = []
    keys = list(before)
    keys.extend(key for key in after if key not in before)
    for key in keys:
        old = before.get(key, _MISSING)
        new = after.get(key, _MISSING)
        if not values_equal(old, new):
            changes.append(PropertyChange(
                property=key,
                before=None if old is _MISSING else old,
                after=None if new is _MISSING else new,
            ))
    return changes


def compare_nodes(old: DocumentNode, new: DocumentNode) -> list[PropertyChange]:
    return diff_projections(project(old), project(new))


def describe(changes: list[PropertyChange]) -> str:
    """Turn property changes into a short comma-separated phrase."""
    phrases: list[str] = []
    for change in changes:
        phrase = _describe_one(change)
        if phrase not in phrases:
            phrases.append(phrase)
    return ", ".join(phrases)


def _describe_one(change: PropertyChange) -> str:
    prop = change.property
    if prop == "name":
        return f'renamed from "{change.before}" to "{change.after}"'
    if prop == "visible":
        return "made visible" if change.after else "hidden"
    if prop == "fills":
        return "fill changed"
    if prop == "strokes":
        return "stroke changed"
    if prop == "effects":
        return "effects changed"
    if prop == "style":
        return "text style changed"
    if prop == "characters":
        return "text content changed"
    if prop == "size":
        if isinstance(change.before, Mapping) and isinstance(change.after, Mapping):
            return f"resized from {_dimensions(change.before)} to {_dimensions(change.after)}"
        return "size changed"
    if prop == "layout_mode":
        return f"layout changed to {change.after or 'none'}"
    if prop == "item_spacing":
        return f"spacing changed from {_number(change.before)} to {_number(change.after)}"
    if prop in _PADDING_KEYS:
        return "padding changed"
    if prop == "corner_radius":
        return f"corner radius changed from {_number(change.before)} to {_number(change.after)}"
    if prop == "stroke_weight":
        return f"stroke weight changed from {_number(change.before)} to {_number(change.after)}"
    return f"{prop} changed"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _dimensions(size: Mapping[str, Any]) -> str:
    return f"{_round_half_up(size['width'])}x{_round_half_up(size['height'])}"


def _number(value: Any) -> Any:
    """Render ``4.0`` as ``4`` while leaving fractional values alone."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
