"""Variant option axes: the selectable dimensions a family chooser exposes.

An axis is kept only when it distinguishes variants (2+ distinct values).
Dimensional specification names are folded into one ``dimension`` axis as
soon as a family mixes more than one of them, so a family does not split
into several single-value pseudo-axes for what is really one size knob.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from product_families.models import AttributeMap, Family, Variant

DESCRIPTOR_KEY = "uniqueDescriptors"

DIMENSIONAL_KEYS = frozenset({
    "Width", "Height", "Depth", "Length", "Diameter", "Projection",
    "Reach", "Arm Length", "Shower Head Width", "Fixing Point Distance",
    "Minimum Width", "Maximum Width", "Minimum Height", "Maximum Height",
    "dimensions", "dimension",
})

# Generic attribute keys renamed to their singular option names
OPTION_NAMES = {"sizes": "size", "dimensions": "dimension"}

_NUMERIC_AXES = frozenset({"size", "dimension", "coverage"}) | DIMENSIONAL_KEYS
_NUMERIC_PREFIX_RE = re.compile(r"^\(?\s*(\d+(?:\.\d+)?)")


def _values(value: str | list[str]) -> list[str]:
    return list(value) if isinstance(value, list) else [value]


def sort_option_values(axis: str, values: Iterable[str]) -> list[str]:
    """Lexicographic order; numeric-aware for size-like axes when every value has a number prefix."""
    values = sorted(set(values))
    if axis in _NUMERIC_AXES:
        prefixes = [_NUMERIC_PREFIX_RE.match(v) for v in values]
        if all(prefixes):
            return sorted(values, key=lambda v: (float(_NUMERIC_PREFIX_RE.match(v).group(1)), v))
    return values


def aggregate_options(variants: Iterable[Variant]) -> dict[str, list[str]]:
    """Collapse per-variant attributes into the family's option axes."""
    collected: dict[str, set[str]] = {}
    for variant in variants:
        for key, value in variant.attributes.items():
            if key == DESCRIPTOR_KEY:
                continue
            collected.setdefault(key, set()).update(_values(value))

    dimensional = [key for key in collected if key in DIMENSIONAL_KEYS]
    if len(dimensional) > 1:
        merged: set[str] = set()
        for key in dimensional:
            merged |= collected.pop(key)
        collected["dimension"] = merged

    options: dict[str, list[str]] = {}
    for key, values in collected.items():
        if len(values) < 2:
            continue
        axis = OPTION_NAMES.get(key, key)
        options[axis] = sort_option_values(axis, values)
    return options


def _attribute_for(attributes: AttributeMap, axis: str) -> list[str] | None:
    if axis == "dimension":
        # The combined axis spans every dimensional key a variant carries
        found = [v for k in sorted(DIMENSIONAL_KEYS) if k in attributes for v in _values(attributes[k])]
        if found:
            return found
    if axis in attributes:
        return _values(attributes[axis])
    alternate = axis[:-1] if axis.endswith("s") else axis + "s"
    if alternate in attributes:
        return _values(attributes[alternate])
    return None


def find_matching_variant(family: Family, selected: Mapping[str, str]) -> Variant | None:
    """First variant whose attributes carry every selected option value.

    Keys fall back between singular and plural ("size" / "sizes"), and the
    combined ``dimension`` axis matches any dimensional attribute.
    """
    if not selected:
        return None
    for variant in family.variants:
        if all(
            (values := _attribute_for(variant.attributes, axis)) is not None and value in values
            for axis, value in selected.items()
        ):
            return variant
    return None
