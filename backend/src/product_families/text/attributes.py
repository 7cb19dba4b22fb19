"""Per-variant attribute extraction from raw product titles.

Every rule is a pure function ``(title, family_words, found) -> dict`` and the rules
run in the order of ``EXTRACTION_RULES``. Only the dimension rule depends on
another rule's output (it yields to multi-dimension sizes). Specification
reconciliation runs last, and only when a "Specifications" group is known for
the product.

Rules never raise: a title without a match simply omits the key.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from product_families.models import AttributeMap, SpecAttribute, SpecGroup
from product_families.text.family_title import DIMENSION, STAR_RATING_RE

_NUM = r"\d+(?:\.\d+)?"

SIZE_RE = re.compile(
    rf"\b{DIMENSION}\s*x\s*{DIMENSION}(?:\s*x\s*{DIMENSION})?", re.IGNORECASE
)
DIMENSION_RE = re.compile(rf"\b{_NUM}\s*(?:mm|cm|m)\b", re.IGNORECASE)
COVERAGE_RE = re.compile(rf"\(?\s*\b({_NUM}\s*m[23])\b\s*\)?", re.IGNORECASE)
LEADING_INT_RE = re.compile(r"\d+")

ORIENTATIONS = (
    (re.compile(r"\bleft\s+hand\b", re.IGNORECASE), "Left Hand"),
    (re.compile(r"\bright\s+hand\b", re.IGNORECASE), "Right Hand"),
    (re.compile(r"\bleft\b", re.IGNORECASE), "Left"),
    (re.compile(r"\bright\b", re.IGNORECASE), "Right"),
)
TEMPERATURES = (
    (re.compile(r"\bcold\b", re.IGNORECASE), "Cold"),
    (re.compile(r"\bwarm\b", re.IGNORECASE), "Warm"),
    (re.compile(r"\bhot\b", re.IGNORECASE), "Hot"),
)

# Product-type nouns, mounting words and connectives that never describe a variant
NOISE_WORDS = frozenset({
    "left", "right", "hand", "cold", "warm", "hot", "cool",
    "grab", "rail", "basin", "tap", "mixer", "shower", "bath",
    "toilet", "vanity", "cabinet", "mirror", "set", "system",
    "corner", "wall", "floor", "ceiling", "counter", "above",
    "below", "under", "over", "mounted", "inset", "flush",
    "bowl", "taphole", "tapholes", "hole", "holes", "no",
    "with", "without", "overflow", "shelf", "shelves", "acrylic",
    "base", "button", "plate", "dn80", "and", "mk2", "medium",
    "heating", "pack", "underfloor",
})

# Single tokens that are measurements or codes rather than descriptors
_NON_DESCRIPTOR_TOKENS = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"^\d+$",
    r"^(?:mm|cm|m|x|\(|\))$",
    rf"^{_NUM}(?:mm|cm|m)[23]?$",
    rf"^{_NUM}\s*x\s*\d+",
    r"^\((?:cold|warm|hot)\)$",
    r"^\d+-\d+$",
    rf"^\({_NUM}\s*m[23]\)$",
    r"^\d+\.\d+$",
    rf"^{_NUM}(?:mm|cm|m)-{_NUM}(?:mm|cm|m)$",
    r"^[a-z]\d+$",
))
_TEMPERATURE_TOKEN_RE = re.compile(r"\(?\b(?:cold|warm|hot)\b\)?", re.IGNORECASE)
_PUNCTUATION_ONLY_RE = re.compile(r"^[\s/&\-,.]+$")
_PUNCTUATION_TOKEN_RE = re.compile(r"^[\-,.]+$")
_SLASH_RE = re.compile(r"\s*/\s*")
_AMPERSAND_SLASH_RE = re.compile(r"[/&]+")

DIMENSIONS_KEY = "dimensions"
# Units that can never describe a length; anything else (or no unit) may match
NON_LENGTH_UNITS = frozenset({
    "kpa", "pa", "bar", "psi", "mpa",
    "l", "litre", "liter", "ml", "l/min", "lpm",
    "kg", "g",
    "w", "kw", "v", "a",
    "c", "°c", "degree", "star", "second", "sec",
})
_UNIT_TRAILING_RE = re.compile(r"[\s.,]+$")

Rule = Callable[[str, frozenset[str], AttributeMap], AttributeMap]


def extract_sizes(title: str, family_words: frozenset[str], found: AttributeMap) -> AttributeMap:
    sizes = [m.group(0).strip() for m in SIZE_RE.finditer(title)]
    return {"sizes": sizes} if sizes else {}


def extract_dimensions(title: str, family_words: frozenset[str], found: AttributeMap) -> AttributeMap:
    """Single ``N unit`` tokens; skipped when a multi-dimension size was found."""
    if "sizes" in found:
        return {}
    dimensions = [m.group(0) for m in DIMENSION_RE.finditer(title)]
    return {DIMENSIONS_KEY: dimensions} if dimensions else {}


def extract_coverage(title: str, family_words: frozenset[str], found: AttributeMap) -> AttributeMap:
    coverage = [m.group(1) for m in COVERAGE_RE.finditer(title)]
    return {"coverage": coverage} if coverage else {}


def extract_orientation(title: str, family_words: frozenset[str], found: AttributeMap) -> AttributeMap:
    for pattern, value in ORIENTATIONS:
        if pattern.search(title):
            return {"orientation": value}
    return {}


def extract_temperature(title: str, family_words: frozenset[str], found: AttributeMap) -> AttributeMap:
    for pattern, value in TEMPERATURES:
        if pattern.search(title):
            return {"temperature": value}
    return {}


def _is_descriptor(word: str, family_words: frozenset[str]) -> bool:
    lower = word.lower()
    if lower in family_words or lower in NOISE_WORDS:
        return False
    return not any(p.search(word) for p in _NON_DESCRIPTOR_TOKENS)


def clean_descriptors(text: str) -> str:
    """Scrub star ratings, temperature tokens, stray / & and lone punctuation from a residual."""
    text = STAR_RATING_RE.sub("", text).strip()
    text = _TEMPERATURE_TOKEN_RE.sub("", text).strip()
    text = _AMPERSAND_SLASH_RE.sub(" ", text)
    return " ".join(w for w in text.split() if not _PUNCTUATION_TOKEN_RE.match(w))


def extract_descriptors(title: str, family_words: frozenset[str], found: AttributeMap) -> AttributeMap:
    """Words the family title does not explain, usually the color or material.

    The catalog's color and material vocabularies overlap, so the residual is
    exposed both as ``uniqueDescriptors`` and as ``color``.
    """
    words = _SLASH_RE.sub(" ", title).split()
    residual = clean_descriptors(" ".join(w for w in words if _is_descriptor(w, family_words)))
    if not residual or _PUNCTUATION_ONLY_RE.match(residual):
        return {}
    return {"uniqueDescriptors": residual, "color": residual}


EXTRACTION_RULES: tuple[Rule, ...] = (
    extract_sizes,
    extract_dimensions,
    extract_coverage,
    extract_orientation,
    extract_temperature,
    extract_descriptors,
)


def _leading_int(value: str) -> int | None:
    match = LEADING_INT_RE.search(value)
    return int(match.group(0)) if match else None


def _first_value(spec: SpecAttribute) -> int | None:
    if not spec.values:
        return None
    match = re.match(r"\s*[-+]?(\d+)", spec.values[0])
    return int(match.group(1)) if match else None


def _normalize_unit(uom: str) -> str:
    unit = _UNIT_TRAILING_RE.sub("", uom.strip().lower())
    if len(unit) > 3 and unit.endswith("s"):
        unit = unit[:-1]
    return unit


def _is_length(spec: SpecAttribute) -> bool:
    return not spec.uom or _normalize_unit(spec.uom) not in NON_LENGTH_UNITS


def match_dimension_to_spec(dimension: str, spec_group: SpecGroup | None) -> str | None:
    """Name of the specification attribute whose first value equals the dimension.

    "Minimum X" / "Maximum X" collapse to "X" when both exist with equal values.
    """
    if spec_group is None or not spec_group.attributes:
        return None
    value = _leading_int(dimension)
    if not value:
        return None

    specs = spec_group.attributes
    name = next(
        (s.name for s in specs if _is_length(s) and _first_value(s) == value),
        None,
    )
    if name is None:
        return None

    base = re.sub(r"^(?:Minimum|Maximum) ", "", name)
    if base != name:
        by_name = {s.name: s for s in specs}
        low = by_name.get(f"Minimum {base}")
        high = by_name.get(f"Maximum {base}")
        if low and high and _first_value(low) is not None and _first_value(low) == _first_value(high):
            return base
    return name


def reconcile_dimensions(attributes: AttributeMap, spec_group: SpecGroup | None) -> AttributeMap:
    """Re-key generic dimension tokens under matching specification names."""
    dimensions = attributes.get(DIMENSIONS_KEY)
    if not dimensions or spec_group is None:
        return attributes

    named: dict[str, list[str]] = {}
    unmatched: list[str] = []
    for dimension in dimensions:
        name = match_dimension_to_spec(dimension, spec_group)
        if name:
            named.setdefault(name, []).append(dimension)
        else:
            unmatched.append(dimension)
    if not named:
        return attributes

    result: AttributeMap = {}
    for key, value in attributes.items():
        if key == DIMENSIONS_KEY:
            result.update(named)
            if unmatched:
                result[DIMENSIONS_KEY] = unmatched
        else:
            result[key] = value
    return result


def extract_attributes(
    title: str,
    family_title: str,
    spec_group: SpecGroup | None = None,
) -> AttributeMap:
    """Structured variant attributes for one product title within its family."""
    family_words = frozenset(family_title.lower().split())
    attributes: AttributeMap = {}
    for rule in EXTRACTION_RULES:
        attributes.update(rule(title, family_words, attributes))
    return reconcile_dimensions(attributes, spec_group)
