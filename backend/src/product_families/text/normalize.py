"""Comparison-key normalization for clustering catalog titles.

Two titles that differ only in size, material, finish, color, temperature or
direction normalize to the same key. The steps are order-sensitive:

1. Lower-case and trim
2. Strip size expressions (N x N [x N], N mm/cm/m, N m2/m3, (N m2))
3. Collapse whitespace, so multi-word phrases match across irregular spacing
4. Normalize spelling variants ("under floor" -> "underfloor")
5. Strip color combinations ("grey/chrome")
6. Remove vocabulary phrases, longest-first
7. Drop empty parentheses, collapse whitespace, trim

The whole sequence is repeated until the key stops changing, so normalizing
an already-normalized key is a no-op.
"""

from __future__ import annotations

import re

from product_families.text.vocabulary import Vocabulary, get_vocabulary

_NUM = r"\d+(?:\.\d+)?"
_UNIT = r"(?:mm|cm|m)"

# 1200 x 900, 1200x900x500mm, 750mm x 260mm x 530mm, 3.0 x 1.8m
MULTI_DIMENSION_RE = re.compile(
    rf"\b{_NUM}\s*{_UNIT}?\s*x\s*{_NUM}\s*{_UNIT}?(?:\s*x\s*{_NUM}\s*{_UNIT}?)?\b",
    re.IGNORECASE,
)
# (10m2), ( 5 M3 )
PAREN_AREA_RE = re.compile(rf"\(\s*{_NUM}\s*m[23]?\s*\)", re.IGNORECASE)
# 10m2, 5 m3
AREA_RE = re.compile(rf"\b{_NUM}\s*m[23]\b", re.IGNORECASE)
# 600mm, 1.5 m
SINGLE_DIMENSION_RE = re.compile(rf"\b{_NUM}\s*{_UNIT}\b", re.IGNORECASE)

COLOR_COMBINATION_RE = re.compile(r"\b\w+\s*/\s*\w+\b")
EMPTY_PARENS_RE = re.compile(r"\(\s*\)")
_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def strip_sizes(text: str) -> str:
    """Remove multi-dimension, area/volume and single-dimension expressions."""
    text = MULTI_DIMENSION_RE.sub("", text)
    text = PAREN_AREA_RE.sub("", text)
    text = AREA_RE.sub("", text)
    return SINGLE_DIMENSION_RE.sub("", text)


def strip_color_combinations(text: str) -> str:
    return COLOR_COMBINATION_RE.sub("", text)


def _normalize_once(title: str, vocabulary: Vocabulary) -> str:
    text = title.lower().strip()
    text = strip_sizes(text)
    text = collapse_whitespace(text)
    text = vocabulary.normalize_spelling(text)
    text = strip_color_combinations(text)
    text = vocabulary.remove_phrases(text)
    text = EMPTY_PARENS_RE.sub("", text)
    return collapse_whitespace(text)


def normalize_title(title: str, vocabulary: Vocabulary | None = None) -> str:
    """Reduce a raw product title to its clustering comparison key.

    Total for every string; a title made only of size and vocabulary tokens
    yields the empty key, which is a valid (degenerate) cluster key.
    """
    vocabulary = vocabulary or get_vocabulary("catalog")
    key = _normalize_once(title, vocabulary)
    while True:
        again = _normalize_once(key, vocabulary)
        if again == key:
            return key
        key = again
