"""Canonical family titles from a cluster of raw product titles.

Each title is first stripped of its variable parts (sizes, direction,
temperature, star ratings, color/material terms) while keeping every other
word, then the longest contiguous run of words shared by all stripped titles
becomes the family name.

Titles are short (rarely more than ~15 words), so the cubic scan over the
first title's runs is fine at catalog scale.
"""

from __future__ import annotations

import re

from product_families.text.normalize import EMPTY_PARENS_RE, collapse_whitespace
from product_families.text.vocabulary import Vocabulary, get_vocabulary

_NUM = r"\d+(?:\.\d+)?"
_UNIT = r"(?:mm|cm|m)"
# One dimension, optionally a range: 400, 3.0m, 400-500, 300mm-400mm, 350mm - 400mm
DIMENSION = rf"{_NUM}{_UNIT}?(?:\s*-\s*{_NUM}{_UNIT}?)?"

SIZE_RE = re.compile(
    rf"\b{DIMENSION}\s*x\s*{DIMENSION}(?:\s*x\s*{DIMENSION})?", re.IGNORECASE
)
SINGLE_DIMENSION_RE = re.compile(rf"\b{_NUM}\s*{_UNIT}\b", re.IGNORECASE)
AREA_RE = re.compile(rf"\(?\b{_NUM}\s*m[23]\b\)?", re.IGNORECASE)
STRAY_X_RE = re.compile(r"\s+x\s+", re.IGNORECASE)
HANDED_RE = re.compile(r"\b(?:left|right)\s+hand\b", re.IGNORECASE)
DIRECTION_RE = re.compile(r"\b(?:left|right)\b", re.IGNORECASE)
TEMPERATURE_RE = re.compile(r"\(?\b(?:cold|warm|hot)\b\)?", re.IGNORECASE)
STAR_RATING_RE = re.compile(r"\(\d+\s+star\)", re.IGNORECASE)
ROMAN_NUMERAL_RE = re.compile(r"^[ivx]+$", re.IGNORECASE)

_ORPHAN_CONJUNCTIONS = (
    (re.compile(r"\s+&\s+"), " "),
    (re.compile(r"\s+&\s*$"), ""),
    (re.compile(r"^\s*&\s+"), ""),
    (re.compile(r"\s+and\s*$", re.IGNORECASE), " "),
    (re.compile(r"^\s*and\s+", re.IGNORECASE), " "),
)
_SLASH_RE = re.compile(r"\s*/\s*")


def strip_variable_parts(title: str, vocabulary: Vocabulary | None = None) -> str:
    """Remove the parts of a title that vary between variants, keep the rest readable."""
    vocabulary = vocabulary or get_vocabulary("family-title")
    text = SIZE_RE.sub("", title)
    text = SINGLE_DIMENSION_RE.sub("", text)
    text = AREA_RE.sub("", text)
    text = STRAY_X_RE.sub(" ", text)
    text = HANDED_RE.sub("", text)
    text = DIRECTION_RE.sub("", text)
    text = TEMPERATURE_RE.sub("", text)
    text = STAR_RATING_RE.sub("", text)
    text = vocabulary.remove_phrases(text)
    text = EMPTY_PARENS_RE.sub("", text)
    text = collapse_whitespace(text)
    for pattern, replacement in _ORPHAN_CONJUNCTIONS:
        text = pattern.sub(replacement, text)
    text = _SLASH_RE.sub(" ", text)
    return collapse_whitespace(text)


def _contains_run(words: list[str], run: list[str]) -> bool:
    size = len(run)
    return any(words[i : i + size] == run for i in range(len(words) - size + 1))


def longest_common_run(token_lists: list[list[str]]) -> list[str]:
    """Longest contiguous word run found in every token list.

    Scans every start and length of the first list; ties go to the run found
    first (leftmost start). Returns [] when no word is shared by all lists.
    """
    if not token_lists:
        return []
    first = token_lists[0]
    best: list[str] = []
    for start in range(len(first)):
        for length in range(len(first) - start, len(best), -1):
            candidate = first[start : start + length]
            if all(_contains_run(words, candidate) for words in token_lists[1:]):
                best = candidate
                break
    return best


def common_prefix(token_lists: list[list[str]]) -> list[str]:
    """Shared leading tokens, at least one token of the first list."""
    first = token_lists[0]
    length = 0
    for i, word in enumerate(first):
        if all(len(words) > i and words[i] == word for words in token_lists[1:]):
            length = i + 1
        else:
            break
    return first[: max(length, 1)]


def capitalize_word(word: str, casing: dict[str, str] | None = None) -> str:
    if casing and word.lower() in casing:
        return casing[word.lower()]
    if ROMAN_NUMERAL_RE.match(word):
        return word.upper()
    return word[:1].upper() + word[1:]


def synthesize_title(raw_titles: list[str], vocabulary: Vocabulary | None = None) -> str:
    """Canonical, human-readable family title for one cluster of raw titles."""
    if not raw_titles:
        return ""
    if len(raw_titles) == 1:
        return raw_titles[0]

    vocabulary = vocabulary or get_vocabulary("family-title")
    token_lists = [
        strip_variable_parts(title, vocabulary).lower().split() for title in raw_titles
    ]
    # A title made only of variable parts is compared by its raw words
    token_lists = [
        tokens or collapse_whitespace(raw).lower().split()
        for tokens, raw in zip(token_lists, raw_titles)
    ]

    words = longest_common_run(token_lists)
    if not words:
        words = common_prefix(token_lists)

    title = " ".join(capitalize_word(w, vocabulary.casing) for w in words)
    return vocabulary.apply_rewrites(title)
