"""Named, immutable vocabulary configurations loaded from vocabularies.yaml.

A Vocabulary is an ordered set of tagged phrases (material, finish, color,
temperature, direction) plus a few title rewrites. Phrases are always exposed
longest-first so "brushed stainless steel" is removed before "steel" can
partially match it.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

Tag = Literal["material", "finish", "color", "temperature", "direction"]

_CONFIG: dict | None = None
_CONFIG_PATH = Path(__file__).parent / "vocabularies.yaml"


class VocabularyEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    phrase: str
    tag: Tag


class Rewrite(BaseModel):
    model_config = ConfigDict(frozen=True)

    pattern: str
    replacement: str

    def apply(self, text: str) -> str:
        return _compile(self.pattern).sub(self.replacement, text)


class Vocabulary(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    version: int = 1
    description: str = ""
    entries: tuple[VocabularyEntry, ...] = ()
    spellings: tuple[Rewrite, ...] = ()
    rewrites: tuple[Rewrite, ...] = ()
    casing: dict[str, str] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        return f"{self.name}@v{self.version}"

    def phrases(self, tags: tuple[Tag, ...] | None = None) -> tuple[str, ...]:
        """Phrases sorted longest-first; equal lengths keep configuration order."""
        selected = [
            e.phrase for e in self.entries if tags is None or e.tag in tags
        ]
        return tuple(sorted(dict.fromkeys(selected), key=len, reverse=True))

    def tagged(self, tag: Tag) -> tuple[str, ...]:
        return self.phrases((tag,))

    def remove_phrases(self, text: str) -> str:
        """Delete every phrase as a whole word, case-insensitive, longest-first."""
        for phrase in self.phrases():
            text = phrase_pattern(phrase).sub("", text)
        return text

    def normalize_spelling(self, text: str) -> str:
        for rewrite in self.spellings:
            text = rewrite.apply(text)
        return text

    def apply_rewrites(self, text: str) -> str:
        for rewrite in self.rewrites:
            text = rewrite.apply(text)
        return text


@lru_cache(maxsize=None)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


@lru_cache(maxsize=None)
def phrase_pattern(phrase: str) -> re.Pattern[str]:
    """Whole-word, case-insensitive pattern for one vocabulary phrase."""
    return re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE)


def _load() -> dict:
    global _CONFIG
    if _CONFIG is None:
        with open(_CONFIG_PATH, encoding="utf-8") as f:
            _CONFIG = yaml.safe_load(f)
    return _CONFIG


def vocabulary_from_config(name: str, config: dict) -> Vocabulary:
    """Build a Vocabulary from one named block of vocabularies.yaml."""
    entries = [
        VocabularyEntry(phrase=str(phrase).lower(), tag=tag)
        for tag, phrases in (config.get("entries") or {}).items()
        for phrase in phrases or []
    ]
    return Vocabulary(
        name=name,
        version=int(config.get("version", 1)),
        description=str(config.get("description", "")).strip(),
        entries=tuple(entries),
        spellings=tuple(Rewrite(**r) for r in config.get("spellings") or []),
        rewrites=tuple(Rewrite(**r) for r in config.get("rewrites") or []),
        casing={str(k).lower(): str(v) for k, v in (config.get("casing") or {}).items()},
    )


@lru_cache(maxsize=None)
def get_vocabulary(name: str = "catalog") -> Vocabulary:
    """Return a named vocabulary configuration. Raises KeyError if unknown."""
    config = _load().get(name)
    if config is None:
        raise KeyError(f"Unknown vocabulary: {name}")
    return vocabulary_from_config(name, config)


def get_vocabulary_names() -> list[str]:
    return list(_load().keys())
