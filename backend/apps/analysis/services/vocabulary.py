from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from django.conf import settings

logger = logging.getLogger(__name__)

SCHEMES: Tuple[str, ...] = ("bisac", "thema", "ibic")
TIERS: Tuple[str, ...] = ("main", "secondary", "related")

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class VocabularyError(ValueError):
    """Raised when a controlled vocabulary list is malformed."""


@dataclass(frozen=True)
class Vocabulary:
    """
    Read-only controlled vocabularies: valid tags plus, per subject scheme,
    the set of valid codes and their official descriptions.

    Instances are built once and shared between requests. Every container is
    immutable (frozenset / MappingProxyType) so concurrent readers need no
    locking.
    """

    tags: FrozenSet[str]
    codes: Mapping[str, FrozenSet[str]]
    descriptions: Mapping[str, Mapping[str, str]]
    tag_order: Tuple[str, ...] = ()

    @classmethod
    def from_entries(
        cls,
        *,
        tags: Iterable[str],
        bisac: Iterable[Mapping[str, Any]] | Mapping[str, str],
        thema: Iterable[Mapping[str, Any]] | Mapping[str, str],
        ibic: Iterable[Mapping[str, Any]] | Mapping[str, str],
    ) -> "Vocabulary":
        tag_order = _clean_tags(tags)
        schemes = {"bisac": bisac, "thema": thema, "ibic": ibic}
        descriptions: Dict[str, Mapping[str, str]] = {}
        codes: Dict[str, FrozenSet[str]] = {}
        for scheme, raw in schemes.items():
            table = _clean_scheme(scheme, raw)
            descriptions[scheme] = MappingProxyType(table)
            codes[scheme] = frozenset(table)
        return cls(
            tags=frozenset(tag_order),
            codes=MappingProxyType(codes),
            descriptions=MappingProxyType(descriptions),
            tag_order=tag_order,
        )

    def has_tag(self, tag: Any) -> bool:
        return isinstance(tag, str) and tag in self.tags

    def has_code(self, scheme: str, code: Any) -> bool:
        return isinstance(code, str) and code in self.valid_codes(scheme)

    def valid_codes(self, scheme: str) -> FrozenSet[str]:
        try:
            return self.codes[scheme]
        except KeyError:
            raise VocabularyError(f"Unknown classification scheme: {scheme!r}") from None

    def description_for(self, scheme: str, code: str) -> str:
        return self.descriptions[scheme][code]

    def entries(self, scheme: str) -> List[Tuple[str, str]]:
        """(code, description) pairs in source order, for prompt listings."""
        self.valid_codes(scheme)
        return list(self.descriptions[scheme].items())

    def ordered_tags(self) -> List[str]:
        return list(self.tag_order) if self.tag_order else sorted(self.tags)

    def summary(self) -> Dict[str, int]:
        out = {"tags": len(self.tags)}
        for scheme in SCHEMES:
            out[scheme] = len(self.codes.get(scheme, ()))
        return out


def load_vocabulary(data_dir: Path | str | None = None) -> Vocabulary:
    directory = Path(data_dir) if data_dir else DEFAULT_DATA_DIR
    vocabulary = Vocabulary.from_entries(
        tags=_read_json(directory / "tags.json"),
        bisac=_read_json(directory / "bisac.json"),
        thema=_read_json(directory / "thema.json"),
        ibic=_read_json(directory / "ibic.json"),
    )
    logger.info("Loaded controlled vocabularies from %s: %s", directory, vocabulary.summary())
    return vocabulary


@lru_cache(maxsize=1)
def get_vocabulary() -> Vocabulary:
    """Process-wide vocabulary, loaded on first use and never reloaded."""
    configured = str(getattr(settings, "EDITORIAL_VOCABULARY_DIR", "") or "").strip()
    return load_vocabulary(configured or None)


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError:
        raise VocabularyError(f"Vocabulary file not found: {path}") from None
    except json.JSONDecodeError as exc:
        raise VocabularyError(f"Vocabulary file is not valid JSON: {path} ({exc})") from exc


def _clean_tags(raw: Iterable[Any]) -> Tuple[str, ...]:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
        raise VocabularyError("Tag list must be a list of strings")
    ordered: List[str] = []
    seen = set()
    for item in raw:
        if not isinstance(item, str) or not item.strip():
            raise VocabularyError(f"Invalid tag entry: {item!r}")
        tag = item.strip()
        if tag in seen:
            continue
        seen.add(tag)
        ordered.append(tag)
    return tuple(ordered)


def _clean_scheme(scheme: str, raw: Any) -> Dict[str, str]:
    if isinstance(raw, Mapping):
        pairs: Iterable[Tuple[Any, Any]] = raw.items()
    elif isinstance(raw, Iterable) and not isinstance(raw, (str, bytes)):
        pairs = [_entry_pair(scheme, entry) for entry in raw]
    else:
        raise VocabularyError(f"{scheme}: expected a list of {{code, description}} entries")

    table: Dict[str, str] = {}
    for code, description in pairs:
        if not isinstance(code, str) or not code.strip():
            raise VocabularyError(f"{scheme}: empty or non-string code {code!r}")
        if not isinstance(description, str) or not description.strip():
            raise VocabularyError(f"{scheme}: code {code!r} has no description")
        code = code.strip()
        if code in table:
            raise VocabularyError(f"{scheme}: duplicate code {code!r}")
        table[code] = description.strip()
    return table


def _entry_pair(scheme: str, entry: Any) -> Tuple[Any, Any]:
    if not isinstance(entry, Mapping):
        raise VocabularyError(f"{scheme}: entry must be an object, got {entry!r}")
    return entry.get("code"), entry.get("description")


def resolve_vocabulary(vocabulary: Optional[Vocabulary]) -> Vocabulary:
    return vocabulary if vocabulary is not None else get_vocabulary()
