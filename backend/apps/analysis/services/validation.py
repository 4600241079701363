from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Tuple

from .vocabulary import SCHEMES, TIERS, Vocabulary


@dataclass(frozen=True)
class ValidationResult:
    invalid_tags: Tuple[str, ...] = field(default_factory=tuple)
    invalid_bisac: Tuple[str, ...] = field(default_factory=tuple)
    invalid_thema: Tuple[str, ...] = field(default_factory=tuple)
    invalid_ibic: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not (self.invalid_tags or self.invalid_bisac or self.invalid_thema or self.invalid_ibic)

    def invalid_codes(self, scheme: str) -> Tuple[str, ...]:
        return getattr(self, f"invalid_{scheme}")

    def rejected_count(self) -> int:
        return len(self.invalid_tags) + sum(len(self.invalid_codes(scheme)) for scheme in SCHEMES)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "invalidTags": list(self.invalid_tags),
            "invalidBisac": list(self.invalid_bisac),
            "invalidThema": list(self.invalid_thema),
            "invalidIbic": list(self.invalid_ibic),
        }


def detect_invalid_codes(candidate: Mapping[str, Any], vocabulary: Vocabulary) -> ValidationResult:
    """
    Report every tag and classification code in ``candidate`` that is absent
    from the controlled vocabularies. The candidate is never modified.

    Codes are collected per scheme across the main, secondary and related
    tiers, in the order they appear. Missing or empty lists count as valid.
    """
    invalid_tags = tuple(
        _as_text(tag) for tag in as_list(candidate.get("tags")) if not vocabulary.has_tag(tag)
    )
    classifications = candidate.get("classifications")
    if not isinstance(classifications, Mapping):
        classifications = {}

    invalid: Dict[str, Tuple[str, ...]] = {}
    for scheme in SCHEMES:
        invalid[scheme] = tuple(
            code
            for code in _scheme_codes(classifications.get(scheme))
            if not vocabulary.has_code(scheme, code)
        )

    return ValidationResult(
        invalid_tags=invalid_tags,
        invalid_bisac=invalid["bisac"],
        invalid_thema=invalid["thema"],
        invalid_ibic=invalid["ibic"],
    )


def iter_tier_items(subject: Any) -> Iterator[Tuple[str, Any]]:
    """Yield ``(tier, item)`` over main, secondary and related, in that order."""
    if not isinstance(subject, Mapping):
        return
    for tier in TIERS:
        for item in as_list(subject.get(tier)):
            yield tier, item


def item_code(item: Any) -> str:
    if isinstance(item, Mapping):
        return _as_text(item.get("code"))
    return ""


def _scheme_codes(subject: Any) -> List[str]:
    return [item_code(item) for _tier, item in iter_tier_items(subject)]


def as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
