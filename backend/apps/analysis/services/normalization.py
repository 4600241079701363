from __future__ import annotations

import logging
from copy import deepcopy
from typing import Any, Callable, Dict, List, Mapping, Optional

from .validation import as_list, item_code
from .vocabulary import SCHEMES, TIERS, Vocabulary

logger = logging.getLogger(__name__)

# (scheme, rejected_code) -> replacement code, or None to drop the item.
CodeSubstitute = Callable[[str, str], Optional[str]]

POLICY_DROP = "drop"
POLICY_NEAREST_PREFIX = "nearest_prefix"


def normalize_result(
    candidate: Mapping[str, Any],
    vocabulary: Vocabulary,
    substitute: CodeSubstitute | None = None,
) -> Dict[str, Any]:
    """
    Return a copy of ``candidate`` that only carries vocabulary members.

    Tags outside the tag list are dropped (order preserved). Classification
    items whose code is not valid for their scheme are dropped, unless an
    opt-in ``substitute`` maps the code to a valid one. Every kept item has
    its description replaced by the official one. Applying this twice gives
    the same result as applying it once.
    """
    out: Dict[str, Any] = deepcopy(dict(candidate))
    out["tags"] = [tag for tag in as_list(candidate.get("tags")) if vocabulary.has_tag(tag)]

    raw_classifications = candidate.get("classifications")
    if not isinstance(raw_classifications, Mapping):
        raw_classifications = {}

    classifications: Dict[str, Any] = {}
    for scheme in SCHEMES:
        subject = raw_classifications.get(scheme)
        if not isinstance(subject, Mapping):
            subject = {}
        classifications[scheme] = {
            tier: _normalize_tier(scheme, as_list(subject.get(tier)), vocabulary, substitute)
            for tier in TIERS
        }
    out["classifications"] = classifications
    return out


def _normalize_tier(
    scheme: str,
    items: List[Any],
    vocabulary: Vocabulary,
    substitute: CodeSubstitute | None,
) -> List[Dict[str, Any]]:
    kept: List[Dict[str, Any]] = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        code = item_code(item)
        if not vocabulary.has_code(scheme, code):
            replacement = substitute(scheme, code) if substitute else None
            if not replacement or not vocabulary.has_code(scheme, replacement):
                logger.debug("Dropping invalid %s code %r", scheme, code)
                continue
            logger.info("Replacing invalid %s code %r with %r", scheme, code, replacement)
            code = replacement

        normalized = deepcopy(dict(item))
        normalized["code"] = code
        normalized["description"] = vocabulary.description_for(scheme, code)
        normalized.setdefault("justification", "")
        kept.append(normalized)
    return kept


def nearest_prefix_substitute(vocabulary: Vocabulary, min_prefix: int = 2) -> CodeSubstitute:
    """
    Opt-in strategy: map a rejected code to the valid code of the same
    scheme sharing the longest leading prefix (at least ``min_prefix``
    characters). Ties resolve to the first entry in source order.
    """

    def _substitute(scheme: str, code: str) -> Optional[str]:
        if not code:
            return None
        best_code: Optional[str] = None
        best_len = 0
        for candidate_code, _description in vocabulary.entries(scheme):
            shared = _common_prefix_length(code, candidate_code)
            if shared > best_len:
                best_code, best_len = candidate_code, shared
        if best_len < min_prefix:
            return None
        return best_code

    return _substitute


def substitute_for_policy(policy: str, vocabulary: Vocabulary) -> CodeSubstitute | None:
    policy = str(policy or POLICY_DROP).strip().lower()
    if policy == POLICY_DROP:
        return None
    if policy == POLICY_NEAREST_PREFIX:
        return nearest_prefix_substitute(vocabulary)
    raise ValueError(f"invalid code policy must be one of: {POLICY_DROP} | {POLICY_NEAREST_PREFIX}")


def _common_prefix_length(left: str, right: str) -> int:
    length = 0
    for a, b in zip(left.upper(), right.upper()):
        if a != b:
            break
        length += 1
    return length
