from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from django.conf import settings

from apps.analysis.services.gateway import GenerationGateway
from apps.analysis.services.prompts import join_sections, section
from apps.analysis.services.schemas import strict_object
from apps.analysis.services.vocabulary import SCHEMES

from . import prompts

logger = logging.getLogger(__name__)

READING_RECOMMENDATIONS = ("PUBLICAR", "PUBLICAR_CON_CAMBIOS", "RECHAZAR")


class UnknownCollateralKind(ValueError):
    pass


@dataclass(frozen=True)
class CollateralKind:
    name: str
    task: str
    schema: Dict[str, Any]


_STR = {"type": "string"}
_STR_LIST = {"type": "array", "items": {"type": "string"}}

COLLATERAL_KINDS: Dict[str, CollateralKind] = {
    kind.name: kind
    for kind in (
        CollateralKind("article", prompts.ARTICLE_TASK, strict_object({"article": _STR})),
        CollateralKind("press_release", prompts.PRESS_RELEASE_TASK, strict_object({"pressRelease": _STR})),
        CollateralKind(
            "interview",
            prompts.INTERVIEW_TASK,
            strict_object({"introduction": _STR, "questions": _STR_LIST}),
        ),
        CollateralKind("back_cover", prompts.BACK_COVER_TASK, strict_object({"backCoverText": _STR})),
        CollateralKind(
            "social_media",
            prompts.SOCIAL_MEDIA_TASK,
            strict_object({"twitter": _STR, "instagram": _STR, "facebook": _STR, "linkedin": _STR}),
        ),
        CollateralKind(
            "sales_pitch",
            prompts.SALES_PITCH_TASK,
            strict_object({
                "targetAudience": _STR,
                "salesHooks": _STR_LIST,
                "differentiators": _STR_LIST,
                "objectionHandlers": _STR_LIST,
                "elevatorPitch": _STR,
            }),
        ),
        CollateralKind(
            "bookstore_email",
            prompts.BOOKSTORE_EMAIL_TASK,
            strict_object({"subject": _STR, "body": _STR}),
        ),
        CollateralKind(
            "reading_report",
            prompts.READING_REPORT_TASK,
            strict_object({
                "summary": _STR,
                "literaryAnalysis": _STR,
                "strengths": _STR_LIST,
                "weaknesses": _STR_LIST,
                "marketAnalysis": _STR,
                "targetAudience": _STR,
                "recommendation": {"type": "string", "enum": list(READING_RECOMMENDATIONS)},
                "recommendationJustification": _STR,
            }),
        ),
        CollateralKind(
            "comparables",
            prompts.COMPARABLES_TASK,
            strict_object({
                "comparables": {
                    "type": "array",
                    "items": strict_object({
                        "title": _STR,
                        "author": _STR,
                        "publisher": _STR,
                        "year": {"type": "integer"},
                        "reason": _STR,
                        "differentiator": _STR,
                    }),
                },
                "marketPositioning": _STR,
            }),
        ),
        CollateralKind(
            "seo_keywords",
            prompts.SEO_KEYWORDS_TASK,
            strict_object({
                "primaryKeywords": _STR_LIST,
                "longTailKeywords": _STR_LIST,
                "thematicKeywords": _STR_LIST,
                "audienceKeywords": _STR_LIST,
                "amazonCategories": _STR_LIST,
                "metaDescription": _STR,
            }),
        ),
    )
}


def get_kind(name: str) -> CollateralKind:
    try:
        return COLLATERAL_KINDS[str(name).strip().lower()]
    except KeyError:
        raise UnknownCollateralKind(f"Unknown collateral kind: {name!r}") from None


class CollateralService:
    """Marketing collateral generated from an analysed manuscript."""

    def __init__(self, gateway: Any = None, *, language: str | None = None) -> None:
        self.gateway = gateway if gateway is not None else GenerationGateway()
        self.language = language or settings.EDITORIAL_OUTPUT_LANGUAGE

    def generate(self, kind: str, analysis: Mapping[str, Any]) -> Dict[str, Any]:
        selected = get_kind(kind)
        prompt = join_sections(
            f"TASK: {selected.task}",
            f"LANGUAGE: write every text in {self.language}.",
            section("BOOK DATA", json.dumps(book_brief(analysis), ensure_ascii=False, indent=2)),
        )
        logger.info("Generating %s collateral for %r", selected.name, analysis.get("title", ""))
        return self.gateway.generate(
            prompt,
            selected.schema,
            schema_name=f"collateral_{selected.name}",
            system_prompt=prompts.MARKETING_EDITOR_SYSTEM_PROMPT,
        )


def book_brief(analysis: Mapping[str, Any]) -> Dict[str, Any]:
    """The subset of an analysis result worth sending to the model; the manuscript text is left out."""
    brief: Dict[str, Any] = {
        "title": str(analysis.get("title", "") or ""),
        "subtitle": analysis.get("foundSubtitle") or "",
        "authorName": str(analysis.get("authorName", "") or ""),
        "authorBio": str(analysis.get("authorBio", "") or ""),
        "synopsis": str(analysis.get("synopsis", "") or ""),
        "tags": [str(tag) for tag in analysis.get("tags", []) or [] if str(tag).strip()],
    }
    word_count = analysis.get("wordCount")
    if isinstance(word_count, int) and word_count > 0:
        brief["wordCount"] = word_count
    subjects = _main_subjects(analysis.get("classifications"))
    if subjects:
        brief["subjects"] = subjects
    return brief


def _main_subjects(classifications: Any) -> List[str]:
    if not isinstance(classifications, Mapping):
        return []
    subjects: List[str] = []
    for scheme in SCHEMES:
        subject = classifications.get(scheme)
        if not isinstance(subject, Mapping):
            continue
        for item in subject.get("main", []) or []:
            if isinstance(item, Mapping) and item.get("code"):
                subjects.append(f"{scheme.upper()} {item.get('code')}: {item.get('description', '')}".strip())
    return subjects
