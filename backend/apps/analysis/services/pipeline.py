from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from django.conf import settings

from .gateway import GenerationError, GenerationGateway
from .normalization import substitute_for_policy
from .orchestration import ClassificationLoop, LoopOutcome
from .prompts import build_analysis_prompt, build_translation_prompt
from .schemas import TRANSLATION_SCHEMA, CitationInfo, Citations
from .vocabulary import Vocabulary, resolve_vocabulary

logger = logging.getLogger(__name__)


class EditorialAnalysisService:
    """
    Entry point for manuscript analysis: prompt assembly, the classification
    loop and the small editorial helpers that ride along (translation and
    citations).
    """

    def __init__(
        self,
        gateway: Any = None,
        vocabulary: Vocabulary | None = None,
        *,
        max_retries: int | None = None,
        max_chars: int | None = None,
        language: str | None = None,
        code_policy: str | None = None,
    ) -> None:
        self.gateway = gateway if gateway is not None else GenerationGateway()
        self.vocabulary = resolve_vocabulary(vocabulary)
        self.max_chars = int(max_chars if max_chars is not None else settings.EDITORIAL_MAX_MANUSCRIPT_CHARS)
        self.language = language or settings.EDITORIAL_OUTPUT_LANGUAGE
        policy = code_policy if code_policy is not None else settings.EDITORIAL_INVALID_CODE_POLICY
        self.loop = ClassificationLoop(
            self.gateway,
            self.vocabulary,
            max_retries=max_retries,
            substitute=substitute_for_policy(policy, self.vocabulary),
        )

    def analyze(self, text: str, word_count: int, *, max_retries: int | None = None) -> Dict[str, Any]:
        """
        Analyse a manuscript. Raises ``GenerationError`` when the backend is
        unavailable; imperfect classifications are never an error.
        """
        clipped = text[: self.max_chars]
        if len(clipped) < len(text):
            logger.info("Manuscript clipped from %d to %d characters", len(text), len(clipped))

        base_prompt = build_analysis_prompt(clipped, self.vocabulary, language=self.language)
        outcome = self.loop.run(base_prompt, max_retries=max_retries)
        return self._finalize(outcome, text=text, word_count=word_count)

    def translate(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        payload = self.gateway.generate(
            build_translation_prompt(data),
            TRANSLATION_SCHEMA,
            schema_name="editorial_translation",
        )
        return {key: str(payload.get(key, "")) for key in ("title", "authorName", "synopsis", "authorBio")}

    def _finalize(self, outcome: LoopOutcome, *, text: str, word_count: int) -> Dict[str, Any]:
        if outcome.failed:
            raise outcome.error or GenerationError("Generation failed")
        result = dict(outcome.result or {})
        result["wordCount"] = int(word_count)
        result["rawText"] = text
        result["classificationReport"] = outcome.report()
        return result


def build_citations(title: str, author: str, info: CitationInfo | Mapping[str, Any] | None = None) -> Citations:
    """Bibliographic citations in the five house styles, with placeholders for missing data."""
    info = info or {}
    publisher = str(info.get("publisher") or "").strip() or "[Editorial]"
    year = str(info.get("year") or "").strip() or "[Año]"
    city = str(info.get("city") or "").strip() or "[Ciudad]"
    return {
        "apa": f"{author}. ({year}). *{title}*. {publisher}.",
        "mla": f"{author}. *{title}*. {publisher}, {year}.",
        "chicago": f"{author}. *{title}*. {city}: {publisher}, {year}.",
        "harvard": f"{author} ({year}). *{title}*. {city}: {publisher}.",
        "vancouver": f"{author}. {title}. {city}: {publisher}; {year}.",
    }
