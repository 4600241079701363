from __future__ import annotations

import logging
from typing import Any, Dict

from celery import shared_task
from celery.exceptions import SoftTimeLimitExceeded
from django.conf import settings

from .services.gateway import GenerationError
from .services.pipeline import EditorialAnalysisService

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = "The document could not be processed."
ANALYSIS_TIMEOUT_MESSAGE = "The analysis did not finish within the time limit."


@shared_task(
    bind=True,
    soft_time_limit=settings.EDITORIAL_ANALYSIS_TIME_LIMIT_S,
    time_limit=settings.EDITORIAL_ANALYSIS_TIME_LIMIT_S + 30,
)
def analyze_manuscript(self, text: str, word_count: int) -> Dict[str, Any]:
    try:
        result = EditorialAnalysisService().analyze(text, word_count)
    except GenerationError:
        logger.error("Manuscript analysis job %s failed", self.request.id, exc_info=True)
        return {"status": "error", "error": ANALYSIS_FAILED_MESSAGE}
    except SoftTimeLimitExceeded:
        logger.error("Manuscript analysis job %s hit the time limit", self.request.id)
        return {"status": "error", "error": ANALYSIS_TIMEOUT_MESSAGE}
    return {"status": "ok", "result": result}
