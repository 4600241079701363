from __future__ import annotations

import logging

from celery.result import AsyncResult
from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from editorial.celery import app as celery_app

from .models import AnalysisJob
from .serializers import AnalysisRequestSerializer, CitationRequestSerializer, TranslationRequestSerializer
from .services.gateway import GenerationError
from .services.pipeline import EditorialAnalysisService, build_citations
from .tasks import analyze_manuscript

logger = logging.getLogger(__name__)

ANALYSIS_ERROR_DETAIL = "Internal server error: the document could not be processed."
TRANSLATION_ERROR_DETAIL = "Internal server error: the content could not be translated."

_JOB_STATES = {
    "PENDING": "pending",
    "RECEIVED": "pending",
    "STARTED": "running",
    "RETRY": "running",
    "SUCCESS": "completed",
    "FAILURE": "failed",
    "REVOKED": "failed",
}


class AnalysisViewSet(viewsets.ViewSet):
    def get_service(self) -> EditorialAnalysisService:
        return EditorialAnalysisService()

    def create(self, request):
        serializer = AnalysisRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        text = serializer.validated_data["text"]
        word_count = serializer.validated_data["wordCount"]

        try:
            result = self.get_service().analyze(text, word_count)
        except GenerationError:
            logger.error("Manuscript analysis failed", exc_info=True)
            return Response({"detail": ANALYSIS_ERROR_DETAIL}, status=status.HTTP_502_BAD_GATEWAY)
        return Response(result)

    @action(detail=False, methods=["post"], url_path="translation")
    def translation(self, request):
        serializer = TranslationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            translated = self.get_service().translate(serializer.validated_data["data"])
        except GenerationError:
            logger.error("Translation failed", exc_info=True)
            return Response({"detail": TRANSLATION_ERROR_DETAIL}, status=status.HTTP_502_BAD_GATEWAY)
        return Response(translated)

    @action(detail=False, methods=["post"], url_path="citations")
    def citations(self, request):
        serializer = CitationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        citations = build_citations(
            data["title"],
            data["authorName"],
            {"publisher": data["publisher"], "year": data["year"], "city": data["city"]},
        )
        return Response(citations)


class AnalysisJobViewSet(viewsets.ViewSet):
    def get_queryset(self):
        return AnalysisJob.objects.filter(owner=self.request.user)

    def create(self, request):
        serializer = AnalysisRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        job = analyze_manuscript.delay(
            serializer.validated_data["text"],
            serializer.validated_data["wordCount"],
        )
        AnalysisJob.objects.create(task_id=str(job.id), owner=request.user)
        return Response({"jobId": str(job.id), "status": "pending"}, status=status.HTTP_202_ACCEPTED)

    def retrieve(self, request, pk=None):
        record = get_object_or_404(self.get_queryset(), task_id=str(pk))
        job = AsyncResult(record.task_id, app=celery_app)
        state = _JOB_STATES.get(job.state, "pending")
        body = {"jobId": str(pk), "status": state}
        if state == "completed":
            payload = job.result if isinstance(job.result, dict) else {}
            if payload.get("status") == "ok":
                body["result"] = payload.get("result", {})
            else:
                body["status"] = "failed"
                body["error"] = str(payload.get("error") or ANALYSIS_ERROR_DETAIL)
        elif state == "failed":
            body["error"] = ANALYSIS_ERROR_DETAIL
        return Response(body)
