from __future__ import annotations

from django.conf import settings
from django.db import models


class AnalysisJob(models.Model):
    """Ownership record for a queued analysis; the result itself lives in the Celery backend."""

    task_id = models.CharField(max_length=255, unique=True)
    owner = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="analysis_jobs")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["owner", "created_at"], name="analysis_job_owner_created")]

    def __str__(self) -> str:
        return f"analysis job {self.task_id} for {self.owner}"
