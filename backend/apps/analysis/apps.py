from __future__ import annotations

from django.apps import AppConfig


class AnalysisConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.analysis"
    label = "analysis"

    def ready(self) -> None:
        # Controlled vocabularies are built once at start-up, before any request is served.
        from .services.vocabulary import get_vocabulary

        get_vocabulary()
