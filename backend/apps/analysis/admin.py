from django.contrib import admin

from .models import AnalysisJob


@admin.register(AnalysisJob)
class AnalysisJobAdmin(admin.ModelAdmin):
    list_display = ("task_id", "owner", "created_at")
    search_fields = ("task_id", "owner__username")
