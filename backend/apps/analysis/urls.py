from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import AnalysisJobViewSet, AnalysisViewSet

router = SimpleRouter()
router.register("jobs", AnalysisJobViewSet, basename="analysis-job")

urlpatterns = [
    path("", AnalysisViewSet.as_view({"post": "create"}), name="analysis"),
    path("translation/", AnalysisViewSet.as_view({"post": "translation"}), name="analysis-translation"),
    path("citations/", AnalysisViewSet.as_view({"post": "citations"}), name="analysis-citations"),
    path("", include(router.urls)),
]
