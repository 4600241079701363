from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, override_settings
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient, APITestCase

from apps.analysis.models import AnalysisJob
from apps.analysis.services.gateway import ResponseParseError, TransportError
from apps.analysis.services.pipeline import EditorialAnalysisService
from apps.analysis.tasks import ANALYSIS_FAILED_MESSAGE, analyze_manuscript
from apps.analysis.views import ANALYSIS_ERROR_DETAIL, TRANSLATION_ERROR_DETAIL, AnalysisViewSet

from .fixtures import FakeGateway, candidate_with_invalid_tag, small_vocabulary, valid_candidate


def _service_with(gateway):
    return EditorialAnalysisService(gateway, small_vocabulary(), max_retries=3)


@override_settings(EDITORIAL_ANALYSIS_BUDGET_S=0, EDITORIAL_INVALID_CODE_POLICY="drop")
class AnalysisApiTests(APITestCase):
    def setUp(self):
        user = get_user_model().objects.create_user(username="editor", password="pass12345")
        token = Token.objects.create(user=user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")

    def test_unauthenticated_requests_receive_401(self):
        client = APIClient()
        response = client.post("/api/analysis/", {"text": "texto", "wordCount": 1}, format="json")
        citations = client.post("/api/analysis/citations/", {"title": "T", "authorName": "A"}, format="json")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(citations.status_code, 401)

    def test_analysis_returns_normalized_result(self):
        gateway = FakeGateway(candidate_with_invalid_tag())
        with patch.object(AnalysisViewSet, "get_service", return_value=_service_with(gateway)):
            response = self.client.post("/api/analysis/", {"text": "Érase una vez.", "wordCount": 3}, format="json")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["tags"], ["novela"])
        self.assertEqual(body["wordCount"], 3)
        self.assertEqual(body["rawText"], "Érase una vez.")
        self.assertEqual(body["classificationReport"]["outcome"], "exhausted")
        self.assertEqual(gateway.calls, 3)

    def test_analysis_requires_text_and_word_count(self):
        missing = self.client.post("/api/analysis/", {"text": "texto"}, format="json")
        blank = self.client.post("/api/analysis/", {"text": "   ", "wordCount": 0}, format="json")
        negative = self.client.post("/api/analysis/", {"text": "texto", "wordCount": -1}, format="json")
        self.assertEqual(missing.status_code, 400)
        self.assertEqual(blank.status_code, 400)
        self.assertEqual(negative.status_code, 400)

    def test_fractional_word_count_is_rounded(self):
        gateway = FakeGateway(valid_candidate())
        with patch.object(AnalysisViewSet, "get_service", return_value=_service_with(gateway)):
            response = self.client.post("/api/analysis/", {"text": "texto", "wordCount": 12.6}, format="json")
        not_a_number = self.client.post("/api/analysis/", {"text": "texto", "wordCount": "many"}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["wordCount"], 13)
        self.assertEqual(not_a_number.status_code, 400)

    def test_generation_failure_maps_to_generic_502(self):
        gateway = FakeGateway(TransportError("upstream said: secret details"))
        with patch.object(AnalysisViewSet, "get_service", return_value=_service_with(gateway)):
            response = self.client.post("/api/analysis/", {"text": "texto", "wordCount": 1}, format="json")

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json(), {"detail": ANALYSIS_ERROR_DETAIL})

    def test_translation_endpoint(self):
        translated = {"title": "The Lighthouse House", "authorName": "Ana Ruiz", "synopsis": "A woman returns.", "authorBio": "Ana writes."}
        gateway = FakeGateway(translated)
        with patch.object(AnalysisViewSet, "get_service", return_value=_service_with(gateway)):
            response = self.client.post("/api/analysis/translation/", {"data": valid_candidate()}, format="json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), translated)

    def test_translation_failure_maps_to_502(self):
        gateway = FakeGateway(ResponseParseError("bad"))
        with patch.object(AnalysisViewSet, "get_service", return_value=_service_with(gateway)):
            response = self.client.post("/api/analysis/translation/", {"data": valid_candidate()}, format="json")

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json(), {"detail": TRANSLATION_ERROR_DETAIL})

    def test_translation_rejects_non_object(self):
        response = self.client.post("/api/analysis/translation/", {"data": ["not", "an", "object"]}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_citations_endpoint(self):
        response = self.client.post(
            "/api/analysis/citations/",
            {"title": "La casa del faro", "authorName": "Ana Ruiz", "year": "2021"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["apa"], "Ana Ruiz. (2021). *La casa del faro*. [Editorial].")


class AnalysisJobApiTests(APITestCase):
    def setUp(self):
        user_model = get_user_model()
        self.user = user_model.objects.create_user(username="editor", password="pass12345")
        self.other_user = user_model.objects.create_user(username="reviewer", password="pass12345")
        self.token = Token.objects.create(user=self.user)
        self.other_token = Token.objects.create(user=self.other_user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.token.key}")
        AnalysisJob.objects.create(task_id="job-1", owner=self.user)

    def test_job_submission_queues_task(self):
        with patch("apps.analysis.views.analyze_manuscript.delay", return_value=SimpleNamespace(id="job-2")) as delay:
            response = self.client.post("/api/analysis/jobs/", {"text": "texto", "wordCount": 1}, format="json")

        self.assertEqual(response.status_code, 202)
        self.assertEqual(response.json(), {"jobId": "job-2", "status": "pending"})
        delay.assert_called_once_with("texto", 1)
        self.assertTrue(AnalysisJob.objects.filter(task_id="job-2", owner=self.user).exists())

    def test_job_submission_validates_input(self):
        with patch("apps.analysis.views.analyze_manuscript.delay") as delay:
            response = self.client.post("/api/analysis/jobs/", {"wordCount": 1}, format="json")
        self.assertEqual(response.status_code, 400)
        delay.assert_not_called()

    def test_completed_job_returns_result(self):
        job = SimpleNamespace(state="SUCCESS", result={"status": "ok", "result": {"title": "La casa del faro"}})
        with patch("apps.analysis.views.AsyncResult", return_value=job):
            response = self.client.get("/api/analysis/jobs/job-1/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"jobId": "job-1", "status": "completed", "result": {"title": "La casa del faro"}},
        )

    def test_completed_job_with_error_payload_is_failed(self):
        job = SimpleNamespace(state="SUCCESS", result={"status": "error", "error": ANALYSIS_FAILED_MESSAGE})
        with patch("apps.analysis.views.AsyncResult", return_value=job):
            response = self.client.get("/api/analysis/jobs/job-1/")

        body = response.json()
        self.assertEqual(body["status"], "failed")
        self.assertEqual(body["error"], ANALYSIS_FAILED_MESSAGE)

    def test_running_and_crashed_jobs(self):
        with patch("apps.analysis.views.AsyncResult", return_value=SimpleNamespace(state="STARTED", result=None)):
            running = self.client.get("/api/analysis/jobs/job-1/").json()
        with patch("apps.analysis.views.AsyncResult", return_value=SimpleNamespace(state="FAILURE", result=None)):
            crashed = self.client.get("/api/analysis/jobs/job-1/").json()

        self.assertEqual(running, {"jobId": "job-1", "status": "running"})
        self.assertEqual(crashed, {"jobId": "job-1", "status": "failed", "error": ANALYSIS_ERROR_DETAIL})

    def test_user_cannot_read_other_users_job(self):
        with patch("apps.analysis.views.analyze_manuscript.delay", return_value=SimpleNamespace(id="job-a")):
            self.client.post("/api/analysis/jobs/", {"text": "secreto manuscrito", "wordCount": 2}, format="json")

        job = SimpleNamespace(state="SUCCESS", result={"status": "ok", "result": {"rawText": "secreto manuscrito"}})
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {self.other_token.key}")
        with patch("apps.analysis.views.AsyncResult", return_value=job) as async_result:
            response = self.client.get("/api/analysis/jobs/job-a/")

        self.assertEqual(response.status_code, 404)
        self.assertNotIn("secreto", response.content.decode())
        async_result.assert_not_called()

    def test_unknown_job_id_is_404(self):
        with patch("apps.analysis.views.AsyncResult") as async_result:
            response = self.client.get("/api/analysis/jobs/no-such-job/")
        self.assertEqual(response.status_code, 404)
        async_result.assert_not_called()


@override_settings(EDITORIAL_ANALYSIS_BUDGET_S=0, EDITORIAL_INVALID_CODE_POLICY="drop")
class AnalyzeManuscriptTaskTests(SimpleTestCase):
    def test_task_returns_ok_payload(self):
        service = _service_with(FakeGateway(valid_candidate()))
        with patch("apps.analysis.tasks.EditorialAnalysisService", return_value=service):
            payload = analyze_manuscript.apply(args=("texto", 1)).get()

        self.assertEqual(payload["status"], "ok")
        self.assertEqual(payload["result"]["title"], "La casa del faro")

    def test_task_reports_generation_failure(self):
        service = _service_with(FakeGateway(TransportError("down")))
        with patch("apps.analysis.tasks.EditorialAnalysisService", return_value=service):
            payload = analyze_manuscript.apply(args=("texto", 1)).get()

        self.assertEqual(payload, {"status": "error", "error": ANALYSIS_FAILED_MESSAGE})
