"""
Tests for the operational endpoints and the request-id middleware.
"""
import json
from unittest.mock import patch

from django.db import DatabaseError
from django.test import Client, TestCase


class HealthEndpointsTest(TestCase):
    """Test health check endpoints."""

    def setUp(self):
        self.client = Client()

    def test_healthz_returns_ok(self):
        response = self.client.get("/healthz")
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.content)
        self.assertEqual(data["status"], "ok")

    def test_readyz_returns_ok_when_db_answers(self):
        response = self.client.get("/readyz")
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.content)
        self.assertEqual(data["status"], "ok")
        self.assertTrue(data["db"])

    def test_readyz_reports_unavailable_when_db_fails(self):
        with patch("apps.observability.views.connection") as conn:
            conn.cursor.side_effect = DatabaseError("down")
            response = self.client.get("/readyz")
        self.assertEqual(response.status_code, 503)
        self.assertFalse(json.loads(response.content)["db"])

    def test_healthz_rejects_post(self):
        response = self.client.post("/healthz")
        self.assertEqual(response.status_code, 405)


class ObservabilityMiddlewareTest(TestCase):
    """Test request id and timing headers."""

    def setUp(self):
        self.client = Client()

    def test_request_id_added_to_response(self):
        response = self.client.get("/healthz")
        self.assertIn("X-Request-Id", response)
        # UUID4 string
        self.assertEqual(len(response["X-Request-Id"]), 36)

    def test_incoming_request_id_is_reused(self):
        response = self.client.get("/healthz", HTTP_X_REQUEST_ID="abc-123")
        self.assertEqual(response["X-Request-Id"], "abc-123")

    def test_timing_header_added(self):
        response = self.client.get("/healthz")
        self.assertIn("X-Response-Time-ms", response)
        self.assertGreaterEqual(int(response["X-Response-Time-ms"]), 0)

    def test_api_404_is_json(self):
        response = self.client.get("/api/does-not-exist/")
        self.assertEqual(response.status_code, 404)
        self.assertFalse(response.json()["success"])
