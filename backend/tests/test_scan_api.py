"""Tests for POST /api/v1/scan and /api/v1/scan/export."""

import os
import unittest
from unittest.mock import AsyncMock, patch

import httpx
from fastapi.testclient import TestClient

from conftest import make_image_bytes
from imei_scanner.core.config import get_settings
from imei_scanner.main import app
from imei_scanner.services.ai.common.providers.base import ProviderResult

MOCK_ENV = {
    "ENABLE_VISION_AI": "true",
    "AI_VISION_PROVIDER": "mock",
    "AI_VISION_MODEL": "",
    "AI_ALLOWED_PROVIDERS": "mock",
    "AI_ALLOWED_MODELS": "",
    "ENABLE_AI_OVERRIDES": "false",
}


class ScanEndpointTests(unittest.TestCase):
    def setUp(self):
        get_settings.cache_clear()
        self.client = TestClient(app)

    def tearDown(self):
        self.client.close()
        get_settings.cache_clear()

    def _post_image(self, content: bytes, filename="boxes.jpg", content_type="image/jpeg"):
        return self.client.post(
            "/api/v1/scan",
            files={"file": (filename, content, content_type)},
        )

    @patch.dict(os.environ, MOCK_ENV, clear=False)
    def test_scan_success(self):
        resp = self._post_image(make_image_bytes("JPEG"))

        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["outcome"], "success")
        self.assertEqual(data["deviceCount"], 2)
        self.assertEqual(data["devices"][0], {"position": "left", "imei": "351756051523999"})
        self.assertIsNone(data["error"])
        self.assertIsNone(data["errorStage"])
        self.assertEqual(data["warnings"], [])

    @patch.dict(os.environ, MOCK_ENV, clear=False)
    def test_scan_unsupported_type_is_hard_error_outcome(self):
        resp = self._post_image(make_image_bytes("GIF"), "boxes.gif", "image/gif")

        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["outcome"], "hard_error")
        self.assertEqual(data["errorStage"], "encoding")
        self.assertEqual(data["devices"], [])
        self.assertIn("image/gif", data["error"])

    @patch.dict(os.environ, MOCK_ENV, clear=False)
    def test_scan_soft_parse_error(self):
        mock_generate = AsyncMock(
            return_value=ProviderResult(raw_text="I can't tell.", model="m", provider="mock")
        )
        with patch("imei_scanner.services.ai.common.providers.mock.MockProvider.generate", mock_generate):
            resp = self._post_image(make_image_bytes("PNG"), "boxes.png", "image/png")

        data = resp.json()
        self.assertEqual(data["outcome"], "soft_error")
        self.assertEqual(data["deviceCount"], 0)
        self.assertIn("clearer image", data["error"])

    @patch.dict(os.environ, MOCK_ENV, clear=False)
    def test_scan_inference_failure(self):
        mock_generate = AsyncMock(side_effect=httpx.ConnectError("Connection reset by peer"))
        with patch("imei_scanner.services.ai.common.providers.mock.MockProvider.generate", mock_generate):
            resp = self._post_image(make_image_bytes("JPEG"))

        data = resp.json()
        self.assertEqual(data["outcome"], "hard_error")
        self.assertEqual(data["errorStage"], "inference")
        self.assertEqual(data["error"], "API Error: Connection reset by peer")

    @patch.dict(os.environ, {"ENABLE_VISION_AI": "false"}, clear=False)
    def test_scan_disabled_returns_404(self):
        resp = self._post_image(make_image_bytes("JPEG"))
        self.assertEqual(resp.status_code, 404)

    @patch.dict(os.environ, MOCK_ENV, clear=False)
    def test_scan_without_file_returns_422(self):
        resp = self.client.post("/api/v1/scan")
        self.assertEqual(resp.status_code, 422)

    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})
        self.assertEqual(resp.headers["X-Content-Type-Options"], "nosniff")


class ExportEndpointTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def tearDown(self):
        self.client.close()

    def test_export_csv(self):
        resp = self.client.post(
            "/api/v1/scan/export",
            json={"devices": [{"position": "A", "imei": "123"}, {"position": "B", "imei": "456"}]},
        )

        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.headers["content-type"].startswith("text/csv"))
        self.assertIn('filename="imei-scan-', resp.headers["content-disposition"])
        self.assertEqual(resp.text, "Position,IMEI\nA,123\nB,456")

    def test_export_without_devices_returns_400(self):
        resp = self.client.post("/api/v1/scan/export", json={"devices": []})
        self.assertEqual(resp.status_code, 400)
