"""Tests for the HTTP surface of the letter scanner service."""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, str(Path(__file__).parent.parent))

import main


@pytest.fixture
def http_client():
    return TestClient(main.app)


@pytest.fixture
def fake_llm(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(main, "_llm_client", client)
    return client


class TestExtractEndpoint:
    def test_without_llm_returns_degraded_record(self, http_client: TestClient, visa_letter_text: str, monkeypatch):
        monkeypatch.setattr(main, "_llm_client", None)
        resp = http_client.post("/api/v1/extract", json={"text": visa_letter_text, "ocr_confidence": 0.8})
        assert resp.status_code == 200
        body = resp.json()
        assert body["from"] is None
        assert body["subject"] is None
        assert body["confidence"] == pytest.approx(0.4)

    def test_with_llm_fills_gaps(self, http_client: TestClient, fake_llm, visa_letter_text: str, null_ai_response: str):
        fake_llm.generate.return_value = (null_ai_response, 800)
        resp = http_client.post("/api/v1/extract", json={"text": visa_letter_text, "ocr_confidence": 0.9})
        assert resp.status_code == 200
        body = resp.json()
        assert body["from"] == "Acme Trading Ltd"
        assert body["subject"] == "Visa Extension Request"
        assert body["to"] is None
        assert body["confidence"] == pytest.approx(0.36)
        assert body["sources"] == {"from": "pattern", "subject": "pattern"}

    def test_empty_text_rejected(self, http_client: TestClient):
        resp = http_client.post("/api/v1/extract", json={"text": "   ", "ocr_confidence": 0.9})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Empty letter text"

    def test_missing_confidence_rejected(self, http_client: TestClient):
        resp = http_client.post("/api/v1/extract", json={"text": "Dear Sir"})
        assert resp.status_code == 422


class TestHealthEndpoint:
    def test_without_llm(self, http_client: TestClient, monkeypatch):
        monkeypatch.setattr(main, "_llm_client", None)
        resp = http_client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy", "llm_available": False}

    def test_with_llm(self, http_client: TestClient, fake_llm):
        fake_llm.health.return_value = {"status": "healthy", "ready": True}
        resp = http_client.get("/health")
        body = resp.json()
        assert body["llm_available"] is True
        assert body["llm_health"]["ready"] is True
