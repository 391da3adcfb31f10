"""
Tests for routes/reports.py and main.py — HTTP surface of the report-card engine.
"""

import copy
import io
import json
import os
import sys
import zipfile

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from main import app

SAMPLE_TERM = os.path.join(os.path.dirname(__file__), "..", "sample_data", "sample_term_results.json")


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def payload():
    with open(SAMPLE_TERM, encoding="utf-8") as fh:
        return json.load(fh)


class TestReportCardEndpoint:
    """POST /api/reports/report-card."""

    def test_returns_pdf(self, client, payload):
        response = client.post("/api/reports/report-card", json=payload)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="amina_nkongho_first_term.pdf"' in response.headers["content-disposition"]
        assert int(response.headers["x-page-count"]) >= 1
        assert response.content.startswith(b"%PDF-")

    def test_french_locale(self, client, payload):
        response = client.post("/api/reports/report-card", json={**payload, "locale": "fr"})
        assert response.status_code == 200

    def test_unsupported_locale(self, client, payload):
        response = client.post("/api/reports/report-card", json={**payload, "locale": "de"})
        assert response.status_code == 400

    def test_no_results(self, client):
        response = client.post("/api/reports/report-card", json={"period_type": "term"})
        assert response.status_code == 400
        assert "No results" in response.json()["detail"]

    def test_invalid_period_type(self, client, payload):
        response = client.post("/api/reports/report-card", json={**payload, "period_type": "month"})
        assert response.status_code == 400
        assert "period type" in response.json()["detail"]

    def test_invalid_score(self, client, payload):
        bad = copy.deepcopy(payload)
        bad["results"]["subject_breakdown"][0]["score"] = -1
        response = client.post("/api/reports/report-card", json=bad)
        assert response.status_code == 400


class TestBulkEndpoint:
    """POST /api/reports/report-cards/bulk."""

    def test_returns_zip(self, client, payload):
        body = {
            "school_info": payload["school_info"],
            "class_name": "Form 3 B",
            "students": [
                {"student_info": payload["student_info"], "period_type": "term", "results": payload["results"]},
            ],
        }
        response = client.post("/api/reports/report-cards/bulk", json=body)
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"
        assert 'filename="report_cards_Form_3_B.zip"' in response.headers["content-disposition"]
        archive = zipfile.ZipFile(io.BytesIO(response.content))
        assert archive.namelist() == ["Amina_Nkongho_STU-2024-017.pdf"]

    def test_no_students(self, client):
        response = client.post("/api/reports/report-cards/bulk", json={"students": []})
        assert response.status_code == 400

    def test_students_without_results(self, client, payload):
        body = {"school_info": payload["school_info"], "students": [{"student_info": {}, "results": None}]}
        response = client.post("/api/reports/report-cards/bulk", json=body)
        assert response.status_code == 400
        assert "No students with results" in response.json()["detail"]


class TestServiceEndpoints:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_config(self, client):
        data = client.get("/api/config").json()
        assert "en" in data["locales"] and "fr" in data["locales"]
        assert data["grade_bands"][0]["label"] == "excellent"
