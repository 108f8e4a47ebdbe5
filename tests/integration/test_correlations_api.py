"""
Integration tests for the correlations API.

Tests the full request flow:
- Sync and async analysis runs
- Run status polling
- CSV export
- Origin validation on POST
"""

from datetime import timedelta
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from foodtrigger.models import AnalysisRun, RunStatus
from tests.factories import BASE_TIME, create_dose_response_scenario


def analysis_body(scenario=None, **overrides):
    end = scenario["end"] if scenario else BASE_TIME + timedelta(days=30)
    body = {
        "date_range_start": (BASE_TIME - timedelta(days=1)).isoformat(),
        "date_range_end": end.isoformat(),
    }
    body.update(overrides)
    return body


class TestAnalyze:
    """Tests for POST /correlations/analyze."""

    def test_sync_run_returns_findings(self, client: TestClient, db: Session):
        scenario = create_dose_response_scenario(db)

        response = client.post("/correlations/analyze", json=analysis_body(scenario))

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "completed"
        assert data["result_count"] == 1
        assert data["foods_scanned"] == 1
        finding = data["results"][0]
        assert finding["food_ids"] == ["onion"]
        assert finding["symptom_id"] == "bloating"
        assert finding["correlation_score"] == 1.0
        assert finding["is_synergistic"] is False

    def test_sync_run_with_no_data(self, client: TestClient):
        response = client.post("/correlations/analyze", json=analysis_body())

        assert response.status_code == 200
        assert response.json()["results"] == []

    def test_default_range(self, client: TestClient):
        response = client.post("/correlations/analyze", json={})

        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    def test_async_run_is_queued(self, client: TestClient, db: Session):
        with patch(
            "foodtrigger.workers.correlation_worker.run_correlation_analysis.send"
        ) as mock_send:
            response = client.post(
                "/correlations/analyze", json=analysis_body(async_mode=True)
            )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "pending"
        mock_send.assert_called_once_with(data["run_id"])

    def test_inverted_range_is_rejected(self, client: TestClient, db: Session):
        body = {
            "date_range_start": BASE_TIME.isoformat(),
            "date_range_end": (BASE_TIME - timedelta(days=1)).isoformat(),
        }

        response = client.post("/correlations/analyze", json=body)

        assert response.status_code == 422
        assert db.query(AnalysisRun).count() == 0

    def test_invalid_body_is_rejected(self, client: TestClient):
        response = client.post(
            "/correlations/analyze", json={"date_range_start": "not a date"}
        )

        assert response.status_code == 422

    def test_failed_run_returns_500(self, client: TestClient, db: Session):
        with patch(
            "foodtrigger.services.analysis_run_service.AnalysisOrchestrator.run",
            side_effect=RuntimeError("boom"),
        ):
            response = client.post("/correlations/analyze", json=analysis_body())

        assert response.status_code == 500
        run = db.query(AnalysisRun).one()
        assert response.json()["detail"] == f"Analysis run {run.id} failed"
        assert run.status == RunStatus.FAILED.value


class TestOriginValidation:
    def test_post_without_origin_is_forbidden(self, client: TestClient):
        del client.headers["referer"]

        response = client.post("/correlations/analyze", json=analysis_body())

        assert response.status_code == 403

    def test_cross_origin_post_is_forbidden(self, client: TestClient):
        response = client.post(
            "/correlations/analyze",
            json=analysis_body(),
            headers={"origin": "http://evil.example"},
        )

        assert response.status_code == 403

    def test_get_needs_no_origin(self, client: TestClient):
        del client.headers["referer"]

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestRuns:
    """Tests for GET /correlations/runs/{id} and its CSV export."""

    def _completed_run_id(self, client: TestClient, db: Session) -> int:
        scenario = create_dose_response_scenario(db)
        response = client.post("/correlations/analyze", json=analysis_body(scenario))
        return response.json()["run_id"]

    def _pending_run_id(self, client: TestClient) -> int:
        with patch(
            "foodtrigger.workers.correlation_worker.run_correlation_analysis.send"
        ):
            response = client.post(
                "/correlations/analyze", json=analysis_body(async_mode=True)
            )
        return response.json()["run_id"]

    def test_get_run(self, client: TestClient, db: Session):
        run_id = self._completed_run_id(client, db)

        response = client.get(f"/correlations/runs/{run_id}")

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["results"][0]["food_ids"] == ["onion"]

    def test_get_pending_run(self, client: TestClient):
        run_id = self._pending_run_id(client)

        response = client.get(f"/correlations/runs/{run_id}")

        assert response.status_code == 200
        assert response.json()["status"] == "pending"

    def test_get_unknown_run(self, client: TestClient):
        response = client.get("/correlations/runs/999")

        assert response.status_code == 404

    def test_export_csv(self, client: TestClient, db: Session):
        run_id = self._completed_run_id(client, db)

        response = client.get(f"/correlations/runs/{run_id}/export.csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert f"correlations_run_{run_id}.csv" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0].startswith("foods,symptom,correlation_score")
        assert lines[1].startswith("onion,bloating,1.0000")

    def test_export_pending_run_conflicts(self, client: TestClient):
        run_id = self._pending_run_id(client)

        response = client.get(f"/correlations/runs/{run_id}/export.csv")

        assert response.status_code == 409

    def test_export_unknown_run(self, client: TestClient):
        response = client.get("/correlations/runs/999/export.csv")

        assert response.status_code == 404
