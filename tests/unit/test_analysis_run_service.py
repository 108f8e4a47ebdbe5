"""
Unit tests for AnalysisRunService.

Covers the run lifecycle (pending -> running -> completed | failed), stored
findings and the status payload served by the API.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy.orm import Session

from foodtrigger.models import AnalysisRun, RunStatus
from foodtrigger.services.analysis_run_service import (
    AnalysisRunService,
    default_date_range,
    run_results,
)
from foodtrigger.services.correlation.types import (
    MINUTE_MS,
    AnalysisConfig,
    ConfidenceLevel,
)
from tests.factories import BASE_TIME, create_dose_response_scenario


@pytest.fixture
def service(db: Session):
    return AnalysisRunService(db, AnalysisConfig())


def scenario_range(scenario):
    return default_date_range(BASE_TIME - timedelta(days=1), scenario["end"])


class TestDefaultDateRange:
    def test_defaults_to_trailing_window(self):
        start, end = default_date_range()

        assert end.tzinfo is None
        assert (end - start) == timedelta(days=90)

    def test_aware_values_become_naive_utc(self):
        start, end = default_date_range(
            datetime(2026, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=2))),
            datetime(2026, 1, 2, tzinfo=timezone.utc),
        )

        assert start == datetime(2026, 1, 1, 8, 0)
        assert end == datetime(2026, 1, 2)

    def test_start_defaults_relative_to_end(self):
        end = datetime(2026, 6, 1)

        start, _ = default_date_range(end=end)

        assert start == end - timedelta(days=90)

    def test_days_override(self):
        end = datetime(2026, 6, 1)

        start, _ = default_date_range(end=end, days=14)

        assert start == datetime(2026, 5, 18)

    def test_zero_days_is_a_single_instant(self):
        end = datetime(2026, 1, 10)

        start, _ = default_date_range(end=end, days=0)

        assert start == end

    def test_explicit_start_ignores_days(self):
        start, _ = default_date_range(
            datetime(2026, 1, 1), datetime(2026, 6, 1), days=14
        )

        assert start == datetime(2026, 1, 1)


class TestCreateRun:
    def test_creates_pending_run(self, service, db: Session):
        run = service.create_run(datetime(2026, 1, 1), datetime(2026, 2, 1), True)

        assert run.id is not None
        assert run.status == RunStatus.PENDING.value
        assert run.include_combinations is True
        assert db.query(AnalysisRun).count() == 1

    def test_rejects_inverted_range(self, service):
        with pytest.raises(ValueError):
            service.create_run(datetime(2026, 2, 1), datetime(2026, 1, 1))


class TestExecuteRun:
    def test_completed_run_stores_findings(self, service, db: Session):
        scenario = create_dose_response_scenario(db, count=12)
        run = service.create_run(*scenario_range(scenario))

        report = service.execute_run(run)

        db.refresh(run)
        assert run.status == RunStatus.COMPLETED.value
        assert run.started_at is not None
        assert run.completed_at is not None
        assert run.error_message is None
        assert run.foods_scanned == 1
        assert run.symptoms_scanned == 1
        assert run.intake_events_analyzed == 12
        assert run.observations_analyzed == 12
        assert run.result_count == 1
        assert run_results(run) == list(report.results)

        result = run_results(run)[0]
        assert result.food_ids == ("onion",)
        assert result.symptom_id == "bloating"
        assert result.correlation_score == 1.0
        assert result.best_lag_window == 15 * MINUTE_MS
        assert result.confidence_level == ConfidenceLevel.MEDIUM

    def test_progress_counters_track_scan(self, db: Session):
        scenario = create_dose_response_scenario(db, count=12)
        service = AnalysisRunService(db, AnalysisConfig(progress_interval=1))
        run = service.create_run(*scenario_range(scenario))
        seen = []

        with patch.object(
            AnalysisRunService,
            "_record_progress",
            autospec=True,
            side_effect=lambda self, r, done, total: seen.append((done, total)),
        ):
            service.execute_run(run)

        assert seen == [(1, 1)]

    def test_progress_counters_stored_on_run(self, service, db: Session):
        scenario = create_dose_response_scenario(db, count=12)
        run = service.create_run(*scenario_range(scenario))
        assert run.tasks_total == 0

        service.execute_run(run)

        db.refresh(run)
        # one food x one symptom
        assert run.tasks_total == 1
        assert run.tasks_completed == 1

    def test_completed_run_without_findings(self, service, db: Session):
        run = service.create_run(datetime(2026, 1, 1), datetime(2026, 2, 1))

        report = service.execute_run(run)

        assert report.results == ()
        assert run.status == RunStatus.COMPLETED.value
        assert run.result_count == 0
        assert run.results == []

    def test_failure_marks_run_failed_and_reraises(self, service, db: Session):
        run = service.create_run(datetime(2026, 1, 1), datetime(2026, 2, 1))

        with patch(
            "foodtrigger.services.analysis_run_service.AnalysisOrchestrator.run",
            side_effect=RuntimeError("snapshot unavailable"),
        ):
            with pytest.raises(RuntimeError):
                service.execute_run(run)

        db.refresh(run)
        assert run.status == RunStatus.FAILED.value
        assert run.error_message == "snapshot unavailable"
        assert run.completed_at is not None


class TestEnqueueRun:
    def test_sends_run_id_to_worker(self, service):
        run = service.create_run(datetime(2026, 1, 1), datetime(2026, 2, 1))

        with patch(
            "foodtrigger.workers.correlation_worker.run_correlation_analysis.send"
        ) as mock_send:
            service.enqueue_run(run)

        mock_send.assert_called_once_with(run.id)
        assert run.status == RunStatus.PENDING.value


class TestGetRunStatus:
    def test_unknown_run(self, service):
        assert service.get_run_status(999) is None

    def test_status_payload(self, service, db: Session):
        scenario = create_dose_response_scenario(db, count=12)
        run = service.create_run(*scenario_range(scenario))
        service.execute_run(run)

        status = service.get_run_status(run.id)

        assert status["run_id"] == run.id
        assert status["status"] == "completed"
        assert status["result_count"] == 1
        assert status["results"][0]["food_ids"] == ["onion"]
        assert status["results"][0]["confidence_level"] == "medium"
        assert status["completed_at"] is not None
        assert status["tasks_total"] == 1
        assert status["tasks_completed"] == 1

    def test_pending_status(self, service):
        run = service.create_run(datetime(2026, 1, 1), datetime(2026, 2, 1))

        status = service.get_run_status(run.id)

        assert status["status"] == "pending"
        assert status["tasks_completed"] == 0
        assert status["started_at"] is None
        assert status["results"] == []
