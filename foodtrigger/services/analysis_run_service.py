"""
Service for creating, executing and tracking correlation analysis runs.

A run moves pending -> running -> completed | failed. Execution can happen
inline (sync API, CLI) or on a Dramatiq worker via ``enqueue_run``.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from foodtrigger.config import settings
from foodtrigger.models import AnalysisRun, RunStatus
from foodtrigger.services.correlation import (
    AnalysisConfig,
    AnalysisOrchestrator,
    AnalysisReport,
    CorrelationResult,
    DateRange,
)
from foodtrigger.services.event_store import SqlCatalog, SqlEventStore
from foodtrigger.services.report_service import sort_results

logger = logging.getLogger(__name__)


def default_date_range(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    days: Optional[int] = None,
) -> Tuple[datetime, datetime]:
    """
    Resolve an optional range; defaults to the last N days ending now.

    ``days`` only applies when ``start`` is not given (default
    ``settings.correlation_default_range_days``). Returned datetimes are naive
    UTC, matching the AnalysisRun columns.
    """
    if start is not None and start.tzinfo is not None:
        start = start.astimezone(timezone.utc).replace(tzinfo=None)
    if end is not None and end.tzinfo is not None:
        end = end.astimezone(timezone.utc).replace(tzinfo=None)

    end = end or datetime.utcnow()
    if start is None:
        if days is None:
            days = settings.correlation_default_range_days
        start = end - timedelta(days=days)
    return start, end


class AnalysisRunService:
    """Orchestrates AnalysisRun records around the correlation engine."""

    def __init__(self, db: Session, config: Optional[AnalysisConfig] = None):
        self.db = db
        self.config = config or AnalysisConfig.from_settings(settings)

    def create_run(
        self,
        date_range_start: datetime,
        date_range_end: datetime,
        include_combinations: bool = False,
    ) -> AnalysisRun:
        """Create a pending run. Raises ValueError if start is after end."""
        if date_range_start > date_range_end:
            raise ValueError("date_range_start must not be after date_range_end")

        run = AnalysisRun(
            status=RunStatus.PENDING.value,
            date_range_start=date_range_start,
            date_range_end=date_range_end,
            include_combinations=include_combinations,
        )
        self.db.add(run)
        self.db.commit()
        self.db.refresh(run)
        return run

    def execute_run(self, run: AnalysisRun) -> AnalysisReport:
        """
        Run the full-corpus scan for ``run`` and store the findings on it.

        On any failure the run is marked failed with the error message and the
        exception is re-raised.
        """
        run.status = RunStatus.RUNNING.value
        run.started_at = datetime.utcnow()
        run.error_message = None
        run.tasks_total = 0
        run.tasks_completed = 0
        self.db.commit()

        try:
            orchestrator = AnalysisOrchestrator(
                SqlEventStore(self.db), SqlCatalog(self.db), self.config
            )
            report = orchestrator.run(
                DateRange.from_datetimes(run.date_range_start, run.date_range_end),
                include_combinations=run.include_combinations,
                progress=lambda done, total: self._record_progress(run, done, total),
            )
        except Exception as e:
            self.db.rollback()
            logger.error("Analysis run %s failed: %s", run.id, e)
            run.status = RunStatus.FAILED.value
            run.error_message = str(e)
            run.completed_at = datetime.utcnow()
            self.db.commit()
            raise

        run.status = RunStatus.COMPLETED.value
        run.completed_at = datetime.utcnow()
        run.foods_scanned = report.foods_scanned
        run.symptoms_scanned = report.symptoms_scanned
        run.combinations_scanned = report.combinations_scanned
        run.intake_events_analyzed = report.intake_events
        run.observations_analyzed = report.observations
        run.skipped_records = report.skipped_records
        run.result_count = len(report.results)
        run.results = [r.to_dict() for r in report.results]
        self.db.commit()

        logger.info(
            "Analysis run %s completed with %d findings", run.id, run.result_count
        )
        return report

    def _record_progress(self, run: AnalysisRun, completed: int, total: int) -> None:
        run.tasks_completed = completed
        run.tasks_total = total
        self.db.commit()
        logger.debug("Analysis run %s: %d/%d tasks", run.id, completed, total)

    def enqueue_run(self, run: AnalysisRun) -> None:
        """Hand the run to the background worker."""
        from foodtrigger.workers.correlation_worker import run_correlation_analysis

        run_correlation_analysis.send(run.id)

    def get_run(self, run_id: int) -> Optional[AnalysisRun]:
        return self.db.query(AnalysisRun).filter(AnalysisRun.id == run_id).first()

    def get_run_status(self, run_id: int) -> Optional[Dict]:
        """
        Get status, counts and ranked findings of a run.

        Returns:
            Dict with run info, or None if the run does not exist
        """
        run = self.get_run(run_id)
        if not run:
            return None

        return {
            "run_id": run.id,
            "status": run.status,
            "date_range_start": run.date_range_start.isoformat(),
            "date_range_end": run.date_range_end.isoformat(),
            "include_combinations": run.include_combinations,
            "started_at": run.started_at.isoformat() if run.started_at else None,
            "completed_at": run.completed_at.isoformat() if run.completed_at else None,
            "error_message": run.error_message,
            "tasks_total": run.tasks_total,
            "tasks_completed": run.tasks_completed,
            "foods_scanned": run.foods_scanned,
            "symptoms_scanned": run.symptoms_scanned,
            "combinations_scanned": run.combinations_scanned,
            "intake_events_analyzed": run.intake_events_analyzed,
            "observations_analyzed": run.observations_analyzed,
            "skipped_records": run.skipped_records,
            "result_count": run.result_count,
            "results": [r.to_dict() for r in sort_results(run_results(run))],
        }


def run_results(run: AnalysisRun) -> List[CorrelationResult]:
    """Stored findings of a run as CorrelationResult objects."""
    return [CorrelationResult.from_dict(data) for data in (run.results or [])]
