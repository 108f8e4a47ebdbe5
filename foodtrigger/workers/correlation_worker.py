"""
Dramatiq worker for running correlation analysis in the background.

The scan is a pure computation over a database snapshot, so a failed run is
not retried; the run record carries the error instead.
"""
import logging

import dramatiq

# Import broker setup (must be before actor definitions)
from foodtrigger.workers import redis_broker  # noqa: F401
from foodtrigger.database import SessionLocal
from foodtrigger.models import AnalysisRun, RunStatus
from foodtrigger.services.analysis_run_service import AnalysisRunService

logger = logging.getLogger(__name__)


@dramatiq.actor(max_retries=0)
def run_correlation_analysis(run_id: int):
    """
    Execute a pending AnalysisRun.

    Args:
        run_id: AnalysisRun ID to execute
    """
    db = SessionLocal()

    try:
        run = db.query(AnalysisRun).filter(AnalysisRun.id == run_id).first()
        if not run:
            raise ValueError(f"AnalysisRun {run_id} not found")

        if run.status != RunStatus.PENDING.value:
            logger.warning(
                "Skipping analysis run %s: status is %s", run_id, run.status
            )
            return

        AnalysisRunService(db).execute_run(run)
    finally:
        db.close()
