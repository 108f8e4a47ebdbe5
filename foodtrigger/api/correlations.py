"""Correlation analysis API endpoints."""
import logging
from datetime import datetime

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from foodtrigger.database import get_db
from foodtrigger.models import RunStatus
from foodtrigger.services.analysis_run_service import (
    AnalysisRunService,
    default_date_range,
    run_results,
)
from foodtrigger.services.report_service import results_to_csv

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/correlations", tags=["correlations"])


class AnalysisRequest(BaseModel):
    """Request model for running a correlation analysis."""

    date_range_start: datetime | None = None
    date_range_end: datetime | None = None
    include_combinations: bool = False
    async_mode: bool = False


@router.post("/analyze")
def analyze_correlations(
    request: AnalysisRequest = Body(...),
    db: Session = Depends(get_db),
):
    """
    Run a full correlation scan over the requested date range.

    In sync mode (default) the response contains the completed run and its
    findings. In async mode the run is queued and the client polls
    ``GET /correlations/runs/{run_id}``.
    """
    start, end = default_date_range(request.date_range_start, request.date_range_end)

    service = AnalysisRunService(db)
    try:
        run = service.create_run(start, end, request.include_combinations)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if request.async_mode:
        service.enqueue_run(run)
        return {"run_id": run.id, "status": run.status}

    try:
        service.execute_run(run)
    except Exception:
        logger.exception("Correlation analysis failed for run %s", run.id)
        raise HTTPException(
            status_code=500, detail=f"Analysis run {run.id} failed"
        )

    return service.get_run_status(run.id)


@router.get("/runs/{run_id}")
async def get_run(run_id: int, db: Session = Depends(get_db)):
    """Status, counts and ranked findings for one run."""
    status = AnalysisRunService(db).get_run_status(run_id)
    if status is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return status


@router.get("/runs/{run_id}/export.csv")
async def export_run_csv(run_id: int, db: Session = Depends(get_db)):
    """CSV report of a completed run's findings."""
    run = AnalysisRunService(db).get_run(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")
    if run.status != RunStatus.COMPLETED.value:
        raise HTTPException(
            status_code=409, detail=f"Run {run_id} is {run.status}, not completed"
        )

    return Response(
        content=results_to_csv(run_results(run)),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="correlations_run_{run_id}.csv"'
        },
    )
