"""AnalysisRun model for tracking correlation analysis execution."""
import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, JSON

from foodtrigger.database import Base


class RunStatus(str, enum.Enum):
    """Run lifecycle: pending (idle) -> running -> completed | failed."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class AnalysisRun(Base):
    """Records each correlation analysis run and the findings it produced."""

    __tablename__ = "analysis_runs"

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    status = Column(String, nullable=False, default=RunStatus.PENDING.value)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    error_message = Column(Text, nullable=True)

    # Analysis scope
    date_range_start = Column(DateTime, nullable=False)
    date_range_end = Column(DateTime, nullable=False)
    include_combinations = Column(Boolean, nullable=False, default=False)

    # Progress while running: search tasks finished out of known so far
    tasks_total = Column(Integer, nullable=False, default=0)
    tasks_completed = Column(Integer, nullable=False, default=0)

    # Counts filled in on completion
    foods_scanned = Column(Integer, nullable=True)
    symptoms_scanned = Column(Integer, nullable=True)
    combinations_scanned = Column(Integer, nullable=True)
    intake_events_analyzed = Column(Integer, nullable=True)
    observations_analyzed = Column(Integer, nullable=True)
    skipped_records = Column(Integer, nullable=True)

    result_count = Column(Integer, nullable=False, default=0)
    results = Column(JSON, nullable=True)  # list of CorrelationResult.to_dict()

    def __repr__(self):
        return f"<AnalysisRun(id={self.id}, status={self.status})>"
