from sqlalchemy import Column, Integer, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from foodtrigger.database import Base


class SymptomObservation(Base):
    """A single severity rating for one symptom at one point in time."""

    __tablename__ = "symptom_observations"

    id = Column(Integer, primary_key=True)
    symptom_type_id = Column(
        Integer, ForeignKey("symptom_types.id", ondelete="CASCADE"), nullable=False
    )
    timestamp = Column(DateTime(timezone=True), nullable=False)
    severity = Column(Integer, nullable=False)  # 1-10 scale
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    symptom_type = relationship("SymptomType", back_populates="observations")

    __table_args__ = (
        Index("idx_symptom_observations_timestamp", "timestamp"),
        Index("idx_symptom_observations_symptom_type_id", "symptom_type_id"),
    )
