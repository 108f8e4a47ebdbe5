from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from foodtrigger.database import Base


class SymptomType(Base):
    """Symptom catalog entry (e.g. "bloating", "nausea")."""

    __tablename__ = "symptom_types"

    id = Column(Integer, primary_key=True)
    guid = Column(String(64), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    observations = relationship("SymptomObservation", back_populates="symptom_type")

    __table_args__ = (
        Index("idx_symptom_types_guid", "guid"),
        Index("idx_symptom_types_is_active", "is_active"),
    )
