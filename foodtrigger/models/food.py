from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from foodtrigger.database import Base


class Food(Base):
    """Food catalog entry. ``guid`` is the opaque id the analysis engine sees."""

    __tablename__ = "foods"

    id = Column(Integer, primary_key=True)
    guid = Column(String(64), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    intake_foods = relationship("IntakeEventFood", back_populates="food")

    __table_args__ = (
        Index("idx_foods_guid", "guid"),
        Index("idx_foods_is_active", "is_active"),
    )
