from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from foodtrigger.database import Base
from foodtrigger.services.correlation.types import PortionSize


class IntakeEvent(Base):
    """A logged meal or snack: one timestamp, one or more foods."""

    __tablename__ = "intake_events"

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    foods = relationship(
        "IntakeEventFood", back_populates="intake_event", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("idx_intake_events_timestamp", "timestamp"),)


class IntakeEventFood(Base):
    """Junction table linking intake events to foods with a portion size."""

    __tablename__ = "intake_event_foods"

    id = Column(Integer, primary_key=True)
    intake_event_id = Column(
        Integer, ForeignKey("intake_events.id", ondelete="CASCADE"), nullable=False
    )
    food_id = Column(Integer, ForeignKey("foods.id", ondelete="CASCADE"), nullable=False)
    portion = Column(Enum(PortionSize), nullable=False, default=PortionSize.MEDIUM)

    # Relationships
    intake_event = relationship("IntakeEvent", back_populates="foods")
    food = relationship("Food", back_populates="intake_foods")

    __table_args__ = (
        Index("idx_intake_event_foods_intake_event_id", "intake_event_id"),
        Index("idx_intake_event_foods_food_id", "food_id"),
    )
