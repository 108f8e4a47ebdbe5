"""
Pydantic schemas for validating raw event records at the engine boundary.

Records that fail validation are skipped (and logged) rather than fed into the
statistics.
"""

import logging
from typing import Annotated, Iterable, List, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from foodtrigger.services.correlation.types import (
    FoodId,
    IntakeEvent,
    ObservationEvent,
    PortionSize,
    SymptomId,
)

logger = logging.getLogger(__name__)

NonEmptyId = Annotated[str, Field(min_length=1)]


class IntakeRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: int = Field(ge=0)  # epoch ms
    food_ids: List[NonEmptyId] = Field(alias="foodIds", min_length=1)
    portion_by_food: dict[str, PortionSize] = Field(
        alias="portionByFood", default_factory=dict
    )

    def to_event(self) -> IntakeEvent:
        food_ids = frozenset(FoodId(f) for f in self.food_ids)
        portions = {
            FoodId(f): self.portion_by_food.get(f, PortionSize.MEDIUM)
            for f in food_ids
        }
        return IntakeEvent(
            timestamp=self.timestamp, food_ids=food_ids, portion_by_food=portions
        )


class ObservationRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: int = Field(ge=0)
    symptom_id: NonEmptyId = Field(alias="symptomId")
    severity: int = Field(ge=1, le=10)

    def to_event(self) -> ObservationEvent:
        return ObservationEvent(
            timestamp=self.timestamp,
            symptom_id=SymptomId(self.symptom_id),
            severity=self.severity,
        )


def parse_intake_records(
    records: Iterable[Mapping],
) -> Tuple[List[IntakeEvent], int]:
    """Validate raw intake records. Returns (events, skipped_count)."""
    events = []
    skipped = 0
    for raw in records:
        try:
            events.append(IntakeRecord.model_validate(raw).to_event())
        except ValidationError as e:
            skipped += 1
            logger.warning(
                "Skipping malformed intake record %r: %d validation error(s)",
                raw,
                e.error_count(),
            )
    return events, skipped


def parse_observation_records(
    records: Iterable[Mapping],
) -> Tuple[List[ObservationEvent], int]:
    """Validate raw observation records. Returns (events, skipped_count)."""
    events = []
    skipped = 0
    for raw in records:
        try:
            events.append(ObservationRecord.model_validate(raw).to_event())
        except ValidationError as e:
            skipped += 1
            logger.warning(
                "Skipping malformed observation record %r: %d validation error(s)",
                raw,
                e.error_count(),
            )
    return events, skipped
