"""SQLAlchemy-backed event store and catalog for the correlation engine."""

import logging
from typing import List

from sqlalchemy.orm import Session, joinedload

from foodtrigger.models import (
    Food,
    IntakeEvent,
    IntakeEventFood,
    SymptomObservation,
    SymptomType,
)
from foodtrigger.services.correlation.records import (
    parse_intake_records,
    parse_observation_records,
)
from foodtrigger.services.correlation.sources import EventSnapshot
from foodtrigger.services.correlation.types import (
    DateRange,
    FoodId,
    SymptomId,
    from_epoch_ms,
    to_epoch_ms,
)

logger = logging.getLogger(__name__)


class SqlEventStore:
    """Reads intake events and symptom observations from the database."""

    def __init__(self, db: Session):
        self.db = db

    def load_snapshot(self, date_range: DateRange) -> EventSnapshot:
        """
        Fetch and validate all events within the (inclusive) date range.

        Rows are converted to interchange records and passed through the same
        validation as any other source, so malformed rows are skipped.
        """
        start = from_epoch_ms(date_range.start)
        end = from_epoch_ms(date_range.end)

        intake_rows = (
            self.db.query(IntakeEvent)
            .options(joinedload(IntakeEvent.foods).joinedload(IntakeEventFood.food))
            .filter(IntakeEvent.timestamp >= start, IntakeEvent.timestamp <= end)
            .order_by(IntakeEvent.timestamp, IntakeEvent.id)
            .all()
        )
        intake_records = [
            {
                "timestamp": to_epoch_ms(row.timestamp),
                "foodIds": [item.food.guid for item in row.foods],
                "portionByFood": {
                    item.food.guid: item.portion.value
                    for item in row.foods
                    if item.portion is not None
                },
            }
            for row in intake_rows
        ]

        observation_rows = (
            self.db.query(SymptomObservation, SymptomType.guid)
            .join(SymptomType, SymptomObservation.symptom_type_id == SymptomType.id)
            .filter(
                SymptomObservation.timestamp >= start,
                SymptomObservation.timestamp <= end,
            )
            .order_by(SymptomObservation.timestamp, SymptomObservation.id)
            .all()
        )
        observation_records = [
            {
                "timestamp": to_epoch_ms(observation.timestamp),
                "symptomId": guid,
                "severity": observation.severity,
            }
            for observation, guid in observation_rows
        ]

        intakes, skipped_intakes = parse_intake_records(intake_records)
        observations, skipped_observations = parse_observation_records(
            observation_records
        )

        logger.debug(
            "Loaded %d intake events and %d observations (%d skipped)",
            len(intakes),
            len(observations),
            skipped_intakes + skipped_observations,
        )

        return EventSnapshot(
            intakes=[e for e in intakes if date_range.contains(e.timestamp)],
            observations=[o for o in observations if date_range.contains(o.timestamp)],
            skipped_records=skipped_intakes + skipped_observations,
        )


class SqlCatalog:
    """Active foods and symptoms from the catalog tables."""

    def __init__(self, db: Session):
        self.db = db

    def active_food_ids(self) -> List[FoodId]:
        rows = (
            self.db.query(Food.guid)
            .filter(Food.is_active.is_(True))
            .order_by(Food.guid)
            .all()
        )
        return [FoodId(row[0]) for row in rows]

    def active_symptom_ids(self) -> List[SymptomId]:
        rows = (
            self.db.query(SymptomType.guid)
            .filter(SymptomType.is_active.is_(True))
            .order_by(SymptomType.guid)
            .all()
        )
        return [SymptomId(row[0]) for row in rows]
