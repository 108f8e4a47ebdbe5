"""Event store and catalog interfaces consumed by the orchestrator."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Protocol, Sequence, Union

from foodtrigger.services.correlation.records import (
    parse_intake_records,
    parse_observation_records,
)
from foodtrigger.services.correlation.types import (
    DateRange,
    FoodId,
    IntakeEvent,
    ObservationEvent,
    SymptomId,
)


@dataclass(frozen=True)
class EventSnapshot:
    """Validated, read-only events for one date range."""

    intakes: Sequence[IntakeEvent]
    observations: Sequence[ObservationEvent]
    skipped_records: int = 0


class EventStore(Protocol):
    def load_snapshot(self, date_range: DateRange) -> EventSnapshot: ...


class Catalog(Protocol):
    def active_food_ids(self) -> List[FoodId]: ...

    def active_symptom_ids(self) -> List[SymptomId]: ...


class InMemoryEventStore:
    """
    Event store and catalog over raw records already held in memory.

    Records use the interchange field names (``foodIds``, ``portionByFood``,
    ``symptomId``) or their snake_case equivalents. Without an explicit catalog,
    every food and symptom seen in the records counts as active.
    """

    def __init__(
        self,
        intake_records: Sequence[Mapping],
        observation_records: Sequence[Mapping],
        food_ids: Optional[Sequence[str]] = None,
        symptom_ids: Optional[Sequence[str]] = None,
    ):
        self.intake_records = list(intake_records)
        self.observation_records = list(observation_records)
        self._food_ids = food_ids
        self._symptom_ids = symptom_ids

    @classmethod
    def from_json(cls, source: Union[str, Path, Mapping]) -> "InMemoryEventStore":
        """Load from a snapshot file (or already-decoded dict)."""
        if isinstance(source, Mapping):
            data = source
        else:
            with open(source, encoding="utf-8") as f:
                data = json.load(f)

        return cls(
            intake_records=data.get("intakeEvents", []),
            observation_records=data.get("observationEvents", []),
            food_ids=data.get("foods"),
            symptom_ids=data.get("symptoms"),
        )

    def load_snapshot(self, date_range: DateRange) -> EventSnapshot:
        intakes, skipped_intakes = parse_intake_records(self.intake_records)
        observations, skipped_observations = parse_observation_records(
            self.observation_records
        )
        return EventSnapshot(
            intakes=[e for e in intakes if date_range.contains(e.timestamp)],
            observations=[o for o in observations if date_range.contains(o.timestamp)],
            skipped_records=skipped_intakes + skipped_observations,
        )

    def active_food_ids(self) -> List[FoodId]:
        if self._food_ids is not None:
            return [FoodId(f) for f in self._food_ids]
        seen = set()
        for record in self.intake_records:
            ids = record.get("foodIds", record.get("food_ids"))
            if isinstance(ids, list):
                seen.update(ids)
        return sorted(FoodId(f) for f in seen if isinstance(f, str) and f)

    def active_symptom_ids(self) -> List[SymptomId]:
        if self._symptom_ids is not None:
            return [SymptomId(s) for s in self._symptom_ids]
        seen = {
            record.get("symptomId", record.get("symptom_id"))
            for record in self.observation_records
        }
        return sorted(SymptomId(s) for s in seen if isinstance(s, str) and s)
