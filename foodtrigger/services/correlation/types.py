"""Domain types shared by the correlation engine."""

import enum
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Mapping, NamedTuple, NewType, Tuple

FoodId = NewType("FoodId", str)
SymptomId = NewType("SymptomId", str)

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS


class PortionSize(str, enum.Enum):
    """Self-reported portion, encoded ordinally as exposure intensity."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    @property
    def intensity(self) -> int:
        return _PORTION_INTENSITY[self]


_PORTION_INTENSITY = {
    PortionSize.SMALL: 1,
    PortionSize.MEDIUM: 2,
    PortionSize.LARGE: 3,
}


class ConfidenceLevel(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PValueMethod(str, enum.Enum):
    APPROXIMATE = "approximate"
    EXACT = "exact"


def to_epoch_ms(value: datetime) -> int:
    """Convert a datetime to epoch milliseconds (naive values are taken as UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def from_epoch_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of epoch milliseconds."""

    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(
                f"Date range start ({self.start}) is after end ({self.end})"
            )

    def contains(self, timestamp: int) -> bool:
        return self.start <= timestamp <= self.end

    @classmethod
    def from_datetimes(cls, start: datetime, end: datetime) -> "DateRange":
        return cls(start=to_epoch_ms(start), end=to_epoch_ms(end))


@dataclass(frozen=True)
class IntakeEvent:
    """One logged meal: which foods were eaten, and how much of each."""

    timestamp: int
    food_ids: FrozenSet[FoodId]
    portion_by_food: Mapping[FoodId, PortionSize] = field(default_factory=dict)

    def portion_for(self, food_id: FoodId) -> PortionSize:
        return self.portion_by_food.get(food_id, PortionSize.MEDIUM)

    def contains_all(self, food_ids: FrozenSet[FoodId]) -> bool:
        return food_ids <= self.food_ids


@dataclass(frozen=True)
class ObservationEvent:
    timestamp: int
    symptom_id: SymptomId
    severity: int


class SamplePair(NamedTuple):
    exposure_intensity: float
    severity: float


@dataclass(frozen=True)
class CorrelationResult:
    """A significant food-set/symptom association found at its best lag."""

    food_ids: Tuple[FoodId, ...]
    symptom_id: SymptomId
    correlation_score: float
    p_value: float
    confidence_level: ConfidenceLevel
    sample_size: int
    best_lag_window: int
    is_synergistic: bool = False
    individual_max_correlation: float = 0.0

    @property
    def is_combination(self) -> bool:
        return len(self.food_ids) > 1

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["food_ids"] = list(self.food_ids)
        data["confidence_level"] = self.confidence_level.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping) -> "CorrelationResult":
        return cls(
            food_ids=tuple(FoodId(f) for f in data["food_ids"]),
            symptom_id=SymptomId(data["symptom_id"]),
            correlation_score=float(data["correlation_score"]),
            p_value=float(data["p_value"]),
            confidence_level=ConfidenceLevel(data["confidence_level"]),
            sample_size=int(data["sample_size"]),
            best_lag_window=int(data["best_lag_window"]),
            is_synergistic=bool(data.get("is_synergistic", False)),
            individual_max_correlation=float(
                data.get("individual_max_correlation", 0.0)
            ),
        )


@dataclass(frozen=True)
class AnalysisConfig:
    """Tunable constants for one analysis run.

    Built from ``Settings`` by ``from_settings``; frozen so a run can ship it to
    worker processes unchanged.
    """

    lag_windows: Tuple[int, ...] = (
        15 * MINUTE_MS,
        30 * MINUTE_MS,
        1 * HOUR_MS,
        2 * HOUR_MS,
        4 * HOUR_MS,
        8 * HOUR_MS,
        12 * HOUR_MS,
        24 * HOUR_MS,
        48 * HOUR_MS,
        72 * HOUR_MS,
    )
    response_window: int = 4 * HOUR_MS
    min_sample_size: int = 5
    significance_level: float = 0.05
    synergy_threshold: float = 0.15
    high_confidence_p: float = 0.01
    high_confidence_n: int = 20
    medium_confidence_p: float = 0.05
    medium_confidence_n: int = 10
    pvalue_method: PValueMethod = PValueMethod.APPROXIMATE
    max_workers: int = 1
    max_combination_size: int = 2
    progress_interval: int = 50

    @classmethod
    def from_settings(cls, settings, **overrides) -> "AnalysisConfig":
        values = dict(
            lag_windows=tuple(
                sorted(m * MINUTE_MS for m in settings.correlation_lag_windows_minutes)
            ),
            response_window=settings.correlation_response_window_hours * HOUR_MS,
            min_sample_size=settings.correlation_min_sample_size,
            significance_level=settings.correlation_significance_level,
            synergy_threshold=settings.correlation_synergy_threshold,
            high_confidence_p=settings.correlation_high_confidence_p,
            high_confidence_n=settings.correlation_high_confidence_n,
            medium_confidence_p=settings.correlation_medium_confidence_p,
            medium_confidence_n=settings.correlation_medium_confidence_n,
            pvalue_method=PValueMethod(settings.correlation_pvalue_method),
            max_workers=settings.correlation_max_workers,
            max_combination_size=settings.correlation_max_combination_size,
            progress_interval=settings.correlation_progress_interval,
        )
        values.update(overrides)
        return cls(**values)


@dataclass(frozen=True)
class AnalysisReport:
    """Outcome of one full-corpus scan.

    An empty ``results`` list with non-zero counts means the scan ran and found
    no correlation strong enough to report.
    """

    date_range: DateRange
    results: Tuple[CorrelationResult, ...]
    foods_scanned: int
    symptoms_scanned: int
    combinations_scanned: int
    intake_events: int
    observations: int
    skipped_records: int = 0
