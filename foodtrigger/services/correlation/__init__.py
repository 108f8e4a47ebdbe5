"""Spearman food/symptom correlation engine."""

from foodtrigger.services.correlation.combinations import (
    BoundedCombinationStrategy,
    CombinationStrategy,
)
from foodtrigger.services.correlation.confidence import classify_confidence
from foodtrigger.services.correlation.lag_search import LagEvaluation, LagWindowSearch
from foodtrigger.services.correlation.orchestrator import AnalysisOrchestrator
from foodtrigger.services.correlation.pairs import build_sample_pairs
from foodtrigger.services.correlation.ranking import rank_values, spearman_rho
from foodtrigger.services.correlation.significance import estimate_p_value
from foodtrigger.services.correlation.sources import (
    Catalog,
    EventSnapshot,
    EventStore,
    InMemoryEventStore,
)
from foodtrigger.services.correlation.synergy import SynergyDetector, apply_synergy
from foodtrigger.services.correlation.types import (
    AnalysisConfig,
    AnalysisReport,
    ConfidenceLevel,
    CorrelationResult,
    DateRange,
    FoodId,
    IntakeEvent,
    ObservationEvent,
    PortionSize,
    PValueMethod,
    SamplePair,
    SymptomId,
)

__all__ = [
    "AnalysisConfig",
    "AnalysisOrchestrator",
    "AnalysisReport",
    "BoundedCombinationStrategy",
    "Catalog",
    "CombinationStrategy",
    "ConfidenceLevel",
    "CorrelationResult",
    "DateRange",
    "EventSnapshot",
    "EventStore",
    "FoodId",
    "InMemoryEventStore",
    "IntakeEvent",
    "LagEvaluation",
    "LagWindowSearch",
    "ObservationEvent",
    "PortionSize",
    "PValueMethod",
    "SamplePair",
    "SymptomId",
    "SynergyDetector",
    "apply_synergy",
    "build_sample_pairs",
    "classify_confidence",
    "estimate_p_value",
    "rank_values",
    "spearman_rho",
]
