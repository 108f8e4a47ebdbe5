"""
Database models for the food trigger tracker.

Import all models here so ``Base.metadata`` sees every table.
"""

from foodtrigger.database import Base
from foodtrigger.models.food import Food
from foodtrigger.models.symptom_type import SymptomType
from foodtrigger.models.intake_event import IntakeEvent, IntakeEventFood
from foodtrigger.models.symptom_observation import SymptomObservation
from foodtrigger.models.analysis_run import AnalysisRun, RunStatus
from foodtrigger.services.correlation.types import PortionSize

__all__ = [
    "Base",
    "Food",
    "SymptomType",
    "IntakeEvent",
    "IntakeEventFood",
    "PortionSize",
    "SymptomObservation",
    "AnalysisRun",
    "RunStatus",
]
