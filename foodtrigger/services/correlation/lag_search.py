"""Search the lag menu for the strongest significant food/symptom correlation."""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Optional, Sequence

from foodtrigger.services.correlation.confidence import classify_confidence
from foodtrigger.services.correlation.pairs import build_sample_pairs, filter_intakes
from foodtrigger.services.correlation.ranking import spearman_rho
from foodtrigger.services.correlation.significance import estimate_p_value
from foodtrigger.services.correlation.types import (
    AnalysisConfig,
    CorrelationResult,
    FoodId,
    IntakeEvent,
    ObservationEvent,
    SymptomId,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LagEvaluation:
    """Statistics for one lag candidate. ``rho``/``p_value`` are 0/1 when unscored."""

    lag: int
    sample_size: int
    rho: float
    p_value: float
    scored: bool

    def is_significant(self, significance_level: float) -> bool:
        return self.scored and self.p_value < significance_level


class LagWindowSearch:
    """Evaluates every lag candidate for one food set and keeps the best one."""

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

    def evaluate_lags(
        self,
        intakes: Iterable[IntakeEvent],
        observations: Sequence[ObservationEvent],
        food_ids: FrozenSet[FoodId],
    ) -> List[LagEvaluation]:
        """Score each lag in menu order; lags with too few pairs are left unscored."""
        relevant = filter_intakes(intakes, food_ids)
        evaluations = []

        for lag in self.config.lag_windows:
            pairs = build_sample_pairs(
                relevant, observations, food_ids, lag, self.config.response_window
            )
            if len(pairs) < self.config.min_sample_size:
                evaluations.append(LagEvaluation(lag, len(pairs), 0.0, 1.0, False))
                continue

            rho = spearman_rho(pairs)
            p_value = estimate_p_value(rho, len(pairs), self.config.pvalue_method)
            evaluations.append(LagEvaluation(lag, len(pairs), rho, p_value, True))

        return evaluations

    def search(
        self,
        intakes: Iterable[IntakeEvent],
        observations: Iterable[ObservationEvent],
        food_ids: Iterable[FoodId],
        symptom_id: SymptomId,
    ) -> Optional[CorrelationResult]:
        """
        Find the lag with the largest |rho| among significant candidates.

        Ties keep the earlier (shorter) lag. Returns None when fewer than
        ``min_sample_size`` intakes contain the food set, or when no lag has
        enough pairs and p below the significance level.
        """
        target = frozenset(food_ids)
        if not target:
            raise ValueError("Food set must not be empty")

        relevant = filter_intakes(intakes, target)
        if len(relevant) < self.config.min_sample_size:
            logger.debug(
                "Skipping %s/%s: only %d qualifying intake events",
                sorted(target),
                symptom_id,
                len(relevant),
            )
            return None

        symptom_observations = [o for o in observations if o.symptom_id == symptom_id]

        best = None
        for evaluation in self.evaluate_lags(relevant, symptom_observations, target):
            if not evaluation.is_significant(self.config.significance_level):
                continue
            if best is None or abs(evaluation.rho) > abs(best.rho):
                best = evaluation

        if best is None:
            logger.debug("No significant lag for %s/%s", sorted(target), symptom_id)
            return None

        return CorrelationResult(
            food_ids=tuple(sorted(target)),
            symptom_id=symptom_id,
            correlation_score=best.rho,
            p_value=best.p_value,
            confidence_level=classify_confidence(
                best.p_value, best.sample_size, self.config
            ),
            sample_size=best.sample_size,
            best_lag_window=best.lag,
            is_synergistic=False,
            individual_max_correlation=best.rho,
        )
