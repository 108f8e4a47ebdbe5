"""Flag food combinations that beat every constituent food by a margin."""

import logging
from dataclasses import replace
from typing import Iterable, Mapping, Optional

from foodtrigger.services.correlation.lag_search import LagWindowSearch
from foodtrigger.services.correlation.types import (
    CorrelationResult,
    FoodId,
    IntakeEvent,
    ObservationEvent,
)

logger = logging.getLogger(__name__)


def apply_synergy(
    combination: CorrelationResult,
    individual_results: Iterable[Optional[CorrelationResult]],
    threshold: float,
) -> CorrelationResult:
    """
    Return a copy of ``combination`` with its synergy fields filled in.

    Missing (None) individual results count as a correlation of 0.
    """
    individual_max = max(
        (abs(r.correlation_score) for r in individual_results if r is not None),
        default=0.0,
    )
    is_synergistic = abs(combination.correlation_score) > individual_max + threshold

    return replace(
        combination,
        is_synergistic=is_synergistic,
        individual_max_correlation=individual_max,
    )


class SynergyDetector:
    """Compares a combination's best result against each food analysed alone."""

    def __init__(self, lag_search: LagWindowSearch):
        self.lag_search = lag_search

    @property
    def threshold(self) -> float:
        return self.lag_search.config.synergy_threshold

    def detect(
        self,
        combination: CorrelationResult,
        intakes: Iterable[IntakeEvent],
        observations: Iterable[ObservationEvent],
        known_results: Optional[Mapping[FoodId, Optional[CorrelationResult]]] = None,
    ) -> CorrelationResult:
        """
        Evaluate synergy for a combination found by LagWindowSearch.

        Args:
            combination: Result for a food set of two or more foods
            intakes: Same intake snapshot the combination was searched on
            observations: Same symptom observations
            known_results: Single-food results already computed on this snapshot
                for the same symptom, keyed by food id; other foods are searched

        Returns:
            The combination result with is_synergistic and
            individual_max_correlation set
        """
        if len(combination.food_ids) < 2:
            raise ValueError("Synergy needs a combination of at least two foods")

        intakes = list(intakes)
        observations = list(observations)
        known_results = known_results or {}

        individual = []
        for food_id in combination.food_ids:
            if food_id in known_results:
                individual.append(known_results[food_id])
            else:
                individual.append(
                    self.lag_search.search(
                        intakes, observations, [food_id], combination.symptom_id
                    )
                )

        result = apply_synergy(combination, individual, self.threshold)
        if result.is_synergistic:
            logger.info(
                "Synergy: %s -> %s rho=%.3f vs individual max %.3f",
                "+".join(result.food_ids),
                result.symptom_id,
                result.correlation_score,
                result.individual_max_correlation,
            )
        return result
