"""Candidate food combinations for synergy analysis."""

from collections import Counter
from itertools import combinations
from typing import Collection, FrozenSet, Iterable, List, Protocol

from foodtrigger.services.correlation.types import FoodId, IntakeEvent


class CombinationStrategy(Protocol):
    def candidates(
        self,
        intakes: Iterable[IntakeEvent],
        active_foods: Collection[FoodId],
        min_support: int,
    ) -> List[FrozenSet[FoodId]]: ...


class BoundedCombinationStrategy:
    """
    Food sets of size 2..max_size that were eaten together at least
    ``min_support`` times.

    Only sets that actually co-occur are proposed, so the search never walks
    the full power set of the catalog.
    """

    def __init__(self, max_size: int = 2):
        if max_size < 2:
            raise ValueError("max_size must be at least 2")
        self.max_size = max_size

    def candidates(
        self,
        intakes: Iterable[IntakeEvent],
        active_foods: Collection[FoodId],
        min_support: int,
    ) -> List[FrozenSet[FoodId]]:
        active = set(active_foods)
        support = Counter()

        for event in intakes:
            foods = sorted(event.food_ids & active)
            for size in range(2, min(self.max_size, len(foods)) + 1):
                support.update(frozenset(c) for c in combinations(foods, size))

        qualifying = [combo for combo, count in support.items() if count >= min_support]
        return sorted(qualifying, key=lambda combo: (len(combo), sorted(combo)))
