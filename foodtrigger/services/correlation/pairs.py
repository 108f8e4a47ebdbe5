"""Build (exposure, severity) samples for one food set at one lag."""

from typing import FrozenSet, Iterable, List, Sequence

from foodtrigger.services.correlation.types import (
    FoodId,
    IntakeEvent,
    ObservationEvent,
    SamplePair,
)


def exposure_intensity(event: IntakeEvent, food_ids: FrozenSet[FoodId]) -> float:
    """Mean ordinal portion (small=1, medium=2, large=3) across the target foods."""
    total = sum(event.portion_for(food_id).intensity for food_id in food_ids)
    return total / len(food_ids)


def filter_intakes(
    intakes: Iterable[IntakeEvent], food_ids: FrozenSet[FoodId]
) -> List[IntakeEvent]:
    """Intake events whose foods include every food in the target set."""
    return [event for event in intakes if event.contains_all(food_ids)]


def build_sample_pairs(
    intakes: Iterable[IntakeEvent],
    observations: Sequence[ObservationEvent],
    food_ids: FrozenSet[FoodId],
    lag: int,
    response_window: int,
) -> List[SamplePair]:
    """
    Pair each qualifying intake with every observation in its response window.

    The window for an intake at time t is [t + lag, t + lag + response_window],
    inclusive on both ends. One intake can contribute several pairs when several
    observations land in its window.

    Args:
        intakes: Intake events (non-qualifying ones are ignored)
        observations: Observations for a single symptom
        food_ids: Target food set (non-empty)
        lag: Lag from intake to window start, in milliseconds
        response_window: Window length, in milliseconds

    Returns:
        List of SamplePair in intake order, then observation order
    """
    pairs = []
    for event in intakes:
        if not event.contains_all(food_ids):
            continue

        intensity = exposure_intensity(event, food_ids)
        window_start = event.timestamp + lag
        window_end = window_start + response_window

        for observation in observations:
            if window_start <= observation.timestamp <= window_end:
                pairs.append(SamplePair(intensity, float(observation.severity)))

    return pairs
