"""
Full-corpus correlation scan.

Runs LagWindowSearch for every active (symptom, food) pair and, optionally,
for co-occurring food combinations followed by synergy detection. Each pair is
independent, so the scan fans out to a process pool when
``AnalysisConfig.max_workers`` is above 1.
"""

import logging
from collections import defaultdict
from concurrent.futures import ProcessPoolExecutor
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from foodtrigger.services.correlation.combinations import (
    BoundedCombinationStrategy,
    CombinationStrategy,
)
from foodtrigger.services.correlation.lag_search import LagWindowSearch
from foodtrigger.services.correlation.sources import Catalog, EventStore
from foodtrigger.services.correlation.synergy import SynergyDetector
from foodtrigger.services.correlation.types import (
    AnalysisConfig,
    AnalysisReport,
    CorrelationResult,
    DateRange,
    FoodId,
    IntakeEvent,
    ObservationEvent,
    SymptomId,
)

logger = logging.getLogger(__name__)

Task = Tuple[FrozenSet[FoodId], SymptomId]
ProgressCallback = Callable[[int, int], None]

# Per-process snapshot installed by _init_worker
_worker_state: Dict = {}


def _init_worker(
    intakes: Sequence[IntakeEvent],
    observations_by_symptom: Mapping[SymptomId, List[ObservationEvent]],
    config: AnalysisConfig,
) -> None:
    _worker_state["intakes"] = intakes
    _worker_state["observations"] = observations_by_symptom
    _worker_state["search"] = LagWindowSearch(config)


def _search_task(task: Task) -> Optional[CorrelationResult]:
    food_ids, symptom_id = task
    return _worker_state["search"].search(
        _worker_state["intakes"],
        _worker_state["observations"].get(symptom_id, []),
        food_ids,
        symptom_id,
    )


class ScanProgress:
    """
    Counts finished search tasks across both scan phases.

    ``callback(completed, total)`` fires every ``interval`` tasks and once more
    when the known batch is done. ``total`` grows when the combination phase
    adds its tasks.
    """

    def __init__(self, callback: Optional[ProgressCallback], interval: int):
        self.callback = callback
        self.interval = max(1, interval)
        self.completed = 0
        self.total = 0

    def add_tasks(self, count: int) -> None:
        self.total += count

    def task_done(self) -> None:
        self.completed += 1
        if self.callback is None:
            return
        if self.completed % self.interval == 0 or self.completed == self.total:
            self.callback(self.completed, self.total)


class AnalysisOrchestrator:
    """Drives one stateless analysis pass over a fresh event snapshot."""

    def __init__(
        self,
        event_store: EventStore,
        catalog: Catalog,
        config: Optional[AnalysisConfig] = None,
        combination_strategy: Optional[CombinationStrategy] = None,
    ):
        self.event_store = event_store
        self.catalog = catalog
        self.config = config or AnalysisConfig()
        self.lag_search = LagWindowSearch(self.config)
        self.synergy = SynergyDetector(self.lag_search)
        self.combination_strategy = combination_strategy or BoundedCombinationStrategy(
            self.config.max_combination_size
        )

    def run(
        self,
        date_range: DateRange,
        include_combinations: bool = False,
        progress: Optional[ProgressCallback] = None,
    ) -> AnalysisReport:
        """
        Scan every active food (and optionally food combination) against every
        active symptom in ``date_range``.

        Args:
            date_range: Inclusive snapshot range
            include_combinations: Also scan co-occurring food sets
            progress: Optional ``(completed, total)`` callback, see ScanProgress

        Returns:
            AnalysisReport whose results are in scan order: symptoms, then
            single foods, then combinations
        """
        snapshot = self.event_store.load_snapshot(date_range)
        foods = self.catalog.active_food_ids()
        symptoms = self.catalog.active_symptom_ids()

        logger.info(
            "Starting correlation analysis: %d foods x %d symptoms, "
            "%d intake events, %d observations",
            len(foods),
            len(symptoms),
            len(snapshot.intakes),
            len(snapshot.observations),
        )

        observations_by_symptom = defaultdict(list)
        for observation in snapshot.observations:
            observations_by_symptom[observation.symptom_id].append(observation)
        observations_by_symptom = dict(observations_by_symptom)

        single_tasks = [
            (frozenset([food_id]), symptom_id)
            for symptom_id in symptoms
            for food_id in foods
        ]
        tracker = ScanProgress(progress, self.config.progress_interval)
        single_results = self._run_tasks(
            single_tasks, snapshot.intakes, observations_by_symptom, tracker
        )
        results = [r for r in single_results if r is not None]

        combos = []
        if include_combinations:
            combos = self.combination_strategy.candidates(
                snapshot.intakes, foods, self.config.min_sample_size
            )
            results.extend(
                self._analyze_combinations(
                    combos,
                    symptoms,
                    snapshot.intakes,
                    observations_by_symptom,
                    dict(zip(single_tasks, single_results)),
                    tracker,
                )
            )

        logger.info(
            "Correlation analysis complete: %d findings "
            "(%d combinations, %d synergistic)",
            len(results),
            sum(1 for r in results if r.is_combination),
            sum(1 for r in results if r.is_synergistic),
        )

        return AnalysisReport(
            date_range=date_range,
            results=tuple(results),
            foods_scanned=len(foods),
            symptoms_scanned=len(symptoms),
            combinations_scanned=len(combos),
            intake_events=len(snapshot.intakes),
            observations=len(snapshot.observations),
            skipped_records=snapshot.skipped_records,
        )

    def _analyze_combinations(
        self,
        combos: List[FrozenSet[FoodId]],
        symptoms: List[SymptomId],
        intakes: Sequence[IntakeEvent],
        observations_by_symptom: Mapping[SymptomId, List[ObservationEvent]],
        single_results: Mapping[Task, Optional[CorrelationResult]],
        tracker: ScanProgress,
    ) -> List[CorrelationResult]:
        tasks = [(combo, symptom_id) for symptom_id in symptoms for combo in combos]
        found = self._run_tasks(tasks, intakes, observations_by_symptom, tracker)

        results = []
        for (combo, symptom_id), combination in zip(tasks, found):
            if combination is None:
                continue
            known = {
                food_id: single_results[(frozenset([food_id]), symptom_id)]
                for food_id in combo
                if (frozenset([food_id]), symptom_id) in single_results
            }
            results.append(
                self.synergy.detect(
                    combination,
                    intakes,
                    observations_by_symptom.get(symptom_id, []),
                    known_results=known,
                )
            )
        return results

    def _run_tasks(
        self,
        tasks: List[Task],
        intakes: Sequence[IntakeEvent],
        observations_by_symptom: Mapping[SymptomId, List[ObservationEvent]],
        tracker: ScanProgress,
    ) -> List[Optional[CorrelationResult]]:
        tracker.add_tasks(len(tasks))
        results = []

        if self.config.max_workers <= 1 or len(tasks) < 2:
            for food_ids, symptom_id in tasks:
                results.append(
                    self.lag_search.search(
                        intakes,
                        observations_by_symptom.get(symptom_id, []),
                        food_ids,
                        symptom_id,
                    )
                )
                tracker.task_done()
            return results

        chunksize = max(1, len(tasks) // (self.config.max_workers * 4))
        with ProcessPoolExecutor(
            max_workers=self.config.max_workers,
            initializer=_init_worker,
            initargs=(list(intakes), observations_by_symptom, self.config),
        ) as executor:
            # map yields in task order, so progress counts completed prefixes
            for result in executor.map(_search_task, tasks, chunksize=chunksize):
                results.append(result)
                tracker.task_done()
        return results
