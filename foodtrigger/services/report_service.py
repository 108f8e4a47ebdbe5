"""Formatting of correlation findings for reports and exports."""

import csv
import io
from typing import Iterable, List

from foodtrigger.services.correlation.types import HOUR_MS, MINUTE_MS, CorrelationResult

CSV_COLUMNS = [
    "foods",
    "symptom",
    "correlation_score",
    "p_value",
    "confidence_level",
    "sample_size",
    "best_lag_window_ms",
    "best_lag_window",
    "is_synergistic",
    "individual_max_correlation",
]


def sort_results(results: Iterable[CorrelationResult]) -> List[CorrelationResult]:
    """Strongest correlations first; larger samples break ties."""
    return sorted(
        results,
        key=lambda r: (-abs(r.correlation_score), -r.sample_size, r.food_ids, r.symptom_id),
    )


def format_lag(lag_ms: int) -> str:
    """Human-readable lag, e.g. 900000 -> '15m', 7200000 -> '2h'."""
    if lag_ms % HOUR_MS == 0:
        return f"{lag_ms // HOUR_MS}h"
    return f"{lag_ms // MINUTE_MS}m"


def results_to_csv(results: Iterable[CorrelationResult]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_COLUMNS)

    for r in sort_results(results):
        writer.writerow(
            [
                "+".join(r.food_ids),
                r.symptom_id,
                f"{r.correlation_score:.4f}",
                f"{r.p_value:.4f}",
                r.confidence_level.value,
                r.sample_size,
                r.best_lag_window,
                format_lag(r.best_lag_window),
                "yes" if r.is_synergistic else "no",
                f"{r.individual_max_correlation:.4f}",
            ]
        )

    return output.getvalue()


def results_to_table(results: Iterable[CorrelationResult]) -> str:
    """Plain-text table for terminal output."""
    rows = sort_results(results)
    if not rows:
        return "No correlations found."

    lines = [
        f"{'Foods':<30} {'Symptom':<20} {'rho':>7} {'p':>8} {'n':>5} {'lag':>5}  confidence"
    ]
    for r in rows:
        foods = "+".join(r.food_ids)
        if r.is_synergistic:
            foods += " *"
        lines.append(
            f"{foods:<30} {r.symptom_id:<20} {r.correlation_score:>7.3f} "
            f"{r.p_value:>8.4f} {r.sample_size:>5} {format_lag(r.best_lag_window):>5}  "
            f"{r.confidence_level.value}"
        )
    if any(r.is_synergistic for r in rows):
        lines.append("* synergistic combination")
    return "\n".join(lines)
