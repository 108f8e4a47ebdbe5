"""Spearman rank correlation with mid-rank tie handling."""

from typing import List, Sequence

from scipy.stats import rankdata

from foodtrigger.services.correlation.types import SamplePair


def rank_values(values: Sequence[float]) -> List[float]:
    """
    Rank values from 1..n, giving tied values the mean of the ranks they span.

    Example: [10, 20, 20, 30] -> [1.0, 2.5, 2.5, 4.0]
    """
    if len(values) == 0:
        return []
    return [float(rank) for rank in rankdata(values, method="average")]


def spearman_rho(pairs: Sequence[SamplePair]) -> float:
    """
    Spearman's rho = 1 - 6 * sum(d^2) / (n * (n^2 - 1)) over mid-ranks.

    Returns 0.0 when the correlation is undefined: fewer than two pairs, or a
    coordinate that never varies. Callers gate on sample size separately.

    With ties this form is not Pearson-on-ranks: identical tie groups give
    exactly 1, reversed tie groups stay short of -1.
    """
    n = len(pairs)
    if n < 2:
        return 0.0

    xs = [pair.exposure_intensity for pair in pairs]
    ys = [pair.severity for pair in pairs]

    if len(set(xs)) == 1 or len(set(ys)) == 1:
        return 0.0

    x_ranks = rank_values(xs)
    y_ranks = rank_values(ys)

    sum_squared_diff = sum((xr - yr) ** 2 for xr, yr in zip(x_ranks, y_ranks))
    rho = 1 - (6 * sum_squared_diff) / (n * (n * n - 1))

    return max(-1.0, min(1.0, rho))
