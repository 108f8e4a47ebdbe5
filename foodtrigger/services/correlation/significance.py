"""Two-tailed p-values for Spearman's rho via a t-statistic."""

import math

from scipy.stats import t as t_dist

from foodtrigger.services.correlation.types import PValueMethod


def t_statistic(rho: float, n: int) -> float:
    """t = rho * sqrt((n - 2) / (1 - rho^2)); infinite when |rho| == 1."""
    denominator = 1 - rho * rho
    if denominator <= 0:
        return math.copysign(math.inf, rho)
    return rho * math.sqrt((n - 2) / denominator)


def approximate_incomplete_beta(x: float, a: float, b: float) -> float:
    """
    Crude stand-in for the regularized incomplete beta: x^a * (1 - x)^b.

    Not statistically rigorous. Kept so p-values match reports produced by
    earlier versions of the tracker.
    """
    if x <= 0:
        return 0.0
    if x >= 1:
        return 1.0
    return math.pow(x, a) * math.pow(1 - x, b)


def approximate_t_cdf(t: float, df: int) -> float:
    if math.isinf(t):
        return 1.0
    x = df / (df + t * t)
    return 1 - 0.5 * approximate_incomplete_beta(x, df / 2, 0.5)


def estimate_p_value(
    rho: float, n: int, method: PValueMethod = PValueMethod.APPROXIMATE
) -> float:
    """
    Estimate the two-tailed p-value for rho over n samples.

    Args:
        rho: Spearman correlation in [-1, 1]
        n: Number of sample pairs
        method: APPROXIMATE (legacy parity) or EXACT (Student-t via scipy)

    Returns:
        p-value in [0, 1]; 1.0 when n < 3
    """
    if n < 3:
        return 1.0

    df = n - 2
    t = abs(t_statistic(rho, n))

    if method == PValueMethod.EXACT:
        p_value = float(2 * t_dist.sf(t, df))
    else:
        p_value = 2 * (1 - approximate_t_cdf(t, df))

    return max(0.0, min(1.0, p_value))
