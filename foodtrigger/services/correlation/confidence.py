"""Coarse confidence labels from significance and sample size."""

from typing import Optional

from foodtrigger.services.correlation.types import AnalysisConfig, ConfidenceLevel

DEFAULT_CONFIG = AnalysisConfig()


def classify_confidence(
    p_value: float, sample_size: int, config: Optional[AnalysisConfig] = None
) -> ConfidenceLevel:
    """HIGH needs p < 0.01 and n >= 20, MEDIUM p < 0.05 and n >= 10; else LOW."""
    config = config or DEFAULT_CONFIG

    if p_value < config.high_confidence_p and sample_size >= config.high_confidence_n:
        return ConfidenceLevel.HIGH
    if (
        p_value < config.medium_confidence_p
        and sample_size >= config.medium_confidence_n
    ):
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW
