"""
Simulated physiological readings.

No sensors are attached: each reading is drawn uniformly from a range that is
typical for the respondent's risk tier. Fields are sampled independently.
"""

import random
from typing import NamedTuple

import structlog

from heartpi.domain.models import Readings, RiskTier

logger = structlog.get_logger(__name__)


class Range(NamedTuple):
    low: float
    high: float

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high


class TierRanges(NamedTuple):
    heart_rate: Range
    systolic_bp: Range
    diastolic_bp: Range
    cholesterol: Range
    ecg: Range


TIER_RANGES: dict[RiskTier, TierRanges] = {
    RiskTier.LOW: TierRanges(
        heart_rate=Range(60, 80),
        systolic_bp=Range(110, 120),
        diastolic_bp=Range(70, 80),
        cholesterol=Range(150, 200),
        ecg=Range(0.05, 0.15),
    ),
    RiskTier.MODERATE: TierRanges(
        heart_rate=Range(80, 95),
        systolic_bp=Range(120, 135),
        diastolic_bp=Range(80, 90),
        cholesterol=Range(200, 240),
        ecg=Range(0.02, 0.18),
    ),
    RiskTier.HIGH: TierRanges(
        heart_rate=Range(95, 120),
        systolic_bp=Range(135, 160),
        diastolic_bp=Range(90, 110),
        cholesterol=Range(240, 300),
        ecg=Range(-0.1, 0.3),
    ),
}


class ReadingSimulator:
    """
    Draws tier-consistent readings from an injectable random source.

    Production code uses a Random seeded from OS entropy; tests pass a seeded
    instance to get repeatable draws.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()
        self.logger = logger.bind(component="reading_simulator")

    def _draw(self, bounds: Range) -> float:
        # uniform() can round past the upper bound on some float pairs
        return min(max(self.rng.uniform(bounds.low, bounds.high), bounds.low), bounds.high)

    def simulate(self, risk_tier: RiskTier) -> Readings:
        ranges = TIER_RANGES[risk_tier]
        readings = Readings(
            heart_rate=self._draw(ranges.heart_rate),
            systolic_bp=self._draw(ranges.systolic_bp),
            diastolic_bp=self._draw(ranges.diastolic_bp),
            cholesterol=self._draw(ranges.cholesterol),
            ecg=self._draw(ranges.ecg),
        )
        self.logger.debug(
            "readings_simulated",
            tier=risk_tier.value,
            heart_rate=round(readings.heart_rate, 1),
        )
        return readings

    def follow_up_heart_rates(self, base: float, count: int, jitter: float) -> list[float]:
        """Heart rates scattered uniformly within +/- jitter of base."""
        if count < 0:
            raise ValueError("count must be non-negative")
        window = Range(base - jitter, base + jitter)
        return [self._draw(window) for _ in range(count)]
