"""Synthetic TVL series formulas.

The seed backfill and the live random walk share the same clamping policy so
the series looks continuous across the seed -> live transition. All
randomness comes from the ``random.Random`` passed in, never from the module
level ``random`` functions.
"""

import math
import random
from dataclasses import dataclass
from typing import Optional, Tuple

# (tvl, volume_24h, fees_24h)
Values = Tuple[float, float, float]


def clamp_non_negative(value: float) -> float:
    return max(0.0, value)


@dataclass(frozen=True)
class TvlGenerator:
    """Parameters for the synthetic series.

    Attributes:
        base_tvl: Baseline TVL used for the seed oscillation and as the
            starting point of the random walk when no record exists yet.
        seed_amplitude: Amplitude of the sinusoidal seed oscillation.
        seed_jitter: Upper bound of the uniform jitter added to seed TVL.
        step: Total width of the live perturbation, centered on zero.
        max_volume: Upper bound for live 24h volume.
        max_fees: Upper bound for live 24h fees.
    """
    base_tvl: float = 1_000_000.0
    seed_amplitude: float = 50_000.0
    seed_jitter: float = 20_000.0
    step: float = 50_000.0
    seed_volume: float = 50_000.0
    seed_fees: float = 5_000.0
    max_volume: float = 60_000.0
    max_fees: float = 6_000.0

    def seed_values(self, hours_ago: int, rng: random.Random) -> Values:
        """Values for the backfill point ``hours_ago`` hours before now."""
        tvl = self.base_tvl + math.sin(hours_ago / 3) * self.seed_amplitude + rng.random() * self.seed_jitter
        volume = abs(math.sin(hours_ago)) * self.seed_volume
        fees = abs(math.cos(hours_ago)) * self.seed_fees
        return clamp_non_negative(tvl), clamp_non_negative(volume), clamp_non_negative(fees)

    def next_values(self, previous_tvl: Optional[float], rng: random.Random) -> Values:
        """Random-walk step from ``previous_tvl`` (or the baseline)."""
        base = self.base_tvl if previous_tvl is None else previous_tvl
        delta = (rng.random() - 0.5) * self.step
        volume = rng.random() * self.max_volume
        fees = rng.random() * self.max_fees
        return clamp_non_negative(base + delta), clamp_non_negative(volume), clamp_non_negative(fees)
