"""
Unit tests for the synthetic TVL series formulas.
"""

import math
import random

from app.services.metrics.generator import TvlGenerator, clamp_non_negative


def test_clamp_non_negative():
    assert clamp_non_negative(-5.0) == 0.0
    assert clamp_non_negative(0.0) == 0.0
    assert clamp_non_negative(3.5) == 3.5


def test_seed_values_volume_and_fees_are_periodic():
    """Seed volume and fees depend only on the hour offset."""
    generator = TvlGenerator()

    _, volume, fees = generator.seed_values(5, random.Random(0))

    assert volume == abs(math.sin(5)) * 50_000
    assert fees == abs(math.cos(5)) * 5_000


def test_seed_values_at_zero_offset():
    generator = TvlGenerator(seed_jitter=0.0)

    tvl, volume, fees = generator.seed_values(0, random.Random(0))

    assert tvl == 1_000_000
    assert volume == 0
    assert fees == 5_000


def test_next_values_without_previous_uses_baseline():
    generator = TvlGenerator(step=0.0)

    tvl, _, _ = generator.next_values(None, random.Random(0))

    assert tvl == 1_000_000


def test_next_values_clamps_all_fields():
    """A negative baseline with a negative-only generator still yields zeros."""
    generator = TvlGenerator(max_volume=-10.0, max_fees=-1.0)

    tvl, volume, fees = generator.next_values(-1_000_000.0, random.Random(0))

    assert (tvl, volume, fees) == (0.0, 0.0, 0.0)
