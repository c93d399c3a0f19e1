"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from acid_base_sim.config import GridConfig
from acid_base_sim.particles import (
    ManualScheduler,
    ParticleAnimator,
    ParticleGrid,
    ReactingBeakerModel,
    ReactionColors,
    SpeciesColors,
)


SUBSTANCE_COLOR = "#2D3E4E"
PRIMARY_COLOR = "#F89880"
SECONDARY_COLOR = "#B20D30"


@pytest.fixture
def scheduler():
    """Deterministic scheduler drained by the test."""
    return ManualScheduler()


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def beaker(scheduler, rng):
    """Beaker with default geometry, seeded placement and manual scheduling."""
    config = GridConfig()
    return ReactingBeakerModel(
        grid_config=config,
        animator=ParticleAnimator(scheduler=scheduler, clock=scheduler.clock_ms),
        grid=ParticleGrid(config.columns, config.total_rows, rng=rng),
    )


@pytest.fixture
def colors():
    return SpeciesColors(
        substance=SUBSTANCE_COLOR,
        primary_ion=PRIMARY_COLOR,
        secondary_ion=SECONDARY_COLOR,
    )


@pytest.fixture
def salt_colors():
    """Colors for A⁻ + H⁺ → HA."""
    return ReactionColors(
        reactant=SECONDARY_COLOR,
        reacting_with=PRIMARY_COLOR,
        produced=SUBSTANCE_COLOR,
    )
