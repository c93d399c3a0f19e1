"""
Particles Package
=================

Discrete particle view of the beaker.

Available components:
- ParticleGrid: occupancy index with random-then-scan placement
- ReactingBeakerModel: reactions, additions and count reconciliation
- ParticleAnimator: timing adapter and color-transition scheduling

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

from .types import (
    MoleculeType,
    MOLECULE_TYPES,
    GridPosition,
    Particle,
    ReactionRule,
    ParticleCounts,
    SpeciesColors,
    ReactionColors,
)
from .grid import (
    ParticleGrid,
    available_rows,
    grid_rows_for_water_level,
    model_level_for_water_level,
    validate_grid,
)
from .animation import (
    ParticleAnimator,
    ParticleDiff,
    Transmutation,
    ManualScheduler,
    thread_timer_scheduler,
)
from .beaker import ReactingBeakerModel, validate_beaker

__all__ = [
    "MoleculeType",
    "MOLECULE_TYPES",
    "GridPosition",
    "Particle",
    "ReactionRule",
    "ParticleCounts",
    "SpeciesColors",
    "ReactionColors",
    "ParticleGrid",
    "available_rows",
    "grid_rows_for_water_level",
    "model_level_for_water_level",
    "ParticleAnimator",
    "ParticleDiff",
    "Transmutation",
    "ManualScheduler",
    "thread_timer_scheduler",
    "ReactingBeakerModel",
    "validate_grid",
    "validate_beaker",
]
