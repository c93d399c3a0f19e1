"""
Acid/Base Simulation Engine
===========================

Simulation core of an educational acid/base chemistry simulator.

This package provides:
- core: equilibrium chemistry (pH, titration, buffer/salt model)
- particles: discrete particle grid and the reacting beaker model

DATA FLOW
=========

UI input (substance, amount, water level, titrant volume)
    → core computes pH and concentrations (pure, re-derivable)
    → UI converts concentrations to integer target counts
    → ReactingBeakerModel reconciles its particles toward the targets
    → the renderer reads get_particles() and subscribes to changes

WHAT THIS PACKAGE DOES NOT DO:
- NO rendering, charts or styling
- NO guided tutorial state machine or navigation
- NO persistence of past experiments (snapshots are copied externally
  through get_particles / set_particles)
- NO reaction kinetics integration or particle physics

Run validation: `python -m acid_base_sim validate` or call
`run_all_validations()`

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Guilherme F. G. Santos"

from .config import GridConfig, AnimationTimings

from .core import (
    Substance,
    SubstanceType,
    BufferSaltModel,
    BufferStrongAdditionModel,
    calculate_pH,
    calculate_titration_pH,
    calculate_equivalence_volume,
    generate_titration_curve,
    get_species_counts,
    get_substance,
    validate_equations,
    validate_substances,
    validate_chemistry,
    validate_buffer,
)

from .particles import (
    MoleculeType,
    Particle,
    ParticleCounts,
    ParticleGrid,
    ReactingBeakerModel,
    ReactionRule,
    SpeciesColors,
    validate_grid,
    validate_beaker,
)

__all__ = [
    "GridConfig",
    "AnimationTimings",
    "Substance",
    "SubstanceType",
    "BufferSaltModel",
    "BufferStrongAdditionModel",
    "calculate_pH",
    "calculate_titration_pH",
    "calculate_equivalence_volume",
    "generate_titration_curve",
    "get_species_counts",
    "get_substance",
    "MoleculeType",
    "Particle",
    "ParticleCounts",
    "ParticleGrid",
    "ReactingBeakerModel",
    "ReactionRule",
    "SpeciesColors",
    "run_all_validations",
]


def run_all_validations():
    """
    Run all simulation validation checks.

    This should be run after any code changes to ensure
    chemistry and particle invariants are maintained.
    """
    print("Running Simulation Engine Validation Suite")
    print("=" * 70)

    print("\n1. Equations...")
    validate_equations()

    print("\n2. Substances...")
    validate_substances()

    print("\n3. Chemistry...")
    validate_chemistry()

    print("\n4. Buffer...")
    validate_buffer()

    print("\n5. Particle grid...")
    validate_grid()

    print("\n6. Reacting beaker...")
    validate_beaker()

    print("\n" + "=" * 70)
    print("ALL VALIDATIONS PASSED ✓")
    print("=" * 70)
