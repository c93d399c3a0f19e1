"""
Chemistry Core Package
======================

Closed-form acid/base chemistry for the simulator.

This package provides:
- Equations: constant, linear and switching scalar functions
- Substances: acid/base catalog and titrants
- Chemistry: pH, species distribution, titration curves
- Buffer: salt-addition and strong-addition phases of a buffer

USAGE EXAMPLE
============

```python
from acid_base_sim.core import calculate_pH, generate_titration_curve, WEAK_ACID_HA

pH = calculate_pH(WEAK_ACID_HA, 0.05)
curve = generate_titration_curve(WEAK_ACID_HA, 0.1, 25.0, 0.1, max_volume=50.0)
```

Every function is pure: identical inputs give identical outputs, with no
hidden state, so results can be re-derived on every UI update.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

from .equations import (
    Equation,
    ConstantEquation,
    LinearEquation,
    SwitchingEquation,
    validate_equations,
)

from .substances import (
    Substance,
    SubstanceType,
    PrimaryIon,
    Titrant,
    WATER_DISSOCIATION_CONSTANT,
    ALL_SUBSTANCES,
    HYDROGEN_CHLORIDE,
    SODIUM_HYDROXIDE,
    WEAK_ACID_HA,
    WEAK_BASE_B,
    get_substance,
    substances_by_type,
    titrant_for,
    charged_ion_symbol,
    primary_ion_symbol,
    ph_color,
    validate_substances,
)

from .chemistry import (
    SpeciesCounts,
    TitrationPoint,
    calculate_pH,
    weak_ion_concentration,
    concentration_from_pH,
    complement_concentration,
    get_species_counts,
    get_species_fractions,
    calculate_buffer_pH,
    calculate_buffer_capacity,
    calculate_equivalence_volume,
    calculate_titration_pH,
    generate_titration_curve,
    find_volume_for_pH,
    validate_chemistry,
)

from .buffer import (
    EquilibriumCounts,
    EquilibriumConcentrations,
    SubstanceConcentrations,
    BufferSaltModel,
    BufferStrongAdditionModel,
    validate_buffer,
)

__all__ = [
    # Equations
    "Equation",
    "ConstantEquation",
    "LinearEquation",
    "SwitchingEquation",
    # Substances
    "Substance",
    "SubstanceType",
    "PrimaryIon",
    "Titrant",
    "WATER_DISSOCIATION_CONSTANT",
    "ALL_SUBSTANCES",
    "HYDROGEN_CHLORIDE",
    "SODIUM_HYDROXIDE",
    "WEAK_ACID_HA",
    "WEAK_BASE_B",
    "get_substance",
    "substances_by_type",
    "titrant_for",
    "charged_ion_symbol",
    "primary_ion_symbol",
    "ph_color",
    # Chemistry
    "SpeciesCounts",
    "TitrationPoint",
    "calculate_pH",
    "weak_ion_concentration",
    "concentration_from_pH",
    "complement_concentration",
    "get_species_counts",
    "get_species_fractions",
    "calculate_buffer_pH",
    "calculate_buffer_capacity",
    "calculate_equivalence_volume",
    "calculate_titration_pH",
    "generate_titration_curve",
    "find_volume_for_pH",
    # Buffer
    "EquilibriumCounts",
    "EquilibriumConcentrations",
    "SubstanceConcentrations",
    "BufferSaltModel",
    "BufferStrongAdditionModel",
    # Validation functions
    "validate_equations",
    "validate_substances",
    "validate_chemistry",
    "validate_buffer",
]
