"""
Buffer Module for the Acid/Base Simulator
=========================================

This module models the salt-addition ("common ion") phase of a buffer and
the strong acid/base challenge that follows it.

THEORETICAL FOUNDATION
=====================

1. Salt addition to a weak acid at equilibrium:
   MA → M⁺ + A⁻            (complete)
   A⁻ + H⁺ → HA            (while free H⁺ remains)

   Phase 1 (x < n_H⁺): added A⁻ is consumed as fast as it arrives
       [HA]  rises linearly   C_eq → C_0
       [H⁺]  falls linearly   x_eq → 0
       [A⁻]  constant at      x_eq
   Phase 2 (x ≥ n_H⁺): H⁺ is exhausted
       [HA]  constant at      C_0
       [H⁺]  constant at      0
       [A⁻]  rises linearly   x_eq → C_0 at x = max_substance

   max_substance = n_HA + n_H⁺ - n_A⁻

2. pH from Henderson-Hasselbalch:
   pH = pKa + log10([A⁻]/[HA])

   For a weak base the same curves describe B / OH⁻ / BH⁺ and
   pH = 14 - (pKb + log10([BH⁺]/[B])).

Thresholds use integer particle counts so that phase changes line up with
the particle beaker; curve values use the continuous equilibrium
concentrations.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
import numpy as np
from dataclasses import dataclass

from .equations import ConstantEquation, LinearEquation, SwitchingEquation
from .chemistry import weak_ion_concentration
from .substances import PKW, Substance, SubstanceType, WEAK_ACID_HA

logger = logging.getLogger(__name__)


@dataclass
class EquilibriumCounts:
    """
    Integer particle counts at the pre-salt equilibrium.

    Attributes:
        substance: Neutral molecules (HA or B)
        primary: Free H⁺ / OH⁻ (phase threshold)
        secondary: Conjugate ions (A⁻ or BH⁺)
    """

    substance: int
    primary: int
    secondary: int


@dataclass
class EquilibriumConcentrations:
    """
    Concentrations at the pre-salt equilibrium [mol/L].

    Attributes:
        equilibrium_substance: [HA] after dissociation (C_0 - x)
        initial_substance: [HA] before dissociation (C_0)
        ion_concentration: [H⁺] = [A⁻] after dissociation (x)
    """

    equilibrium_substance: float
    initial_substance: float
    ion_concentration: float


@dataclass
class SubstanceConcentrations:
    """Concentrations of the three displayed species [mol/L]."""

    substance: float
    primary: float
    secondary: float


DEGENERATE_CONCENTRATION = 1e-10
NEUTRAL_PH = 7.0


def henderson_hasselbalch(
    pk: float, substance: float, secondary: float, base: bool = False
) -> float:
    """
    pH from the conjugate/neutral ratio, 7 when the ratio is undefined.

    Args:
        pk: pKa (acid) or pKb (base)
        substance: Neutral species concentration
        secondary: Conjugate ion concentration
        base: Interpret pk as pKb and return 14 - pOH
    """
    if substance <= DEGENERATE_CONCENTRATION or secondary <= DEGENERATE_CONCENTRATION:
        return NEUTRAL_PH

    p = pk + float(np.log10(secondary / substance))
    return PKW - p if base else p


class BufferSaltModel:
    """
    Piecewise concentration model of salt addition to a weak electrolyte.

    Built once per equilibrium snapshot and queried repeatedly; rebuild it
    whenever the substance, water level or particle count changes.
    """

    def __init__(
        self,
        counts: EquilibriumCounts,
        concentrations: EquilibriumConcentrations,
        pka: float,
        base: bool = False,
    ):
        """
        Args:
            counts: Integer counts (threshold and max_substance)
            concentrations: Equilibrium concentrations (curve endpoints)
            pka: pKa of the weak acid (pKb when base=True)
            base: Model a weak base (pH = 14 - pOH)
        """
        self.pka = pka
        self.base = base
        self.threshold = counts.primary
        self.max_substance = counts.substance + counts.primary - counts.secondary

        equilibrium_c = concentrations.equilibrium_substance
        initial_c = concentrations.initial_substance
        ion_c = concentrations.ion_concentration

        self.substance_equation = SwitchingEquation(
            self.threshold,
            LinearEquation(0, equilibrium_c, self.threshold, initial_c),
            ConstantEquation(initial_c),
        )
        self.primary_equation = SwitchingEquation(
            self.threshold,
            LinearEquation(0, ion_c, self.threshold, 0.0),
            ConstantEquation(0.0),
        )
        self.secondary_equation = SwitchingEquation(
            self.threshold,
            ConstantEquation(ion_c),
            LinearEquation(self.threshold, ion_c, self.max_substance, initial_c),
        )

    @classmethod
    def for_substance(
        cls,
        substance: Substance,
        particle_count: int,
        total_slots: int,
        initial_ion_fraction: float = 0.1,
    ) -> "BufferSaltModel":
        """
        Build the model from a weak substance filling `particle_count` of
        `total_slots` grid cells.

        C_0 = particle_count / total_slots, x from the weak quadratic,
        ion count = floor(initial_ion_fraction · particle_count).
        """
        if substance.is_strong:
            raise ValueError(f"{substance.id}: buffers need a weak acid or base")
        if total_slots <= 0:
            raise ValueError(f"total_slots must be positive, got {total_slots}")

        is_base = substance.type is SubstanceType.WEAK_BASE
        k = substance.kb if is_base else substance.ka

        initial_c = particle_count / total_slots
        ion_c = weak_ion_concentration(k, initial_c) if initial_c > 0 else 0.0
        ion_count = int(np.floor(initial_ion_fraction * particle_count))

        logger.debug(
            "Buffer snapshot for %s: C0=%.4g, x=%.4g, ions=%d",
            substance.id, initial_c, ion_c, ion_count,
        )

        return cls(
            EquilibriumCounts(
                substance=particle_count, primary=ion_count, secondary=ion_count
            ),
            EquilibriumConcentrations(
                equilibrium_substance=initial_c - ion_c,
                initial_substance=initial_c,
                ion_concentration=ion_c,
            ),
            substance.pkb if is_base else substance.pka,
            base=is_base,
        )

    def get_concentrations(self, salt_added: float) -> SubstanceConcentrations:
        """Concentrations after `salt_added` salt particles."""
        return SubstanceConcentrations(
            substance=self.substance_equation.get_value(salt_added),
            primary=self.primary_equation.get_value(salt_added),
            secondary=self.secondary_equation.get_value(salt_added),
        )

    def get_pH(self, salt_added: float) -> float:
        """Henderson-Hasselbalch pH; 7 if either concentration ≤ 1e-10."""
        c = self.get_concentrations(salt_added)
        return henderson_hasselbalch(self.pka, c.substance, c.secondary, self.base)


class BufferStrongAdditionModel:
    """
    Strong acid/base challenge of a completed buffer.

    Starting from the salt model at max_substance, adding strong
    acid (to a weak-acid buffer) converts A⁻ into HA until the pH has
    moved by `ph_shift`. The shift Δ solves

        pKa + log10((A - Δ)/(HA + Δ)) = pH_0 - ph_shift

        Δ = (A - HA·10^(p - pKa)) / (1 + 10^(p - pKa))

    and the concentrations move linearly with the added fraction
    t = added / max_added.
    """

    def __init__(
        self,
        substance: Substance,
        salt_model: BufferSaltModel,
        max_added: float,
        ph_shift: float = 1.5,
    ):
        if max_added <= 0:
            raise ValueError(f"max_added must be positive, got {max_added}")

        self.substance = substance
        self.max_added = max_added
        self.is_acid = substance.type is SubstanceType.WEAK_ACID
        self.pk = substance.pka if self.is_acid else substance.pkb
        self._k = substance.ka if self.is_acid else substance.kb

        self.start = salt_model.get_concentrations(salt_model.max_substance)
        start_pH = salt_model.get_pH(salt_model.max_substance)
        target_p = start_pH - ph_shift if self.is_acid else (PKW - start_pH) - ph_shift

        power = 10.0 ** (target_p - self.pk)
        self.change = (self.start.secondary - self.start.substance * power) / (1.0 + power)

        final_secondary = self.start.secondary - self.change
        final_substance = self.start.substance + self.change
        self.final_primary = (
            0.0 if final_secondary == 0 else self._k * final_substance / final_secondary
        )

    def get_concentrations(self, added: float) -> SubstanceConcentrations:
        t = min(1.0, max(0.0, added / self.max_added))
        return SubstanceConcentrations(
            substance=self.start.substance + self.change * t,
            primary=self.final_primary * t,
            secondary=self.start.secondary - self.change * t,
        )

    def get_pH(self, added: float) -> float:
        c = self.get_concentrations(added)
        return henderson_hasselbalch(self.pk, c.substance, c.secondary, not self.is_acid)


def validate_buffer() -> None:
    """
    Validation of the salt-addition model.

    Tests:
    1. max_substance from counts
    2. Phase-1 constancy of the secondary ion
    3. Exact H⁺ depletion at the threshold
    4. Henderson-Hasselbalch endpoints
    5. Strong addition moves pH by the configured shift
    """
    model = BufferSaltModel(
        EquilibriumCounts(substance=50, primary=5, secondary=5),
        EquilibriumConcentrations(
            equilibrium_substance=0.08, initial_substance=0.1, ion_concentration=0.02
        ),
        pka=4.76,
    )

    # Test 1
    assert model.max_substance == 50

    # Test 2
    assert model.get_concentrations(0).secondary == model.get_concentrations(4.999).secondary

    # Test 3
    assert model.get_concentrations(5).primary == 0.0

    # Test 4
    assert abs(model.get_pH(0) - (4.76 + np.log10(0.02 / 0.08))) < 1e-9
    assert abs(model.get_pH(50) - 4.76) < 1e-9

    # Test 5
    salt = BufferSaltModel.for_substance(WEAK_ACID_HA, 40, 209)
    strong = BufferStrongAdditionModel(WEAK_ACID_HA, salt, max_added=20)
    drop = salt.get_pH(salt.max_substance) - strong.get_pH(20)
    assert abs(drop - 1.5) < 1e-9, f"Strong addition shifted pH by {drop:.3f}"

    print("✓ All buffer validations passed")
