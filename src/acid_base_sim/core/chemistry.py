"""
Chemistry Module for the Acid/Base Simulator
============================================

This module implements closed-form acid/base equilibria: pH of a dissolved
substance, species distribution for the particle beaker, and titration
against a strong titrant.

THEORETICAL FOUNDATION
=====================

1. Strong electrolytes (complete dissociation):
   pH = -log10(C)            strong acid
   pH = 14 + log10(C)        strong base  (pOH = -log10(C))

2. Weak electrolytes (ICE table, water autoionization neglected):
   K = x² / (C - x)   →   x² + K·x - K·C = 0

   Positive root:
   x = (-K + √(K² + 4·K·C)) / 2 = 2·K·C / (K + √(K² + 4·K·C))

   The second form avoids cancellation when K >> C.
   x is [H⁺] for acids (K = Ka) and [OH⁻] for bases (K = Kb).

3. Henderson-Hasselbalch (buffer region):
   pH = pKa + log10([A⁻]/[HA])
   pOH = pKb + log10([BH⁺]/[B])

4. Titration with a 1:1 strong titrant:
   n_sub = M·V,  n_tit = M_t·V_t,  V_total = V + V_t
   V_eq = M·V / M_t
   At the equivalence point of a weak substance the conjugate hydrolyzes
   with K_conj = Kw / Ka (or Kw / Kb).

DOMAIN
======

All functions are total over their documented domain. Non-positive
concentrations or a zero titrant molarity are caller precondition
violations: they produce NaN/±inf (numpy semantics), never an exception.
Callers clamp before display.

References:
- Harris "Quantitative Chemical Analysis" (9th ed.)
- Skoog et al "Fundamentals of Analytical Chemistry" (9th ed.)

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
import numpy as np
from typing import Dict, List, NamedTuple, Optional
from dataclasses import dataclass
from scipy.optimize import brentq

from .substances import (
    Substance,
    SubstanceType,
    WATER_DISSOCIATION_CONSTANT,
    PKW,
    HYDROGEN_CHLORIDE,
    SODIUM_HYDROXIDE,
    WEAK_ACID_HA,
    WEAK_BASE_B,
    weak_acid,
)

logger = logging.getLogger(__name__)


# Tolerances for the stoichiometric point of a titration
EPS_MOLES = 1e-9
EPS_CONC = 1e-7

# Defaults for particle-count conversion
DEFAULT_PARTICLE_COUNT = 50
DEFAULT_CURVE_SAMPLES = 101


@dataclass
class SpeciesCounts:
    """Integer particle counts per species."""

    substance: int
    primary: int
    secondary: int

    @property
    def total(self) -> int:
        return self.substance + self.primary + self.secondary


class TitrationPoint(NamedTuple):
    """One sample of a titration curve."""

    volume: float
    ph: float


# ============================================================================
# pH of a dissolved substance
# ============================================================================


def weak_ion_concentration(k: float, concentration: float) -> float:
    """
    Positive root of x² + K·x - K·C = 0.

    Args:
        k: Ka (acid) or Kb (base)
        concentration: Analytical concentration C [mol/L]

    Returns:
        [H⁺] for acids, [OH⁻] for bases [mol/L]

    Example:
        >>> x = weak_ion_concentration(1.8e-5, 0.1)
        >>> abs(x - 1.333e-3) < 1e-5
        True
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        root = np.sqrt(np.float64(k) * k + 4.0 * k * concentration)
        return float(2.0 * k * concentration / (k + root))


def _strong_ph(acidic: bool, concentration: float) -> float:
    """pH from the concentration of a fully dissociated acid or base."""
    with np.errstate(divide="ignore", invalid="ignore"):
        log_c = float(np.log10(np.float64(concentration)))
    return -log_c if acidic else PKW + log_c


def _weak_ph(acidic: bool, k: float, concentration: float) -> float:
    """pH from the quadratic equilibrium of a weak acid or base."""
    x = weak_ion_concentration(k, concentration)
    return _strong_ph(acidic, x)


def calculate_pH(substance: Substance, concentration: float) -> float:
    """
    pH of a substance dissolved to the given molarity.

    Precondition: concentration > 0. The engine does not clamp; callers
    floor the concentration (e.g. at 1e-10) before calling.

    Args:
        substance: Acid or base
        concentration: Molarity [mol/L]

    Returns:
        pH (unbounded; callers clamp for display)

    Example:
        >>> abs(calculate_pH(HYDROGEN_CHLORIDE, 0.01) - 2.0) < 1e-12
        True
    """
    substance_type = substance.type

    if substance_type is SubstanceType.STRONG_ACID:
        return _strong_ph(True, concentration)
    if substance_type is SubstanceType.STRONG_BASE:
        return _strong_ph(False, concentration)
    if substance_type is SubstanceType.WEAK_ACID:
        return _weak_ph(True, substance.ka, concentration)
    return _weak_ph(False, substance.kb, concentration)


def concentration_from_pH(pH: float) -> float:
    """[H⁺] = 10^(-pH)."""
    return float(10.0 ** (-pH))


def complement_concentration(primary_concentration: float) -> float:
    """[OH⁻] from [H⁺] (or vice versa) using pH + pOH = 14."""
    p_primary = -np.log10(primary_concentration)
    return float(10.0 ** (-(PKW - p_primary)))


# ============================================================================
# Species distribution
# ============================================================================


def get_species_counts(
    substance: Substance,
    molarity: float,
    total_particle_count: int = DEFAULT_PARTICLE_COUNT,
) -> SpeciesCounts:
    """
    Convert an equilibrium molarity into beaker particle counts.

    The particle budget scales with molarity up to the full-beaker
    concentration. The budget is partitioned into units of
    `substance_added_per_ion` neutral molecules plus one primary and one
    secondary ion, so a strong electrolyte (ratio 0) shows only ion pairs.
    Any remainder is shown as neutral molecules for weak substances and
    dropped for strong ones. The counts never exceed total_particle_count.

    Args:
        substance: Acid or base
        molarity: Substance molarity [mol/L]
        total_particle_count: Particle budget of a full beaker

    Returns:
        SpeciesCounts

    Example:
        >>> counts = get_species_counts(WEAK_ACID_HA, 0.05, 40)
        >>> (counts.substance, counts.primary, counts.secondary)
        (20, 10, 10)
    """
    if molarity <= 0 or total_particle_count <= 0:
        return SpeciesCounts(0, 0, 0)

    fraction = min(1.0, molarity / substance.concentration_at_max_substance)
    budget = min(total_particle_count, int(round(total_particle_count * fraction)))

    per_ion = max(0, substance.substance_added_per_ion)
    pairs = budget // (per_ion + 2)
    neutral = 0 if substance.is_strong else budget - 2 * pairs

    return SpeciesCounts(substance=neutral, primary=pairs, secondary=pairs)


def get_species_fractions(substance: Substance, molarity: float) -> Dict[str, float]:
    """
    Ionized vs. neutral fraction of the dissolved substance.

    α = [H⁺]/C for weak acids, [OH⁻]/C for weak bases; strong
    electrolytes are fully ionized.

    Returns:
        Dictionary with 'neutral' and 'ionized'
    """
    if molarity <= 0:
        return {"neutral": 1.0, "ionized": 0.0}

    if substance.is_strong:
        return {"neutral": 0.0, "ionized": 1.0}

    k = substance.ka if substance.is_acid else substance.kb
    ionized = min(1.0, weak_ion_concentration(k, molarity) / molarity)
    return {"neutral": 1.0 - ionized, "ionized": ionized}


# ============================================================================
# Buffers
# ============================================================================


def calculate_buffer_pH(
    substance: Substance, acid_concentration: float, base_concentration: float
) -> float:
    """
    Henderson-Hasselbalch pH of a conjugate pair.

    For a weak acid the pair is [HA]/[A⁻]; for a weak base it is
    [BH⁺]/[B] and the pOH form is used. Returns 7 if either side is
    non-positive.
    """
    if acid_concentration <= 0 or base_concentration <= 0:
        return 7.0

    if substance.type is SubstanceType.WEAK_ACID:
        return substance.pka + float(np.log10(base_concentration / acid_concentration))

    pOH = substance.pkb + float(np.log10(acid_concentration / base_concentration))
    return PKW - pOH


def calculate_buffer_capacity(total_concentration: float, acid_fraction: float) -> float:
    """
    Relative buffering capacity, maximal at [HA] = [A⁻].

    β ∝ 4·C·f·(1 - f), normalized so that β = C at f = 0.5.
    """
    base_fraction = 1.0 - acid_fraction
    return total_concentration * acid_fraction * base_fraction * 4.0


# ============================================================================
# Titration
# ============================================================================


def calculate_equivalence_volume(
    substance_molarity: float, beaker_volume: float, titrant_molarity: float
) -> float:
    """
    Titrant volume that neutralizes the substance (1:1 stoichiometry).

    V_eq = M·V / M_t. A zero titrant molarity yields inf (or NaN for a
    zero numerator) rather than raising.

    Example:
        >>> calculate_equivalence_volume(0.1, 25.0, 0.1)
        25.0
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(
            np.float64(substance_molarity) * beaker_volume / np.float64(titrant_molarity)
        )


def calculate_titration_pH(
    substance: Substance,
    substance_molarity: float,
    beaker_volume: float,
    titrant_molarity: float,
    titrant_volume: float,
) -> float:
    """
    pH after adding titrant to the beaker.

    - No titrant yet (titrant_volume ≤ 0): pH of the pure substance.
    - Strong substance: pH of whichever side is in excess, diluted into
      the combined volume; exactly 7 within tolerance of the stoichiometric
      point.
    - Weak substance before equivalence: Henderson-Hasselbalch on the
      remaining substance vs. the conjugate produced.
    - Weak substance at/after equivalence: conjugate hydrolysis
      (K = Kw/Ka or Kw/Kb); the strong titrant takes over once its excess
      exceeds the hydrolysis ion concentration.

    Args:
        substance: Acid or base in the beaker
        substance_molarity: Molarity of the beaker contents [mol/L]
        beaker_volume: Initial volume in the beaker
        titrant_molarity: Molarity of the strong titrant [mol/L]
        titrant_volume: Volume of titrant added (same unit as beaker_volume)

    Returns:
        pH (unbounded)
    """
    if titrant_volume <= 0:
        return calculate_pH(substance, substance_molarity)

    total_volume = beaker_volume + titrant_volume
    substance_moles = substance_molarity * beaker_volume
    titrant_moles = titrant_molarity * titrant_volume

    excess_moles = substance_moles - titrant_moles
    excess_concentration = excess_moles / total_volume
    acidic_substance = substance.is_acid

    if substance.is_strong:
        if abs(excess_moles) <= EPS_MOLES or abs(excess_concentration) <= EPS_CONC:
            return 7.0
        if excess_moles > 0:
            return _strong_ph(acidic_substance, excess_concentration)
        return _strong_ph(not acidic_substance, -excess_concentration)

    # Buffer region: conjugate produced 1:1 by the titrant. Near V = 0 the
    # Henderson-Hasselbalch ratio is tiny, so the dissociation of the
    # remaining substance bounds the pH instead.
    if excess_moles > EPS_MOLES:
        k = substance.ka if acidic_substance else substance.kb
        dissociation_pH = _weak_ph(acidic_substance, k, excess_concentration)
        conjugate_concentration = titrant_moles / total_volume
        if conjugate_concentration <= 0:
            return dissociation_pH
        ratio = conjugate_concentration / excess_concentration
        if acidic_substance:
            return max(dissociation_pH, substance.pka + float(np.log10(ratio)))
        return min(dissociation_pH, PKW - (substance.pkb + float(np.log10(ratio))))

    # Equivalence and beyond: all substance converted to its conjugate
    conjugate_concentration = substance_moles / total_volume
    if acidic_substance:
        k_conjugate = WATER_DISSOCIATION_CONSTANT / substance.ka
    else:
        k_conjugate = WATER_DISSOCIATION_CONSTANT / substance.kb
    hydrolysis_ion = weak_ion_concentration(k_conjugate, conjugate_concentration)
    titrant_ion = max(0.0, -excess_concentration)

    # Conjugate of an acid is basic (OH⁻), conjugate of a base is acidic (H⁺)
    return _strong_ph(not acidic_substance, max(hydrolysis_ion, titrant_ion))


def generate_titration_curve(
    substance: Substance,
    substance_molarity: float,
    beaker_volume: float,
    titrant_molarity: float,
    max_volume: float,
    samples: int = DEFAULT_CURVE_SAMPLES,
) -> List[TitrationPoint]:
    """
    Sample the titration curve at fixed steps from 0 to max_volume.

    Volumes come from numpy.linspace, so the sequence is strictly
    increasing for max_volume > 0 and has exactly `samples` points. pH is
    clamped to [0, 14] for charting. Identical inputs always produce an
    identical sequence.

    Args:
        samples: Number of points (at least 2)

    Returns:
        List of TitrationPoint(volume, ph)
    """
    if samples < 2:
        raise ValueError(f"A titration curve needs at least 2 samples, got {samples}")

    volumes = np.linspace(0.0, max_volume, samples)
    points = []
    for volume in volumes:
        pH = calculate_titration_pH(
            substance, substance_molarity, beaker_volume, titrant_molarity, float(volume)
        )
        points.append(TitrationPoint(float(volume), float(np.clip(pH, 0.0, PKW))))
    return points


def find_volume_for_pH(
    substance: Substance,
    substance_molarity: float,
    beaker_volume: float,
    titrant_molarity: float,
    target_pH: float,
    max_volume: float,
    tolerance: float = 1e-9,
) -> Optional[float]:
    """
    Titrant volume at which the solution reaches target_pH.

    Solved with Brent's method on f(V) = pH(V) - target over
    (0, max_volume]. The curve is monotonic, so a sign change brackets the
    unique crossing; None is returned when the target is not reached.

    Example:
        >>> v = find_volume_for_pH(HYDROGEN_CHLORIDE, 0.1, 25.0, 0.1, 7.0, 50.0)
        >>> abs(v - 25.0) < 1e-3
        True
    """

    def residual(volume: float) -> float:
        return (
            calculate_titration_pH(
                substance, substance_molarity, beaker_volume, titrant_molarity, volume
            )
            - target_pH
        )

    low = min(1e-12, max_volume)
    f_low = residual(low)
    f_high = residual(max_volume)

    if f_low == 0.0:
        return low
    if f_high == 0.0:
        return float(max_volume)
    if not (np.isfinite(f_low) and np.isfinite(f_high)) or f_low * f_high > 0:
        logger.debug(
            "Target pH %.3f not bracketed within [0, %.3f]", target_pH, max_volume
        )
        return None

    return float(brentq(residual, low, max_volume, xtol=tolerance))


def validate_chemistry() -> None:
    """
    Validation of the closed-form chemistry.

    Tests:
    1. Strong acid/base pH
    2. Weak acid root satisfies the quadratic
    3. Acetic-acid-like reference values
    4. Strong/strong equivalence point is neutral
    5. Weak acid equivalence point is basic
    6. Titration curve shape
    """
    # Test 1: Strong acid/base
    assert abs(calculate_pH(HYDROGEN_CHLORIDE, 1e-3) - 3.0) < 1e-9
    assert abs(calculate_pH(SODIUM_HYDROXIDE, 1e-3) - 11.0) < 1e-9

    # Test 2: Quadratic root correctness
    for ka, c in [(1.8e-5, 0.1), (1e-2, 1e-4), (4.5e-4, 0.05)]:
        x = weak_ion_concentration(ka, c)
        assert abs(x * x + ka * x - ka * c) < 1e-9, "Root does not satisfy quadratic"

    # Test 3: Acetic acid
    acetic = weak_acid("HAc", "HAc", "Ac", 2, "#000000", "#000000", 1.8e-5, "NaAc")
    pH_acetic = calculate_pH(acetic, 0.1)
    assert abs(pH_acetic - 2.87) < 0.01, f"Acetic acid pH {pH_acetic:.3f} != 2.87"

    # Test 4: Strong/strong equivalence
    v_eq = calculate_equivalence_volume(0.1, 25.0, 0.1)
    assert abs(calculate_titration_pH(HYDROGEN_CHLORIDE, 0.1, 25.0, 0.1, v_eq) - 7.0) < 0.01

    # Test 5: Weak acid equivalence is basic
    v_eq = calculate_equivalence_volume(0.1, 25.0, 0.1)
    assert calculate_titration_pH(WEAK_ACID_HA, 0.1, 25.0, 0.1, v_eq) > 7.0
    assert calculate_titration_pH(WEAK_BASE_B, 0.1, 25.0, 0.1, v_eq) < 7.0

    # Test 6: Curve shape
    curve = generate_titration_curve(WEAK_ACID_HA, 0.1, 25.0, 0.1, 50.0)
    assert len(curve) == DEFAULT_CURVE_SAMPLES
    assert all(a.volume < b.volume for a, b in zip(curve, curve[1:]))
    assert curve[0].ph < 7.0 < curve[-1].ph

    print("✓ All chemistry validations passed")


if __name__ == "__main__":
    """
    Demonstration of acid/base equilibria.
    """
    print("Acid/Base Chemistry Demonstration")
    print("=" * 60)
    print(f"{'Substance':<10} {'C (M)':<10} {'pH':<8} {'ionized':<10}")
    print("-" * 60)

    for substance in (HYDROGEN_CHLORIDE, SODIUM_HYDROXIDE, WEAK_ACID_HA, WEAK_BASE_B):
        for c in (0.1, 0.01):
            pH = calculate_pH(substance, c)
            frac = get_species_fractions(substance, c)["ionized"]
            print(f"{substance.symbol:<10} {c:<10.3f} {pH:<8.3f} {frac:<10.4f}")

    print()
    validate_chemistry()
