"""
Substance Catalog
=================

Immutable acid/base records consumed by the chemistry engine and the
buffer model.

THEORETICAL FOUNDATION
=====================

1. Dissociation constants:
   HA + H₂O ⇌ H₃O⁺ + A⁻     Ka = [H₃O⁺][A⁻] / [HA]
   B + H₂O ⇌ BH⁺ + OH⁻      Kb = [BH⁺][OH⁻] / [B]

2. Conjugate pairs (25°C):
   Ka · Kb = Kw = 1.0e-14

3. pK notation:
   pKa = -log10(Ka),  pKb = -log10(Kb)

Strong electrolytes dissociate completely, so their K values are carried
as 0 and `substance_added_per_ion` is 0. Weak electrolytes carry the
number of neutral molecules shown per ion pair produced.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import numpy as np
from typing import Dict, List, Optional
from dataclasses import dataclass
from enum import Enum


WATER_DISSOCIATION_CONSTANT = 1.0e-14  # Kw at 25°C [mol²/L²]
PKW = 14.0


class SubstanceType(Enum):
    """Acid/base family of a substance."""

    STRONG_ACID = "strongAcid"
    STRONG_BASE = "strongBase"
    WEAK_ACID = "weakAcid"
    WEAK_BASE = "weakBase"

    @property
    def is_acid(self) -> bool:
        return self in (SubstanceType.STRONG_ACID, SubstanceType.WEAK_ACID)

    @property
    def is_strong(self) -> bool:
        return self in (SubstanceType.STRONG_ACID, SubstanceType.STRONG_BASE)


class PrimaryIon(Enum):
    """Ion that sets the pH: H⁺ for acids, OH⁻ for bases."""

    HYDROGEN = "hydrogen"
    HYDROXIDE = "hydroxide"


# Display colors (hex) for ions and neutral molecules
ION_COLORS: Dict[str, str] = {
    "hydrogen": "#F89880",
    "hydroxide": "#A6ABD9",
    "chlorine": "#614066",
    "iodine": "#5856D6",
    "bromine": "#FF9500",
    "potassium": "#5E203B",
    "lithium": "#FF2D55",
    "sodium": "#FFCC00",
    "fluorine": "#0B5D3E",
    "cyanide": "#72AC79",
    "ionA": "#B20D30",
    "ionB": "#000000",
    "ionHS": "#FF9F0A",
}

SUBSTANCE_COLORS: Dict[str, str] = {
    "hydrogenChloride": "#5C8660",
    "hydrogenIodide": "#DAA520",
    "hydrogenBromide": "#FFE8E0",
    "potassiumHydroxide": "#DAA520",
    "lithiumHydroxide": "#FFE8F0",
    "sodiumHydroxide": "#FFF8E0",
    "weakAcidHA": "#2D3E4E",
    "weakAcidHF": "#5A1F5F",
    "hydrogenCyanide": "#011627",
    "weakBaseB": "#EDC032",
    "weakBaseF": "#00C7BE",
    "weakBaseHS": "#FF9F0A",
}


def to_pk(k: float) -> float:
    """pK = -log10(K), with 0 for strong electrolytes (K carried as 0)."""
    return 0.0 if k == 0 else float(-np.log10(k))


@dataclass(frozen=True)
class Substance:
    """
    Acid or base with its equilibrium constants and display metadata.

    Attributes:
        id: Catalog identifier
        type: Acid/base family
        symbol: Chemical symbol shown to the user
        substance_added_per_ion: Neutral molecules per ion pair (0 if strong)
        ka: Acid dissociation constant
        kb: Base dissociation constant
        color: Neutral molecule color
        primary_color: H⁺ / OH⁻ color
        secondary_color: Counter-ion color
        concentration_at_max_substance: Molarity of a full beaker [mol/L]
        primary_ion: H⁺ or OH⁻
        secondary_ion: Counter-ion identifier (e.g. "Cl", "A", "Na")
        salt_name: Salt used in the buffer phase
    """

    id: str
    type: SubstanceType
    symbol: str
    substance_added_per_ion: int
    ka: float
    kb: float
    color: str
    primary_color: str
    secondary_color: str
    concentration_at_max_substance: float
    primary_ion: PrimaryIon
    secondary_ion: str
    salt_name: str = ""

    @property
    def pka(self) -> float:
        return to_pk(self.ka)

    @property
    def pkb(self) -> float:
        return to_pk(self.kb)

    @property
    def is_acid(self) -> bool:
        return self.type.is_acid

    @property
    def is_strong(self) -> bool:
        return self.type.is_strong

    def validate(self) -> None:
        """Validate physical consistency of the record."""
        if self.ka < 0 or self.kb < 0:
            raise ValueError(
                f"Dissociation constants cannot be negative: ka={self.ka}, kb={self.kb}"
            )
        if self.is_strong and self.substance_added_per_ion != 0:
            raise ValueError(
                f"{self.id}: strong electrolytes ionize fully, "
                f"substance_added_per_ion must be 0"
            )
        if not self.is_strong:
            if self.substance_added_per_ion < 1:
                raise ValueError(
                    f"{self.id}: weak electrolytes need substance_added_per_ion >= 1"
                )
            if self.ka <= 0 or self.kb <= 0:
                raise ValueError(f"{self.id}: weak electrolytes need ka, kb > 0")
        if self.concentration_at_max_substance <= 0:
            raise ValueError(
                f"{self.id}: concentration_at_max_substance must be positive"
            )


def strong_acid(
    id: str, symbol: str, secondary_ion: str, color: str, secondary_color: str,
    salt_name: str,
) -> Substance:
    return Substance(
        id=id,
        type=SubstanceType.STRONG_ACID,
        symbol=symbol,
        substance_added_per_ion=0,
        ka=0.0,
        kb=0.0,
        color=color,
        primary_color=ION_COLORS["hydrogen"],
        secondary_color=secondary_color,
        concentration_at_max_substance=0.1,
        primary_ion=PrimaryIon.HYDROGEN,
        secondary_ion=secondary_ion,
        salt_name=salt_name,
    )


def strong_base(
    id: str, symbol: str, secondary_ion: str, color: str, secondary_color: str,
    salt_name: str,
) -> Substance:
    return Substance(
        id=id,
        type=SubstanceType.STRONG_BASE,
        symbol=symbol,
        substance_added_per_ion=0,
        ka=0.0,
        kb=0.0,
        color=color,
        primary_color=ION_COLORS["hydroxide"],
        secondary_color=secondary_color,
        concentration_at_max_substance=0.1,
        primary_ion=PrimaryIon.HYDROXIDE,
        secondary_ion=secondary_ion,
        salt_name=salt_name,
    )


def weak_acid(
    id: str, symbol: str, secondary_ion: str, substance_added_per_ion: int,
    color: str, secondary_color: str, ka: float, salt_name: str,
) -> Substance:
    """Weak acid; Kb of the conjugate base follows from Kw."""
    return Substance(
        id=id,
        type=SubstanceType.WEAK_ACID,
        symbol=symbol,
        substance_added_per_ion=substance_added_per_ion,
        ka=ka,
        kb=WATER_DISSOCIATION_CONSTANT / ka,
        color=color,
        primary_color=ION_COLORS["hydrogen"],
        secondary_color=secondary_color,
        concentration_at_max_substance=0.1 / substance_added_per_ion,
        primary_ion=PrimaryIon.HYDROGEN,
        secondary_ion=secondary_ion,
        salt_name=salt_name,
    )


def weak_base(
    id: str, symbol: str, secondary_ion: str, substance_added_per_ion: int,
    color: str, secondary_color: str, kb: float, salt_name: str,
) -> Substance:
    """Weak base; Ka of the conjugate acid follows from Kw."""
    return Substance(
        id=id,
        type=SubstanceType.WEAK_BASE,
        symbol=symbol,
        substance_added_per_ion=substance_added_per_ion,
        ka=WATER_DISSOCIATION_CONSTANT / kb,
        kb=kb,
        color=color,
        primary_color=ION_COLORS["hydroxide"],
        secondary_color=secondary_color,
        concentration_at_max_substance=0.1 / substance_added_per_ion,
        primary_ion=PrimaryIon.HYDROXIDE,
        secondary_ion=secondary_ion,
        salt_name=salt_name,
    )


# --- Strong acids ---
HYDROGEN_CHLORIDE = strong_acid(
    "HCl", "HCl", "Cl", SUBSTANCE_COLORS["hydrogenChloride"], ION_COLORS["chlorine"], "NaCl"
)
HYDROGEN_IODIDE = strong_acid(
    "HI", "HI", "I", SUBSTANCE_COLORS["hydrogenIodide"], ION_COLORS["iodine"], "NaI"
)
HYDROGEN_BROMIDE = strong_acid(
    "HBr", "HBr", "Br", SUBSTANCE_COLORS["hydrogenBromide"], ION_COLORS["bromine"], "NaBr"
)

# --- Strong bases ---
POTASSIUM_HYDROXIDE = strong_base(
    "KOH", "KOH", "K", SUBSTANCE_COLORS["potassiumHydroxide"], ION_COLORS["potassium"], "KCl"
)
LITHIUM_HYDROXIDE = strong_base(
    "LiOH", "LiOH", "Li", SUBSTANCE_COLORS["lithiumHydroxide"], ION_COLORS["lithium"], "LiCl"
)
SODIUM_HYDROXIDE = strong_base(
    "NaOH", "NaOH", "Na", SUBSTANCE_COLORS["sodiumHydroxide"], ION_COLORS["sodium"], "NaCl"
)

# --- Weak acids ---
WEAK_ACID_HA = weak_acid(
    "HA", "HA", "A", 2, SUBSTANCE_COLORS["weakAcidHA"], ION_COLORS["ionA"], 7.24e-5, "MA"
)
WEAK_ACID_HF = weak_acid(
    "HF", "HF", "F", 3, SUBSTANCE_COLORS["weakAcidHF"], ION_COLORS["fluorine"], 4.5e-4, "MF"
)
# Ka kept at the classroom value rather than the literature 6.2e-10
HYDROGEN_CYANIDE = weak_acid(
    "HCN", "HCN", "CN", 4, SUBSTANCE_COLORS["hydrogenCyanide"], ION_COLORS["cyanide"], 9e-5, "MCN"
)

# --- Weak bases ---
WEAK_BASE_B = weak_base(
    "B", "B⁻", "HB", 3, SUBSTANCE_COLORS["weakBaseB"], ION_COLORS["ionB"], 4e-5, "HBX"
)
WEAK_BASE_F = weak_base(
    "F", "F⁻", "F", 4, SUBSTANCE_COLORS["weakBaseF"], ION_COLORS["fluorine"], 1.3e-5, "HFCl"
)
WEAK_BASE_HS = weak_base(
    "HS", "HS⁻", "HS", 2, SUBSTANCE_COLORS["weakBaseHS"], ION_COLORS["ionHS"], 1e-3, "H2SCl"
)

STRONG_ACIDS: List[Substance] = [HYDROGEN_CHLORIDE, HYDROGEN_IODIDE, HYDROGEN_BROMIDE]
STRONG_BASES: List[Substance] = [POTASSIUM_HYDROXIDE, LITHIUM_HYDROXIDE, SODIUM_HYDROXIDE]
WEAK_ACIDS: List[Substance] = [WEAK_ACID_HA, WEAK_ACID_HF, HYDROGEN_CYANIDE]
WEAK_BASES: List[Substance] = [WEAK_BASE_B, WEAK_BASE_F, WEAK_BASE_HS]

ALL_SUBSTANCES: List[Substance] = STRONG_ACIDS + STRONG_BASES + WEAK_ACIDS + WEAK_BASES

_BY_TYPE: Dict[SubstanceType, List[Substance]] = {
    SubstanceType.STRONG_ACID: STRONG_ACIDS,
    SubstanceType.STRONG_BASE: STRONG_BASES,
    SubstanceType.WEAK_ACID: WEAK_ACIDS,
    SubstanceType.WEAK_BASE: WEAK_BASES,
}


def substances_by_type(substance_type: SubstanceType) -> List[Substance]:
    return list(_BY_TYPE[substance_type])


def get_substance(substance_id: str) -> Optional[Substance]:
    """Look up a catalog entry by id (None if unknown)."""
    for substance in ALL_SUBSTANCES:
        if substance.id == substance_id:
            return substance
    return None


@dataclass(frozen=True)
class Titrant:
    """Strong acid or base dispensed from the burette."""

    id: str
    name: str
    symbol: str
    is_acid: bool
    color: str


TITRANTS: Dict[str, Titrant] = {
    "potassiumHydroxide": Titrant(
        id="KOH",
        name="Potassium Hydroxide",
        symbol="KOH",
        is_acid=False,
        color=SUBSTANCE_COLORS["potassiumHydroxide"],
    ),
    "hydrogenChloride": Titrant(
        id="HCl",
        name="Hydrogen Chloride",
        symbol="HCl",
        is_acid=True,
        color=SUBSTANCE_COLORS["hydrogenChloride"],
    ),
}


def titrant_for(substance: Substance) -> Titrant:
    """Acids are titrated with KOH, bases with HCl."""
    if substance.is_acid:
        return TITRANTS["potassiumHydroxide"]
    return TITRANTS["hydrogenChloride"]


_ANIONS = {"Cl": "Cl⁻", "I": "I⁻", "Br": "Br⁻", "F": "F⁻", "A": "A⁻", "CN": "CN⁻", "HS": "HS⁻"}
_CATIONS = {"Na": "Na⁺", "K": "K⁺", "Li": "Li⁺", "HB": "HB⁺"}


def charged_ion_symbol(ion: str) -> str:
    """
    Ion symbol with its superscript charge.

    Example:
        >>> charged_ion_symbol("Cl")
        'Cl⁻'
        >>> charged_ion_symbol("Na")
        'Na⁺'
    """
    if ion == "B":
        return "B"
    return _ANIONS.get(ion) or _CATIONS.get(ion) or ion


def primary_ion_symbol(substance: Substance) -> str:
    return "H⁺" if substance.primary_ion is PrimaryIon.HYDROGEN else "OH⁻"


def ph_color(pH: float) -> str:
    """Color of the pH scale from red (acidic) to purple (basic)."""
    if pH < 2:
        return "#FF3B30"
    if pH < 4:
        return "#FF9500"
    if pH < 6:
        return "#FFCC00"
    if pH < 8:
        return "#34C759"
    if pH < 10:
        return "#007AFF"
    return "#AF52DE"


def validate_substances() -> None:
    """Check the catalog for internal consistency."""
    for substance in ALL_SUBSTANCES:
        substance.validate()
        if not substance.is_strong:
            product = substance.ka * substance.kb
            assert (
                abs(product - WATER_DISSOCIATION_CONSTANT) < 1e-20
            ), f"{substance.id}: Ka·Kb != Kw"
            assert abs(substance.pka + substance.pkb - PKW) < 1e-9

    assert len({s.id for s in ALL_SUBSTANCES}) == len(ALL_SUBSTANCES), "Duplicate ids"
    assert titrant_for(WEAK_ACID_HA).id == "KOH"
    assert titrant_for(WEAK_BASE_B).id == "HCl"

    print("✓ All substance validations passed")
