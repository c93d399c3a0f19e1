"""
Particle Types
==============

Value types shared by the particle grid and the reacting beaker model.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import secrets
from dataclasses import dataclass, replace
from enum import Enum
from typing import NamedTuple, Optional


class MoleculeType(Enum):
    """Species drawn in the beaker."""

    SUBSTANCE = "substance"
    PRIMARY_ION = "primaryIon"
    SECONDARY_ION = "secondaryIon"


MOLECULE_TYPES = (
    MoleculeType.SUBSTANCE,
    MoleculeType.PRIMARY_ION,
    MoleculeType.SECONDARY_ION,
)


class GridPosition(NamedTuple):
    """Cell of the particle grid (row 0 is the top visible row)."""

    col: int
    row: int

    @property
    def key(self) -> str:
        return f"{self.col},{self.row}"


def new_particle_id() -> str:
    """Random opaque identifier; only equality is meaningful."""
    return secrets.token_hex(6)


@dataclass
class Particle:
    """
    One particle in the beaker.

    Attributes:
        id: Opaque identifier
        position: Occupied grid cell (exclusive)
        type: Species
        display_color: Color currently shown
        target_color: Color the particle is animating towards
        transition_ms: Color transition duration
        transition_delay_ms: Delay before the color transition starts
        is_initial_appearance: First appearance in an empty cell (no fade)
        created_at: Appearance time [ms], staggered in batches (None until stamped)
    """

    id: str
    position: GridPosition
    type: MoleculeType
    display_color: str
    target_color: str
    transition_ms: Optional[float] = None
    transition_delay_ms: Optional[float] = None
    is_initial_appearance: bool = True
    created_at: Optional[float] = None

    def copy(self, **changes) -> "Particle":
        return replace(self, **changes)


@dataclass(frozen=True)
class ReactionRule:
    """
    Incoming reactant + existing particle → product.

    Example (salt added to a weak acid): A⁻ + H⁺ → HA is
    ReactionRule(reactant=SECONDARY_ION, reacting_with=PRIMARY_ION,
    producing=SUBSTANCE).
    """

    reactant: MoleculeType
    reacting_with: MoleculeType
    producing: MoleculeType


@dataclass
class ParticleCounts:
    """Target or current particle count per species."""

    substance: int = 0
    primary: int = 0
    secondary: int = 0

    def get(self, molecule_type: MoleculeType) -> int:
        if molecule_type is MoleculeType.SUBSTANCE:
            return self.substance
        if molecule_type is MoleculeType.PRIMARY_ION:
            return self.primary
        return self.secondary

    @property
    def total(self) -> int:
        return self.substance + self.primary + self.secondary


@dataclass
class SpeciesColors:
    """Display color per species."""

    substance: str
    primary_ion: str
    secondary_ion: str

    def get(self, molecule_type: MoleculeType) -> str:
        if molecule_type is MoleculeType.SUBSTANCE:
            return self.substance
        if molecule_type is MoleculeType.PRIMARY_ION:
            return self.primary_ion
        return self.secondary_ion


@dataclass
class ReactionColors:
    """Colors used while a reaction rule is applied."""

    reactant: str
    reacting_with: str
    produced: str
