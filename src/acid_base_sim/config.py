"""
Configuration Module for the Acid/Base Simulator
=================================================

Dataclass configuration for the particle beaker: grid geometry and the
animation timings stamped onto particles by the presentation adapter.

Grid geometry matches the beaker artwork:
19 columns, 22 rows at 100% water, with the water slider moving the
visible row count between 7 and 17.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

from dataclasses import dataclass


# Grid geometry
GRID_COLS = 19
GRID_ROWS_TOTAL = 22  # Rows at 100% water
GRID_ROWS_MIN = 7
GRID_ROWS_MAX = 17
GRID_ROWS_DEFAULT = 11
MAX_PARTICLES = 43


@dataclass
class GridConfig:
    """
    Geometry of the particle grid.

    Attributes:
        columns: Number of grid columns
        total_rows: Rows available when the beaker is full
        min_rows: Visible rows at the lowest water level
        max_rows: Visible rows at the highest water level
        default_rows: Visible rows of a freshly created beaker
    """

    columns: int = GRID_COLS
    total_rows: int = GRID_ROWS_TOTAL
    min_rows: int = GRID_ROWS_MIN
    max_rows: int = GRID_ROWS_MAX
    default_rows: int = GRID_ROWS_DEFAULT

    def validate(self) -> None:
        """Validate grid geometry."""
        if self.columns < 1:
            raise ValueError(f"Grid needs at least one column, got {self.columns}")
        if self.total_rows < 1:
            raise ValueError(f"Grid needs at least one row, got {self.total_rows}")
        if not 1 <= self.min_rows <= self.max_rows <= self.total_rows:
            raise ValueError(
                f"Row limits must satisfy 1 <= min <= max <= total, got "
                f"min={self.min_rows}, max={self.max_rows}, total={self.total_rows}"
            )
        if not self.min_rows <= self.default_rows <= self.max_rows:
            raise ValueError(
                f"Default rows {self.default_rows} outside "
                f"[{self.min_rows}, {self.max_rows}]"
            )

    @property
    def total_slots(self) -> int:
        """Cells visible at the default water level."""
        return self.columns * self.default_rows


@dataclass
class AnimationTimings:
    """
    Timing constants for particle animations [ms].

    Attributes:
        batch_stagger_ms: Delay between particles appearing in one add batch
        reaction_duration_ms: Color transition length for reacting particles
        reaction_stagger_ms: Delay between reacting particles
        update_duration_ms: Color transition length during reconciliation
        update_stagger_ms: Delay between transmuted particles of one type
        min_frame_delay_ms: Minimum deferral so the initial color renders once
    """

    batch_stagger_ms: float = 50.0
    reaction_duration_ms: float = 1000.0
    reaction_stagger_ms: float = 150.0
    update_duration_ms: float = 800.0
    update_stagger_ms: float = 150.0
    min_frame_delay_ms: float = 16.0

    def validate(self) -> None:
        """Validate that all timings are non-negative."""
        for name, value in vars(self).items():
            if value < 0:
                raise ValueError(f"{name} cannot be negative: {value}")
