"""
Particle Grid Module
====================

Fixed-size occupancy index for the beaker particles, with randomized
placement restricted to the rows currently under water.

PLACEMENT ALGORITHM
===================

1. Clamp the visible rows to [1, total_rows]; max_slots = columns · rows.
2. Working set = occupied ∪ avoid; only cells inside the visible rows
   count against the available capacity, and the request is capped to it.
3. Rejection sampling: up to 2 · max_slots uniform draws, skipping taken
   cells.
4. Fallback: row-major scan from (0, 0) for whatever is still missing.

Pure rejection sampling degrades near saturation and a pure scan looks
ordered; the hybrid terminates in O(max_slots) while keeping the visual
distribution random for all but the tail of a nearly full grid.

WATER LEVEL
===========

The visible row count is derived from a fractional row value with an
asymmetric rounding: a fractional part above 0.4 rounds up.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
import math
import secrets
import numpy as np
from typing import Iterable, List, Optional, Set

from ..config import GRID_COLS, GRID_ROWS_TOTAL, GRID_ROWS_MIN, GRID_ROWS_MAX
from .types import GridPosition

logger = logging.getLogger(__name__)


class ParticleGrid:
    """
    Occupancy set of "col,row" cells.

    Kept in sync with the particle list of the beaker model that owns it.
    """

    def __init__(
        self,
        columns: int = GRID_COLS,
        total_rows: int = GRID_ROWS_TOTAL,
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Args:
            columns: Grid width
            total_rows: Grid height at 100% water
            rng: Random generator (seeded from the OS when omitted)
        """
        if columns < 1 or total_rows < 1:
            raise ValueError(
                f"Grid must be at least 1x1, got {columns}x{total_rows}"
            )

        self.columns = columns
        self.total_rows = total_rows
        self._occupied: Set[GridPosition] = set()

        if rng is None:
            rng = np.random.default_rng(seed=secrets.randbits(128))
        self._rng = rng

    def clear(self) -> None:
        self._occupied.clear()

    def occupy(self, pos: GridPosition) -> None:
        self._occupied.add(GridPosition(*pos))

    def release(self, pos: GridPosition) -> None:
        self._occupied.discard(GridPosition(*pos))

    def is_occupied(self, pos: GridPosition) -> bool:
        return GridPosition(*pos) in self._occupied

    def occupied_positions(self) -> Set[GridPosition]:
        """Copy of the occupied cells."""
        return set(self._occupied)

    def occupied_keys(self) -> Set[str]:
        return {pos.key for pos in self._occupied}

    def __len__(self) -> int:
        return len(self._occupied)

    def get_random_available_positions(
        self,
        count: int,
        avoid: Iterable[GridPosition] = (),
        effective_rows: Optional[int] = None,
    ) -> List[GridPosition]:
        """
        Pick up to `count` distinct free cells within the visible rows.

        Positions are not marked occupied; the caller occupies them when
        it commits the particles.

        Args:
            count: Number of cells requested
            avoid: Extra cells to treat as taken
            effective_rows: Visible rows (defaults to all rows)

        Returns:
            Distinct free positions; fewer than requested when the visible
            area is saturated
        """
        if effective_rows is None:
            effective_rows = self.total_rows
        max_rows = max(1, min(int(effective_rows), self.total_rows))
        max_slots = self.columns * max_rows

        taken = set(self._occupied)
        taken.update(GridPosition(*pos) for pos in avoid)

        visible_taken = sum(1 for pos in taken if pos.row < max_rows)
        available = max_slots - visible_taken
        to_add = min(count, available)

        if to_add <= 0:
            if count > 0:
                logger.debug("Grid saturated: no free cell for %d particles", count)
            return []

        result: List[GridPosition] = []

        max_attempts = max_slots * 2
        cols = self._rng.integers(0, self.columns, size=max_attempts)
        rows = self._rng.integers(0, max_rows, size=max_attempts)
        for col, row in zip(cols, rows):
            if len(result) >= to_add:
                break
            pos = GridPosition(int(col), int(row))
            if pos not in taken:
                taken.add(pos)
                result.append(pos)

        if len(result) < to_add:
            for row in range(max_rows):
                for col in range(self.columns):
                    if len(result) >= to_add:
                        break
                    pos = GridPosition(col, row)
                    if pos not in taken:
                        taken.add(pos)
                        result.append(pos)

        if to_add < count:
            logger.debug(
                "Grid truncated placement: requested %d, placed %d", count, to_add
            )
        return result


def available_rows(rows_float: float) -> int:
    """
    Visible row count for a fractional row value.

    Fractional part > 0.4 rounds up, otherwise down.

    Example:
        >>> available_rows(10.41), available_rows(10.3)
        (11, 10)
    """
    base = math.floor(rows_float)
    return math.ceil(rows_float) if rows_float - base > 0.4 else base


def model_level_for_water_level(
    water_level: float, level_min: float, level_max: float
) -> float:
    """Water level normalized to [0, 1]."""
    return max(0.0, min(1.0, (water_level - level_min) / (level_max - level_min)))


def grid_rows_for_water_level(
    water_level: float,
    level_min: float,
    level_max: float,
    rows_min: int = GRID_ROWS_MIN,
    rows_max: int = GRID_ROWS_MAX,
) -> int:
    """
    Visible rows for a water-slider position.

    The slider range maps linearly onto [rows_min, rows_max] and the
    result is rounded with available_rows().
    """
    normalized = model_level_for_water_level(water_level, level_min, level_max)
    rows_float = rows_min + (rows_max - rows_min) * normalized
    return max(rows_min, min(rows_max, available_rows(rows_float)))


def validate_grid() -> None:
    """
    Validation of grid placement.

    Tests:
    1. Returned cells are free and distinct
    2. Saturation truncates to the available count
    3. Visible-row restriction
    4. Water-level rounding
    """
    grid = ParticleGrid(columns=5, total_rows=4, rng=np.random.default_rng(7))

    # Test 1
    before = grid.occupied_positions()
    picked = grid.get_random_available_positions(8)
    assert len(set(picked)) == 8 and not before.intersection(picked)
    for pos in picked:
        grid.occupy(pos)

    # Test 2
    rest = grid.get_random_available_positions(100)
    assert len(rest) == 20 - 8, f"Expected 12 free cells, got {len(rest)}"

    # Test 3
    grid.clear()
    top = grid.get_random_available_positions(100, effective_rows=2)
    assert len(top) == 10 and all(pos.row < 2 for pos in top)

    # Test 4
    assert available_rows(10.41) == 11 and available_rows(10.3) == 10
    assert grid_rows_for_water_level(0.0, 0.0, 1.0) == GRID_ROWS_MIN
    assert grid_rows_for_water_level(1.0, 0.0, 1.0) == GRID_ROWS_MAX

    print("✓ All grid validations passed")
