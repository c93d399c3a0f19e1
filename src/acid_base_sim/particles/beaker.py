"""
Reacting Beaker Model
=====================

Owns the particle list of one beaker and keeps it in step with the
chemistry: reaction rules, direct additions, water-level culling, and
reconciliation of the live particles toward target counts per species.

RECONCILIATION
==============

Given target counts, per-species deltas are computed against the live
counts:

1. Species with too many particles give up the oldest ones (FIFO) into
   a surplus pool. Their cells stay occupied.
2. Species with too few particles take particles from the surplus pool
   and are transmuted in place: same cell, new species, animated color
   change ("ions become other ions" instead of vanish and reappear).
3. Only the deficit left after the pool is exhausted gets new cells.
4. Whatever remains in the pool is removed and its cells released.

This minimizes both destroy/create churn and new random placements.

INVARIANTS
==========

- No two live particles share a cell.
- Grid occupancy equals the set of live positions whenever a public
  call returns.
- Listeners are notified exactly once per mutating call, after all
  particle mutations of that call.
- A scheduled color flip only updates particles whose ids still exist.

Timings (created_at, transition_ms, transition_delay_ms) are assigned by
the ParticleAnimator adapter; every operation also returns the
ParticleDiff it applied.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import logging
import threading
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence

from ..config import GridConfig
from .animation import ParticleAnimator, ParticleDiff, Transmutation
from .grid import ParticleGrid, available_rows
from .types import (
    MOLECULE_TYPES,
    GridPosition,
    MoleculeType,
    Particle,
    ParticleCounts,
    ReactionColors,
    ReactionRule,
    SpeciesColors,
    new_particle_id,
)

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class ReactingBeakerModel:
    """
    Particle state of one beaker.

    Not thread-safe for concurrent mutators: callers serialize the public
    operations. The internal lock only guards against scheduled color
    flips, which run on a timer thread with the default scheduler.
    """

    def __init__(
        self,
        grid_config: Optional[GridConfig] = None,
        animator: Optional[ParticleAnimator] = None,
        grid: Optional[ParticleGrid] = None,
    ):
        """
        Args:
            grid_config: Grid geometry and row limits
            animator: Timing adapter (default: threading.Timer scheduling)
            grid: Occupancy index (default: built from grid_config)
        """
        if grid_config is None:
            grid_config = GridConfig()
        grid_config.validate()

        self.config = grid_config
        self.animator = animator if animator is not None else ParticleAnimator()
        if grid is None:
            grid = ParticleGrid(grid_config.columns, grid_config.total_rows)
        self._grid = grid
        self._particles: List[Particle] = []
        self._listeners: List[Listener] = []
        self._effective_rows = grid_config.default_rows
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_particles(self) -> List[Particle]:
        """Snapshot copy of the live particles."""
        with self._lock:
            return [p.copy() for p in self._particles]

    def get_effective_rows(self) -> int:
        return self._effective_rows

    @property
    def grid(self) -> ParticleGrid:
        return self._grid

    def counts(self) -> ParticleCounts:
        """Live particle count per species."""
        with self._lock:
            return ParticleCounts(
                substance=self._count(MoleculeType.SUBSTANCE),
                primary=self._count(MoleculeType.PRIMARY_ION),
                secondary=self._count(MoleculeType.SECONDARY_ION),
            )

    def is_consistent(self) -> bool:
        """Grid occupancy matches live positions and no cell is shared."""
        with self._lock:
            positions = [p.position for p in self._particles]
            return (
                len(set(positions)) == len(positions)
                and set(positions) == self._grid.occupied_positions()
            )

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns the unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # ------------------------------------------------------------------
    # Water level
    # ------------------------------------------------------------------

    def set_water_level(self, rows: float) -> ParticleDiff:
        """
        Update the visible row count from a fractional row value.

        Fractional parts above 0.4 round up; the result is clamped to
        [1, max_rows]. Particles in rows that are no longer visible are
        removed. No-op when the row count does not change.
        """
        diff = ParticleDiff()
        next_rows = max(1, min(self.config.max_rows, available_rows(rows)))

        with self._lock:
            if next_rows == self._effective_rows:
                return diff
            self._effective_rows = next_rows

            kept = []
            for particle in self._particles:
                if particle.position.row < next_rows:
                    kept.append(particle)
                else:
                    diff.removed.append(particle)
                    self._grid.release(particle.position)
            self._particles = kept

        if diff.removed:
            logger.debug(
                "Water level now %d rows, culled %d particles",
                next_rows, len(diff.removed),
            )
        self._notify()
        return diff

    # ------------------------------------------------------------------
    # Additions and reactions
    # ------------------------------------------------------------------

    def add_directly(self, molecule_type: MoleculeType, count: int, color: str) -> ParticleDiff:
        """
        Add `count` particles in free visible cells, staggered per batch.

        Fewer particles are added when the visible area is full.
        """
        with self._lock:
            added = self._place_new(molecule_type, count, color)
            self.animator.stamp_additions(added)
        self._notify()
        return ParticleDiff(added=added)

    def add_with_reaction(
        self,
        rule: ReactionRule,
        count: int,
        colors: ReactionColors,
        place_reacted_reactant: bool = False,
    ) -> ParticleDiff:
        """
        Add `count` reactant particles that react with existing ones.

        Up to `count` particles of rule.reacting_with are consumed, the
        most recently added first, and each is transmuted in place into
        rule.producing with a color transition. Reactant beyond what could
        react is added as new rule.reactant particles.

        Consumption order is a display policy (replay stays consistent),
        not a property of the chemistry.

        Args:
            rule: reactant + reacting_with → producing
            count: Incoming reactant particles
            colors: Colors of reactant, consumed species and product
            place_reacted_reactant: Also show each reacted incoming particle
                as a new product particle in a free cell
        """
        timings = self.animator.timings
        diff = ParticleDiff()

        with self._lock:
            consumables = [p for p in self._particles if p.type is rule.reacting_with]
            reaction_count = min(count, len(consumables))
            remaining = count - reaction_count

            if reaction_count > 0:
                # Most recently added first
                consumed = consumables[-reaction_count:]
                consumed_ids = {p.id for p in consumed}
                self._particles = [p for p in self._particles if p.id not in consumed_ids]

                results = [
                    self._transmute(p, rule.producing, colors.reacting_with, colors.produced)
                    for p in consumed
                ]
                diff.transmuted.extend(
                    Transmutation(source, result) for source, result in zip(consumed, results)
                )

                if place_reacted_reactant:
                    products = self._place_new(rule.producing, reaction_count, colors.produced)
                    self.animator.stamp_additions(products)
                    diff.added.extend(products)

                self._particles.extend(results)
                self.animator.stamp_transitions(
                    results, timings.reaction_duration_ms, timings.reaction_stagger_ms
                )
                self.animator.schedule_color_transition(
                    [p.id for p in results], colors.produced, self._apply_color_transition
                )

            if remaining > 0:
                surplus = self._place_new(rule.reactant, remaining, colors.reactant)
                self.animator.stamp_additions(surplus)
                diff.added.extend(surplus)

        logger.debug(
            "Reaction %s + %s -> %s: reacted %d, surplus %d",
            rule.reactant.value, rule.reacting_with.value, rule.producing.value,
            reaction_count, remaining,
        )
        self._notify()
        return diff

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def update_particles(
        self,
        target_counts: ParticleCounts,
        colors: SpeciesColors,
        stagger_ms_by_type: Optional[Dict[MoleculeType, float]] = None,
    ) -> ParticleDiff:
        """
        Reconcile the live particles toward per-species target counts.

        Surplus particles are transmuted into deficit species before any
        new cell is allocated; leftover surplus is removed. Particles whose
        species color changed are recolored with a transition.

        Args:
            target_counts: Desired count per species
            colors: Display color per species
            stagger_ms_by_type: Per-species override of the transmutation
                stagger

        Returns:
            The applied ParticleDiff
        """
        timings = self.animator.timings
        stagger_ms_by_type = stagger_ms_by_type or {}
        diff = ParticleDiff()

        with self._lock:
            deltas = {t: target_counts.get(t) - self._count(t) for t in MOLECULE_TYPES}

            surplus: List[Particle] = []
            for molecule_type in MOLECULE_TYPES:
                if deltas[molecule_type] < 0:
                    current = [p for p in self._particles if p.type is molecule_type]
                    surplus.extend(current[: -deltas[molecule_type]])

            surplus_ids = {p.id for p in surplus}
            self._particles = [p for p in self._particles if p.id not in surplus_ids]

            transmuted_ids = set()
            for molecule_type in MOLECULE_TYPES:
                deficit = deltas[molecule_type]
                if deficit <= 0:
                    continue

                target_color = colors.get(molecule_type)
                from_surplus = surplus[:deficit]
                del surplus[:deficit]

                results = [
                    self._transmute(p, molecule_type, colors.get(p.type), target_color)
                    for p in from_surplus
                ]
                if results:
                    self._particles.extend(results)
                    diff.transmuted.extend(
                        Transmutation(source, result)
                        for source, result in zip(from_surplus, results)
                    )
                    transmuted_ids.update(p.id for p in results)
                    self.animator.stamp_transitions(
                        results,
                        timings.update_duration_ms,
                        stagger_ms_by_type.get(molecule_type, timings.update_stagger_ms),
                    )
                    self.animator.schedule_color_transition(
                        [p.id for p in results], target_color, self._apply_color_transition
                    )
                deficit -= len(results)

                if deficit > 0:
                    added = self._place_new(molecule_type, deficit, target_color)
                    self.animator.stamp_additions(added)
                    diff.added.extend(added)

            for particle in surplus:
                self._grid.release(particle.position)
            diff.removed.extend(surplus)

            for molecule_type in MOLECULE_TYPES:
                target_color = colors.get(molecule_type)
                stale = [
                    p
                    for p in self._particles
                    if p.type is molecule_type
                    and p.id not in transmuted_ids
                    and p.display_color != target_color
                ]
                if not stale:
                    continue
                self.animator.stamp_transitions(
                    stale,
                    timings.update_duration_ms,
                    stagger_ms_by_type.get(molecule_type, timings.update_stagger_ms),
                )
                for particle in stale:
                    particle.target_color = target_color
                diff.recolored.extend(stale)
                self.animator.schedule_color_transition(
                    [p.id for p in stale], target_color, self._apply_color_transition
                )

        self._notify()
        return diff

    # ------------------------------------------------------------------
    # Reset / restore
    # ------------------------------------------------------------------

    def initialize(self, counts: ParticleCounts, colors: SpeciesColors) -> ParticleDiff:
        """Reset the beaker and fill it with the given counts."""
        diff = ParticleDiff()
        with self._lock:
            diff.removed.extend(self._particles)
            self._particles = []
            self._grid.clear()
            for molecule_type in MOLECULE_TYPES:
                added = self._place_new(
                    molecule_type, counts.get(molecule_type), colors.get(molecule_type)
                )
                self.animator.stamp_additions(added)
                diff.added.extend(added)
        self._notify()
        return diff

    def set_particles(self, particles: Sequence[Particle]) -> None:
        """
        Restore an exact snapshot (e.g. history replay).

        The snapshot is trusted: occupancy is rebuilt from its positions
        and no entry animation is replayed.
        """
        with self._lock:
            self._particles = [
                p.copy(position=GridPosition(*p.position), is_initial_appearance=False)
                for p in particles
            ]
            self._grid.clear()
            for particle in self._particles:
                self._grid.occupy(particle.position)
        self._notify()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _count(self, molecule_type: MoleculeType) -> int:
        return sum(1 for p in self._particles if p.type is molecule_type)

    def _place_new(self, molecule_type: MoleculeType, count: int, color: str) -> List[Particle]:
        """Create particles in free visible cells and occupy them."""
        if count <= 0:
            return []

        positions = self._grid.get_random_available_positions(
            count, effective_rows=self._effective_rows
        )
        if len(positions) < count:
            logger.debug(
                "Placed %d of %d %s particles (visible area full)",
                len(positions), count, molecule_type.value,
            )

        added = []
        for pos in positions:
            particle = Particle(
                id=new_particle_id(),
                position=pos,
                type=molecule_type,
                display_color=color,
                target_color=color,
                is_initial_appearance=True,
            )
            self._grid.occupy(pos)
            added.append(particle)
        self._particles.extend(added)
        return added

    def _transmute(
        self,
        source: Particle,
        molecule_type: MoleculeType,
        initial_color: str,
        target_color: str,
    ) -> Particle:
        """New particle of another species in the source's cell."""
        self._grid.occupy(source.position)
        return Particle(
            id=new_particle_id(),
            position=source.position,
            type=molecule_type,
            display_color=initial_color,
            target_color=target_color,
            is_initial_appearance=False,
        )

    def _apply_color_transition(self, ids: FrozenSet[str], target_color: str) -> None:
        """Finish a color transition; unknown ids are ignored."""
        changed = False
        with self._lock:
            for particle in self._particles:
                if particle.id in ids:
                    particle.display_color = target_color
                    particle.target_color = target_color
                    particle.is_initial_appearance = False
                    changed = True
        if changed:
            self._notify()


def validate_beaker() -> None:
    """
    Validation of the reconciliation invariants.

    Tests:
    1. Counts reach targets after every update
    2. Occupancy matches positions
    3. Reconciliation reuses cells before allocating new ones
    4. Reactions never drive the consumed species negative
    5. Stale color flips are ignored after a reset
    """
    from .animation import ManualScheduler

    scheduler = ManualScheduler()
    model = ReactingBeakerModel(
        animator=ParticleAnimator(scheduler=scheduler, clock=scheduler.clock_ms)
    )
    colors = SpeciesColors("#111111", "#222222", "#333333")

    # Tests 1 and 2
    for target in [(10, 4, 4), (6, 8, 8), (0, 2, 12), (20, 0, 0), (0, 0, 0)]:
        model.update_particles(ParticleCounts(*target), colors)
        c = model.counts()
        assert (c.substance, c.primary, c.secondary) == target, f"{c} != {target}"
        assert model.is_consistent(), "Grid occupancy out of sync"

    # Test 3
    model.update_particles(ParticleCounts(10, 0, 0), colors)
    diff = model.update_particles(ParticleCounts(0, 10, 0), colors)
    assert len(diff.transmuted) == 10 and not diff.added and not diff.removed

    # Test 4
    rule = ReactionRule(
        MoleculeType.SECONDARY_ION, MoleculeType.PRIMARY_ION, MoleculeType.SUBSTANCE
    )
    model.add_with_reaction(rule, 25, ReactionColors("#333333", "#222222", "#111111"))
    c = model.counts()
    assert c.primary == 0 and c.substance == 10 and c.secondary == 15
    assert model.is_consistent()

    # Test 5
    model.update_particles(ParticleCounts(0, 5, 20), colors)
    model.set_particles([])
    scheduler.run_pending()
    assert model.get_particles() == []

    print("✓ All beaker validations passed")
