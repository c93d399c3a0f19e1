"""
Reacting Beaker Tests

This test suite validates:
- Count reconciliation reaches targets after every call
- Grid occupancy always equals the live particle positions
- Reconciliation transmutes in place before allocating new cells
- Reactions consume the most recently added particles and never go negative
- Water-level culling and clamping
- Listener notification and stale color-flip filtering
"""

import numpy as np
import pytest

from acid_base_sim.config import GridConfig
from acid_base_sim.particles import (
    ManualScheduler,
    MoleculeType,
    Particle,
    ParticleAnimator,
    ParticleCounts,
    ParticleGrid,
    ReactingBeakerModel,
    ReactionColors,
    ReactionRule,
    SpeciesColors,
    validate_beaker,
)
from acid_base_sim.particles.types import GridPosition

from conftest import PRIMARY_COLOR, SECONDARY_COLOR, SUBSTANCE_COLOR


SALT_RULE = ReactionRule(
    reactant=MoleculeType.SECONDARY_ION,
    reacting_with=MoleculeType.PRIMARY_ION,
    producing=MoleculeType.SUBSTANCE,
)


def as_tuple(counts):
    return counts.substance, counts.primary, counts.secondary


class Recorder:
    """Counts listener calls."""

    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


# ==================== Reconciliation ====================

def test_injected_grid_and_animator_are_used():
    grid = ParticleGrid(5, 4, rng=np.random.default_rng(1))
    scheduler = ManualScheduler()
    animator = ParticleAnimator(scheduler=scheduler, clock=scheduler.clock_ms)
    config = GridConfig(columns=5, total_rows=4, min_rows=1, max_rows=4, default_rows=4)

    model = ReactingBeakerModel(grid_config=config, animator=animator, grid=grid)

    assert model.grid is grid
    assert model.animator is animator
    model.add_directly(MoleculeType.SUBSTANCE, 30, SUBSTANCE_COLOR)
    assert len(model.get_particles()) == 20
    assert len(grid) == 20


def test_same_seed_gives_same_placements(colors):
    def placements(seed):
        config = GridConfig()
        scheduler = ManualScheduler()
        model = ReactingBeakerModel(
            grid_config=config,
            animator=ParticleAnimator(scheduler=scheduler, clock=scheduler.clock_ms),
            grid=ParticleGrid(config.columns, config.total_rows, rng=np.random.default_rng(seed)),
        )
        model.update_particles(ParticleCounts(8, 4, 4), colors)
        return [(p.type, p.position) for p in model.get_particles()]

    assert placements(77) == placements(77)


def test_fixture_beaker_uses_manual_scheduler(beaker, colors, scheduler):
    assert beaker.animator.scheduler is scheduler
    beaker.update_particles(ParticleCounts(5, 0, 0), colors)
    beaker.update_particles(ParticleCounts(0, 5, 0), colors)
    assert len(scheduler) == 1


def test_fresh_beaker_is_empty(beaker):
    assert beaker.get_particles() == []
    assert beaker.get_effective_rows() == GridConfig().default_rows
    assert beaker.is_consistent()


def test_update_reaches_targets_for_random_sequence(beaker, colors):
    rng = np.random.default_rng(5)
    for _ in range(40):
        target = tuple(int(n) for n in rng.integers(0, 61, size=3))
        beaker.update_particles(ParticleCounts(*target), colors)
        assert as_tuple(beaker.counts()) == target
        assert beaker.is_consistent()


def test_update_transmutes_before_allocating(beaker, colors):
    beaker.update_particles(ParticleCounts(10, 0, 0), colors)
    before = {p.position for p in beaker.get_particles()}

    diff = beaker.update_particles(ParticleCounts(0, 10, 0), colors)

    assert len(diff.transmuted) == 10
    assert diff.added == [] and diff.removed == []
    assert {p.position for p in beaker.get_particles()} == before
    for t in diff.transmuted:
        assert t.result.position == t.source.position
        assert t.result.id != t.source.id
        assert t.result.type is MoleculeType.PRIMARY_ION


def test_update_only_allocates_remaining_deficit(beaker, colors):
    beaker.update_particles(ParticleCounts(4, 0, 0), colors)
    diff = beaker.update_particles(ParticleCounts(0, 10, 0), colors)
    assert len(diff.transmuted) == 4
    assert len(diff.added) == 6
    assert diff.removed == []


def test_update_removes_leftover_surplus(beaker, colors):
    beaker.update_particles(ParticleCounts(10, 0, 0), colors)
    diff = beaker.update_particles(ParticleCounts(0, 3, 0), colors)
    assert len(diff.transmuted) == 3
    assert len(diff.removed) == 7
    assert len(beaker.grid) == 3
    assert beaker.is_consistent()


def test_update_takes_oldest_surplus_first(beaker, colors):
    first = beaker.add_directly(MoleculeType.SUBSTANCE, 3, SUBSTANCE_COLOR).added
    beaker.add_directly(MoleculeType.SUBSTANCE, 3, SUBSTANCE_COLOR)

    diff = beaker.update_particles(ParticleCounts(3, 0, 0), colors)

    assert {p.id for p in diff.removed} == {p.id for p in first}


def test_transmuted_particles_animate_to_new_color(beaker, colors, scheduler):
    beaker.update_particles(ParticleCounts(5, 0, 0), colors)
    diff = beaker.update_particles(ParticleCounts(0, 5, 0), colors)

    for t in diff.transmuted:
        assert t.result.display_color == SUBSTANCE_COLOR
        assert t.result.target_color == PRIMARY_COLOR
        assert t.result.is_initial_appearance is False
        assert t.result.transition_ms == beaker.animator.timings.update_duration_ms

    delays = [t.result.transition_delay_ms for t in diff.transmuted]
    assert delays == [i * 150.0 for i in range(5)]

    scheduler.run_pending()
    assert all(p.display_color == PRIMARY_COLOR for p in beaker.get_particles())


def test_custom_stagger_per_type(beaker, colors):
    beaker.update_particles(ParticleCounts(3, 0, 0), colors)
    diff = beaker.update_particles(
        ParticleCounts(0, 3, 0), colors, stagger_ms_by_type={MoleculeType.PRIMARY_ION: 40.0}
    )
    assert [t.result.transition_delay_ms for t in diff.transmuted] == [0.0, 40.0, 80.0]


def test_recolor_stale_particles(beaker, colors, scheduler):
    beaker.update_particles(ParticleCounts(4, 2, 2), colors)
    recolored = SpeciesColors("#000001", PRIMARY_COLOR, SECONDARY_COLOR)

    diff = beaker.update_particles(ParticleCounts(4, 2, 2), recolored)

    assert len(diff.recolored) == 4
    assert all(p.type is MoleculeType.SUBSTANCE for p in diff.recolored)
    scheduler.run_pending()
    substance = [p for p in beaker.get_particles() if p.type is MoleculeType.SUBSTANCE]
    assert all(p.display_color == "#000001" for p in substance)


def test_update_with_unchanged_targets_is_empty(beaker, colors):
    beaker.update_particles(ParticleCounts(4, 2, 2), colors)
    assert beaker.update_particles(ParticleCounts(4, 2, 2), colors).is_empty


def test_update_truncates_when_visible_area_is_full(beaker, colors):
    beaker.set_water_level(1)
    beaker.update_particles(ParticleCounts(30, 0, 0), colors)
    assert beaker.counts().substance == GridConfig().columns
    assert beaker.is_consistent()


# ==================== Reactions ====================

def test_reaction_consumes_and_adds_surplus(beaker, salt_colors):
    beaker.add_directly(MoleculeType.PRIMARY_ION, 4, PRIMARY_COLOR)
    beaker.add_directly(MoleculeType.SUBSTANCE, 2, SUBSTANCE_COLOR)

    diff = beaker.add_with_reaction(SALT_RULE, 10, salt_colors)

    assert as_tuple(beaker.counts()) == (6, 0, 6)
    assert len(diff.transmuted) == 4
    assert len(diff.added) == 6
    assert all(p.type is MoleculeType.SECONDARY_ION for p in diff.added)
    assert beaker.is_consistent()


def test_reaction_without_partner_only_adds(beaker, salt_colors):
    diff = beaker.add_with_reaction(SALT_RULE, 5, salt_colors)
    assert diff.transmuted == []
    assert as_tuple(beaker.counts()) == (0, 0, 5)


def test_reaction_consumes_most_recent_first(beaker, salt_colors):
    beaker.add_directly(MoleculeType.PRIMARY_ION, 3, PRIMARY_COLOR)
    latest = beaker.add_directly(MoleculeType.PRIMARY_ION, 2, PRIMARY_COLOR).added

    diff = beaker.add_with_reaction(SALT_RULE, 2, salt_colors)

    assert {t.source.id for t in diff.transmuted} == {p.id for p in latest}
    assert {t.result.position for t in diff.transmuted} == {p.position for p in latest}
    assert as_tuple(beaker.counts()) == (2, 3, 0)


@pytest.mark.parametrize("available,incoming", [(0, 3), (3, 3), (5, 2), (2, 9)])
def test_reaction_never_goes_negative(beaker, salt_colors, available, incoming):
    beaker.add_directly(MoleculeType.PRIMARY_ION, available, PRIMARY_COLOR)
    beaker.add_with_reaction(SALT_RULE, incoming, salt_colors)

    counts = beaker.counts()
    assert counts.primary == max(0, available - incoming)
    assert counts.substance == min(available, incoming)
    assert counts.secondary == max(0, incoming - available)


def test_reaction_color_transition(beaker, salt_colors, scheduler):
    beaker.add_directly(MoleculeType.PRIMARY_ION, 3, PRIMARY_COLOR)
    diff = beaker.add_with_reaction(SALT_RULE, 3, salt_colors)

    timings = beaker.animator.timings
    for i, t in enumerate(diff.transmuted):
        assert t.result.display_color == PRIMARY_COLOR
        assert t.result.target_color == SUBSTANCE_COLOR
        assert t.result.transition_ms == timings.reaction_duration_ms
        assert t.result.transition_delay_ms == i * timings.reaction_stagger_ms

    assert len(scheduler) == 1
    scheduler.run_pending()
    assert all(p.display_color == SUBSTANCE_COLOR for p in beaker.get_particles())


def test_reaction_can_place_reacted_reactant(beaker, salt_colors):
    beaker.add_directly(MoleculeType.PRIMARY_ION, 3, PRIMARY_COLOR)
    diff = beaker.add_with_reaction(SALT_RULE, 5, salt_colors, place_reacted_reactant=True)

    assert len(diff.transmuted) == 3
    assert as_tuple(beaker.counts()) == (6, 0, 2)
    assert beaker.is_consistent()


# ==================== Direct additions ====================

def test_add_directly_staggers_appearance(beaker):
    diff = beaker.add_directly(MoleculeType.SUBSTANCE, 3, SUBSTANCE_COLOR)
    assert [p.created_at for p in diff.added] == [0.0, 50.0, 100.0]
    assert all(p.is_initial_appearance for p in diff.added)
    assert all(p.display_color == p.target_color == SUBSTANCE_COLOR for p in diff.added)


def test_add_directly_truncates(beaker):
    beaker.set_water_level(1)
    diff = beaker.add_directly(MoleculeType.SUBSTANCE, 50, SUBSTANCE_COLOR)
    assert len(diff.added) == GridConfig().columns
    assert all(p.position.row == 0 for p in diff.added)


def test_add_directly_respects_visible_rows(beaker):
    beaker.set_water_level(3)
    beaker.add_directly(MoleculeType.PRIMARY_ION, 40, PRIMARY_COLOR)
    assert all(p.position.row < 3 for p in beaker.get_particles())


# ==================== Water level ====================

def test_water_level_culls_hidden_rows(beaker, colors):
    beaker.update_particles(ParticleCounts(60, 40, 50), colors)
    diff = beaker.set_water_level(5)

    assert beaker.get_effective_rows() == 5
    assert all(p.position.row < 5 for p in beaker.get_particles())
    assert all(p.position.row >= 5 for p in diff.removed)
    assert len(beaker.get_particles()) + len(diff.removed) == 150
    assert beaker.is_consistent()


@pytest.mark.parametrize("rows,expected", [(0.2, 1), (4.41, 5), (4.3, 4), (100.0, 17)])
def test_water_level_rounding_and_clamping(beaker, rows, expected):
    beaker.set_water_level(rows)
    assert beaker.get_effective_rows() == expected


def test_unchanged_water_level_is_noop(beaker):
    recorder = Recorder()
    beaker.subscribe(recorder)

    diff = beaker.set_water_level(float(beaker.get_effective_rows()))

    assert diff.is_empty
    assert recorder.calls == 0


# ==================== Snapshots ====================

def test_get_particles_returns_copies(beaker):
    beaker.add_directly(MoleculeType.SUBSTANCE, 2, SUBSTANCE_COLOR)
    snapshot = beaker.get_particles()
    snapshot[0].display_color = "#FFFFFF"
    snapshot.clear()

    particles = beaker.get_particles()
    assert len(particles) == 2
    assert all(p.display_color == SUBSTANCE_COLOR for p in particles)


def test_set_particles_restores_snapshot(beaker, colors):
    beaker.update_particles(ParticleCounts(5, 3, 3), colors)
    snapshot = beaker.get_particles()

    beaker.update_particles(ParticleCounts(0, 0, 20), colors)
    beaker.set_particles(snapshot)

    restored = beaker.get_particles()
    assert [p.id for p in restored] == [p.id for p in snapshot]
    assert all(not p.is_initial_appearance for p in restored)
    assert as_tuple(beaker.counts()) == (5, 3, 3)
    assert beaker.is_consistent()


def test_set_particles_accepts_plain_tuples(beaker):
    particle = Particle(
        id="a1",
        position=(2, 3),
        type=MoleculeType.SUBSTANCE,
        display_color=SUBSTANCE_COLOR,
        target_color=SUBSTANCE_COLOR,
    )
    beaker.set_particles([particle])
    assert beaker.grid.is_occupied(GridPosition(2, 3))
    assert beaker.get_particles()[0].position == GridPosition(2, 3)


def test_initialize_resets(beaker, colors):
    beaker.update_particles(ParticleCounts(10, 10, 10), colors)
    diff = beaker.initialize(ParticleCounts(1, 2, 3), colors)

    assert len(diff.removed) == 30
    assert len(diff.added) == 6
    assert as_tuple(beaker.counts()) == (1, 2, 3)
    assert beaker.is_consistent()


# ==================== Observers ====================

@pytest.mark.parametrize(
    "operation",
    [
        lambda m, c, r: m.update_particles(ParticleCounts(5, 5, 5), c),
        lambda m, c, r: m.add_directly(MoleculeType.SUBSTANCE, 4, SUBSTANCE_COLOR),
        lambda m, c, r: m.add_with_reaction(SALT_RULE, 3, r),
        lambda m, c, r: m.initialize(ParticleCounts(2, 2, 2), c),
        lambda m, c, r: m.set_particles([]),
        lambda m, c, r: m.set_water_level(3),
    ],
    ids=["update", "add_directly", "add_with_reaction", "initialize", "set_particles", "water"],
)
def test_each_operation_notifies_once(beaker, colors, salt_colors, operation):
    beaker.add_directly(MoleculeType.PRIMARY_ION, 2, PRIMARY_COLOR)
    recorder = Recorder()
    beaker.subscribe(recorder)

    operation(beaker, colors, salt_colors)

    assert recorder.calls == 1


def test_listener_sees_final_state(beaker, colors):
    seen = []
    beaker.subscribe(lambda: seen.append(as_tuple(beaker.counts())))
    beaker.update_particles(ParticleCounts(3, 1, 1), colors)
    assert seen == [(3, 1, 1)]


def test_unsubscribe(beaker):
    recorder = Recorder()
    unsubscribe = beaker.subscribe(recorder)
    unsubscribe()
    unsubscribe()

    beaker.add_directly(MoleculeType.SUBSTANCE, 1, SUBSTANCE_COLOR)
    assert recorder.calls == 0


def test_color_flip_notifies(beaker, colors, scheduler):
    beaker.update_particles(ParticleCounts(3, 0, 0), colors)
    beaker.update_particles(ParticleCounts(0, 3, 0), colors)
    recorder = Recorder()
    beaker.subscribe(recorder)

    scheduler.run_pending()

    assert recorder.calls == 1


# ==================== Stale timers ====================

def test_stale_color_flip_after_reset_is_ignored(beaker, colors, scheduler):
    beaker.update_particles(ParticleCounts(5, 0, 0), colors)
    beaker.update_particles(ParticleCounts(0, 5, 0), colors)
    assert len(scheduler) > 0

    beaker.set_particles([])
    recorder = Recorder()
    beaker.subscribe(recorder)
    scheduler.run_pending()

    assert beaker.get_particles() == []
    assert recorder.calls == 0


def test_stale_color_flip_leaves_new_particles_alone(beaker, colors, scheduler):
    beaker.update_particles(ParticleCounts(5, 0, 0), colors)
    beaker.update_particles(ParticleCounts(0, 5, 0), colors)

    beaker.initialize(ParticleCounts(0, 0, 4), colors)
    scheduler.run_pending()

    assert all(p.display_color == SECONDARY_COLOR for p in beaker.get_particles())


def test_flip_waits_at_least_one_frame(beaker, colors, scheduler):
    beaker.update_particles(ParticleCounts(2, 0, 0), colors)
    beaker.update_particles(ParticleCounts(0, 2, 0), colors)

    assert scheduler.advance(0.010) == 0
    assert all(p.display_color == SUBSTANCE_COLOR for p in beaker.get_particles())
    assert scheduler.advance(0.010) == 1
    assert all(p.display_color == PRIMARY_COLOR for p in beaker.get_particles())


def test_validate_beaker(capsys):
    validate_beaker()
    assert "beaker validations passed" in capsys.readouterr().out
