"""
Particle Animation Adapter
==========================

The beaker model computes *what* changed (a ParticleDiff); this module
decides *when* it is shown. It stamps appearance times and color-transition
timings onto particles and schedules the deferred color flip that ends a
transition.

Scheduling is injectable:
- thread_timer_scheduler: threading.Timer, for interactive use
- ManualScheduler: deterministic queue drained by the caller, for
  headless runs and tests

A scheduled flip carries particle ids only. If the model was reset before
it fires, unknown ids are ignored, so a stale flip never touches a
particle it was not scheduled for.

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""

import heapq
import itertools
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..config import AnimationTimings
from .types import Particle

# scheduler(delay_seconds, callback)
Scheduler = Callable[[float, Callable[[], None]], Any]
Clock = Callable[[], float]


def thread_timer_scheduler(delay_s: float, callback: Callable[[], None]) -> threading.Timer:
    """Run callback on a daemon timer thread after delay_s seconds."""
    timer = threading.Timer(delay_s, callback)
    timer.daemon = True
    timer.start()
    return timer


def wall_clock_ms() -> float:
    return time.time() * 1000.0


class ManualScheduler:
    """
    Deterministic scheduler with its own virtual clock.

    Callbacks run only when advance() or run_pending() is called, in
    due-time order (FIFO among equal due times).
    """

    def __init__(self):
        self.now_s = 0.0
        self._queue: List[Tuple[float, int, Callable[[], None]]] = []
        self._counter = itertools.count()

    def __call__(self, delay_s: float, callback: Callable[[], None]) -> None:
        heapq.heappush(self._queue, (self.now_s + delay_s, next(self._counter), callback))

    def __len__(self) -> int:
        return len(self._queue)

    def clock_ms(self) -> float:
        return self.now_s * 1000.0

    def advance(self, seconds: float) -> int:
        """Move the clock forward and run every callback now due."""
        self.now_s += seconds
        ran = 0
        while self._queue and self._queue[0][0] <= self.now_s:
            _, _, callback = heapq.heappop(self._queue)
            callback()
            ran += 1
        return ran

    def run_pending(self) -> int:
        """Run everything queued, advancing the clock to the last due time."""
        ran = 0
        while self._queue:
            due, _, callback = heapq.heappop(self._queue)
            self.now_s = max(self.now_s, due)
            callback()
            ran += 1
        return ran


@dataclass
class Transmutation:
    """A particle replaced in place by one of another species."""

    source: Particle
    result: Particle


@dataclass
class ParticleDiff:
    """
    Result of one model operation.

    Attributes:
        added: Particles placed in previously free cells
        removed: Particles deleted, their cells released
        transmuted: Particles replaced in place by another species
        recolored: Surviving particles whose color is transitioning
    """

    added: List[Particle] = field(default_factory=list)
    removed: List[Particle] = field(default_factory=list)
    transmuted: List[Transmutation] = field(default_factory=list)
    recolored: List[Particle] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.transmuted or self.recolored)

    @property
    def placements(self) -> int:
        """New grid placements made by the operation."""
        return len(self.added)

    def merge(self, other: "ParticleDiff") -> "ParticleDiff":
        self.added.extend(other.added)
        self.removed.extend(other.removed)
        self.transmuted.extend(other.transmuted)
        self.recolored.extend(other.recolored)
        return self


class ParticleAnimator:
    """
    Assigns presentation timings and schedules color transitions.

    Args:
        timings: Animation constants
        scheduler: Deferred-call hook (defaults to threading.Timer)
        clock: Milliseconds clock for created_at stamps
    """

    def __init__(
        self,
        timings: Optional[AnimationTimings] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Clock] = None,
    ):
        if timings is None:
            timings = AnimationTimings()
        timings.validate()
        self.timings = timings
        self.scheduler = scheduler if scheduler is not None else thread_timer_scheduler
        self.clock = clock if clock is not None else wall_clock_ms

    def stamp_additions(self, particles: Sequence[Particle]) -> None:
        """Stagger the appearance of a batch of new particles."""
        now = self.clock()
        for index, particle in enumerate(particles):
            particle.created_at = now + index * self.timings.batch_stagger_ms

    def stamp_transitions(
        self, particles: Sequence[Particle], duration_ms: float, stagger_ms: float
    ) -> None:
        """Give a batch of particles a staggered color transition."""
        now = self.clock()
        for index, particle in enumerate(particles):
            particle.transition_ms = duration_ms
            particle.transition_delay_ms = index * stagger_ms
            particle.is_initial_appearance = False
            if particle.created_at is None:
                particle.created_at = now

    def schedule_color_transition(
        self,
        ids: Iterable[str],
        target_color: str,
        apply: Callable[[FrozenSet[str], str], None],
        delay_ms: float = 0.0,
    ) -> None:
        """
        Defer apply(ids, target_color) by at least one frame.

        The minimum delay guarantees the starting color is rendered once
        before the transition begins.
        """
        id_set = frozenset(ids)
        if not id_set:
            return
        delay = max(delay_ms, self.timings.min_frame_delay_ms)
        self.scheduler(delay / 1000.0, lambda: apply(id_set, target_color))
