"""
Convergence Controller - load-until-stable loop for lazily rendered feeds

Repeats "reveal more" on a page source and watches the item count:

    IDLE -> LOADING -> STALLING -> SATISFIED | EXHAUSTED

- SATISFIED: the item count reached the target
- EXHAUSTED: `stall_limit` consecutive reveals without growth, or
  `max_iterations` reveals in total (hard ceiling for pathological pages)

Both end states mean "extract whatever is loaded now"; running out is
reported through `ConvergenceOutcome.target_reached`, never raised.

Usage:
    controller = ConvergenceController(source, target=100, stall_limit=10)
    outcome = await controller.run()
    print(outcome.loaded_count, outcome.target_reached)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class ConvergencePhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    STALLING = "stalling"
    SATISFIED = "satisfied"
    EXHAUSTED = "exhausted"

    @property
    def terminal(self) -> bool:
        return self in (ConvergencePhase.SATISFIED, ConvergencePhase.EXHAUSTED)


@dataclass
class ConvergenceState:
    """Loop counters of one run; never shared between runs."""
    last_observed_count: int = 0
    stall_count: int = 0
    iteration: int = 0
    phase: ConvergencePhase = ConvergencePhase.IDLE

    def observe(self, count: int) -> bool:
        """Record a count; True when it grew past the last observed one."""
        if count > self.last_observed_count:
            self.last_observed_count = count
            self.stall_count = 0
            return True
        self.stall_count += 1
        return False


@dataclass
class ConvergenceOutcome:
    """Result of the loading phase."""
    phase: ConvergencePhase
    loaded_count: int
    target: int
    iterations: int
    stall_count: int
    counts: List[int] = field(default_factory=list)

    @property
    def target_reached(self) -> bool:
        return self.phase == ConvergencePhase.SATISFIED


ProgressCallback = Callable[[ConvergenceState, int], None]


class ConvergenceController:
    """
    Drives `reveal_more()` / `item_count()` on a page source until a stop condition.

    Args:
        source: Object with async `reveal_more()` and `item_count()`
        target: Item count that ends the loop successfully
        stall_limit: Consecutive non-growing reveals before giving up
        max_iterations: Upper bound on reveals
        reveal_delay_ms: Pause after each reveal before counting
        on_progress: Called after every reveal with (state, count)
    """

    def __init__(
        self,
        source,
        target: int,
        stall_limit: int = 10,
        max_iterations: int = 300,
        reveal_delay_ms: int = 0,
        on_progress: Optional[ProgressCallback] = None,
    ):
        if target < 1:
            raise ValueError("target must be >= 1")
        if stall_limit < 1:
            raise ValueError("stall_limit must be >= 1")
        if max_iterations < 1:
            raise ValueError("max_iterations must be >= 1")
        self.source = source
        self.target = target
        self.stall_limit = stall_limit
        self.max_iterations = max_iterations
        self.reveal_delay_ms = max(0, reveal_delay_ms)
        self.on_progress = on_progress

    def _finish(self, state: ConvergenceState, phase: ConvergencePhase, count: int, counts: List[int]) -> ConvergenceOutcome:
        state.phase = phase
        logger.info(
            f"Loading finished: {phase.value} with {count}/{self.target} items "
            f"after {state.iteration} reveal(s)"
        )
        return ConvergenceOutcome(
            phase=phase,
            loaded_count=count,
            target=self.target,
            iterations=state.iteration,
            stall_count=state.stall_count,
            counts=counts,
        )

    async def run(self) -> ConvergenceOutcome:
        state = ConvergenceState()

        # Baseline: what is already rendered before the first reveal
        count = await self.source.item_count()
        counts = [count]
        state.last_observed_count = count
        state.phase = ConvergencePhase.LOADING
        if count >= self.target:
            return self._finish(state, ConvergencePhase.SATISFIED, count, counts)

        while True:
            await self.source.reveal_more()
            if self.reveal_delay_ms:
                await asyncio.sleep(self.reveal_delay_ms / 1000)
            count = await self.source.item_count()
            counts.append(count)
            state.iteration += 1

            if count >= self.target:
                return self._finish(state, ConvergencePhase.SATISFIED, count, counts)

            if state.observe(count):
                state.phase = ConvergencePhase.LOADING
            else:
                state.phase = ConvergencePhase.STALLING
                logger.debug(f"Stall {state.stall_count}/{self.stall_limit} at {count} items")

            if self.on_progress:
                self.on_progress(state, count)

            if state.stall_count >= self.stall_limit:
                return self._finish(state, ConvergencePhase.EXHAUSTED, count, counts)
            if state.iteration >= self.max_iterations:
                return self._finish(state, ConvergencePhase.EXHAUSTED, count, counts)


__all__ = [
    "ConvergencePhase",
    "ConvergenceState",
    "ConvergenceOutcome",
    "ConvergenceController",
]
