"""
Run / pause / step / reset control for a grid-world simulation.

Cycles are driven by asyncio timers: while running, every completed cycle
schedules the next one ``step_delay_ms`` later with ``loop.call_later``. A
cycle never awaits, so pausing or resetting only ever cancels a pending
timer and never interrupts a cycle half way.
"""

import asyncio
import logging
from typing import Callable, List, Optional

from ..core.grid import CellKind, Pos, Weather
from .cycle_runner import CycleResult, Phase, SimulationState, run_cycle

logger = logging.getLogger(__name__)


class SimulationScheduler:
    """
    Timer-driven controller around a ``SimulationState``.

    Args:
        state: Simulation to drive
        on_cycle: Optional listener called with every ``CycleResult``
    """

    def __init__(
        self,
        state: SimulationState,
        on_cycle: Optional[Callable[[CycleResult], None]] = None,
    ) -> None:
        self.state = state
        self.on_cycle = on_cycle
        self._running = False
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._handle: Optional[asyncio.TimerHandle] = None
        self._remaining: Optional[int] = None
        self._done: Optional[asyncio.Future] = None
        self._collected: List[CycleResult] = []

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def phase(self) -> Phase:
        return self.state.phase

    # ------------------------------ Run control ------------------------------ #

    @property
    def truncated(self) -> bool:
        """True once the environment has truncated; only reset clears it."""
        last = self.state.last_result
        return last is not None and last.truncated

    def start(self) -> None:
        """Start running. Must be called from inside a running event loop."""
        if self._running:
            return
        loop = asyncio.get_running_loop()
        if self.truncated:
            logger.warning("Start ignored: environment truncated, reset first")
            return
        self._loop = loop
        self._running = True
        logger.info(f"Simulation started (delay={self.state.params.step_delay_ms}ms)")
        self._schedule()

    def pause(self) -> None:
        """
        Stop running and cancel the pending cycle. State is kept.

        A pending ``run_cycles`` returns the cycles completed so far.
        """
        self._cancel_timer()
        was_running = self._running
        self._running = False
        self.state.phase = Phase.PAUSED
        self._resolve_pending()
        if was_running:
            logger.info(f"Simulation paused after cycle {self.state.cycle}")

    def toggle_run(self) -> bool:
        """Start when paused, pause when running. Returns the new running flag."""
        if self._running:
            self.pause()
        else:
            self.start()
        return self._running

    def step(self) -> Optional[CycleResult]:
        """Run exactly one cycle. Ignored while running or after truncation."""
        if self._running:
            logger.warning("Step ignored while the simulation is running")
            return None
        if self.truncated:
            logger.warning("Step ignored: environment truncated, reset first")
            return None
        return self._run_one()

    def reset(self) -> None:
        """
        Cancel any pending cycle and restore the initial conditions.

        A pending ``run_cycles`` returns the cycles completed before the reset.
        """
        self._cancel_timer()
        self._running = False
        self._resolve_pending()
        self.state.reset()
        self.state.phase = Phase.IDLE

    async def run_cycles(self, n: int) -> List[CycleResult]:
        """
        Run until ``n`` more cycles have completed, then pause.

        Ends early on truncation, ``pause()`` or ``reset()``.

        Returns:
            The CycleResults produced, in order
        """
        if n < 1:
            raise ValueError(f"n must be positive, got {n}")
        if self._running:
            raise RuntimeError("Simulation is already running")
        if self.truncated:
            logger.warning("Run ignored: environment truncated, reset first")
            return []

        self._remaining = n
        self._collected = []
        self._done = asyncio.get_running_loop().create_future()
        try:
            self.start()
            await self._done
            return list(self._collected)
        finally:
            self._remaining = None
            self._done = None

    # ------------------------------- Commands ------------------------------- #

    def place(self, kind: CellKind, loc: Pos) -> bool:
        """Apply the placement tool. Refused while running."""
        if self._running:
            logger.warning(f"Placement of {CellKind(kind).name} at {loc} refused while running")
            return False
        self.state.environment.place(kind, loc)
        return True

    def clear_grid(self) -> bool:
        """Empty every cell. Refused while running."""
        if self._running:
            logger.warning("Clear grid refused while running")
            return False
        self.state.environment.clear()
        logger.info("Grid cleared")
        return True

    def toggle_weather(self) -> Weather:
        weather = self.state.environment.toggle_weather()
        logger.info(f"Weather is now {weather.value}")
        return weather

    # ------------------------------- Internals ------------------------------- #

    def _schedule(self) -> None:
        delay = self.state.params.step_delay_ms / 1000.0
        self._handle = self._loop.call_later(delay, self._fire)
        self.state.phase = Phase.SCHEDULED

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if not self._running:
            return
        try:
            self._run_one()
        except Exception as exc:
            logger.exception(f"Cycle {self.state.cycle + 1} failed, pausing")
            if self._done is not None and not self._done.done():
                self._done.set_exception(exc)
                self.pause()
                return
            self.pause()
            raise
        if self._running:
            self._schedule()

    def _run_one(self) -> CycleResult:
        result = run_cycle(self.state)
        if self.on_cycle is not None:
            self.on_cycle(result)

        if self._remaining is not None:
            self._collected.append(result)
            self._remaining -= 1
            if self._remaining <= 0:
                self.pause()
        if result.truncated and self._running:
            logger.info(f"Environment truncated after cycle {self.state.cycle}")
            self.pause()
        return result

    def _resolve_pending(self) -> None:
        if self._done is not None and not self._done.done():
            self._done.set_result(None)
