"""
Unified tick scheduler for the crawler.

A single 100 ms clock drives every cadence of the game: the mass
resurrection ritual, the attack timers, the coarse game loop and the
auto-start of the next encounter. One turn runs at a time; a tick that
arrives while a turn is still in flight is dropped, never queued. A turn
holds the game's transaction, so calls made from other threads see either
none or all of it.
"""

import threading
import time
from typing import Callable

from catchery import log_debug, log_error, log_warning

from crawler.core.constants import DEFAULT_ENCOUNTER_DELAY_MS, TICK_MS

from .game_core import GameCore


class TickScheduler:
    """
    Drives a `GameCore` one turn per tick.

    Turn order: mass resurrection (exclusive for the turn), attack timers,
    the coarse game loop when enough time has accumulated, then the
    auto-start countdown for the next encounter.
    """

    def __init__(
        self,
        core: GameCore,
        tick_ms: int = TICK_MS,
        auto_start: bool = True,
        encounter_delay_ms: int = DEFAULT_ENCOUNTER_DELAY_MS,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the scheduler.

        Args:
            core (GameCore): The game to drive.
            tick_ms (int): Tick resolution in milliseconds.
            auto_start (bool): Start the next encounter automatically.
            encounter_delay_ms (int): Pause before the next encounter starts.
            monotonic (Callable[[], float]): Clock in seconds for `start()`.

        """
        self.core = core
        self.tick_ms = tick_ms
        self.auto_start = auto_start
        self.encounter_delay_ms = encounter_delay_ms
        self.monotonic = monotonic

        # Time accumulated towards the next coarse game-loop step.
        self.game_loop_accumulator_ms = 0
        # Time spent waiting for the next encounter.
        self.encounter_countdown_ms = 0

        self.ticks = 0
        self.skipped_ticks = 0
        self.failed_ticks = 0

        self._turn_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self) -> bool:
        """
        Runs one turn.

        Returns:
            bool: False if the tick was dropped because a turn was in flight.

        """
        if not self._turn_lock.acquire(blocking=False):
            self.skipped_ticks += 1
            return False
        try:
            with self.core.transaction():
                self._run_turn()
            self.ticks += 1
            return True
        finally:
            self._turn_lock.release()

    def _run_turn(self) -> None:
        core = self.core

        if core.combat.performing_mass_res:
            core.process_mass_resurrection()
            return

        if core.combat.in_combat:
            core.process_attack_timers()

        self.game_loop_accumulator_ms += self.tick_ms
        # Read the speed every tick so changes apply without a restart.
        if self.game_loop_accumulator_ms >= core.game_speed_ms:
            self.game_loop_accumulator_ms = 0
            core.process_game_loop()

        if self.auto_start and core.ready_for_next_encounter:
            self.encounter_countdown_ms += self.tick_ms
            if self.encounter_countdown_ms >= self.encounter_delay_ms:
                self.encounter_countdown_ms = 0
                core.start_combat()
        else:
            self.encounter_countdown_ms = 0

    def run_ticks(self, count: int) -> int:
        """
        Runs `count` turns back to back on the calling thread.

        Args:
            count (int): How many ticks to run.

        Returns:
            int: How many of them actually ran.

        """
        return sum(1 for _ in range(count) if self.tick())

    # ============================================================================
    # BACKGROUND THREAD
    # ============================================================================

    def start(self) -> None:
        """
        Starts ticking on a daemon thread.

        Does nothing while a thread is alive, including one that was asked to
        stop but has not exited yet.
        """
        if self.running:
            if self._stop_event.is_set():
                log_warning(
                    "Scheduler is still stopping, not restarted",
                    {"ticks": self.ticks},
                )
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="crawler-scheduler", daemon=True
        )
        self._thread.start()
        log_debug("Scheduler started")

    def stop(self, timeout: float | None = 1.0) -> bool:
        """
        Stops every cadence at once and waits for the thread to exit.

        Args:
            timeout (float | None): How long to wait for the thread.

        Returns:
            bool: True if no ticking thread is left.

        """
        self._stop_event.set()
        thread = self._thread
        if thread is None:
            return True
        if thread is not threading.current_thread():
            thread.join(timeout)
            if thread.is_alive():
                log_warning(
                    "Scheduler thread did not stop in time",
                    {"timeout": timeout, "ticks": self.ticks},
                )
                return False
            self._thread = None
        log_debug("Scheduler stopped")
        return True

    def _run(self) -> None:
        interval = self.tick_ms / 1000
        deadline = self.monotonic() + interval
        while not self._stop_event.wait(max(0.0, deadline - self.monotonic())):
            try:
                self.tick()
            except Exception as e:
                # The failed turn is dropped; the next deadline runs as usual.
                self.failed_ticks += 1
                log_error(
                    f"Scheduler tick failed: {e}",
                    {
                        "ticks": self.ticks,
                        "failed_ticks": self.failed_ticks,
                        "error": type(e).__name__,
                    },
                )
            # Fixed rate: skip missed boundaries instead of catching up.
            now = self.monotonic()
            deadline += interval
            if deadline <= now:
                missed = int((now - deadline) // interval) + 1
                deadline += missed * interval
