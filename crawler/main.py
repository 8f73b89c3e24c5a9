"""
Main entry point for the idle dungeon crawler.

Runs a short headless simulation: the scheduler is ticked back to back, the
event log is streamed to the console, gold is spent on upgrades whenever the
party can afford them, and the game is exported and re-imported at the end.
"""

import argparse
import logging
import random

from crawler.combat.event_log import LogEntry
from crawler.combat.game_core import GameCore
from crawler.combat.scheduler import TickScheduler
from crawler.core.constants import TICK_MS, UpgradeType
from crawler.core.logging import setup_logging
from crawler.core.sheets import (
    print_encounter_sheet,
    print_log_entries,
    print_party_sheet,
    print_progress_sheet,
)
from crawler.core.utils import cprint, crule


def buy_affordable_upgrades(core: GameCore) -> int:
    """
    Buys upgrades, cheapest first, until nothing is affordable.

    Args:
        core (GameCore): The game.

    Returns:
        int: The number of upgrades bought.

    """
    bought = 0
    while True:
        cheapest = min(UpgradeType, key=core.upgrade_cost)
        if not core.purchase_upgrade(cheapest).success:
            return bought
        bought += 1


def run_simulation(seconds: int, seed: int | None, verbose: bool) -> GameCore:
    """
    Simulates `seconds` of game time.

    Args:
        seconds (int): Game time to simulate.
        seed (int | None): Seed of the random source.
        verbose (bool): Stream every log entry to the console.

    Returns:
        GameCore: The game at the end of the simulation.

    """
    core = GameCore(rng=random.Random(seed))
    scheduler = TickScheduler(core)

    def stream(entries: list[LogEntry]) -> None:
        if verbose:
            print_log_entries(entries)

    core.log.subscribe(stream)

    crule(":crossed_swords:  Entering the dungeon", style="bold green")
    print_party_sheet(core.party)

    ticks_per_second = 1000 // TICK_MS
    for second in range(seconds):
        scheduler.run_ticks(ticks_per_second)
        if second % 30 == 29:
            buy_affordable_upgrades(core)
            snapshot = core.snapshot()
            print_progress_sheet(snapshot)
            print_encounter_sheet(snapshot.combat.enemies)

    crule(":crossed_swords:  Simulation finished", style="bold green")
    snapshot = core.snapshot()
    print_progress_sheet(snapshot)
    print_party_sheet(snapshot.party)
    return core


def main() -> None:
    parser = argparse.ArgumentParser(description="Idle dungeon crawler simulation.")
    parser.add_argument("--seconds", type=int, default=300, help="game time to simulate")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--quiet", action="store_true", help="hide the event log")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.debug else logging.INFO)

    try:
        core = run_simulation(args.seconds, args.seed, not args.quiet)
    except KeyboardInterrupt:
        cprint("")
        crule(":crossed_swords:  Simulation Interrupted", style="bold red")
        return

    save = core.export_save()
    cprint(f"💾 Save string ({len(save)} characters):")
    cprint(save, style="dim", soft_wrap=True)
    restored = GameCore()
    if restored.import_save(save):
        cprint(
            f"Save restored: floor {restored.progression.current_floor}, "
            f"{restored.economy.gold} gold",
            style="bold green",
        )


if __name__ == "__main__":
    main()
