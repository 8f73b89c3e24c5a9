"""
Tests for the unified tick scheduler.
"""

import random
import threading
import time

import pytest

from crawler.character.stats import derive_stats
from crawler.combat.event_log import EventLog
from crawler.combat.game_core import GameCore
from crawler.combat.scheduler import TickScheduler
from crawler.core.constants import UpgradeType


@pytest.fixture
def core():
    return GameCore(rng=random.Random(11))


def test_next_encounter_starts_after_delay(core):
    scheduler = TickScheduler(core)
    scheduler.run_ticks(4)
    assert not core.combat.in_combat
    scheduler.tick()
    assert core.combat.in_combat


def test_auto_start_can_be_disabled(core):
    scheduler = TickScheduler(core, auto_start=False)
    scheduler.run_ticks(20)
    assert not core.combat.in_combat


def test_tick_during_turn_is_dropped(core):
    scheduler = TickScheduler(core, encounter_delay_ms=100)
    nested_results = []
    # Log subscribers run while the turn still holds the scheduler.
    core.log.subscribe(lambda entries: nested_results.append(scheduler.tick()))
    assert scheduler.tick()
    assert nested_results == [False]
    assert scheduler.skipped_ticks == 1
    assert scheduler.ticks == 1


def test_turn_log_entries_are_committed_together():
    core = GameCore(rng=random.Random(11), log=EventLog(max_entries=100_000))
    batches = []
    core.log.subscribe(batches.append)
    scheduler = TickScheduler(core, encounter_delay_ms=100)
    for _ in range(300):
        batches_before = len(batches)
        entries_before = len(core.log)
        scheduler.tick()
        logged = len(core.log) - entries_before
        assert len(batches) - batches_before == (1 if logged else 0)
    assert scheduler.ticks == 300
    assert batches
    assert sum(len(batch) for batch in batches) == len(core.log)


def test_game_speed_change_applies_without_reset(core, monkeypatch):
    calls = []
    monkeypatch.setattr(core, "process_game_loop", lambda *args: calls.append(1))
    scheduler = TickScheduler(core, auto_start=False)
    scheduler.run_ticks(5)
    assert calls == []
    assert scheduler.game_loop_accumulator_ms == 500

    core.game_speed_ms = 300
    assert scheduler.game_loop_accumulator_ms == 500
    scheduler.tick()
    assert calls == [1]
    assert scheduler.game_loop_accumulator_ms == 0
    scheduler.run_ticks(3)
    assert calls == [1, 1]


def test_game_loop_runs_once_per_game_speed(core, monkeypatch):
    calls = []
    monkeypatch.setattr(core, "process_game_loop", lambda *args: calls.append(1))
    scheduler = TickScheduler(core, auto_start=False)
    scheduler.run_ticks(30)
    assert len(calls) == 3


def test_mass_resurrection_is_exclusive(core, monkeypatch):
    attacks = []
    monkeypatch.setattr(core, "process_attack_timers", lambda *args: attacks.append(1))
    core.start_combat()
    core.combat.performing_mass_res = True
    core.combat.mass_resurrection_timer = 9900
    scheduler = TickScheduler(core, auto_start=False)
    scheduler.tick()
    assert attacks == []
    assert scheduler.game_loop_accumulator_ms == 0
    assert not core.combat.performing_mass_res
    assert core.progression.total_runs == 1


def test_long_run_keeps_invariants(core):
    scheduler = TickScheduler(core)
    for _ in range(30):
        scheduler.run_ticks(100)
        progression = core.progression
        assert progression.current_floor >= 1
        assert 1 <= progression.current_group <= progression.total_groups_per_floor
        assert progression.max_floor_reached >= progression.current_floor
        for member in core.party:
            assert 0 <= member.hp <= member.max_hp
            assert 0 <= member.attack_timer < 100
        assert 0 <= core.combat.enemy_attack_timer <= 100
        assert len(core.log) <= 3000
    assert core.progression.monsters_killed > 0


def test_background_thread_start_and_stop(core):
    scheduler = TickScheduler(core)
    scheduler.start()
    assert scheduler.running
    time.sleep(0.5)
    scheduler.stop()
    assert not scheduler.running
    ticks = scheduler.ticks
    assert ticks >= 1
    time.sleep(0.3)
    assert scheduler.ticks == ticks


def scheduler_threads() -> list[threading.Thread]:
    return [t for t in threading.enumerate() if t.name == "crawler-scheduler"]


def test_background_thread_survives_failing_tick(core, monkeypatch):
    core.game_speed_ms = 100
    process_game_loop = core.process_game_loop
    failures = []

    def flaky_game_loop(*args):
        if not failures:
            failures.append(1)
            raise RuntimeError("transient")
        process_game_loop(*args)

    monkeypatch.setattr(core, "process_game_loop", flaky_game_loop)
    scheduler = TickScheduler(core)
    scheduler.start()
    time.sleep(0.6)
    assert scheduler.running
    assert scheduler.stop()
    assert scheduler.failed_ticks == 1
    assert scheduler.ticks >= 2
    assert core.log.pending_count() == 0


def test_stop_timeout_keeps_thread_until_it_exits(core, monkeypatch):
    core.game_speed_ms = 100
    entered = threading.Event()
    release = threading.Event()

    def blocking_game_loop(*args):
        entered.set()
        release.wait(5)

    monkeypatch.setattr(core, "process_game_loop", blocking_game_loop)
    scheduler = TickScheduler(core, auto_start=False)
    scheduler.start()
    assert entered.wait(2)

    assert not scheduler.stop(timeout=0.05)
    assert scheduler.running
    scheduler.start()
    assert len(scheduler_threads()) == 1

    release.set()
    assert scheduler.stop()
    assert not scheduler.running
    assert scheduler_threads() == []


def test_purchases_during_background_ticks_stay_consistent():
    core = GameCore(
        rng=random.Random(5), game_speed_ms=100, log=EventLog(max_entries=100_000)
    )
    committed = []
    core.log.subscribe(committed.extend)
    core.economy.gold = 1_000_000
    earned_before = core.economy.total_gold_earned

    scheduler = TickScheduler(core, encounter_delay_ms=100)
    scheduler.start()
    purchases = []
    upgrade_types = list(UpgradeType)
    for index in range(150):
        purchases.append(core.purchase_upgrade(upgrade_types[index % len(upgrade_types)]))
        time.sleep(0.002)
    assert scheduler.stop()

    bought = [purchase for purchase in purchases if purchase.success]
    upgrades = core.economy.upgrades
    earned = core.economy.total_gold_earned - earned_before
    assert bought
    assert scheduler.failed_ticks == 0
    assert sum(upgrades.level_of(kind) for kind in UpgradeType) == len(bought)
    assert core.economy.gold == 1_000_000 + earned - sum(p.cost for p in bought)
    for member in core.party:
        stats = derive_stats(member, upgrades)
        assert (member.max_hp, member.attack, member.defense) == (
            stats.max_hp,
            stats.attack,
            stats.defense,
        )
        assert 0 <= member.hp <= member.max_hp
    assert core.log.pending_count() == 0
    assert [entry.text for entry in committed] == [e.text for e in core.log.entries()]
    assert len(set(map(id, committed))) == len(committed)
