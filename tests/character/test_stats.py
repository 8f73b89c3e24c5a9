"""
Tests for gear aggregation and stat derivation.
"""

from types import SimpleNamespace

import pytest

from crawler.character.enemy import Enemy
from crawler.character.gear import GearItem, create_default_gear, sum_gear_stats
from crawler.character.party import create_member
from crawler.character.stats import apply_derived_stats, derive_stats, rescale_hp
from crawler.core.constants import GearSlot, Role
from crawler.economy.upgrades import UpgradeLevels


@pytest.fixture
def tank():
    return create_member("Tank", Role.TANK)


def test_default_gear_totals():
    totals = sum_gear_stats(create_default_gear())
    assert (totals.attack, totals.defense, totals.hp) == (10, 15, 30)


def test_gear_levels_multiply_stats():
    gear = {GearSlot.WEAPON: GearItem(name="Sword", level=3, attack=4)}
    assert sum_gear_stats(gear).attack == 12


def test_gear_sum_is_order_independent():
    gear = create_default_gear()
    gear[GearSlot.CHEST].level = 4
    reversed_gear = dict(reversed(list(gear.items())))
    assert sum_gear_stats(gear) == sum_gear_stats(reversed_gear)


def test_missing_gear_contributes_nothing():
    assert sum_gear_stats(None).hp == 0
    gear = {GearSlot.WEAPON: None, GearSlot.HELM: GearItem(hp=5)}
    assert sum_gear_stats(gear).hp == 5


def test_non_finite_gear_stat_is_ignored():
    gear = {GearSlot.WEAPON: GearItem(attack=float("nan"), defense=2)}
    totals = sum_gear_stats(gear)
    assert totals.attack == 0
    assert totals.defense == 2


def test_derive_stats_applies_upgrades(tank):
    upgrades = UpgradeLevels(attack_bonus=3, defense_bonus=1, health_bonus=2)
    stats = derive_stats(tank, upgrades)
    assert stats.max_hp == 140
    assert stats.attack == 21
    assert stats.defense == 41


def test_derive_stats_without_gear():
    member = SimpleNamespace(
        name="Bare", base_hp=50, base_attack=5, base_defense=2, gear=None
    )
    stats = derive_stats(member)
    assert (stats.max_hp, stats.attack, stats.defense) == (50, 5, 2)


def test_derive_stats_replaces_non_finite_base_stats():
    member = SimpleNamespace(
        name="Broken",
        base_hp=float("inf"),
        base_attack=None,
        base_defense=float("nan"),
        gear=None,
    )
    stats = derive_stats(member)
    assert (stats.max_hp, stats.attack, stats.defense) == (100, 10, 5)


def test_derive_stats_floors_outputs():
    member = SimpleNamespace(
        name="Weak", base_hp=-40, base_attack=-3, base_defense=-9, gear=None
    )
    stats = derive_stats(member)
    assert (stats.max_hp, stats.attack, stats.defense) == (1, 1, 0)


def test_rescale_hp_preserves_percentage():
    assert rescale_hp(60, 100, 120) == 72
    assert rescale_hp(0, 100, 120) == 0
    assert rescale_hp(100, 100, 90) == 90


def test_rescale_hp_rounds_half_up():
    assert rescale_hp(65, 130, 135) == 68


def test_apply_derived_stats_reports_delta(tank):
    tank.hp = 65
    delta = apply_derived_stats(tank, UpgradeLevels(health_bonus=1))
    assert tank.max_hp == 135
    assert tank.hp == 68
    assert delta.max_hp == 5
    assert delta.hp == 3
    assert delta.attack == 0


def test_enemy_take_damage_reports_kill_once():
    enemy = Enemy(id="1-1-0", name="Goblin", hp=10, max_hp=10, attack=4, defense=1)
    assert not enemy.take_damage(4)
    assert enemy.take_damage(50)
    assert enemy.hp == 0
    assert not enemy.take_damage(5)
