"""
Tests for critical hits and damage resolution.
"""

import pytest

from crawler.character.enemy import Enemy
from crawler.character.party import create_member
from crawler.combat.damage import (
    base_damage,
    critical_hit,
    resolve_enemy_damage,
    resolve_party_damage,
)
from crawler.combat.messages import tactical_message
from crawler.core.constants import Role


@pytest.fixture
def warrior():
    return create_member("Warrior", Role.WARRIOR, "warrior")


@pytest.fixture
def tank():
    return create_member("Tank", Role.TANK)


@pytest.fixture
def goblin():
    return Enemy(id="1-1-0", name="Goblin", hp=200, max_hp=200, attack=50, defense=5)


def test_critical_hit_never_with_zero_chance(crit_rng):
    roll = critical_hit(10, crit_chance=0, rng=crit_rng)
    assert roll.damage == 10
    assert not roll.is_critical


def test_critical_hit_always_with_full_chance(no_crit_rng):
    roll = critical_hit(10, crit_chance=1, rng=no_crit_rng)
    assert roll.damage == 20
    assert roll.is_critical


def test_critical_hit_floors_and_never_goes_negative(crit_rng):
    assert critical_hit(7.5, crit_multiplier=1.5, rng=crit_rng).damage == 11
    assert critical_hit(-5, rng=crit_rng).damage == 0
    assert critical_hit(float("nan"), rng=crit_rng).damage == 0


def test_base_damage_is_at_least_one():
    assert base_damage(10, 20) == 1
    assert base_damage(45, 5) == 40


def test_party_damage_without_boost(warrior, goblin, no_crit_rng):
    roll = resolve_party_damage(warrior, goblin, no_crit_rng)
    assert (roll.base, roll.boost, roll.damage) == (40, 1.0, 40)
    assert not roll.is_critical


def test_party_damage_with_boost_and_crit(warrior, goblin, crit_rng):
    warrior.skill_active = True
    warrior.skill_duration_ticks = 1
    roll = resolve_party_damage(warrior, goblin, crit_rng)
    assert roll.boost == 1.8
    assert roll.damage == 144
    assert roll.is_critical


def test_enemy_damage_and_shield_wall(tank, goblin):
    assert resolve_enemy_damage(goblin, tank) == 10
    assert resolve_enemy_damage(goblin, tank, shield_wall_active=True) == 5


def test_shield_wall_can_reduce_damage_to_zero(tank):
    weak = Enemy(id="1-1-0", name="Goblin", hp=10, max_hp=10, attack=4, defense=0)
    assert resolve_enemy_damage(weak, tank) == 1
    assert resolve_enemy_damage(weak, tank, shield_wall_active=True) == 0


def test_tactical_message_verbs(tank, warrior, goblin):
    assert "focuses on dangerous" in tactical_message(tank, goblin, 5, False, 1.0)
    goblin.attack = 10
    assert "engages" in tactical_message(tank, goblin, 5, False, 1.0)
    assert "strikes at" in tactical_message(warrior, goblin, 5, False, 1.0)


def test_tactical_message_suffixes(warrior, goblin):
    plain = tactical_message(warrior, goblin, 40, False, 1.0)
    assert plain == "Warrior strikes at Goblin for 40 damage!"
    boosted = tactical_message(warrior, goblin, 144, True, 1.8)
    assert boosted.endswith("💥 CRITICAL! (Blade Storm)")
