"""
Tests for role-based target selection.
"""

import random
from types import SimpleNamespace

import pytest

from crawler.character.enemy import Enemy
from crawler.combat.targeting import select_random_member, select_target


def make_enemy(index: int, hp: int, attack: int = 5, max_hp: int = 100) -> Enemy:
    return Enemy(
        id=f"1-1-{index}",
        name=f"Goblin {index + 1}",
        hp=hp,
        max_hp=max_hp,
        attack=attack,
        defense=1,
    )


def attacker(role: str) -> SimpleNamespace:
    return SimpleNamespace(role=role)


@pytest.fixture
def enemies():
    return [
        make_enemy(0, hp=90, attack=5),
        make_enemy(1, hp=40, attack=12),
        make_enemy(2, hp=55, attack=12),
    ]


def test_tank_targets_highest_attack_first_on_tie(enemies):
    assert select_target(attacker("tank"), enemies).id == "1-1-1"


def test_healer_and_rogue_target_lowest_hp(enemies):
    assert select_target(attacker("healer"), enemies).id == "1-1-1"
    assert select_target(attacker("rogue"), enemies).id == "1-1-1"


def test_warrior_targets_closest_to_half_health(enemies):
    assert select_target(attacker("warrior"), enemies).id == "1-1-2"


def test_mage_targets_highest_hp(enemies):
    assert select_target(attacker("mage"), enemies).id == "1-1-0"


def test_defeated_enemies_are_never_targeted(enemies):
    enemies[1].hp = 0
    assert select_target(attacker("healer"), enemies).id == "1-1-2"


def test_single_candidate_is_returned_directly():
    lone = [make_enemy(0, hp=0), make_enemy(1, hp=10)]
    for role in ("tank", "healer", "warrior", "rogue", "mage", "bard"):
        assert select_target(attacker(role), lone).id == "1-1-1"


def test_no_living_enemy_returns_none():
    assert select_target(attacker("tank"), [make_enemy(0, hp=0)]) is None
    assert select_target(attacker("tank"), []) is None


def test_unknown_role_picks_a_living_enemy_at_random(enemies):
    enemies[0].hp = 0
    rng = random.Random(7)
    picks = {select_target(attacker("bard"), enemies, rng).id for _ in range(50)}
    assert picks == {"1-1-1", "1-1-2"}


def test_random_member_skips_the_dead(rng_returning):
    members = [
        SimpleNamespace(name="A", hp=0),
        SimpleNamespace(name="B", hp=5),
        SimpleNamespace(name="C", hp=0),
    ]
    assert select_random_member(members, rng_returning(0.99)).name == "B"
    assert select_random_member([SimpleNamespace(name="A", hp=0)]) is None
