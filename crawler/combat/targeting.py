"""
Targeting module for the crawler.

Each role has a targeting strategy; roles without one pick a living enemy
at random. Ties go to the first candidate in encounter order.
"""

import random
from typing import Any, Callable, Sequence

from typing_extensions import TypeVar

from crawler.character.enemy import Enemy
from crawler.core.constants import Role

T = TypeVar("T")

TargetingStrategy = Callable[[list[Enemy]], Enemy]


def _first_max(candidates: list[Enemy], key: Callable[[Enemy], float]) -> Enemy:
    best = candidates[0]
    for enemy in candidates[1:]:
        if key(enemy) > key(best):
            best = enemy
    return best


def _first_min(candidates: list[Enemy], key: Callable[[Enemy], float]) -> Enemy:
    best = candidates[0]
    for enemy in candidates[1:]:
        if key(enemy) < key(best):
            best = enemy
    return best


def target_highest_threat(candidates: list[Enemy]) -> Enemy:
    """Tanks engage the enemy with the highest attack."""
    return _first_max(candidates, lambda e: e.attack)


def target_lowest_hp(candidates: list[Enemy]) -> Enemy:
    """Healers and rogues finish off the enemy with the least hp."""
    return _first_min(candidates, lambda e: e.hp)


def target_half_health(candidates: list[Enemy]) -> Enemy:
    """Warriors go for the enemy closest to half health."""
    return _first_min(candidates, lambda e: abs(e.hp / e.max_hp - 0.5))


def target_highest_hp(candidates: list[Enemy]) -> Enemy:
    """Mages hit the sturdiest enemy."""
    return _first_max(candidates, lambda e: e.hp)


TARGETING_STRATEGIES: dict[Role, TargetingStrategy] = {
    Role.TANK: target_highest_threat,
    Role.HEALER: target_lowest_hp,
    Role.WARRIOR: target_half_health,
    Role.ROGUE: target_lowest_hp,
    Role.MAGE: target_highest_hp,
}


def random_choice(candidates: Sequence[T], rng: random.Random | None = None) -> T:
    """Picks one element uniformly at random."""
    return candidates[int((rng or random).random() * len(candidates))]


def select_target(
    attacker: Any,
    enemies: Sequence[Enemy],
    rng: random.Random | None = None,
) -> Enemy | None:
    """
    Selects the enemy a party member attacks.

    Args:
        attacker (Any): The attacking member, only its `role` is used.
        enemies (Sequence[Enemy]): The encounter, in order.
        rng (random.Random | None): Random source for the fallback strategy.

    Returns:
        Enemy | None: The target, or None if every enemy is defeated.

    """
    candidates = [enemy for enemy in enemies if enemy.hp > 0]
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]
    strategy = TARGETING_STRATEGIES.get(Role(getattr(attacker, "role", Role.UNKNOWN)))
    if strategy is None:
        return random_choice(candidates, rng)
    return strategy(candidates)


def select_random_member(
    members: Sequence[Any], rng: random.Random | None = None
) -> Any | None:
    """
    Selects a uniformly random living party member for an enemy attack.

    Args:
        members (Sequence[Any]): The party.
        rng (random.Random | None): Random source.

    Returns:
        Any | None: The target, or None if nobody is alive.

    """
    alive = [member for member in members if member.hp > 0]
    if not alive:
        return None
    return random_choice(alive, rng)
