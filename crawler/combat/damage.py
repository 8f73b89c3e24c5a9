"""
Damage module for the crawler.

Handles critical hits and the damage formulas for both directions of
combat. All results are non-negative integers.
"""

import math
import random
from typing import Any

from pydantic import BaseModel, Field

from crawler.core.constants import DEFAULT_CRIT_CHANCE, DEFAULT_CRIT_MULTIPLIER
from crawler.core.error_handling import is_finite_number

# Shield Wall halves incoming damage.
SHIELD_WALL_FACTOR = 0.5


class CriticalRoll(BaseModel):
    """Outcome of a critical hit roll."""

    damage: int = Field(ge=0, description="Final amount after the roll.")
    is_critical: bool = Field(default=False)


class DamageRoll(BaseModel):
    """Breakdown of a party member's attack."""

    base: int = Field(ge=0, description="Damage after defense, before boosts.")
    boost: float = Field(default=1.0, description="Damage boost multiplier used.")
    damage: int = Field(ge=0, description="Final damage dealt.")
    is_critical: bool = Field(default=False)


def _as_int(value: Any) -> int:
    if not is_finite_number(value):
        return 0
    return max(0, math.floor(value))


def critical_hit(
    base_amount: float,
    crit_chance: float = DEFAULT_CRIT_CHANCE,
    crit_multiplier: float = DEFAULT_CRIT_MULTIPLIER,
    rng: random.Random | None = None,
) -> CriticalRoll:
    """
    Rolls a critical hit. Used for both damage and healing.

    Args:
        base_amount (float): The amount before the roll.
        crit_chance (float): Probability of a critical. Defaults to 0.10.
        crit_multiplier (float): Critical multiplier. Defaults to 2.0.
        rng (random.Random | None): Random source.

    Returns:
        CriticalRoll: The floored amount and whether it was critical.

    """
    is_critical = (rng or random).random() < crit_chance
    if is_critical:
        return CriticalRoll(damage=_as_int(base_amount * crit_multiplier), is_critical=True)
    return CriticalRoll(damage=_as_int(base_amount), is_critical=False)


def base_damage(attack: int, defense: int) -> int:
    """Damage before boosts: attack minus defense, at least 1."""
    return max(1, _as_int(attack - defense))


def resolve_party_damage(
    attacker: Any, target: Any, rng: random.Random | None = None
) -> DamageRoll:
    """
    Resolves a party member's attack against an enemy.

    Args:
        attacker (Any): The attacking party member.
        target (Any): The enemy being attacked.
        rng (random.Random | None): Random source.

    Returns:
        DamageRoll: The damage breakdown.

    """
    base = base_damage(attacker.attack, target.defense)
    boost = attacker.damage_boost()
    boosted = _as_int(base * boost)
    roll = critical_hit(boosted, rng=rng)
    return DamageRoll(
        base=base,
        boost=boost,
        damage=roll.damage,
        is_critical=roll.is_critical,
    )


def resolve_enemy_damage(enemy: Any, target: Any, shield_wall_active: bool = False) -> int:
    """
    Resolves an enemy attack against a party member.

    Args:
        enemy (Any): The attacking enemy.
        target (Any): The party member being attacked.
        shield_wall_active (bool): Whether Shield Wall is up.

    Returns:
        int: The damage dealt.

    """
    damage = base_damage(enemy.attack, target.defense)
    if shield_wall_active:
        damage = math.floor(damage * SHIELD_WALL_FACTOR)
    return damage
