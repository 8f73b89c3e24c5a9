"""
Stat derivation module for the crawler.

Combines base stats, gear and shop upgrades into the derived stats of a
party member, and rescales current hit points when those stats change.
"""

from typing import Any

from pydantic import BaseModel, Field

from crawler.core.error_handling import ensure_finite_number, floor_at_least
from crawler.core.utils import round_half_up
from crawler.economy.upgrades import UpgradeLevels

from .gear import sum_gear_stats

# Stats used when a base stat is missing or not a number.
FALLBACK_BASE_HP = 100
FALLBACK_BASE_ATTACK = 10
FALLBACK_BASE_DEFENSE = 5

# Max HP granted per level of Health Training.
HP_PER_HEALTH_BONUS = 5


class DerivedStats(BaseModel):
    """Derived combat stats of a party member."""

    max_hp: int = Field(ge=1)
    attack: int = Field(ge=1)
    defense: int = Field(ge=0)


class StatDelta(BaseModel):
    """Change in derived stats of one member after a re-derivation."""

    name: str
    max_hp: int = 0
    attack: int = 0
    defense: int = 0
    hp: int = 0


def derive_stats(member: Any, upgrades: UpgradeLevels | None = None) -> DerivedStats:
    """
    Computes max hp, attack and defense of a member.

    Missing gear contributes nothing and non-finite numbers are replaced by
    safe defaults, so the result is always usable.

    Args:
        member (Any): A party member, or any object with base stats and gear.
        upgrades (UpgradeLevels | None): Purchased upgrades.

    Returns:
        DerivedStats: The derived stats.

    """
    upgrades = upgrades or UpgradeLevels()
    context = {"member": getattr(member, "name", None), "context": "derive_stats"}

    base_hp = ensure_finite_number(
        getattr(member, "base_hp", None), "base_hp", FALLBACK_BASE_HP, context
    )
    base_attack = ensure_finite_number(
        getattr(member, "base_attack", None), "base_attack", FALLBACK_BASE_ATTACK, context
    )
    base_defense = ensure_finite_number(
        getattr(member, "base_defense", None),
        "base_defense",
        FALLBACK_BASE_DEFENSE,
        context,
    )

    gear = sum_gear_stats(getattr(member, "gear", None))

    max_hp = base_hp + gear.hp + upgrades.health_bonus * HP_PER_HEALTH_BONUS
    attack = base_attack + gear.attack + upgrades.attack_bonus
    defense = base_defense + gear.defense + upgrades.defense_bonus

    return DerivedStats(
        max_hp=floor_at_least(max_hp, 1, "max_hp", FALLBACK_BASE_HP),
        attack=floor_at_least(attack, 1, "attack", FALLBACK_BASE_ATTACK),
        defense=floor_at_least(defense, 0, "defense", FALLBACK_BASE_DEFENSE),
    )


def rescale_hp(old_hp: int, old_max_hp: int, new_max_hp: int) -> int:
    """
    Keeps the same fraction of health when the maximum changes.

    Args:
        old_hp (int): Hit points before the change.
        old_max_hp (int): Maximum before the change.
        new_max_hp (int): Maximum after the change.

    Returns:
        int: round(new_max_hp * old_hp / old_max_hp), clamped to [0, new_max_hp].

    """
    ratio = old_hp / old_max_hp if old_max_hp > 0 else 1.0
    return max(0, min(new_max_hp, round_half_up(new_max_hp * ratio)))


def apply_derived_stats(member: Any, upgrades: UpgradeLevels | None = None) -> StatDelta:
    """
    Re-derives a member's stats in place, preserving its health percentage.

    Args:
        member (Any): The party member to update.
        upgrades (UpgradeLevels | None): Purchased upgrades.

    Returns:
        StatDelta: How much each stat changed.

    """
    stats = derive_stats(member, upgrades)
    old_hp, old_max_hp = member.hp, member.max_hp
    delta = StatDelta(
        name=member.name,
        max_hp=stats.max_hp - member.max_hp,
        attack=stats.attack - member.attack,
        defense=stats.defense - member.defense,
    )
    member.max_hp = stats.max_hp
    member.attack = stats.attack
    member.defense = stats.defense
    member.hp = rescale_hp(old_hp, old_max_hp, stats.max_hp)
    delta.hp = member.hp - old_hp
    return delta
