"""
Gear module for the crawler.

Defines equipment items and the aggregation of their stat contributions.
"""

from typing import Any, Mapping

from pydantic import BaseModel, Field

from crawler.core.constants import GearSlot
from crawler.core.content import DEFAULT_GEAR
from crawler.core.error_handling import is_finite_number


class GearItem(BaseModel):
    """A single piece of equipment. Each stat is multiplied by the level."""

    name: str = Field(
        default="Unknown Gear",
        description="The display name of the item.",
    )
    level: int = Field(
        default=1,
        ge=0,
        description="The upgrade level of the item.",
    )
    attack: float = Field(default=0, description="Flat attack per level.")
    defense: float = Field(default=0, description="Flat defense per level.")
    hp: float = Field(default=0, description="Flat hit points per level.")


Gear = dict[GearSlot, GearItem]


class GearTotals(BaseModel):
    """Summed stat contribution of a full gear set."""

    attack: float = 0
    defense: float = 0
    hp: float = 0


def create_default_gear(level: int = 1) -> Gear:
    """
    Creates the starting gear set, one basic item in each slot.

    Args:
        level (int): The level of every item. Defaults to 1.

    Returns:
        Gear: A fresh gear mapping.

    """
    return {
        slot: GearItem(level=level, **data) for slot, data in DEFAULT_GEAR.items()
    }


def _contribution(item: Any, stat: str, level: float) -> float:
    value = getattr(item, stat, 0)
    if not is_finite_number(value):
        return 0
    return value * level


def sum_gear_stats(gear: Mapping[Any, Any] | None) -> GearTotals:
    """
    Sums the contribution of every item in a gear set.

    Missing or malformed entries contribute nothing. The result does not
    depend on the iteration order of the mapping.

    Args:
        gear (Mapping[Any, Any] | None): The gear to sum.

    Returns:
        GearTotals: The summed attack, defense and hp.

    """
    totals = GearTotals()
    if not gear:
        return totals
    for item in gear.values():
        if item is None:
            continue
        level = getattr(item, "level", 1)
        if not is_finite_number(level):
            level = 1
        totals.attack += _contribution(item, "attack", level)
        totals.defense += _contribution(item, "defense", level)
        totals.hp += _contribution(item, "hp", level)
    return totals
