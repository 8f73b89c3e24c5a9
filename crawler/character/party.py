"""
Party construction for the crawler.
"""

from crawler.core.constants import Role
from crawler.core.content import STARTING_PARTY, get_member_template
from crawler.economy.upgrades import UpgradeLevels

from .gear import Gear, create_default_gear
from .party_member import PartyMember, create_skill
from .stats import derive_stats


def create_member(
    name: str,
    role: Role,
    dps_class: str | None = None,
    gear: Gear | None = None,
    upgrades: UpgradeLevels | None = None,
) -> PartyMember:
    """
    Creates a party member at full health from the content tables.

    Args:
        name (str): The member name.
        role (Role): The combat role.
        dps_class (str | None): The damage class, if any.
        gear (Gear | None): Starting gear, the default set if None.
        upgrades (UpgradeLevels | None): Upgrades applied to the derived stats.

    Returns:
        PartyMember: The new member.

    """
    template = get_member_template(role, dps_class)
    base = template["base_stats"]
    member = PartyMember(
        name=name,
        role=role,
        dps_class=dps_class,
        base_hp=base["hp"],
        base_attack=base["attack"],
        base_defense=base["defense"],
        gear=gear if gear is not None else create_default_gear(),
        skill=create_skill(dps_class or role.value),
        attack_speed=template["attack_speed"],
    )
    stats = derive_stats(member, upgrades)
    member.max_hp = stats.max_hp
    member.attack = stats.attack
    member.defense = stats.defense
    member.hp = stats.max_hp
    return member


def initialize_party(upgrades: UpgradeLevels | None = None) -> list[PartyMember]:
    """Creates the starting party: tank, healer, warrior, rogue and mage."""
    return [
        create_member(name, role, dps_class, upgrades=upgrades)
        for name, role, dps_class in STARTING_PARTY
    ]
