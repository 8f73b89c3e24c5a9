"""
Content tables for the crawler.

Holds the static game data: skills, damage classes, starting party, default
gear, enemy tiers and the upgrade shop. Lookups go through the helper
functions below so that missing keys fall back to sane defaults.
"""

from typing import Any

from catchery import log_warning

from .constants import GearSlot, Role, SkillType, UpgradeType

SKILLS: dict[str, dict[str, Any]] = {
    "tank": {
        "name": "Shield Wall",
        "description": "Reduces incoming damage to all party members by 50% for 3 turns",
        "cooldown_ms": 8000,
        "effect": {"type": SkillType.DAMAGE_REDUCTION, "value": 0.5, "duration": 3},
    },
    "healer": {
        "name": "Healing Light",
        "description": "Heals the most injured party member for 50% of their max HP",
        "cooldown_ms": 4000,
        "effect": {"type": SkillType.HEAL, "value": 0.5},
    },
    "warrior": {
        "name": "Blade Storm",
        "description": "Unleashes a flurry of attacks dealing 180% weapon damage",
        "cooldown_ms": 6000,
        "effect": {"type": SkillType.DAMAGE_BOOST, "value": 1.8},
    },
    "rogue": {
        "name": "Shadow Strike",
        "description": "Quick assassination attempt dealing 150% weapon damage",
        "cooldown_ms": 4000,
        "effect": {"type": SkillType.DAMAGE_BOOST, "value": 1.5},
    },
    "mage": {
        "name": "Arcane Blast",
        "description": "Devastating spell dealing 250% weapon damage",
        "cooldown_ms": 8000,
        "effect": {"type": SkillType.DAMAGE_BOOST, "value": 2.5},
    },
}

DPS_CLASSES: dict[str, dict[str, Any]] = {
    "warrior": {
        "name": "Warrior",
        "description": "Heavy melee fighter with high damage and moderate speed",
        "base_stats": {"hp": 75, "attack": 35, "defense": 12},
        "attack_speed": 1.0,
    },
    "rogue": {
        "name": "Rogue",
        "description": "Fast assassin with quick strikes and lower damage",
        "base_stats": {"hp": 65, "attack": 25, "defense": 8},
        "attack_speed": 1.4,
    },
    "mage": {
        "name": "Mage",
        "description": "Magical damage dealer with slow but powerful spells",
        "base_stats": {"hp": 60, "attack": 40, "defense": 6},
        "attack_speed": 0.7,
    },
}

# Support roles that are not damage classes.
SUPPORT_MEMBERS: dict[str, dict[str, Any]] = {
    "tank": {"base_stats": {"hp": 100, "attack": 8, "defense": 25}, "attack_speed": 1.0},
    "healer": {"base_stats": {"hp": 80, "attack": 5, "defense": 15}, "attack_speed": 1.2},
}

# Order of the starting party.
STARTING_PARTY: list[tuple[str, Role, str | None]] = [
    ("Tank", Role.TANK, None),
    ("Healer", Role.HEALER, None),
    ("Warrior", Role.WARRIOR, "warrior"),
    ("Rogue", Role.ROGUE, "rogue"),
    ("Mage", Role.MAGE, "mage"),
]

DEFAULT_GEAR: dict[GearSlot, dict[str, Any]] = {
    GearSlot.WEAPON: {"name": "Basic Weapon", "attack": 4, "defense": 0, "hp": 0},
    GearSlot.HELM: {"name": "Basic Helm", "attack": 0, "defense": 2, "hp": 5},
    GearSlot.CHEST: {"name": "Basic Chestplate", "attack": 0, "defense": 3, "hp": 8},
    GearSlot.RING1: {"name": "Basic Ring", "attack": 1, "defense": 1, "hp": 2},
    GearSlot.RING2: {"name": "Basic Ring", "attack": 1, "defense": 1, "hp": 2},
    GearSlot.AMULET: {"name": "Basic Amulet", "attack": 2, "defense": 1, "hp": 3},
    GearSlot.GLOVES: {"name": "Basic Gloves", "attack": 1, "defense": 1, "hp": 2},
    GearSlot.BRACERS: {"name": "Basic Bracers", "attack": 1, "defense": 2, "hp": 1},
    GearSlot.BOOTS: {"name": "Basic Boots", "attack": 0, "defense": 2, "hp": 3},
    GearSlot.PANTS: {"name": "Basic Pants", "attack": 0, "defense": 2, "hp": 4},
}

# Tiers unlock at the given floor; the highest unlocked tier is used.
ENEMY_TIERS: list[dict[str, Any]] = [
    {"min_floor": 1, "name": "Goblin", "multiplier": 1.0, "attack_speed": 1.2},
    {"min_floor": 5, "name": "Orc", "multiplier": 1.2, "attack_speed": 1.0},
    {"min_floor": 10, "name": "Troll", "multiplier": 1.5, "attack_speed": 0.8},
    {"min_floor": 20, "name": "Dragon", "multiplier": 2.0, "attack_speed": 0.6},
]

BOSS_FLOOR_INTERVAL = 5
BOSS_HP_MULTIPLIER = 1.3
BOSS_DEFENSE_MULTIPLIER = 1.3
BOSS_ATTACK_MULTIPLIER = 1.2

UPGRADE_SHOP: dict[UpgradeType, dict[str, Any]] = {
    UpgradeType.ATTACK_BONUS: {
        "name": "Attack Training",
        "description": "+1 Attack for all party members",
        "base_cost": 50,
        "cost_multiplier": 1.5,
    },
    UpgradeType.DEFENSE_BONUS: {
        "name": "Defense Training",
        "description": "+1 Defense for all party members",
        "base_cost": 50,
        "cost_multiplier": 1.5,
    },
    UpgradeType.HEALTH_BONUS: {
        "name": "Health Training",
        "description": "+5 Max HP for all party members",
        "base_cost": 40,
        "cost_multiplier": 1.4,
    },
    UpgradeType.GOLD_MULTIPLIER: {
        "name": "Treasure Hunter",
        "description": "+10% gold earned from combat",
        "base_cost": 100,
        "cost_multiplier": 2.0,
    },
    UpgradeType.GEAR_DROP_BONUS: {
        "name": "Lucky Find",
        "description": "+5% gear drop chance",
        "base_cost": 150,
        "cost_multiplier": 2.5,
    },
}


def get_skill_data(key: str | None) -> dict[str, Any]:
    """
    Returns the skill table entry for a dps class or role key.

    Args:
        key (str | None): The dps class or role name.

    Returns:
        dict[str, Any]: The skill data, the warrior skill if the key is unknown.

    """
    if key in SKILLS:
        return SKILLS[key]
    log_warning(
        f"Unknown skill key '{key}', falling back to warrior skill",
        {"key": key, "context": "skill_lookup"},
    )
    return SKILLS["warrior"]


def get_member_template(role: Role, dps_class: str | None) -> dict[str, Any]:
    """
    Returns the base stats and attack speed for a role or dps class.

    Args:
        role (Role): The member role.
        dps_class (str | None): The damage class, if any.

    Returns:
        dict[str, Any]: A dictionary with `base_stats` and `attack_speed`.

    """
    if dps_class and dps_class in DPS_CLASSES:
        return DPS_CLASSES[dps_class]
    if role.value in DPS_CLASSES:
        return DPS_CLASSES[role.value]
    if role.value in SUPPORT_MEMBERS:
        return SUPPORT_MEMBERS[role.value]
    return DPS_CLASSES["warrior"]


def get_enemy_tier(floor: int) -> dict[str, Any]:
    """
    Returns the highest enemy tier unlocked at the given floor.

    Args:
        floor (int): The current floor.

    Returns:
        dict[str, Any]: The tier entry.

    """
    tier = ENEMY_TIERS[0]
    for candidate in ENEMY_TIERS:
        if floor >= candidate["min_floor"]:
            tier = candidate
    return tier
