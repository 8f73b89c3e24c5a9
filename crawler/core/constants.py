"""
Constants and enumerations for the crawler.

Defines global engine constants and the enumerations for roles, skill types,
log categories, gear slots and upgrade types used throughout the engine.
"""

from enum import Enum

# Scheduler resolution in milliseconds. Every cadence is derived from it.
TICK_MS = 100

# Default length of one coarse game-loop step in milliseconds.
DEFAULT_GAME_SPEED_MS = 1000

# Timers fire when they reach this value.
ATTACK_TIMER_MAX = 100.0

# Slowest attack speed a member can have; timers must always move forward.
MIN_ATTACK_SPEED = 0.1

# Mass resurrection ritual length in milliseconds.
MASS_RESURRECTION_MS = 10000

# Shield Wall lasts for this many enemy volleys.
SHIELD_WALL_TURNS = 3

# Maximum number of entries kept in the event log.
MAX_LOG_ENTRIES = 3000

# Maximum number of runs kept in the run history.
MAX_RUN_HISTORY = 10

# Number of enemy groups on every floor.
DEFAULT_GROUPS_PER_FLOOR = 5

# Delay between a cleared group and the next encounter.
DEFAULT_ENCOUNTER_DELAY_MS = 500

# Critical hit defaults.
DEFAULT_CRIT_CHANCE = 0.10
DEFAULT_CRIT_MULTIPLIER = 2.0


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().replace("_", " ").capitalize()


class Role(NiceEnum):
    """Defines the combat role of a party member."""

    TANK = "tank"
    HEALER = "healer"
    WARRIOR = "warrior"
    ROGUE = "rogue"
    MAGE = "mage"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "Role":
        # Roles coming from older saves or hand-made parties are never rejected.
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return cls.UNKNOWN

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this role."""
        return {
            Role.TANK: "🛡️",
            Role.HEALER: "❤️",
            Role.WARRIOR: "⚔️",
            Role.ROGUE: "🗡️",
            Role.MAGE: "🔥",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this role."""
        return {
            Role.TANK: "bold blue",
            Role.HEALER: "bold green",
            Role.WARRIOR: "bold red",
            Role.ROGUE: "bold magenta",
            Role.MAGE: "bold cyan",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies role color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class SkillType(NiceEnum):
    """Defines the kind of effect a skill produces."""

    HEAL = "heal"
    DAMAGE_REDUCTION = "damage_reduction"
    DAMAGE_BOOST = "damage_boost"


class LogCategory(NiceEnum):
    """Defines the categories of event log entries."""

    COMBAT = "combat"
    PROGRESSION = "progression"
    REWARDS = "rewards"
    STATUS = "status"
    SKILLS = "skills"
    SPECIAL = "special"

    @property
    def color(self) -> str:
        """Returns the color string associated with this category."""
        return {
            LogCategory.COMBAT: "white",
            LogCategory.PROGRESSION: "bold yellow",
            LogCategory.REWARDS: "bold green",
            LogCategory.STATUS: "bold red",
            LogCategory.SKILLS: "bold cyan",
            LogCategory.SPECIAL: "bold magenta",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies category color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class GearSlot(NiceEnum):
    """Defines the fixed equipment slots of a party member."""

    WEAPON = "weapon"
    HELM = "helm"
    CHEST = "chest"
    RING1 = "ring1"
    RING2 = "ring2"
    AMULET = "amulet"
    GLOVES = "gloves"
    BRACERS = "bracers"
    BOOTS = "boots"
    PANTS = "pants"


class UpgradeType(NiceEnum):
    """Defines the upgrades sold by the shop."""

    ATTACK_BONUS = "attack_bonus"
    DEFENSE_BONUS = "defense_bonus"
    HEALTH_BONUS = "health_bonus"
    GOLD_MULTIPLIER = "gold_multiplier"
    GEAR_DROP_BONUS = "gear_drop_bonus"


class ResetReason(NiceEnum):
    """Defines why the party was sent back to the first floor."""

    WIPE = "wipe"
    # Reserved: mass resurrection cannot be interrupted once started.
    MASS_RES_FAILURE = "mass_res_failure"
