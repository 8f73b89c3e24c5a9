"""
Combat message formatting for the event log.
"""

from typing import Any

from crawler.core.constants import Role

CRITICAL_SUFFIX = " 💥 CRITICAL!"


def _tactical_verb(role: Role, target: Any) -> str:
    if role == Role.TANK:
        return "focuses on dangerous" if target.attack >= 15 else "engages"
    if role == Role.HEALER:
        return "finishes off wounded" if target.hp <= target.max_hp * 0.3 else "targets"
    if role == Role.WARRIOR:
        return "strikes at"
    if role == Role.ROGUE:
        return "assassinates wounded" if target.hp <= target.max_hp * 0.3 else "strikes"
    if role == Role.MAGE:
        return (
            "unleashes magic at sturdy"
            if target.hp >= target.max_hp * 0.7
            else "casts spell at"
        )
    return "attacks"


def tactical_message(
    attacker: Any,
    target: Any,
    damage: int,
    is_critical: bool,
    skill_boost: float,
) -> str:
    """
    Describes a party member's attack.

    The verb depends on the attacker's role and the target's state before
    the hit. The skill name is shown only when a damage boost contributed.

    Args:
        attacker (Any): The attacking party member.
        target (Any): The enemy that was hit.
        damage (int): The damage dealt.
        is_critical (bool): Whether the hit was critical.
        skill_boost (float): The damage boost multiplier used.

    Returns:
        str: The log text.

    """
    action = _tactical_verb(Role(attacker.role), target)
    crit_text = CRITICAL_SUFFIX if is_critical else ""
    skill_text = f" ({attacker.skill.name})" if skill_boost > 1 and attacker.skill else ""
    return f"{attacker.name} {action} {target.name} for {damage} damage!{crit_text}{skill_text}"


def enemy_attack_message(enemy: Any, target: Any, damage: int, shield_wall: bool) -> str:
    suffix = " (Shield Wall)" if shield_wall else ""
    return f"🦹 {enemy.name} attacks {target.name} for {damage} damage{suffix}"


def absorbed_attack_message(enemy: Any, target: Any) -> str:
    return f"🦹 {enemy.name} attacks {target.name}, but Divine Protection absorbs the blow"


def divine_protection_message(healer: Any) -> str:
    return (
        f"🛡️ {healer.name} casts Divine Protection! "
        "Healer is now frozen in time until party revival."
    )


def heal_message(caster: str, target: str, amount: int, is_critical: bool) -> str:
    crit_text = CRITICAL_SUFFIX if is_critical else ""
    return f"✨ {caster} heals {target} for {amount} HP{crit_text}"


def shield_wall_message(caster: str) -> str:
    return f"🛡️ {caster} casts Shield Wall!"


def encounter_message(floor: int, group: int, enemies: list[Any]) -> str:
    if len(enemies) == 1:
        description = enemies[0].name
    else:
        description = f"{len(enemies)} enemies"
    return f"🏰 Floor {floor}, Group {group}: {description}!"


def kill_suffix(enemy: Any, gold: int) -> str:
    """Appended to the attack line of a killing blow."""
    gold_text = f" +{gold} gold" if gold > 0 else ""
    return f" - {enemy.name} defeated!{gold_text}"


def gear_found_message(unspent: int) -> str:
    return f"🎁 Gear found! ({unspent} waiting to be equipped)"


def group_cleared_message(group: int, total_groups: int) -> str:
    return f"✅ Group {group}/{total_groups} completed! Next: Group {group + 1}"


def floor_cleared_message(floor: int) -> str:
    return f"🏆 Floor {floor} completed! Advancing to Floor {floor + 1}"


SHIELD_WALL_EXPIRED = "🛡️ Shield Wall expires!"
MASS_RES_STARTED = "🕊️ Healer begins Mass Resurrection ritual... (10 seconds)"
MASS_RES_COMPLETED = "✨ Mass Resurrection complete! Party revived at Floor 1."
RESET_MESSAGES = {
    "wipe": "💀 Party wiped! Starting over...",
    "mass_res_failure": "💀 Mass Resurrection failed! Starting over...",
}


def gear_upgrade_message(member: Any, slot: Any, level: int) -> str:
    return f"⬆️ Gear upgraded! {member.name}'s {slot.value} is now level {level}"


def upgrade_purchase_message(upgrade_name: str, level: int, cost: int) -> str:
    return f"💪 Purchased {upgrade_name} (level {level}) for {cost} gold"
