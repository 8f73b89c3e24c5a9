"""
Skill resolver for the crawler.

Runs once per coarse game-loop step: decays cooldowns, expires active
skills and auto-casts skills that are ready.
"""

import math
import random
from typing import Any, Sequence

from catchery import log_debug
from pydantic import BaseModel, Field

from crawler.core.constants import SkillType

from .damage import critical_hit

# Members below this fraction of health are healed first.
EMERGENCY_HEAL_THRESHOLD = 0.3
# A heal on a member at or below this fraction is reported as critical.
CRITICAL_HEAL_THRESHOLD = 0.2
# Shield Wall goes up once someone drops below this fraction.
SHIELD_WALL_THRESHOLD = 0.8


class SkillCast(BaseModel):
    """A skill that fired during a skill pass."""

    caster: str = Field(description="Name of the member that cast the skill.")
    skill_name: str
    skill_type: SkillType
    target: str | None = Field(default=None, description="Healed member, if any.")
    amount: int = Field(default=0, description="Hit points restored.")
    is_critical: bool = Field(default=False, description="Critical heal roll.")
    log_critical: bool = Field(
        default=False,
        description="Whether the log entry should be highlighted.",
    )


class SkillPass(BaseModel):
    """Result of one skill pass over the party."""

    casts: list[SkillCast] = Field(default_factory=list)
    shield_wall_raised: bool = False


def choose_heal_target(party: Sequence[Any]) -> Any | None:
    """
    Picks who Healing Light should restore.

    Living injured members below 30% are considered first; if there are
    none, every living injured member is. The lowest health fraction wins.

    Args:
        party (Sequence[Any]): The party.

    Returns:
        Any | None: The member to heal, or None if nobody is injured.

    """
    injured = [m for m in party if m.is_injured()]
    critical = [m for m in injured if m.hp_ratio() < EMERGENCY_HEAL_THRESHOLD]
    candidates = critical or injured
    if not candidates:
        return None
    target = candidates[0]
    for member in candidates[1:]:
        if member.hp_ratio() < target.hp_ratio():
            target = member
    return target


def _party_needs_protection(party: Sequence[Any]) -> bool:
    return any(m.hp > 0 and m.hp_ratio() < SHIELD_WALL_THRESHOLD for m in party)


def _cast_heal(
    caster: Any, party: Sequence[Any], rng: random.Random | None
) -> SkillCast | None:
    target = choose_heal_target(party)
    if target is None:
        return None
    ratio_before = target.hp_ratio()
    base_heal = math.floor(target.max_hp * caster.skill.effect.value)
    roll = critical_hit(base_heal, rng=rng)
    target.heal(roll.damage)
    return SkillCast(
        caster=caster.name,
        skill_name=caster.skill.name,
        skill_type=SkillType.HEAL,
        target=target.name,
        amount=roll.damage,
        is_critical=roll.is_critical,
        log_critical=roll.is_critical or ratio_before <= CRITICAL_HEAL_THRESHOLD,
    )


def process_skills(
    party: Sequence[Any],
    elapsed_ms: int,
    rng: random.Random | None = None,
) -> SkillPass:
    """
    Runs one skill pass over the party, mutating members in place.

    Dead members and protected healers are skipped entirely. A member casts
    only if, when the pass reached it, it was off cooldown and had no active
    skill. A damage boost therefore lasts until the member's next attack or
    the next pass, whichever comes first.

    Args:
        party (Sequence[Any]): The party, in order.
        elapsed_ms (int): Time since the previous pass.
        rng (random.Random | None): Random source for critical heals.

    Returns:
        SkillPass: The skills that fired.

    """
    result = SkillPass()
    for member in party:
        if member.hp <= 0 or member.is_protected_healer():
            continue

        was_ready = member.skill_cooldown_ms <= 0
        was_active = member.skill_active

        if member.skill_cooldown_ms > 0:
            member.skill_cooldown_ms = max(0, member.skill_cooldown_ms - elapsed_ms)

        if member.skill_active and member.skill_duration_ticks > 0:
            member.skill_duration_ticks -= 1
            member.skill_active = member.skill_duration_ticks > 0

        skill = member.skill
        if skill is None or not was_ready or was_active:
            continue

        fired = False
        if skill.effect.type == SkillType.HEAL:
            cast = _cast_heal(member, party, rng)
            if cast is not None:
                result.casts.append(cast)
                fired = True
        elif skill.effect.type == SkillType.DAMAGE_REDUCTION:
            if _party_needs_protection(party):
                result.casts.append(
                    SkillCast(
                        caster=member.name,
                        skill_name=skill.name,
                        skill_type=SkillType.DAMAGE_REDUCTION,
                    )
                )
                result.shield_wall_raised = True
                fired = True
        elif skill.effect.type == SkillType.DAMAGE_BOOST:
            member.skill_active = True
            member.skill_duration_ticks = 1
            result.casts.append(
                SkillCast(
                    caster=member.name,
                    skill_name=skill.name,
                    skill_type=SkillType.DAMAGE_BOOST,
                )
            )
            fired = True

        if fired:
            member.skill_cooldown_ms = skill.cooldown_ms
            log_debug(f"{member.name} used {skill.name}")
    return result
