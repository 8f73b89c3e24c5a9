"""
Tests for the skill resolver.
"""

import pytest

from crawler.character.party import initialize_party
from crawler.combat.skills import choose_heal_target, process_skills
from crawler.core.constants import SkillType


@pytest.fixture
def party():
    return initialize_party()


def set_ratio(member, ratio: float) -> None:
    member.hp = int(member.max_hp * ratio)


def test_nobody_injured_only_damage_boosts_fire(party, no_crit_rng):
    result = process_skills(party, 1000, no_crit_rng)
    assert [cast.skill_type for cast in result.casts] == [SkillType.DAMAGE_BOOST] * 3
    assert not result.shield_wall_raised
    tank, healer = party[0], party[1]
    assert tank.skill_cooldown_ms == 0
    assert healer.skill_cooldown_ms == 0


def test_damage_boost_lasts_one_pass(party, no_crit_rng):
    warrior = party[2]
    process_skills(party, 1000, no_crit_rng)
    assert warrior.skill_active
    assert warrior.skill_duration_ticks == 1
    assert warrior.skill_cooldown_ms == 6000

    process_skills(party, 1000, no_crit_rng)
    assert not warrior.skill_active
    assert warrior.skill_cooldown_ms == 5000


def test_cooldown_decays_by_elapsed_time(party, no_crit_rng):
    rogue = party[3]
    rogue.skill_cooldown_ms = 2500
    process_skills(party, 1000, no_crit_rng)
    assert rogue.skill_cooldown_ms == 1500
    process_skills(party, 2000, no_crit_rng)
    assert rogue.skill_cooldown_ms == 0
    assert not rogue.skill_active


def test_skill_fires_on_the_pass_after_cooldown_expires(party, no_crit_rng):
    mage = party[4]
    mage.skill_cooldown_ms = 1000
    process_skills(party, 1000, no_crit_rng)
    assert not mage.skill_active
    process_skills(party, 1000, no_crit_rng)
    assert mage.skill_active


def test_shield_wall_needs_someone_below_80_percent(party, no_crit_rng):
    tank = party[0]
    set_ratio(party[3], 0.85)
    assert not process_skills(party, 1000, no_crit_rng).shield_wall_raised
    set_ratio(party[3], 0.5)
    result = process_skills(party, 1000, no_crit_rng)
    assert result.shield_wall_raised
    assert tank.skill_cooldown_ms == 8000


def test_heal_prefers_critical_members():
    party = initialize_party()
    set_ratio(party[0], 0.5)
    set_ratio(party[2], 0.25)
    set_ratio(party[4], 0.1)
    assert choose_heal_target(party) is party[4]


def test_heal_picks_lowest_fraction_without_emergency():
    party = initialize_party()
    set_ratio(party[0], 0.9)
    set_ratio(party[3], 0.5)
    assert choose_heal_target(party) is party[3]


def test_heal_ignores_dead_members():
    party = initialize_party()
    party[2].hp = 0
    assert choose_heal_target(party) is None


def test_healing_light_restores_half_max_hp(party, no_crit_rng):
    tank = party[0]
    tank.hp = 50
    result = process_skills(party, 1000, no_crit_rng)
    heals = [cast for cast in result.casts if cast.skill_type == SkillType.HEAL]
    assert len(heals) == 1
    assert heals[0].target == "Tank"
    assert heals[0].amount == 65
    assert not heals[0].log_critical
    assert tank.hp == 115
    assert party[1].skill_cooldown_ms == 4000


def test_heal_on_nearly_dead_member_is_flagged(party, no_crit_rng):
    mage = party[4]
    mage.hp = 9
    result = process_skills(party, 1000, no_crit_rng)
    heal = next(cast for cast in result.casts if cast.skill_type == SkillType.HEAL)
    assert heal.target == "Mage"
    assert heal.log_critical
    assert not heal.is_critical


def test_heal_is_capped_at_max_hp(party, crit_rng):
    tank = party[0]
    tank.hp = 120
    process_skills(party, 1000, crit_rng)
    assert tank.hp == tank.max_hp


def test_dead_members_and_protected_healer_are_skipped(party, no_crit_rng):
    warrior, healer = party[2], party[1]
    warrior.hp = 0
    warrior.skill_cooldown_ms = 3000
    healer.hp = 1
    healer.is_protected = True
    result = process_skills(party, 1000, no_crit_rng)
    casters = {cast.caster for cast in result.casts}
    assert "Warrior" not in casters
    assert "Healer" not in casters
    assert warrior.skill_cooldown_ms == 3000
    assert healer.skill_cooldown_ms == 0
