import pytest

from battlemon.battle.abilities import Ability, AbilityBook, Category, Target, LACKED_MP
from battlemon.core.errors import UnknownEntryError, ValidationError


def test_damage_move_adds_attack_and_respects_defense(abilities, make_creature):
    attacker = make_creature(atk=10)
    defender = make_creature(name="Target", max_hp=50, def_=5)
    # Strike: power 10 + atk 10 = 20, minus def 5
    assert abilities.execute_move("Strike", defender, attacker) == 15
    assert defender.hp == 35


def test_insufficient_mp_returns_lacked_mp_and_changes_nothing(abilities, make_creature):
    attacker = make_creature(max_mp=20)
    attacker.lose_mp(17)
    attacker.stats.hp = 20
    defender = make_creature(name="Target")
    assert abilities.execute_move("Mend", defender, attacker) == LACKED_MP
    assert attacker.mp == 3
    assert attacker.hp == 20
    assert defender.hp == defender.stats.max_hp


def test_heal_returns_negated_amount_and_spends_mp(abilities, make_creature):
    attacker = make_creature(max_hp=50, max_mp=20, atk=10)
    attacker.stats.hp = 20
    result = abilities.execute_move("Mend", make_creature(name="Target"), attacker)
    # 10 + 10 // 2
    assert result == -15
    assert attacker.hp == 35
    assert attacker.mp == 15


def test_heal_at_full_hp_reports_no_effect(abilities, make_creature):
    attacker = make_creature(max_hp=50)
    assert abilities.execute_move("Mend", make_creature(name="Target"), attacker) == 0
    attacker.stats.hp = 49
    # a single missing HP would collide with LACKED_MP
    assert abilities.execute_move("Mend", make_creature(name="Target"), attacker) == 0


def test_status_move_lowers_enemy_stat_floored_at_zero(abilities, make_creature):
    attacker = make_creature()
    defender = make_creature(name="Target", atk=5)
    assert abilities.execute_move("Roar", defender, attacker) == 0
    assert defender.stats.atk == 2
    abilities.execute_move("Roar", defender, attacker)
    assert defender.stats.atk == 0
    assert attacker.mp == 16


def test_unknown_move_raises(abilities, make_creature):
    with pytest.raises(UnknownEntryError) as info:
        abilities.execute_move("Nope", make_creature(), make_creature())
    assert info.value.kind == "Move"
    assert "Nope" not in abilities


def test_book_built_from_tables(provider):
    book = AbilityBook.from_provider(provider)
    ember = book.get("Ember")
    assert ember.power == 16 and ember.cost == 6
    assert ember.category is Category.DAMAGE
    assert book.get("RockToss").accuracy == -5
    assert book.get("Harden").target is Target.SELF
    assert book.get("Growl").stat == "Atk"


def test_malformed_move_record_is_rejected():
    with pytest.raises(ValidationError):
        Ability.from_record({"Name": "Bad", "Power": "5", "Cost": "0", "Accuracy": "0", "Category": "zap"})
    with pytest.raises(ValidationError):
        Ability.from_record({"Name": "Bad"})


def test_expected_damage_accounts_for_defense_and_dodge():
    strike = Ability("Strike", 10, 0, 0, Target.ENEMY, Category.DAMAGE)
    # 20 raw, no defense, 20% dodge
    assert strike.expected_damage(10, {"Def": 0, "Agi": 0}) == pytest.approx(16.0)
    assert strike.expected_damage(10, {"Def": 25, "Agi": 0}) == 0
    heal = Ability("Mend", 10, 5, 0, Target.SELF, Category.HEAL)
    assert heal.expected_damage(10, {}) == 0
