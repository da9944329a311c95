import random

import pytest

from battlemon.battle.combatant import Combatant
from battlemon.core.errors import ValidationError


def test_record_splits_stats_names_and_moves(make_creature):
    c = make_creature(name="Sparky", max_hp=40, max_mp=12, Luck=7, Color="red")
    assert c.name == "Sparky"
    assert c.names.species == "Sparky"
    assert c.hp == 40 and c.stats.max_hp == 40
    assert c.mp == 12
    assert c.moves == ("Strike", "Jab", "Mend", "Roar")
    # unknown columns are kept, numeric ones as stats
    assert c.stats.get("Luck") == 7
    assert c.names.extra["Color"] == "red"
    assert c.numeric_stats()["Luck"] == 7
    assert not c.fainted


def test_record_without_max_hp_is_rejected():
    with pytest.raises(ValidationError):
        Combatant.from_record({"Name": "Broken", "MaxMP": "5", "MoveSet": "Strike"})


def test_take_damage_subtracts_defense_and_faints(make_creature):
    c = make_creature(max_hp=20, def_=5)
    assert c.take_damage(12, 0) == 7
    assert c.hp == 13
    # damage below defense does nothing
    assert c.take_damage(3, 0) == 0
    assert c.hp == 13
    c.take_damage(100, 0)
    assert c.hp == 0
    assert c.fainted
    c.take_damage(100, 0)
    assert c.hp == 0 and c.fainted


def test_dodge_zeroes_damage(make_creature, dummy_rng):
    c = make_creature(max_hp=20, def_=0, agi=0, rng=dummy_rng(roll=0))
    assert c.take_damage(15, 0) == 0
    assert c.hp == 20


def test_dodge_rate_matches_agility_minus_accuracy():
    # Agi 30, accuracy 0 -> 30 - 0 + 20 = 50% dodge chance
    record = {"Name": "Blur", "MaxHP": "1000000", "MaxMP": "0", "Agi": "30", "Def": "0", "MoveSet": "Strike"}
    c = Combatant.from_record(record, rng=random.Random(1234))
    trials = 4000
    dodged = sum(1 for _ in range(trials) if c.take_damage(1, 0) == 0)
    assert 0.45 < dodged / trials < 0.55


def test_accuracy_above_dodge_never_misses():
    record = {"Name": "Slow", "MaxHP": "1000", "MaxMP": "0", "Agi": "0", "Def": "0", "MoveSet": "Strike"}
    c = Combatant.from_record(record, rng=random.Random(7))
    assert all(c.take_damage(1, 20) == 1 for _ in range(200))


def test_hp_and_mp_changes_are_capped(make_creature):
    c = make_creature(max_hp=50, max_mp=20)
    c.stats.hp = 45
    assert c.gain_hp(20) == 5
    assert c.hp == 50
    c.lose_mp(30)
    assert c.mp == 0
    assert c.gain_mp(8) == 8
    assert c.gain_mp(100) == 12
    assert c.mp == 20


def test_fainted_creature_is_not_healed_until_revitalized(make_creature):
    c = make_creature(max_hp=30, max_mp=10)
    c.lose_mp(10)
    c.kill_immediately()
    assert c.fainted and c.hp == 0
    assert c.gain_hp(10) == 0
    c.revitalize()
    assert not c.fainted
    assert c.hp == 30 and c.mp == 10


def test_snapshot_is_a_copy(make_creature):
    c = make_creature(max_hp=30)
    snap = c.snapshot()
    c.take_damage(20, 0)
    assert snap.hp == 30
    assert c.stat_snapshot().hp == c.hp


def test_save_round_trip_through_provider(provider):
    c = Combatant.from_record(provider.get_creature_data("Emberpup"))
    c.names.name = "Blaze"
    c.stats.hp = 10
    c.lose_mp(5)
    restored = Combatant.from_save(c.to_save(), provider)
    assert restored.name == "Blaze"
    assert restored.names.species == "Emberpup"
    assert restored.hp == 10
    assert restored.mp == c.mp
    assert restored.moves == c.moves
    assert restored.controlled


def test_clone_for_roster_is_fresh_and_controlled(make_creature, abilities):
    from battlemon.battle.policies import RandomPolicy
    wild = make_creature(name="Wildmon", policy=RandomPolicy(abilities))
    wild.take_damage(30, 0)
    clone = wild.clone_for_roster()
    assert clone is not wild
    assert clone.hp == clone.stats.max_hp
    assert clone.controlled and not wild.controlled
