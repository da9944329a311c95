import dataclasses

import pytest

from battlemon.battle.inventory import Inventory
from battlemon.battle.items import Item
from battlemon.battle.roster import Roster
from battlemon.core.errors import InvalidActionError
from battlemon.core.logging import logger


def _potion(provider):
    return Item.from_record(provider.get_item_data("Potion"))


def test_full_inventory_rejects_new_items(provider):
    bag = Inventory(capacity=2)
    assert bag.add_item(_potion(provider))
    assert bag.add_item(_potion(provider))
    assert bag.is_full()
    assert bag.add_item(Item.from_record(provider.get_item_data("Ether"))) is False
    assert len(bag) == 2
    assert bag.snapshot().items == ("Potion", "Potion")


def test_inventory_indexing(provider):
    bag = Inventory()
    bag.add_item(_potion(provider))
    bag.add_item(Item.from_record(provider.get_item_data("Ether")))
    assert bag.remove_item(0).name == "Potion"
    assert bag.get_item(0).name == "Ether"
    with pytest.raises(InvalidActionError):
        bag.get_item(1)
    with pytest.raises(InvalidActionError):
        bag.remove_item(-1)


def test_coins_never_go_negative():
    bag = Inventory(coins=50)
    bag.add_coins(-80)
    assert bag.coins == 0
    bag.add_coins(30)
    assert bag.snapshot().coins == 30


def test_inventory_save_round_trip(provider):
    bag = Inventory(capacity=4, coins=120)
    bag.add_item(_potion(provider))
    bag.add_item(Item.from_record(provider.get_item_data("GreatOrb")))
    restored = Inventory.from_save(bag.to_save(), provider)
    assert restored.snapshot() == bag.snapshot()


def test_inventory_snapshot_is_frozen(provider):
    snap = Inventory().snapshot()
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.coins = 10


def test_empty_roster_counts_as_all_fainted():
    assert Roster().all_fainted()
    assert Roster().first_alive_index() is None


def test_roster_capacity_and_queries(make_creature):
    roster = Roster(capacity=2)
    a, b = make_creature(name="Alpha"), make_creature(name="Beta")
    assert roster.add(a) and roster.add(b)
    assert not roster.add(make_creature(name="Gamma"))
    assert roster.index_of(b) == 1
    a.kill_immediately()
    assert roster.first_alive_index() == 1
    assert roster.first_fainted_index() == 0
    assert not roster.all_fainted()
    b.kill_immediately()
    assert roster.all_fainted()
    roster.revitalize_all()
    assert roster.first_fainted_index() is None


def test_roster_keeps_its_last_member(make_creature):
    roster = Roster([make_creature(name="Alpha"), make_creature(name="Beta")])
    assert not roster.remove(5)
    assert roster.remove(0)
    assert [m.name for m in roster] == ["Beta"]
    assert not roster.remove(0)
    assert len(roster) == 1


def test_roster_built_over_capacity_warns_about_dropped_members(make_creature, monkeypatch):
    warned = []
    monkeypatch.setattr(logger, "warn", lambda msg, **kw: warned.append((msg, kw)))
    members = [make_creature(name=f"Mon{i}") for i in range(3)]
    roster = Roster(members, capacity=2)
    assert [m.name for m in roster] == ["Mon0", "Mon1"]
    assert warned == [("RosterFull", {"rejected": "Mon2"})]
