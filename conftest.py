# Project root on sys.path so `battlemon` imports without installing
import sys, pathlib
ROOT = pathlib.Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import asyncio

import pytest

from battlemon.battle.abilities import Ability, AbilityBook, Category, Target
from battlemon.battle.bus import Channel, NotificationBus
from battlemon.battle.combatant import Combatant
from battlemon.battle.engine import BattleEngine
from battlemon.battle.policies import RandomPolicy
from battlemon.data.phrases import Phrasebook
from battlemon.data.provider import DataProvider
from battlemon.game.player import Player


class DummyRng:
    """Deterministic stand-in for random.Random.

    ``roll`` answers randrange (99 never dodges, 0 always does), ``uniform``
    answers random(), and choice() picks the first element.
    """
    def __init__(self, roll=99, uniform=0.0):
        self.roll = roll
        self.uniform = uniform

    def randrange(self, n):
        return min(self.roll, n - 1)

    def random(self):
        return self.uniform

    def choice(self, seq):
        return seq[0]


class Recorder:
    """Collects every payload published on every battle channel."""
    def __init__(self, bus):
        self.events = []
        for channel in Channel:
            bus.subscribe(channel, lambda payload, ch=channel: self.events.append((ch, payload)))

    def on(self, channel):
        return [p for ch, p in self.events if ch is channel]


TEST_MOVES = {
    "Strike": Ability("Strike", 10, 0, 0, Target.ENEMY, Category.DAMAGE),
    "Jab": Ability("Jab", 1, 0, 100, Target.ENEMY, Category.DAMAGE),
    "Mend": Ability("Mend", 10, 5, 0, Target.SELF, Category.HEAL),
    "Roar": Ability("Roar", 3, 2, 0, Target.ENEMY, Category.STATUS, "Atk"),
}


@pytest.fixture(scope="session")
def provider():
    return DataProvider.from_tables()


@pytest.fixture(scope="session")
def phrases():
    return Phrasebook.load("en")


@pytest.fixture
def abilities():
    return AbilityBook(TEST_MOVES)


@pytest.fixture
def make_creature():
    def _make(name="Testmon", max_hp=50, max_mp=20, atk=10, def_=5, agi=10, coins=10,
              moves="Strike;Jab;Mend;Roar", loot="Potion", policy=None, rng=None, **extra):
        record = {
            "Name": name, "MaxHP": str(max_hp), "MaxMP": str(max_mp), "Atk": str(atk),
            "Def": str(def_), "Agi": str(agi), "Coins": str(coins), "MoveSet": moves,
        }
        if loot:
            record["Loot"] = loot
        record.update({k: str(v) for k, v in extra.items()})
        return Combatant.from_record(record, policy, rng or DummyRng())
    return _make


@pytest.fixture
def engine(abilities, provider, phrases):
    return BattleEngine(abilities, provider, phrases, NotificationBus(), pause_seconds=0, rng=DummyRng())


@pytest.fixture
def recorder(engine):
    return Recorder(engine.bus)


@pytest.fixture
def wild(make_creature, abilities):
    """Opponent factory driven by RandomPolicy (always the first affordable move)."""
    def _wild(**kw):
        kw.setdefault("name", "Wildmon")
        kw.setdefault("moves", "Strike")
        return make_creature(policy=RandomPolicy(abilities, DummyRng()), **kw)
    return _wild


@pytest.fixture
def player_with(make_creature):
    def _player(*members):
        player = Player()
        for m in members or (make_creature(),):
            player.roster.add(m)
        return player
    return _player


async def _drive(engine, player, opponent, inputs):
    task = asyncio.ensure_future(engine.run_battle(player, opponent))
    for action in inputs:
        for _ in range(10000):
            if engine.awaiting_input() or task.done():
                break
            await asyncio.sleep(0)
        if task.done():
            break
        assert engine.supply_action(action)
    return await asyncio.wait_for(task, 5)


@pytest.fixture
def drive():
    """Run a battle to completion, feeding ``inputs`` to the player's side in order."""
    def _run(engine, player, opponent, inputs):
        return asyncio.run(_drive(engine, player, opponent, list(inputs)))
    return _run


@pytest.fixture
def dummy_rng():
    return DummyRng
