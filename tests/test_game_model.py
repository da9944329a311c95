import asyncio

import pytest

from battlemon.battle.abilities import AbilityBook
from battlemon.battle.bus import NotificationBus
from battlemon.battle.engine import BattleEngine
from battlemon.core.errors import ValidationError
from battlemon.game.model import GameModel, GameChannel, GameState


@pytest.fixture
def model(provider, phrases, dummy_rng, tmp_path):
    engine = BattleEngine(AbilityBook.from_provider(provider), provider, phrases,
                          NotificationBus(), pause_seconds=0, rng=dummy_rng())
    return GameModel(provider, engine, save_dir=str(tmp_path), rng=dummy_rng())


@pytest.fixture
def published(model):
    seen = []
    for channel in GameChannel:
        model.subscribe(channel, lambda payload, ch=channel: seen.append((ch, payload)))
    return seen


def test_new_game_flow(model, published):
    model.start_new_game()
    model.add_starter_data("Voltmouse", "swimmer")
    states = [p for ch, p in published if ch is GameChannel.GAME_STATE]
    assert states == [GameState.SELECT_STARTER, GameState.GAME_START]
    rosters = [p for ch, p in published if ch is GameChannel.ROSTER]
    assert rosters[-1][0].name == "Voltmouse"


def test_actions_need_a_game(model):
    with pytest.raises(ValidationError):
        model.save_game("slot")


def test_save_and_continue(model, published):
    model.start_new_game()
    model.add_starter_data("Pebblor", "rich")
    model.save_game("mine")
    model.player = None
    assert model.continue_game("mine")
    assert model.player.inventory.coins == 1000
    assert not model.continue_game("absent")
    assert published[-1] == (GameChannel.GAME_STATE, GameState.MAIN_MENU)


def test_revitalize_and_remove(model):
    model.start_new_game()
    model.add_starter_data("Emberpup", "climber")
    model.player.roster[0].kill_immediately()
    model.revitalize_creatures()
    assert not model.player.roster[0].fainted
    assert not model.remove_creature(0)


def test_wild_opponent_uses_requested_policy(model):
    foe = model.wild_opponent("attrition")
    assert foe.name == model.provider.all_creature_names()[0]
    assert foe.policy.kind == "attrition"
    with pytest.raises(ValidationError):
        model.wild_opponent("cowardly")


def test_battle_refused_when_everyone_fainted(model):
    model.start_new_game()
    model.add_starter_data("Gustling", "climber")
    model.player.roster[0].kill_immediately()
    assert model.start_creature_battle() is None
    assert asyncio.run(model.run_creature_battle()) is None


def test_battle_conclusion_refreshes_roster_and_items(model, published):
    model.start_new_game()
    model.add_starter_data("Mossbat", "climber")
    before = len(published)

    async def scenario():
        task = asyncio.ensure_future(model.run_creature_battle("reckless"))
        while not model.engine.awaiting_input():
            await asyncio.sleep(0)
        model.engine.select_run()
        return await task

    asyncio.run(scenario())
    refreshed = [ch for ch, _ in published[before:]]
    assert refreshed == [GameChannel.ROSTER, GameChannel.ITEMS]
