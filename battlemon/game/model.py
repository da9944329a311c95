"""Top-level game state shared by the CLI and the battle engine."""
from __future__ import annotations
import random
from enum import Enum
from pathlib import Path
from typing import Optional

from battlemon.core.errors import ValidationError
from battlemon.core.logging import logger
from battlemon.battle.bus import NotificationBus, Channel, BattleState
from battlemon.battle.combatant import Combatant
from battlemon.battle.engine import BattleEngine, BattleThread
from battlemon.battle.policies import make_policy
from battlemon.data.provider import DataProvider
from battlemon.system import save as save_store
from .player import Player

class GameChannel(str, Enum):
    GAME_STATE = "gameState"
    ROSTER = "roster"
    ITEMS = "items"

class GameState(str, Enum):
    SELECT_STARTER = "SelectStarter"
    GAME_START = "GameStart"
    MAIN_MENU = "MainMenu"

class GameModel:
    def __init__(self, provider: DataProvider, engine: BattleEngine, *,
                 save_dir: Optional[str] = None, rng: Optional[random.Random] = None,
                 bus: Optional[NotificationBus] = None):
        self.provider = provider
        self.engine = engine
        self.save_dir = save_dir
        self.rng = rng or random.Random()
        self.bus = bus or NotificationBus()
        self.player: Optional[Player] = None
        engine.subscribe(Channel.BATTLE_STATE, self._on_battle_state)

    def subscribe(self, channel: GameChannel, listener):
        return self.bus.subscribe(channel, listener)

    def _require_player(self) -> Player:
        if self.player is None:
            raise ValidationError("no game in progress")
        return self.player

    def _notify_state(self, state: GameState):
        logger.debug("GameStateChanged", state=state.value)
        self.bus.publish(GameChannel.GAME_STATE, state)

    def _notify_roster(self):
        if self.player is not None:
            self.bus.publish(GameChannel.ROSTER, self.player.roster.snapshot())

    def _notify_items(self):
        if self.player is not None:
            self.bus.publish(GameChannel.ITEMS, self.player.inventory.snapshot())

    def _on_battle_state(self, state: BattleState):
        if state is not BattleState.START:
            self._notify_roster()
            self._notify_items()

    # ------------------------------------------------------------------
    # Game flow
    # ------------------------------------------------------------------
    def start_new_game(self):
        self.player = Player()
        self._notify_state(GameState.SELECT_STARTER)
        self._notify_items()

    def continue_game(self, name: str) -> bool:
        player = save_store.load_player(name, self.provider, self.save_dir)
        if player is None:
            self._notify_state(GameState.MAIN_MENU)
            return False
        self.player = player
        self._notify_state(GameState.GAME_START)
        self._notify_roster()
        self._notify_items()
        return True

    def add_starter_data(self, species: str, perk: str):
        self._require_player().add_starter_data(species, perk, self.provider)
        self._notify_state(GameState.GAME_START)
        self._notify_roster()
        self._notify_items()

    def save_game(self, name: str) -> Path:
        return save_store.save_player(self._require_player(), name, self.save_dir)

    def return_to_main_menu(self):
        self._notify_state(GameState.MAIN_MENU)

    def revitalize_creatures(self):
        self._require_player().roster.revitalize_all()
        self._notify_roster()

    def remove_creature(self, index: int) -> bool:
        removed = self._require_player().roster.remove(index)
        if removed:
            self._notify_roster()
        return removed

    # ------------------------------------------------------------------
    # Battles
    # ------------------------------------------------------------------
    def wild_opponent(self, kind: str = "random") -> Combatant:
        """Random creature from the table, driven by the named autonomous policy."""
        policy = make_policy(kind, self.engine.abilities, self.rng)
        species = self.rng.choice(self.provider.all_creature_names())
        return Combatant.from_record(self.provider.get_creature_data(species), policy, rng=self.rng)

    def can_battle(self) -> bool:
        player = self.player
        return player is not None and not player.roster.all_fainted()

    def start_creature_battle(self, kind: str = "random") -> Optional[BattleThread]:
        """Start a wild battle on a background thread; None if nobody can fight."""
        if not self.can_battle():
            logger.warn("BattleRefused", reason="all creatures fainted")
            return None
        return self.engine.start_battle(self._require_player(), self.wild_opponent(kind))

    async def run_creature_battle(self, kind: str = "random") -> Optional[BattleState]:
        if not self.can_battle():
            logger.warn("BattleRefused", reason="all creatures fainted")
            return None
        return await self.engine.run_battle(self._require_player(), self.wild_opponent(kind))

__all__ = ["GameModel", "GameChannel", "GameState"]
