"""Turn-based battle loop.

The engine owns one ``BattleSession`` at a time. It drives both sides'
decision policies, resolves their actions and narrates every step on the
``NotificationBus``. Human input arrives through ``select_*`` from any
thread; everything else runs on the battle's event loop.
"""
from __future__ import annotations
import asyncio
import random
import threading
from typing import Callable, Optional, TYPE_CHECKING

from battlemon.core.errors import BattleInProgressError, InvalidActionError, ValidationError
from battlemon.core.logging import logger
from .abilities import AbilityBook, Ability, Category, Target, LACKED_MP
from .actions import Action, Attack, Flee, Switch, UseItem
from .bus import NotificationBus, Channel, Side, BattleState, StatUpdate, SpriteUpdate
from .combatant import Combatant
from .items import Item
from .policies import ControlledPolicy
from .session import BattleSession

if TYPE_CHECKING:
    from battlemon.data.provider import DataProvider
    from battlemon.data.phrases import Phrasebook
    from battlemon.game.player import Player

DEFAULT_PAUSE = 1.0

class Pacer:
    """Paces narration. ``skip`` ends the current pause early."""

    def __init__(self, seconds: float = DEFAULT_PAUSE):
        self.seconds = seconds
        self._skip: Optional[asyncio.Event] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    async def pause(self):
        if self.seconds <= 0:
            await asyncio.sleep(0)
            return
        self._loop = asyncio.get_running_loop()
        self._skip = asyncio.Event()
        try:
            await asyncio.wait_for(self._skip.wait(), self.seconds)
            logger.debug("PauseSkipped")
        except asyncio.TimeoutError:
            pass
        finally:
            self._skip = None

    def skip(self) -> bool:
        event, loop = self._skip, self._loop
        if event is None or loop is None:
            return False
        loop.call_soon_threadsafe(event.set)
        return True

class BattleThread(threading.Thread):
    """Runs one battle on its own event loop for synchronous callers."""

    def __init__(self, engine: "BattleEngine", player: "Player", opponent: Combatant):
        super().__init__(name="battle-loop", daemon=True)
        self.engine = engine
        self.player = player
        self.opponent = opponent
        self.outcome: Optional[BattleState] = None
        self.error: Optional[BaseException] = None

    def run(self):
        try:
            self.outcome = asyncio.run(self.engine.run_battle(self.player, self.opponent))
        except Exception as e:
            logger.error("BattleAborted", error=repr(e))
            self.error = e

    def result(self, timeout: Optional[float] = None) -> Optional[BattleState]:
        """Wait for the battle and return its outcome, re-raising a fatal error."""
        self.join(timeout)
        if self.error is not None:
            raise self.error
        return self.outcome

class BattleEngine:
    def __init__(self, abilities: AbilityBook, provider: "DataProvider", phrases: "Phrasebook",
                 bus: Optional[NotificationBus] = None, *, pause_seconds: float = DEFAULT_PAUSE,
                 rng: Optional[random.Random] = None):
        self.abilities = abilities
        self.provider = provider
        self.phrases = phrases
        self.bus = bus or NotificationBus()
        self.pacer = Pacer(pause_seconds)
        self.rng = rng or random.Random()
        self.session: Optional[BattleSession] = None
        self._busy = threading.Lock()
        # called on the battle thread once a controlled combatant is ready for input
        self.on_input_request: Optional[Callable[[Combatant], None]] = None

    def subscribe(self, channel: Channel, listener):
        return self.bus.subscribe(channel, listener)

    @property
    def in_battle(self) -> bool:
        return self._busy.locked()

    # ------------------------------------------------------------------
    # Input entry points (any thread)
    # ------------------------------------------------------------------
    def _controlled_policy(self) -> Optional[ControlledPolicy]:
        session = self.session
        if session is None:
            return None
        policy = session.player.policy
        return policy if isinstance(policy, ControlledPolicy) else None

    def awaiting_input(self) -> bool:
        policy = self._controlled_policy()
        return policy is not None and policy.awaiting

    def supply_action(self, action: Action) -> bool:
        policy = self._controlled_policy()
        if policy is None:
            logger.warn("ActionIgnored", action=action, reason="no controlled combatant in battle")
            return False
        return policy.supply(action)

    def select_move(self, move: str) -> bool:
        return self.supply_action(Attack(move))

    def select_item(self, index: int) -> bool:
        return self.supply_action(UseItem(index))

    def select_switch(self, index: int) -> bool:
        return self.supply_action(Switch(index))

    def select_run(self) -> bool:
        return self.supply_action(Flee())

    def skip_pause(self) -> bool:
        return self.pacer.skip()

    # ------------------------------------------------------------------
    # Battle lifecycle
    # ------------------------------------------------------------------
    def start_battle(self, player: "Player", opponent: Combatant) -> BattleThread:
        if self.in_battle:
            raise BattleInProgressError("a battle is already running on this engine")
        thread = BattleThread(self, player, opponent)
        thread.start()
        return thread

    async def run_battle(self, player: "Player", opponent: Combatant) -> BattleState:
        if not self._busy.acquire(blocking=False):
            raise BattleInProgressError("a battle is already running on this engine")
        # status moves and boosts only last for this battle
        baseline = [(c, c.battle_stats()) for c in (*player.roster, opponent)]
        try:
            session = await self._set_up(player, opponent)
            return await self._turn_loop(session)
        finally:
            for creature, saved in baseline:
                creature.restore_battle_stats(saved)
            self.session = None
            self._busy.release()

    async def _set_up(self, player: "Player", opponent: Combatant) -> BattleSession:
        roster, inventory = player.roster, player.inventory
        index = roster.first_alive_index()
        if index is None:
            raise ValidationError("the roster has no creature able to battle")
        session = BattleSession(roster[index], opponent, roster, inventory)
        self.session = session
        logger.info("BattleStarted", player=session.player.name, opponent=opponent.name)
        self._publish_stats(session)
        self.bus.publish(Channel.MOVES, session.player.moves)
        self._publish_sprites(session)
        self.bus.publish(Channel.ROSTER, roster.snapshot())
        self.bus.publish(Channel.INVENTORY, inventory.snapshot())
        self.bus.publish(Channel.BATTLE_STATE, BattleState.START)
        self._say("BattleStart", name=opponent.name)
        await self.pacer.pause()
        return session

    async def _turn_loop(self, session: BattleSession) -> BattleState:
        while not session.is_over():
            attacker, defender = session.acting_pair()
            self._say("TurnStart", name=attacker.name)
            self._route_input(attacker)
            action = await attacker.select_action(defender.numeric_stats())
            self._validate(session, attacker, action)
            logger.debug("TurnAction", turn=session.turn, actor=attacker.name, action=action)
            if isinstance(action, Flee):
                return await self._handle_run(session)
            if isinstance(action, UseItem):
                await self._handle_item(session, action.index)
            elif isinstance(action, Switch):
                session.switches += 1
                await self._switch_to(session, action.index)
            else:
                await self._handle_attack(session, attacker, defender, action.move)
            session.turn += 1
        return await self._conclude(session)

    def _route_input(self, combatant: Combatant):
        policy = combatant.policy
        if isinstance(policy, ControlledPolicy) and policy.on_request is None:
            policy.on_request = self.on_input_request

    def _validate(self, session: BattleSession, actor: Combatant, action: Action):
        if not isinstance(action, (Attack, UseItem, Switch, Flee)):
            raise InvalidActionError(action, "not a battle action")
        if isinstance(action, Attack):
            if action.move not in actor.moves:
                raise InvalidActionError(action, f"{actor.name} does not know {action.move}")
            self.abilities.get(action.move)
            return
        if actor is not session.player:
            raise InvalidActionError(action, "only the player's side may flee, use items or switch")
        if isinstance(action, UseItem) and not session.inventory.has_index(action.index):
            raise InvalidActionError(action, f"no item in slot {action.index}")
        if isinstance(action, Switch):
            if not session.roster.has_index(action.index):
                raise InvalidActionError(action, f"no roster member in slot {action.index}")
            target = session.roster[action.index]
            if target is session.player:
                raise InvalidActionError(action, f"{target.name} is already in battle")
            if target.fainted:
                raise InvalidActionError(action, f"{target.name} has fainted")

    # ------------------------------------------------------------------
    # Action handlers
    # ------------------------------------------------------------------
    async def _handle_attack(self, session: BattleSession, attacker: Combatant,
                             defender: Combatant, move: str):
        self._say("Attack", attacker=attacker.name, move=self.phrases.move_name(move))
        await self.pacer.pause()
        ability = self.abilities.get(move)
        result = self.abilities.execute_move(move, defender, attacker)
        self._narrate_result(ability, result, attacker, defender)
        self._publish_stats(session)
        await self.pacer.pause()
        if session.player.fainted:
            await self._handle_faint(session)

    def _narrate_result(self, ability: Ability, result: int, attacker: Combatant, defender: Combatant):
        if result == LACKED_MP:
            self._say("LackOfMP", attacker=attacker.name, move=self.phrases.move_name(ability.name))
        elif result < 0:
            self._say("Heal", attacker=attacker.name, amount=-result)
        elif result > 0:
            self._say("Damage", attacker=attacker.name, amount=result)
        elif ability.category is Category.STATUS:
            target = attacker if ability.target is Target.SELF else defender
            key = "StatRose" if ability.target is Target.SELF else "StatFell"
            self._say(key, target=target.name, stat=self.phrases.stat_name(ability.stat or "Atk"))
        else:
            self._say("Miss", attacker=attacker.name)

    async def _handle_faint(self, session: BattleSession):
        self._say("Fainted", name=session.player.name)
        await self.pacer.pause()
        index = session.roster.first_alive_index()
        if index is not None:
            await self._switch_to(session, index)
        self.bus.publish(Channel.ROSTER, session.roster.snapshot())

    async def _switch_to(self, session: BattleSession, index: int):
        session.player = session.roster[index]
        logger.debug("Switched", creature=session.player.name, slot=index)
        self.bus.publish(Channel.MOVES, session.player.moves)
        self._publish_sprites(session)
        self._publish_stats(session)
        self._say("Switch", name=session.player.name)
        await self.pacer.pause()

    async def _handle_item(self, session: BattleSession, index: int):
        item = session.inventory.remove_item(index)
        session.items_used += 1
        self._say("Item", item=item.name)
        self.bus.publish(Channel.INVENTORY, session.inventory.snapshot())
        await self.pacer.pause()
        if item.use(session.opponent, session.player, session.roster, self.rng):
            session.captured = True
            session.opponent.kill_immediately()
            self._say("Capture", name=session.opponent.name)
            await self.pacer.pause()
        self.bus.publish(Channel.INVENTORY, session.inventory.snapshot())
        self.bus.publish(Channel.ROSTER, session.roster.snapshot())
        self._publish_stats(session)

    async def _handle_run(self, session: BattleSession) -> BattleState:
        self._say("Run")
        await self.pacer.pause()
        return self._finish(session, BattleState.DRAW)

    async def _conclude(self, session: BattleSession) -> BattleState:
        if session.opponent.hp <= 0:
            if not session.captured:
                self._say("Fainted", name=session.opponent.name)
                await self.pacer.pause()
            self._say("Victory")
            await self.pacer.pause()
            self._grant_loot(session)
            await self.pacer.pause()
            return self._finish(session, BattleState.VICTORY)
        self._say("AllFainted")
        await self.pacer.pause()
        self._say("Defeat")
        await self.pacer.pause()
        return self._finish(session, BattleState.DEFEAT)

    def _grant_loot(self, session: BattleSession):
        opponent, inventory = session.opponent, session.inventory
        coins = opponent.stats.coins
        inventory.add_coins(coins)
        loot = opponent.names.loot
        if loot:
            item = Item.from_record(self.provider.get_item_data(loot))
            key = "Loot" if inventory.add_item(item) else "LootLost"
            self._say(key, item=item.name, coins=coins)
        logger.debug("LootGranted", item=loot, coins=coins)
        self.bus.publish(Channel.INVENTORY, inventory.snapshot())

    def _finish(self, session: BattleSession, state: BattleState) -> BattleState:
        logger.info("BattleConcluded", outcome=state.value, turns=session.turn,
                    items_used=session.items_used, switches=session.switches)
        self.bus.publish(Channel.BATTLE_STATE, state)
        return state

    # ------------------------------------------------------------------
    # Publishing helpers
    # ------------------------------------------------------------------
    def _say(self, key: str, **values):
        self.bus.publish(Channel.DIALOGUE, self.phrases.text(key, **values))

    def _publish_stats(self, session: BattleSession):
        self.bus.publish(Channel.STAT, StatUpdate(Side.PLAYER, session.player.stat_snapshot()))
        self.bus.publish(Channel.STAT, StatUpdate(Side.OPPONENT, session.opponent.stat_snapshot()))

    def _publish_sprites(self, session: BattleSession):
        self.bus.publish(Channel.SPRITE, SpriteUpdate(Side.PLAYER, session.player.name))
        self.bus.publish(Channel.SPRITE, SpriteUpdate(Side.OPPONENT, session.opponent.name))

__all__ = ["BattleEngine", "BattleThread", "Pacer", "DEFAULT_PAUSE"]
