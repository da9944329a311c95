"""Decision policies: how a combatant picks its action each turn.

ControlledPolicy waits for a human choice; the autonomous policies decide
immediately from the move data and the opponent's visible stats.
"""
from __future__ import annotations
import asyncio
import random
import threading
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from battlemon.core.errors import ValidationError
from battlemon.core.logging import logger
from .abilities import AbilityBook, Ability, Category
from .actions import Action, Attack, Flee, Switch, UseItem

if TYPE_CHECKING:
    from .combatant import Combatant

class DecisionPolicy:
    controlled = False
    kind = "base"

    async def select_action(self, combatant: "Combatant", opponent_stats: Dict[str, int]) -> Action:
        return self.choose(combatant, opponent_stats)

    def choose(self, combatant: "Combatant", opponent_stats: Dict[str, int]) -> Action:
        raise NotImplementedError

class ControlledPolicy(DecisionPolicy):
    """Suspends until the presentation side supplies an action.

    One pending slot: ``select_action`` creates a future on the battle loop and
    ``supply`` resolves it through ``call_soon_threadsafe``, so input may come
    from any thread. Supplies outside an input window are ignored.
    """
    controlled = True
    kind = "controlled"

    def __init__(self, on_request: Optional[Callable[["Combatant"], None]] = None):
        self.on_request = on_request
        self._pending: Optional[asyncio.Future] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._lock = threading.Lock()

    @property
    def awaiting(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def select_action(self, combatant: "Combatant", opponent_stats: Dict[str, int]) -> Action:
        self._loop = asyncio.get_running_loop()
        pending = self._pending = self._loop.create_future()
        if self.on_request:
            self.on_request(combatant)
        try:
            action = await pending
        finally:
            self._pending = None
        logger.debug("ActionSelected", creature=combatant.name, action=action)
        return action

    def supply(self, action: Action) -> bool:
        with self._lock:
            pending, loop = self._pending, self._loop
            if pending is None or loop is None or pending.done():
                logger.warn("ActionIgnored", action=action, reason="not awaiting input")
                return False
            # the window closes on the first supply
            self._pending = None
        loop.call_soon_threadsafe(self._resolve, pending, action)
        return True

    @staticmethod
    def _resolve(pending: asyncio.Future, action: Action):
        if pending.done():
            logger.warn("ActionIgnored", action=action, reason="already supplied")
            return
        pending.set_result(action)

    def select_move(self, move: str) -> bool:
        return self.supply(Attack(move))

    def select_item(self, index: int) -> bool:
        return self.supply(UseItem(index))

    def select_switch(self, index: int) -> bool:
        return self.supply(Switch(index))

    def select_run(self) -> bool:
        return self.supply(Flee())

class AutonomousPolicy(DecisionPolicy):
    def __init__(self, abilities: AbilityBook, rng: Optional[random.Random] = None):
        self.abilities = abilities
        self.rng = rng or random.Random()

    def _known(self, combatant: "Combatant") -> List[Ability]:
        return [self.abilities.get(m) for m in combatant.moves]

    def _affordable(self, combatant: "Combatant") -> List[Ability]:
        return [a for a in self._known(combatant) if a.can_afford(combatant)]

    def _fallback(self, combatant: "Combatant") -> Action:
        pool = self._affordable(combatant) or self._known(combatant)
        return Attack(self.rng.choice(pool).name)

class RandomPolicy(AutonomousPolicy):
    kind = "random"

    def choose(self, combatant, opponent_stats):
        return self._fallback(combatant)

class RecklessPolicy(AutonomousPolicy):
    """Always goes for the highest expected damage it can pay for."""
    kind = "reckless"

    def choose(self, combatant, opponent_stats):
        atk = combatant.stats.atk
        scored = [(a.expected_damage(atk, opponent_stats), a) for a in self._affordable(combatant)]
        scored = [s for s in scored if s[0] > 0]
        if not scored:
            return self._fallback(combatant)
        best = max(scored, key=lambda s: s[0])
        return Attack(best[1].name)

class AttritionPolicy(AutonomousPolicy):
    """Plays safe: heals below half HP, otherwise spends as little MP as it can."""
    kind = "attrition"

    def choose(self, combatant, opponent_stats):
        usable = self._affordable(combatant)
        if combatant.stats.hp * 2 < combatant.stats.max_hp:
            heals = [a for a in usable if a.category is Category.HEAL]
            if heals:
                return Attack(max(heals, key=lambda a: a.power).name)
        atk = combatant.stats.atk
        damaging = [a for a in usable if a.expected_damage(atk, opponent_stats) > 0]
        if damaging:
            cheapest = min(damaging, key=lambda a: (a.cost, -a.expected_damage(atk, opponent_stats)))
            return Attack(cheapest.name)
        status = [a for a in usable if a.category is Category.STATUS]
        if status:
            return Attack(status[0].name)
        return self._fallback(combatant)

AUTONOMOUS_POLICIES = {
    RandomPolicy.kind: RandomPolicy,
    RecklessPolicy.kind: RecklessPolicy,
    AttritionPolicy.kind: AttritionPolicy,
}

def make_policy(kind: str, abilities: AbilityBook, rng: Optional[random.Random] = None) -> AutonomousPolicy:
    try:
        cls = AUTONOMOUS_POLICIES[kind]
    except KeyError:
        raise ValidationError(f"unknown opponent policy '{kind}'") from None
    return cls(abilities, rng)

__all__ = [
    "DecisionPolicy", "ControlledPolicy", "AutonomousPolicy",
    "RandomPolicy", "RecklessPolicy", "AttritionPolicy",
    "AUTONOMOUS_POLICIES", "make_policy",
]
