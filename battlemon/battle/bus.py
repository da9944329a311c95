"""Publish/subscribe channels between the battle engine and its observers.

Payloads are immutable snapshots; observers never receive engine-owned
objects. A listener that raises is logged and skipped so the remaining
listeners (and the battle) carry on.
"""
from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Hashable, List, Tuple

from battlemon.core.logging import logger
from .combatant import StatSnapshot

Listener = Callable[[Any], None]

class Channel(str, Enum):
    DIALOGUE = "dialogue"
    STAT = "stat"
    SPRITE = "sprite"
    ROSTER = "roster"
    INVENTORY = "inventory"
    BATTLE_STATE = "battleState"
    MOVES = "moves"

class Side(str, Enum):
    PLAYER = "player"
    OPPONENT = "opponent"

class BattleState(str, Enum):
    START = "Start"
    VICTORY = "Victory"
    DEFEAT = "Defeat"
    DRAW = "Draw"

@dataclass(frozen=True)
class StatUpdate:
    side: Side
    stats: StatSnapshot

@dataclass(frozen=True)
class SpriteUpdate:
    side: Side
    name: str

class NotificationBus:
    def __init__(self):
        self._listeners: Dict[Hashable, List[Listener]] = defaultdict(list)

    def subscribe(self, channel: Hashable, listener: Listener) -> Callable[[], bool]:
        """Register ``listener``; returns a callable that unsubscribes it."""
        self._listeners[channel].append(listener)
        return lambda: self.unsubscribe(channel, listener)

    def unsubscribe(self, channel: Hashable, listener: Listener) -> bool:
        registered = self._listeners.get(channel, [])
        if listener in registered:
            registered.remove(listener)
            return True
        return False

    def listeners(self, channel: Hashable) -> Tuple[Listener, ...]:
        return tuple(self._listeners.get(channel, ()))

    def publish(self, channel: Hashable, payload: Any):
        for listener in self.listeners(channel):
            try:
                listener(payload)
            except Exception as e:
                logger.error("ListenerFailed", channel=getattr(channel, "value", channel),
                             listener=getattr(listener, "__qualname__", repr(listener)), error=repr(e))

__all__ = ["NotificationBus", "Channel", "Side", "BattleState", "StatUpdate", "SpriteUpdate", "Listener"]
