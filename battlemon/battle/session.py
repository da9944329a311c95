"""State owned by the battle loop for the duration of one battle."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from .combatant import Combatant
from .inventory import Inventory
from .roster import Roster

@dataclass
class BattleSession:
    player: Combatant
    opponent: Combatant
    roster: Roster
    inventory: Inventory
    turn: int = 0
    items_used: int = 0
    switches: int = 0
    captured: bool = False

    @property
    def player_turn(self) -> bool:
        # strict alternation by parity, not by speed
        return self.turn % 2 == 0

    def acting_pair(self) -> Tuple[Combatant, Combatant]:
        if self.player_turn:
            return self.player, self.opponent
        return self.opponent, self.player

    def is_over(self) -> bool:
        return self.roster.all_fainted() or self.opponent.hp <= 0

__all__ = ["BattleSession"]
