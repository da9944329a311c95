"""Data-defined items and their in-battle effects."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, TYPE_CHECKING
import random

from battlemon.core.errors import ValidationError
from battlemon.core.logging import logger
from battlemon.data.tables import Record, is_numeric, to_int
from .capture import attempt_capture, DEFAULT_CAPTURE_RATE

if TYPE_CHECKING:
    from .combatant import Combatant
    from .roster import Roster

class ItemEffect(str, Enum):
    HEAL = "heal"
    ETHER = "ether"
    REVIVE = "revive"
    BOOST = "boost"
    CAPTURE = "capture"

@dataclass(frozen=True)
class Item:
    name: str
    effect: ItemEffect
    power: int = 0
    stat: Optional[str] = None
    sprite: str = ""
    price: int = 0
    extra: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Record) -> "Item":
        data = dict(record)
        try:
            name = data.pop("Name")
            power = data.pop("Power", "0")
            price = data.pop("Price", "0")
            return cls(
                name=name,
                effect=ItemEffect(data.pop("Effect")),
                power=to_int(power) if is_numeric(power) else 0,
                stat=data.pop("Stat", None),
                sprite=data.pop("Sprite", name),
                price=to_int(price) if is_numeric(price) else 0,
                extra=data,
            )
        except (KeyError, ValueError) as e:
            raise ValidationError(f"malformed item record {record!r}: {e}") from e

    def use(self, opponent: "Combatant", active: "Combatant", roster: "Roster",
            rng: Optional[random.Random] = None) -> bool:
        """Apply the item. Returns True only when a capture succeeded."""
        if self.effect is ItemEffect.HEAL:
            healed = active.gain_hp(self.power)
            logger.debug("ItemHealed", item=self.name, creature=active.name, amount=healed)
        elif self.effect is ItemEffect.ETHER:
            restored = active.gain_mp(self.power)
            logger.debug("ItemRestoredMP", item=self.name, creature=active.name, amount=restored)
        elif self.effect is ItemEffect.REVIVE:
            idx = roster.first_fainted_index()
            if idx is not None:
                roster[idx].revitalize()
        elif self.effect is ItemEffect.BOOST:
            stat = self.stat or "Atk"
            active.stats.set(stat, active.stats.get(stat) + self.power)
        elif self.effect is ItemEffect.CAPTURE:
            return self._capture(opponent, roster, rng or random.Random())
        return False

    def _capture(self, opponent: "Combatant", roster: "Roster", rng: random.Random) -> bool:
        rate = opponent.stats.get("CaptureRate", DEFAULT_CAPTURE_RATE)
        result = attempt_capture(rng, rate, opponent.stats.max_hp, opponent.stats.hp, max(1, self.power))
        logger.debug("CaptureAttempt", target=opponent.name, shakes=result.shakes, success=result.success)
        if result.success:
            roster.add(opponent.clone_for_roster())
        return result.success

__all__ = ["Item", "ItemEffect"]
