"""Move (ability) resolution.

``execute`` returns a single signed magnitude whose sign tells the caller
what happened:

  LACKED_MP (-1)   attacker could not pay the MP cost; nothing changed
  < -1             HP healed (negated)
  0                miss / no effect (status moves also report 0)
  > 0              damage dealt
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, TYPE_CHECKING

from battlemon.core.errors import UnknownEntryError, ValidationError
from battlemon.core.logging import logger
from battlemon.data.tables import Record, is_numeric, to_int
from .combatant import BASE_DODGE_CHANCE

if TYPE_CHECKING:
    from .combatant import Combatant
    from battlemon.data.provider import DataProvider

LACKED_MP = -1
MIN_HEAL = 2

class Category(str, Enum):
    DAMAGE = "damage"
    HEAL = "heal"
    STATUS = "status"

class Target(str, Enum):
    SELF = "self"
    ENEMY = "enemy"

@dataclass(frozen=True)
class Ability:
    name: str
    power: int
    cost: int
    accuracy: int
    target: Target
    category: Category
    stat: Optional[str] = None
    extra: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Record) -> "Ability":
        data = dict(record)
        try:
            name = data.pop("Name")
            power = data.pop("Power")
            cost = data.pop("Cost")
            accuracy = data.pop("Accuracy")
            ability = cls(
                name=name,
                power=to_int(power) if is_numeric(power) else 0,
                cost=to_int(cost) if is_numeric(cost) else 0,
                accuracy=to_int(accuracy) if is_numeric(accuracy) else 0,
                target=Target(data.pop("Target", "enemy")),
                category=Category(data.pop("Category", "damage")),
                stat=data.pop("Stat", None),
                extra=data,
            )
        except (KeyError, ValueError) as e:
            raise ValidationError(f"malformed move record {record!r}: {e}") from e
        return ability

    def can_afford(self, user: "Combatant") -> bool:
        return user.mp >= self.cost

    def raw_damage(self, user_atk: int) -> int:
        return self.power + user_atk

    def heal_amount(self, user_atk: int) -> int:
        return max(MIN_HEAL, self.power + user_atk // 2)

    def expected_damage(self, user_atk: int, target_stats: Mapping[str, int]) -> float:
        """Damage expectation after defense and dodge chance; 0 for non-damage moves."""
        if self.category is not Category.DAMAGE:
            return 0.0
        per_hit = max(0, self.raw_damage(user_atk) - target_stats.get("Def", 0))
        dodge = target_stats.get("Agi", 0) - self.accuracy + BASE_DODGE_CHANCE
        dodge = max(0, min(100, dodge))
        return per_hit * (100 - dodge) / 100

    def execute(self, defender: "Combatant", attacker: "Combatant") -> int:
        if not self.can_afford(attacker):
            return LACKED_MP
        attacker.lose_mp(self.cost)
        target = attacker if self.target is Target.SELF else defender
        if self.category is Category.DAMAGE:
            return target.take_damage(self.raw_damage(attacker.stats.atk), self.accuracy)
        if self.category is Category.HEAL:
            # restoring a single HP would read as LACKED_MP; treat it as no effect
            if target.fainted or target.stats.max_hp - target.stats.hp < MIN_HEAL:
                return 0
            return -target.gain_hp(self.heal_amount(attacker.stats.atk))
        stat = self.stat or "Atk"
        delta = self.power if self.target is Target.SELF else -self.power
        target.stats.set(stat, max(0, target.stats.get(stat) + delta))
        return 0

class AbilityBook:
    """One resolver per move id, shared by every battle."""

    def __init__(self, abilities: Mapping[str, Ability]):
        self._abilities = dict(abilities)

    @classmethod
    def from_provider(cls, provider: "DataProvider") -> "AbilityBook":
        book = {name: Ability.from_record(provider.get_move_data(name))
                for name in provider.all_move_names()}
        logger.debug("AbilitiesBuilt", count=len(book))
        return cls(book)

    def __contains__(self, move_id: object) -> bool:
        return move_id in self._abilities

    def get(self, move_id: str) -> Ability:
        try:
            return self._abilities[move_id]
        except KeyError:
            raise UnknownEntryError("Move", move_id) from None

    def execute_move(self, move_id: str, defender: "Combatant", attacker: "Combatant") -> int:
        result = self.get(move_id).execute(defender, attacker)
        logger.debug("MoveExecuted", move=move_id, attacker=attacker.name,
                     defender=defender.name, result=result)
        return result

__all__ = ["Ability", "AbilityBook", "Category", "Target", "LACKED_MP", "MIN_HEAL"]
