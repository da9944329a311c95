"""Combatant model: stats, move list, fainting and stat mutation.

Known stats are typed fields; any other numeric/string column of a creature
record is kept in an ``extra`` map so data files can add columns freely.
"""
from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from typing import Dict, Optional, Tuple, TYPE_CHECKING
import random

from battlemon.core.errors import ValidationError
from battlemon.core.logging import logger
from battlemon.data.tables import Record, is_numeric, to_int, split_move_set, MOVE_SET_FIELD
from .actions import Action

if TYPE_CHECKING:
    from .policies import DecisionPolicy
    from battlemon.data.provider import DataProvider

BASE_DODGE_CHANCE = 20

# data column -> StatBlock attribute
_STAT_FIELDS = {
    "HP": "hp", "MaxHP": "max_hp", "MP": "mp", "MaxMP": "max_mp",
    "Atk": "atk", "Def": "def_", "Agi": "agi", "Coins": "coins",
}
_NAME_FIELDS = {"Name": "name", "Species": "species", "Loot": "loot"}

@dataclass
class StatBlock:
    hp: int = 0
    max_hp: int = 0
    mp: int = 0
    max_mp: int = 0
    atk: int = 0
    def_: int = 0
    agi: int = 0
    coins: int = 0
    extra: Dict[str, int] = field(default_factory=dict)

    def get(self, key: str, default: int = 0) -> int:
        attr = _STAT_FIELDS.get(key)
        if attr:
            return getattr(self, attr)
        return self.extra.get(key, default)

    def set(self, key: str, value: int):
        attr = _STAT_FIELDS.get(key)
        if attr:
            setattr(self, attr, int(value))
        else:
            self.extra[key] = int(value)

    def as_dict(self) -> Dict[str, int]:
        out = {key: getattr(self, attr) for key, attr in _STAT_FIELDS.items()}
        out.update(self.extra)
        return out

@dataclass
class NameBlock:
    name: str = ""
    species: str = ""
    loot: Optional[str] = None
    extra: Dict[str, str] = field(default_factory=dict)

    def set(self, key: str, value: str):
        attr = _NAME_FIELDS.get(key)
        if attr:
            setattr(self, attr, value)
        else:
            self.extra[key] = value

@dataclass(frozen=True)
class StatSnapshot:
    hp: int
    max_hp: int
    mp: int
    max_mp: int

@dataclass(frozen=True)
class CombatantSnapshot:
    name: str
    species: str
    hp: int
    max_hp: int
    mp: int
    max_mp: int
    fainted: bool
    moves: Tuple[str, ...]

class Combatant:
    """A battle participant. Action selection is delegated to ``policy``."""

    def __init__(self, stats: StatBlock, names: NameBlock, moves: Tuple[str, ...],
                 policy: "DecisionPolicy", *, rng: Optional[random.Random] = None,
                 record: Optional[Record] = None):
        self.stats = stats
        self.names = names
        self.moves = tuple(moves)
        self.policy = policy
        self.rng = rng or random.Random()
        self.record: Record = dict(record or {})
        self.fainted = False

    @classmethod
    def from_record(cls, record: Record, policy: Optional["DecisionPolicy"] = None,
                    rng: Optional[random.Random] = None) -> "Combatant":
        """Build a combatant from a flat creature record.

        ``MoveSet`` is split on ';' into the move list; numeric values become
        stats and everything else a string attribute. HP/MP start full.
        """
        if policy is None:
            from .policies import ControlledPolicy
            policy = ControlledPolicy()
        data = dict(record)
        moves = split_move_set(data.pop(MOVE_SET_FIELD, ""))
        stats, names = StatBlock(), NameBlock()
        for key, value in data.items():
            if is_numeric(value):
                stats.set(key, to_int(value))
            else:
                names.set(key, value)
        if "MaxHP" not in data or "MaxMP" not in data:
            raise ValidationError(f"creature record '{names.name}' lacks MaxHP/MaxMP")
        stats.hp = stats.max_hp
        stats.mp = stats.max_mp
        names.species = names.species or names.name
        return cls(stats, names, tuple(moves), policy, rng=rng, record=record)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def name(self) -> str:
        return self.names.name

    @property
    def hp(self) -> int:
        return self.stats.hp

    @property
    def mp(self) -> int:
        return self.stats.mp

    @property
    def controlled(self) -> bool:
        return self.policy.controlled

    def numeric_stats(self) -> Dict[str, int]:
        return self.stats.as_dict()

    def stat_snapshot(self) -> StatSnapshot:
        s = self.stats
        return StatSnapshot(s.hp, s.max_hp, s.mp, s.max_mp)

    def snapshot(self) -> CombatantSnapshot:
        s = self.stats
        return CombatantSnapshot(self.name, self.names.species, s.hp, s.max_hp,
                                 s.mp, s.max_mp, self.fainted, self.moves)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def take_damage(self, damage: int, attacker_accuracy: int) -> int:
        """Apply an incoming hit and return the damage actually taken."""
        chance = self.stats.agi - attacker_accuracy + BASE_DODGE_CHANCE
        if self.rng.randrange(100) < chance:
            logger.debug("Dodged", creature=self.name, chance=chance)
            damage = 0
        taken = max(0, damage - self.stats.def_)
        self.stats.hp = max(0, self.stats.hp - taken)
        if self.stats.hp <= 0:
            self._faint()
        return taken

    def lose_mp(self, amount: int):
        self.stats.mp = max(0, self.stats.mp - amount)

    def gain_mp(self, amount: int) -> int:
        before = self.stats.mp
        self.stats.mp = min(self.stats.max_mp, before + max(0, amount))
        return self.stats.mp - before

    def gain_hp(self, amount: int) -> int:
        """Restore HP up to MaxHP; returns the HP actually restored.

        Fainted combatants are not affected; only ``revitalize`` brings them back.
        """
        if self.fainted:
            return 0
        before = self.stats.hp
        self.stats.hp = min(self.stats.max_hp, before + max(0, amount))
        return self.stats.hp - before

    def battle_stats(self) -> StatBlock:
        """Copy of the stats a battle may modify; see ``restore_battle_stats``."""
        return replace(self.stats, extra=dict(self.stats.extra))

    def restore_battle_stats(self, saved: StatBlock):
        """Undo in-battle stat changes. Current HP and MP are kept, clamped to the restored maxima."""
        for f in fields(StatBlock):
            if f.name not in ("hp", "mp", "extra"):
                setattr(self.stats, f.name, getattr(saved, f.name))
        self.stats.extra = dict(saved.extra)
        self.stats.hp = min(self.stats.hp, self.stats.max_hp)
        self.stats.mp = min(self.stats.mp, self.stats.max_mp)

    def revitalize(self):
        self.stats.hp = self.stats.max_hp
        self.stats.mp = self.stats.max_mp
        self.fainted = False
        logger.debug("Revitalized", creature=self.name)

    def kill_immediately(self):
        self.stats.hp = 0
        self._faint()

    def _faint(self):
        if not self.fainted:
            logger.debug("Fainted", creature=self.name)
        self.fainted = True

    async def select_action(self, opponent_stats: Dict[str, int]) -> Action:
        return await self.policy.select_action(self, opponent_stats)

    # ------------------------------------------------------------------
    # Roster helpers
    # ------------------------------------------------------------------
    def clone_for_roster(self) -> "Combatant":
        """Fresh, player-controlled creature of the same species (used on capture)."""
        return Combatant.from_record(self.record, rng=self.rng)

    def to_save(self) -> Dict[str, object]:
        return {
            "species": self.names.species,
            "name": self.name,
            "hp": self.stats.hp,
            "mp": self.stats.mp,
            "fainted": self.fainted,
        }

    @classmethod
    def from_save(cls, data: Dict[str, object], provider: "DataProvider",
                  policy: Optional["DecisionPolicy"] = None) -> "Combatant":
        c = cls.from_record(provider.get_creature_data(str(data["species"])), policy)
        c.names.name = str(data.get("name") or c.name)
        c.stats.hp = max(0, min(c.stats.max_hp, int(data.get("hp", c.stats.max_hp))))
        c.stats.mp = max(0, min(c.stats.max_mp, int(data.get("mp", c.stats.max_mp))))
        c.fainted = bool(data.get("fainted", False)) or c.stats.hp == 0
        if c.fainted:
            c.stats.hp = 0
        return c

    def __repr__(self) -> str:
        s = self.stats
        return f"Combatant({self.name!r}, hp={s.hp}/{s.max_hp}, mp={s.mp}/{s.max_mp}, fainted={self.fainted})"

__all__ = [
    "Combatant", "StatBlock", "NameBlock", "StatSnapshot", "CombatantSnapshot",
    "BASE_DODGE_CHANCE",
]
