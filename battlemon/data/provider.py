"""Read-only access to the creature, move and item tables.

A DataProvider is built once at start-up and handed to whatever needs it
(game model, ability book, battle engine). Lookups return copies so callers
may consume records destructively.
"""
from __future__ import annotations
from pathlib import Path
from typing import Dict, Tuple

from battlemon.core.errors import UnknownEntryError, ValidationError
from battlemon.core.logging import logger
from battlemon.core.paths import DATA, SCHEMA
from .tables import Record, load_table, split_move_set, MOVE_SET_FIELD

class DataProvider:
    def __init__(self, creatures: Dict[str, Record], moves: Dict[str, Record], items: Dict[str, Record]):
        self._creatures = creatures
        self._moves = moves
        self._items = items
        self._check_references()

    @classmethod
    def from_tables(cls, data_dir: Path = DATA, schema_dir: Path = SCHEMA) -> "DataProvider":
        provider = cls(
            load_table(data_dir / "creatures.csv", "creature", schema_dir),
            load_table(data_dir / "moves.csv", "move", schema_dir),
            load_table(data_dir / "items.csv", "item", schema_dir),
        )
        logger.info("DataLoaded", creatures=len(provider._creatures),
                    moves=len(provider._moves), items=len(provider._items))
        return provider

    def _check_references(self):
        for name, rec in self._creatures.items():
            for mv in split_move_set(rec.get(MOVE_SET_FIELD, "")):
                if mv not in self._moves:
                    raise ValidationError(f"creature '{name}' knows unknown move '{mv}'")
            loot = rec.get("Loot")
            if loot and loot not in self._items:
                raise ValidationError(f"creature '{name}' drops unknown item '{loot}'")

    def _get(self, table: Dict[str, Record], kind: str, name: str) -> Record:
        try:
            return dict(table[name])
        except KeyError:
            raise UnknownEntryError(kind, name) from None

    def get_creature_data(self, name: str) -> Record:
        return self._get(self._creatures, "Creature", name)

    def get_move_data(self, name: str) -> Record:
        return self._get(self._moves, "Move", name)

    def get_item_data(self, name: str) -> Record:
        return self._get(self._items, "Item", name)

    def all_creature_names(self) -> Tuple[str, ...]:
        return tuple(self._creatures)

    def all_move_names(self) -> Tuple[str, ...]:
        return tuple(self._moves)

__all__ = ["DataProvider"]
