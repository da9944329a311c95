"""The player's party of creatures."""
from __future__ import annotations
from typing import Iterator, List, Optional, Tuple

from battlemon.core.logging import logger
from .combatant import Combatant, CombatantSnapshot

ROSTER_CAPACITY = 6

class Roster:
    def __init__(self, members: Optional[List[Combatant]] = None, capacity: int = ROSTER_CAPACITY):
        self.capacity = capacity
        members = list(members or [])
        for creature in members[capacity:]:
            logger.warn("RosterFull", rejected=creature.name)
        self.members: List[Combatant] = members[:capacity]

    def __len__(self) -> int:
        return len(self.members)

    def __iter__(self) -> Iterator[Combatant]:
        return iter(self.members)

    def __getitem__(self, index: int) -> Combatant:
        return self.members[index]

    def is_full(self) -> bool:
        return len(self.members) >= self.capacity

    def has_index(self, index: int) -> bool:
        return 0 <= index < len(self.members)

    def add(self, creature: Combatant) -> bool:
        if self.is_full():
            logger.info("RosterFull", rejected=creature.name)
            return False
        self.members.append(creature)
        return True

    def remove(self, index: int) -> bool:
        """Remove a member; refused for a bad index or for the last member."""
        if not self.has_index(index) or len(self.members) <= 1:
            return False
        self.members.pop(index)
        return True

    def index_of(self, creature: Combatant) -> int:
        for i, m in enumerate(self.members):
            if m is creature:
                return i
        return -1

    def first_alive_index(self) -> Optional[int]:
        for i, m in enumerate(self.members):
            if not m.fainted:
                return i
        return None

    def first_fainted_index(self) -> Optional[int]:
        for i, m in enumerate(self.members):
            if m.fainted:
                return i
        return None

    def all_fainted(self) -> bool:
        # An empty roster has nobody able to fight, so it counts as all fainted.
        return all(m.fainted for m in self.members)

    def revitalize_all(self):
        for m in self.members:
            m.revitalize()

    def snapshot(self) -> Tuple[CombatantSnapshot, ...]:
        return tuple(m.snapshot() for m in self.members)

__all__ = ["Roster", "ROSTER_CAPACITY"]
