"""Action tokens returned by a combatant's action selection."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Union

@dataclass(frozen=True)
class Attack:
    move: str

@dataclass(frozen=True)
class UseItem:
    index: int

@dataclass(frozen=True)
class Switch:
    index: int

@dataclass(frozen=True)
class Flee:
    pass

Action = Union[Attack, UseItem, Switch, Flee]

RUN = "Run"

def parse_action(token: str) -> Action:
    """Parse the compact text form typed at the CLI prompt.

    ``"Run"`` flees, ``"item<N>"`` uses item N, ``"switch<N>"`` switches to
    roster slot N, anything else is a move id.
    """
    if token == RUN:
        return Flee()
    for prefix, kind in (("item", UseItem), ("switch", Switch)):
        if token.startswith(prefix) and token[len(prefix):].isdigit():
            return kind(int(token[len(prefix):]))
    return Attack(token)

__all__ = ["Attack", "UseItem", "Switch", "Flee", "Action", "parse_action", "RUN"]
