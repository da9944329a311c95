"""The player's persistent state: roster, bag and trainer perks."""
from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, TYPE_CHECKING

from battlemon.core.errors import ValidationError
from battlemon.core.logging import logger
from battlemon.battle.combatant import Combatant
from battlemon.battle.inventory import Inventory
from battlemon.battle.roster import Roster

if TYPE_CHECKING:
    from battlemon.data.provider import DataProvider

RICH_BONUS = 1000

class TrainerAbility(str, Enum):
    CLIMBER = "CLIMBER"
    SWIMMER = "SWIMMER"
    RICH = "RICH"

class Player:
    def __init__(self, roster: Roster | None = None, inventory: Inventory | None = None):
        self.roster = roster if roster is not None else Roster()
        self.inventory = inventory if inventory is not None else Inventory()
        self.abilities: List[TrainerAbility] = []

    def add_ability(self, ability: TrainerAbility) -> bool:
        if ability in self.abilities:
            return False
        self.abilities.append(ability)
        return True

    def add_starter_data(self, species: str, perk: str, provider: "DataProvider"):
        try:
            ability = TrainerAbility(perk.upper())
        except ValueError:
            raise ValidationError(f"unknown trainer perk '{perk}'") from None
        self.roster.add(Combatant.from_record(provider.get_creature_data(species)))
        if ability is TrainerAbility.RICH:
            self.inventory.add_coins(RICH_BONUS)
        self.add_ability(ability)
        logger.info("StarterChosen", species=species, perk=ability.value)

    def to_save(self) -> Dict[str, Any]:
        return {
            "roster": [c.to_save() for c in self.roster],
            "inventory": self.inventory.to_save(),
            "abilities": [a.value for a in self.abilities],
        }

    @classmethod
    def from_save(cls, data: Dict[str, Any], provider: "DataProvider") -> "Player":
        roster = Roster([Combatant.from_save(c, provider) for c in data.get("roster", [])])
        player = cls(roster, Inventory.from_save(data.get("inventory", {}), provider))
        for name in data.get("abilities", []):
            player.add_ability(TrainerAbility(name))
        return player

__all__ = ["Player", "TrainerAbility", "RICH_BONUS"]
