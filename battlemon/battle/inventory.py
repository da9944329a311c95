"""Bounded item bag plus coin purse."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Tuple, TYPE_CHECKING

from battlemon.core.errors import InvalidActionError
from battlemon.core.logging import logger
from .actions import UseItem
from .items import Item

if TYPE_CHECKING:
    from battlemon.data.provider import DataProvider

INVENTORY_CAPACITY = 10

@dataclass(frozen=True)
class InventorySnapshot:
    items: Tuple[str, ...]
    sprites: Tuple[str, ...]
    coins: int
    capacity: int

class Inventory:
    def __init__(self, capacity: int = INVENTORY_CAPACITY, coins: int = 0):
        self.capacity = capacity
        self.coins = max(0, coins)
        self._items: List[Item] = []

    def __len__(self) -> int:
        return len(self._items)

    def is_full(self) -> bool:
        return len(self._items) >= self.capacity

    def has_index(self, index: int) -> bool:
        return 0 <= index < len(self._items)

    def add_item(self, item: Item) -> bool:
        """Append an item; a full bag rejects it and returns False."""
        if self.is_full():
            logger.info("InventoryFull", rejected=item.name, capacity=self.capacity)
            return False
        self._items.append(item)
        return True

    def get_item(self, index: int) -> Item:
        if not self.has_index(index):
            raise InvalidActionError(UseItem(index), f"no item in slot {index}")
        return self._items[index]

    def remove_item(self, index: int) -> Item:
        item = self.get_item(index)
        del self._items[index]
        return item

    def add_coins(self, amount: int):
        self.coins = max(0, self.coins + amount)

    def items(self) -> Tuple[Item, ...]:
        return tuple(self._items)

    def snapshot(self) -> InventorySnapshot:
        return InventorySnapshot(
            items=tuple(i.name for i in self._items),
            sprites=tuple(i.sprite for i in self._items),
            coins=self.coins,
            capacity=self.capacity,
        )

    def to_save(self) -> Dict[str, object]:
        return {"items": [i.name for i in self._items], "coins": self.coins, "capacity": self.capacity}

    @classmethod
    def from_save(cls, data: Dict[str, object], provider: "DataProvider") -> "Inventory":
        inv = cls(capacity=int(data.get("capacity", INVENTORY_CAPACITY)), coins=int(data.get("coins", 0)))
        for name in data.get("items", []):
            inv.add_item(Item.from_record(provider.get_item_data(str(name))))
        return inv

__all__ = ["Inventory", "InventorySnapshot", "INVENTORY_CAPACITY"]
