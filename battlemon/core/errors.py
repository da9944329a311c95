"""
Error classes for clearer exception sources.
"""
from __future__ import annotations

class BattlemonError(Exception):
    pass

class DataLoadError(BattlemonError):
    def __init__(self, path: str, detail: str):
        super().__init__(f"Failed to load {path}: {detail}")
        self.path = path
        self.detail = detail

class UnknownEntryError(DataLoadError):
    """Lookup of a creature, move or item id that the tables do not define."""
    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind} table", f"unknown {kind.lower()} '{name}'")
        self.kind = kind
        self.name = name

class ValidationError(BattlemonError):
    pass

class InvalidActionError(BattlemonError):
    def __init__(self, action: object, detail: str):
        super().__init__(f"Invalid action {action!r}: {detail}")
        self.action = action
        self.detail = detail

class BattleInProgressError(BattlemonError):
    pass
