"""Localized battle narration.

Loads ``assets/dialogue/<language>/battle.json`` and formats lines by key.
Missing keys are logged and visibly marked rather than raised, so a gap in a
translation never stops a battle.
"""
from __future__ import annotations
import json
from typing import Any, Dict, Optional

from battlemon.core.errors import DataLoadError
from battlemon.core.logging import logger
from battlemon.core.paths import DIALOGUE

class Phrasebook:
    def __init__(self, lines: Dict[str, str], move_names: Optional[Dict[str, str]] = None,
                 stat_names: Optional[Dict[str, str]] = None, language: str = "en"):
        self.lines = dict(lines)
        self.move_names = dict(move_names or {})
        self.stat_names = dict(stat_names or {})
        self.language = language

    @classmethod
    def load(cls, language: str = "en") -> "Phrasebook":
        path = DIALOGUE / language / "battle.json"
        if not path.exists() and language != "en":
            logger.warn("LanguageMissingFallingBack", language=language)
            return cls.load("en")
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise DataLoadError(str(path), str(e)) from e
        return cls(raw.get("lines", {}), raw.get("moves"), raw.get("stats"), language)

    def text(self, key: str, **values: Any) -> str:
        template = self.lines.get(key)
        if template is None:
            logger.warn("DialogueKeyMissing", key=key, language=self.language)
            return f"[Missing dialogue: {key}]"
        try:
            return template.format(**values)
        except (KeyError, IndexError) as e:
            logger.warn("DialoguePlaceholderMissing", key=key, error=str(e))
            return template

    def move_name(self, move_id: str) -> str:
        return self.move_names.get(move_id, move_id)

    def stat_name(self, stat: str) -> str:
        return self.stat_names.get(stat, stat)

__all__ = ["Phrasebook"]
