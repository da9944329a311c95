from __future__ import annotations
import json, os, re, time
from pathlib import Path
from typing import List, Optional, TYPE_CHECKING
from battlemon.core.errors import ValidationError
from battlemon.core.logging import logger
from battlemon.game.player import Player

if TYPE_CHECKING:
    from battlemon.data.provider import DataProvider

SAVE_DIR_NAME = ".battlemon_saves"
SAVE_VERSION = 1
_NAME_RE = re.compile(r"[A-Za-z0-9_-]+")

def _save_dir(override: Optional[str] = None) -> Path:
    if override:
        path = Path(override).expanduser()
    else:
        path = Path(os.path.expanduser("~")) / SAVE_DIR_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path

def _save_path(name: str, save_dir: Optional[str] = None) -> Path:
    if not _NAME_RE.fullmatch(name or ""):
        raise ValidationError(f"invalid save name '{name}'")
    return _save_dir(save_dir) / f"{name}.json"

def list_saves(save_dir: Optional[str] = None) -> List[str]:
    return sorted(p.stem for p in _save_dir(save_dir).glob("*.json"))

def save_player(player: Player, name: str, save_dir: Optional[str] = None) -> Path:
    """Write the player as ``<save_dir>/<name>.json``."""
    path = _save_path(name, save_dir)
    data = {"version": SAVE_VERSION, "saved_at": time.time(), "player": player.to_save()}
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    logger.info("GameSaved", file=str(path))
    return path

def load_player(name: str, provider: "DataProvider", save_dir: Optional[str] = None) -> Player | None:
    """Load a named save; None when it is missing or unreadable.

    A save naming a creature or item the tables no longer define raises
    ``UnknownEntryError`` like any other data lookup.
    """
    path = _save_path(name, save_dir)
    if not path.exists():
        logger.info("SaveNotFound", file=str(path))
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        player = Player.from_save(data.get("player", {}), provider)
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
        logger.error("GameLoadFailed", file=str(path), error=str(e))
        return None
    logger.debug("GameLoaded", file=str(path), creatures=len(player.roster))
    return player

def delete_save(name: str, save_dir: Optional[str] = None) -> bool:
    path = _save_path(name, save_dir)
    if not path.exists():
        return False
    path.unlink()
    logger.debug("GameDeleted", file=str(path))
    return True
