"""
Battle system package.
- combatant.py (stats, fainting, action selection via a policy)
- abilities.py (move resolution)
- policies.py (controlled and autonomous decision making)
- engine.py (turn loop and narration)
"""
from .bus import NotificationBus, Channel, Side, BattleState
from .engine import BattleEngine, BattleThread
__all__ = ["NotificationBus", "Channel", "Side", "BattleState", "BattleEngine", "BattleThread"]
