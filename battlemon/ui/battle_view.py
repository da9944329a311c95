"""Terminal battle view.

Listens on the battle bus and renders narration and a HUD with rich. Every
listener runs on the battle thread; the view only stores the immutable
snapshots it receives, so the input thread can read them at any time.
"""
from __future__ import annotations
from typing import Callable, Dict, List, Optional, Tuple

from rich.align import Align
from rich.box import ROUNDED
from rich.columns import Columns
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from battlemon.battle.bus import NotificationBus, Channel, Side, BattleState, StatUpdate, SpriteUpdate
from battlemon.battle.combatant import CombatantSnapshot, StatSnapshot
from battlemon.battle.inventory import InventorySnapshot
from battlemon.data.phrases import Phrasebook

console = Console()

def _bar(current: int, maximum: int, colors: Tuple[str, str, str] = ("green", "yellow", "red"),
         width: int = 20) -> str:
    """HP/MP bar in rich markup; the color steps down at one half and one quarter."""
    if maximum <= 0:
        return "[red]FAINTED[/red]"
    current = max(0, min(current, maximum))
    percent = current / maximum
    filled = int(percent * width)
    if percent > 0.5:
        color = colors[0]
    elif percent > 0.25:
        color = colors[1]
    else:
        color = colors[2]
    return f"[{color}]{'█' * filled}{'░' * (width - filled)}[/{color}] {current}/{maximum}"

class RichBattleView:
    def __init__(self, phrases: Phrasebook, out: Optional[Console] = None):
        self.phrases = phrases
        self.console = out or console
        self.stats: Dict[Side, StatSnapshot] = {}
        self.sprites: Dict[Side, str] = {}
        self.moves: Tuple[str, ...] = ()
        self.roster: Tuple[CombatantSnapshot, ...] = ()
        self.inventory: Optional[InventorySnapshot] = None
        self.state: Optional[BattleState] = None
        self._unsubscribe: List[Callable[[], bool]] = []

    def attach(self, bus: NotificationBus):
        handlers = {
            Channel.DIALOGUE: self.on_dialogue,
            Channel.STAT: self.on_stat,
            Channel.SPRITE: self.on_sprite,
            Channel.MOVES: self.on_moves,
            Channel.ROSTER: self.on_roster,
            Channel.INVENTORY: self.on_inventory,
            Channel.BATTLE_STATE: self.on_state,
        }
        for channel, handler in handlers.items():
            self._unsubscribe.append(bus.subscribe(channel, handler))

    def detach(self):
        for undo in self._unsubscribe:
            undo()
        self._unsubscribe.clear()

    # bus listeners
    def on_dialogue(self, line: str):
        self.console.print(f"[bright_white]{line}[/bright_white]")

    def on_stat(self, update: StatUpdate):
        self.stats[update.side] = update.stats

    def on_sprite(self, update: SpriteUpdate):
        self.sprites[update.side] = update.name

    def on_moves(self, moves: Tuple[str, ...]):
        self.moves = tuple(moves)

    def on_roster(self, roster: Tuple[CombatantSnapshot, ...]):
        self.roster = tuple(roster)

    def on_inventory(self, inventory: InventorySnapshot):
        self.inventory = inventory

    def on_state(self, state: BattleState):
        self.state = state
        if state is not BattleState.START:
            self.console.rule(f"[bold]{state.value}[/bold]")

    # rendering
    def _side_panel(self, side: Side, title: str) -> Panel:
        stats = self.stats.get(side)
        name = self.sprites.get(side, "?")
        if stats is None:
            body = f"[bold bright_white]{name}[/bold bright_white]"
        else:
            body = (f"[bold bright_white]{name}[/bold bright_white]\n"
                    f"HP {_bar(stats.hp, stats.max_hp)}\n"
                    f"MP {_bar(stats.mp, stats.max_mp, ('cyan', 'blue', 'magenta'))}")
        return Panel(body, title=f"[bold]{title}[/bold]", box=ROUNDED, width=45, padding=(0, 1))

    def render_hud(self):
        columns = Columns([self._side_panel(Side.OPPONENT, "OPPONENT"),
                           self._side_panel(Side.PLAYER, "YOUR CREATURE")],
                          equal=True, expand=False, padding=(0, 4))
        self.console.print(Align.center(columns))

    def render_actions(self):
        table = Table(title="[bold]Choose an action[/bold]", box=ROUNDED, show_header=True, width=60)
        table.add_column("Key", justify="right")
        table.add_column("Action")
        for i, move in enumerate(self.moves, 1):
            table.add_row(str(i), self.phrases.move_name(move))
        if self.inventory:
            for i, item in enumerate(self.inventory.items):
                table.add_row(f"item{i}", item)
        for i, member in enumerate(self.roster):
            if member.fainted:
                continue
            table.add_row(f"switch{i}", f"{member.name} ({member.hp}/{member.max_hp})")
        table.add_row("Run", "Flee the battle")
        self.console.print(Align.center(table))

    def render_roster(self, roster: Tuple[CombatantSnapshot, ...]):
        table = Table(title="[bold]Roster[/bold]", box=ROUNDED, width=60)
        table.add_column("#", justify="right")
        table.add_column("Creature")
        table.add_column("HP")
        table.add_column("MP")
        for i, member in enumerate(roster):
            hp = "[red]FAINTED[/red]" if member.fainted else _bar(member.hp, member.max_hp, width=10)
            table.add_row(str(i), member.name, hp, f"{member.mp}/{member.max_mp}")
        self.console.print(Align.center(table))

    def render_inventory(self, inventory: InventorySnapshot):
        listing = ", ".join(inventory.items) or "(empty)"
        self.console.print(Panel(f"{listing}\n[yellow]{inventory.coins} coins[/yellow]",
                                 title=f"[bold]Bag {len(inventory.items)}/{inventory.capacity}[/bold]",
                                 box=ROUNDED, width=60))

__all__ = ["RichBattleView", "console"]
