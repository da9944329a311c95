from __future__ import annotations
import sys
import threading
from typing import Optional

from battlemon.core.errors import BattlemonError, DataLoadError, InvalidActionError, ValidationError
from battlemon.core.logging import logger
from battlemon.system.settings import Settings, SettingsData
from battlemon.system.save import list_saves
from battlemon.data.provider import DataProvider
from battlemon.data.phrases import Phrasebook
from battlemon.battle.abilities import AbilityBook
from battlemon.battle.actions import Action, Attack, Switch, UseItem, parse_action
from battlemon.battle.combatant import Combatant
from battlemon.battle.engine import BattleEngine
from battlemon.battle.policies import AUTONOMOUS_POLICIES
from battlemon.game.model import GameModel, GameChannel, GameState
from battlemon.game.player import TrainerAbility
from battlemon.ui.battle_view import RichBattleView, console

EXIT_DATA_ERROR = 2
EXIT_BATTLE_ERROR = 1

MENU = [
    ("new", "New game"),
    ("continue", "Continue"),
    ("battle", "Battle a wild creature"),
    ("roster", "Roster"),
    ("heal", "Revitalize creatures"),
    ("save", "Save"),
    ("options", "Options"),
    ("quit", "Quit"),
]

class GameContext:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.provider = DataProvider.from_tables()
        self.phrases = Phrasebook.load(settings.data.language)
        self.engine = BattleEngine(AbilityBook.from_provider(self.provider), self.provider, self.phrases,
                                   pause_seconds=settings.data.pause_seconds)
        self.model = GameModel(self.provider, self.engine, save_dir=settings.data.save_dir)
        self.view = RichBattleView(self.phrases)
        self.view.attach(self.engine.bus)
        self._input_ready = threading.Event()
        self.engine.on_input_request = self._request_input
        self.model.subscribe(GameChannel.GAME_STATE, self._on_game_state)
        settings.on_change(self._apply_settings)

    def _request_input(self, combatant: Combatant):
        self._input_ready.set()

    def _on_game_state(self, state: GameState):
        logger.debug("GameState", state=state.value)

    def _apply_settings(self, data: SettingsData):
        self.engine.pacer.seconds = data.pause_seconds
        self.model.save_dir = data.save_dir

    # --- battle ---
    def _check_action(self, action: Action) -> Optional[str]:
        view = self.view
        if isinstance(action, Attack) and action.move not in view.moves:
            return f"Unknown move '{action.move}'."
        if isinstance(action, UseItem):
            if view.inventory is None or not 0 <= action.index < len(view.inventory.items):
                return "No item in that slot."
        if isinstance(action, Switch):
            if not 0 <= action.index < len(view.roster):
                return "No creature in that slot."
            member = view.roster[action.index]
            if member.fainted:
                return f"{member.name} has fainted."
            if self.engine.session is not None and self.engine.session.roster.index_of(
                    self.engine.session.player) == action.index:
                return f"{member.name} is already battling."
        return None

    def _prompt_action(self):
        self.view.render_hud()
        self.view.render_actions()
        while True:
            token = console.input("[bold]> [/bold]").strip()
            if not token:
                continue
            if token.isdigit() and 1 <= int(token) <= len(self.view.moves):
                token = self.view.moves[int(token) - 1]
            action = parse_action(token)
            problem = self._check_action(action)
            if problem:
                console.print(f"[red]{problem}[/red]")
                continue
            if self.engine.supply_action(action):
                return
            console.print("[yellow]Not waiting for input right now.[/yellow]")
            return

    def _wait_for_input(self) -> bool:
        # Ctrl+C during narration cuts the current pause short
        try:
            return self._input_ready.wait(0.1)
        except KeyboardInterrupt:
            self.engine.skip_pause()
            return False

    def battle(self, kind: str):
        self._input_ready.clear()
        thread = self.model.start_creature_battle(kind)
        if thread is None:
            console.print("[red]All of your creatures have fainted. Revitalize them first.[/red]")
            return
        console.print("[dim]Ctrl+C skips a pause.[/dim]")
        while thread.is_alive():
            if self._wait_for_input():
                self._input_ready.clear()
                self._prompt_action()
        outcome = thread.result()
        logger.debug("BattleOutcome", outcome=outcome.value if outcome else None)

    # --- menus ---
    def new_game(self):
        self.model.start_new_game()
        names = self.provider.all_creature_names()
        for i, name in enumerate(names, 1):
            console.print(f"{i}) {name}")
        choice = console.input("Choose your starter: ").strip()
        species = names[int(choice) - 1] if choice.isdigit() and 1 <= int(choice) <= len(names) else names[0]
        perks = [a.value for a in TrainerAbility]
        perk = console.input(f"Choose a perk ({'/'.join(perks)}): ").strip().upper()
        if perk not in perks:
            perk = perks[0]
        self.model.add_starter_data(species, perk)
        console.print(f"[green]{species} joins you![/green]")

    def continue_game(self):
        saves = list_saves(self.settings.data.save_dir)
        if not saves:
            console.print("No saves found.")
            return
        console.print("Saves: " + ", ".join(saves))
        name = console.input("Save name: ").strip()
        try:
            loaded = self.model.continue_game(name)
        except ValidationError as e:
            console.print(f"[red]{e}[/red]")
            return
        if not loaded:
            console.print(f"[red]Could not load '{name}'.[/red]")

    def show_roster(self):
        player = self.model.player
        self.view.render_roster(player.roster.snapshot())
        self.view.render_inventory(player.inventory.snapshot())
        choice = console.input("Release a creature (# or blank): ").strip()
        if choice.isdigit():
            if self.model.remove_creature(int(choice)):
                console.print("Released.")
            else:
                console.print("[red]Cannot release that creature.[/red]")

    def save(self):
        name = console.input("Save name: ").strip()
        try:
            path = self.model.save_game(name)
        except ValidationError as e:
            console.print(f"[red]{e}[/red]")
            return
        console.print(f"Saved to {path}.")

    def options(self):
        data = self.settings.data
        console.print(f"1) Pause [{data.pause_seconds}s]")
        console.print(f"2) Log Level [{data.log_level}]")
        console.print(f"3) Debug [{'ON' if data.debug else 'OFF'}]")
        choice = console.input("Option (blank to return): ").strip()
        if choice == "1":
            self.settings.update(pause_seconds=console.input("Seconds: ").strip() or data.pause_seconds)
        elif choice == "2":
            self.settings.update(log_level=console.input("DEBUG/INFO/WARN/ERROR: ").strip().upper())
        elif choice == "3":
            self.settings.update(debug=not data.debug)

def _main_menu() -> str:
    for i, (_, label) in enumerate(MENU, 1):
        console.print(f"{i}) {label}")
    choice = console.input("> ").strip().lower()
    if choice.isdigit() and 1 <= int(choice) <= len(MENU):
        return MENU[int(choice) - 1][0]
    return choice

def main() -> int:
    settings = Settings.load()
    settings.apply_logging()
    try:
        ctx = GameContext(settings)
    except (DataLoadError, ValidationError) as e:
        logger.error("FatalDataError", error=str(e))
        return EXIT_DATA_ERROR
    while True:
        choice = _main_menu()
        try:
            if choice == "new":
                ctx.new_game()
            elif choice == "continue":
                ctx.continue_game()
            elif choice in {"battle", "roster", "heal", "save"} and ctx.model.player is None:
                console.print("Start or continue a game first.")
            elif choice == "battle":
                kinds = "/".join(AUTONOMOUS_POLICIES)
                kind = console.input(f"Opponent style ({kinds}) [random]: ").strip().lower() or "random"
                ctx.battle(kind if kind in AUTONOMOUS_POLICIES else "random")
            elif choice == "roster":
                ctx.show_roster()
            elif choice == "heal":
                ctx.model.revitalize_creatures()
                console.print("Your creatures are fully restored.")
            elif choice == "save":
                ctx.save()
            elif choice == "options":
                ctx.options()
            elif choice == "quit":
                console.print("Goodbye!")
                break
        except (DataLoadError, ValidationError) as e:
            logger.error("FatalDataError", error=str(e))
            return EXIT_DATA_ERROR
        except InvalidActionError as e:
            logger.error("FatalBattleError", error=str(e))
            return EXIT_BATTLE_ERROR
        except BattlemonError as e:
            logger.error("Unhandled", error=str(e))
            return EXIT_BATTLE_ERROR
    settings.save()
    return 0

def run():
    sys.exit(main())

if __name__ == "__main__":
    run()
