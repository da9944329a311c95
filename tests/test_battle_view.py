import io

from rich.console import Console

from battlemon.battle.bus import NotificationBus, Channel, Side, BattleState, StatUpdate, SpriteUpdate
from battlemon.battle.combatant import StatSnapshot
from battlemon.ui.battle_view import RichBattleView, _bar


def _view(phrases):
    out = Console(file=io.StringIO(), width=120, color_system=None)
    bus = NotificationBus()
    view = RichBattleView(phrases, out)
    view.attach(bus)
    return view, bus, out


def test_view_tracks_snapshots_and_prints_narration(phrases):
    view, bus, out = _view(phrases)
    bus.publish(Channel.STAT, StatUpdate(Side.PLAYER, StatSnapshot(30, 50, 5, 10)))
    bus.publish(Channel.SPRITE, SpriteUpdate(Side.PLAYER, "Emberpup"))
    bus.publish(Channel.MOVES, ("Tackle", "VineLash"))
    bus.publish(Channel.DIALOGUE, "A wild Pebblor appeared!")
    bus.publish(Channel.BATTLE_STATE, BattleState.VICTORY)
    view.render_hud()
    view.render_actions()
    text = out.file.getvalue()
    assert "A wild Pebblor appeared!" in text
    assert "Emberpup" in text and "30/50" in text
    assert "Vine Lash" in text
    assert "Victory" in text
    assert view.state is BattleState.VICTORY


def test_detach_stops_updates(phrases):
    view, bus, _ = _view(phrases)
    view.detach()
    bus.publish(Channel.MOVES, ("Tackle",))
    assert view.moves == ()


def test_bar_clamps_and_marks_fainted():
    assert "FAINTED" in _bar(0, 0)
    assert _bar(80, 50).endswith("50/50")
    assert "[red]" in _bar(5, 50)
