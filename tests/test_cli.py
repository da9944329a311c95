import pytest

from battlemon.cli import GameContext
from battlemon.system.settings import Settings


@pytest.fixture
def ctx(tmp_path):
    settings = Settings.load(tmp_path / "settings.json")
    settings.data.save_dir = str(tmp_path)
    settings.data.pause_seconds = 0
    return GameContext(settings)


def _interrupted(timeout=None):
    raise KeyboardInterrupt


def test_ctrl_c_while_waiting_skips_the_pause(ctx, monkeypatch):
    skipped = []
    monkeypatch.setattr(ctx.engine, "skip_pause", lambda: skipped.append(True) or True)
    monkeypatch.setattr(ctx._input_ready, "wait", _interrupted)
    assert ctx._wait_for_input() is False
    assert skipped == [True]


def test_waiting_reports_an_input_request(ctx):
    ctx._request_input(None)
    assert ctx._wait_for_input() is True
