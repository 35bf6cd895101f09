"""Tests for GroveTimerApp wiring."""

import os

import pytest

import grovetimer.ui.app as app_module
from grovetimer.core.config import get_default_config, save_config
from grovetimer.core.models import Phase, SoundType
from grovetimer.core.timer import TimerEngine
from grovetimer.persistence.ledger import SessionLedger
from grovetimer.persistence.store import SqliteStateStore
from grovetimer.ui.app import GroveTimerApp


@pytest.fixture
def config(tmp_path):
    cfg = get_default_config()
    cfg["database_path"] = str(tmp_path / "data" / "grove.db")
    cfg["project_name"] = "orchard"
    cfg["default_sound"] = "lofi"
    cfg["report"]["output_directory"] = str(tmp_path / "reports")
    return cfg


@pytest.fixture
def grove_app(tmp_path, config, scheduler, monkeypatch):
    path = str(tmp_path / "config.json")
    save_config(config, path)
    monkeypatch.setattr(app_module, "TimerEngine", lambda: TimerEngine(scheduler))
    app = GroveTimerApp(path)
    app.init_components()
    yield app
    app.stop()


def test_init_components_uses_config(grove_app, config):
    assert os.path.exists(config["database_path"])
    assert grove_app.orchestrator.sound is SoundType.LOFI

    grove_app.orchestrator.start_focus()
    draft = grove_app.ledger.get_current_session()
    assert draft.project_name == "orchard"
    assert grove_app.tracker.is_tracking


def test_recovers_draft_left_by_previous_run(tmp_path, config, scheduler, monkeypatch):
    os.makedirs(os.path.dirname(config["database_path"]))
    store = SqliteStateStore(config["database_path"])
    store.init_db()
    sid = SessionLedger(store).open_session(Phase.FOCUS, 1500)
    store.close()

    path = str(tmp_path / "config.json")
    save_config(config, path)
    monkeypatch.setattr(app_module, "TimerEngine", lambda: TimerEngine(scheduler))
    app = GroveTimerApp(path)
    app.init_components()
    try:
        sessions = app.ledger.get_all_sessions()
        assert [s.id for s in sessions] == [sid]
        assert sessions[0].interrupted is True
    finally:
        app.stop()


def test_stop_interrupts_open_session(tmp_path, config, scheduler, monkeypatch):
    path = str(tmp_path / "config.json")
    save_config(config, path)
    monkeypatch.setattr(app_module, "TimerEngine", lambda: TimerEngine(scheduler))
    app = GroveTimerApp(path)
    app.init_components()
    app.orchestrator.start_focus()
    ledger = app.ledger
    app.stop()

    assert ledger.get_all_sessions()[0].interrupted is True
    assert app.store is None


def test_export_weekly_report_default_path(grove_app, tmp_path):
    path = grove_app.export_weekly_report()
    assert path.startswith(str(tmp_path / "reports"))
    assert path.endswith(".docx")
    assert os.path.exists(path)
