"""Long-running GroveTimer service.

Builds the store, ledger, coding tracker, timer engine and orchestrator
from the config file, then serves the web dashboard until interrupted.
"""

import logging
import os
import threading
from datetime import date
from pathlib import Path
from typing import Optional

from grovetimer.core.config import load_config, resolve_database_path, save_config
from grovetimer.core.models import SoundType, TimerFinished
from grovetimer.core.orchestrator import SessionOrchestrator
from grovetimer.core.timer import TimerEngine
from grovetimer.persistence.ledger import SessionLedger
from grovetimer.persistence.store import SqliteStateStore
from grovetimer.reporting.exporter import ReportExporter
from grovetimer.reporting.statistics import StatisticsAggregator
from grovetimer.tracking.coding_tracker import CodingTracker

logger = logging.getLogger(__name__)


class GroveTimerApp:
    """Main application class wiring the timer to the session ledger."""

    def __init__(self, config_path: str) -> None:
        self.config_path = config_path
        self.config = load_config(config_path)
        self.store: Optional[SqliteStateStore] = None
        self.tracker: Optional[CodingTracker] = None
        self.ledger: Optional[SessionLedger] = None
        self.timer: Optional[TimerEngine] = None
        self.orchestrator: Optional[SessionOrchestrator] = None
        self._shutdown = threading.Event()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Initialize all components and serve the dashboard until Ctrl-C."""
        self.init_components()
        self._start_dashboard()
        try:
            while not self._shutdown.wait(1.0):
                pass
        except KeyboardInterrupt:
            logger.info("Interrupted; shutting down")
        finally:
            self.stop()

    def stop(self) -> None:
        """Interrupt any open session and release the database."""
        self._shutdown.set()
        if self.orchestrator is not None:
            self.orchestrator.stop()
        if self.store is not None:
            self.store.close()
            self.store = None

    def init_components(self) -> None:
        db_path = resolve_database_path(self.config)
        parent = os.path.dirname(db_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        self.store = SqliteStateStore(db_path)
        self.store.init_db()
        self.tracker = CodingTracker()
        self.ledger = SessionLedger(
            self.store,
            coding_feed=self.tracker,
            project_name=self.config.get("project_name", ""),
        )
        self.timer = TimerEngine()
        self.orchestrator = SessionOrchestrator.from_config(self.config, self.timer, self.ledger)
        self.timer.on("finished", self._notify_finished)
        logger.info("GroveTimer initialized (database: %s)", db_path)

    def statistics(self, today: Optional[date] = None) -> StatisticsAggregator:
        return StatisticsAggregator.from_ledger(self.ledger, today)

    def set_sound(self, sound: SoundType) -> None:
        """Select the ambient sound for upcoming sessions and remember it."""
        self.orchestrator.sound = sound
        self.config["default_sound"] = sound.value
        save_config(self.config, self.config_path)

    def set_tags(self, tags: list[str]) -> None:
        """Tag upcoming sessions and remember the tags."""
        self.orchestrator.tags = list(tags)
        self.config["default_tags"] = list(tags)
        save_config(self.config, self.config_path)

    def export_weekly_report(self, output_path: Optional[str] = None) -> str:
        """Write this week's .docx report; defaults into the configured directory."""
        stats = self.statistics()
        weekly = stats.weekly_stats()
        report_cfg = self.config.get("report") or {}
        if output_path is None:
            out_dir = os.path.expanduser(report_cfg.get("output_directory", "~/grovetimer-reports"))
            output_path = str(Path(out_dir) / f"grovetimer-week-{weekly.week_start.isoformat()}.docx")
        return ReportExporter().export_weekly(
            weekly, stats.overall_stats(), report_cfg.get("user_name", ""), output_path
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _start_dashboard(self) -> None:
        from grovetimer.ui.web import start_dashboard

        web_cfg = self.config.get("web") or {}
        start_dashboard(self, host=web_cfg.get("host", "127.0.0.1"), port=web_cfg.get("port", 5556))

    def _notify_finished(self, event: TimerFinished) -> None:
        # Registered after the orchestrator, so the ledger already holds the session.
        logger.info("%s finished", event.phase.value.replace("-", " ").capitalize())
