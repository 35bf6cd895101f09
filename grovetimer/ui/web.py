"""HTTP API for GroveTimer.

A lightweight Flask app exposing:
- Timer control and status
- Ambient sound selection and session tags
- Coding edit intake for editor integrations
- Daily, weekly, monthly and overall statistics
- Full data export and the weekly Word report
"""

import logging
import threading
from datetime import date, datetime
from typing import Any, Optional

from flask import Flask, jsonify, request

from grovetimer.core.errors import PersistenceError, SessionStateError
from grovetimer.core.models import CodingEdit, SoundType
from grovetimer.reporting.exporter import export_all_data

logger = logging.getLogger(__name__)

# Will be set by start_dashboard()
_app_ref = None  # type: Optional[Any]  # GroveTimerApp

_TIMER_ACTIONS = {
    "focus": lambda o, data: o.start_focus(),
    "short-break": lambda o, data: o.start_short_break(),
    "long-break": lambda o, data: o.start_long_break(),
    "break": lambda o, data: o.start_break(),
    "custom": lambda o, data: o.start_custom(int(data.get("minutes", 0))),
    "stop": lambda o, data: o.stop(),
    "pause": lambda o, data: o.pause(),
    "resume": lambda o, data: o.resume(),
    "reset": lambda o, data: o.reset(),
}


def create_flask_app() -> Flask:
    app = Flask(__name__)

    @app.route("/api/status")
    def api_status():
        if _app_ref is None or _app_ref.orchestrator is None:
            return jsonify({"error": "not initialized"}), 503
        return jsonify(_app_ref.orchestrator.get_status())

    @app.route("/api/timer/<action>", methods=["POST"])
    def api_timer(action):
        if _app_ref is None or _app_ref.orchestrator is None:
            return jsonify({"error": "not ready"}), 503
        handler = _TIMER_ACTIONS.get(action)
        if handler is None:
            return jsonify({"error": f"unknown action {action!r}"}), 404
        data = request.get_json(silent=True) or {}
        try:
            handler(_app_ref.orchestrator, data)
        except (TypeError, ValueError, SessionStateError) as exc:
            return jsonify({"error": str(exc)}), 400
        except PersistenceError as exc:
            logger.error("Timer action %s failed to persist: %s", action, exc)
            return jsonify({"error": str(exc)}), 500
        return jsonify(_app_ref.orchestrator.get_status())

    @app.route("/api/sound", methods=["POST"])
    def api_sound():
        if _app_ref is None or _app_ref.orchestrator is None:
            return jsonify({"error": "not ready"}), 503
        data = request.get_json(silent=True) or {}
        try:
            sound = SoundType(data.get("sound"))
        except ValueError:
            return jsonify({"error": "sound must be one of none, lofi, rain"}), 400
        _app_ref.set_sound(sound)
        return jsonify({"sound": sound.value})

    @app.route("/api/tags", methods=["POST"])
    def api_tags():
        if _app_ref is None or _app_ref.orchestrator is None:
            return jsonify({"error": "not ready"}), 503
        data = request.get_json(silent=True) or {}
        tags = data.get("tags")
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            return jsonify({"error": "tags must be a list of strings"}), 400
        cleaned = [t.strip() for t in tags if t.strip()]
        _app_ref.set_tags(cleaned)
        return jsonify({"tags": cleaned})

    @app.route("/api/coding/edit", methods=["POST"])
    def api_coding_edit():
        if _app_ref is None or _app_ref.tracker is None:
            return jsonify({"error": "not ready"}), 503
        data = request.get_json(silent=True) or {}
        file_id = str(data.get("file_id", "")).strip()
        if not file_id:
            return jsonify({"error": "file_id required"}), 400
        try:
            timestamp = (
                datetime.fromisoformat(data["timestamp"]) if data.get("timestamp") else datetime.now()
            )
            edit = CodingEdit(
                file_id=file_id,
                language=str(data.get("language", "")),
                timestamp=timestamp,
                lines_added=int(data.get("lines_added", 0)),
                lines_removed=int(data.get("lines_removed", 0)),
                lines_modified=int(data.get("lines_modified", 0)),
                characters_typed=int(data.get("characters_typed", 0)),
                keystrokes=int(data.get("keystrokes", 1)),
            )
        except (TypeError, ValueError) as exc:
            return jsonify({"error": str(exc)}), 400
        _app_ref.tracker.record_edit(edit)
        return jsonify({"tracking": _app_ref.tracker.is_tracking})

    @app.route("/api/stats/daily")
    def api_stats_daily():
        if _app_ref is None or _app_ref.ledger is None:
            return jsonify({"error": "not ready"}), 503
        try:
            target = _parse_date_arg("date")
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify(_app_ref.statistics().daily_stats(target).to_dict())

    @app.route("/api/stats/weekly")
    def api_stats_weekly():
        if _app_ref is None or _app_ref.ledger is None:
            return jsonify({"error": "not ready"}), 503
        try:
            start = _parse_date_arg("start")
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify(_app_ref.statistics().weekly_stats(start).to_dict())

    @app.route("/api/stats/monthly")
    def api_stats_monthly():
        if _app_ref is None or _app_ref.ledger is None:
            return jsonify({"error": "not ready"}), 503
        month_str = request.args.get("month")
        year = month = None
        if month_str:
            try:
                year, month = (int(part) for part in month_str.split("-"))
                date(year, month, 1)
            except ValueError:
                return jsonify({"error": "month must be YYYY-MM"}), 400
        return jsonify(_app_ref.statistics().monthly_stats(year, month).to_dict())

    @app.route("/api/stats/overall")
    def api_stats_overall():
        if _app_ref is None or _app_ref.ledger is None:
            return jsonify({"error": "not ready"}), 503
        return jsonify(_app_ref.statistics().overall_stats().to_dict())

    @app.route("/api/export")
    def api_export():
        if _app_ref is None or _app_ref.ledger is None:
            return jsonify({"error": "not ready"}), 503
        return jsonify(export_all_data(_app_ref.ledger.get_all_sessions()))

    @app.route("/api/report", methods=["POST"])
    def api_report():
        if _app_ref is None or _app_ref.ledger is None:
            return jsonify({"error": "not ready"}), 503
        try:
            path = _app_ref.export_weekly_report()
        except (ImportError, OSError) as exc:
            logger.error("Weekly report failed: %s", exc)
            return jsonify({"error": str(exc)}), 500
        return jsonify({"path": path})

    return app


def start_dashboard(app_ref, host: str = "127.0.0.1", port: int = 5556) -> threading.Thread:
    """Start the Flask API in a daemon thread."""
    global _app_ref
    _app_ref = app_ref
    flask_app = create_flask_app()

    def _run():
        flask_app.run(host=host, port=port, debug=False, use_reloader=False)

    t = threading.Thread(target=_run, daemon=True, name="grovetimer-web")
    t.start()
    logger.info("Dashboard started at http://%s:%d", host, port)
    return t


def _parse_date_arg(name: str) -> Optional[date]:
    value = request.args.get(name)
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"{name} must be YYYY-MM-DD")
