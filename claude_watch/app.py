"""Flask application factory for claude-watch.

Wires the monitor's services into a Flask app:

- ConfigService: config.yaml loading and validation
- MonitorState: published snapshots read by the API
- EventBus: SSE broadcasting of monitor updates
- Monitor: background polling threads

Usage:
    from claude_watch.app import create_app
    app = create_app()
    app.run(port=5050)
"""

import logging

from flask import Flask, jsonify

from claude_watch import __version__
from claude_watch.models import AppConfig
from claude_watch.routes import register_blueprints
from claude_watch.services import Monitor, MonitorState, get_config_service, get_event_bus

logger = logging.getLogger(__name__)


def create_app(config_path: str = "config.yaml", config: AppConfig | None = None) -> Flask:
    """Create and configure the Flask application.

    The monitor is created but not started; see start_monitor.

    Args:
        config_path: Path to the configuration file.
        config: Explicit configuration, bypassing the file.

    Returns:
        Configured Flask application.
    """
    config_service = get_config_service(config_path)
    config = config or config_service.get_config()

    app = Flask(__name__)
    app.config["TESTING"] = False

    app.extensions["config"] = config
    app.extensions["config_service"] = config_service
    _init_services(app, config)

    register_blueprints(app)

    @app.route("/")
    def index():
        return jsonify({"name": "claude-watch", "version": __version__})

    return app


def _init_services(app: Flask, config: AppConfig) -> None:
    state = MonitorState(
        max_log_entries=config.max_log_entries,
        max_recent_operations=config.max_recent_operations,
    )
    app.extensions["monitor_state"] = state

    event_bus = get_event_bus()
    app.extensions["event_bus"] = event_bus

    app.extensions["monitor"] = Monitor(config=config, state=state, event_bus=event_bus)
    logger.info(f"Services initialized (watching {config.claude_path})")


def start_monitor(app: Flask) -> Monitor:
    """Start the background polling threads of an app's monitor."""
    monitor: Monitor = app.extensions["monitor"]
    monitor.start()
    return monitor


def main():
    """Run the monitor and the Flask server."""
    config = get_config_service().get_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = create_app(config=config)
    monitor = start_monitor(app)

    logger.info(f"Starting claude-watch on port {config.port}")
    try:
        app.run(host="127.0.0.1", port=config.port, debug=config.debug, threaded=True, use_reloader=False)
    finally:
        monitor.stop()


if __name__ == "__main__":
    main()
