"""Flask routes for claude-watch."""

from claude_watch.routes.activity import activity_bp
from claude_watch.routes.config import config_bp
from claude_watch.routes.events import events_bp
from claude_watch.routes.instances import instances_bp
from claude_watch.routes.logs import logs_bp
from claude_watch.routes.sessions import sessions_bp

__all__ = [
    "activity_bp",
    "config_bp",
    "events_bp",
    "instances_bp",
    "logs_bp",
    "sessions_bp",
]


def register_blueprints(app):
    """Register all blueprints with the Flask app.

    Args:
        app: The Flask application instance.
    """
    for blueprint in (activity_bp, config_bp, events_bp, instances_bp, logs_bp, sessions_bp):
        app.register_blueprint(blueprint, url_prefix="/api")
