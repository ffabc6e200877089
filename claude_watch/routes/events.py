"""Event routes for claude-watch.

- GET /api/events - Server-Sent Events stream of monitor updates
"""

from flask import Blueprint, Response, current_app, request

from claude_watch.services.event_bus import get_event_bus

events_bp = Blueprint("events", __name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@events_bp.route("/events")
def stream_events():
    """Stream instances_updated, activity_updated, conflicts_updated and
    log_entries events.

    Query params:
        replay: "0" skips the recent-events backlog (default replays it).
    """
    event_bus = current_app.extensions.get("event_bus") or get_event_bus()
    replay = request.args.get("replay", "1") != "0"
    return Response(
        event_bus.get_sse_stream(include_buffer=replay),
        mimetype="text/event-stream",
        headers=SSE_HEADERS,
    )
