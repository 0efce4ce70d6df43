"""Dayboard - day cards, planning windows and a ranked movie queue."""

import json
import logging
from datetime import datetime
from pathlib import Path

from flask import Flask, jsonify, request

from dayboard.dates import from_iso_date, to_iso_date
from dayboard.movies import DETAIL_FIELDS, MovieNotFound, MovieQueue
from dayboard.placement import PlacementError
from dayboard.planner import ItemNotFound, Planner, check_item_type
from dayboard.ranking import DIRECTIONS
from dayboard.store import JsonFileStore, RestStore, StoreError
from dayboard.windows import OPEN, WINDOW_LABELS, WINDOW_NAMES, compute_windows, move_targets, window_value

logger = logging.getLogger(__name__)

app = Flask(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
STORE_FILE = DATA_DIR / "records.json"
SETTINGS_FILE = DATA_DIR / "settings.json"

DEFAULT_STORE_TIMEOUT = 30


def load_settings():
    """Load settings from JSON file."""
    if SETTINGS_FILE.exists():
        return json.loads(SETTINGS_FILE.read_text())
    return {}


def save_settings(settings):
    """Save settings to JSON file."""
    SETTINGS_FILE.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_FILE.write_text(json.dumps(settings, indent=2))


def get_today():
    """Current local calendar day. Read once per request."""
    return datetime.now().date()


def get_store():
    """Remote store when configured, otherwise the local JSON file."""
    settings = load_settings()
    if settings.get("store_url") and settings.get("store_key"):
        return RestStore(
            settings["store_url"],
            settings["store_key"],
            timeout=settings.get("store_timeout", DEFAULT_STORE_TIMEOUT),
        )
    return JsonFileStore(STORE_FILE)


def get_planner():
    return Planner(get_store(), get_today()).load()


def get_queue():
    return MovieQueue(get_store()).load()


@app.errorhandler(StoreError)
def handle_store_error(e):
    return jsonify({"error": str(e)}), 502


@app.errorhandler(ItemNotFound)
@app.errorhandler(MovieNotFound)
def handle_not_found(e):
    return jsonify({"error": str(e)}), 404


@app.errorhandler(PlacementError)
def handle_bad_placement(e):
    return jsonify({"error": str(e)}), 400


@app.route("/")
def index():
    """Describe the service."""
    return jsonify({"name": "dayboard", "today": to_iso_date(get_today())})


@app.route("/api/windows")
def get_windows():
    """Current planning windows with their spans and labels."""
    windows = compute_windows(get_today())
    result = {}
    for name in WINDOW_NAMES + (OPEN,):
        result[name] = {
            "label": WINDOW_LABELS[name],
            "value": window_value(windows, name),
            "span": list(windows.span(name)) if name != OPEN else None,
        }
    return jsonify(result)


@app.route("/api/move-targets")
def get_move_targets():
    """Entries for the move menu."""
    today = get_today()
    return jsonify(move_targets(today, compute_windows(today)))


@app.route("/api/board")
def get_board():
    """All placeable items sorted into day cards, drawer tabs and overdue."""
    return jsonify(get_planner().board())


@app.route("/api/items", methods=["POST"])
def add_item():
    """Quick-add an item. Hashtags in the text may set its day, window or type."""
    data = request.json or {}
    text = (data.get("text") or "").strip()
    if not text:
        return jsonify({"error": "Item text required"}), 400

    planner = get_planner()
    try:
        record = planner.quick_add(
            text,
            item_type=data.get("type", "task"),
            target=data.get("target", "none"),
            notes=data.get("notes"),
            end_date=data.get("end_date"),
            start_time=data.get("start_time"),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(record), 201


@app.route("/api/items/<item_type>/<item_id>/placement", methods=["PUT"])
def move_item(item_type, item_id):
    """Move an item to a day, a window or back to open."""
    data = request.json or {}
    target = data.get("target")
    if not target:
        return jsonify({"error": "target required"}), 400

    try:
        check_item_type(item_type)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    planner = get_planner()
    record = planner.move(item_type, item_id, target)
    if record is None:
        return jsonify({"success": True, "ignored": True})
    return jsonify(record)


@app.route("/api/items/<item_type>/<item_id>", methods=["PUT"])
def update_item(item_type, item_id):
    """Edit an item's title, notes, placement or end date."""
    data = request.json or {}
    planner = get_planner()
    try:
        check_item_type(item_type)
        record = planner.edit(
            item_type,
            item_id,
            title=data.get("title"),
            notes=data.get("notes"),
            target=data.get("target"),
            end_date=data.get("end_date"),
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(record)


@app.route("/api/items/<item_type>/<item_id>/complete", methods=["POST"])
def toggle_item(item_type, item_id):
    """Toggle done (tasks, plans) or archived (focuses)."""
    try:
        check_item_type(item_type)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(get_planner().toggle_done(item_type, item_id))


@app.route("/api/items/<item_type>/<item_id>", methods=["DELETE"])
def delete_item(item_type, item_id):
    """Delete an item."""
    try:
        check_item_type(item_type)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    get_planner().delete(item_type, item_id)
    return jsonify({"success": True})


@app.route("/api/items/<item_type>/reorder", methods=["POST"])
def reorder_items(item_type):
    """Drag an item above or below another in the same card or tab."""
    data = request.json or {}
    dragged_id = data.get("draggedId")
    target_id = data.get("targetId")
    context = data.get("context")
    position = data.get("position", "above")

    if not dragged_id or not target_id or not context:
        return jsonify({"error": "draggedId, targetId and context required"}), 400
    if position not in ("above", "below"):
        return jsonify({"error": "position must be 'above' or 'below'"}), 400

    try:
        check_item_type(item_type)
        updates = get_planner().reorder(item_type, dragged_id, target_id, context, position)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify({"success": True, "order": [{"id": i, "sort_order": o} for i, o in updates]})


@app.route("/api/movies")
def get_movies():
    """Movie queue in rank order."""
    return jsonify(get_queue().listing())


@app.route("/api/movies", methods=["POST"])
def add_movie():
    """Add a movie to the backlog (unranked unless a priority is given)."""
    data = request.json or {}
    try:
        details = {key: data[key] for key in DETAIL_FIELDS if key in data}
        record = get_queue().add(data.get("title"), data.get("priority"), details)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(record), 201


@app.route("/api/movies/<movie_id>/move", methods=["POST"])
def move_movie(movie_id):
    """Move a movie one step up or down the queue."""
    data = request.json or {}
    direction = data.get("direction")
    if direction not in DIRECTIONS:
        return jsonify({"error": "direction must be 'up' or 'down'"}), 400

    queue = get_queue()
    mutations = queue.move(movie_id, direction)
    return jsonify({
        "changes": [{"id": m.item_id, "priority": m.priority} for m in mutations],
        "movies": queue.listing(),
    })


@app.route("/api/movies/<movie_id>/on-deck", methods=["POST"])
def movie_on_deck(movie_id):
    """Park a movie on deck."""
    queue = get_queue()
    queue.set_on_deck(movie_id)
    return jsonify(queue.find(movie_id))


@app.route("/api/movies/<movie_id>/unrank", methods=["POST"])
def unrank_movie(movie_id):
    """Take a movie out of the ranking without marking it watched."""
    queue = get_queue()
    queue.unrank(movie_id)
    return jsonify(queue.find(movie_id))


@app.route("/api/movies/<movie_id>/watched", methods=["POST"])
def mark_movie_watched(movie_id):
    """Mark a movie watched, append an optional note and close the gap in the ranking."""
    data = request.json or {}
    watched_on = data.get("date")
    try:
        watched_on = from_iso_date(watched_on) if watched_on else get_today()
    except ValueError:
        return jsonify({"error": "date must be YYYY-MM-DD"}), 400

    queue = get_queue()
    queue.mark_watched(movie_id, watched_on, note=data.get("note"))
    return jsonify({"success": True, "movies": queue.listing()})


@app.route("/api/movies/<movie_id>", methods=["PUT"])
def update_movie(movie_id):
    """Edit a movie's title, priority or details."""
    data = request.json or {}
    clear_priority = "priority" in data and data["priority"] in (None, "")
    try:
        movie = get_queue().edit(
            movie_id,
            title=data.get("title"),
            priority=None if clear_priority else data.get("priority"),
            clear_priority=clear_priority,
            details={key: data[key] for key in DETAIL_FIELDS if key in data},
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(movie)


@app.route("/api/movies/<movie_id>", methods=["DELETE"])
def delete_movie(movie_id):
    """Delete a movie."""
    get_queue().delete(movie_id)
    return jsonify({"success": True})


@app.route("/api/movies/<movie_id>/schedule", methods=["POST"])
def schedule_movie(movie_id):
    """Schedule a movie as a focus on a day card."""
    data = request.json or {}
    target = data.get("target")
    if not target:
        return jsonify({"error": "target required"}), 400

    focus = get_queue().schedule_as_focus(movie_id, target)
    if focus is None:
        return jsonify({"success": True, "ignored": True})
    return jsonify(focus), 201


@app.route("/api/settings", methods=["GET"])
def get_settings():
    """Get current settings."""
    settings = load_settings()
    # Don't expose the store key, just indicate if it's set
    if settings.get("store_key"):
        settings["store_key_set"] = True
        settings["store_key"] = ""
    return jsonify(settings)


@app.route("/api/settings", methods=["POST"])
def update_settings():
    """Update settings."""
    data = request.json or {}
    settings = load_settings()

    if "store_url" in data:
        settings["store_url"] = (data["store_url"] or "").strip()

    # Only update key if a new one is provided
    if data.get("store_key"):
        settings["store_key"] = data["store_key"].strip()

    if "store_timeout" in data:
        try:
            settings["store_timeout"] = max(1, int(data["store_timeout"]))
        except (TypeError, ValueError):
            return jsonify({"error": "store_timeout must be a number of seconds"}), 400

    save_settings(settings)
    return jsonify({"success": True})


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    logger.info("Starting Dayboard on http://localhost:5050")
    app.run(debug=True, port=5050)


if __name__ == "__main__":
    main()
