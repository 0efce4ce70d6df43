"""Movie queue: ranked backlog on top of the record store.

Rank changes are planned by dayboard.ranking, applied to the local snapshot
right away and then written in order. Once any write fails the snapshot is
not trusted any more: the whole queue is reloaded from the store and the
error is passed on.
"""

import logging

from dayboard import ranking
from dayboard.dates import to_iso_date
from dayboard.placement import Day, Unplaced, Window, decode, is_separator
from dayboard.store import StoreError

logger = logging.getLogger(__name__)

MOVIES = "movie_tracker"
FOCUSES = "focuses"

TO_WATCH = "to_watch"
WATCHED = "watched"

CATEGORIES = ("movie", "documentary")
TEXT_FIELDS = ("source", "location", "note")
DETAIL_FIELDS = ("category", "year", "length_minutes") + TEXT_FIELDS

MIN_YEAR = 1880
MAX_YEAR = 2100


class MovieNotFound(LookupError):
    """No queued movie with that id."""


def _blank(value):
    return value is None or str(value).strip() == ""


def parse_year(value):
    """Blank -> None, else a year between 1880 and 2100."""
    if _blank(value):
        return None
    try:
        year = float(str(value).strip())
    except ValueError:
        year = None
    if year is None or year != year or not MIN_YEAR <= year <= MAX_YEAR:
        raise ValueError("Year must be blank or a valid year (e.g. 1999).")
    return int(year)


def parse_length(value):
    """Running time as minutes or 'H:MM'. Blank -> None.

    Examples:
        "95"   -> 95
        "1:35" -> 95
    """
    if _blank(value):
        return None
    text = str(value).strip()
    hours, sep, minutes = text.partition(":")
    if sep:
        if not (hours.isdigit() and minutes.isdigit()) or int(minutes) >= 60:
            raise ValueError("Length must be minutes or H:MM.")
        total = int(hours) * 60 + int(minutes)
    else:
        try:
            total = float(text)
        except ValueError:
            raise ValueError("Length must be minutes or H:MM.") from None
        if total != total or total in (float("inf"), float("-inf")):
            raise ValueError("Length must be minutes or H:MM.")
        total = int(total // 1)
    if total <= 0:
        raise ValueError("Length must be minutes or H:MM.")
    return total


def clean_details(details):
    """Validated detail fields. Only the keys present in details come back."""
    cleaned = {}
    for key in DETAIL_FIELDS:
        if key not in details:
            continue
        value = details[key]
        if key == "category":
            value = str(value or "movie").strip().lower()
            if value not in CATEGORIES:
                raise ValueError(f"Category must be one of {', '.join(CATEGORIES)}.")
        elif key == "year":
            value = parse_year(value)
        elif key == "length_minutes":
            value = parse_length(value)
        else:
            value = None if _blank(value) else str(value).strip()
        cleaned[key] = value
    return cleaned


def merge_note(existing, extra):
    """Append a watched note to the movie's note on a new line."""
    existing = (existing or "").strip()
    extra = (extra or "").strip()
    if not extra:
        return existing or None
    if not existing:
        return extra
    return f"{existing}\n{extra}"


class MovieQueue:
    """Snapshot of the to-watch movies and their ranks."""

    def __init__(self, store):
        self.store = store
        self.items = []

    def load(self):
        """Reload the queue from the store (the source of truth)."""
        self.items = ranking.sort_queue(self.store.query(MOVIES, {"status": TO_WATCH}))
        return self

    def find(self, movie_id):
        for item in self.items:
            if item["id"] == movie_id:
                return item
        raise MovieNotFound(f"Movie not found: {movie_id}")

    def listing(self):
        """Queue in display order with priority labels."""
        return [
            dict(item,
                 label=ranking.priority_label(item.get("priority")),
                 label_compact=ranking.priority_label_compact(item.get("priority")))
            for item in self.items
        ]

    def add(self, title, priority=None, details=None):
        """Add a movie to the backlog.

        Args:
            title: Movie title, required
            priority: Rank as typed into the form; blank leaves it unranked
            details: Optional category, year, length_minutes, source,
                location and note
        """
        title = (title or "").strip()
        if not title:
            raise ValueError("Title required")
        fields = {
            "title": title,
            "status": TO_WATCH,
            "priority": ranking.validate_priority(priority),
            "category": "movie",
        }
        fields.update(clean_details(details or {}))
        record = self.store.insert(MOVIES, fields)
        self.items = ranking.sort_queue(self.items + [record])
        return record

    def _persist(self, mutations):
        """Apply mutations locally, then write them in order."""
        if not mutations:
            return []

        self.items = ranking.sort_queue(ranking.apply_mutations(self.items, mutations))
        try:
            for mutation in mutations:
                self.store.update(MOVIES, mutation.item_id, {"priority": mutation.priority})
        except StoreError as e:
            logger.warning("Rank update failed, reloading queue: %s", e)
            self.load()
            raise
        logger.debug("Rank mutations written: %s", mutations)
        return mutations

    def move(self, movie_id, direction):
        """One up/down click. Returns the mutations written."""
        self.find(movie_id)
        return self._persist(ranking.plan_move(self.items, movie_id, direction))

    def set_on_deck(self, movie_id):
        self.find(movie_id)
        return self._persist(ranking.plan_on_deck(self.items, movie_id))

    def unrank(self, movie_id):
        self.find(movie_id)
        return self._persist(ranking.plan_unrank(self.items, movie_id))

    def edit(self, movie_id, title=None, priority=None, clear_priority=False, details=None):
        """Edit a movie's title, details and/or set its priority by hand."""
        movie = self.find(movie_id)
        patch = {}
        if title is not None:
            title = title.strip()
            if not title:
                raise ValueError("Title required")
            patch["title"] = title
        if clear_priority:
            patch["priority"] = None
        elif priority is not None:
            patch["priority"] = ranking.validate_priority(priority)
        patch.update(clean_details(details or {}))
        if not patch:
            return movie

        try:
            updated = self.store.update(MOVIES, movie_id, patch)
        except StoreError:
            self.load()
            raise
        movie.update(updated)
        self.items = ranking.sort_queue(self.items)
        return movie

    def mark_watched(self, movie_id, watched_on, note=None):
        """Take a movie off the queue and close the rank it leaves behind.

        The rebalance is planned over the ranks read back from the store
        rather than the local snapshot. The watched movie's own write comes
        first and carries the status, date and merged note. The queue is
        reloaded once done.
        """
        movie = self.find(movie_id)
        watched_fields = {
            "status": WATCHED,
            "date_watched": to_iso_date(watched_on),
            "note": merge_note(movie.get("note"), note),
        }

        try:
            live = self.store.query(MOVIES, {"status": TO_WATCH})
            mutations = (ranking.plan_mark_done(live, movie_id)
                         or [ranking.RankMutation(movie_id, None)])
            for index, mutation in enumerate(mutations):
                fields = {"priority": mutation.priority}
                if index == 0:
                    fields.update(watched_fields)
                self.store.update(MOVIES, mutation.item_id, fields)
        except StoreError as e:
            logger.warning("Marking %s watched failed, reloading queue: %s", movie_id, e)
            self.load()
            raise

        self.load()
        return movie_id

    def delete(self, movie_id):
        self.find(movie_id)
        self.store.delete(MOVIES, movie_id)
        self.items = [item for item in self.items if item["id"] != movie_id]

    def schedule_as_focus(self, movie_id, token):
        """Put a movie on a day card as a focus.

        A window target schedules it on the window's first day. "Open" and
        the separator do nothing and return None.
        """
        movie = self.find(movie_id)
        if is_separator(token):
            return None

        placement = decode(token)
        if isinstance(placement, Unplaced):
            return None
        if isinstance(placement, Day):
            scheduled_for = placement.date
        elif isinstance(placement, Window):
            scheduled_for = placement.start

        return self.store.insert(FOCUSES, {
            "title": movie["title"],
            "scheduled_for": scheduled_for,
            "window_kind": None,
            "window_start": None,
            "content_category": "movies",
            "status": "active",
        })
