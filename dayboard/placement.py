"""Placement values and their token form.

An item is either unplaced, pinned to one day, or parked in a named window
(a workweek anchored on its Monday or a weekend anchored on its Saturday).
The token form (``none``, ``D|2026-01-05``, ``P|workweek|2026-01-05``) is used
by move menus and the quick-add defaults; records store the triplet
``scheduled_for`` / ``window_kind`` / ``window_start``.
"""

from dataclasses import dataclass

from dayboard.dates import from_iso_date

WORKWEEK = "workweek"
WEEKEND = "weekend"
WINDOW_KINDS = (WORKWEEK, WEEKEND)

NONE_TOKEN = "none"
SEPARATOR_TOKEN = "__sep"

PLACEMENT_FIELDS = ("scheduled_for", "window_kind", "window_start")


class PlacementError(ValueError):
    """Raised for a token that is not a placement."""


@dataclass(frozen=True)
class Unplaced:
    """No day and no window ("Open")."""


@dataclass(frozen=True)
class Day:
    date: str


@dataclass(frozen=True)
class Window:
    kind: str
    start: str


NO_PLACEMENT = Unplaced()


def encode(placement):
    """Placement -> token string."""
    if isinstance(placement, Day):
        return f"D|{placement.date}"
    if isinstance(placement, Window):
        return f"P|{placement.kind}|{placement.start}"
    return NONE_TOKEN


def is_separator(token):
    """True for the disabled separator entry of a move menu."""
    return token == SEPARATOR_TOKEN


def decode(token):
    """Token string -> placement.

    Raises PlacementError for anything else, including the separator, so a
    caller that forgot to check is_separator() cannot apply it by accident.
    """
    if token == NONE_TOKEN:
        return NO_PLACEMENT

    parts = (token or "").split("|")
    if parts[0] == "D" and len(parts) == 2 and _looks_like_iso(parts[1]):
        return Day(parts[1])
    if (parts[0] == "P" and len(parts) == 3
            and parts[1] in WINDOW_KINDS and _looks_like_iso(parts[2])):
        return Window(parts[1], parts[2])

    raise PlacementError(f"Not a placement token: {token!r}")


def _looks_like_iso(value):
    """True for a real calendar day written as YYYY-MM-DD."""
    if not (len(value) == 10 and value[4] == "-" and value[7] == "-"
            and value.replace("-", "").isdigit()):
        return False
    try:
        from_iso_date(value)
    except ValueError:
        return False
    return True


def placement_fields(placement):
    """Persisted triplet for a placement. All three keys are always present."""
    if isinstance(placement, Day):
        return {"scheduled_for": placement.date, "window_kind": None, "window_start": None}
    if isinstance(placement, Window):
        return {"scheduled_for": None, "window_kind": placement.kind, "window_start": placement.start}
    return dict.fromkeys(PLACEMENT_FIELDS)


def placement_of(record):
    """Read a record's placement, preferring Day over Window over none."""
    scheduled_for = record.get("scheduled_for")
    if scheduled_for:
        return Day(scheduled_for[:10])
    kind = record.get("window_kind")
    start = record.get("window_start")
    if kind and start:
        return Window(kind, start[:10])
    return NO_PLACEMENT


def location_value_for(record):
    """Token describing where a record currently lives."""
    return encode(placement_of(record))
