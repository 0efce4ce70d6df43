"""Bucket classification for the day cards and the parking drawer.

Every placeable record (task, plan, focus) lands in at most one of:

- one of the seven visible day cards (pinned to a day in range),
- one of the four named windows (parked there, or pinned to a day outside
  the card range that falls inside the window's span),
- "open" (no day, no window),
- the overdue list (pinned before today and still open).

A record parked in a window that no longer matches any of the four computed
windows is shown nowhere until the windows roll round to it again.
"""

from dataclasses import dataclass, field

from dayboard.dates import MAX_ISO_DATE, to_iso_date, visible_days
from dayboard.placement import Day, Unplaced, Window, placement_of
from dayboard.spans import effective_end, plans_by_day
from dayboard.windows import OPEN, WINDOW_NAMES

OPEN_STATUSES = ("open", "active")


@dataclass
class Board:
    days: dict = field(default_factory=dict)
    windows: dict = field(default_factory=dict)
    overdue: list = field(default_factory=list)


def is_open(record):
    """Records without a status field count as open."""
    status = record.get("status")
    return status is None or status in OPEN_STATUSES


def effective_date(record):
    """Date a record sorts by; undated records sort after all dated ones."""
    placement = placement_of(record)
    if isinstance(placement, Day):
        return placement.date
    if isinstance(placement, Window):
        return placement.start
    return MAX_ISO_DATE


def bucket_sort_key(record):
    sort_order = record.get("sort_order")
    return (
        effective_date(record),
        sort_order is None,
        sort_order if sort_order is not None else 0,
        record.get("created_at") or "",
    )


def drawer_bucket(record, windows, range_start, range_end):
    """Name of the drawer tab a record belongs to, or None."""
    placement = placement_of(record)

    if isinstance(placement, Day):
        if range_start <= placement.date <= range_end:
            return None
        return windows.classify_date(placement.date)

    if isinstance(placement, Window):
        # Stale windows match nothing and are left out
        return windows.match(placement.kind, placement.start)

    # Half-set windows (kind without start or the reverse) are not "open"
    if record.get("window_kind") or record.get("window_start"):
        return None
    return OPEN


def _is_overdue(record, placement, range_start, spans):
    if not isinstance(placement, Day) or placement.date >= range_start:
        return False
    if not is_open(record):
        return False
    if spans and effective_end(record, placement.date) >= range_start:
        # A multi-day plan still running today is drawn on its cards instead
        return False
    return True


def classify(records, today, windows, day_count=7, spans=False):
    """Sort records into day cards, drawer tabs and the overdue list.

    Args:
        records: Task, plan or focus records of one collection
        today: Current local date
        windows: PlanningWindows computed for today
        day_count: Number of visible day cards
        spans: True for plans, which may cover several days via end_date
    """
    day_isos = [to_iso_date(d) for d in visible_days(today, day_count)]
    range_start, range_end = day_isos[0], day_isos[-1]

    board = Board(
        days={iso: [] for iso in day_isos},
        windows={name: [] for name in WINDOW_NAMES + (OPEN,)},
    )

    for record in records:
        placement = placement_of(record)

        if _is_overdue(record, placement, range_start, spans):
            board.overdue.append(record)

        if not spans and isinstance(placement, Day) and placement.date in board.days:
            board.days[placement.date].append(record)

        which = drawer_bucket(record, windows, range_start, range_end)
        if which:
            board.windows[which].append(record)

    if spans:
        board.days = plans_by_day(records, day_isos)
    else:
        for iso in board.days:
            board.days[iso].sort(key=bucket_sort_key)

    for name in board.windows:
        board.windows[name].sort(key=bucket_sort_key)
    board.overdue.sort(key=bucket_sort_key)
    return board


def same_context(record, placement):
    """True when a record lives in the same card or tab as placement."""
    current = placement_of(record)
    if isinstance(placement, Unplaced):
        return (isinstance(current, Unplaced)
                and not record.get("window_kind") and not record.get("window_start"))
    return current == placement


def next_sort_order(records, placement):
    """sort_order that puts a new record at the bottom of its context."""
    orders = [r.get("sort_order") or 0 for r in records if same_context(r, placement)]
    return max(orders, default=-1) + 1


def reorder(context_records, dragged_id, target_id, position="above"):
    """Move one record next to another inside a context.

    Returns [(id, sort_order)] for the whole context in its new order, or an
    empty list when either id is not part of the context.
    """
    ids = [r["id"] for r in context_records]
    if dragged_id not in ids or target_id not in ids:
        return []

    dragged_index = ids.index(dragged_id)
    target_index = ids.index(target_id)
    ids.pop(dragged_index)

    # Indices after the dragged record shift down by one once it is removed
    if position == "below":
        insert_index = target_index if dragged_index < target_index else target_index + 1
    else:
        insert_index = target_index - 1 if dragged_index < target_index else target_index
    ids.insert(insert_index, dragged_id)

    return [(record_id, index) for index, record_id in enumerate(ids)]
