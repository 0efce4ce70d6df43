"""Planner service: tasks, plans and focuses on the day cards and in the drawer.

Holds an in-memory snapshot of the three collections, applies edits to it
optimistically and writes them through to the record store.
"""

import logging

from dayboard import buckets
from dayboard.buckets import bucket_sort_key, classify, next_sort_order, same_context
from dayboard.dates import to_iso_date
from dayboard.directives import ITEM_TYPES, parse_quick_add
from dayboard.optimistic import OptimisticUpdate
from dayboard.placement import (
    NONE_TOKEN,
    Day,
    decode,
    is_separator,
    placement_fields,
)
from dayboard.spans import clamp_end_date
from dayboard.store import StoreError, now_iso
from dayboard.windows import OPEN, WINDOW_NAMES, compute_windows

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "task": "tasks",
    "plan": "plans",
    "focus": "focuses",
}

# status values: (open, closed)
STATUSES = {
    "task": ("open", "done"),
    "plan": ("open", "done"),
    "focus": ("active", "archived"),
}


class ItemNotFound(LookupError):
    """No record with that id in the snapshot."""


def check_item_type(item_type):
    if item_type not in ITEM_TYPES:
        raise ValueError(f"Unknown item type: {item_type}")
    return item_type


def parse_start_time(day, start_time):
    """'HH:MM' on a pinned day -> local ISO timestamp, else None."""
    if not day or not start_time:
        return None
    hours, _, minutes = start_time.strip().partition(":")
    if not (hours.isdigit() and minutes.isdigit()):
        raise ValueError(f"Start time must be HH:MM, got {start_time!r}")
    if int(hours) > 23 or int(minutes) > 59:
        raise ValueError(f"Start time must be HH:MM, got {start_time!r}")
    return f"{day}T{int(hours):02d}:{int(minutes):02d}:00"


class Planner:
    """Snapshot of placeable records for one "today"."""

    def __init__(self, store, today):
        self.store = store
        self.today = today
        self.windows = compute_windows(today)
        self.items = {item_type: [] for item_type in COLLECTIONS}

    def load(self):
        """Replace the snapshot with what the store holds."""
        for item_type, collection in COLLECTIONS.items():
            self.items[item_type] = self.store.query(collection)
        return self

    def find(self, item_type, item_id):
        for record in self.items[check_item_type(item_type)]:
            if record["id"] == item_id:
                return record
        raise ItemNotFound(f"{item_type} not found: {item_id}")

    def board(self):
        """Day cards, drawer tabs and overdue list for every item type."""
        per_type = {
            item_type: classify(records, self.today, self.windows, spans=(item_type == "plan"))
            for item_type, records in self.items.items()
        }

        day_isos = list(per_type["task"].days)
        return {
            "today": to_iso_date(self.today),
            "windows": self.windows.to_dict(),
            "days": {
                iso: {item_type: b.days[iso] for item_type, b in per_type.items()}
                for iso in day_isos
            },
            "drawer": {
                name: {item_type: b.windows[name] for item_type, b in per_type.items()}
                for name in WINDOW_NAMES + (OPEN,)
            },
            "overdue": {item_type: b.overdue for item_type, b in per_type.items()},
        }

    def quick_add(self, raw, item_type="task", target=NONE_TOKEN, notes=None,
                  end_date=None, start_time=None):
        """Create an item from quick-add text typed into a card or drawer tab.

        Hashtags in the text override the card's placement and the selected
        type. Raises ValueError when nothing is left for a title.
        """
        check_item_type(item_type)
        default_placement = decode(NONE_TOKEN if is_separator(target) else (target or NONE_TOKEN))

        parsed = parse_quick_add(raw, default_placement, self.today, self.windows, item_type)
        if not parsed.title:
            raise ValueError("Title required")

        item_type = parsed.item_type
        open_status, _ = STATUSES[item_type]
        fields = {
            "title": parsed.title,
            "notes": (notes or "").strip() or None,
            "status": open_status,
        }
        fields.update(placement_fields(parsed.placement))

        if item_type == "plan":
            day = parsed.placement.date if isinstance(parsed.placement, Day) else None
            fields["end_date"] = clamp_end_date(day, end_date)
            fields["starts_at"] = parse_start_time(day, start_time)
        else:
            fields["sort_order"] = next_sort_order(self.items[item_type], parsed.placement)

        record = self.store.insert(COLLECTIONS[item_type], fields)
        self.items[item_type].append(record)
        logger.info("Added %s %s at %s", item_type, record["id"], fields["scheduled_for"]
                    or fields["window_start"] or "open")
        return record

    def move(self, item_type, item_id, token):
        """Move an item to the placement a menu token names.

        The separator entry is ignored and returns None. On a store failure
        the item's previous placement is restored and StoreError propagates.
        """
        if is_separator(token):
            return None

        placement = decode(token)
        record = self.find(item_type, item_id)
        update = OptimisticUpdate(record, placement_fields(placement))
        update.commit(lambda patch: self.store.update(COLLECTIONS[item_type], item_id, patch))
        return record

    def edit(self, item_type, item_id, title=None, notes=None, target=None, end_date=None):
        """Edit title, notes, placement and (plans) end date in one write."""
        record = self.find(item_type, item_id)
        patch = {}

        if title is not None:
            title = title.strip()
            if not title:
                raise ValueError("Title required")
            patch["title"] = title
        if notes is not None:
            patch["notes"] = notes.strip() or None
        if target is not None and not is_separator(target):
            patch.update(placement_fields(decode(target)))

        if item_type == "plan" and (end_date is not None or "scheduled_for" in patch):
            start = patch.get("scheduled_for", record.get("scheduled_for"))
            if end_date is None:
                end_date = record.get("end_date")
            patch["end_date"] = clamp_end_date(start, end_date)

        if not patch:
            return record

        update = OptimisticUpdate(record, patch)
        update.commit(lambda p: self.store.update(COLLECTIONS[item_type], item_id, p))
        return record

    def toggle_done(self, item_type, item_id):
        """Flip an item between its open and closed status."""
        record = self.find(item_type, item_id)
        open_status, closed_status = STATUSES[item_type]

        if record.get("status") == closed_status:
            patch = {"status": open_status}
            if item_type != "focus":
                patch["completed_at"] = None
        else:
            patch = {"status": closed_status}
            if item_type != "focus":
                patch["completed_at"] = now_iso()

        update = OptimisticUpdate(record, patch)
        update.commit(lambda p: self.store.update(COLLECTIONS[item_type], item_id, p))
        return record

    def delete(self, item_type, item_id):
        record = self.find(item_type, item_id)
        self.store.delete(COLLECTIONS[item_type], item_id)
        self.items[item_type].remove(record)
        logger.info("Deleted %s %s", item_type, item_id)

    def context_records(self, item_type, token):
        """Records sharing the card or tab a token names, in display order."""
        placement = decode(token)
        records = [r for r in self.items[check_item_type(item_type)] if same_context(r, placement)]
        return sorted(records, key=bucket_sort_key)

    def reorder(self, item_type, dragged_id, target_id, token, position="above"):
        """Drag one item above or below another in the same card or tab.

        Every record of the context gets a fresh sort_order. If a write
        fails midway the snapshot is reloaded from the store.
        """
        if item_type == "plan":
            raise ValueError("Plans are ordered by time, not by hand")

        context = self.context_records(item_type, token)
        updates = buckets.reorder(context, dragged_id, target_id, position)
        if not updates:
            return []

        by_id = {r["id"]: r for r in context}
        for record_id, sort_order in updates:
            by_id[record_id]["sort_order"] = sort_order

        try:
            for record_id, sort_order in updates:
                self.store.update(COLLECTIONS[item_type], record_id, {"sort_order": sort_order})
        except StoreError as e:
            logger.warning("Reorder of %s failed, reloading: %s", item_type, e)
            self.load()
            raise
        return updates
