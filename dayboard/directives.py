"""Quick-add hashtag directives.

``"buy milk #tomorrow #task"`` becomes a task titled "buy milk" pinned to
tomorrow. Tags are folded left to right into an accumulator, one field per
directive kind, so the last placement tag and the last type tag win.
Anything that is not a known tag stays in the title untouched.
"""

import re
from dataclasses import dataclass

from dayboard.dates import add_days, next_weekday_on_or_after, to_iso_date
from dayboard.placement import NO_PLACEMENT, Day
from dayboard.windows import NEXT_WEEK, NEXT_WEEKEND, THIS_WEEK, THIS_WEEKEND

ITEM_TYPES = ("task", "plan", "focus")

TYPE_TAGS = {
    "task": "task",
    "tasks": "task",
    "plan": "plan",
    "plans": "plan",
    "focus": "focus",
    "focuses": "focus",
}

WINDOW_TAGS = {
    "thisweek": THIS_WEEK,
    "week": THIS_WEEK,
    "thisweekend": THIS_WEEKEND,
    "weekend": THIS_WEEKEND,
    "nextweek": NEXT_WEEK,
    "nextweekend": NEXT_WEEKEND,
}

NO_DATE_TAGS = ("nodate", "someday", "later")

WEEKDAY_TAGS = {
    "sun": 0,
    "sunday": 0,
    "mon": 1,
    "monday": 1,
    "tue": 2,
    "tues": 2,
    "tuesday": 2,
    "wed": 3,
    "weds": 3,
    "wednesday": 3,
    "thu": 4,
    "thur": 4,
    "thurs": 4,
    "thursday": 4,
    "fri": 5,
    "friday": 5,
    "sat": 6,
    "saturday": 6,
}

_NON_LETTERS = re.compile(r"[^a-z]")


@dataclass(frozen=True)
class ParsedAdd:
    title: str
    placement: object
    item_type: str


@dataclass
class _Accumulator:
    placement: object
    item_type: str
    kept: list


def normalize_tag(token):
    """'#Next-Week!' -> 'nextweek'."""
    return _NON_LETTERS.sub("", token[1:].lower())


def _classify(token, today, windows):
    """Return (kind, value) for a token; kind is 'type', 'placement' or 'keep'."""
    if not token.startswith("#") or len(token) < 2:
        return "keep", token

    tag = normalize_tag(token)

    if tag in TYPE_TAGS:
        return "type", TYPE_TAGS[tag]
    if tag == "today":
        return "placement", Day(to_iso_date(today))
    if tag == "tomorrow":
        return "placement", Day(to_iso_date(add_days(today, 1)))
    if tag in WINDOW_TAGS:
        return "placement", windows.window_for(WINDOW_TAGS[tag])
    if tag in NO_DATE_TAGS:
        return "placement", NO_PLACEMENT
    if tag in WEEKDAY_TAGS:
        return "placement", Day(to_iso_date(next_weekday_on_or_after(today, WEEKDAY_TAGS[tag])))

    # Unknown hashtag stays in the title
    return "keep", token


def parse_quick_add(raw, default_placement, today, windows, default_type="task"):
    """Split quick-add text into a title, a placement and an item type.

    Args:
        raw: Text typed by the user
        default_placement: Placement of the card or tab the text was typed into
        today: Current local date
        windows: PlanningWindows computed for today
        default_type: Item type selected in the add form

    The returned title may be empty; callers must refuse to create an
    untitled item.
    """
    acc = _Accumulator(placement=default_placement, item_type=default_type, kept=[])

    for token in (raw or "").split():
        kind, value = _classify(token, today, windows)
        if kind == "type":
            acc.item_type = value
        elif kind == "placement":
            acc.placement = value
        else:
            acc.kept.append(value)

    return ParsedAdd(
        title=" ".join(acc.kept).strip(),
        placement=acc.placement,
        item_type=acc.item_type,
    )
