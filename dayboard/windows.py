"""Rolling planning windows: this/next week and this/next weekend."""

from dataclasses import dataclass

from dayboard.dates import (
    SATURDAY,
    SUNDAY,
    add_days,
    day_label,
    from_iso_date,
    js_weekday,
    start_of_week_monday,
    to_iso_date,
    upcoming_saturday,
    visible_days,
)
from dayboard.placement import WEEKEND, WORKWEEK, NONE_TOKEN, Window, encode

THIS_WEEK = "this_week"
THIS_WEEKEND = "this_weekend"
NEXT_WEEK = "next_week"
NEXT_WEEKEND = "next_weekend"
OPEN = "open"

# Drawer tab order
WINDOW_NAMES = (THIS_WEEK, THIS_WEEKEND, NEXT_WEEK, NEXT_WEEKEND)

WINDOW_LABELS = {
    THIS_WEEK: "This Week",
    THIS_WEEKEND: "This Weekend",
    NEXT_WEEK: "Next Week",
    NEXT_WEEKEND: "Next Weekend",
    OPEN: "Open",
}

WINDOW_KIND_OF = {
    THIS_WEEK: WORKWEEK,
    NEXT_WEEK: WORKWEEK,
    THIS_WEEKEND: WEEKEND,
    NEXT_WEEKEND: WEEKEND,
}

# Mon-Fri and Sat-Sun, counted from the anchor day
SPAN_DAYS = {WORKWEEK: 4, WEEKEND: 1}

# Order used when a pinned date is matched against window spans
_CLASSIFY_ORDER = (THIS_WEEK, NEXT_WEEK, THIS_WEEKEND, NEXT_WEEKEND)


@dataclass(frozen=True)
class PlanningWindows:
    this_week_start: str
    next_week_start: str
    this_weekend_start: str
    next_weekend_start: str

    def start_of(self, name):
        return getattr(self, f"{name}_start")

    def window_for(self, name):
        """Window placement for a window name."""
        return Window(WINDOW_KIND_OF[name], self.start_of(name))

    def span(self, name):
        """Inclusive (start, end) ISO dates covered by a window."""
        start = self.start_of(name)
        end = add_days(from_iso_date(start), SPAN_DAYS[WINDOW_KIND_OF[name]])
        return start, to_iso_date(end)

    def match(self, kind, start):
        """Name of the window with exactly this identity, or None."""
        if not kind or not start:
            return None
        for name in WINDOW_NAMES:
            if WINDOW_KIND_OF[name] == kind and self.start_of(name) == start:
                return name
        return None

    def classify_date(self, iso):
        """Name of the first window whose span contains a pinned date, or None."""
        for name in _CLASSIFY_ORDER:
            start, end = self.span(name)
            if start <= iso <= end:
                return name
        return None

    def to_dict(self):
        return {
            "this_week_start": self.this_week_start,
            "next_week_start": self.next_week_start,
            "this_weekend_start": self.this_weekend_start,
            "next_weekend_start": self.next_weekend_start,
        }


def compute_windows(today):
    """Derive the four planning windows from today.

    On Saturday and Sunday "this week" already means the coming Monday, while
    "this weekend" is still the weekend in progress until Sunday ends.
    """
    dow = js_weekday(today)

    base_monday = start_of_week_monday(today)
    if dow in (SATURDAY, SUNDAY):
        this_monday = add_days(base_monday, 7)
    else:
        this_monday = base_monday

    if dow == SATURDAY:
        this_saturday = today
    elif dow == SUNDAY:
        this_saturday = add_days(today, -1)
    else:
        this_saturday = upcoming_saturday(today)

    return PlanningWindows(
        this_week_start=to_iso_date(this_monday),
        next_week_start=to_iso_date(add_days(this_monday, 7)),
        this_weekend_start=to_iso_date(this_saturday),
        next_weekend_start=to_iso_date(add_days(this_saturday, 7)),
    )


def window_value(windows, name):
    """Placement token for a drawer tab ("open" included)."""
    if name == OPEN:
        return NONE_TOKEN
    return encode(windows.window_for(name))


def move_targets(today, windows):
    """Entries of the move menu: the seven day cards, then the parking tabs."""
    targets = []
    for index, d in enumerate(visible_days(today)):
        targets.append({
            "label": day_label(d, index),
            "value": f"D|{to_iso_date(d)}",
            "group": "days",
        })
    for name in WINDOW_NAMES + (OPEN,):
        targets.append({
            "label": WINDOW_LABELS[name],
            "value": window_value(windows, name),
            "group": "parking",
        })
    return targets
