"""Calendar arithmetic on local calendar days.

Dates travel through the board as ``YYYY-MM-DD`` strings. Those compare
lexicographically in chronological order, and the classifier relies on that.
"""

from datetime import date, datetime, timedelta

# Weekday numbering used throughout the board: 0=Sunday ... 6=Saturday
SUNDAY = 0
SATURDAY = 6

MAX_ISO_DATE = "9999-12-31"


def to_iso_date(d):
    """Format a date (or datetime) as YYYY-MM-DD."""
    if isinstance(d, datetime):
        d = d.date()
    return d.isoformat()


def from_iso_date(iso):
    """Parse YYYY-MM-DD into a date. Longer ISO timestamps keep only the day."""
    return date.fromisoformat(iso[:10])


def js_weekday(d):
    """Day of week with Sunday=0 ... Saturday=6."""
    return (d.weekday() + 1) % 7


def add_days(d, n):
    return d + timedelta(days=n)


def start_of_week_monday(d):
    """Map any date to the Monday of its week."""
    # Monday is weekday 0
    return d - timedelta(days=d.weekday())


def upcoming_saturday(d):
    """Next Saturday on or after d (d itself if it is a Saturday)."""
    days_until_sat = (SATURDAY - js_weekday(d) + 7) % 7
    return d + timedelta(days=days_until_sat)


def next_weekday_on_or_after(d, target_weekday):
    """Next date strictly after d that falls on target_weekday (0=Sunday).

    "#monday" typed on a Monday means the following Monday, never today.
    """
    delta = (target_weekday - js_weekday(d) + 7) % 7
    if delta == 0:
        delta = 7
    return d + timedelta(days=delta)


def visible_days(today, count=7):
    """The rolling day range shown as cards, starting at today."""
    return [today + timedelta(days=i) for i in range(count)]


def day_label(d, index):
    """Card heading: Today, Tomorrow, then the weekday name."""
    if index == 0:
        return "Today"
    if index == 1:
        return "Tomorrow"
    return d.strftime("%A")

