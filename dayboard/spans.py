"""Multi-day plans.

A plan pinned to a day may carry an ``end_date``; it is then drawn on every
visible day from its start through that end date. Nothing is duplicated in
storage, the expansion happens when the day cards are built.
"""

from dayboard.placement import Day, placement_of


def clamp_end_date(start, end_date):
    """Keep an end date only when it does not precede the start day."""
    if not end_date:
        return None
    end_date = end_date.strip()[:10]
    if not end_date:
        return None
    if start and end_date < start:
        return None
    return end_date


def effective_end(plan, start):
    end_date = plan.get("end_date")
    if end_date and end_date[:10] >= start:
        return end_date[:10]
    return start


def occupied_days(plan, visible_days):
    """Visible ISO days covered by a plan, in visible order."""
    placement = placement_of(plan)
    if not isinstance(placement, Day):
        return []

    start = placement.date
    end = effective_end(plan, start)
    return [iso for iso in visible_days if start <= iso <= end]


def _plan_day_sort_key(plan):
    # Earlier starts first; on the same start day timed plans lead, by time
    starts_at = plan.get("starts_at")
    return (
        (plan.get("scheduled_for") or "")[:10],
        starts_at is None,
        starts_at or "",
        plan.get("created_at") or "",
    )


def plans_by_day(plans, visible_days):
    """Map each visible ISO day to the plans drawn on it."""
    by_day = {iso: [] for iso in visible_days}
    for plan in plans:
        for iso in occupied_days(plan, visible_days):
            by_day[iso].append(plan)

    for iso in by_day:
        by_day[iso].sort(key=_plan_day_sort_key)
    return by_day
