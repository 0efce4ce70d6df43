"""Priority ranking for the movie queue.

Priorities are plain integers with two reserved values::

    None  unranked, not in the active queue
    0     watching right now
    1..N  the strict ranking, 1 first
    99    on deck, a loose holding area below the strict ranking

Several movies may share a rank (a batch). Moving a movie only ever swaps
with a neighbour when both ranks hold exactly one movie; otherwise the movie
moves alone and the ranks are allowed to go sparse until a movie is marked
watched, which closes the gap it leaves.

All functions here are pure: they read a snapshot of ``{id, priority}``
records and return the mutations to persist, in the order they must be
written.
"""

from dataclasses import dataclass
from typing import Optional

WATCHING = 0
ON_DECK = 99

UP = "up"
DOWN = "down"
DIRECTIONS = (UP, DOWN)


@dataclass(frozen=True)
class RankMutation:
    item_id: str
    priority: Optional[int]  # None clears the rank


def _find(items, item_id):
    for item in items:
        if item["id"] == item_id:
            return item
    return None


def count_at(items, priority):
    return sum(1 for item in items if item.get("priority") == priority)


def max_strict_rank(items):
    """Highest rank in use, ignoring unranked and on-deck movies. -1 if none."""
    ranks = [item["priority"] for item in items
             if item.get("priority") is not None and item["priority"] != ON_DECK]
    return max(ranks, default=-1)


def plan_move(items, item_id, direction):
    """Mutations for one up/down click on a movie.

    Returns an empty list when the click does nothing (unknown or unranked
    movie, "up" on the watching movie or on rank 1).
    """
    if direction not in DIRECTIONS:
        raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")

    me = _find(items, item_id)
    if me is None:
        return []

    p = me.get("priority")
    if p is None:
        return []

    if p == WATCHING and direction == UP:
        return []

    if p == ON_DECK:
        if direction == UP:
            # Join the bottom of the strict ranking
            return [RankMutation(item_id, max(1, max_strict_rank(items) + 1))]
        return [RankMutation(item_id, None)]

    if p == 1 and direction == UP:
        return []

    target = p - 1 if direction == UP else p + 1
    same_count = count_at(items, p)

    # Sole movie at the bottom rank drops straight to on deck
    if direction == DOWN and p == max_strict_rank(items) and same_count == 1:
        return [RankMutation(item_id, ON_DECK)]

    target_count = count_at(items, target)
    if not (same_count == 1 and target_count == 1):
        return [RankMutation(item_id, target)]

    other = next(item for item in items if item.get("priority") == target)
    # Neighbour first: a failure in between leaves a shared rank, not a hole
    return [RankMutation(other["id"], p), RankMutation(item_id, target)]


def plan_rebalance(items, former_priority):
    """Close the gap left by a movie that left the strict ranking."""
    if former_priority is None or former_priority == ON_DECK:
        return []

    mutations = []
    for item in items:
        p = item.get("priority")
        if p is None or p == ON_DECK or p <= former_priority:
            continue
        mutations.append(RankMutation(item["id"], max(0, p - 1)))
    return mutations


def plan_mark_done(items, item_id):
    """Unrank a watched movie, then shift every lower-ranked movie up by one."""
    me = _find(items, item_id)
    if me is None:
        return []

    remaining = [item for item in items if item["id"] != item_id]
    return [RankMutation(item_id, None)] + plan_rebalance(remaining, me.get("priority"))


def plan_on_deck(items, item_id):
    if _find(items, item_id) is None:
        return []
    return [RankMutation(item_id, ON_DECK)]


def plan_unrank(items, item_id):
    if _find(items, item_id) is None:
        return []
    return [RankMutation(item_id, None)]


def apply_mutations(items, mutations):
    """New snapshot with mutations applied. The input list is left alone."""
    changes = {m.item_id: m.priority for m in mutations}
    return [
        dict(item, priority=changes[item["id"]]) if item["id"] in changes else item
        for item in items
    ]


def sort_queue(items):
    """Queue order: priority ascending, unranked last, then title."""
    def sort_key(item):
        p = item.get("priority")
        return (p is None, p if p is not None else 0, (item.get("title") or "").lower())

    return sorted(items, key=sort_key)


def priority_label(p):
    if p is None:
        return ""
    if p == WATCHING:
        return "Watching"
    if p == ON_DECK:
        return "On Deck"
    return str(p)


def priority_label_compact(p):
    if p == ON_DECK:
        return "OD"
    return priority_label(p)


def validate_priority(value):
    """Parse a priority typed into an edit form.

    Blank means unranked. Anything else must be a non-negative number and is
    floored to an int.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("Priority must be blank or a non-negative number.")
    if isinstance(value, (int, float)):
        number = value
    else:
        text = str(value).strip()
        if text == "":
            return None
        try:
            number = float(text)
        except ValueError:
            raise ValueError("Priority must be blank or a non-negative number.") from None

    if number != number or number in (float("inf"), float("-inf")) or number < 0:
        raise ValueError("Priority must be blank or a non-negative number.")
    return int(number // 1)
