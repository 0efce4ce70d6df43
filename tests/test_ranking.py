"""Tests for movie queue rank planning.

Every test builds a snapshot of {id, priority} records and checks the exact
mutations (and their order) the planner returns.
"""

import pytest

from dayboard.ranking import (
    ON_DECK,
    WATCHING,
    RankMutation,
    apply_mutations,
    max_strict_rank,
    plan_mark_done,
    plan_move,
    plan_on_deck,
    plan_rebalance,
    plan_unrank,
    priority_label,
    priority_label_compact,
    sort_queue,
    validate_priority,
)


def movies(**priorities):
    """movies(a=1, b=2) -> [{"id": "a", ...}, {"id": "b", ...}]"""
    return [{"id": movie_id, "title": movie_id, "priority": p} for movie_id, p in priorities.items()]


def priorities(items):
    return {item["id"]: item["priority"] for item in items}


class TestSwap:
    """Both ranks singly occupied: the two movies trade places."""

    def test_move_up_swaps(self):
        items = movies(top=1, a=2, b=3, deck=ON_DECK)
        mutations = plan_move(items, "b", "up")
        assert mutations == [RankMutation("a", 3), RankMutation("b", 2)]
        assert priorities(apply_mutations(items, mutations)) == {"top": 1, "a": 3, "b": 2, "deck": ON_DECK}

    def test_move_down_swaps(self):
        items = movies(a=1, b=2, c=3)
        assert plan_move(items, "a", "down") == [RankMutation("b", 1), RankMutation("a", 2)]

    def test_neighbour_written_first(self):
        """The other movie's write comes first in the list."""
        mutations = plan_move(movies(a=4, b=5, c=6), "c", "up")
        assert mutations[0].item_id == "b"
        assert mutations[-1].item_id == "c"


class TestBatch:
    """A shared rank on either side: only the clicked movie moves."""

    def test_down_out_of_batch(self):
        items = movies(top=1, a=2, b=2, c=2)
        assert plan_move(items, "a", "down") == [RankMutation("a", 3)]
        assert priorities(apply_mutations(items, plan_move(items, "a", "down"))) == {
            "top": 1, "a": 3, "b": 2, "c": 2,
        }

    def test_up_into_batch(self):
        items = movies(a=2, b=2, c=3)
        assert plan_move(items, "c", "up") == [RankMutation("c", 2)]

    def test_up_into_empty_rank(self):
        items = movies(a=1, c=3)
        assert plan_move(items, "c", "up") == [RankMutation("c", 2)]


class TestBounds:
    """Clicks that do nothing."""

    def test_rank_one_up(self):
        assert plan_move(movies(a=1, b=2), "a", "up") == []

    def test_watching_up(self):
        assert plan_move(movies(w=WATCHING, a=1), "w", "up") == []

    def test_unranked(self):
        assert plan_move(movies(a=None, b=1), "a", "up") == []
        assert plan_move(movies(a=None, b=1), "a", "down") == []

    def test_unknown_movie(self):
        assert plan_move(movies(a=1), "zzz", "down") == []

    def test_bad_direction(self):
        with pytest.raises(ValueError):
            plan_move(movies(a=1), "a", "sideways")


class TestWatching:
    """Rank 0 (watching now)."""

    def test_down_swaps_with_sole_rank_one(self):
        items = movies(w=WATCHING, a=1, b=2)
        mutations = plan_move(items, "w", "down")
        assert mutations == [RankMutation("a", WATCHING), RankMutation("w", 1)]
        assert priorities(apply_mutations(items, mutations)) == {"w": 1, "a": WATCHING, "b": 2}

    def test_down_into_batch_moves_alone(self):
        items = movies(w=WATCHING, a=1, b=1, c=2)
        assert plan_move(items, "w", "down") == [RankMutation("w", 1)]

    def test_down_into_empty_rank_one(self):
        items = movies(w=WATCHING, b=2)
        assert plan_move(items, "w", "down") == [RankMutation("w", 1)]

    def test_sole_watching_movie_down_goes_on_deck(self):
        assert plan_move(movies(w=WATCHING, deck=ON_DECK), "w", "down") == [RankMutation("w", ON_DECK)]


class TestOnDeck:
    """Rank 99 (on deck)."""

    def test_up_joins_bottom_of_ranking(self):
        items = movies(a=1, b=2, c=2, deck=ON_DECK)
        assert plan_move(items, "deck", "up") == [RankMutation("deck", 3)]

    def test_up_with_empty_ranking(self):
        assert plan_move(movies(deck=ON_DECK, other=ON_DECK), "deck", "up") == [RankMutation("deck", 1)]

    def test_up_with_only_watching(self):
        assert plan_move(movies(w=WATCHING, deck=ON_DECK), "deck", "up") == [RankMutation("deck", 1)]

    def test_down_unranks(self):
        assert plan_move(movies(a=1, deck=ON_DECK), "deck", "down") == [RankMutation("deck", None)]

    def test_sole_bottom_rank_collapses_to_on_deck(self):
        items = movies(a=1, b=2, c=3, d=4, e=5)
        assert plan_move(items, "e", "down") == [RankMutation("e", ON_DECK)]

    def test_shared_bottom_rank_does_not_collapse(self):
        items = movies(a=1, b=5, e=5)
        assert plan_move(items, "e", "down") == [RankMutation("e", 6)]

    def test_plan_on_deck_and_unrank(self):
        items = movies(a=3)
        assert plan_on_deck(items, "a") == [RankMutation("a", ON_DECK)]
        assert plan_unrank(items, "a") == [RankMutation("a", None)]
        assert plan_on_deck(items, "zzz") == []


class TestMarkDone:
    """Watching a movie closes the gap it leaves."""

    def test_rebalance_after_rank_two(self):
        items = movies(w=WATCHING, a=1, b=2, c=3, d=4, deck=ON_DECK, backlog=None)
        mutations = plan_mark_done(items, "b")
        assert mutations == [RankMutation("b", None), RankMutation("c", 2), RankMutation("d", 3)]
        assert priorities(apply_mutations(items, mutations)) == {
            "w": WATCHING, "a": 1, "b": None, "c": 2, "d": 3, "deck": ON_DECK, "backlog": None,
        }

    def test_on_deck_done_does_not_rebalance(self):
        items = movies(a=1, b=2, deck=ON_DECK)
        assert plan_mark_done(items, "deck") == [RankMutation("deck", None)]

    def test_unranked_done_does_not_rebalance(self):
        items = movies(a=1, backlog=None)
        assert plan_mark_done(items, "backlog") == [RankMutation("backlog", None)]

    def test_watching_done_shifts_everything_up(self):
        items = movies(w=WATCHING, a=1, b=2)
        assert plan_mark_done(items, "w") == [
            RankMutation("w", None), RankMutation("a", 0), RankMutation("b", 1),
        ]

    def test_rebalance_floor_is_zero(self):
        assert plan_rebalance(movies(a=0), -5) == [RankMutation("a", 0)]

    def test_batch_above_shifts_together(self):
        items = movies(a=1, b=3, c=3)
        assert plan_rebalance(items, 2) == [RankMutation("b", 2), RankMutation("c", 2)]


class TestQueueHelpers:
    """Sorting, labels and validation."""

    def test_max_strict_rank(self):
        assert max_strict_rank(movies(a=1, b=7, deck=ON_DECK, x=None)) == 7
        assert max_strict_rank(movies(deck=ON_DECK)) == -1

    def test_sort_queue(self):
        items = movies(zeta=None, beta=2, alpha=2, watching=WATCHING, deck=ON_DECK)
        assert [i["id"] for i in sort_queue(items)] == ["watching", "alpha", "beta", "deck", "zeta"]

    def test_apply_mutations_leaves_input_alone(self):
        items = movies(a=1)
        apply_mutations(items, [RankMutation("a", 2)])
        assert items[0]["priority"] == 1

    def test_labels(self):
        assert priority_label(None) == ""
        assert priority_label(WATCHING) == "Watching"
        assert priority_label(ON_DECK) == "On Deck"
        assert priority_label(4) == "4"
        assert priority_label_compact(ON_DECK) == "OD"
        assert priority_label_compact(WATCHING) == "Watching"

    @pytest.mark.parametrize("value, expected", [
        ("", None),
        ("   ", None),
        (None, None),
        ("3", 3),
        ("2.7", 2),
        (5, 5),
        ("0", 0),
    ])
    def test_validate_priority(self, value, expected):
        assert validate_priority(value) == expected

    @pytest.mark.parametrize("value", ["-1", "abc", -2, "nan", True])
    def test_validate_priority_rejects(self, value):
        with pytest.raises(ValueError):
            validate_priority(value)
