"""Tests for placement tokens and the persisted placement triplet."""

import pytest

from dayboard.placement import (
    NO_PLACEMENT,
    Day,
    PlacementError,
    Window,
    decode,
    encode,
    is_separator,
    location_value_for,
    placement_fields,
    placement_of,
)


class TestTokens:
    """encode / decode."""

    @pytest.mark.parametrize("placement, token", [
        (NO_PLACEMENT, "none"),
        (Day("2026-01-05"), "D|2026-01-05"),
        (Window("workweek", "2026-01-05"), "P|workweek|2026-01-05"),
        (Window("weekend", "2026-01-10"), "P|weekend|2026-01-10"),
    ])
    def test_encode_and_decode(self, placement, token):
        assert encode(placement) == token
        assert decode(token) == placement
        assert decode(encode(placement)) == placement

    def test_separator_is_recognised(self):
        assert is_separator("__sep")
        assert not is_separator("none")

    def test_separator_does_not_decode(self):
        """Callers must check is_separator() first."""
        with pytest.raises(PlacementError):
            decode("__sep")

    @pytest.mark.parametrize("token", [
        "",
        "D|",
        "D|tomorrow",
        "D|2026-01-05|x",
        "D|2026-02-30",
        "D|2026-99-99",
        "D|2025-13-01",
        "P|weekend|2026-02-31",
        "P|month|2026-01-05",
        "P|workweek",
        "X|2026-01-05",
    ])
    def test_malformed_tokens(self, token):
        with pytest.raises(PlacementError):
            decode(token)

    def test_placement_error_is_value_error(self):
        with pytest.raises(ValueError):
            decode("garbage")


class TestFields:
    """Mapping to and from scheduled_for / window_kind / window_start."""

    def test_day_clears_window(self):
        assert placement_fields(Day("2026-01-05")) == {
            "scheduled_for": "2026-01-05", "window_kind": None, "window_start": None,
        }

    def test_window_clears_day(self):
        assert placement_fields(Window("weekend", "2026-01-10")) == {
            "scheduled_for": None, "window_kind": "weekend", "window_start": "2026-01-10",
        }

    def test_none_clears_everything(self):
        assert placement_fields(NO_PLACEMENT) == {
            "scheduled_for": None, "window_kind": None, "window_start": None,
        }

    def test_placement_of_prefers_day(self):
        """A record carrying both a day and a window reads as the day."""
        record = {"scheduled_for": "2026-01-06", "window_kind": "workweek", "window_start": "2026-01-05"}
        assert placement_of(record) == Day("2026-01-06")
        assert location_value_for(record) == "D|2026-01-06"

    def test_placement_of_window(self):
        record = {"scheduled_for": None, "window_kind": "workweek", "window_start": "2026-01-05"}
        assert location_value_for(record) == "P|workweek|2026-01-05"

    def test_half_set_window_reads_as_none(self):
        record = {"scheduled_for": None, "window_kind": "workweek", "window_start": None}
        assert location_value_for(record) == "none"

    def test_empty_record(self):
        assert placement_of({}) == NO_PLACEMENT
