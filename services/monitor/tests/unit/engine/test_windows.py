from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest
from src.domain.errors import InvalidQueryError
from src.engine.windows import (
    HOUR_MS,
    WindowGranularity,
    build_windows,
    find_window_index,
    resolve_granularity,
)


def utc(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 5, day, hour, minute, tzinfo=timezone.utc)


class TestBuildWindows:
    def test_hourly_windows_cover_floored_range(self):
        windows = build_windows(utc(1, 10, 15), utc(1, 12, 5))

        assert [w.label for w in windows] == [
            "2024-05-01T10:00:00.000Z",
            "2024-05-01T11:00:00.000Z",
            "2024-05-01T12:00:00.000Z",
        ]
        assert windows[1].start - windows[0].start == HOUR_MS

    def test_zero_length_range_has_one_window(self):
        windows = build_windows(utc(1, 10, 30), utc(1, 10, 30))
        assert len(windows) == 1
        assert windows[0].label == "2024-05-01T10:00:00.000Z"

    def test_exactly_48_hours_stays_hourly(self):
        windows = build_windows(utc(1, 0), utc(3, 0))
        assert len(windows) == 49

    def test_longer_ranges_use_daily_windows(self):
        windows = build_windows(utc(1, 10), utc(4, 9))

        assert [w.label for w in windows] == [
            "2024-05-01T00:00:00.000Z",
            "2024-05-02T00:00:00.000Z",
            "2024-05-03T00:00:00.000Z",
            "2024-05-04T00:00:00.000Z",
        ]

    def test_daily_windows_align_to_local_midnight(self):
        shanghai = ZoneInfo("Asia/Shanghai")
        windows = build_windows(utc(1, 10), utc(4, 9), tz=shanghai)

        # 2024-05-01 18:00 in Shanghai floors to 00:00 local = 16:00Z the day before
        assert windows[0].label == "2024-04-30T16:00:00.000Z"
        assert windows[-1].label == "2024-05-03T16:00:00.000Z"

    def test_windows_are_ascending_and_contiguous(self):
        windows = build_windows(utc(1, 0, 30), utc(2, 23, 59))
        starts = [w.start for w in windows]
        assert all(b - a == HOUR_MS for a, b in zip(starts, starts[1:]))

    def test_inverted_range_fails_fast(self):
        with pytest.raises(InvalidQueryError):
            build_windows(utc(2, 0), utc(1, 0))


def test_resolve_granularity_threshold():
    two_days = 48 * HOUR_MS
    assert resolve_granularity(0, two_days) is WindowGranularity.HOUR
    assert resolve_granularity(0, two_days + 1) is WindowGranularity.DAY
    assert resolve_granularity(10, 0) is WindowGranularity.HOUR


class TestFindWindowIndex:
    starts = [0, 10, 20]

    def test_before_first_window(self):
        assert find_window_index(self.starts, -1) == -1

    def test_window_start_is_inclusive(self):
        assert find_window_index(self.starts, 0) == 0
        assert find_window_index(self.starts, 10) == 1

    def test_inside_window(self):
        assert find_window_index(self.starts, 15) == 1

    def test_late_timestamps_fall_into_last_window(self):
        assert find_window_index(self.starts, 10_000) == 2
