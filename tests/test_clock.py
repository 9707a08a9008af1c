"""Unit tests for wall-clock helpers and the observational duty timer."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from dutytrip.domain.clock import format_elapsed, localize, system_clock

TZ = ZoneInfo("Asia/Kolkata")
START = datetime(2024, 3, 1, 9, 0, tzinfo=TZ)


class TestFormatElapsed:
    def test_formats_hours_minutes_seconds(self):
        assert format_elapsed(START, START + timedelta(hours=1, minutes=2, seconds=3)) == "01:02:03"

    def test_hours_do_not_wrap_at_a_day(self):
        assert format_elapsed(START, START + timedelta(hours=27, seconds=9)) == "27:00:09"

    def test_future_start_reads_zero(self):
        assert format_elapsed(START, START - timedelta(minutes=1)) == "00:00:00"


class TestLocalize:
    def test_naive_gets_zone(self):
        assert localize(datetime(2024, 3, 1, 9, 0), TZ) == START

    def test_aware_is_untouched(self):
        moment = datetime(2024, 3, 1, 3, 30, tzinfo=timezone.utc)
        assert localize(moment, TZ) is moment

    def test_none_passes_through(self):
        assert localize(None, TZ) is None


def test_system_clock_is_zoned_and_whole_seconds():
    now = system_clock(TZ)()
    assert now.tzinfo is TZ
    assert now.microsecond == 0
