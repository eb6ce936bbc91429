"""Tests for raw record adapters."""

import logging
from datetime import date, datetime

import pytest

from leavesync.adapters import FlagAdapter, MeridiemAdapter, _Adapter, parse_date
from leavesync.errors import ValidationError
from leavesync.interval import Half, Interval, Kind


def test_parse_date_accepts_dates_and_iso_strings():
    assert parse_date(date(2024, 3, 1)) == date(2024, 3, 1)
    assert parse_date(datetime(2024, 3, 1, 9, 30)) == date(2024, 3, 1)
    assert parse_date("2024-03-01") == date(2024, 3, 1)
    assert parse_date("2024-03-01T00:00:00+00:00") == date(2024, 3, 1)


@pytest.mark.parametrize("value", ["yesterday", None, 20240301])
def test_parse_date_rejects_other_values(value):
    with pytest.raises(ValidationError, match="is not a date"):
        parse_date(value)


def test_adapter_requires_to_interval():
    class Incomplete(_Adapter):
        pass

    with pytest.raises(TypeError):
        Incomplete()


class TestMeridiemAdapter:
    @pytest.fixture
    def adapter(self) -> MeridiemAdapter:
        return MeridiemAdapter(
            {"101": Kind.HOLIDAY, "102": Kind.OTHER_LEAVE},
            ignored_reasons=["7"],
        )

    def test_whole_days(self, adapter):
        interval = adapter.to_interval(
            {"leave_type": 101, "start_date": "2024-03-01", "end_date": "2024-03-05"}
        )

        assert interval == Interval(
            kind="holiday", start_date=date(2024, 3, 1), end_date=date(2024, 3, 5)
        )

    def test_half_day_ends(self, adapter):
        interval = adapter.to_interval(
            {
                "leave_type": "102",
                "start_date": "2024-03-01",
                "end_date": "2024-03-05",
                "half_start": True,
                "half_start_am_pm": "pm",
                "half_end": True,
                "half_end_am_pm": "am",
            }
        )

        assert interval.kind == Kind.OTHER_LEAVE
        assert interval.start_half is Half.PM
        assert interval.end_half is Half.AM

    @pytest.mark.parametrize("marker, half", [("am", Half.AM), ("pm", Half.PM), ("PM", Half.PM)])
    def test_single_half_day_uses_marker(self, adapter, marker, half):
        interval = adapter.to_interval(
            {
                "leave_type": "101",
                "start_date": "2024-03-01",
                "end_date": "2024-03-01",
                "half_start": True,
                "half_start_am_pm": marker,
            }
        )

        assert interval.start_half is half
        assert interval.end_half is half

    def test_single_half_day_without_marker_is_invalid(self, adapter):
        with pytest.raises(ValidationError, match="am or pm"):
            adapter.to_interval(
                {
                    "leave_type": "101",
                    "start_date": "2024-03-01",
                    "end_date": "2024-03-01",
                    "half_start": True,
                }
            )

    def test_single_half_day_with_unknown_marker_is_invalid(self, adapter):
        with pytest.raises(ValidationError, match="evening is not a recognized meridiem"):
            adapter.to_interval(
                {
                    "leave_type": "101",
                    "start_date": "2024-03-01",
                    "end_date": "2024-03-01",
                    "half_end": True,
                    "half_end_am_pm": "evening",
                }
            )

    def test_unmapped_leave_type_is_ignored(self, adapter):
        record = {"leave_type": "999", "start_date": "2024-03-01", "end_date": "2024-03-01"}

        assert adapter.to_interval(record) is None

    def test_ignored_reason_is_ignored(self, adapter):
        record = {
            "leave_type": "101",
            "leave_reason": 7,
            "start_date": "2024-03-01",
            "end_date": "2024-03-01",
        }

        assert adapter.to_interval(record) is None

    def test_default_kind_for_untyped_feed(self):
        adapter = MeridiemAdapter(default_kind=Kind.SICKNESS)

        interval = adapter.to_interval({"start_date": "2024-03-01", "end_date": "2024-03-02"})

        assert interval.kind == Kind.SICKNESS

    def test_missing_field(self, adapter):
        with pytest.raises(ValidationError, match="missing 'end_date'"):
            adapter.to_interval({"leave_type": "101", "start_date": "2024-03-01"})

    def test_end_before_start(self, adapter):
        with pytest.raises(ValidationError, match="cannot end before it starts"):
            adapter.to_interval(
                {"leave_type": "101", "start_date": "2024-03-05", "end_date": "2024-03-01"}
            )

    def test_load_skips_invalid_records(self, adapter, caplog):
        records = [
            {"id": 1, "leave_type": "101", "start_date": "2024-03-05", "end_date": "2024-03-06"},
            {"id": 2, "leave_type": "101", "start_date": "nonsense", "end_date": "2024-03-06"},
            {"id": 3, "leave_type": "999", "start_date": "2024-03-01", "end_date": "2024-03-01"},
            {"id": 4, "leave_type": "102", "start_date": "2024-03-01", "end_date": "2024-03-01"},
        ]

        with caplog.at_level(logging.WARNING, logger="leavesync.adapters"):
            collection = adapter.load(records)

        assert [i.start_date for i in collection] == [date(2024, 3, 1), date(2024, 3, 5)]
        assert "Skipping invalid MeridiemAdapter record 2" in caplog.text


class TestFlagAdapter:
    @pytest.fixture
    def adapter(self) -> FlagAdapter:
        return FlagAdapter({"holiday": "11", "sickness": "12", "other_leave": 13})

    def test_whole_days(self, adapter):
        interval = adapter.to_interval(
            {"event_id": "11", "started_on": "2024-03-01", "ended_on": "2024-03-03"}
        )

        assert interval == Interval(
            kind="holiday", start_date=date(2024, 3, 1), end_date=date(2024, 3, 3)
        )

    def test_flags_become_halves(self, adapter):
        interval = adapter.to_interval(
            {
                "event_id": 13,
                "started_on": "2024-03-01",
                "ended_on": "2024-03-03",
                "half_day_at_start": True,
                "half_day_at_end": True,
            }
        )

        assert interval.kind == Kind.OTHER_LEAVE
        assert interval.start_half is Half.PM
        assert interval.end_half is Half.AM

    def test_legacy_single_half_day_is_a_morning(self, adapter):
        interval = adapter.to_interval(
            {
                "event_id": "12",
                "started_on": "2024-03-01",
                "ended_on": "2024-03-01",
                "half_day_at_start": True,
                "half_day_at_end": True,
            }
        )

        assert (interval.start_half, interval.end_half) == (Half.AM, Half.AM)

    def test_unknown_event_is_ignored(self, adapter):
        record = {"event_id": "99", "started_on": "2024-03-01", "ended_on": "2024-03-01"}

        assert adapter.to_interval(record) is None

    @pytest.mark.parametrize(
        "start_half, end_half",
        [(Half.AM, Half.PM), (Half.PM, Half.PM), (Half.AM, Half.AM)],
    )
    def test_single_day_records_round_trip(self, adapter, start_half, end_half):
        interval = Interval(
            kind="sickness",
            start_date=date(2024, 3, 1),
            end_date=date(2024, 3, 1),
            start_half=start_half,
            end_half=end_half,
        )

        assert adapter.to_interval(adapter.to_record(interval)) == interval

    def test_to_record(self, adapter):
        interval = Interval(
            kind="holiday",
            start_date=date(2024, 3, 1),
            end_date=date(2024, 3, 4),
            start_half=Half.PM,
        )

        assert adapter.to_record(interval) == {
            "event_id": "11",
            "started_on": "2024-03-01",
            "ended_on": "2024-03-04",
            "half_day_at_start": True,
            "half_day_at_end": False,
        }

    def test_to_record_without_event_id(self):
        adapter = FlagAdapter({"holiday": "11"})
        interval = Interval(
            kind="sickness", start_date=date(2024, 3, 1), end_date=date(2024, 3, 1)
        )

        with pytest.raises(ValidationError, match="No event id configured for sickness"):
            adapter.to_record(interval)
