import json

import pytest

from sleepsync.exceptions.errors import MalformedRecord
from sleepsync.models import SleepSession, SleepStats
from sleepsync.models.sleep_stats import decode_float, decode_int


def test_session_decodes_open_and_closed_records():
    open_session = SleepSession.decode('{"start": 1000, "end": null}')
    closed = SleepSession.decode('{"start": 1000, "end": 3601000}')

    assert open_session.is_open
    assert not closed.is_open
    assert closed.hours == pytest.approx(1.0)


def test_session_without_end_is_open():
    assert SleepSession.decode('{"start": 5}').is_open


def test_session_encodes_end_as_null():
    assert json.loads(SleepSession(start=7).encode()) == {"start": 7, "end": None}


@pytest.mark.parametrize("raw", [
    "not json",
    "[]",
    '{"end": 10}',
    '{"start": "yesterday", "end": null}',
    '{"start": 100, "end": 50}',
])
def test_malformed_session_raises_malformed_record(raw):
    with pytest.raises(MalformedRecord) as exc_info:
        SleepSession.decode(raw)
    assert exc_info.value.raw == raw


def test_stats_decode_absent_fields_as_zero():
    stats = SleepStats.from_hash({})
    assert stats == SleepStats()
    assert stats.good_night_percentage == 0.0


def test_stats_hash_uses_store_field_names():
    stats = SleepStats(sleep_debt_hours=-1.5, good_sleep_streak=2, best_streak=4, total_nights=5, good_nights=3)
    data = stats.to_hash()

    assert data == {
        "sleepDebt": "-1.5",
        "goodSleepStreak": "2",
        "bestStreak": "4",
        "totalNights": "5",
        "goodNights": "3",
    }
    assert SleepStats.from_hash(data) == stats
    assert stats.good_night_percentage == pytest.approx(60.0)


def test_numeric_decoders():
    assert decode_float(None) == 0.0
    assert decode_float("") == 0.0
    assert decode_float("2.25") == 2.25
    assert decode_int("3") == 3
    assert decode_int("3.0") == 3
    with pytest.raises(MalformedRecord):
        decode_int("three", "totalNights")


@pytest.mark.parametrize("raw", ["nan", "inf", "-inf"])
def test_non_finite_numbers_are_malformed(raw):
    with pytest.raises(MalformedRecord):
        decode_float(raw, "sleepDebt")


def test_salvage_keeps_readable_stats_fields():
    stats = SleepStats.salvage_hash({
        "sleepDebt": "NaN?",
        "goodSleepStreak": "5",
        "bestStreak": "x",
        "totalNights": "",
        "goodNights": "4",
    })

    assert stats.sleep_debt_hours == 0.0
    assert stats.good_sleep_streak == 5
    assert stats.best_streak == 5
    assert stats.total_nights == 4
    assert stats.good_nights == 4


def test_malformed_record_maps_to_422():
    error = MalformedRecord("bad record", raw="x")
    assert error.status_code == 422
    assert error.to_response().status_code == 422
