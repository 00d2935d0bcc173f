"""
Tests for datetime helpers used when storing match timestamps.
"""
from datetime import datetime, timezone

import pytz

from tennis_backend.utils.datetime_utils import to_naive_utc, utcnow


def test_utcnow_is_aware_utc():
    now = utcnow()
    assert now.tzinfo is not None
    assert now.utcoffset().total_seconds() == 0


def test_to_naive_utc_converts_localized_time():
    paris = pytz.timezone("Europe/Paris").localize(datetime(2024, 5, 1, 12, 0))
    assert to_naive_utc(paris) == datetime(2024, 5, 1, 10, 0)


def test_to_naive_utc_handles_fixed_offsets():
    value = datetime(2024, 5, 1, 0, 30, tzinfo=timezone.utc)
    assert to_naive_utc(value) == datetime(2024, 5, 1, 0, 30)
    assert to_naive_utc(value).tzinfo is None


def test_to_naive_utc_leaves_naive_values():
    value = datetime(2024, 5, 1, 18, 0)
    assert to_naive_utc(value) is value
