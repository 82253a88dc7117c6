import pytest

from stillpoint.models.errors import InvalidDurationError
from stillpoint.utils.format import format_time, parse_duration_minutes


@pytest.mark.parametrize("ms, expected", [
    (0, "00:00"),
    (-500, "00:00"),
    (1, "00:01"),
    (999, "00:01"),
    (1000, "00:01"),
    (59_001, "01:00"),
    (600_000, "10:00"),
    (3_599_000, "59:59"),
    (7_200_000, "120:00"),
])
def test_format_time(ms, expected):
    assert format_time(ms) == expected


def test_parse_duration_minutes_accepts_whole_minutes():
    assert parse_duration_minutes(10) == 600_000
    assert parse_duration_minutes(" 25 ") == 1_500_000
    assert parse_duration_minutes("180") == 180 * 60_000


@pytest.mark.parametrize("raw", [0, -5, 181, "abc", "", "2.5", None, True])
def test_parse_duration_minutes_rejects(raw):
    with pytest.raises(InvalidDurationError):
        parse_duration_minutes(raw)


def test_parse_duration_minutes_custom_bounds():
    with pytest.raises(InvalidDurationError) as exc_info:
        parse_duration_minutes(61, max_minutes=60)
    assert "between 1 and 60" in exc_info.value.reason
