import pytest

from sleep_system.core.clock import (
    average_time,
    circular_deviation,
    format_duration,
    format_number,
    format_tenths,
    forward_span,
    from_minutes,
    hours_before,
    round_half_up,
    to_minutes,
)


def test_to_minutes_parses_and_wraps():
    assert to_minutes("00:00") == 0
    assert to_minutes("22:30") == 1350
    assert to_minutes("24:00") == 0


@pytest.mark.parametrize("bad", ["", "7", "ab:cd", None])
def test_to_minutes_rejects_garbage(bad):
    with pytest.raises(ValueError):
        to_minutes(bad)


def test_from_minutes_pads_and_wraps():
    assert from_minutes(0) == "00:00"
    assert from_minutes(455) == "07:35"
    assert from_minutes(1440 + 61) == "01:01"


def test_forward_span_wraps_past_midnight():
    assert forward_span("22:30", "06:30") == 480
    assert forward_span("23:30", "00:30") == 60
    assert forward_span("07:00", "07:00") == 0


def test_hours_before_is_forward_distance_to_bedtime():
    assert hours_before("14:00", "22:00") == 8
    assert hours_before("23:30", "00:30") == 1
    # an event "after" bedtime counts as almost a full day earlier
    assert hours_before("23:00", "22:00") == 23


def test_circular_deviation_takes_short_way():
    assert circular_deviation("00:30", "22:30") == 120
    assert circular_deviation("22:30", "00:30") == 120
    assert circular_deviation("10:30", "22:30") == 720


def test_round_half_up_matches_js_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(4.18) == 4
    assert round_half_up(-0.4) == 0


def test_average_time():
    assert average_time([]) == "00:00"
    assert average_time(["07:00", "08:00"]) == "07:30"
    assert average_time(["06:30"] * 5) == "06:30"


def test_formatting():
    assert format_duration(450) == "7h 30m"
    assert format_duration(0) == "0h 0m"
    assert format_number(2.0) == "2"
    assert format_number(68) == "68"
    assert format_number(2.5) == "2.5"


def test_format_tenths_rounds_exact_value():
    assert format_tenths(1.5) == "1.5"
    assert format_tenths(2.0) == "2.0"
    assert format_tenths(0.25) == "0.3"
    assert format_tenths(9 / 60) == "0.1"
