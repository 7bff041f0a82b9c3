import pytest

from jazzcomposer.services.timing import (
    create_time_at,
    duration_to_beats,
    format_beat_offset,
    position_to_beats,
    running_time,
)


def test_duration_symbols_map_to_beats():
    assert duration_to_beats("1m") == 4
    assert duration_to_beats("2n") == 2
    assert duration_to_beats("4n") == 1


@pytest.mark.parametrize("symbol", ["8n", "4n.", "", "2m"])
def test_unknown_duration_symbols_fill_the_measure(symbol):
    assert duration_to_beats(symbol) == 4


def test_beat_offsets_split_into_beats_and_sixteenths():
    assert format_beat_offset(0) == "0:0:0"
    assert format_beat_offset(2) == "0:2:0"
    assert format_beat_offset(2.5) == "0:2:2"
    assert format_beat_offset(1.25) == "0:1:1"


def test_sixteenth_rounding_goes_half_up_and_may_reach_four():
    assert format_beat_offset(0.625) == "0:0:3"
    assert format_beat_offset(0.9) == "0:0:4"


def test_create_time_at_uses_transport_grammar():
    assert create_time_at(0, 0) == "0m + 0:0:0"
    assert create_time_at(3, 2.5) == "3m + 0:2:2"
    assert create_time_at(20, 3) == "20m + 0:3:0"


def test_position_to_beats_reads_generated_positions():
    assert position_to_beats("0m + 0:0:0") == 0
    assert position_to_beats("3m + 0:2:2") == 14.5
    assert position_to_beats("0.5m + 0:0:2") == 2.5
    assert position_to_beats("0m + 0:0:4") == 1.0
    assert position_to_beats(create_time_at(7, 1.5)) == 29.5


@pytest.mark.parametrize("position", ["", "3m", "0:0:0", "3m+0:0:0", "-1m + 0:0:0"])
def test_position_to_beats_rejects_other_grammar(position):
    with pytest.raises(ValueError):
        position_to_beats(position)


def test_running_time_estimate():
    assert running_time(120, 21) == "0:42"
    assert running_time(84, 21) == "1:00"
    assert running_time(90, 21) == "0:56"
