import pytest
from pydantic import ValidationError

from jazzcomposer.services import arranger as arranger_service
from jazzcomposer.services.arrangement_validation import validate_arrangement, validate_blueprint
from jazzcomposer.services.arranger import blueprint_sections, build_arrangement, melody_notes
from jazzcomposer.services.blueprint import KEY_OPTIONS, SECTION_BLUEPRINTS, MeasureCell, SectionBlueprint, cells, total_measures
from jazzcomposer.services.music_theory import InvalidNoteFormatError, note_to_midi
from jazzcomposer.services.timing import duration_to_beats, position_to_beats


def _measure_of(event) -> int:
    return int(event.time.split("m", 1)[0])


def test_blueprint_measures_fill_four_beats():
    for section in SECTION_BLUEPRINTS:
        for measure in section.measures:
            assert sum(duration_to_beats(cell.duration) for cell in measure) == 4


def test_blueprint_passes_structural_validation():
    report = validate_blueprint()
    assert report.fatal == []
    assert report.warnings == []


def test_blueprint_form_and_length():
    assert [section.label for section in SECTION_BLUEPRINTS] == ["Intro", "A", "B", "A'", "Tag"]
    assert [len(section.measures) for section in SECTION_BLUEPRINTS] == [3, 6, 5, 5, 2]
    assert total_measures() == 21
    assert len(cells()) == 36


@pytest.mark.parametrize("key", KEY_OPTIONS, ids=lambda key: key.id)
def test_section_shape_is_independent_of_key(key):
    arrangement = build_arrangement(key.tonic, key_id=key.id)
    assert arrangement.sections == blueprint_sections()
    assert arrangement.total_measures == 21
    assert len(arrangement.chord_events) == 36
    assert len(arrangement.melody_events) == 36
    assert len(arrangement.bass_events) == 84


@pytest.mark.parametrize("key", KEY_OPTIONS, ids=lambda key: key.id)
def test_generated_streams_pass_validation(key):
    report = validate_arrangement(build_arrangement(key.tonic, key_id=key.id))
    assert report.fatal == []
    assert report.warnings == []


def test_streams_are_time_ordered_and_cover_every_measure():
    arrangement = build_arrangement("C")
    for stream in (arrangement.chord_events, arrangement.bass_events, arrangement.melody_events):
        positions = [position_to_beats(event.time) for event in stream]
        assert positions == sorted(positions)
        assert {_measure_of(event) for event in stream} == set(range(21))


def test_first_cell_in_c_major():
    arrangement = build_arrangement("C", key_id="C")

    chord = arrangement.chord_events[0]
    assert chord.time == "0m + 0:0:0"
    assert chord.duration == "1m"
    assert chord.notes == ("C3", "E3", "G3", "B3", "D4")

    bass = arrangement.bass_events[:4]
    assert [event.time for event in bass] == ["0m + 0:0:0", "0m + 0:1:0", "0m + 0:2:0", "0m + 0:3:0"]
    assert [event.notes for event in bass] == [("C2",), ("E2",), ("G2",), ("A#3",)]
    assert all(event.duration == "4n" for event in bass)

    melody = arrangement.melody_events[0]
    assert melody.time == "0m + 0:0:2"
    assert melody.duration == "4n."
    assert melody.notes == ("C4", "C3")


def test_split_measure_labels_and_offsets():
    arrangement = build_arrangement("C")
    assert arrangement.sections[0].measures == (("Imaj9",), ("vi9", "ii11"), ("V13sus",))

    vi9, ii11 = arrangement.chord_events[1:3]
    assert (vi9.time, vi9.duration, vi9.notes) == ("1m + 0:0:0", "2n", ("A3", "C4", "E4", "G4", "B4"))
    assert (ii11.time, ii11.duration) == ("1m + 0:2:0", "2n")
    assert ii11.notes == ("D3", "F3", "A3", "C4", "E4", "G4")

    assert arrangement.melody_events[1].time == "1m + 0:0:2"
    assert arrangement.melody_events[1].notes == ("A4", "A3")
    # Third beat of the measure picks the fifth from the melody cycle.
    assert arrangement.melody_events[2].time == "1m + 0:2:2"
    assert arrangement.melody_events[2].notes == ("A4", "A3")


def test_melody_doubles_an_octave_below():
    for event in build_arrangement("D#").melody_events:
        upper, lower = event.notes
        assert note_to_midi(upper) - note_to_midi(lower) == 12


def test_melody_interval_cycle_follows_beat_position():
    assert melody_notes("C3", 0) == ("C4", "C3")
    assert melody_notes("C3", 1) == ("E4", "E3")
    assert melody_notes("C3", 2) == ("G4", "G3")
    assert melody_notes("C3", 3.5) == ("A4", "A3")


def test_flat_keys_use_sharp_spelling():
    arrangement = build_arrangement("A#", key_id="Bb")
    assert arrangement.key == "Bb"
    assert arrangement.chord_events[0].notes == ("A#3", "D4", "F4", "A4", "C5")
    assert arrangement.bass_events[0].notes == ("A#2",)


def test_bass_events_per_cell_match_cell_beats():
    arrangement = build_arrangement("G")
    expected = sum(duration_to_beats(cell.duration) for cell in cells())
    assert len(arrangement.bass_events) == expected
    assert all(len(event.notes) == 1 for event in arrangement.bass_events)


def test_generation_is_deterministic_and_returns_new_objects():
    first = build_arrangement("F", key_id="F")
    second = build_arrangement("F", key_id="F")
    assert first == second
    assert first is not second


def test_arrangement_is_immutable():
    arrangement = build_arrangement("C")
    with pytest.raises(ValidationError):
        arrangement.total_measures = 3
    with pytest.raises(ValidationError):
        arrangement.chord_events[0].notes = ("C3",)


def test_custom_blueprint_without_validation_misaligns_silently():
    short = (
        SectionBlueprint(
            label="Short",
            measures=(
                (MeasureCell(degree=0, quality="maj9", display="I", duration="2n"),),
                (MeasureCell(degree=7, quality="dom13", display="V", duration="1m"),),
            ),
        ),
    )
    arrangement = build_arrangement("C", blueprint=short)
    assert arrangement.total_measures == 2
    assert [event.time for event in arrangement.chord_events] == ["0m + 0:0:0", "1m + 0:0:0"]
    assert validate_blueprint(short).fatal == ["Short measure 1 has 2 beats; expected 4."]


def test_pitch_errors_abort_generation(monkeypatch, caplog):
    def broken_chord(*_args, **_kwargs):
        raise InvalidNoteFormatError("X9")

    monkeypatch.setattr(arranger_service, "build_chord", broken_chord)

    with pytest.raises(InvalidNoteFormatError):
        build_arrangement("C")
    assert any(getattr(record, "event", None) == "arrangement_generation_failed" for record in caplog.records)
