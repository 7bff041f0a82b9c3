from __future__ import annotations

from dataclasses import dataclass

from jazzcomposer.models import PartEvent, PreparedArrangement
from jazzcomposer.services.arranger import blueprint_sections
from jazzcomposer.services.blueprint import SECTION_BLUEPRINTS, SectionBlueprint, cells, total_measures
from jazzcomposer.services.chord_catalog import QUALITY_INTERVALS
from jazzcomposer.services.timing import (
    BEATS_PER_MEASURE,
    DURATION_BEATS,
    SIXTEENTHS_PER_BEAT,
    duration_to_beats,
    position_to_beats,
)


class ArrangementValidationError(RuntimeError):
    def __init__(self, diagnostics: list[str]):
        super().__init__("Generated arrangement failed validation.")
        self.diagnostics = diagnostics


@dataclass
class ValidationDiagnostics:
    fatal: list[str]
    warnings: list[str]


def validate_blueprint(blueprint: tuple[SectionBlueprint, ...] = SECTION_BLUEPRINTS) -> ValidationDiagnostics:
    fatal: list[str] = []
    warnings: list[str] = []

    for quality, intervals in QUALITY_INTERVALS.items():
        if not intervals or intervals[0] != 0:
            fatal.append(f"Chord quality {quality} must start at the root (0).")

    for section in blueprint:
        for measure_idx, measure in enumerate(section.measures, start=1):
            where = f"{section.label} measure {measure_idx}"
            if not measure:
                fatal.append(f"{where} has no chord cells.")
                continue
            total = sum(duration_to_beats(cell.duration) for cell in measure)
            if total != BEATS_PER_MEASURE:
                fatal.append(f"{where} has {total} beats; expected {BEATS_PER_MEASURE}.")
            for cell in measure:
                if not 0 <= cell.degree <= 11:
                    fatal.append(f"{where} cell {cell.display} has degree {cell.degree} outside 0-11.")
                if cell.quality not in QUALITY_INTERVALS:
                    fatal.append(f"{where} cell {cell.display} uses unknown quality {cell.quality}.")
                if cell.duration not in DURATION_BEATS:
                    warnings.append(
                        f"{where} cell {cell.display} uses duration {cell.duration!r}; treated as a whole measure."
                    )

    return ValidationDiagnostics(fatal=fatal, warnings=warnings)


def _stream_order_errors(name: str, events: tuple[PartEvent, ...], measure_count: int) -> list[str]:
    errors: list[str] = []
    previous = float("-inf")
    limit = measure_count * BEATS_PER_MEASURE
    for idx, event in enumerate(events):
        try:
            position = position_to_beats(event.time)
        except ValueError as exc:
            errors.append(f"{name} event {idx} has an unreadable time: {exc}")
            continue
        if position < previous:
            errors.append(f"{name} event {idx} at {event.time} starts before the previous event.")
        if position >= limit:
            errors.append(f"{name} event {idx} at {event.time} starts after the last measure.")
        previous = position
    return errors


def validate_arrangement(
    arrangement: PreparedArrangement,
    blueprint: tuple[SectionBlueprint, ...] = SECTION_BLUEPRINTS,
) -> ValidationDiagnostics:
    fatal: list[str] = []
    expected_measures = total_measures(blueprint)
    blueprint_cells = cells(blueprint)

    if arrangement.total_measures != expected_measures:
        fatal.append(f"Arrangement spans {arrangement.total_measures} measures; expected {expected_measures}.")
    if arrangement.sections != blueprint_sections(blueprint):
        fatal.append("Arrangement section labels do not match the blueprint.")

    if len(arrangement.chord_events) != len(blueprint_cells):
        fatal.append(f"Chord stream has {len(arrangement.chord_events)} events; expected {len(blueprint_cells)}.")
    if len(arrangement.melody_events) != len(blueprint_cells):
        fatal.append(f"Melody stream has {len(arrangement.melody_events)} events; expected {len(blueprint_cells)}.")
    expected_bass = sum(duration_to_beats(cell.duration) for cell in blueprint_cells)
    if len(arrangement.bass_events) != expected_bass:
        fatal.append(f"Bass stream has {len(arrangement.bass_events)} events; expected {expected_bass}.")

    warnings: list[str] = []
    for name, events in (
        ("Chord", arrangement.chord_events),
        ("Bass", arrangement.bass_events),
        ("Melody", arrangement.melody_events),
    ):
        fatal.extend(_stream_order_errors(name, events, expected_measures))
        carried = [event.time for event in events if event.time.endswith(f":{SIXTEENTHS_PER_BEAT}")]
        if carried:
            warnings.append(f"{name} stream has {len(carried)} positions that carry into the next beat, first at {carried[0]}.")

    return ValidationDiagnostics(fatal=fatal, warnings=warnings)
