from __future__ import annotations

from dataclasses import dataclass

from jazzcomposer.models import BassApproach, ChordQuality, KeyOption


@dataclass(frozen=True)
class MeasureCell:
    degree: int
    quality: ChordQuality
    display: str
    duration: str
    bass_approach: BassApproach | None = None


@dataclass(frozen=True)
class SectionBlueprint:
    label: str
    measures: tuple[tuple[MeasureCell, ...], ...]


def _cell(degree: int, quality: ChordQuality, display: str, duration: str, bass_approach: BassApproach | None = None) -> MeasureCell:
    return MeasureCell(degree=degree, quality=quality, display=display, duration=duration, bass_approach=bass_approach)


SECTION_BLUEPRINTS: tuple[SectionBlueprint, ...] = (
    SectionBlueprint(
        label="Intro",
        measures=(
            (_cell(0, "maj9", "Imaj9", "1m"),),
            (
                _cell(9, "min9", "vi9", "2n", "chromaticDown"),
                _cell(2, "min11", "ii11", "2n", "scalar"),
            ),
            (_cell(7, "dom13", "V13sus", "1m", "chromaticDown"),),
        ),
    ),
    SectionBlueprint(
        label="A",
        measures=(
            (_cell(0, "maj9", "Imaj9", "1m"),),
            (
                _cell(2, "min9", "ii9", "2n", "scalar"),
                _cell(7, "dom13b9", "V13♭9", "2n", "chromaticDown"),
            ),
            (
                _cell(9, "min9", "vi9", "2n", "scalar"),
                _cell(5, "maj7sharp11", "IVΔ♯11", "2n"),
            ),
            (
                _cell(0, "maj9", "Imaj9", "2n"),
                _cell(10, "halfDim", "viiø", "2n", "chromaticUp"),
            ),
            (
                _cell(2, "min11", "ii11", "2n"),
                _cell(7, "altDom", "Valt", "2n", "chromaticDown"),
            ),
            (_cell(0, "maj9", "Imaj9", "1m"),),
        ),
    ),
    SectionBlueprint(
        label="B",
        measures=(
            (
                _cell(3, "min9", "iii9", "2n"),
                _cell(8, "dom13", "VI13", "2n", "chromaticDown"),
            ),
            (
                _cell(1, "min11", "♭iii11", "2n"),
                _cell(6, "dom13b9", "♭VI13♭9", "2n", "chromaticDown"),
            ),
            (
                _cell(11, "dim7", "vii°", "2n"),
                _cell(4, "dom13", "III13", "2n", "chromaticDown"),
            ),
            (
                _cell(9, "min9", "vi9", "2n"),
                _cell(2, "min11", "ii11", "2n"),
            ),
            (
                _cell(7, "altDom", "Valt", "2n", "chromaticDown"),
                _cell(0, "maj9", "Imaj9", "2n"),
            ),
        ),
    ),
    SectionBlueprint(
        label="A'",
        measures=(
            (_cell(0, "maj9", "Imaj9", "1m"),),
            (
                _cell(2, "min9", "ii9", "2n"),
                _cell(7, "dom13", "V13", "2n", "scalar"),
            ),
            (
                _cell(9, "min9", "vi9", "2n"),
                _cell(5, "maj7sharp11", "IVΔ♯11", "2n"),
            ),
            (
                _cell(0, "maj9", "Imaj9", "2n"),
                _cell(7, "dom13b9", "V13♭9", "2n", "chromaticDown"),
            ),
            (_cell(0, "maj9", "Imaj9", "1m"),),
        ),
    ),
    SectionBlueprint(
        label="Tag",
        measures=(
            (
                _cell(9, "min11", "vi11", "2n", "chromaticDown"),
                _cell(2, "min11", "ii11", "2n"),
            ),
            (
                _cell(7, "altDom", "Valt", "2n", "chromaticDown"),
                _cell(0, "maj9", "Imaj9", "2n"),
            ),
        ),
    ),
)

# Flat keys are generated from their sharp spelling.
KEY_OPTIONS: tuple[KeyOption, ...] = (
    KeyOption(id="C", label="C Major", tonic="C"),
    KeyOption(id="F", label="F Major", tonic="F"),
    KeyOption(id="Bb", label="B♭ Major", tonic="A#"),
    KeyOption(id="Eb", label="E♭ Major", tonic="D#"),
    KeyOption(id="G", label="G Major", tonic="G"),
    KeyOption(id="D", label="D Major", tonic="D"),
)
KEYS_BY_ID = {option.id: option for option in KEY_OPTIONS}


def key_option(key_id: str) -> KeyOption:
    try:
        return KEYS_BY_ID[key_id]
    except KeyError:
        raise ValueError(f"Unsupported key {key_id!r}. Choose one of: {', '.join(KEYS_BY_ID)}.") from None


def total_measures(blueprint: tuple[SectionBlueprint, ...] = SECTION_BLUEPRINTS) -> int:
    return sum(len(section.measures) for section in blueprint)


def cells(blueprint: tuple[SectionBlueprint, ...] = SECTION_BLUEPRINTS) -> list[MeasureCell]:
    return [cell for section in blueprint for measure in section.measures for cell in measure]
