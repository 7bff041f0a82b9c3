from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


ChordQuality = Literal[
    "maj9",
    "min9",
    "min11",
    "dom13",
    "dom13b9",
    "maj7sharp11",
    "halfDim",
    "dim7",
    "altDom",
]
BassApproach = Literal["chromaticUp", "chromaticDown", "scalar"]
KeyId = Literal["C", "F", "Bb", "Eb", "G", "D"]

MIN_TEMPO_BPM = 84
MAX_TEMPO_BPM = 162
DEFAULT_TEMPO_BPM = 120
MIN_SWING = 0.2
MAX_SWING = 0.75
DEFAULT_SWING = 0.55
DEFAULT_KEY_ID = "C"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class KeyOption(FrozenModel):
    id: KeyId
    label: str
    tonic: str = Field(description="Pitch class used as the generation tonic, e.g. A# for Bb")


class PartEvent(FrozenModel):
    time: str = Field(description="Transport position like '3m + 0:2:0'")
    duration: str = Field(description="Symbolic duration like 1m, 2n, 4n or 4n.")
    notes: tuple[str, ...] = Field(min_length=1)


class RideHit(FrozenModel):
    time: str
    duration: str = "32n"


class GeneratedSection(FrozenModel):
    label: str
    measures: tuple[tuple[str, ...], ...]


class PreparedArrangement(FrozenModel):
    key: KeyId | None = None
    tonic: str
    total_measures: int = Field(ge=0)
    sections: tuple[GeneratedSection, ...]
    chord_events: tuple[PartEvent, ...]
    bass_events: tuple[PartEvent, ...]
    melody_events: tuple[PartEvent, ...]


class LyricSheet(FrozenModel):
    title: str
    verse: tuple[str, ...]
    chorus: tuple[str, ...]
    bridge: tuple[str, ...]
    seed: float


class TransportSettings(FrozenModel):
    bpm: int
    swing: float
    swing_subdivision: str = "8n"
    swing_label: str
    tempo_mark: str | None = None
    start_position: str = "0:0:0"
    start_delay: str = "+0.2"
    running_time: str


class PlaybackSession(FrozenModel):
    arrangement: PreparedArrangement
    lyrics: LyricSheet
    transport: TransportSettings
    ride_events: tuple[RideHit, ...]


class BlueprintOverview(FrozenModel):
    total_measures: int
    sections: tuple[GeneratedSection, ...]


def _normalize_key_id(value):
    if value is None:
        return value
    cleaned = str(value).strip()
    if len(cleaned) == 2 and cleaned[1] in {"b", "♭"}:
        return f"{cleaned[0].upper()}b"
    return cleaned.upper() if len(cleaned) == 1 else cleaned


class ArrangementRequest(BaseModel):
    key: KeyId = DEFAULT_KEY_ID

    @field_validator("key", mode="before")
    @classmethod
    def normalize_key(cls, value):
        return _normalize_key_id(value)


class LyricsRequest(ArrangementRequest):
    seed: float | None = Field(default=None, allow_inf_nan=False)


class PlaybackSessionRequest(LyricsRequest):
    tempo_bpm: int = Field(default=DEFAULT_TEMPO_BPM, ge=MIN_TEMPO_BPM, le=MAX_TEMPO_BPM)
    swing: float = Field(default=DEFAULT_SWING, ge=MIN_SWING, le=MAX_SWING)


class ClientLogEvent(BaseModel):
    ts: str
    event: str = Field(min_length=1, max_length=120)
    key: str | None = Field(default=None, min_length=1, max_length=8)
    reason: str | None = Field(default=None, min_length=1, max_length=120)
    tempo_bpm: int | None = None
    swing: float | None = None
    offsetSeconds: float | None = None
    progressSeconds: float | None = None
