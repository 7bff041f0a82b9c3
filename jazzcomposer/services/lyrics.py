from __future__ import annotations

import logging
import math
import random
from typing import Protocol, Sequence, TypeVar

from jazzcomposer.logging_utils import log_event
from jazzcomposer.models import LyricSheet

T = TypeVar("T")

logger = logging.getLogger(__name__)

TITLE_LEAD_INS: tuple[str, ...] = (
    "Midnight velvet whispers",
    "Smoky skyline shimmer",
    "Amber neon lullaby",
    "Silk and satin stillness",
)
VERSE_LINES: tuple[str, ...] = (
    "Velvet curtains sway in time with the moonlit breeze.",
    "Footsteps lace the alley, lingering in seventh chords.",
    "Trumpets paint the twilight in copper-tinted dreams.",
    "A bass line walks the sidewalk, tracing tales of where we've been.",
)
CHORUS_LINES: tuple[str, ...] = (
    "Hold me in the hush of this midnight reprise.",
    "Sway slow, let the city lights harmonize.",
    "Breathe deep, every blue note is home tonight.",
    "Stay close, let the skyline keep us alight.",
)
BRIDGE_LINES: tuple[str, ...] = (
    "We tumble through syncopated constellations.",
    "The skyline riffs, trading fours with our hearts.",
    "Each echoing horn is a promise we improvise.",
    "Brushes on brass, keeping time with destiny.",
)

VERSE_LINE_COUNT = 2
CHORUS_LINE_COUNT = 2
BRIDGE_LINE_COUNT = 1


class RandomSource(Protocol):
    def random(self) -> float: ...


class SeededRandom:
    """Reproducible [0, 1) sequence from the fractional part of ``sin(state) * 10000``.

    Not suitable for anything security related; it exists so a lyric sheet can
    be rebuilt from its seed.
    """

    def __init__(self, seed: float):
        self.seed = seed
        self._state = seed

    def random(self) -> float:
        x = math.sin(self._state) * 10000
        self._state += 1
        return x - math.floor(x)


def pick_unique(pool: Sequence[T], count: int, rng: RandomSource) -> list[T]:
    if count > len(pool):
        raise ValueError(f"Cannot pick {count} unique entries from a pool of {len(pool)}.")
    available = list(pool)
    chosen: list[T] = []
    for _ in range(count):
        index = math.floor(rng.random() * len(available))
        chosen.append(available.pop(index))
    return chosen


def new_seed() -> float:
    return random.random()


def generate_lyrics(key_label: str, seed: float | None = None) -> LyricSheet:
    if seed is None:
        seed = new_seed()
    rng = SeededRandom(seed)

    lead_in = TITLE_LEAD_INS[math.floor(rng.random() * len(TITLE_LEAD_INS))]
    verse = pick_unique(VERSE_LINES, VERSE_LINE_COUNT, rng)
    chorus = pick_unique(CHORUS_LINES, CHORUS_LINE_COUNT, rng)
    bridge = pick_unique(BRIDGE_LINES, BRIDGE_LINE_COUNT, rng)

    sheet = LyricSheet(
        title=f"{lead_in} in {key_label}",
        verse=tuple(verse),
        chorus=tuple(chorus),
        bridge=tuple(bridge),
        seed=seed,
    )
    log_event(logger, "lyrics_generated", seed=seed, title=sheet.title)
    return sheet
