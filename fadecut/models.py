"""Shared data types passed between the pipeline stages."""

from dataclasses import dataclass, field
from enum import Enum


class AudioTopology(str, Enum):
    """How the audio stream(s) feeding the output are arranged."""

    DIRECT = "direct"
    MIX = "mix"
    REPLACE = "replace"


@dataclass(frozen=True)
class ProbeResult:
    """Metadata scraped from ffmpeg's diagnostic banner."""

    duration: float
    fps: float


@dataclass(frozen=True)
class ResolvedTiming:
    """Absolute clip and fade times in seconds."""

    clip_start: float
    clip_end: float
    fade_in: float
    fade_out: float

    @property
    def fade_out_start(self) -> float:
        # May be negative when the fade is longer than the clip end.
        return self.clip_end - self.fade_out


@dataclass(frozen=True)
class FilterPlan:
    """Ordered video/audio filter fragments plus the chosen audio topology."""

    video_filters: tuple[str, ...] = field(default_factory=tuple)
    audio_filters: tuple[str, ...] = field(default_factory=tuple)
    topology: AudioTopology = AudioTopology.DIRECT

    @property
    def video_chain(self) -> str:
        return ",".join(self.video_filters)

    @property
    def audio_chain(self) -> str:
        return ",".join(self.audio_filters)
