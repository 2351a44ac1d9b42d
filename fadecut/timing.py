"""Resolve optional clip/fade settings into absolute times."""

import math

from fadecut.errors import InvalidTimingError
from fadecut.models import ResolvedTiming
from fadecut.settings import Settings, is_unset

DEFAULT_FADE_DURATION = 3.0


def _parse_boundary(field: str, value: str | None, default: float) -> float:
    if is_unset(value):
        return default
    # float() also takes padding, digit separators and inf/nan; ffmpeg does not.
    if value != value.strip() or "_" in value:
        raise InvalidTimingError(field, value)
    try:
        seconds = float(value)
    except ValueError:
        raise InvalidTimingError(field, value) from None
    if not math.isfinite(seconds):
        raise InvalidTimingError(field, value)
    return seconds


def resolve_timing(settings: Settings, duration: float) -> ResolvedTiming:
    """Resolve clip start/end against the probed duration.

    Nothing is clamped: a fade longer than the clip yields a negative
    fade-out start, which is passed on to ffmpeg unchanged.
    """
    clip_start = _parse_boundary("clip_start_time", settings.clip_start_time, 0.0)
    clip_end = _parse_boundary("clip_end_time", settings.clip_end_time, duration)

    fade_in = settings.fade_in_duration
    fade_out = settings.fade_out_duration

    return ResolvedTiming(
        clip_start=clip_start,
        clip_end=clip_end,
        fade_in=DEFAULT_FADE_DURATION if fade_in is None else fade_in,
        fade_out=DEFAULT_FADE_DURATION if fade_out is None else fade_out,
    )
