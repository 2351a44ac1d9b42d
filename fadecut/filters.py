"""Build the video and audio filter graphs for a fade job."""

from decimal import Decimal

from fadecut.models import AudioTopology, FilterPlan, ResolvedTiming
from fadecut.settings import Settings, is_unset


def format_number(value: float) -> str:
    """Shortest round-trip text for *value* in positional notation.

    ffmpeg time and rate options do not accept exponents, so ``1e-05`` is
    written ``0.00001``. Integral values carry no ``.0``.
    """
    text = format(Decimal(repr(float(value))), "f")
    return text[:-2] if text.endswith(".0") else text


def _fade_pair(name: str, timing: ResolvedTiming) -> str:
    return (
        f"{name}=t=in:st=0:d={format_number(timing.fade_in)},"
        f"{name}=t=out:st={format_number(timing.fade_out_start)}"
        f":d={format_number(timing.fade_out)}"
    )


def select_topology(settings: Settings) -> AudioTopology:
    if not settings.has_background_audio:
        return AudioTopology.DIRECT
    if settings.replace_audio:
        return AudioTopology.REPLACE
    return AudioTopology.MIX


def build_filter_plan(settings: Settings, timing: ResolvedTiming) -> FilterPlan:
    """Order matters: fade, then scale, then setpts (video); afade, then atempo (audio)."""
    speed = settings.video_speed

    video = [_fade_pair("fade", timing)]
    if not is_unset(settings.upscale_resolution):
        video.append(f"scale={settings.upscale_resolution}")
    if speed != 1.0:
        video.append(f"setpts={format_number(1.0 / speed)}*PTS")

    audio = [_fade_pair("afade", timing)]
    if speed != 1.0:
        # atempo accepts 0.5-100; out-of-range speeds are left for ffmpeg to reject.
        audio.append(f"atempo={format_number(speed)}")

    return FilterPlan(
        video_filters=tuple(video),
        audio_filters=tuple(audio),
        topology=select_topology(settings),
    )


def video_graph(plan: FilterPlan) -> str:
    """Labeled filter_complex segment for the primary video stream, or "" if none."""
    chain = plan.video_chain
    if not chain:
        return ""
    return f"[0:v]{chain}[v]"


def audio_graph(plan: FilterPlan, settings: Settings) -> str:
    """Labeled filter_complex segment producing the single ``[a]`` output."""
    chain = plan.audio_chain
    original = format_number(settings.original_audio_volume)
    background = format_number(settings.background_audio_volume)

    if plan.topology is AudioTopology.REPLACE:
        return f"[1:a]volume={background},{chain}[a]"

    if plan.topology is AudioTopology.MIX:
        return (
            f"[0:a]volume={original}[a0];"
            f"[1:a]volume={background},{chain}[a1];"
            "[a0][a1]amix=inputs=2:duration=first:dropout_transition=3[a]"
        )

    return f"[0:a]volume={original},{chain}[a]"
