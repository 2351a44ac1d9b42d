"""Assemble the ffmpeg argument list from named, ordered argument groups.

ffmpeg resolves ``-map`` labels and per-input options positionally, so the
group order below is what makes the command valid.
"""

import shlex
from dataclasses import dataclass

from fadecut.filters import audio_graph, format_number, video_graph
from fadecut.models import FilterPlan, ProbeResult, ResolvedTiming
from fadecut.settings import Settings, is_unset

GPU_VIDEO_CODEC = "hevc_nvenc"
CPU_VIDEO_CODEC = "libx265"
AUDIO_CODEC = "aac"
AUDIO_BITRATE = "192k"

ASSEMBLY_ORDER = (
    "program",
    "primary_input",
    "seek_start",
    "seek_end",
    "background_input",
    "video",
    "audio",
    "output",
)


@dataclass(frozen=True)
class ArgGroup:
    name: str
    args: tuple[str, ...]


@dataclass(frozen=True)
class Command:
    """An immutable ffmpeg invocation, program name first."""

    groups: tuple[ArgGroup, ...]

    @property
    def argv(self) -> list[str]:
        return [arg for group in self.groups for arg in group.args]

    def group(self, name: str) -> ArgGroup | None:
        return next((g for g in self.groups if g.name == name), None)

    def __str__(self) -> str:
        return shlex.join(self.argv)

    @classmethod
    def from_groups(cls, groups: dict[str, list[str]]) -> "Command":
        """Lay out *groups* in ASSEMBLY_ORDER, dropping empty ones."""
        unknown = set(groups) - set(ASSEMBLY_ORDER)
        if unknown:
            raise ValueError(f"Unknown argument group(s): {sorted(unknown)}")
        return cls(
            groups=tuple(
                ArgGroup(name, tuple(groups[name]))
                for name in ASSEMBLY_ORDER
                if groups.get(name)
            )
        )


def _video_args(
    settings: Settings, plan: FilterPlan, probe_result: ProbeResult
) -> list[str]:
    graph = video_graph(plan)
    if not graph:
        return ["-c:v", "copy"]

    args = ["-filter_complex", graph, "-map", "[v]"]
    if settings.video_speed != 1.0:
        args += ["-r", format_number(probe_result.fps * settings.video_speed)]

    args += ["-c:v", GPU_VIDEO_CODEC if settings.use_gpu else CPU_VIDEO_CODEC]

    # NVENC has no -crf; under GPU mode the bitrate always wins.
    if not is_unset(settings.crf) and not settings.use_gpu:
        args += ["-crf", settings.crf]
    else:
        args += ["-b:v", settings.video_bitrate]
    return args


def assemble_command(
    settings: Settings,
    timing: ResolvedTiming,
    plan: FilterPlan,
    probe_result: ProbeResult,
) -> Command:
    """Build the full transcode command for one job."""
    groups: dict[str, list[str]] = {
        "program": [settings.ffmpeg_path],
        "primary_input": ["-i", settings.input_video_path],
    }

    if timing.clip_start > 0:
        groups["seek_start"] = ["-ss", format_number(timing.clip_start)]
    if timing.clip_end < probe_result.duration:
        groups["seek_end"] = ["-to", format_number(timing.clip_end)]

    if settings.has_background_audio:
        groups["background_input"] = [
            "-ss", format_number(settings.audio_start_time),
            "-i", settings.background_audio_path,
        ]

    groups["video"] = _video_args(settings, plan, probe_result)
    groups["audio"] = ["-filter_complex", audio_graph(plan, settings), "-map", "[a]"]
    groups["output"] = [
        "-c:a", AUDIO_CODEC,
        "-b:a", AUDIO_BITRATE,
        "-y",
        settings.output_video_path,
    ]

    return Command.from_groups(groups)
