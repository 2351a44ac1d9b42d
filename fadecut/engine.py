"""Orchestrator — runs the fade/trim/mix pipeline defined by Settings."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from fadecut import ffutil
from fadecut.command import Command, assemble_command
from fadecut.filters import build_filter_plan
from fadecut.models import FilterPlan, ProbeResult, ResolvedTiming
from fadecut.settings import Settings
from fadecut.supervisor import Supervisor, select_mode
from fadecut.timing import resolve_timing

logger = logging.getLogger(__name__)


@dataclass
class EngineResult:
    output_path: Path
    command: Command
    probe: ProbeResult
    timing: ResolvedTiming
    plan: FilterPlan
    executed: bool = False


def process(
    settings: Settings,
    on_progress: Callable[[str, float], None] | None = None,
    dry_run: bool = False,
    show_bar: bool = True,
) -> EngineResult:
    """Probe, resolve, build, assemble and (unless *dry_run*) execute.

    Args:
        settings: Job settings; validated before anything is launched.
        on_progress: Optional callback(stage_name, fraction_complete).
        dry_run: Stop after assembling the command.
        show_bar: Render the terminal progress bar in tracked mode.
    """

    def _progress(stage: str, frac: float) -> None:
        if on_progress:
            on_progress(stage, frac)

    settings.validate()

    _progress("Probing video metadata", 0.0)
    logger.info("Probing %s", settings.input_video_path)
    probe_result = ffutil.probe(settings.ffmpeg_path, settings.input_video_path)
    logger.info(
        "Duration %.2fs at %g fps", probe_result.duration, probe_result.fps
    )

    timing = resolve_timing(settings, probe_result.duration)
    plan = build_filter_plan(settings, timing)
    command = assemble_command(settings, timing, plan, probe_result)
    logger.debug("FFmpeg command: %s", command)

    result = EngineResult(
        output_path=Path(settings.output_video_path),
        command=command,
        probe=probe_result,
        timing=timing,
        plan=plan,
    )
    if dry_run:
        return result

    _progress("Encoding", 0.05)

    def _encode_progress(elapsed: float) -> None:
        if probe_result.duration > 0:
            _progress("Encoding", 0.05 + 0.95 * min(elapsed / probe_result.duration, 1.0))

    mode = select_mode(
        settings.advanced_log,
        probe_result.duration,
        on_progress=_encode_progress,
        show_bar=show_bar,
    )

    logger.info("Starting the video processing...")
    Supervisor(command, mode).run()
    logger.info("All done! Your video has been processed successfully.")

    result.executed = True
    _progress("Done", 1.0)
    return result
