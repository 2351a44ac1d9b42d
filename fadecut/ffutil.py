"""FFmpeg subprocess helpers and diagnostic-text parsing."""

import logging
import re
import subprocess
from pathlib import Path

from fadecut.errors import DurationNotFoundError, FrameRateNotFoundError, ProbeLaunchError
from fadecut.models import ProbeResult

logger = logging.getLogger(__name__)

_PROGRESS_RE = re.compile(r"time=(\d+):(\d+):(\d+\.\d+)")


def parse_timestamp(text: str) -> float | None:
    """Convert ``HH:MM:SS(.fraction)`` to seconds, or None if it does not parse."""
    parts = text.strip().split(":")
    if len(parts) != 3:
        return None
    try:
        h, m, s = (float(p) for p in parts)
    except ValueError:
        return None
    return h * 3600 + m * 60 + s


def _parse_duration(lines: list[str]) -> float | None:
    line = next((ln for ln in lines if "Duration" in ln), None)
    if line is None or "Duration: " not in line:
        return None
    token = line.split("Duration: ", 1)[1].split(",", 1)[0]
    return parse_timestamp(token)


def _parse_fps(lines: list[str]) -> float | None:
    line = next((ln for ln in lines if "Stream" in ln and "Video" in ln), None)
    if line is None:
        return None
    # e.g. "..., 1920x1080, 5000 kb/s, 25 fps, 25 tbr, ..."
    before = line.split("fps", 1)[0].split()
    if not before:
        return None
    try:
        return float(before[-1])
    except ValueError:
        return None


def parse_probe_output(stderr: str) -> ProbeResult:
    """Scrape duration and frame rate from ffmpeg's ``-i`` banner."""
    lines = stderr.splitlines()

    duration = _parse_duration(lines)
    if duration is None:
        raise DurationNotFoundError("Could not determine video duration")

    fps = _parse_fps(lines)
    if fps is None:
        raise FrameRateNotFoundError("Could not determine video framerate")

    return ProbeResult(duration=duration, fps=fps)


def probe(ffmpeg_path: str, input_path: str | Path) -> ProbeResult:
    """Run ``ffmpeg -i <input> -hide_banner`` and parse its stderr.

    ffmpeg exits non-zero here because no output file is given; only the
    diagnostic text matters.
    """
    cmd = [ffmpeg_path, "-i", str(input_path), "-hide_banner"]
    logger.debug("Probe command: %s", cmd)
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, errors="replace")
    except OSError as e:
        raise ProbeLaunchError(f"Could not start {ffmpeg_path}: {e}") from e

    return parse_probe_output(result.stderr or "")


def parse_progress_time(line: str) -> float | None:
    """Return elapsed seconds from a ``time=HH:MM:SS.ms`` progress line."""
    m = _PROGRESS_RE.search(line)
    if m is None:
        return None
    h, mn, s = int(m.group(1)), int(m.group(2)), float(m.group(3))
    return h * 3600 + mn * 60 + s
