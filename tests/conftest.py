"""Shared test fixtures."""

from pathlib import Path

import pytest

from fadecut.models import ProbeResult
from fadecut.settings import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"

PROBE_STDERR = """\
Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'video.mp4':
  Metadata:
    major_brand     : isom
  Duration: 00:01:30.50, start: 0.000000, bitrate: 5123 kb/s
  Stream #0:0[0x1](und): Video: h264 (High) (avc1 / 0x31637661), yuv420p(progressive), 1920x1080 [SAR 1:1 DAR 16:9], 4987 kb/s, 25 fps, 25 tbr, 12800 tbn (default)
  Stream #0:1[0x2](und): Audio: aac (LC) (mp4a / 0x6134706D), 48000 Hz, stereo, fltp, 128 kb/s (default)
At least one output file must be specified
"""


@pytest.fixture
def sample_settings_path() -> Path:
    return FIXTURES_DIR / "sample_settings.toml"


@pytest.fixture
def settings() -> Settings:
    return Settings(
        input_video_path="in.mp4",
        output_video_path="out.mp4",
        ffmpeg_path="ffmpeg",
        video_bitrate="5M",
    )


@pytest.fixture
def probe_result() -> ProbeResult:
    return ProbeResult(duration=90.5, fps=25.0)


@pytest.fixture
def probe_stderr() -> str:
    return PROBE_STDERR
