#!/usr/bin/env python3
"""Generate synthetic media for manual fadecut runs.

Writes two files next to each other:
  <name>.mp4     20s of SMPTE bars at 25 fps with a 440 Hz tone
  <name>_bg.m4a  30s 220 Hz tone, for background mix/replace runs

and a matching settings TOML that fades, trims 2s-18s and mixes the tone in.
"""

import subprocess
import sys
from pathlib import Path

SETTINGS_TEMPLATE = """\
[settings]
input_video_path = "{video}"
output_video_path = "{output}"
ffmpeg_path = "ffmpeg"
use_gpu = false
video_bitrate = "2M"
crf = "28"
background_audio_path = "{background}"
audio_start_time = 1.5
replace_audio = false
original_audio_volume = 1.0
background_audio_volume = 0.3
clip_start_time = "2"
clip_end_time = "18"
video_speed = 1.0
advanced_log = false
fade_in_duration = 2.0
fade_out_duration = 2.0
"""


def generate_test_video(output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)

    cmd = [
        "ffmpeg", "-y",
        "-f", "lavfi", "-i", "smptebars=s=320x240:r=25:d=20",
        "-f", "lavfi", "-i", "sine=f=440:d=20",
        "-c:v", "libx264",
        "-c:a", "aac",
        "-shortest",
        str(output),
    ]
    subprocess.run(cmd, check=True)
    print(f"Generated: {output}")


def generate_background(output: Path) -> None:
    cmd = [
        "ffmpeg", "-y",
        "-f", "lavfi", "-i", "sine=f=220:d=30",
        "-c:a", "aac",
        str(output),
    ]
    subprocess.run(cmd, check=True)
    print(f"Generated: {output}")


if __name__ == "__main__":
    out = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("tests/fixtures/synthetic.mp4")
    bg = out.with_name(out.stem + "_bg.m4a")
    generate_test_video(out)
    generate_background(bg)

    settings_path = out.with_suffix(".toml")
    settings_path.write_text(SETTINGS_TEMPLATE.format(
        video=out.resolve().as_posix(),
        output=out.with_name(out.stem + "_faded.mp4").resolve().as_posix(),
        background=bg.resolve().as_posix(),
    ))
    print(f"Settings: {settings_path}")
