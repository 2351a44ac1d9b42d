"""TOML settings schema — the contract between CLI/API and engine."""

import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from fadecut.errors import ConfigValidationError

NONE_SENTINEL = "none"

REQUIRED_KEYS = ("input_video_path", "output_video_path", "ffmpeg_path", "video_bitrate")

# Keys that are strings in the file but are commonly written as bare numbers.
_NUMERIC_STRING_KEYS = ("crf", "clip_start_time", "clip_end_time")


def is_unset(value: str | None) -> bool:
    """True for a missing optional value or the case-insensitive "none" sentinel."""
    return value is None or value.lower() == NONE_SENTINEL


@dataclass(frozen=True)
class Settings:
    """One fade/trim/mix/encode job."""

    input_video_path: str = ""
    output_video_path: str = ""
    ffmpeg_path: str = "ffmpeg"
    use_gpu: bool = False
    video_bitrate: str = ""
    crf: str | None = None
    upscale_resolution: str | None = None
    background_audio_path: str | None = None
    audio_start_time: float = 0.0
    replace_audio: bool = False
    original_audio_volume: float = 1.0
    background_audio_volume: float = 1.0
    clip_start_time: str | None = None
    clip_end_time: str | None = None
    video_speed: float = 1.0
    advanced_log: bool = False
    fade_in_duration: float | None = None
    fade_out_duration: float | None = None

    @property
    def has_background_audio(self) -> bool:
        return not is_unset(self.background_audio_path)

    def validate(self) -> None:
        """Raise ConfigValidationError if the settings cannot drive a run."""
        for key in REQUIRED_KEYS:
            if not getattr(self, key):
                raise ConfigValidationError(f"Missing required config key: {key}")
        if self.video_speed <= 0:
            raise ConfigValidationError(
                f"video_speed must be positive, got {self.video_speed}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        """Build Settings from a plain mapping, checking keys and value types."""
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigValidationError(f"Unknown config key(s): {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for key, value in data.items():
            values[key] = _coerce(key, known[key].type, value)
        return cls(**values)


def _coerce(key: str, annotation: Any, value: Any) -> Any:
    optional = "None" in str(annotation)
    if value is None:
        if optional:
            return None
        raise ConfigValidationError(f"Config key {key} must not be null")

    if annotation is bool:
        if not isinstance(value, bool):
            raise ConfigValidationError(f"Config key {key} must be a boolean")
        return value

    if annotation in (float, float | None):
        # bool is an int subclass; reject it explicitly.
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigValidationError(f"Config key {key} must be a number")
        return float(value)

    if key in _NUMERIC_STRING_KEYS and isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise ConfigValidationError(f"Config key {key} must be a string")
    return value


def load_settings(path: str | Path) -> Settings:
    """Load settings from the ``[settings]`` table of a TOML file."""
    path = Path(path)
    with path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigValidationError(f"Malformed config file {path}: {e}") from e

    if not isinstance(data.get("settings"), dict):
        raise ConfigValidationError("Config file must contain a [settings] table")

    return Settings.from_dict(data["settings"])
