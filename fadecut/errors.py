"""Exceptions raised by the fadecut pipeline.

Every error is terminal for a run: nothing here is retried, the first failing
stage stops the pipeline and the exception propagates to the caller.
"""


class PipelineError(RuntimeError):
    pass


class ConfigValidationError(PipelineError, ValueError):
    """A required setting is missing, empty, or has the wrong type."""
    pass


class ProbeError(PipelineError):
    pass


class ProbeLaunchError(ProbeError):
    """The probe process could not be started."""
    pass


class DurationNotFoundError(ProbeError):
    """No parsable ``Duration:`` line in the probe output."""
    pass


class FrameRateNotFoundError(ProbeError):
    """No parsable ``<n> fps`` token on a video stream line."""
    pass


class InvalidTimingError(PipelineError, ValueError):
    """A clip boundary is neither a number nor the "none" sentinel."""

    def __init__(self, field: str, value: str):
        super().__init__(f"Invalid {field}: {value!r} is not a number of seconds")
        self.field = field
        self.value = value


class ProcessLaunchError(PipelineError):
    pass


class ProcessExitError(PipelineError):
    """ffmpeg ran but exited unsuccessfully."""

    def __init__(self, returncode: int):
        self.returncode = returncode
        if returncode < 0:
            self.status = f"signal: {-returncode}"
        else:
            self.status = f"exit status: {returncode}"
        super().__init__(f"FFmpeg command failed with status: {self.status}")
