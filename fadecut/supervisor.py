"""Run the assembled ffmpeg command and track its progress."""

import logging
import subprocess
from enum import Enum
from typing import Callable

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from fadecut.command import Command
from fadecut.errors import ProcessExitError, ProcessLaunchError
from fadecut.ffutil import parse_progress_time

logger = logging.getLogger(__name__)


class State(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PassThrough:
    """ffmpeg writes straight to the caller's terminal."""

    def popen_kwargs(self) -> dict:
        return {}

    def consume(self, proc: subprocess.Popen) -> None:
        pass


class TrackProgress:
    """Read ffmpeg's stderr line by line and drive a progress bar from ``time=``.

    The bar's total is the probed duration. The estimate only moves forward
    and is not forced to 100% when ffmpeg's last timestamp falls short.
    """

    def __init__(
        self,
        duration: float,
        on_progress: Callable[[float], None] | None = None,
        console: Console | None = None,
        show_bar: bool = True,
    ):
        self.duration = duration
        self.on_progress = on_progress
        self.console = console
        self.show_bar = show_bar
        self.elapsed = 0.0

    def popen_kwargs(self) -> dict:
        return {
            "stdout": subprocess.DEVNULL,
            "stderr": subprocess.PIPE,
            "text": True,
            "errors": "replace",
        }

    def update(self, line: str) -> bool:
        """Fold one stderr line into the estimate; True if it advanced."""
        t = parse_progress_time(line)
        if t is None or t < self.elapsed:
            return False
        self.elapsed = t
        if self.on_progress:
            self.on_progress(t)
        return True

    def consume(self, proc: subprocess.Popen) -> None:
        with Progress(
            TextColumn("[bold cyan]{task.description}"),
            BarColumn(bar_width=40, complete_style="cyan", finished_style="blue"),
            TaskProgressColumn(),
            TextColumn("({task.completed:.0f}/{task.total:.0f}s)"),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=self.console,
            disable=not self.show_bar,
        ) as prog:
            task = prog.add_task("Encoding", total=self.duration)
            for line in proc.stderr:
                if self.update(line):
                    prog.update(task, completed=self.elapsed)


class Supervisor:
    """Runs one command to completion; never retries."""

    def __init__(self, command: Command | list[str], mode: PassThrough | TrackProgress):
        self.argv = command.argv if isinstance(command, Command) else list(command)
        self.mode = mode
        self.state = State.NOT_STARTED
        self.returncode: int | None = None

    def run(self) -> None:
        """Block until ffmpeg exits; raise on launch failure or non-zero exit."""
        try:
            proc = subprocess.Popen(self.argv, **self.mode.popen_kwargs())
        except OSError as e:
            self.state = State.FAILED
            raise ProcessLaunchError(f"Could not start {self.argv[0]}: {e}") from e

        self.state = State.RUNNING
        with proc:
            try:
                self.mode.consume(proc)
            except BaseException:
                self.state = State.FAILED
                raise

        self.returncode = proc.returncode
        if self.returncode != 0:
            self.state = State.FAILED
            raise ProcessExitError(self.returncode)

        self.state = State.SUCCEEDED
        logger.debug("ffmpeg exited cleanly")


def select_mode(
    advanced_log: bool,
    duration: float,
    on_progress: Callable[[float], None] | None = None,
    show_bar: bool = True,
) -> PassThrough | TrackProgress:
    if advanced_log:
        return PassThrough()
    return TrackProgress(duration, on_progress=on_progress, show_bar=show_bar)
