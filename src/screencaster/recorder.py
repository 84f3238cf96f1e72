"""Screen recording with ffmpeg's x11grab input."""

from __future__ import annotations

import enum
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from screencaster import tools
from screencaster.errors import CaptureProcessExitedEarly, StopSignalFailed
from screencaster.geometry import CaptureRegion


def default_display() -> str:
    return os.environ.get("DISPLAY", ":0")


@dataclass(frozen=True)
class RecordingConfig:
    """Everything the capture process needs to know."""

    region: CaptureRegion
    output_path: Path
    framerate: int = 30
    include_cursor: bool = False
    display: str = field(default_factory=default_display)

    def __post_init__(self):
        if self.framerate <= 0:
            raise ValueError(f"framerate must be positive, got {self.framerate}")


class SessionState(enum.Enum):
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass
class CaptureSessionHandle:
    """A running ffmpeg capture process."""

    process: subprocess.Popen
    output_path: Path
    state: SessionState = SessionState.RUNNING

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def is_running(self) -> bool:
        return self.process.poll() is None


def build_capture_cmd(config: RecordingConfig) -> list[str]:
    """Build the ffmpeg command that records *config.region* to the output."""
    ffmpeg = tools.require("ffmpeg")
    region = config.region
    return [
        ffmpeg, "-y",
        "-f", "x11grab",
        "-video_size", region.video_size,
        "-framerate", str(config.framerate),
        "-draw_mouse", "1" if config.include_cursor else "0",
        "-i", f"{config.display}{region.offset}",
        str(config.output_path),
    ]


class CaptureSession:
    """Starts, awaits and stops an ffmpeg screen capture."""

    def __init__(self, logger: logging.Logger, stop_timeout: float = 10):
        self.logger = logger
        self.stop_timeout = stop_timeout

    def start(self, config: RecordingConfig) -> CaptureSessionHandle:
        """Launch the capture process in the background."""
        cmd = build_capture_cmd(config)
        self.logger.debug("Running: %s", shlex.join(cmd))
        sink = None if self.logger.isEnabledFor(logging.DEBUG) else subprocess.DEVNULL
        process = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=sink,
            stderr=sink,
        )
        self.logger.debug("Capture started (PID %s)", process.pid)
        return CaptureSessionHandle(process=process, output_path=Path(config.output_path))

    def wait_for_stop(self, notifier) -> None:
        """Block until the operator triggers *notifier*. There is no timeout.

        Any failure of the notifier itself (yad not runnable, no tray
        backend) is raised as StopSignalFailed.
        """
        try:
            notifier.wait()
        except StopSignalFailed:
            raise
        except Exception as e:
            raise StopSignalFailed(f"Stop notification failed: {e}") from e

    def stop(self, handle: CaptureSessionHandle) -> Path:
        """Terminate the capture and wait until the process has exited.

        Returns the path of the finished recording. Raises
        CaptureProcessExitedEarly if the process was already gone.
        """
        if handle.state is SessionState.STOPPED:
            return handle.output_path

        process = handle.process
        if not handle.is_running:
            handle.state = SessionState.STOPPED
            raise CaptureProcessExitedEarly(process.returncode)

        handle.state = SessionState.STOPPING
        # ffmpeg finalizes the container on SIGTERM
        process.terminate()
        try:
            process.wait(timeout=self.stop_timeout)
        except subprocess.TimeoutExpired:
            self.logger.warning(
                "Capture process did not exit within %ss; killing it", self.stop_timeout
            )
            process.kill()
            process.wait()
        handle.state = SessionState.STOPPED
        self.logger.debug("Capture stopped (exit code %s)", process.returncode)
        return handle.output_path
