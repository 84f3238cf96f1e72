"""Error types and the per-run error report."""

from __future__ import annotations

from dataclasses import dataclass, field


class ScreencasterError(RuntimeError):
    """Base class for every error screencaster reports to the operator."""


class ToolMissing(ScreencasterError):
    """A required external program is not installed or not on PATH."""

    def __init__(self, program: str):
        super().__init__(f"Program not found: {program}")
        self.program = program


class GeometryUnavailable(ScreencasterError):
    """A geometry query returned output that could not be parsed."""


class Cancelled(ScreencasterError):
    """The operator declined a confirmation or aborted a selection."""

    def __init__(self, message: str = "Canceled."):
        super().__init__(message)


class OutputExists(ScreencasterError):
    """The output file exists and --force was not given."""

    def __init__(self, path):
        super().__init__(f"Output file exists and no --force: {path}")
        self.path = path


class CaptureProcessExitedEarly(ScreencasterError):
    """The capture process ended before it was asked to stop."""

    def __init__(self, returncode: int | None):
        super().__init__(
            f"Capture process exited before recording was stopped (exit code {returncode})"
        )
        self.returncode = returncode


class TranscodeFailed(ScreencasterError):
    """ffmpeg failed while converting the capture to the target format."""


class OptimizeFailed(ScreencasterError):
    """gifsicle failed; the unoptimized output is kept."""


class ConfigInvalid(ScreencasterError):
    """A value in config.json is out of range or of the wrong type."""

    def __init__(self, key: str, value, reason: str):
        super().__init__(f"Invalid config value for {key!r}: {value!r} ({reason})")
        self.key = key


class StopSignalFailed(ScreencasterError):
    """The stop notification could not be shown or waited on."""


@dataclass
class ErrorReport:
    """Errors accumulated over one run. The exit code is their count."""

    errors: list[ScreencasterError] = field(default_factory=list)

    def add(self, error: ScreencasterError) -> None:
        self.errors.append(error)

    @property
    def exit_code(self) -> int:
        return len(self.errors)
