"""Capture regions and parsers for the X11 geometry tools' output."""

from __future__ import annotations

import re
from dataclasses import dataclass

from screencaster.errors import GeometryUnavailable

_DESKTOP_GEOMETRY_RE = re.compile(
    r"_NET_DESKTOP_GEOMETRY\(CARDINAL\)\s*=\s*(\d+)\s*,\s*(\d+)"
)

# Fields read from `xwininfo` output, keyed by CaptureRegion attribute
_WINDOW_FIELDS = {
    "left": re.compile(r"^\s*Absolute upper-left X:\s+(-?\d+)\s*$", re.MULTILINE),
    "top": re.compile(r"^\s*Absolute upper-left Y:\s+(-?\d+)\s*$", re.MULTILINE),
    "width": re.compile(r"^\s*Width:\s+(-?\d+)\s*$", re.MULTILINE),
    "height": re.compile(r"^\s*Height:\s+(-?\d+)\s*$", re.MULTILINE),
}

_SLOP_RE = re.compile(r"^\s*(-?\d+)\s+(-?\d+)\s+(-?\d+)\s+(-?\d+)\s*$")


@dataclass(frozen=True)
class CaptureRegion:
    """A rectangular screen area: absolute origin plus size, in pixels."""

    left: int
    top: int
    width: int
    height: int

    def __post_init__(self):
        if self.left < 0 or self.top < 0:
            raise GeometryUnavailable(
                f"Region origin must not be negative: {self.left},{self.top}"
            )
        if self.width <= 0 or self.height <= 0:
            raise GeometryUnavailable(
                f"Region size must be positive: {self.width}x{self.height}"
            )

    @property
    def video_size(self) -> str:
        """Size in ffmpeg's ``-video_size`` notation."""
        return f"{self.width}x{self.height}"

    @property
    def offset(self) -> str:
        """Origin in x11grab's ``DISPLAY+X,Y`` input notation."""
        return f"+{self.left},{self.top}"


def parse_desktop_geometry(output: str) -> tuple[int, int]:
    """Parse ``xprop -root _NET_DESKTOP_GEOMETRY`` into (width, height)."""
    match = _DESKTOP_GEOMETRY_RE.search(output)
    if match is None:
        raise GeometryUnavailable("Unable to get screen dimensions from xprop.")
    return int(match.group(1)), int(match.group(2))


def parse_window_info(output: str) -> CaptureRegion:
    """Parse ``xwininfo`` output into the window's absolute region.

    All four fields must be present; a partial match is an error.
    """
    values: dict[str, int] = {}
    missing = []
    for name, pattern in _WINDOW_FIELDS.items():
        match = pattern.search(output)
        if match is None:
            missing.append(name)
        else:
            values[name] = int(match.group(1))
    if missing:
        raise GeometryUnavailable(
            "Unable to get window dimensions from xwininfo (missing: "
            + ", ".join(missing)
            + ")"
        )
    return CaptureRegion(**values)


def parse_slop_output(output: str) -> CaptureRegion:
    """Parse ``slop -f '%x %y %w %h'`` output."""
    match = _SLOP_RE.match(output)
    if match is None:
        raise GeometryUnavailable(f"Unable to parse selection from slop: {output.strip()!r}")
    left, top, width, height = (int(g) for g in match.groups())
    return CaptureRegion(left, top, width, height)
