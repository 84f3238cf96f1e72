"""Resolve the screen region to record.

Three strategies are supported:

- full screen: the desktop geometry reported by ``xprop``
- window: the operator clicks a window, ``xwininfo`` reports its geometry
- rectangle: the operator drags a rectangle with ``slop``; when slop is not
  installed this falls back to the window strategy

The region is resolved once. If the target window moves or is resized while
recording, the capture does not follow it.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable

from screencaster import tools
from screencaster.errors import Cancelled, GeometryUnavailable, ToolMissing
from screencaster.geometry import (
    CaptureRegion,
    parse_desktop_geometry,
    parse_slop_output,
    parse_window_info,
)

WINDOW_MESSAGE = "Press OK, then click the window you want to record."
RECTANGLE_FALLBACK_MESSAGE = (
    "Press OK, then select the window that covers the area you want to record."
)
SLOP_FORMAT = "%x %y %w %h"


class SelectionMode(enum.Enum):
    FULLSCREEN = "fullscreen"
    WINDOW = "window"
    RECTANGLE = "rectangle"


@dataclass(frozen=True)
class RegionOverrides:
    """Region values given explicitly on the command line (None = not given)."""

    left: int | None = None
    top: int | None = None
    width: int | None = None
    height: int | None = None


class RegionResolver:
    """Turns a selection mode into a CaptureRegion.

    *confirm* is called with a message before any interactive pick and must
    return True to proceed.
    """

    def __init__(self, confirm: Callable[[str], bool], logger: logging.Logger):
        self.confirm = confirm
        self.logger = logger

    def resolve(
        self, mode: SelectionMode, overrides: RegionOverrides | None = None
    ) -> CaptureRegion:
        overrides = overrides or RegionOverrides()
        if mode is SelectionMode.FULLSCREEN:
            region = self.fullscreen(overrides)
        elif mode is SelectionMode.WINDOW:
            region = self.window()
        elif mode is SelectionMode.RECTANGLE:
            region = self.rectangle()
        else:
            raise ValueError(f"Unknown selection mode: {mode!r}")
        self.logger.debug(
            "Resolved %s region: %s at %s", mode.value, region.video_size, region.offset
        )
        return region

    def fullscreen(self, overrides: RegionOverrides) -> CaptureRegion:
        result = tools.run_tool(
            [tools.require("xprop"), "-root", "_NET_DESKTOP_GEOMETRY"], self.logger
        )
        if result.returncode != 0:
            raise GeometryUnavailable("Unable to get screen dimensions from xprop.")
        width, height = parse_desktop_geometry(result.stdout)

        # Explicit values win field by field
        return CaptureRegion(
            left=overrides.left if overrides.left is not None else 0,
            top=overrides.top if overrides.top is not None else 0,
            width=overrides.width if overrides.width is not None else width,
            height=overrides.height if overrides.height is not None else height,
        )

    def window(self, message: str = WINDOW_MESSAGE) -> CaptureRegion:
        xwininfo = tools.require("xwininfo")
        if not self.confirm(message):
            raise Cancelled()
        result = tools.run_tool([xwininfo], self.logger)
        if result.returncode != 0:
            raise GeometryUnavailable(
                f"xwininfo failed (exit code {result.returncode}): {result.stderr.strip()}"
            )
        return parse_window_info(result.stdout)

    def rectangle(self) -> CaptureRegion:
        slop = tools.which("slop")
        if slop is None:
            if tools.which("xwininfo") is None:
                raise ToolMissing("slop")
            self.logger.info("Unable to find slop; using fallback rectangle selection method")
            return self.window(RECTANGLE_FALLBACK_MESSAGE)

        result = tools.run_tool([slop, "-f", SLOP_FORMAT], self.logger)
        if result.returncode != 0:
            # slop exits non-zero when the selection is aborted
            raise Cancelled("Rectangle selection canceled.")
        return parse_slop_output(result.stdout)
