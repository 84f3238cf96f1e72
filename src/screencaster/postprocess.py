"""Turn a finished capture into the requested output.

Video containers are written by the recorder directly. GIF output is
recorded to an intermediate video first and converted with ffmpeg's
palettegen/paletteuse filters, which give far less color banding than a
single-pass conversion. See
<https://engineering.giphy.com/how-to-make-gifs-with-ffmpeg/>.
"""

from __future__ import annotations

import contextlib
import enum
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from screencaster import tools
from screencaster.errors import OptimizeFailed, TranscodeFailed

ANIMATED_IMAGE_SUFFIXES = {".gif"}
INTERMEDIATE_SUFFIX = ".mp4"


class TargetFormat(enum.Enum):
    VIDEO = "video"
    ANIMATED_IMAGE = "animated-image"


def target_format_for(path: str | Path) -> TargetFormat:
    """Return the output format implied by *path*'s extension."""
    if Path(path).suffix.lower() in ANIMATED_IMAGE_SUFFIXES:
        return TargetFormat.ANIMATED_IMAGE
    return TargetFormat.VIDEO


@dataclass(frozen=True)
class PaletteOptions:
    """Palette generation settings for GIF output."""

    max_colors: int | None = None
    dither: bool = False
    dither_method: str = "bayer"
    bayer_scale: int = 5

    def __post_init__(self):
        if self.max_colors is not None and not 2 <= self.max_colors <= 256:
            raise ValueError(f"max_colors must be between 2 and 256, got {self.max_colors}")


@dataclass(frozen=True)
class PostProcessSpec:
    input_path: Path
    output_path: Path
    target_format: TargetFormat
    palette: PaletteOptions = field(default_factory=PaletteOptions)
    optimize: bool = False


@dataclass
class PostProcessResult:
    """What happened to the capture."""

    output_path: Path
    transcoded: bool = False
    optimized: bool = False


def build_palette_filter(palette: PaletteOptions) -> str:
    """Build the ffmpeg filter graph for the two-pass palette conversion.

    Duplicate frames are dropped first; one copy of the stream feeds
    palettegen, the other is mapped through the generated palette.
    """
    palettegen = "palettegen"
    if palette.max_colors is not None:
        palettegen += f"=max_colors={palette.max_colors}"

    paletteuse = "paletteuse"
    if palette.dither:
        paletteuse += f"=dither={palette.dither_method}"
        if palette.dither_method == "bayer":
            paletteuse += f":bayer_scale={palette.bayer_scale}"

    return f"[0:v] mpdecimate,split [a][b];[a] {palettegen} [p];[b][p] {paletteuse}"


@contextlib.contextmanager
def intermediate_file(suffix: str = INTERMEDIATE_SUFFIX) -> Iterator[Path]:
    """Yield a temporary file path that is removed however the block exits."""
    fd, tmp = tempfile.mkstemp(suffix=suffix, prefix="screencaster_")
    os.close(fd)
    path = Path(tmp)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


@contextlib.contextmanager
def capture_destination(output_path: Path, target_format: TargetFormat) -> Iterator[Path]:
    """Yield the path the recorder should write to for *target_format*."""
    if target_format is TargetFormat.VIDEO:
        yield Path(output_path)
        return
    with intermediate_file() as path:
        yield path


class PostProcessor:
    """Transcodes and optimizes finished captures."""

    def __init__(self, logger: logging.Logger, optimize_level: int = 3):
        self.logger = logger
        self.optimize_level = optimize_level

    def process(self, spec: PostProcessSpec) -> PostProcessResult:
        result = PostProcessResult(output_path=Path(spec.output_path))

        if spec.target_format is TargetFormat.VIDEO:
            if spec.optimize:
                self.logger.debug("Optimization only applies to GIF output; skipping")
            return result

        self.logger.debug("Video recorded.  Converting to GIF...")
        self.transcode(spec.input_path, spec.output_path, spec.palette)
        result.transcoded = True

        if spec.optimize:
            self.optimize(spec.output_path)
            result.optimized = True
        return result

    def transcode(self, input_path: Path, output_path: Path, palette: PaletteOptions) -> None:
        """Convert the captured video to a GIF through the palette pipeline."""
        cmd = [
            tools.require("ffmpeg"), "-y",
            "-i", str(input_path),
            "-filter_complex", build_palette_filter(palette),
            str(output_path),
        ]
        result = tools.run_tool(cmd, self.logger, capture=False)
        if result.returncode != 0:
            raise TranscodeFailed(
                f"ffmpeg failed to convert {input_path} to {output_path} "
                f"(exit code {result.returncode})"
            )

    def optimize(self, path: Path) -> None:
        """Losslessly shrink the GIF at *path* with gifsicle.

        gifsicle writes to a sibling file that replaces *path* only on
        success, so a failure leaves the unoptimized GIF in place.
        """
        path = Path(path)
        self.logger.debug("Optimizing...")
        fd, tmp = tempfile.mkstemp(suffix=path.suffix, prefix=f".{path.stem}_", dir=path.parent)
        os.close(fd)
        optimized = Path(tmp)
        try:
            cmd = [
                tools.require("gifsicle"),
                f"-O{self.optimize_level}",
                str(path),
                "-o", str(optimized),
            ]
            result = tools.run_tool(cmd, self.logger, capture=False)
            if result.returncode != 0:
                raise OptimizeFailed(
                    f"gifsicle failed to optimize {path} (exit code {result.returncode}); "
                    "keeping the unoptimized file"
                )
            os.replace(optimized, path)
        finally:
            optimized.unlink(missing_ok=True)
