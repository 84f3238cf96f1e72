"""Entry point for screencaster."""

from __future__ import annotations

import argparse
import functools
import logging
import sys
import time
from pathlib import Path

from screencaster import dialogs, tools
from screencaster.config import DEFAULT_CONFIG, load_config
from screencaster.errors import (
    Cancelled,
    CaptureProcessExitedEarly,
    ConfigInvalid,
    ErrorReport,
    OptimizeFailed,
    ScreencasterError,
    TranscodeFailed,
)
from screencaster.logger import setup_logger
from screencaster.output import prepare_output
from screencaster.postprocess import (
    PaletteOptions,
    PostProcessor,
    PostProcessSpec,
    capture_destination,
    target_format_for,
)
from screencaster.recorder import CaptureSession, CaptureSessionHandle, RecordingConfig
from screencaster.region import RegionOverrides, RegionResolver, SelectionMode

# Dithering algorithms accepted by ffmpeg's paletteuse filter
DITHER_METHODS = {
    "bayer", "heckbert", "floyd_steinberg", "sierra2", "sierra2_4a",
    "sierra3", "burkes", "atkinson",
}

START_MESSAGE = (
    "Press OK, then recording will start in 1 second.  Click on the tray icon to stop."
)

DESCRIPTION = """\
Record screencasts to videos or GIFs with ffmpeg. Records the whole screen,
a window, or a selected rectangle, and can optimize GIFs with gifsicle.

OUTPUT-FILE should end with the desired type's extension, e.g. ".mp4" or
".gif". Click the stop icon in the notification area to stop recording.
"""


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def _color_count(value: str) -> int:
    number = int(value)
    if not 2 <= number <= 256:
        raise argparse.ArgumentTypeError(f"must be between 2 and 256: {value}")
    return number


def _int_between(low: int, high: int):
    def check(value: str) -> int:
        number = int(value)
        if not low <= number <= high:
            raise argparse.ArgumentTypeError(f"must be between {low} and {high}: {value}")
        return number
    return check


def _non_negative_float(value: str) -> float:
    number = float(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def _one_of(choices):
    def check(value: str) -> str:
        if value not in choices:
            raise argparse.ArgumentTypeError(f"choose one of: {', '.join(sorted(choices))}")
        return value
    return check


def _suffix(value: str) -> str:
    if not value or "/" in value:
        raise argparse.ArgumentTypeError("must be a non-empty file name suffix")
    return value


# Config values go through the same checks as the matching options
CONFIG_CHECKS = {
    "framerate": _positive_int,
    "start_delay": _non_negative_float,
    "stop_notifier": _one_of(dialogs.NOTIFIERS),
    "stop_timeout": _positive_float,
    "backup_suffix": _suffix,
    "dither_method": _one_of(DITHER_METHODS),
    "bayer_scale": _int_between(0, 5),
    "optimize_level": _int_between(1, 3),
}


def validate_config(config: dict) -> dict:
    """Return a copy of *config* with every value checked and converted.

    Raises ConfigInvalid for the first bad value.
    """
    checked = dict(config)
    if not isinstance(config["cursor"], bool):
        raise ConfigInvalid("cursor", config["cursor"], "must be true or false")
    for key, check in CONFIG_CHECKS.items():
        value = config[key]
        try:
            checked[key] = check(str(value))
        except argparse.ArgumentTypeError as e:
            raise ConfigInvalid(key, value, str(e)) from None
        except ValueError:
            raise ConfigInvalid(key, value, "not a valid number") from None
    return checked


def build_parser(config: dict) -> argparse.ArgumentParser:
    # -h is --height, so help is long-option only
    parser = argparse.ArgumentParser(
        prog="screencaster",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("output_file", metavar="OUTPUT-FILE", type=Path)

    general = parser.add_argument_group("options")
    general.add_argument("--debug", action="store_true", help="Print debug info")
    general.add_argument("--help", action="help", help="Show this message and exit")
    general.add_argument(
        "--force", action="store_true",
        help="Move an existing output file aside instead of failing",
    )
    general.add_argument(
        "-y", "--no-confirm", dest="confirm", action="store_false",
        help="Don't ask for confirmation before recording",
    )
    general.add_argument(
        "--stop-with", choices=sorted(dialogs.NOTIFIERS), default=config["stop_notifier"],
        help="How recording is stopped: yad notification or tray icon (default: %(default)s)",
    )

    target = parser.add_argument_group("target")
    target.add_argument(
        "-c", "--cursor", action="store_true", default=bool(config["cursor"]),
        help="Record mouse cursor",
    )
    target.add_argument(
        "-F", "--fullscreen", dest="mode", action="store_const",
        const=SelectionMode.FULLSCREEN, default=SelectionMode.FULLSCREEN,
        help="Record the whole screen (the default)",
    )
    target.add_argument(
        "-R", "--rectangle", dest="mode", action="store_const",
        const=SelectionMode.RECTANGLE, help="Select and record a rectangle",
    )
    target.add_argument(
        "-W", "--window", dest="mode", action="store_const",
        const=SelectionMode.WINDOW, help="Select and record a window",
    )
    target.add_argument(
        "-f", "--framerate", type=_positive_int, default=int(config["framerate"]),
        metavar="NUMBER", help="Video framerate (default: %(default)s)",
    )
    target.add_argument(
        "-l", "--left", type=_non_negative_int, metavar="NUMBER",
        help="Video left edge position (default: 0)",
    )
    target.add_argument(
        "-t", "--top", type=_non_negative_int, metavar="NUMBER",
        help="Video top edge position (default: 0)",
    )
    target.add_argument("-h", "--height", type=_positive_int, metavar="NUMBER", help="Video height")
    target.add_argument("-w", "--width", type=_positive_int, metavar="NUMBER", help="Video width")

    gif = parser.add_argument_group("GIF output")
    gif.add_argument(
        "--max-colors", type=_color_count, metavar="NUMBER", help="Limit colors in palette",
    )
    gif.add_argument(
        "-d", "--dither", action="store_true", help="Enable dithering to reduce filesize",
    )
    gif.add_argument(
        "-o", "--optimize", action="store_true", help="Optimize GIF with gifsicle",
    )
    return parser


def _reap(session: CaptureSession, handle: CaptureSessionHandle, logger: logging.Logger) -> None:
    """Stop the capture after the wait was interrupted."""
    try:
        session.stop(handle)
    except CaptureProcessExitedEarly as e:
        # Ctrl-C reaches ffmpeg too, so it has usually exited already
        logger.debug("%s", e)


def run(args: argparse.Namespace, config: dict, logger: logging.Logger, report: ErrorReport) -> None:
    """Validate, resolve the region, record and post-process.

    Fatal errors raise; recoverable ones are added to *report*.
    """
    if not tools.check_programs(tools.required_programs(args.optimize), report, logger):
        raise ScreencasterError("Please install the required programs.")

    output = Path(args.output_file)
    prepare_output(output, args.force, logger, config["backup_suffix"])

    ask = functools.partial(dialogs.confirm, enabled=args.confirm, logger=logger)
    overrides = RegionOverrides(
        left=args.left, top=args.top, width=args.width, height=args.height
    )
    region = RegionResolver(ask, logger).resolve(args.mode, overrides)

    if not ask(START_MESSAGE):
        raise Cancelled()
    # Give the confirmation dialog time to disappear before the first frame
    time.sleep(float(config["start_delay"]))

    target_format = target_format_for(output)
    notifier = dialogs.make_stop_notifier(args.stop_with)
    session = CaptureSession(logger, stop_timeout=float(config["stop_timeout"]))
    processor = PostProcessor(logger, optimize_level=int(config["optimize_level"]))
    palette = PaletteOptions(
        max_colors=args.max_colors,
        dither=args.dither,
        dither_method=config["dither_method"],
        bayer_scale=int(config["bayer_scale"]),
    )

    with capture_destination(output, target_format) as destination:
        recording = RecordingConfig(
            region=region,
            output_path=destination,
            framerate=args.framerate,
            include_cursor=args.cursor,
        )
        handle = session.start(recording)
        logger.info("Recording %s at %s...", region.video_size, region.offset)
        try:
            session.wait_for_stop(notifier)
        except BaseException:
            _reap(session, handle, logger)
            raise

        try:
            captured = session.stop(handle)
        except CaptureProcessExitedEarly as e:
            logger.error(str(e))
            report.add(e)
            return

        spec = PostProcessSpec(
            input_path=captured,
            output_path=output,
            target_format=target_format,
            palette=palette,
            optimize=args.optimize,
        )
        try:
            processor.process(spec)
        except (TranscodeFailed, OptimizeFailed) as e:
            logger.error(str(e))
            report.add(e)
            return

    logger.info("Saved %s", output)


def main(argv: list[str] | None = None) -> int:
    config_error = None
    try:
        config = validate_config(load_config())
    except ConfigInvalid as e:
        # Parse with defaults so --help and usage errors still work
        config_error = e
        config = dict(DEFAULT_CONFIG)

    args = build_parser(config).parse_args(argv)
    logger = setup_logger(args.debug)
    logger.debug("Arguments: %s", vars(args))

    report = ErrorReport()
    if config_error is not None:
        logger.error(str(config_error))
        report.add(config_error)
        return report.exit_code

    try:
        run(args, config, logger, report)
    except ScreencasterError as e:
        logger.error(str(e))
        report.add(e)
    except KeyboardInterrupt:
        e = Cancelled("Interrupted.")
        logger.error(str(e))
        report.add(e)
    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
