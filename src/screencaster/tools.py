"""Lookup and invocation of the external programs screencaster drives."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from typing import Iterable, Sequence

from screencaster.errors import ErrorReport, ToolMissing

REQUIRED_PROGRAMS = ("ffmpeg", "xprop", "xwininfo", "yad")
OPTIMIZER = "gifsicle"


def which(program: str) -> str | None:
    """Return the full path of *program*, or None if it is not on PATH."""
    return shutil.which(program)


def require(program: str) -> str:
    """Return the full path of *program* or raise ToolMissing."""
    path = which(program)
    if path is None:
        raise ToolMissing(program)
    return path


def required_programs(optimize: bool = False) -> list[str]:
    """Programs that must be present before anything is recorded."""
    programs = list(REQUIRED_PROGRAMS)
    if optimize:
        programs.append(OPTIMIZER)
    return programs


def check_programs(programs: Iterable[str], report: ErrorReport, logger: logging.Logger) -> bool:
    """Record a ToolMissing in *report* for every absent program.

    Returns True when all of them were found.
    """
    ok = True
    for program in programs:
        if which(program) is None:
            error = ToolMissing(program)
            logger.error(str(error))
            report.add(error)
            ok = False
    return ok


def run_tool(
    cmd: Sequence[str], logger: logging.Logger, capture: bool = True
) -> subprocess.CompletedProcess:
    """Run an external program to completion and return its result.

    Output is captured as text when *capture* is set; otherwise it is
    discarded unless debug logging is active.
    """
    logger.debug("Running: %s", shlex.join(cmd))
    if capture:
        return subprocess.run(list(cmd), capture_output=True, text=True, check=False)
    sink = None if logger.isEnabledFor(logging.DEBUG) else subprocess.DEVNULL
    return subprocess.run(list(cmd), stdout=sink, stderr=sink, check=False)
