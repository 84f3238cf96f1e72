"""Output file checks: never overwrite, optionally move aside."""

from __future__ import annotations

import itertools
import logging
from pathlib import Path

from screencaster.errors import OutputExists

DEFAULT_BACKUP_SUFFIX = ".screencaster.bak"


def backup_path(path: Path, suffix: str = DEFAULT_BACKUP_SUFFIX) -> Path:
    """Return the first unused backup name for *path*.

    ``out.mp4`` becomes ``out.mp4.screencaster.bak``; if that is taken,
    ``out.mp4.screencaster.bak.~1~``, ``~2~`` and so on.
    """
    path = Path(path)
    candidate = path.with_name(path.name + suffix)
    if not candidate.exists():
        return candidate
    for n in itertools.count(1):
        numbered = candidate.with_name(f"{candidate.name}.~{n}~")
        if not numbered.exists():
            return numbered
    raise AssertionError("unreachable")


def prepare_output(
    path: Path,
    force: bool,
    logger: logging.Logger,
    suffix: str = DEFAULT_BACKUP_SUFFIX,
) -> Path | None:
    """Make sure recording to *path* cannot clobber an existing file.

    Raises OutputExists if *path* exists and *force* is False. With *force*
    the existing file is renamed aside and the backup path is returned.
    """
    path = Path(path)
    if not path.exists():
        return None
    if not force:
        raise OutputExists(path)

    backup = backup_path(path, suffix)
    path.rename(backup)
    logger.info("Renamed existing '%s' -> '%s'", path, backup)
    return backup
