"""Short-lived intermediate script files."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from nativeargs.core.paths import get_scratch_dir

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


@contextmanager
def temporary_script(
    content: str,
    *,
    suffix: str,
    encoding: str = "utf-8",
    newline: str | None = None,
) -> Iterator[Path]:
    """Write *content* to a fresh script file and delete it on every exit path."""
    directory = get_scratch_dir()
    directory.mkdir(parents=True, exist_ok=True)
    fd, raw_path = tempfile.mkstemp(prefix="nativeargs-", suffix=suffix, dir=directory)
    path = Path(raw_path)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline=newline) as handle:
            handle.write(content)
        if suffix == ".sh":
            path.chmod(path.stat().st_mode | stat.S_IXUSR)
        logger.debug("Created intermediate script %s", path)
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug("Removed intermediate script %s", path)


__all__ = ["temporary_script"]
