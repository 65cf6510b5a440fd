"""
Output writer for generated modules.

Leaves the target untouched when its content is already up to date, so build
tools watching modification times do not rebuild for nothing. Other writes go
through a temporary file in the same directory and an atomic rename.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from ..errors import FileAccessError

logger = logging.getLogger(__name__)


class AtomicWriter:
    """Writes files so an interrupted write never leaves a partial file.

    1. Write to a temporary file in the target's directory
    2. Atomically replace the target with it
    """

    def write(self, path: Path, content: bytes) -> None:
        """
        Write content to path atomically.

        Raises:
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_path_str = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "wb") as f:
                f.write(content)
            temp_path.replace(path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise


def write_if_different(path: str | Path, content: str, atomic: bool = True) -> bool:
    """
    Write content to path unless the file already holds exactly that content.

    Args:
        path: Target file
        content: Text to write (encoded as UTF-8)
        atomic: Whether to write through a temporary file and rename

    Returns:
        True if the file was written, False if it was already up to date

    Raises:
        FileAccessError: If the file cannot be read or written
    """
    path = Path(path)
    data = content.encode("utf-8")

    try:
        if path.is_file() and path.read_bytes() == data:
            logger.debug("%s is up to date", path)
            return False

        if atomic:
            AtomicWriter().write(path, data)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
    except OSError as e:
        raise FileAccessError(f"cannot write {path}: {e.strerror or e}") from e

    logger.debug("Wrote %s (%d bytes)", path, len(data))
    return True
