"""Safe file I/O utilities.

Provides an atomic-ish whole-file replace for snapshot files, with file
locking (``fcntl``) and ``fsync`` to minimise data loss on crash or
concurrent access.
"""

from __future__ import annotations

import fcntl
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def safe_write_text(path: Path, text: str) -> None:
    """Replace the contents of *path* with *text*.

    * The data is written to a sibling ``.tmp`` file first, so a crash
      mid-write never truncates the previous snapshot.
    * ``fcntl.LOCK_EX`` on the temp file prevents interleaved writes from
      two journal processes sharing the same data directory.
    * ``os.fsync`` ensures the data hits disk before ``os.replace`` swaps
      it into place.
    * Parent directories are created as needed.

    Raises ``UnicodeEncodeError`` before touching the disk if *text* cannot
    be encoded as UTF-8.  The temp file is removed if the write fails.
    """
    data = text.encode("utf-8")
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(tmp_path, "wb") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.debug("Wrote %d bytes to %s", len(data), path)
