"""Replace a file on disk, keeping a backup until the new content is in place."""

from __future__ import annotations

import logging
import os
import stat
from datetime import datetime

_PERMS = 0o755
_BACKUP_STAMP = "%Y.%m.%d_%H:%M:%S"


class NotAFileError(OSError):
    """Raised when the target path exists but is not a regular file."""


class SafeWriter:
    """Writes a file by first moving any existing file aside as a backup.

    If writing the new content fails, the backup is moved back into place.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logging.getLogger(__name__)

    def write(self, path: str | os.PathLike[str], data: bytes) -> None:
        """Write ``data`` to ``path`` with executable permissions."""
        target = os.fspath(path)
        backup = self._backup(target)

        try:
            fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _PERMS)
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
        except OSError:
            if backup is not None:
                try:
                    os.replace(backup, target)
                except OSError as exc:
                    self._log.error("restoring from backup: %s", exc)
            raise

        if backup is not None:
            os.remove(backup)

    @staticmethod
    def _backup(path: str) -> str | None:
        try:
            info = os.stat(path)
        except FileNotFoundError:
            return None
        if stat.S_ISDIR(info.st_mode):
            raise NotAFileError(f"not a file: {path!r}")

        backup = f"{path}_{datetime.now().strftime(_BACKUP_STAMP)}"
        os.rename(path, backup)
        return backup