"""Best-effort exclusive lock on the xtables lock file."""

from __future__ import annotations

import errno
import fcntl
import os
import threading
from typing import Optional, Union

XTABLES_LOCK_FILE_PATH = "/var/run/xtables.lock"
DEFAULT_FILE_PERM = 0o600


class _NopUnlocker:
    """Returned when another process holds the lock; releasing it frees nothing."""

    def __init__(self) -> None:
        self.released = False

    def unlock(self) -> None:
        self.released = True

    def __enter__(self) -> "_NopUnlocker":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unlock()


class XtablesFileLock:
    """Opens the xtables lock file without taking the lock.

    Used as a context manager, the file is closed on exit whether or not the
    lock was taken.
    """

    def __init__(self, path: Union[str, "os.PathLike[str]"] = XTABLES_LOCK_FILE_PATH) -> None:
        self._fd: Optional[int] = os.open(path, os.O_RDONLY | os.O_CREAT, DEFAULT_FILE_PERM)
        self._mutex = threading.Lock()
        self._held = False

    def try_lock(self) -> Union["XtablesFileLock", _NopUnlocker]:
        """Take the lock without blocking.

        Returns this object when the lock was taken, or a no-op unlocker when
        another process already holds it. Other failures are raised.
        """
        self._mutex.acquire()
        if self._fd is None:
            self._mutex.release()
            raise OSError(errno.EBADF, "lock file is closed")
        try:
            fcntl.flock(self._fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            self._mutex.release()
            return _NopUnlocker()
        except OSError:
            self._mutex.release()
            raise
        self._held = True
        return self

    def unlock(self) -> None:
        """Close the file, which drops the lock, and release the in-process mutex."""
        try:
            self._close_fd()
        finally:
            self._held = False
            self._mutex.release()

    def _close_fd(self) -> None:
        fd, self._fd = self._fd, None
        if fd is not None:
            os.close(fd)

    def __enter__(self) -> "XtablesFileLock":
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._held:
            self.unlock()
        else:
            self._close_fd()