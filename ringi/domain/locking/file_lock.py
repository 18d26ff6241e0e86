import os
import time
import uuid
from pathlib import Path

from ringi.observability.tracing import log_event


class FileLock:
    """
    Named lock shared across processes through an exclusively created file.

    Expected layout:
        <lock_dir>/
          <name>.lock    (exists only while the lock is held; holds "<pid>:<token>")

    Each acquisition writes a fresh token, and ``release`` only removes a file
    that still carries it. A lock file older than ``stale_after`` seconds is
    treated as abandoned by a crashed holder: it is renamed aside, so only one
    waiter can break it, and then removed.
    """

    def __init__(self, name: str, *, lock_dir: Path, stale_after: float = 300.0) -> None:
        self.name = name
        self._path = Path(lock_dir) / f"{name}.lock"
        self._stale_after = stale_after
        self._token: str | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _age(self, path: Path) -> float:
        return time.time() - path.stat().st_mtime

    def _read(self, path: Path) -> str | None:
        try:
            return path.read_text()
        except FileNotFoundError:
            return None

    def _break_if_stale(self) -> None:
        try:
            age = self._age(self._path)
        except FileNotFoundError:
            return
        if age <= self._stale_after:
            return

        aside = self._path.with_name(f"{self._path.name}.{uuid.uuid4().hex}.stale")
        try:
            os.rename(self._path, aside)
        except FileNotFoundError:
            return
        try:
            if self._age(aside) <= self._stale_after:
                # Another waiter replaced the stale file first; hand its lock back.
                try:
                    os.link(aside, self._path)
                except FileExistsError:
                    pass
                return
            log_event("lock.stale_removed", lock=self.name, age_seconds=round(age, 3))
        finally:
            aside.unlink(missing_ok=True)

    def try_acquire(self) -> bool:
        self._break_if_stale()
        token = f"{os.getpid()}:{uuid.uuid4().hex}"
        try:
            fd = os.open(self._path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            return False
        with os.fdopen(fd, "w") as fh:
            fh.write(token)
        self._token = token
        return True

    def release(self) -> None:
        token, self._token = self._token, None
        if token is not None and self._read(self._path) == token:
            self._path.unlink(missing_ok=True)
