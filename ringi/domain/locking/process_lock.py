import threading

_registry: dict[str, threading.Lock] = {}
_registry_guard = threading.Lock()


class ProcessLock:
    """Named mutex shared by every caller in this process.

    Two instances created with the same name guard the same lock.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        with _registry_guard:
            self._lock = _registry.setdefault(name, threading.Lock())

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()
