from typing import Protocol


class AdvisoryLock(Protocol):
    """Non-blocking named lock; ``release`` must only be called by the current holder."""

    name: str

    def try_acquire(self) -> bool:
        """Take the lock without blocking; return whether it was taken."""
        ...

    def release(self) -> None:
        """Give up a lock taken by a successful ``try_acquire``."""
        ...
