from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock
from uuid import UUID


class ProfileLockRegistry:
    """One lock per profile; only serializes passes inside this process."""

    def __init__(self) -> None:
        self._locks: dict[UUID, Lock] = {}
        self._guard = Lock()

    def _lock_for(self, profile_id: UUID) -> Lock:
        with self._guard:
            if profile_id not in self._locks:
                self._locks[profile_id] = Lock()
            return self._locks[profile_id]

    @contextmanager
    def hold(self, profile_id: UUID) -> Iterator[None]:
        lock = self._lock_for(profile_id)
        with lock:
            yield

    def is_held(self, profile_id: UUID) -> bool:
        with self._guard:
            lock = self._locks.get(profile_id)
        return lock is not None and lock.locked()
