"""Lookup table of the processes living in an engine."""

from __future__ import annotations

import threading
from typing import Any

from .events import ActorDuplicateIdEvent
from .pid import PID, PID_SEPARATOR

LOCAL_LOOKUP_ADDR = "local"


class Registry:
    """Maps process ids to processes."""

    def __init__(self, engine: Any) -> None:
        self._engine = engine
        self._lookup: dict[str, Any] = {}
        self._lock = threading.RLock()

    def get_pid(self, kind: str, id: str) -> PID | None:
        """Return the PID of the process with the given kind and id."""
        proc = self.get_by_id(kind + PID_SEPARATOR + id)
        return proc.pid if proc is not None else None

    def remove(self, pid: PID) -> None:
        """Forget the process with the given PID."""
        with self._lock:
            self._lookup.pop(pid.id, None)

    def get(self, pid: PID | None) -> Any:
        """Return the process for pid, or None."""
        if pid is None:
            return None
        with self._lock:
            return self._lookup.get(pid.id)

    def get_by_id(self, id: str) -> Any:
        """Return the process registered under id, or None."""
        with self._lock:
            return self._lookup.get(id)

    def add(self, proc: Any) -> None:
        """Register and start proc; broadcast an event if its id is taken."""
        pid = proc.pid
        with self._lock:
            duplicate = pid.id in self._lookup
            if not duplicate:
                self._lookup[pid.id] = proc
        if duplicate:
            self._engine.broadcast_event(ActorDuplicateIdEvent(pid=pid))
            return
        proc.start()