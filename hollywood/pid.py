"""Process identifiers."""

from __future__ import annotations

from dataclasses import dataclass

PID_SEPARATOR = "/"


@dataclass(frozen=True)
class PID:
    """Identifies a process by the address of its engine and its id."""

    address: str
    id: str

    def __str__(self) -> str:
        return self.address + PID_SEPARATOR + self.id

    def equals(self, other: PID | None) -> bool:
        """Return True when both address and id match."""
        if other is None:
            return False
        return self.address == other.address and self.id == other.id

    def child(self, id: str) -> PID:
        """Return the PID of a child with the given id under this process."""
        return PID(self.address, self.id + PID_SEPARATOR + id)