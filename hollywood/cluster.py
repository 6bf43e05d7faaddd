"""Cluster membership, activation settings and cluster events."""

from __future__ import annotations

import dataclasses
import random
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator

from .pid import PID


@dataclass
class Member:
    """A node of the cluster."""

    id: str
    host: str
    kinds: list[str] = field(default_factory=list)
    region: str = ""

    def pid(self) -> PID:
        """Return the PID of the member's cluster agent."""
        return PID(self.host, "cluster/" + self.id)

    def equals(self, other: Member) -> bool:
        """Return True when host and id match."""
        return self.host == other.host and self.id == other.id

    def has_kind(self, kind: str) -> bool:
        """Return True when the member has the given kind registered."""
        return kind in self.kinds


@dataclass
class CID:
    """Identifies an actor across the cluster."""

    pid: PID | None
    kind: str
    id: str
    region: str = ""

    def equals(self, other: CID) -> bool:
        """Return True when id and kind match."""
        return self.id == other.id and self.kind == other.kind


def member_to_provider_pid(member: Member) -> PID:
    """Return the PID of the provider actor on the given member."""
    return PID(member.host, "provider/" + member.id)


class MemberSet:
    """Members keyed by their id."""

    def __init__(self, *members: Member) -> None:
        self._members: dict[str, Member] = {m.id: m for m in members}

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[Member]:
        return iter(list(self._members.values()))

    def get_by_host(self, host: str) -> Member | None:
        """Return the member listening on host, or None."""
        found = None
        for member in self._members.values():
            if member.host == host:
                found = member
        return found

    def add(self, member: Member) -> None:
        self._members[member.id] = member

    def contains(self, member: Member) -> bool:
        return member.id in self._members

    def remove(self, member: Member) -> None:
        self._members.pop(member.id, None)

    def remove_by_host(self, host: str) -> None:
        member = self.get_by_host(host)
        if member is not None:
            self.remove(member)

    def members(self) -> list[Member]:
        """Return all members as a list."""
        return list(self._members.values())

    def for_each(self, fun: Callable[[Member], bool]) -> None:
        """Call fun for each member until it returns False."""
        for member in list(self._members.values()):
            if not fun(member):
                break

    def except_(self, members: Iterable[Member]) -> list[Member]:
        """Return the members of this set whose id is not among members."""
        excluded = {m.id for m in members}
        return [m for m in self._members.values() if m.id not in excluded]

    def filter_by_kind(self, kind: str) -> list[Member]:
        """Return the members that have kind registered."""
        return [m for m in self._members.values() if m.has_kind(kind)]


@dataclass
class ActivationDetails:
    """What a member selector gets to choose from."""

    region: str = ""
    members: list[Member] = field(default_factory=list)
    kind: str = ""


SelectMemberFunc = Callable[[ActivationDetails], "Member | None"]


def select_random_member(details: ActivationDetails) -> Member:
    """Pick a member at random; raise IndexError when there is none."""
    return random.choice(details.members)


@dataclass(frozen=True)
class ActivationConfig:
    """Settings for activating an actor on the cluster."""

    id: str = field(default_factory=lambda: str(random.randrange(sys.maxsize)))
    region: str = "default"
    select_member: SelectMemberFunc = field(default_factory=lambda: select_random_member)

    def with_select_member_func(self, fun: SelectMemberFunc) -> ActivationConfig:
        return dataclasses.replace(self, select_member=fun)

    def with_id(self, id: str) -> ActivationConfig:
        return dataclasses.replace(self, id=id)

    def with_region(self, region: str) -> ActivationConfig:
        return dataclasses.replace(self, region=region)


@dataclass(frozen=True)
class KindConfig:
    """Configuration of a registered kind."""


@dataclass
class Kind:
    """A type of actor that any member of the cluster can activate."""

    name: str
    producer: Callable[[], Any]
    config: KindConfig = field(default_factory=KindConfig)


@dataclass
class MemberJoinEvent:
    """A member entered the cluster."""

    member: Member


@dataclass
class MemberLeaveEvent:
    """A member left the cluster."""

    member: Member


@dataclass
class ActivationEvent:
    """An actor was activated somewhere on the cluster."""

    pid: PID


@dataclass
class DeactivationEvent:
    """An actor was deactivated somewhere on the cluster."""

    pid: PID