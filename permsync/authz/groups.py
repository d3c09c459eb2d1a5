"""In-memory cache of organization and team affiliations.

A group is a whole organization (empty ``team``) or one team within it. Its
member set and repository set are cached independently: either may be known
while the other is still empty, and an empty set always means "not known
yet", never "known to be empty".

Records are immutable. The provider reads a record, builds the merged record
and writes it back whole, so :meth:`GroupsCache.set` never merges.

Usage
-----
>>> import datetime as dt
>>> cache = GroupsCache(dt.timedelta(hours=1))
>>> group, existed = cache.get("acme", "")
>>> existed
False
>>> cache.set(group.with_repositories(["r1", "r2"])).repositories
('r1', 'r2')

"""

from __future__ import annotations

import dataclasses
import threading
import typing as typ

from permsync.common.time import utcnow

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from permsync.common.time import Clock


def group_key(org: str, team: str = "") -> str:
    """Return the cache key for an organization or one of its teams."""
    return f"{org}/{team}" if team else org


@dataclasses.dataclass(frozen=True, slots=True)
class CachedGroup:
    """Cached affiliations of an organization or team.

    Attributes
    ----------
    org
        Organization login.
    team
        Team slug, or ``""`` when the group is the whole organization.
    users
        Account IDs known to be members. When ``admins_only`` is set these
        are the organization's admins rather than all of its members.
    repositories
        Repository IDs the group can read.
    admins_only
        The member set was enumerated from organization admins only.
    refreshed_at
        When the record was last written to the cache.

    """

    org: str
    team: str = ""
    users: tuple[str, ...] = ()
    repositories: tuple[str, ...] = ()
    admins_only: bool = False
    refreshed_at: dt.datetime | None = None

    @property
    def key(self) -> str:
        """Return the cache key derived from org and team."""
        return group_key(self.org, self.team)

    @property
    def is_org(self) -> bool:
        """Return True when the group denotes a whole organization."""
        return not self.team

    def with_user(self, account_id: str) -> CachedGroup:
        """Return a copy listing ``account_id`` as a member."""
        if account_id in self.users:
            return self
        return dataclasses.replace(self, users=(*self.users, account_id))

    def with_repository(self, repo_id: str) -> CachedGroup:
        """Return a copy listing ``repo_id`` as a group repository."""
        if repo_id in self.repositories:
            return self
        return dataclasses.replace(self, repositories=(*self.repositories, repo_id))

    def with_users(self, account_ids: cabc.Iterable[str]) -> CachedGroup:
        """Return a copy whose member set is replaced by ``account_ids``."""
        return dataclasses.replace(self, users=tuple(dict.fromkeys(account_ids)))

    def with_repositories(self, repo_ids: cabc.Iterable[str]) -> CachedGroup:
        """Return a copy whose repository set is replaced by ``repo_ids``."""
        return dataclasses.replace(
            self, repositories=tuple(dict.fromkeys(repo_ids))
        )

    def cleared(self) -> CachedGroup:
        """Return an empty record with the same key."""
        return CachedGroup(org=self.org, team=self.team)


class GroupsCache:
    """Thread-safe, TTL-governed store of :class:`CachedGroup` records.

    A single lock guards the mapping; no I/O happens while it is held. Records
    older than ``ttl`` read as absent and stay in the mapping until they are
    overwritten or invalidated.
    """

    def __init__(self, ttl: dt.timedelta, *, clock: Clock = utcnow) -> None:
        """Create an empty cache whose records live for ``ttl``."""
        if ttl.total_seconds() <= 0:
            msg = f"groups cache TTL must be positive, got {ttl}"
            raise ValueError(msg)
        self._ttl = ttl
        self._clock = clock
        self._groups: dict[str, CachedGroup] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> dt.timedelta:
        """Return the configured record lifetime."""
        return self._ttl

    def get(self, org: str, team: str = "") -> tuple[CachedGroup, bool]:
        """Return the record for ``(org, team)`` and whether it was cached.

        A missing or expired record is returned as an empty record with the
        right key and ``False``.
        """
        key = group_key(org, team)
        with self._lock:
            group = self._groups.get(key)
        if group is None or self._expired(group):
            return CachedGroup(org=org, team=team), False
        return group, True

    def set(self, group: CachedGroup) -> CachedGroup:
        """Store ``group``, stamped with the current time, and return it."""
        stamped = dataclasses.replace(group, refreshed_at=self._clock())
        with self._lock:
            self._groups[stamped.key] = stamped
        return stamped

    def invalidate(self, group: CachedGroup) -> CachedGroup:
        """Drop the stored record for ``group`` and return an empty copy."""
        with self._lock:
            self._groups.pop(group.key, None)
        return group.cleared()

    def __len__(self) -> int:
        """Return the number of stored records, expired ones included."""
        with self._lock:
            return len(self._groups)

    def _expired(self, group: CachedGroup) -> bool:
        if group.refreshed_at is None:
            return True
        return self._clock() - group.refreshed_at > self._ttl
