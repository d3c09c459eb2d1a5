"""Discovery of the groups that confer access, and the policy behind it.

Which memberships count is a security decision:

- An organization is a whole-org group for a user when its default
  repository permission lets every member read every repository, or when the
  user is an active admin of it.
- A team counts only when it has repositories and its organization was not
  already taken as a whole-org group; the team's repositories are then a
  subset of the organization's.
- For a repository in an organization without read-all default permission,
  only the organization's admins are implicitly granted access, plus the
  members of teams explicitly tied to the repository.

Organizations are listed before teams, so the first-discovered organization
membership decides whether a team is skipped.
"""

from __future__ import annotations

import dataclasses
import typing as typ

from permsync.github.errors import is_not_found
from permsync.github.models import (
    OrgDetailsAndMembership,
    OrgRepositoryPermission,
)
from permsync.github.pagination import iter_pages

if typ.TYPE_CHECKING:
    from permsync.github.client import DirectoryClient
    from permsync.github.models import OrgMembership

    from .groups import CachedGroup, GroupsCache
    from .models import FetchPermsOptions

_READ_ALL_PERMISSIONS = frozenset(
    {
        OrgRepositoryPermission.READ,
        OrgRepositoryPermission.WRITE,
        OrgRepositoryPermission.ADMIN,
    }
)


@dataclasses.dataclass(frozen=True, slots=True)
class AffiliatedGroup:
    """A group relevant to one fetch.

    ``admins_only`` tells the provider to enumerate organization admins
    instead of all members.
    """

    group: CachedGroup
    admins_only: bool = False


def _is_active_admin(membership: OrgMembership | None) -> bool:
    return (
        membership is not None
        and membership.state == "active"
        and membership.role == "admin"
    )


def can_view_org_repos(org: OrgDetailsAndMembership | None) -> bool:
    """Return True when ``org``'s repositories are all readable.

    With a membership, the answer is for that member: an active admin reads
    everything. Without one it is for every member, and only the default
    repository permission counts.
    """
    if org is None:
        return False
    if _is_active_admin(org.membership):
        return True
    permission = org.details.default_repository_permission
    if not permission:
        return False
    return permission.lower() in _READ_ALL_PERMISSIONS


def _scope_changed(group: CachedGroup, *, admins_only: bool) -> bool:
    # A member set enumerated under the other scope cannot be reused.
    return group.is_org and bool(group.users) and group.admins_only != admins_only


class _GroupCollector:
    """Accumulates affiliated groups, consulting the cache for each key."""

    def __init__(self, cache: GroupsCache, opts: FetchPermsOptions) -> None:
        self._cache = cache
        self._opts = opts
        self.groups: list[AffiliatedGroup] = []
        self.seen_keys: set[str] = set()

    def add(self, org: str, team: str = "", *, admins_only: bool = False) -> None:
        group, existed = self._cache.get(org, team)
        if group.key in self.seen_keys:
            return
        stale = self._opts.invalidate_caches or _scope_changed(
            group, admins_only=admins_only
        )
        if existed and stale:
            group = self._cache.invalidate(group)
            existed = False
        if not existed:
            group = dataclasses.replace(group, admins_only=admins_only)

        self.seen_keys.add(group.key)
        self.groups.append(AffiliatedGroup(group=group, admins_only=admins_only))


async def discover_user_groups(
    client: DirectoryClient,
    cache: GroupsCache,
    opts: FetchPermsOptions,
) -> list[AffiliatedGroup]:
    """Return the organizations and teams that grant the client's user access.

    ``client`` must act with the user's own token: the listings are of the
    authenticated user's organizations and teams. Listing failures propagate.
    """
    collector = _GroupCollector(cache, opts)
    whole_orgs: set[str] = set()

    async for orgs in iter_pages(
        client.get_authenticated_user_orgs_details_and_membership
    ):
        for org in orgs:
            if not can_view_org_repos(org):
                continue
            # Member scope matches what a repository fetch computes.
            members_read_all = can_view_org_repos(
                OrgDetailsAndMembership(details=org.details)
            )
            collector.add(org.details.login, admins_only=not members_read_all)
            whole_orgs.add(org.details.login)

    async for teams in iter_pages(client.get_authenticated_user_teams):
        for team in teams:
            if team.repos_count <= 0 or team.organization is None:
                continue
            if team.organization.login in whole_orgs:
                continue
            collector.add(team.organization.login, team.slug)

    return collector.groups


async def discover_repo_groups(
    client: DirectoryClient,
    cache: GroupsCache,
    owner: str,
    name: str,
    opts: FetchPermsOptions,
) -> list[AffiliatedGroup]:
    """Return the organization and teams that grant access to ``owner/name``.

    A repository owned by a user account rather than an organization has no
    groups; the not-found answer for its owner is not an error. Other listing
    failures propagate.
    """
    try:
        org = await client.get_organization(owner)
    except Exception as exc:
        if is_not_found(exc):
            return []
        raise

    collector = _GroupCollector(cache, opts)
    if can_view_org_repos(OrgDetailsAndMembership(details=org)):
        collector.add(owner)
        return collector.groups

    collector.add(owner, admins_only=True)
    async for teams in iter_pages(
        lambda page: client.list_repository_teams(owner, name, page)
    ):
        for team in teams:
            collector.add(owner, team.slug)
    return collector.groups
