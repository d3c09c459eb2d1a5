"""GitHub permission provider.

The provider answers two questions against a GitHub-shaped code host:

- which repositories can an account read (:meth:`fetch_user_perms`), and
- which accounts can read a repository (:meth:`fetch_repo_perms`).

Direct grants come from affiliation and collaborator listings. When group
caching is enabled, grants inherited through organizations and teams are
resolved per group and cached in a :class:`GroupsCache`, so a group's
repositories (or members) are enumerated once per TTL rather than once per
account (or repository).

Both fetches may return partial but valid results: a listing failure stops
the fetch and the result carries the identifiers gathered so far together
with an :class:`EnumerationError`. Callers decide whether to discard them.

Usage
-----
>>> provider = GitHubPermissionsProvider(
...     "github:https://github.com/", client, ProviderOptions.from_env()
... )
>>> result = await provider.fetch_user_perms(account)
>>> repo_ids = result.unwrap()  # raises if the fetch was partial

"""

from __future__ import annotations

import asyncio
import dataclasses
import typing as typ

import msgspec

from permsync.common.slug import split_name_with_owner, strip_host_prefix
from permsync.common.time import utcnow
from permsync.extsvc.models import CodeHost, is_host_of_account, is_host_of_repo
from permsync.github.errors import GitHubConfigError
from permsync.github.models import (
    CollaboratorAffiliation,
    RepositoryAffiliation,
    Visibility,
    decode_auth_data,
)
from permsync.github.pagination import iter_pages

from .discovery import discover_repo_groups, discover_user_groups
from .errors import (
    EnumerationError,
    EnumerationPhase,
    InvalidAccountError,
    InvalidRepositoryError,
    MissingCredentialError,
)
from .groups import GroupsCache
from .models import (
    ExternalUserPermissions,
    FetchPermsOptions,
    FetchResult,
    IdAccumulator,
)
from .observability import PermsSyncEventLogger

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from permsync.extsvc.models import Account, RepositoryRef
    from permsync.github.client import DirectoryClient
    from permsync.github.models import Collaborator, Page, Repository

    from .config import ProviderOptions
    from .discovery import AffiliatedGroup
    from .groups import CachedGroup

_USER = "user"
_REPO = "repo"

_ORG_SCOPES_MESSAGE = (
    "Scope `read:org`, `write:org`, or `admin:org` is required to enable "
    "groups cache TTL - please provide a token with the required scopes, "
    "or disable group caching."
)


@dataclasses.dataclass(frozen=True, slots=True)
class RequiredAuthScope:
    """A token scope requirement satisfied by any one of ``one_of``."""

    one_of: tuple[str, ...]
    message: str


@dataclasses.dataclass(slots=True)
class _Progress:
    """Where a fetch is, so a failure can be attributed to its phase."""

    phase: EnumerationPhase = EnumerationPhase.DIRECT_AFFILIATIONS
    group: str | None = None
    groups: int = 0

    def enter(self, phase: EnumerationPhase, group: str | None = None) -> None:
        self.phase = phase
        self.group = group


class GitHubPermissionsProvider:
    """Resolve repository permissions for a single GitHub instance."""

    def __init__(
        self,
        urn: str,
        client: DirectoryClient,
        options: ProviderOptions,
        *,
        groups_cache: GroupsCache | None = None,
        event_logger: PermsSyncEventLogger | None = None,
    ) -> None:
        """Bind the provider to a directory client and configuration.

        ``client`` is scoped to ``options.base_token``. A ``groups_cache`` may
        be injected to share one cache between providers; it is ignored when
        ``options.groups_cache_ttl`` disables group caching.
        """
        if not options.base_token.strip():
            raise GitHubConfigError.empty_token()

        self._urn = urn
        self._code_host = CodeHost.for_github(options.github_url)
        self._client = client.with_token(options.base_token)
        self._groups_cache: GroupsCache | None = None
        if options.groups_caching_enabled:
            self._groups_cache = groups_cache or GroupsCache(options.groups_cache_ttl)
        self._event_logger = event_logger or PermsSyncEventLogger()

    @property
    def urn(self) -> str:
        """Return the unique resource name of this provider."""
        return self._urn

    @property
    def code_host(self) -> CodeHost:
        """Return the code host this provider serves."""
        return self._code_host

    @property
    def service_id(self) -> str:
        """Return the service ID of the code host."""
        return self._code_host.service_id

    @property
    def service_type(self) -> str:
        """Return the service type of the code host."""
        return self._code_host.service_type

    @property
    def groups_cache(self) -> GroupsCache | None:
        """Return the group cache, or None when group caching is disabled."""
        return self._groups_cache

    async def fetch_account(self, *_args: object, **_kwargs: object) -> None:
        """Return None: GitHub cannot look up a user by external SSO account."""

    async def validate(self) -> list[str]:
        """Return configuration problems with the base token, if any."""
        required = self._required_auth_scopes()
        if not required:
            return []

        try:
            scopes = await self._client.get_authenticated_oauth_scopes()
        except Exception as exc:  # noqa: BLE001
            return [
                "Additional OAuth scopes are required, but failed to get "
                f"available scopes: {exc}"
            ]

        granted = set(scopes)
        return [
            scope.message for scope in required if granted.isdisjoint(scope.one_of)
        ]

    def _required_auth_scopes(self) -> list[RequiredAuthScope]:
        if self._groups_cache is None:
            return []
        return [
            RequiredAuthScope(
                one_of=("read:org", "write:org", "admin:org"),
                message=_ORG_SCOPES_MESSAGE,
            )
        ]

    async def fetch_user_perms(
        self,
        account: Account | None,
        opts: FetchPermsOptions | None = None,
    ) -> FetchResult[ExternalUserPermissions]:
        """Return the private repository IDs ``account`` can read.

        The result may be partial; see :class:`FetchResult`.

        Raises
        ------
        InvalidAccountError
            If no account is given or it belongs to another code host.
        MissingCredentialError
            If the account carries no usable access token.

        """
        if account is None:
            raise InvalidAccountError.missing()
        if not is_host_of_account(self._code_host, account):
            raise InvalidAccountError.wrong_host(
                have=account.service_id, want=self._code_host.service_id
            )
        token = self._account_token(account)
        opts = opts or FetchPermsOptions()

        # Only the user's own token lists exactly what the user can see.
        client = self._client.with_token(token)
        repos = IdAccumulator()
        error = await self._run(
            _USER,
            account.account_id,
            repos,
            lambda progress: self._sync_user(
                client, account.account_id, repos, opts, progress
            ),
            opts,
        )
        return FetchResult(ExternalUserPermissions(repos.to_tuple()), error)

    async def fetch_repo_perms(
        self,
        repo: RepositoryRef | None,
        opts: FetchPermsOptions | None = None,
    ) -> FetchResult[tuple[str, ...]]:
        """Return the account IDs that can read ``repo``.

        Both direct collaborators and members inheriting access through the
        owning organization or its teams are included. The result may be
        partial; see :class:`FetchResult`.

        Raises
        ------
        InvalidRepositoryError
            If no repository is given, it belongs to another code host, or its
            name is not ``owner/name``.

        """
        if repo is None:
            raise InvalidRepositoryError.missing()
        if not is_host_of_repo(self._code_host, repo):
            raise InvalidRepositoryError.wrong_host(
                have=repo.service_id, want=self._code_host.service_id
            )
        name_with_owner = strip_host_prefix(repo.uri, self._code_host.hostname)
        try:
            owner, name = split_name_with_owner(name_with_owner)
        except ValueError as exc:
            raise InvalidRepositoryError(str(exc)) from exc
        opts = opts or FetchPermsOptions()

        users = IdAccumulator()
        error = await self._run(
            _REPO,
            repo.id,
            users,
            lambda progress: self._sync_repo(
                owner, name, repo.id, users, opts, progress
            ),
            opts,
        )
        return FetchResult(users.to_tuple(), error)

    async def _run(
        self,
        kind: str,
        subject: str,
        accumulator: IdAccumulator,
        sync: cabc.Callable[[_Progress], cabc.Awaitable[None]],
        opts: FetchPermsOptions,
    ) -> EnumerationError | None:
        """Run ``sync`` and convert a listing failure into an error value."""
        started_at = utcnow()
        progress = _Progress()
        self._event_logger.log_fetch_started(kind=kind, subject=subject)
        try:
            async with asyncio.timeout(opts.timeout):
                await sync(progress)
        except Exception as exc:  # noqa: BLE001
            error = EnumerationError(
                progress.phase, exc, kind=kind, group=progress.group
            )
            self._event_logger.log_fetch_partial(
                kind=kind,
                subject=subject,
                count=len(accumulator),
                error=error,
                duration=utcnow() - started_at,
            )
            return error

        self._event_logger.log_fetch_completed(
            kind=kind,
            subject=subject,
            count=len(accumulator),
            groups=progress.groups,
            duration=utcnow() - started_at,
        )
        return None

    async def _sync_user(
        self,
        client: DirectoryClient,
        account_id: str,
        repos: IdAccumulator,
        opts: FetchPermsOptions,
        progress: _Progress,
    ) -> None:
        cache = self._groups_cache
        # With group caching, organization-wide access is resolved per group
        # below; without it, every affiliation is listed directly.
        affiliations: tuple[RepositoryAffiliation, ...] = ()
        if cache is not None:
            affiliations = (
                RepositoryAffiliation.OWNER,
                RepositoryAffiliation.COLLABORATOR,
            )

        progress.enter(EnumerationPhase.DIRECT_AFFILIATIONS)
        async for batch in iter_pages(
            lambda page: client.list_affiliated_repositories(
                Visibility.PRIVATE, page, affiliations
            )
        ):
            repos.extend(repo.id for repo in batch)

        if cache is None:
            return

        progress.enter(EnumerationPhase.GROUP_DISCOVERY)
        groups = await discover_user_groups(client, cache, opts)
        progress.groups = len(groups)

        for affiliated in groups:
            group = affiliated.group
            # A member set is only present after a full enumeration; joining
            # it keeps it complete for later repository-side fetches.
            if group.users and account_id not in group.users:
                group = cache.set(group.with_user(account_id))

            if group.repositories:
                repos.extend(group.repositories)
                self._event_logger.log_group_cache_hit(kind=_USER, group=group)
                continue

            progress.enter(EnumerationPhase.GROUP_ENUMERATION, group.key)
            found = IdAccumulator()
            async for batch in iter_pages(self._group_repositories_lister(group)):
                ids = [repo.id for repo in batch]
                found.extend(ids)
                repos.extend(ids)

            group = cache.set(group.with_repositories(found.to_tuple()))
            self._event_logger.log_group_synced(kind=_USER, group=group)

    async def _sync_repo(  # noqa: PLR0913
        self,
        owner: str,
        name: str,
        repo_id: str,
        users: IdAccumulator,
        opts: FetchPermsOptions,
        progress: _Progress,
    ) -> None:
        cache = self._groups_cache
        # With group caching only direct collaborators are listed here;
        # organization and team members come from the groups below.
        affiliation = (
            CollaboratorAffiliation.ALL
            if cache is None
            else CollaboratorAffiliation.DIRECT
        )

        progress.enter(EnumerationPhase.DIRECT_AFFILIATIONS)
        async for batch in iter_pages(
            lambda page: self._client.list_repository_collaborators(
                owner, name, page, affiliation
            )
        ):
            users.extend(user.account_id for user in batch)

        if cache is None:
            return

        progress.enter(EnumerationPhase.GROUP_DISCOVERY)
        groups = await discover_repo_groups(self._client, cache, owner, name, opts)
        progress.groups = len(groups)

        for affiliated in groups:
            group = affiliated.group
            if group.repositories and repo_id not in group.repositories:
                group = cache.set(group.with_repository(repo_id))

            if group.users:
                users.extend(group.users)
                self._event_logger.log_group_cache_hit(kind=_REPO, group=group)
                continue

            progress.enter(EnumerationPhase.GROUP_ENUMERATION, group.key)
            found = IdAccumulator()
            async for batch in iter_pages(self._group_members_lister(affiliated)):
                ids = [user.account_id for user in batch]
                found.extend(ids)
                users.extend(ids)

            group = dataclasses.replace(
                group.with_users(found.to_tuple()),
                admins_only=affiliated.admins_only,
            )
            group = cache.set(group)
            self._event_logger.log_group_synced(kind=_REPO, group=group)

    def _group_repositories_lister(
        self, group: CachedGroup
    ) -> cabc.Callable[[int], cabc.Awaitable[Page[Repository]]]:
        if group.is_org:
            return lambda page: self._client.list_org_repositories(group.org, page)
        return lambda page: self._client.list_team_repositories(
            group.org, group.team, page
        )

    def _group_members_lister(
        self, affiliated: AffiliatedGroup
    ) -> cabc.Callable[[int], cabc.Awaitable[Page[Collaborator]]]:
        group = affiliated.group
        if group.is_org:
            return lambda page: self._client.list_organization_members(
                group.org, page, admins_only=affiliated.admins_only
            )
        return lambda page: self._client.list_team_members(
            group.org, group.team, page
        )

    def _account_token(self, account: Account) -> str:
        if account.auth_data is None:
            raise MissingCredentialError(
                account.account_id, "no external account data"
            )
        try:
            data = decode_auth_data(account.auth_data)
        except msgspec.DecodeError as exc:
            raise MissingCredentialError(
                account.account_id, "unreadable external account data"
            ) from exc
        if not data.access_token:
            raise MissingCredentialError(
                account.account_id, "no token found in the external account data"
            )
        return data.access_token
