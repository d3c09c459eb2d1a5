"""Repository permission synchronisation against GitHub.

The authz package resolves, for an account, the repositories it can read and,
for a repository, the accounts that can read it. It combines direct grants
with access inherited through organizations and teams, caching the latter per
group.

Usage
-----
Resolve an account's repositories::

    from permsync.authz import FetchPermsOptions, GitHubPermissionsProvider

    provider = GitHubPermissionsProvider(urn, client, ProviderOptions.from_env())
    result = await provider.fetch_user_perms(account)
    if result.partial:
        log_warning(logger, "partial sync: %s", result.error)
    repo_ids = result.value.exacts

Force fresh group enumeration::

    await provider.fetch_repo_perms(repo, FetchPermsOptions(invalidate_caches=True))

"""

from permsync.authz.config import ProviderOptions
from permsync.authz.discovery import AffiliatedGroup, can_view_org_repos
from permsync.authz.errors import (
    AuthzError,
    EnumerationError,
    EnumerationPhase,
    InvalidAccountError,
    InvalidRepositoryError,
    MissingCredentialError,
)
from permsync.authz.groups import CachedGroup, GroupsCache, group_key
from permsync.authz.models import (
    ExternalUserPermissions,
    FetchPermsOptions,
    FetchResult,
)
from permsync.authz.observability import (
    ErrorCategory,
    PermsSyncEventLogger,
    PermsSyncEventType,
    categorize_error,
)
from permsync.authz.provider import GitHubPermissionsProvider, RequiredAuthScope

__all__ = [
    "AffiliatedGroup",
    "AuthzError",
    "CachedGroup",
    "EnumerationError",
    "EnumerationPhase",
    "ErrorCategory",
    "ExternalUserPermissions",
    "FetchPermsOptions",
    "FetchResult",
    "GitHubPermissionsProvider",
    "GroupsCache",
    "InvalidAccountError",
    "InvalidRepositoryError",
    "MissingCredentialError",
    "PermsSyncEventLogger",
    "PermsSyncEventType",
    "ProviderOptions",
    "RequiredAuthScope",
    "can_view_org_repos",
    "categorize_error",
    "group_key",
]
