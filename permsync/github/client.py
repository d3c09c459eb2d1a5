"""Directory client contract consumed by the permission provider.

The provider never speaks HTTP itself. Any code-host client adapts to
:class:`DirectoryClient`: every listing is paginated with 1-based page
numbers, returns a :class:`~permsync.github.models.Page` and raises on
failure. Retries and rate-limit backoff are the client's concern.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .models import (
        Collaborator,
        CollaboratorAffiliation,
        OrgDetails,
        OrgDetailsAndMembership,
        Page,
        Repository,
        RepositoryAffiliation,
        Team,
        Visibility,
    )


@typ.runtime_checkable
class DirectoryClient(typ.Protocol):
    """Paginated read access to a code host's repositories, orgs and teams."""

    async def list_affiliated_repositories(
        self,
        visibility: Visibility,
        page: int,
        affiliations: typ.Sequence[RepositoryAffiliation] = (),
    ) -> Page[Repository]:
        """List repositories the authenticated credential is affiliated with.

        An empty ``affiliations`` sequence means every affiliation kind.
        """
        ...

    async def list_org_repositories(
        self, org: str, page: int, repo_type: str = ""
    ) -> Page[Repository]:
        """List repositories owned by an organization."""
        ...

    async def list_team_repositories(
        self, org: str, team: str, page: int
    ) -> Page[Repository]:
        """List repositories a team has access to."""
        ...

    async def list_repository_collaborators(
        self,
        owner: str,
        name: str,
        page: int,
        affiliation: CollaboratorAffiliation,
    ) -> Page[Collaborator]:
        """List collaborators of a repository filtered by affiliation."""
        ...

    async def list_organization_members(
        self, org: str, page: int, *, admins_only: bool
    ) -> Page[Collaborator]:
        """List members of an organization, or only its admins."""
        ...

    async def list_team_members(
        self, org: str, team: str, page: int
    ) -> Page[Collaborator]:
        """List members of a team."""
        ...

    async def get_organization(self, login: str) -> OrgDetails:
        """Fetch organization details.

        Raises a not-found :class:`~permsync.github.errors.GitHubAPIError`
        when ``login`` is not an organization (for example a user account).
        """
        ...

    async def list_repository_teams(
        self, owner: str, name: str, page: int
    ) -> Page[Team]:
        """List teams explicitly granted access to a repository."""
        ...

    async def get_authenticated_user_orgs_details_and_membership(
        self, page: int
    ) -> Page[OrgDetailsAndMembership]:
        """List the authenticated user's organizations with membership."""
        ...

    async def get_authenticated_user_teams(self, page: int) -> Page[Team]:
        """List teams the authenticated user belongs to."""
        ...

    async def get_authenticated_oauth_scopes(self) -> list[str]:
        """Return the OAuth scopes granted to the client's credential."""
        ...

    def with_token(self, token: str) -> DirectoryClient:
        """Return a copy of this client that acts with ``token``."""
        ...
