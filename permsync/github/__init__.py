"""GitHub directory contract and wire models."""

from __future__ import annotations

from .client import DirectoryClient
from .errors import GitHubAPIError, GitHubConfigError, is_not_found
from .models import (
    PAGE_SIZE,
    AuthData,
    Collaborator,
    CollaboratorAffiliation,
    Organization,
    OrgDetails,
    OrgDetailsAndMembership,
    OrgMembership,
    OrgRepositoryPermission,
    Page,
    Repository,
    RepositoryAffiliation,
    Team,
    Visibility,
    decode_auth_data,
)

__all__ = [
    "PAGE_SIZE",
    "AuthData",
    "Collaborator",
    "CollaboratorAffiliation",
    "DirectoryClient",
    "GitHubAPIError",
    "GitHubConfigError",
    "OrgDetails",
    "OrgDetailsAndMembership",
    "OrgMembership",
    "OrgRepositoryPermission",
    "Organization",
    "Page",
    "Repository",
    "RepositoryAffiliation",
    "Team",
    "Visibility",
    "decode_auth_data",
    "is_not_found",
]
