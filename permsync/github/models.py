"""Typed GitHub directory objects returned by :class:`DirectoryClient`.

Field names follow the GitHub REST payloads so clients can decode responses
straight into these structs with ``msgspec.json.decode(..., type=...)``.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

import msgspec

# Largest page size GitHub listings accept.
PAGE_SIZE = 100


class Visibility(enum.StrEnum):
    """Repository visibility filter for affiliated repository listings."""

    ALL = "all"
    PUBLIC = "public"
    PRIVATE = "private"


class RepositoryAffiliation(enum.StrEnum):
    """How the authenticated user is affiliated with a repository."""

    OWNER = "owner"
    COLLABORATOR = "collaborator"
    ORGANIZATION_MEMBER = "organization_member"


class CollaboratorAffiliation(enum.StrEnum):
    """Filter for repository collaborator listings."""

    ALL = "all"
    DIRECT = "direct"
    OUTSIDE = "outside"


class OrgRepositoryPermission(enum.StrEnum):
    """Default repository permission granted to organization members."""

    NONE = "none"
    READ = "read"
    WRITE = "write"
    ADMIN = "admin"


class Repository(msgspec.Struct, kw_only=True):
    """A repository as listed by the code host."""

    id: str
    database_id: int = 0
    name_with_owner: str = ""
    private: bool = True


class Collaborator(msgspec.Struct, kw_only=True):
    """A user listed as a collaborator or member.

    ``database_id`` is the numeric user ID; its decimal string form is the
    account identifier used throughout the engine.
    """

    database_id: int
    login: str = ""

    @property
    def account_id(self) -> str:
        """Return the account identifier for this user."""
        return str(self.database_id)


class Organization(msgspec.Struct, kw_only=True):
    """Minimal organization reference embedded in team payloads."""

    login: str
    id: int = 0


class Team(msgspec.Struct, kw_only=True):
    """A team within an organization."""

    name: str
    slug: str
    repos_count: int = 0
    organization: Organization | None = None


class OrgDetails(msgspec.Struct, kw_only=True):
    """Organization details including the member default permission."""

    login: str
    id: int = 0
    default_repository_permission: str | None = None


class OrgMembership(msgspec.Struct, kw_only=True):
    """The authenticated user's membership in an organization."""

    state: str = "active"
    role: str = "member"


class OrgDetailsAndMembership(msgspec.Struct, kw_only=True):
    """Organization details paired with the authenticated user's membership."""

    details: OrgDetails
    membership: OrgMembership | None = None


class AuthData(msgspec.Struct, kw_only=True):
    """OAuth token stored with a linked GitHub account."""

    access_token: str | None = None
    token_type: str | None = None
    refresh_token: str | None = None


def decode_auth_data(raw: bytes | str) -> AuthData:
    """Decode an account's stored credential blob.

    Raises
    ------
    msgspec.DecodeError
        If ``raw`` is not a JSON object of the expected shape.

    """
    return msgspec.json.decode(raw, type=AuthData)


@dataclasses.dataclass(frozen=True, slots=True)
class Page[T]:
    """One page of a paginated listing."""

    items: typ.Sequence[T]
    has_next_page: bool = False
