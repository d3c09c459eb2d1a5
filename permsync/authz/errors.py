"""Errors raised and reported by permission providers.

Precondition failures (wrong code host, missing credential) are raised.
Enumeration failures are never raised by ``fetch_*``: they are returned as an
:class:`EnumerationError` inside the :class:`~permsync.authz.models.FetchResult`
next to whatever was accumulated before the failure.
"""

from __future__ import annotations

import enum


class AuthzError(Exception):
    """Base class for permission provider errors."""


class InvalidAccountError(AuthzError):
    """Raised when an account is missing or belongs to another code host."""

    def __init__(self, reason: str) -> None:
        """Initialise with the reason the account was rejected."""
        self.reason = reason
        super().__init__(f"Invalid account: {reason}")

    @classmethod
    def missing(cls) -> InvalidAccountError:
        """Return an error for a missing account."""
        return cls("no account provided")

    @classmethod
    def wrong_host(cls, have: str, want: str) -> InvalidAccountError:
        """Return an error for an account on another code host."""
        return cls(f"not a code host of the account: want {want!r} but have {have!r}")


class MissingCredentialError(AuthzError):
    """Raised when an account carries no usable access token."""

    def __init__(self, account_id: str, reason: str) -> None:
        """Initialise with the account ID and why no token was found."""
        self.account_id = account_id
        self.reason = reason
        super().__init__(f"No credential for account {account_id}: {reason}")


class InvalidRepositoryError(AuthzError):
    """Raised when a repository is missing, malformed or on another host."""

    def __init__(self, reason: str) -> None:
        """Initialise with the reason the repository was rejected."""
        self.reason = reason
        super().__init__(f"Invalid repository: {reason}")

    @classmethod
    def missing(cls) -> InvalidRepositoryError:
        """Return an error for a missing repository."""
        return cls("no repository provided")

    @classmethod
    def wrong_host(cls, have: str, want: str) -> InvalidRepositoryError:
        """Return an error for a repository on another code host."""
        return cls(
            f"not a code host of the repository: want {want!r} but have {have!r}"
        )


class EnumerationPhase(enum.StrEnum):
    """Step of a fetch during which a listing call failed."""

    DIRECT_AFFILIATIONS = "direct_affiliations"
    GROUP_DISCOVERY = "group_discovery"
    GROUP_ENUMERATION = "group_enumeration"


_PHASE_DESCRIPTIONS: dict[tuple[str, EnumerationPhase], str] = {
    ("user", EnumerationPhase.DIRECT_AFFILIATIONS): "list repos for user",
    ("user", EnumerationPhase.GROUP_DISCOVERY): "get groups affiliated with user",
    ("user", EnumerationPhase.GROUP_ENUMERATION): "list repos for group",
    ("repo", EnumerationPhase.DIRECT_AFFILIATIONS): "list users for repo",
    ("repo", EnumerationPhase.GROUP_DISCOVERY): "get groups affiliated with repo",
    ("repo", EnumerationPhase.GROUP_ENUMERATION): "list users for group",
}


class EnumerationError(AuthzError):
    """A paginated listing failed part way through a fetch.

    The underlying exception is chained as ``__cause__`` and kept on
    ``cause``. ``group`` names the group being enumerated, if any.
    """

    def __init__(
        self,
        phase: EnumerationPhase,
        cause: BaseException,
        *,
        kind: str,
        group: str | None = None,
    ) -> None:
        """Initialise with the failing phase, the cause and the fetch kind."""
        self.phase = phase
        self.cause = cause
        self.kind = kind
        self.group = group
        description = _PHASE_DESCRIPTIONS.get((kind, phase), str(phase))
        if group is not None:
            description = f"{description} {group}"
        super().__init__(f"{description}: {cause}")
        self.__cause__ = cause
