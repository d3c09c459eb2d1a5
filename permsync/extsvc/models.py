"""Identities of accounts and repositories on an external code host."""

from __future__ import annotations

import dataclasses
import urllib.parse

GITHUB_SERVICE_TYPE = "github"


@dataclasses.dataclass(frozen=True, slots=True)
class CodeHost:
    """A code host instance, identified by its type and normalised base URL.

    Attributes
    ----------
    service_type
        Kind of code host, e.g. ``"github"``.
    service_id
        Normalised base URL with a trailing slash, e.g.
        ``"https://github.com/"``. Accounts and repositories carry the same
        value to show which instance they belong to.
    base_url
        Parsed form of ``service_id``.

    """

    service_type: str
    service_id: str
    base_url: urllib.parse.SplitResult

    @classmethod
    def for_github(cls, url: str) -> CodeHost:
        """Build the code host record for a GitHub (or GHE) base URL."""
        parsed = urllib.parse.urlsplit(url.strip())
        if not parsed.scheme or not parsed.netloc:
            msg = f"GitHub URL must be absolute, got {url!r}"
            raise ValueError(msg)
        normalised = urllib.parse.SplitResult(
            parsed.scheme.lower(), parsed.netloc.lower(), "/", "", ""
        )
        return cls(
            service_type=GITHUB_SERVICE_TYPE,
            service_id=normalised.geturl(),
            base_url=normalised,
        )

    @property
    def hostname(self) -> str:
        """Return the host name without port or scheme."""
        return self.base_url.hostname or ""


@dataclasses.dataclass(frozen=True, slots=True)
class Account:
    """A user's account on a code host.

    ``auth_data`` is the stored credential blob for the account, a JSON
    document holding at least an ``access_token``; it is ``None`` when the
    account was linked without a usable credential.
    """

    user_id: int
    service_type: str
    service_id: str
    account_id: str
    auth_data: bytes | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class RepositoryRef:
    """A repository on a code host.

    ``uri`` is the fully-qualified name, optionally prefixed with the code
    host's host name (``github.com/acme/widgets`` or ``acme/widgets``).
    """

    id: str
    service_type: str
    service_id: str
    uri: str


def is_host_of_account(code_host: CodeHost, account: Account) -> bool:
    """Return True when ``account`` belongs to ``code_host``."""
    return (
        code_host.service_type == account.service_type
        and code_host.service_id == account.service_id
    )


def is_host_of_repo(code_host: CodeHost, repo: RepositoryRef) -> bool:
    """Return True when ``repo`` is hosted on ``code_host``."""
    return (
        code_host.service_type == repo.service_type
        and code_host.service_id == repo.service_id
    )
