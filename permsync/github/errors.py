"""Errors raised by GitHub directory clients."""

from __future__ import annotations

_HTTP_NOT_FOUND = 404


class GitHubAPIError(RuntimeError):
    """Raised when the GitHub API answers a listing call with an error."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> GitHubAPIError:
        """Return an error for a non-2xx HTTP response."""
        return cls(f"GitHub API HTTP {status_code}", status_code=status_code)

    @classmethod
    def not_found(cls, resource: str) -> GitHubAPIError:
        """Return a 404 error for ``resource``."""
        return cls(f"GitHub API: {resource} not found", status_code=_HTTP_NOT_FOUND)

    @classmethod
    def rate_limited(cls) -> GitHubAPIError:
        """Return an error for an exhausted rate limit."""
        return cls("GitHub API rate limit exceeded", status_code=403)


class GitHubConfigError(RuntimeError):
    """Raised when GitHub provider configuration is invalid."""

    @classmethod
    def missing_token(cls) -> GitHubConfigError:
        """Return an error when no base token is configured."""
        return cls("PERMSYNC_GITHUB_TOKEN is required for GitHub API")

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")


def is_not_found(exc: BaseException) -> bool:
    """Return True when ``exc`` is a GitHub 404 response."""
    return isinstance(exc, GitHubAPIError) and exc.status_code == _HTTP_NOT_FOUND
