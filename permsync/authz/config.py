"""Configuration for GitHub permission providers.

Usage
-----
Build options directly:

>>> import datetime as dt
>>> options = ProviderOptions(
...     base_token="ghp_example", groups_cache_ttl=dt.timedelta(hours=72)
... )
>>> options.groups_caching_enabled
True

Or from the environment:

>>> import os
>>> os.environ["PERMSYNC_GITHUB_TOKEN"] = "ghp_example"
>>> os.environ["PERMSYNC_GROUPS_CACHE_TTL_SECONDS"] = "0"
>>> ProviderOptions.from_env().groups_caching_enabled
False

"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import os

from permsync.github.errors import GitHubConfigError

DEFAULT_GITHUB_URL = "https://github.com"


@dc.dataclass(frozen=True, slots=True)
class ProviderOptions:
    """Construction options for :class:`GitHubPermissionsProvider`.

    Attributes
    ----------
    base_token
        Service credential used for group enumeration and scope validation.
    github_url
        Base URL of the GitHub instance; identifies the code host.
    groups_cache_ttl
        Lifetime of cached group records. Zero or negative disables group
        caching: fetches then enumerate every affiliation directly and never
        discover groups.

    """

    base_token: str
    github_url: str = DEFAULT_GITHUB_URL
    groups_cache_ttl: dt.timedelta = dt.timedelta(0)

    @property
    def groups_caching_enabled(self) -> bool:
        """Return True when group caching is configured."""
        return self.groups_cache_ttl.total_seconds() > 0

    @staticmethod
    def _parse_int(env_var: str, default: int) -> int:
        """Read an integer env var, falling back to a default."""
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return default
        try:
            return int(raw)
        except ValueError as exc:
            msg = f"{env_var} must be an integer, got: {raw!r}"
            raise ValueError(msg) from exc

    @classmethod
    def from_env(cls) -> ProviderOptions:
        """Create options from environment variables.

        Reads:

        - ``PERMSYNC_GITHUB_TOKEN``: base service token (required).
        - ``PERMSYNC_GITHUB_URL``: GitHub base URL.
        - ``PERMSYNC_GROUPS_CACHE_TTL_SECONDS``: group cache TTL in seconds;
          zero, negative or unset disables group caching.

        Raises
        ------
        GitHubConfigError
            If no token is configured.
        ValueError
            If the TTL is not an integer.

        """
        token = os.environ.get("PERMSYNC_GITHUB_TOKEN", "").strip()
        if not token:
            raise GitHubConfigError.missing_token()

        github_url = (
            os.environ.get("PERMSYNC_GITHUB_URL", "").strip() or DEFAULT_GITHUB_URL
        )
        ttl_seconds = cls._parse_int("PERMSYNC_GROUPS_CACHE_TTL_SECONDS", 0)
        return cls(
            base_token=token,
            github_url=github_url,
            groups_cache_ttl=dt.timedelta(seconds=ttl_seconds),
        )
