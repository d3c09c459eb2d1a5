"""Unit tests for ProviderOptions."""

from __future__ import annotations

import datetime as dt

import pytest

from permsync.authz import ProviderOptions
from permsync.authz.config import DEFAULT_GITHUB_URL
from permsync.github import GitHubConfigError

_ENV_VARS = (
    "PERMSYNC_GITHUB_TOKEN",
    "PERMSYNC_GITHUB_URL",
    "PERMSYNC_GROUPS_CACHE_TTL_SECONDS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestProviderOptions:
    """Tests for the ProviderOptions dataclass."""

    def test_defaults_disable_group_caching(self) -> None:
        """Group caching is off unless a positive TTL is configured."""
        options = ProviderOptions(base_token="t")

        assert options.github_url == DEFAULT_GITHUB_URL
        assert options.groups_caching_enabled is False

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [(1, True), (72 * 3600, True), (0, False), (-10, False)],
    )
    def test_groups_caching_enabled_tracks_ttl(
        self, seconds: int, *, expected: bool
    ) -> None:
        """Only a positive TTL enables group caching."""
        options = ProviderOptions(
            base_token="t", groups_cache_ttl=dt.timedelta(seconds=seconds)
        )
        assert options.groups_caching_enabled is expected

    @pytest.mark.parametrize(
        ("env_vars", "expected_url", "expected_ttl"),
        [
            pytest.param({}, DEFAULT_GITHUB_URL, dt.timedelta(0), id="defaults"),
            pytest.param(
                {"PERMSYNC_GITHUB_URL": "https://ghe.example.com"},
                "https://ghe.example.com",
                dt.timedelta(0),
                id="github_url",
            ),
            pytest.param(
                {"PERMSYNC_GROUPS_CACHE_TTL_SECONDS": "259200"},
                DEFAULT_GITHUB_URL,
                dt.timedelta(hours=72),
                id="ttl",
            ),
            pytest.param(
                {"PERMSYNC_GROUPS_CACHE_TTL_SECONDS": "  "},
                DEFAULT_GITHUB_URL,
                dt.timedelta(0),
                id="blank_ttl",
            ),
        ],
    )
    def test_from_env_configuration(
        self,
        monkeypatch: pytest.MonkeyPatch,
        env_vars: dict[str, str],
        expected_url: str,
        expected_ttl: dt.timedelta,
    ) -> None:
        """from_env reads the URL and TTL with sensible defaults."""
        monkeypatch.setenv("PERMSYNC_GITHUB_TOKEN", "ghp_example")
        for name, value in env_vars.items():
            monkeypatch.setenv(name, value)

        options = ProviderOptions.from_env()

        assert options.base_token == "ghp_example"
        assert options.github_url == expected_url
        assert options.groups_cache_ttl == expected_ttl

    @pytest.mark.parametrize("token", [None, "", "   "])
    def test_from_env_requires_token(
        self, monkeypatch: pytest.MonkeyPatch, token: str | None
    ) -> None:
        """A missing or blank token is a configuration error."""
        if token is not None:
            monkeypatch.setenv("PERMSYNC_GITHUB_TOKEN", token)

        with pytest.raises(GitHubConfigError, match="PERMSYNC_GITHUB_TOKEN"):
            ProviderOptions.from_env()

    def test_from_env_rejects_non_integer_ttl(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A malformed TTL names the offending variable."""
        monkeypatch.setenv("PERMSYNC_GITHUB_TOKEN", "ghp_example")
        monkeypatch.setenv("PERMSYNC_GROUPS_CACHE_TTL_SECONDS", "3 days")

        with pytest.raises(ValueError, match="PERMSYNC_GROUPS_CACHE_TTL_SECONDS"):
            ProviderOptions.from_env()
