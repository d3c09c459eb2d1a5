"""Unit tests for resolving the accounts that can read a repository."""

from __future__ import annotations

import datetime as dt
import typing as typ

import pytest

from permsync.authz import (
    CachedGroup,
    EnumerationPhase,
    FetchPermsOptions,
    GroupsCache,
)
from permsync.github import CollaboratorAffiliation, GitHubAPIError
from tests.helpers.authz_builders import (
    CLOCK_START,
    DEFAULT_TTL,
    ManualClock,
    make_provider,
    make_repo_ref,
)

if typ.TYPE_CHECKING:
    from tests.helpers.fake_directory import FakeDirectory, FakeDirectoryClient


@pytest.mark.asyncio
async def test_read_all_org_grants_every_member(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """Members of a read-all org are authorised alongside collaborators."""
    directory.add_org("acme", default_permission="read", members=[10, 11], admins=[1])
    directory.add_collaborator("acme", "widgets", 20)
    provider = make_provider(client)

    result = await provider.fetch_repo_perms(make_repo_ref("acme", "widgets", "R1"))

    assert result.ok
    assert result.value == ("20", "1", "10", "11")
    collaborators = directory.calls_to("list_repository_collaborators")
    assert collaborators[0].args[2] is CollaboratorAffiliation.DIRECT
    assert directory.calls_to("list_organization_members")[0].args == ("acme", False)


@pytest.mark.asyncio
async def test_restrictive_org_grants_only_admins_collaborators_and_teams(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """Ordinary members of a restrictive org gain nothing implicitly."""
    directory.add_org("acme", default_permission="none", members=[10, 11], admins=[1])
    directory.add_team("acme", "core", members=[11])
    directory.add_repo_team("acme", "widgets", "core")
    directory.add_collaborator("acme", "widgets", 20)
    provider = make_provider(client)

    result = await provider.fetch_repo_perms(make_repo_ref("acme", "widgets", "R1"))

    assert set(result.value) == {"20", "1", "11"}
    assert "10" not in result.value
    assert directory.calls_to("list_organization_members")[0].args == ("acme", True)


@pytest.mark.asyncio
async def test_personal_repository_has_only_collaborators(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """A user-owned repository stops after its collaborators."""
    directory.add_collaborator("octocat", "dotfiles", 5)
    provider = make_provider(client)

    result = await provider.fetch_repo_perms(
        make_repo_ref("octocat", "dotfiles", "R9")
    )

    assert result.ok
    assert result.value == ("5",)


@pytest.mark.asyncio
async def test_cached_members_avoid_member_listing(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """A second fetch for another repository reuses the org's member set."""
    directory.add_org("acme", members=[10, 11])
    provider = make_provider(client)

    await provider.fetch_repo_perms(make_repo_ref("acme", "widgets", "R1"))
    second = await provider.fetch_repo_perms(make_repo_ref("acme", "gadgets", "R2"))

    assert set(second.value) == {"10", "11"}
    assert len(directory.calls_to("list_organization_members")) == 1


@pytest.mark.asyncio
async def test_repository_joins_cached_repository_set(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """A known repository set gains the repository being fetched."""
    directory.add_org("acme", members=[10])
    cache = GroupsCache(dt.timedelta(hours=1))
    cache.set(CachedGroup(org="acme", repositories=("R0",)))
    provider = make_provider(client, groups_cache=cache)

    await provider.fetch_repo_perms(make_repo_ref("acme", "widgets", "R1"))
    await provider.fetch_repo_perms(make_repo_ref("acme", "widgets", "R1"))

    group, _ = cache.get("acme")
    assert group.repositories == ("R0", "R1")
    assert group.users == ("10",)


@pytest.mark.asyncio
async def test_invalidate_caches_re_enumerates_members(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """Forced refresh lists org and team members again."""
    directory.add_org("acme", default_permission="none", admins=[1])
    directory.add_team("acme", "core", members=[11])
    directory.add_repo_team("acme", "widgets", "core")
    provider = make_provider(client)
    ref = make_repo_ref("acme", "widgets", "R1")

    await provider.fetch_repo_perms(ref)
    await provider.fetch_repo_perms(ref, FetchPermsOptions(invalidate_caches=True))

    assert len(directory.calls_to("list_organization_members")) == 2
    assert len(directory.calls_to("list_team_members")) == 2


@pytest.mark.asyncio
async def test_admin_scoped_record_is_persisted_with_flag(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """Admin member sets are cached as admin-only."""
    directory.add_org("acme", default_permission="none", members=[10], admins=[1])
    provider = make_provider(client)

    await provider.fetch_repo_perms(make_repo_ref("acme", "widgets", "R1"))

    assert provider.groups_cache is not None
    group, _ = provider.groups_cache.get("acme")
    assert group.users == ("1",)
    assert group.admins_only is True


@pytest.mark.asyncio
async def test_disabled_cache_lists_all_collaborators_only(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """Without group caching every collaborator affiliation is listed directly."""
    directory.add_org("acme", members=[10])
    directory.add_collaborator("acme", "widgets", 20)
    directory.add_collaborator("acme", "widgets", 10, direct=False)
    provider = make_provider(client, ttl=dt.timedelta(seconds=-1))

    result = await provider.fetch_repo_perms(make_repo_ref("acme", "widgets", "R1"))

    assert result.value == ("20", "10")
    assert {call.method for call in directory.calls} == {
        "list_repository_collaborators"
    }
    assert directory.calls[0].args[2] is CollaboratorAffiliation.ALL


@pytest.mark.asyncio
async def test_member_listing_failure_returns_partial_users(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """A failing member page keeps earlier users and reports the group."""
    directory.page_size = 1
    directory.add_org("acme", members=[10, 11, 12])
    directory.add_collaborator("acme", "widgets", 20)
    directory.fail("list_organization_members", GitHubAPIError.http_error(502), page=3)
    provider = make_provider(client)

    result = await provider.fetch_repo_perms(make_repo_ref("acme", "widgets", "R1"))

    assert result.partial
    assert result.value == ("20", "10", "11")
    assert result.error is not None
    assert result.error.phase is EnumerationPhase.GROUP_ENUMERATION
    assert "list users for group acme" in str(result.error)
    assert provider.groups_cache is not None
    assert provider.groups_cache.get("acme")[1] is False


@pytest.mark.asyncio
async def test_collaborator_listing_failure_skips_groups(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """A failed collaborator listing stops before group discovery."""
    directory.add_org("acme", members=[10])
    directory.fail("list_repository_collaborators", GitHubAPIError.http_error(500))
    provider = make_provider(client)

    result = await provider.fetch_repo_perms(make_repo_ref("acme", "widgets", "R1"))

    assert result.value == ()
    assert result.error is not None
    assert result.error.phase is EnumerationPhase.DIRECT_AFFILIATIONS
    assert directory.calls_to("get_organization") == []


@pytest.mark.asyncio
async def test_org_lookup_failure_is_a_discovery_error(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """Org lookup errors other than not-found are reported, not swallowed."""
    directory.add_collaborator("acme", "widgets", 20)
    directory.fail("get_organization", GitHubAPIError.http_error(503))
    provider = make_provider(client)

    result = await provider.fetch_repo_perms(make_repo_ref("acme", "widgets", "R1"))

    assert result.value == ("20",)
    assert result.error is not None
    assert result.error.phase is EnumerationPhase.GROUP_DISCOVERY


@pytest.mark.asyncio
async def test_expired_member_set_is_enumerated_again(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """Once the TTL passes, the next fetch lists the org members again."""
    directory.add_org("acme", members=[10, 11])
    clock = ManualClock()
    cache = GroupsCache(DEFAULT_TTL, clock=clock)
    provider = make_provider(client, groups_cache=cache)
    repo = make_repo_ref("acme", "widgets", "R1")

    await provider.fetch_repo_perms(repo)
    clock.advance(DEFAULT_TTL + dt.timedelta(seconds=1))
    directory.org_members["acme"].pop()
    result = await provider.fetch_repo_perms(repo)

    assert result.value == ("10",)
    assert len(directory.calls_to("list_organization_members")) == 2
    group, existed = cache.get("acme")
    assert existed is True
    assert group.users == ("10",)
    assert group.refreshed_at == clock.now


@pytest.mark.asyncio
async def test_failed_refresh_of_expired_member_set_keeps_stored_record(
    directory: FakeDirectory, client: FakeDirectoryClient
) -> None:
    """An expired member set survives a failed re-enumeration unchanged."""
    directory.add_org("acme", members=[10, 11])
    clock = ManualClock()
    cache = GroupsCache(DEFAULT_TTL, clock=clock)
    provider = make_provider(client, groups_cache=cache)
    repo = make_repo_ref("acme", "widgets", "R1")
    await provider.fetch_repo_perms(repo)
    clock.advance(DEFAULT_TTL + dt.timedelta(seconds=1))
    directory.fail("list_organization_members", GitHubAPIError.http_error(502))

    result = await provider.fetch_repo_perms(repo)

    assert result.partial
    assert result.value == ()
    assert len(cache) == 1
    clock.now = CLOCK_START
    group, existed = cache.get("acme")
    assert existed is True
    assert group.users == ("10", "11")
    assert group.refreshed_at == CLOCK_START
