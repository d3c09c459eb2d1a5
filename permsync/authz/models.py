"""Result and option types for permission fetches."""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .errors import EnumerationError


@dataclasses.dataclass(frozen=True, slots=True)
class FetchPermsOptions:
    """Per-call options for ``fetch_user_perms`` and ``fetch_repo_perms``.

    Attributes
    ----------
    invalidate_caches
        Invalidate every group cache entry touched by the call before use, so
        each group is enumerated afresh regardless of TTL.
    timeout
        Optional bound in seconds on the whole fetch. Expiry is reported like
        any other enumeration failure, with the partial result.

    """

    invalidate_caches: bool = False
    timeout: float | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class ExternalUserPermissions:
    """Repository IDs an account can read on the code host.

    ``exacts`` preserves discovery order and never holds duplicates.
    """

    exacts: tuple[str, ...] = ()

    def __contains__(self, repo_id: object) -> bool:
        """Return True when ``repo_id`` is readable."""
        return repo_id in self.exacts

    def __len__(self) -> int:
        """Return the number of readable repositories."""
        return len(self.exacts)


@dataclasses.dataclass(frozen=True, slots=True)
class FetchResult[T]:
    """Outcome of a fetch that may have stopped part way.

    A failed enumeration leaves ``error`` set and ``value`` holding whatever
    had been accumulated, deduplicated, before the failure. Such a value is
    best effort: it is valid but carries no completeness guarantee. Callers
    that only accept complete data use :meth:`unwrap`.
    """

    value: T
    error: EnumerationError | None = None

    @property
    def ok(self) -> bool:
        """Return True when every enumeration completed."""
        return self.error is None

    @property
    def partial(self) -> bool:
        """Return True when ``value`` is a partial result."""
        return self.error is not None

    def unwrap(self) -> T:
        """Return ``value``, raising ``error`` if the fetch was partial."""
        if self.error is not None:
            raise self.error
        return self.value


class IdAccumulator:
    """Insertion-ordered set of identifiers."""

    __slots__ = ("_seen",)

    def __init__(self) -> None:
        """Start with no identifiers."""
        self._seen: dict[str, None] = {}

    def extend(self, ids: cabc.Iterable[str]) -> None:
        """Add every unseen identifier from ``ids``."""
        for item in ids:
            self._seen.setdefault(item, None)

    def __len__(self) -> int:
        """Return the number of distinct identifiers."""
        return len(self._seen)

    def to_tuple(self) -> tuple[str, ...]:
        """Return the identifiers in insertion order."""
        return tuple(self._seen)
