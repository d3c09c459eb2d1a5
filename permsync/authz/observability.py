"""Structured log events for permission fetches.

Every event is a single femtologging line of the form
``[authz.fetch.completed] kind=user subject=42 ...`` so log aggregators can
parse fetch throughput, partial results and group cache effectiveness.
"""

from __future__ import annotations

import enum
import typing as typ

from permsync.github.errors import GitHubAPIError, GitHubConfigError, is_not_found
from permsync.logging import get_logger, log_debug, log_info, log_warning

from .errors import EnumerationError

if typ.TYPE_CHECKING:
    import datetime as dt

    from .groups import CachedGroup

logger = get_logger(__name__)

_HTTP_SERVER_ERROR_THRESHOLD = 500
_HTTP_RATE_LIMITED = (403, 429)


class PermsSyncEventType(enum.StrEnum):
    """Structured log event types for permission fetches."""

    FETCH_STARTED = "authz.fetch.started"
    FETCH_COMPLETED = "authz.fetch.completed"
    FETCH_PARTIAL = "authz.fetch.partial"
    GROUP_CACHE_HIT = "authz.group.cache_hit"
    GROUP_SYNCED = "authz.group.synced"


class ErrorCategory(enum.StrEnum):
    """Categories for classifying listing failures."""

    TRANSIENT = "transient"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    CLIENT_ERROR = "client_error"
    TIMEOUT = "timeout"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize a listing failure for alert routing."""
    if isinstance(exc, EnumerationError):
        return categorize_error(exc.cause)
    if isinstance(exc, TimeoutError):
        return ErrorCategory.TIMEOUT
    if isinstance(exc, GitHubConfigError):
        return ErrorCategory.CONFIGURATION
    if isinstance(exc, GitHubAPIError):
        if is_not_found(exc):
            return ErrorCategory.NOT_FOUND
        if exc.status_code in _HTTP_RATE_LIMITED:
            return ErrorCategory.RATE_LIMITED
        if (
            exc.status_code is not None
            and exc.status_code >= _HTTP_SERVER_ERROR_THRESHOLD
        ):
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR
    return ErrorCategory.UNKNOWN


class PermsSyncEventLogger:
    """Emit structured permission fetch events via femtologging."""

    def log_fetch_started(self, *, kind: str, subject: str) -> None:
        """Log the start of a user or repository permission fetch."""
        log_info(
            logger,
            "[%s] kind=%s subject=%s",
            PermsSyncEventType.FETCH_STARTED,
            kind,
            subject,
        )

    def log_fetch_completed(
        self,
        *,
        kind: str,
        subject: str,
        count: int,
        groups: int,
        duration: dt.timedelta,
    ) -> None:
        """Log a fetch that enumerated everything it needed."""
        log_info(
            logger,
            "[%s] kind=%s subject=%s ids=%d groups=%d duration_seconds=%.3f",
            PermsSyncEventType.FETCH_COMPLETED,
            kind,
            subject,
            count,
            groups,
            duration.total_seconds(),
        )

    def log_fetch_partial(
        self,
        *,
        kind: str,
        subject: str,
        count: int,
        error: EnumerationError,
        duration: dt.timedelta,
    ) -> None:
        """Log a fetch that returns a partial result after a listing failure."""
        log_warning(
            logger,
            "[%s] kind=%s subject=%s ids=%d phase=%s duration_seconds=%.3f "
            "error_type=%s error_category=%s error_message=%s",
            PermsSyncEventType.FETCH_PARTIAL,
            kind,
            subject,
            count,
            error.phase,
            duration.total_seconds(),
            type(error.cause).__name__,
            categorize_error(error),
            str(error.cause),
            exc_info=error,
        )

    def log_group_cache_hit(self, *, kind: str, group: CachedGroup) -> None:
        """Log a group whose needed set was served from the cache."""
        log_debug(
            logger,
            "[%s] kind=%s group=%s users=%d repositories=%d",
            PermsSyncEventType.GROUP_CACHE_HIT,
            kind,
            group.key,
            len(group.users),
            len(group.repositories),
        )

    def log_group_synced(self, *, kind: str, group: CachedGroup) -> None:
        """Log a group whose set was enumerated and written to the cache."""
        log_info(
            logger,
            "[%s] kind=%s group=%s admins_only=%s users=%d repositories=%d",
            PermsSyncEventType.GROUP_SYNCED,
            kind,
            group.key,
            group.admins_only,
            len(group.users),
            len(group.repositories),
        )
