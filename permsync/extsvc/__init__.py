"""Accounts, repositories and code hosts shared across providers."""

from __future__ import annotations

from .models import (
    GITHUB_SERVICE_TYPE,
    Account,
    CodeHost,
    RepositoryRef,
    is_host_of_account,
    is_host_of_repo,
)

__all__ = [
    "GITHUB_SERVICE_TYPE",
    "Account",
    "CodeHost",
    "RepositoryRef",
    "is_host_of_account",
    "is_host_of_repo",
]
