"""Repository ``owner/name`` helpers.

Repository names on the code host are ``owner/name`` identifiers, sometimes
stored with the host name in front (``github.com/owner/name``). They are not
filesystem paths and are parsed with these helpers rather than ``pathlib``.
"""

from __future__ import annotations


def strip_host_prefix(uri: str, hostname: str) -> str:
    """Remove a leading ``hostname`` and slash from a repository URI.

    Examples
    --------
    >>> strip_host_prefix("github.com/acme/widgets", "github.com")
    'acme/widgets'
    >>> strip_host_prefix("acme/widgets", "github.com")
    'acme/widgets'

    """
    name_with_owner = uri.removeprefix(hostname) if hostname else uri
    return name_with_owner.removeprefix("/")


def split_name_with_owner(name_with_owner: str) -> tuple[str, str]:
    """Split ``owner/name`` into ``(owner, name)``.

    Raises
    ------
    ValueError
        If the value is not exactly two non-empty slash-separated parts.

    Examples
    --------
    >>> split_name_with_owner("acme/widgets")
    ('acme', 'widgets')

    """
    parts = name_with_owner.split("/")
    if len(parts) != 2 or not all(parts):  # noqa: PLR2004
        msg = f"Invalid repository name: expected 'owner/name', got {name_with_owner!r}"
        raise ValueError(msg)
    return parts[0], parts[1]
