"""permsync: repository permission synchronisation for GitHub code hosts."""

from __future__ import annotations

__version__ = "0.1.0"
