from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Identity:
    """The authenticated user."""

    id: str
    display_name: str
    email: str | None = None
    avatar: str | None = None
