from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Contact:
    id: str
    display_name: str
    avatar: str | None = None
