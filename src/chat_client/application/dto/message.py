from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MessageContent:
    """Outbound message body. At least one of text/image/images is expected."""

    text: str | None = None
    image: str | bytes | None = None
    images: tuple[str, ...] = ()

    @property
    def all_images(self) -> list[str | bytes]:
        found: list[str | bytes] = [self.image] if self.image else []
        found.extend(self.images)
        return found
