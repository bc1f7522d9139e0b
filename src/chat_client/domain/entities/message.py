from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Message:
    id: str
    sender_id: str
    receiver_id: str
    text: str | None = None
    image: str | None = None
    images: tuple[str, ...] = ()
    created_at: datetime | None = None

    @property
    def conversation_key(self) -> frozenset[str]:
        """Unordered {sender, receiver} pair identifying the conversation."""
        return frozenset((self.sender_id, self.receiver_id))

    def involves(self, user_id: str) -> bool:
        return user_id in (self.sender_id, self.receiver_id)
