from __future__ import annotations

from enum import StrEnum


class ChannelEvent(StrEnum):
    PRESENCE_CHANGED = "getOnlineUsers"
    MESSAGE_CREATED = "newMessage"
