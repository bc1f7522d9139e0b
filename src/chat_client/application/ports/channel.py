from __future__ import annotations

from typing import Any, Callable, Protocol

from chat_client.domain.entities.identity import Identity
from chat_client.domain.value_objects.enums import ChannelEvent

ChannelHandler = Callable[[Any], None]


class PushChannel(Protocol):
    """Persistent event stream keyed by identity at connect time.

    Handlers receive decoded payloads: a sequence of user ids for
    PRESENCE_CHANGED and a Message for MESSAGE_CREATED.
    """

    @property
    def connected(self) -> bool: ...

    async def connect(self, identity: Identity) -> None: ...
    async def disconnect(self) -> None: ...
    def on(self, event: ChannelEvent, handler: ChannelHandler) -> None: ...
    def off(self, event: ChannelEvent) -> None: ...
