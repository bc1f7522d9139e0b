"""Socket.IO push channel: presence broadcasts and message events."""
from __future__ import annotations

import logging
from functools import partial
from typing import Any, Callable

import socketio
from pydantic import ValidationError

from chat_client.application.ports.channel import ChannelHandler
from chat_client.domain.entities.identity import Identity
from chat_client.domain.value_objects.enums import ChannelEvent
from chat_client.infrastructure.http.mappers import message_from_payload
from chat_client.infrastructure.http.schemas import MessagePayload

logger = logging.getLogger(__name__)

HeadersFactory = Callable[[], dict[str, str]]


def decode_presence(data: Any) -> tuple[str, ...]:
    if not isinstance(data, (list, tuple)):
        raise ValueError(f"presence payload must be a list, got {type(data).__name__}")
    return tuple(str(user_id) for user_id in data)


def decode_message(data: Any) -> Any:
    return message_from_payload(MessagePayload.model_validate(data))


_DECODERS: dict[ChannelEvent, Callable[[Any], Any]] = {
    ChannelEvent.PRESENCE_CHANGED: decode_presence,
    ChannelEvent.MESSAGE_CREATED: decode_message,
}


class SocketIOChannel:
    """Implements application.ports.channel.PushChannel.

    Reconnection is left to the Socket.IO client. One handler per event;
    registering again replaces the previous one.
    """

    def __init__(
        self,
        url: str,
        *,
        path: str = "socket.io",
        transports: list[str] | None = None,
        headers_factory: HeadersFactory | None = None,
        client: socketio.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._path = path
        self._transports = transports or ["polling", "websocket"]
        self._headers_factory = headers_factory
        self._sio = client or socketio.AsyncClient(logger=False, engineio_logger=False)
        self._handlers: dict[ChannelEvent, ChannelHandler] = {}
        self._bound: set[ChannelEvent] = set()

    @property
    def connected(self) -> bool:
        return bool(self._sio.connected)

    async def connect(self, identity: Identity) -> None:
        headers = self._headers_factory() if self._headers_factory else {}
        await self._sio.connect(
            f"{self._url}?userId={identity.id}",
            headers=headers,
            transports=self._transports,
            socketio_path=self._path,
        )
        logger.info("Push channel connected for user=%s", identity.id)

    async def disconnect(self) -> None:
        await self._sio.disconnect()
        logger.info("Push channel disconnected")

    def on(self, event: ChannelEvent, handler: ChannelHandler) -> None:
        self._handlers[event] = handler
        if event not in self._bound:
            self._sio.on(event.value, partial(self._dispatch, event))
            self._bound.add(event)

    def off(self, event: ChannelEvent) -> None:
        self._handlers.pop(event, None)

    def _dispatch(self, event: ChannelEvent, data: Any = None) -> None:
        handler = self._handlers.get(event)
        if handler is None:
            return
        try:
            decoded = _DECODERS[event](data)
        except (ValidationError, ValueError):
            logger.warning("Dropping undecodable %s payload", event.value, exc_info=True)
            return
        handler(decoded)
