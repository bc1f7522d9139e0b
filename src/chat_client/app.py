from __future__ import annotations

import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Self

import httpx

from chat_client.application.ports.notifier import LoggingNotifier, Notifier
from chat_client.config import Settings, settings as default_settings
from chat_client.infrastructure.http.client import HttpChatApi, build_http_client
from chat_client.infrastructure.realtime.socketio_channel import SocketIOChannel
from chat_client.services.conversation_manager import ConversationManager
from chat_client.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


@dataclass
class ChatClient:
    """Object graph handed to the presentation layer."""

    http: httpx.AsyncClient
    channel: SocketIOChannel
    session: SessionManager
    conversations: ConversationManager

    async def aclose(self) -> None:
        self.conversations.close()
        await self.session.disconnect_channel()
        await self.http.aclose()
        logger.info("Chat client closed")

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def create_chat_client(
    settings: Settings | None = None,
    *,
    notifier: Notifier | None = None,
    http: httpx.AsyncClient | None = None,
) -> ChatClient:
    settings = settings or default_settings
    notifier = notifier or LoggingNotifier()
    http = http or build_http_client(settings)

    def _cookie_header() -> dict[str, str]:
        cookies = "; ".join(f"{name}={value}" for name, value in http.cookies.items())
        return {"Cookie": cookies} if cookies else {}

    channel = SocketIOChannel(
        settings.SOCKET_URL,
        path=settings.SOCKET_PATH,
        transports=settings.SOCKET_TRANSPORTS,
        headers_factory=_cookie_header,
    )
    api = HttpChatApi(http)
    session = SessionManager(
        api, api, channel, notifier, max_image_bytes=settings.MAX_IMAGE_BYTES,
    )
    conversations = ConversationManager(
        api, session, notifier, max_image_bytes=settings.MAX_IMAGE_BYTES,
    )
    return ChatClient(
        http=http,
        channel=channel,
        session=session,
        conversations=conversations,
    )
