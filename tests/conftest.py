"""Shared test fixtures."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import pytest

from chat_client.application.dto.credentials import LoginCredentials, SignupCredentials
from chat_client.application.dto.message import MessageContent
from chat_client.application.exceptions import AppError
from chat_client.application.ports.channel import ChannelHandler
from chat_client.domain.entities.contact import Contact
from chat_client.domain.entities.identity import Identity
from chat_client.domain.entities.message import Message
from chat_client.domain.value_objects.enums import ChannelEvent
from chat_client.services.conversation_manager import ConversationManager
from chat_client.services.session_manager import SessionManager

U1 = Identity(id="U1", display_name="User One", email="u1@example.com")
U2 = Contact(id="U2", display_name="User Two")
U3 = Contact(id="U3", display_name="User Three")


def make_message(
    msg_id: str,
    *,
    sender: str = "U2",
    receiver: str = "U1",
    text: str | None = "hello",
    image: str | None = None,
    created_at: datetime | None = None,
) -> Message:
    return Message(
        id=msg_id,
        sender_id=sender,
        receiver_id=receiver,
        text=text,
        image=image,
        created_at=created_at or datetime.now(timezone.utc),
    )


@dataclass
class FakeChatApi:
    """In-memory REST backend.

    ``gates`` holds events keyed by operation (``history:<id>``,
    ``send:<id>``, ``contacts``) that the call waits on before answering,
    to force a chosen interleaving.
    """

    identity: Identity | None = U1
    contacts: list[Contact] = field(default_factory=lambda: [U2, U3])
    histories: dict[str, list[Message]] = field(default_factory=dict)
    failures: dict[str, AppError] = field(default_factory=dict)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    next_sent: list[Message] = field(default_factory=list)
    sent: list[tuple[str, MessageContent]] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    _seq: int = 100

    async def _enter(self, op: str, gate: str | None = None) -> None:
        self.calls.append(op)
        if gate and gate in self.gates:
            await self.gates[gate].wait()
        error = self.failures.get(op)
        if error is not None:
            raise error

    async def login(self, credentials: LoginCredentials) -> Identity:
        await self._enter("login")
        assert self.identity is not None
        return self.identity

    async def signup(self, credentials: SignupCredentials) -> Identity:
        await self._enter("signup")
        return Identity(id="U9", display_name=credentials.full_name, email=credentials.email)

    async def logout(self) -> None:
        await self._enter("logout")

    async def check(self) -> Identity:
        await self._enter("check")
        assert self.identity is not None
        return self.identity

    async def update_profile(self, avatar: str) -> Identity:
        await self._enter("update_profile")
        assert self.identity is not None
        return Identity(id=self.identity.id, display_name="ignored", avatar="https://cdn/avatar.png")

    async def list_contacts(self) -> list[Contact]:
        await self._enter("list_contacts", "contacts")
        return list(self.contacts)

    async def list_messages(self, contact_id: str) -> list[Message]:
        await self._enter("list_messages", f"history:{contact_id}")
        return list(self.histories.get(contact_id, []))

    async def send_message(self, recipient_id: str, content: MessageContent) -> Message:
        await self._enter("send_message", f"send:{recipient_id}")
        self.sent.append((recipient_id, content))
        if self.next_sent:
            return self.next_sent.pop(0)
        self._seq += 1
        return Message(
            id=str(self._seq),
            sender_id=self.identity.id if self.identity else "?",
            receiver_id=recipient_id,
            text=content.text,
            image=content.image if isinstance(content.image, str) else None,
            images=content.images,
            created_at=datetime.now(timezone.utc),
        )


@dataclass
class FakePushChannel:
    connected: bool = False
    handlers: dict[ChannelEvent, ChannelHandler] = field(default_factory=dict)
    connects: list[Identity] = field(default_factory=list)
    disconnects: int = 0
    connect_error: Exception | None = None

    async def connect(self, identity: Identity) -> None:
        await asyncio.sleep(0)
        if self.connect_error is not None:
            raise self.connect_error
        self.connects.append(identity)
        self.connected = True

    async def disconnect(self) -> None:
        self.disconnects += 1
        self.connected = False

    def on(self, event: ChannelEvent, handler: ChannelHandler) -> None:
        self.handlers[event] = handler

    def off(self, event: ChannelEvent) -> None:
        self.handlers.pop(event, None)

    def emit(self, event: ChannelEvent, payload: Any) -> None:
        handler = self.handlers.get(event)
        if handler is not None:
            handler(payload)


@dataclass
class RecordingNotifier:
    successes: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


@pytest.fixture
def api() -> FakeChatApi:
    return FakeChatApi()


@pytest.fixture
def channel() -> FakePushChannel:
    return FakePushChannel()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def session(api, channel, notifier) -> SessionManager:
    return SessionManager(api, api, channel, notifier, max_image_bytes=1024)


@pytest.fixture
def conversations(api, session, notifier) -> ConversationManager:
    return ConversationManager(api, session, notifier, max_image_bytes=1024)
