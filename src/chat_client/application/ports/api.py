from __future__ import annotations

from typing import Protocol

from chat_client.application.dto.credentials import LoginCredentials, SignupCredentials
from chat_client.application.dto.message import MessageContent
from chat_client.domain.entities.contact import Contact
from chat_client.domain.entities.identity import Identity
from chat_client.domain.entities.message import Message


class AuthService(Protocol):
    async def login(self, credentials: LoginCredentials) -> Identity: ...
    async def signup(self, credentials: SignupCredentials) -> Identity: ...
    async def logout(self) -> None: ...
    async def check(self) -> Identity: ...


class ProfileService(Protocol):
    async def update_profile(self, avatar: str) -> Identity: ...


class DirectoryService(Protocol):
    async def list_contacts(self) -> list[Contact]: ...


class HistoryService(Protocol):
    async def list_messages(self, contact_id: str) -> list[Message]: ...


class SendService(Protocol):
    async def send_message(self, recipient_id: str, content: MessageContent) -> Message:
        """Server assigns id and timestamp."""
        ...


class ConversationApi(DirectoryService, HistoryService, SendService, Protocol):
    """What ConversationManager needs from the REST backend."""
