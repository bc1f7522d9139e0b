from __future__ import annotations

from dataclasses import dataclass

from chat_client.domain.entities.contact import Contact
from chat_client.domain.entities.identity import Identity
from chat_client.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    identity: Identity | None
    online_user_ids: frozenset[str]
    channel_connected: bool
    is_checking_auth: bool
    is_logging_in: bool
    is_signing_up: bool
    is_updating_profile: bool


@dataclass(frozen=True, slots=True)
class ConversationSnapshot:
    contacts: tuple[Contact, ...]
    selected: Contact | None
    messages: tuple[Message, ...]
    epoch: int
    is_contacts_loading: bool
    is_history_loading: bool
    is_sending: bool
