from __future__ import annotations

from chat_client.domain.entities.contact import Contact
from chat_client.domain.entities.identity import Identity
from chat_client.domain.entities.message import Message
from chat_client.infrastructure.http.schemas import MessagePayload, UserPayload

UNNAMED_USER = "Unnamed User"


def identity_from_payload(p: UserPayload) -> Identity:
    return Identity(
        id=p.id,
        display_name=p.full_name or UNNAMED_USER,
        email=p.email,
        avatar=p.profile_pic or None,
    )


def contact_from_payload(p: UserPayload) -> Contact:
    return Contact(
        id=p.id,
        display_name=p.full_name or UNNAMED_USER,
        avatar=p.profile_pic or None,
    )


def message_from_payload(p: MessagePayload) -> Message:
    return Message(
        id=p.id,
        sender_id=p.sender_id,
        receiver_id=p.receiver_id,
        text=p.text,
        image=p.image or None,
        images=tuple(p.images or ()),
        created_at=p.created_at,
    )
