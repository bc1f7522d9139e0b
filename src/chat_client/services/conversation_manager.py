"""Conversation state: contacts, the selected partner and its message list."""
from __future__ import annotations

import logging
from typing import Iterable

from chat_client.application.dto.message import MessageContent
from chat_client.application.dto.snapshots import ConversationSnapshot, SessionSnapshot
from chat_client.application.exceptions import (
    AppError,
    NoRecipientError,
    PayloadTooLargeError,
)
from chat_client.application.policies.payload import assert_image_size
from chat_client.application.ports.api import ConversationApi
from chat_client.application.ports.notifier import LoggingNotifier, Notifier
from chat_client.config import settings
from chat_client.domain.entities.contact import Contact
from chat_client.domain.entities.message import Message
from chat_client.domain.value_objects.enums import ChannelEvent
from chat_client.services.observable import Observable
from chat_client.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


class ConversationManager(Observable[ConversationSnapshot]):
    """Owns the contact list, the selection and the active message list.

    Every selection change bumps ``epoch``. Async results (history, send
    responses, push handlers) remember the epoch they started in and are
    dropped if the selection has moved on since.
    """

    def __init__(
        self,
        api: ConversationApi,
        session: SessionManager,
        notifier: Notifier | None = None,
        *,
        max_image_bytes: int | None = None,
    ) -> None:
        super().__init__()
        self._api = api
        self._session = session
        self._notifier = notifier or LoggingNotifier()
        self._max_image_bytes = (
            settings.MAX_IMAGE_BYTES if max_image_bytes is None else max_image_bytes
        )

        self._contacts: tuple[Contact, ...] = ()
        self._selected: Contact | None = None
        self._messages: list[Message] = []
        # Pushes and sends that land while history is loading.
        self._pending: list[Message] = []

        self._epoch = 0
        self._generation = 0
        self._history_request = 0
        self._subscribed = False

        self._is_contacts_loading = False
        self._is_history_loading = False
        self._sending = 0

        self._detach_session = session.subscribe(self._on_session_changed)

    # -- read side --

    @property
    def contacts(self) -> tuple[Contact, ...]:
        return self._contacts

    @property
    def selected(self) -> Contact | None:
        return self._selected

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def is_contacts_loading(self) -> bool:
        return self._is_contacts_loading

    @property
    def is_history_loading(self) -> bool:
        return self._is_history_loading

    @property
    def is_sending(self) -> bool:
        return self._sending > 0

    def online_contacts(self, online_ids: Iterable[str] | None = None) -> tuple[Contact, ...]:
        online = (
            self._session.online_user_ids
            if online_ids is None
            else frozenset(str(i) for i in online_ids)
        )
        return tuple(c for c in self._contacts if c.id in online)

    def snapshot(self) -> ConversationSnapshot:
        return ConversationSnapshot(
            contacts=self._contacts,
            selected=self._selected,
            messages=tuple(self._messages),
            epoch=self._epoch,
            is_contacts_loading=self._is_contacts_loading,
            is_history_loading=self._is_history_loading,
            is_sending=self._sending > 0,
        )

    # -- contacts --

    async def load_contacts(self) -> tuple[Contact, ...]:
        """Replace the contact list. On failure the previous list is kept."""
        generation = self._generation
        self._is_contacts_loading = True
        self._emit()
        try:
            contacts = await self._api.list_contacts()
        except AppError as exc:
            self._notifier.error(exc.detail or "Failed to fetch users")
            return self._contacts
        finally:
            self._is_contacts_loading = False
            self._emit()

        if generation != self._generation:
            logger.debug("Discarding contact list fetched before session reset")
            return self._contacts
        self._contacts = tuple(contacts)
        self._emit()
        return self._contacts

    # -- selection / history --

    def select_conversation(self, contact: Contact | None) -> None:
        """Switch the active conversation. ``None`` deselects.

        The previous message list and push handler are dropped in the same
        step, so readers never see old history against the new contact.
        """
        self.unsubscribe_from_channel_messages()
        self._epoch += 1
        self._selected = contact
        self._messages = []
        self._pending = []
        self._is_history_loading = False
        self._emit()

    async def load_history(self, contact_id: str) -> tuple[Message, ...]:
        selected = self._selected
        if selected is None or selected.id != contact_id:
            logger.debug("load_history(%s) ignored: not the selected contact", contact_id)
            return ()

        epoch = self._epoch
        self._history_request += 1
        request = self._history_request
        self._pending = []
        self._is_history_loading = True
        self._emit()

        try:
            history = await self._api.list_messages(contact_id)
        except AppError as exc:
            self._notifier.error(exc.detail or "Failed to fetch messages")
            if self._is_current(epoch, request):
                self._messages = []
                self._pending = []
                self._is_history_loading = False
                self._emit()
            return ()

        if not self._is_current(epoch, request):
            logger.debug("Discarding stale history for contact=%s", contact_id)
            return tuple(history)

        merged = list(history)
        seen = {m.id for m in merged}
        for message in self._pending:
            if message.id not in seen:
                merged.append(message)
                seen.add(message.id)
        self._messages = merged
        self._pending = []
        self._is_history_loading = False
        self._emit()
        return tuple(merged)

    async def open_conversation(self, contact: Contact) -> tuple[Message, ...]:
        """Select, listen for pushes, then fetch history."""
        self.select_conversation(contact)
        self.subscribe_to_channel_messages()
        return await self.load_history(contact.id)

    def _is_current(self, epoch: int, request: int) -> bool:
        return epoch == self._epoch and request == self._history_request

    # -- sending --

    async def send(self, content: MessageContent) -> Message:
        """Send to the selected contact and append the confirmed message.

        Empty content is not rejected here; the caller guards against it.
        """
        contact = self._selected
        if contact is None:
            self._notifier.error("No user selected")
            raise NoRecipientError("No user selected")
        try:
            for image in content.all_images:
                assert_image_size(image, self._max_image_bytes)
        except PayloadTooLargeError as exc:
            self._notifier.error(exc.detail)
            raise

        epoch = self._epoch
        self._sending += 1
        self._emit()
        try:
            message = await self._api.send_message(contact.id, content)
        except AppError as exc:
            self._notifier.error(exc.detail or "Failed to send message")
            raise
        finally:
            self._sending -= 1
            self._emit()

        if epoch == self._epoch:
            self._append(message)
        else:
            logger.debug("Send to %s confirmed after selection changed", contact.id)
        return message

    # -- push channel --

    def subscribe_to_channel_messages(self) -> None:
        """Attach the single inbound-message handler for the current selection."""
        self.unsubscribe_from_channel_messages()
        contact = self._selected
        if contact is None:
            return
        epoch = self._epoch
        contact_id = contact.id

        def _handler(message: Message) -> None:
            self._on_channel_message(epoch, contact_id, message)

        self._session.channel.on(ChannelEvent.MESSAGE_CREATED, _handler)
        self._subscribed = True

    def unsubscribe_from_channel_messages(self) -> None:
        if not self._subscribed:
            return
        self._session.channel.off(ChannelEvent.MESSAGE_CREATED)
        self._subscribed = False

    def _on_channel_message(self, epoch: int, contact_id: str, message: Message) -> None:
        if epoch != self._epoch:
            logger.debug("Dropping message %s from stale subscription", message.id)
            return
        if not self._is_relevant(contact_id, message):
            return
        self._append(message)

    def _is_relevant(self, contact_id: str, message: Message) -> bool:
        me = self._session.identity
        if me is None:
            return message.involves(contact_id)
        return message.conversation_key == frozenset((me.id, contact_id))

    def _append(self, message: Message) -> None:
        if any(m.id == message.id for m in self._messages) or any(
            m.id == message.id for m in self._pending
        ):
            return
        if self._is_history_loading:
            self._pending.append(message)
            return
        self._messages.append(message)
        self._emit()

    # -- teardown --

    def reset(self) -> None:
        """Drop all conversation state (logout)."""
        self.unsubscribe_from_channel_messages()
        self._epoch += 1
        self._generation += 1
        self._contacts = ()
        self._selected = None
        self._messages = []
        self._pending = []
        self._is_history_loading = False
        self._emit()

    def close(self) -> None:
        self.unsubscribe_from_channel_messages()
        self._detach_session()

    def _on_session_changed(self, snap: SessionSnapshot) -> None:
        if snap.identity is None and (self._contacts or self._selected is not None):
            self.reset()
