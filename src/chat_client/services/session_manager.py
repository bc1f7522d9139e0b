"""Session/presence state: authenticated identity, push channel lifecycle, online users."""
from __future__ import annotations

import dataclasses
import logging
from typing import Iterable

from chat_client.application.dto.credentials import (
    Credentials,
    LoginCredentials,
    SignupCredentials,
)
from chat_client.application.dto.snapshots import SessionSnapshot
from chat_client.application.exceptions import AppError, AuthError, PayloadTooLargeError
from chat_client.application.policies.payload import assert_image_size
from chat_client.application.ports.api import AuthService, ProfileService
from chat_client.application.ports.channel import PushChannel
from chat_client.application.ports.notifier import LoggingNotifier, Notifier
from chat_client.config import settings
from chat_client.domain.entities.identity import Identity
from chat_client.domain.value_objects.enums import ChannelEvent
from chat_client.services.observable import Observable

logger = logging.getLogger(__name__)


class SessionManager(Observable[SessionSnapshot]):
    """Owns the identity, the push channel connection and the presence set.

    State is private; callers read properties or ``snapshot()`` and mutate
    only through the methods below.
    """

    def __init__(
        self,
        auth: AuthService,
        profiles: ProfileService,
        channel: PushChannel,
        notifier: Notifier | None = None,
        *,
        max_image_bytes: int | None = None,
    ) -> None:
        super().__init__()
        self._auth = auth
        self._profiles = profiles
        self._channel = channel
        self._notifier = notifier or LoggingNotifier()
        self._max_image_bytes = (
            settings.MAX_IMAGE_BYTES if max_image_bytes is None else max_image_bytes
        )

        self._identity: Identity | None = None
        self._online: frozenset[str] = frozenset()
        self._connecting = False
        # A connect that outlives a disconnect or its session closes itself
        # once the handshake finishes.
        self._channel_generation = 0
        self._session_generation = 0

        self._is_checking_auth = True
        self._is_logging_in = False
        self._is_signing_up = False
        self._is_updating_profile = False

    # -- read side --

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def online_user_ids(self) -> frozenset[str]:
        return self._online

    @property
    def channel(self) -> PushChannel:
        return self._channel

    @property
    def is_checking_auth(self) -> bool:
        return self._is_checking_auth

    @property
    def is_logging_in(self) -> bool:
        return self._is_logging_in

    @property
    def is_signing_up(self) -> bool:
        return self._is_signing_up

    @property
    def is_updating_profile(self) -> bool:
        return self._is_updating_profile

    def is_online(self, user_id: str) -> bool:
        return str(user_id) in self._online

    def online_count(self, *, exclude_self: bool = True) -> int:
        if exclude_self and self._identity is not None:
            return len(self._online - {self._identity.id})
        return len(self._online)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            identity=self._identity,
            online_user_ids=self._online,
            channel_connected=self._channel.connected,
            is_checking_auth=self._is_checking_auth,
            is_logging_in=self._is_logging_in,
            is_signing_up=self._is_signing_up,
            is_updating_profile=self._is_updating_profile,
        )

    # -- session lifecycle --

    async def establish_session(self, credentials: Credentials) -> Identity:
        """Log in or sign up, store the identity and connect the push channel.

        Raises AuthError when the server rejects the credentials and
        NetworkError on transport failures; both are also reported through
        the notifier.
        """
        if isinstance(credentials, SignupCredentials):
            self._is_signing_up = True
            pending = self._auth.signup(credentials)
            fallback, done = "Signup failed", "Account created successfully"
        else:
            self._is_logging_in = True
            pending = self._auth.login(credentials)
            fallback, done = "Login failed", "Logged in successfully"
        self._emit()

        try:
            identity = await pending
        except AppError as exc:
            self._notifier.error(exc.detail or fallback)
            raise
        finally:
            self._is_signing_up = False
            self._is_logging_in = False
            self._emit()

        self._identity = identity
        self._session_generation += 1
        self._notifier.success(done)
        self._emit()
        await self.connect_channel()
        return identity

    async def login(self, email: str, password: str) -> Identity:
        return await self.establish_session(LoginCredentials(email=email, password=password))

    async def signup(self, full_name: str, email: str, password: str) -> Identity:
        return await self.establish_session(
            SignupCredentials(full_name=full_name, email=email, password=password)
        )

    async def end_session(self) -> None:
        """Log out, drop the channel and presence. Safe to call repeatedly."""
        if self._identity is not None:
            try:
                await self._auth.logout()
            except AppError as exc:
                self._notifier.error(exc.detail or "Logout failed")
                raise
            self._identity = None
            self._notifier.success("Logged out successfully")
        await self._drop_session()

    async def verify_session(self) -> Identity | None:
        """Restore a session from an existing server-side credential, silently.

        A failed check also tears down any local session left over.
        """
        self._is_checking_auth = True
        self._emit()
        try:
            identity = await self._auth.check()
        except AppError as exc:
            logger.debug("Session check failed: %s", exc.detail)
            identity = None
        finally:
            self._is_checking_auth = False
            self._emit()

        if identity is None:
            await self._drop_session()
            return None
        self._identity = identity
        self._session_generation += 1
        self._emit()
        await self.connect_channel()
        return identity

    async def update_profile(self, avatar: str) -> Identity:
        identity = self._identity
        if identity is None:
            self._notifier.error("Not logged in")
            raise AuthError("Not logged in")
        try:
            assert_image_size(avatar, self._max_image_bytes)
        except PayloadTooLargeError as exc:
            self._notifier.error(exc.detail)
            raise

        self._is_updating_profile = True
        self._emit()
        try:
            updated = await self._profiles.update_profile(avatar)
        except AppError as exc:
            self._notifier.error(exc.detail or "Failed to update profile")
            raise
        finally:
            self._is_updating_profile = False
            self._emit()

        # Session may have ended or changed while the upload was in flight.
        if self._identity is None or self._identity.id != identity.id:
            return updated
        self._identity = dataclasses.replace(self._identity, avatar=updated.avatar)
        self._notifier.success("Profile updated successfully")
        self._emit()
        return self._identity

    # -- push channel --

    async def connect_channel(self) -> None:
        identity = self._identity
        if identity is None or self._connecting or self._channel.connected:
            return
        self._channel.on(ChannelEvent.PRESENCE_CHANGED, self._on_presence)
        self._connecting = True
        generation = self._channel_generation
        session_generation = self._session_generation
        try:
            await self._channel.connect(identity)
        except Exception:
            # The transport reconnects on its own; nothing to surface here.
            logger.warning("Push channel connect failed for user=%s", identity.id, exc_info=True)
        finally:
            self._connecting = False

        current = self._identity
        stale = (
            generation != self._channel_generation
            or current is None
            or current.id != identity.id
        )
        if stale:
            logger.info("Dropping push channel opened for stale user=%s", identity.id)
            if self._channel.connected:
                await self._channel.disconnect()
            if current is not None and session_generation != self._session_generation:
                # A newer session skipped its own connect while this one ran.
                await self.connect_channel()
                return
        self._emit()

    async def disconnect_channel(self) -> None:
        self._channel_generation += 1
        if not self._channel.connected:
            return
        await self._channel.disconnect()
        self._emit()

    async def _drop_session(self) -> None:
        self._identity = None
        await self.disconnect_channel()
        self._online = frozenset()
        self._emit()

    def _on_presence(self, user_ids: Iterable[str]) -> None:
        if self._identity is None:
            return
        self._online = frozenset(str(u) for u in user_ids)
        logger.debug("Presence replaced: %d online", len(self._online))
        self._emit()
