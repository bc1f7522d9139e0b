"""httpx-backed implementation of the REST ports."""
from __future__ import annotations

import base64
import logging
from typing import Any

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from chat_client.application.dto.credentials import LoginCredentials, SignupCredentials
from chat_client.application.dto.message import MessageContent
from chat_client.application.exceptions import AuthError, NetworkError
from chat_client.config import Settings
from chat_client.domain.entities.contact import Contact
from chat_client.domain.entities.identity import Identity
from chat_client.domain.entities.message import Message
from chat_client.infrastructure.http.hooks import add_request_id, log_response
from chat_client.infrastructure.http.mappers import (
    contact_from_payload,
    identity_from_payload,
    message_from_payload,
)
from chat_client.infrastructure.http.schemas import (
    LoginRequest,
    MessagePayload,
    SendMessageRequest,
    SignupRequest,
    UpdateProfileRequest,
    UserPayload,
)

logger = logging.getLogger(__name__)

_users_adapter = TypeAdapter(list[UserPayload])
_messages_adapter = TypeAdapter(list[MessagePayload])


def build_http_client(settings: Settings, **kwargs: Any) -> httpx.AsyncClient:
    """AsyncClient with a cookie jar, so the server-side session survives between calls."""
    return httpx.AsyncClient(
        base_url=settings.API_BASE_URL,
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        event_hooks={"request": [add_request_id], "response": [log_response]},
        **kwargs,
    )


def error_detail(response: httpx.Response, fallback: str) -> str:
    """Server-provided message if the body carries one, else the fallback."""
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback


def _encode_image(image: str | bytes) -> str:
    if isinstance(image, (bytes, bytearray)):
        return "data:application/octet-stream;base64," + base64.b64encode(image).decode("ascii")
    return image


class HttpChatApi:
    """Every REST port in application.ports.api, over the backend's routes."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def _request(
        self,
        method: str,
        url: str,
        *,
        fallback: str,
        body: BaseModel | None = None,
        auth: bool = False,
    ) -> Any:
        json = body.model_dump(exclude_none=True) if body is not None else None
        try:
            response = await self._client.request(method, url, json=json)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = error_detail(exc.response, fallback)
            if auth and exc.response.status_code < 500:
                raise AuthError(detail) from exc
            raise NetworkError(detail) from exc
        except httpx.RequestError as exc:
            logger.debug("%s %s failed: %s", method, url, exc)
            raise NetworkError(fallback) from exc
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(fallback) from exc

    @staticmethod
    def _parse(adapter_or_model: Any, data: Any, fallback: str) -> Any:
        try:
            if isinstance(adapter_or_model, TypeAdapter):
                return adapter_or_model.validate_python(data)
            return adapter_or_model.model_validate(data)
        except PydanticValidationError as exc:
            logger.warning("Unexpected response payload: %s", exc)
            raise NetworkError(fallback) from exc

    # -- auth --

    async def login(self, credentials: LoginCredentials) -> Identity:
        fallback = "Login failed"
        data = await self._request(
            "POST",
            "/auth/login",
            body=LoginRequest(email=credentials.email, password=credentials.password),
            fallback=fallback,
            auth=True,
        )
        return identity_from_payload(self._parse(UserPayload, data, fallback))

    async def signup(self, credentials: SignupCredentials) -> Identity:
        fallback = "Signup failed"
        data = await self._request(
            "POST",
            "/auth/signup",
            body=SignupRequest(
                fullName=credentials.full_name,
                email=credentials.email,
                password=credentials.password,
            ),
            fallback=fallback,
            auth=True,
        )
        return identity_from_payload(self._parse(UserPayload, data, fallback))

    async def logout(self) -> None:
        await self._request("POST", "/auth/logout", fallback="Logout failed")

    async def check(self) -> Identity:
        fallback = "Not authenticated"
        data = await self._request("GET", "/auth/check", fallback=fallback, auth=True)
        return identity_from_payload(self._parse(UserPayload, data, fallback))

    async def update_profile(self, avatar: str) -> Identity:
        fallback = "Failed to update profile"
        data = await self._request(
            "PUT",
            "/auth/update-profile",
            body=UpdateProfileRequest(profilePic=avatar),
            fallback=fallback,
        )
        return identity_from_payload(self._parse(UserPayload, data, fallback))

    # -- directory / history / send --

    async def list_contacts(self) -> list[Contact]:
        fallback = "Failed to fetch users"
        data = await self._request("GET", "/messages/users", fallback=fallback)
        return [contact_from_payload(p) for p in self._parse(_users_adapter, data or [], fallback)]

    async def list_messages(self, contact_id: str) -> list[Message]:
        fallback = "Failed to fetch messages"
        data = await self._request("GET", f"/messages/{contact_id}", fallback=fallback)
        return [message_from_payload(p) for p in self._parse(_messages_adapter, data or [], fallback)]

    async def send_message(self, recipient_id: str, content: MessageContent) -> Message:
        fallback = "Failed to send message"
        body = SendMessageRequest(
            text=content.text,
            image=_encode_image(content.image) if content.image else None,
            images=[_encode_image(i) for i in content.images] or None,
        )
        data = await self._request(
            "POST", f"/messages/send/{recipient_id}", body=body, fallback=fallback,
        )
        return message_from_payload(self._parse(MessagePayload, data, fallback))
