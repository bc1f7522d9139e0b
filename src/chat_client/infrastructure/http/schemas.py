"""Wire models for the REST backend."""
from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class UserPayload(_WireModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    full_name: str | None = Field(default=None, validation_alias=AliasChoices("fullName", "full_name"))
    email: str | None = None
    profile_pic: str | None = Field(default=None, validation_alias=AliasChoices("profilePic", "profile_pic"))


class MessagePayload(_WireModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"))
    sender_id: str = Field(validation_alias=AliasChoices("senderId", "sender_id"))
    receiver_id: str = Field(validation_alias=AliasChoices("receiverId", "receiver_id"))
    text: str | None = None
    image: str | None = None
    images: list[str] | None = None
    created_at: datetime | None = Field(default=None, validation_alias=AliasChoices("createdAt", "created_at"))


class LoginRequest(BaseModel):
    email: str
    password: str


class SignupRequest(BaseModel):
    fullName: str
    email: str
    password: str


class SendMessageRequest(BaseModel):
    text: str | None = None
    image: str | None = None
    images: list[str] | None = None


class UpdateProfileRequest(BaseModel):
    profilePic: str
