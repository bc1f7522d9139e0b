from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LoginCredentials:
    email: str
    password: str


@dataclass(frozen=True, slots=True)
class SignupCredentials:
    full_name: str
    email: str
    password: str


Credentials = LoginCredentials | SignupCredentials
