from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class AuthError(AppError):
    """Credentials rejected or session not established."""


class NetworkError(AppError):
    """Transport or service failure on a REST call."""


class NoRecipientError(AppError):
    pass


class PayloadTooLargeError(AppError):
    pass
