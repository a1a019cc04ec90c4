"""Application exceptions translated to JSON responses by the app factory."""

from __future__ import annotations


class AuthStudyError(Exception):
    """Base application error."""


class AuthError(AuthStudyError):
    """Bearer token rejected.

    ``kind`` is the machine-readable reason returned to the client as ``error``.
    """

    def __init__(self, kind: str, message: str, status_code: int = 401) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @classmethod
    def unauthorized(cls, message: str = "No authorization token was found") -> AuthError:
        return cls("unauthorized", message, 401)

    @classmethod
    def invalid_request(cls, message: str) -> AuthError:
        return cls("invalid_request", message, 400)

    @classmethod
    def invalid_token(cls, message: str) -> AuthError:
        return cls("invalid_token", message, 401)

    @classmethod
    def insufficient_scope(cls, message: str = "Insufficient scope") -> AuthError:
        return cls("insufficient_scope", message, 403)

    def __repr__(self) -> str:
        return f"<AuthError kind={self.kind!r} status={self.status_code}>"
