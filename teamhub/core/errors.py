from __future__ import annotations


class TeamHubError(Exception):
    """Base error carrying a stable ``code`` for API clients."""

    status_code: int = 400

    def __init__(self, code: str, message: str | None = None, *, field: str | None = None) -> None:
        self.code = code
        self.message = message or code
        self.field = field
        super().__init__(self.message)

    def to_detail(self) -> dict:
        detail = {"code": self.code, "message": self.message}
        if self.field is not None:
            detail["field"] = self.field
        return detail


class ValidationError(TeamHubError):
    """Bad input or an invalid state transition. Nothing was written."""

    status_code = 422


class AuthorizationError(TeamHubError):
    """The actor's role or rank does not allow the requested mutation."""

    status_code = 403


class NotFoundError(TeamHubError, LookupError):
    status_code = 404


class CollaboratorError(TeamHubError):
    """Storage or identity backend failure. Never retried here."""

    status_code = 502
