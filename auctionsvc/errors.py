"""Error types shared by the domain layer and the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus


class InternalError(Exception):
    """An application error carrying a machine-readable kind in ``err``."""

    err = "internal_server_error"

    def __init__(self, message: str, err: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if err is not None:
            self.err = err

    def __str__(self) -> str:
        return self.message


class NotFoundError(InternalError):
    """The requested resource does not exist."""

    err = "not_found"


class InternalServerError(InternalError):
    """An unexpected failure inside the service."""

    err = "internal_server_error"


class BadRequestError(InternalError):
    """The input given to the service is not acceptable."""

    err = "bad_request"


@dataclass(frozen=True)
class Cause:
    """One field-level reason attached to a REST error."""

    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class RestError(Exception):
    """An error shaped for an HTTP JSON response."""

    def __init__(
        self,
        message: str,
        err: str,
        code: int,
        causes: list[Cause] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.err = err
        self.code = code
        self.causes = causes

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        causes = None if self.causes is None else [c.to_dict() for c in self.causes]
        return {
            "message": self.message,
            "err": self.err,
            "code": self.code,
            "causes": causes,
        }


def rest_bad_request(message: str, *args: Cause) -> RestError:
    """Build a 400 error, optionally with field causes."""
    return RestError(message, "bad_request", HTTPStatus.BAD_REQUEST, list(args) or None)


def rest_not_found(message: str) -> RestError:
    """Build a 404 error."""
    return RestError(message, "not_found", HTTPStatus.NOT_FOUND)


def rest_internal_server(message: str) -> RestError:
    """Build a 500 error."""
    return RestError(message, "internal_server", HTTPStatus.INTERNAL_SERVER_ERROR)


def convert_error(error: InternalError) -> RestError:
    """Map an application error onto the matching REST error."""
    match error.err:
        case "bad_request":
            return rest_bad_request(str(error))
        case "not_found":
            return rest_not_found(str(error))
        case _:
            return rest_internal_server(str(error))