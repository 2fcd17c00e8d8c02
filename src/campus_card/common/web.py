from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Type, TypeVar

from flask import Flask, jsonify, request, session

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BackendUnavailableError,
    DirectoryError,
    DomainError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from ..identity.model import SessionContext

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

# Most specific first.
_STATUS_BY_ERROR = (
    (BackendUnavailableError, 503),
    (DirectoryError, 502),
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InvalidTransitionError, 409),
)


def status_for(exc: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def session_context() -> SessionContext:
    return SessionContext.from_session(session)


def parse_enum(enum_cls: Type[E], value: Optional[str], field_name: str) -> Optional[E]:
    if value is None or value == "":
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value}")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        return jsonify({"error": type(exc).__name__, "message": str(exc)}), status_for(exc)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        # Let Flask render its own HTTP errors (404 routes, 405, ...)
        code = getattr(exc, "code", None)
        if isinstance(code, int):
            return jsonify({"error": type(exc).__name__, "message": str(exc)}), code

        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if app.config.get("DEBUG"):
            return jsonify({"error": "InternalError", "message": str(exc)}), 500
        return jsonify({"error": "InternalError", "message": "Internal server error"}), 500
