import enum
import json
import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse


logger = logging.getLogger("ccbff.errors")


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream_error"
    AUTH = "auth_error"
    CONFIG = "config_error"


_DEFAULT_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UPSTREAM: 500,
    ErrorKind.AUTH: 401,
    ErrorKind.CONFIG: 500,
}


class BFFError(Exception):
    """Single error shape raised by every layer of the BFF.

    `context` carries structured details (account id, logical service,
    upstream status/body) for logs. Only `message` and `kind` reach callers.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code or _DEFAULT_STATUS[kind]
        self.context = dict(context or {})

    @classmethod
    def not_found(cls, message: str, **context: Any) -> "BFFError":
        return cls(ErrorKind.NOT_FOUND, message, context=context)

    @classmethod
    def upstream(cls, message: str, **context: Any) -> "BFFError":
        return cls(ErrorKind.UPSTREAM, message, context=context)

    @classmethod
    def auth(cls, message: str, *, forbidden: bool = False, **context: Any) -> "BFFError":
        return cls(ErrorKind.AUTH, message, status_code=403 if forbidden else 401, context=context)

    @classmethod
    def config(cls, message: str, **context: Any) -> "BFFError":
        return cls(ErrorKind.CONFIG, message, context=context)

    def __repr__(self) -> str:
        return f"BFFError({self.kind.value!r}, {self.message!r}, status_code={self.status_code})"


async def bff_error_handler(request: Request, exc: BFFError) -> JSONResponse:
    if exc.kind in (ErrorKind.UPSTREAM, ErrorKind.CONFIG):
        log = {
            "request_id": getattr(request.state, "request_id", None),
            "path": request.url.path,
            "kind": exc.kind.value,
            "message": exc.message,
            **exc.context,
        }
        logger.error(json.dumps(log, default=str))
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind.value},
    )
