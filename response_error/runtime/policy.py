"""
Transform policies turning a classified error into a response.

Copyright (c) 2025 Graziano Labs Corp.
"""

from typing import Any, Optional

from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from ..config import get_default_config
from .resolution import is_internal


class TransformPolicy:
    """
    Base policy. Both methods have working defaults, so a subclass only
    overrides what it needs.

    Example:
        class Envelope(TransformPolicy):
            def transform(self, name, error, status, reason=None, type_=None, details=None):
                return JSONResponse({"code": reason}, status_code=status)

        set_global_transform(Envelope())
    """

    def transform(
        self,
        name: str,
        error: BaseException,
        status: int,
        reason: Any = None,
        type_: Optional[str] = None,
        details: Any = None,
    ) -> Response:
        return Response(status_code=int(status))

    def default_status(self) -> int:
        return get_default_config().default_status


class ReflexiveTransform(TransformPolicy):
    """Built-in policy: an empty response carrying only the status code."""
    pass


class ErrorBody(BaseModel):
    error: str
    message: Optional[str] = None
    reason: Any = None
    type: Any = None
    details: Any = None


class JSONTransform(TransformPolicy):
    """Render the classification as a JSON error body."""

    def __init__(
        self,
        default_status: Optional[int] = None,
        expose_internal_messages: Optional[bool] = None
    ):
        self._default_status = default_status
        self._expose_internal = expose_internal_messages

    def default_status(self) -> int:
        if self._default_status is not None:
            return self._default_status
        return super().default_status()

    def transform(self, name, error, status, reason=None, type_=None, details=None) -> Response:
        expose = self._expose_internal
        if expose is None:
            expose = get_default_config().expose_internal_messages

        message = str(error) if expose or not is_internal(error) else None
        body = ErrorBody(
            error=name,
            message=message or None,
            reason=reason,
            type=type_,
            details=details,
        )
        return JSONResponse(
            status_code=int(status),
            content=body.model_dump(exclude_none=True)
        )
