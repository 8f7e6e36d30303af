"""
response_error - declarative HTTP responses for exception sum-types.

Annotate the variants of an exception sum-type with a small option grammar
(`status`, `reason`, `type`, `details`, `forward`, `internal`) and derive
classification plus response conversion:

    from response_error import response, response_error

    @response_error
    class ApiError(Exception):
        @response('status = 404, reason = "NOT_FOUND"')
        class NotFound:
            pass

    ApiError.NotFound("user 7").status_code()     # 404
    ApiError.NotFound("user 7").error_response()  # via the global transform

Copyright (c) 2025 Graziano Labs Corp.
"""

from .errors import (
    DetailsFieldError,
    GenerationError,
    GrammarError,
    PolicyError,
    ResponseErrorError,
    StructuralError,
)
from .runtime import (
    REGISTRY,
    Classification,
    ErrorBody,
    JSONTransform,
    Present,
    ReflexiveTransform,
    TransformPolicy,
    TransformRegistry,
    classify,
    current_transform,
    default_status,
    derive,
    resolve_field,
    response,
    response_error,
    set_global_transform,
)
from .runtime.api import install_exception_handlers

__all__ = [
    "DetailsFieldError",
    "GenerationError",
    "GrammarError",
    "PolicyError",
    "ResponseErrorError",
    "StructuralError",
    "REGISTRY",
    "Classification",
    "ErrorBody",
    "JSONTransform",
    "Present",
    "ReflexiveTransform",
    "TransformPolicy",
    "TransformRegistry",
    "classify",
    "current_transform",
    "default_status",
    "derive",
    "resolve_field",
    "response",
    "response_error",
    "set_global_transform",
    "install_exception_handlers",
]
