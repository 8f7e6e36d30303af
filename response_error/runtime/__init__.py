from .derive import derive, response, response_error
from .policy import ErrorBody, JSONTransform, ReflexiveTransform, TransformPolicy
from .registry import (
    REGISTRY,
    TransformRegistry,
    current_transform,
    default_status,
    set_global_transform,
)
from .resolution import Classification, Present, classify, resolve_field

__all__ = [
    "derive",
    "response",
    "response_error",
    "ErrorBody",
    "JSONTransform",
    "ReflexiveTransform",
    "TransformPolicy",
    "REGISTRY",
    "TransformRegistry",
    "current_transform",
    "default_status",
    "set_global_transform",
    "Classification",
    "Present",
    "classify",
    "resolve_field",
]
