"""
Resolution order for classified errors.

Each field (status, reason, type, details) resolves as:
  1. explicit metadata of the error's own variant
  2. the forwarded payload, followed through any number of `forward` variants
  3. the active policy's default (status only; the rest stay absent)

Copyright (c) 2025 Graziano Labs Corp.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..errors import StructuralError
from ..parser.ir import is_classifiable

logger = logging.getLogger(__name__)

FIELDS = ("status", "reason", "type", "details")

_MISSING = object()


@dataclass(frozen=True)
class Present:
    """A field explicitly supplied by some layer."""
    value: Any


def value_of(found: Optional[Present]) -> Any:
    return found.value if found is not None else None


def payload_field(error, path: Tuple[str, ...]) -> Optional[Present]:
    """
    Follow `path` from the positional payload of error.

    A missing payload or attribute leaves the field absent, so the response
    is still built without details.
    """
    if not error.args:
        return None
    value = error.args[0]
    for name in path:
        value = getattr(value, name, _MISSING)
        if value is _MISSING:
            logger.warning(
                f"{type(error).__qualname__}: details field `{name}` missing on "
                f"payload {type(error.args[0]).__qualname__}"
            )
            return None
    return Present(value)


def forward_target(error) -> Optional[BaseException]:
    """Payload that `error` delegates to, or None if it does not forward."""
    inner = error.response_forward()
    if inner is not None and not is_classifiable(inner):
        raise StructuralError(
            code="E101",
            message=(
                f"{type(error).__qualname__} is marked `forward` but its payload "
                f"{type(inner).__qualname__} is not a response error"
            ),
            hint="Decorate the payload type with @response_error"
        )
    return inner


def _walk(error, name: str) -> Tuple[Optional[Present], str]:
    seen = set()
    current, layer = error, "explicit"
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        found = getattr(current, f"response_{name}")()
        if found is not None:
            return found, layer
        current, layer = forward_target(current), "forward"
    return None, "absent"


def resolve_field(error, name: str) -> Optional[Present]:
    """Explicit metadata, then the forward chain. Never applies a default."""
    return _walk(error, name)[0]


def is_internal(error) -> bool:
    """True if the error's own variant carries the `internal` flag."""
    if not is_classifiable(error):
        return False
    return getattr(error, "__variant__", None) in type(error).__response_table__.internals


@dataclass(frozen=True)
class Classification:
    status: int
    reason: Any = None
    type: Any = None
    details: Any = None
    # field -> "explicit" | "forward" | "default" | "absent"
    sources: Dict[str, str] = field(default_factory=dict)


def classify(error, policy=None) -> Classification:
    """
    Resolve every field of a classified error without building a response.

    Args:
        error: Instance of a derived sum-type
        policy: Policy supplying the default status; the active one if omitted

    Returns:
        Classification with resolved values and the layer each came from
    """
    if policy is None:
        from .registry import REGISTRY
        policy = REGISTRY.current()

    values, sources = {}, {}
    for name in FIELDS:
        found, layer = _walk(error, name)
        values[name], sources[name] = value_of(found), layer

    if sources["status"] == "absent":
        values["status"], sources["status"] = policy.default_status(), "default"

    return Classification(sources=sources, **values)
