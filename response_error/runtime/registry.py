"""
Process-wide registry of the active transform policy.

Readers never lock: `current()` is a single attribute load and always sees
either the old or the new policy. Writers serialize on a lock and publish the
new policy with one reference assignment. Responses already being built keep
the policy they captured.

Copyright (c) 2025 Graziano Labs Corp.
"""

import logging
import threading
from typing import Optional

from ..errors import PolicyError
from .policy import ReflexiveTransform, TransformPolicy

logger = logging.getLogger(__name__)


class TransformRegistry:
    """Holds exactly one active TransformPolicy."""

    def __init__(self, policy: Optional[TransformPolicy] = None):
        self._lock = threading.Lock()
        self._policy = policy if policy is not None else ReflexiveTransform()

    def current(self) -> TransformPolicy:
        return self._policy

    def set_active(self, policy: TransformPolicy) -> TransformPolicy:
        """
        Replace the active policy for all subsequent conversions.

        Args:
            policy: Object with callable transform() and default_status()

        Returns:
            The previously active policy

        Raises:
            PolicyError: If policy does not implement the policy interface
        """
        for attr in ("transform", "default_status"):
            if not callable(getattr(policy, attr, None)):
                raise PolicyError(
                    code="E200",
                    message=f"{type(policy).__name__} is not a transform policy: missing {attr}()",
                    hint="Subclass response_error.TransformPolicy"
                )

        with self._lock:
            previous, self._policy = self._policy, policy

        logger.info(f"Active transform policy: {type(policy).__name__} (was {type(previous).__name__})")
        return previous

    def default_status(self) -> int:
        return self._policy.default_status()


# Global registry
REGISTRY = TransformRegistry()


def set_global_transform(policy: TransformPolicy) -> TransformPolicy:
    """Set the global transform for errors into responses."""
    return REGISTRY.set_active(policy)


def current_transform() -> TransformPolicy:
    return REGISTRY.current()


def default_status() -> int:
    return REGISTRY.default_status()
