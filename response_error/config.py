"""
response_error Configuration Module

Centralized configuration for code generation and the default transform policy.
Loads settings from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ResponseErrorConfig:
    """Configuration for sum-type derivation and response conversion."""

    default_status: int = 500
    """Status used when neither explicit metadata nor a forward supplies one.

    Read by the built-in policies' default_status().
    """

    strict_duplicates: bool = False
    """Reject duplicated options on one variant (E020).

    Default: False, the last occurrence wins and a warning is logged.
    """

    dump_source: bool = False
    """Log the generated dispatch source at DEBUG level after each derive."""

    expose_internal_messages: bool = False
    """Include str(error) of `internal` variants in JSONTransform bodies."""

    @classmethod
    def from_env(cls) -> "ResponseErrorConfig":
        """Load configuration from environment variables.

        Environment variables:
          RESPONSE_ERROR_DEFAULT_STATUS - Fallback status code (100-999)
          RESPONSE_ERROR_STRICT_DUPLICATES - Reject duplicate options (1/0)
          RESPONSE_ERROR_DUMP_SOURCE - Log generated source (1/0)
          RESPONSE_ERROR_EXPOSE_INTERNAL - Show internal messages (1/0)

        Returns:
            ResponseErrorConfig instance with values from environment
        """
        return cls(
            default_status=int(os.getenv("RESPONSE_ERROR_DEFAULT_STATUS", "500")),
            strict_duplicates=os.getenv("RESPONSE_ERROR_STRICT_DUPLICATES", "0") == "1",
            dump_source=os.getenv("RESPONSE_ERROR_DUMP_SOURCE", "0") == "1",
            expose_internal_messages=os.getenv("RESPONSE_ERROR_EXPOSE_INTERNAL", "0") == "1",
        )

    def validate(self) -> None:
        """Validate configuration settings.

        Raises:
            ValueError: If configuration is invalid
        """
        if not (100 <= self.default_status <= 999):
            raise ValueError(
                f"default_status must be 100-999, got {self.default_status}"
            )

    def get_summary(self) -> str:
        lines = [
            "response_error Configuration Summary",
            "=" * 50,
            f"  Default status: {self.default_status}",
            f"  Duplicate options: {'Rejected' if self.strict_duplicates else 'Last wins'}",
            f"  Dump generated source: {self.dump_source}",
            f"  Expose internal messages: {self.expose_internal_messages}",
        ]
        return "\n".join(lines)


# Default configuration instance (lazy-loaded from environment)
_default_config: Optional[ResponseErrorConfig] = None


def get_default_config() -> ResponseErrorConfig:
    """Get default configuration instance (singleton pattern).

    Returns:
        Default ResponseErrorConfig loaded from environment
    """
    global _default_config
    if _default_config is None:
        _default_config = ResponseErrorConfig.from_env()
        _default_config.validate()
    return _default_config
