"""
Error taxonomy for response_error.

Error code ranges:
- E001-E099: Annotation grammar errors
- E100-E199: Structural (sum-type shape / capability) errors
- E200-E299: Transform policy errors

Copyright (c) 2025 Graziano Labs Corp.
"""


class ResponseErrorError(Exception):
    """Base class for all response_error errors."""

    def __init__(
        self,
        code: str,
        message: str,
        loc: tuple[int, int] | None = None,
        hint: str | None = None
    ):
        """
        Initialize error.

        Args:
            code: Error code (e.g., "E001")
            message: Human-readable error message
            loc: Optional (line, column) location inside the annotation
            hint: Optional suggestion for fixing the error
        """
        self.code = code
        self.message = message
        self.loc = loc
        self.hint = hint
        super().__init__(f"[{code}] {message}")


class GenerationError(ResponseErrorError):
    """Failures raised while deriving a sum-type (E001-E199)."""
    pass


class GrammarError(GenerationError):
    """Annotation grammar errors (E001-E099)."""
    pass


class DetailsFieldError(GrammarError):
    """`details` value does not reference the positional payload (E013)."""
    pass


class StructuralError(GenerationError):
    """Sum-type shape and capability errors (E100-E199)."""
    pass


class PolicyError(ResponseErrorError):
    """Transform policy errors (E200-E299)."""
    pass


# Specific error codes documentation:
#
# E001: Malformed annotation (unexpected character / token)
# E002: Unknown #[response] option
# E003: Key option without `=`
# E004: Flag option given a value
# E010: Invalid status code literal
# E011: Invalid `reason` value
# E012: Invalid `type` value
# E013: `details` field not found
# E014: Unknown `transform` target
# E015: `transform = custom` without a transform method
# E020: Duplicate option (strict mode only)
# E100: Target is not an exception sum-type
# E101: Forward target lacks the classification capability
# E102: Exception handler requested for a non-derived type
# E200: Object is not a transform policy
