"""
FastAPI integration for derived sum-types.

    app = FastAPI()
    install_exception_handlers(app, ApiError, StorageError)

Copyright (c) 2025 Graziano Labs Corp.
"""

from fastapi import FastAPI, Request
from fastapi.responses import Response

from ..errors import StructuralError
from ..parser.ir import is_classifiable


async def handle_response_error(request: Request, exc: Exception) -> Response:
    """Exception handler delegating to the generated error_response()."""
    return exc.error_response()


def install_exception_handlers(app: FastAPI, *error_types: type) -> FastAPI:
    """
    Register handle_response_error for each derived sum-type.

    Raises:
        StructuralError: If a type was not derived with @response_error (E102)
    """
    for error_type in error_types:
        if not (isinstance(error_type, type) and is_classifiable(error_type)):
            raise StructuralError(
                code="E102",
                message=f"{error_type!r} is not a @response_error sum-type",
            )
        app.add_exception_handler(error_type, handle_response_error)
    return app
