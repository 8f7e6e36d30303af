"""Run with: uvicorn examples.app:app"""

from dataclasses import dataclass

from fastapi import FastAPI

from response_error import JSONTransform, install_exception_handlers, response, response_error, set_global_transform


@dataclass
class Violation:
    field: str
    problem: str


@response_error
class UserError(Exception):
    @response('status = 404, reason = "USER_NOT_FOUND"')
    class NotFound:
        pass

    @response('status = 422, reason = "INVALID", details = "{0}"')
    class Invalid:
        pass


set_global_transform(JSONTransform())
app = install_exception_handlers(FastAPI(), UserError)


@app.get("/users/{user_id}")
async def get_user(user_id: int):
    if user_id < 0:
        raise UserError.Invalid(Violation(field="user_id", problem="negative"))
    raise UserError.NotFound(f"user {user_id}")
