from fastapi import status

from response_error import response, response_error


@response_error
class ApiError(Exception):
    @response('status = 404, reason = "NOT_FOUND"')
    class NotFound:
        pass

    @response("status = status.HTTP_409_CONFLICT, reason = 'CONFLICT', type = 'state'")
    class Conflict:
        pass

    @response('status = 422, details = "{0.field}"')
    class Invalid:
        pass

    @response("internal")
    class Database:
        pass

    class Other:
        pass
