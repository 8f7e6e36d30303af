from response_error import response, response_error


@response_error
class Inner(Exception):
    @response("status = 404")
    class NotFound:
        def __str__(self):
            return "inner error"


@response_error
class Outer(Exception):
    @response("forward")
    class Wrapped:
        inner: Inner
