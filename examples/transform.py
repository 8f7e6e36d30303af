from fastapi.responses import Response

from response_error import response_error


@response_error("transform = custom")
class MyErrors(Exception):
    class ToBeTransformed:
        def __str__(self):
            return "to be transformed"

    def transform(self, name, error, status, reason, type_, details):
        return Response(status_code=500, headers={"x-error": name})
