"""Exceptions raised by the cake shop services and mapped to HTTP responses by the routes."""


class CakeshopError(Exception):
    status_code = 500
    message = "An unexpected error occurred."

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidRequest(CakeshopError, ValueError):
    status_code = 400
    message = "Invalid request."


class NotFoundError(CakeshopError, LookupError):
    status_code = 404
    message = "Not found"


class CancellationWindowExpired(InvalidRequest):
    message = "Cancellation window expired"


class OrderNumberUnavailable(CakeshopError):
    """The daily counter could not be advanced; nothing was committed, retrying is safe."""

    status_code = 503
    message = "Could not generate order number"
