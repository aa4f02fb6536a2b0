from fastapi import status
from fastapi.responses import JSONResponse


class ApplicationException(Exception):
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def to_response(self):
        return JSONResponse(
            status_code=self.status_code,
            content={"error": self.message}
        )


class StoreUnavailable(ApplicationException):
    """The key-value store failed or timed out. Nothing is retried here."""

    def __init__(self, message: str = "Store unavailable"):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)


class MalformedRecord(ApplicationException):
    """A persisted record does not have the expected shape."""

    def __init__(self, message: str, raw=None):
        super().__init__(message, 422)
        self.raw = raw
