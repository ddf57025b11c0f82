from typing import Any, Optional


class MatterDeskError(Exception):
    """Base class for every error raised by the client."""


class ValidationError(MatterDeskError):
    """A form value was rejected before any request was sent."""


class StorageError(MatterDeskError):
    """The token store could not be read or written."""


class ApiError(MatterDeskError):
    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def __str__(self):
        if self.status_code:
            return f"{self.status_code}: {self.message}"
        return self.message


class UnauthorizedError(ApiError):
    """401 from the API; the stored session has already been cleared."""


class ServerError(ApiError):
    pass


class RequestTimeoutError(ApiError):
    pass
