from typing import NoReturn

from fastapi import status
from libs.result import Error

# Externally stable status for each client-facing error code; anything else is a server error
CLIENT_ERROR_STATUS = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "UNAUTHENTICATED": status.HTTP_401_UNAUTHORIZED,
    "INSUFFICIENT_ROLE": status.HTTP_403_FORBIDDEN,
    "EVENT_RECORD_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "LOG_DROPPED": status.HTTP_503_SERVICE_UNAVAILABLE,
    "QUERY_TIMEOUT": status.HTTP_504_GATEWAY_TIMEOUT,
}


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


def raise_for_error(error: Error) -> NoReturn:
    """Translate a use case Error into the matching API exception"""
    status_code = CLIENT_ERROR_STATUS.get(error.code)
    if status_code is not None:
        raise ClientError(error, status_code=status_code)
    raise ServerError(error)
