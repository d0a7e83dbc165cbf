# shop_service/errors.py
from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Missing or malformed input, including ids that are not valid UUIDs."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Conflict(HTTPException):
    # duplicates are reported as 400, same as the other input errors
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class InvalidReference(NotFound):
    """A foreign id embedded in a write does not resolve to a stored record."""


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "User is not Authenticated"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )
