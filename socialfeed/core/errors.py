"""Service-level exceptions. Routers translate these into HTTP responses."""
from fastapi import HTTPException, status


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_http(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


# Duplicate email/username has always been answered with 400; clients depend on it.
class ConflictError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: str):
        super().__init__(message)
        self.field = field


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class StorageError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
