"""
Application error types.

Every error raised by the services carries an ErrorCode, which fixes the
HTTP status and the stable code string clients switch on. The handler
registered in hobbi.main renders them as {"code": ..., "message": ...}.
"""
import logging
from enum import Enum

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger("app")


class ErrorCode(Enum):
    UNAUTHORIZED = (status.HTTP_401_UNAUTHORIZED, "Authentication required")
    EXPIRED_TOKEN = (status.HTTP_401_UNAUTHORIZED, "Token has expired")
    INVALID_TOKEN = (status.HTTP_401_UNAUTHORIZED, "Invalid token")
    INVALID_CREDENTIALS = (status.HTTP_401_UNAUTHORIZED, "Incorrect email or password")
    FORBIDDEN = (status.HTTP_403_FORBIDDEN, "Not enough permissions")
    USER_NOT_FOUND = (status.HTTP_404_NOT_FOUND, "User not found")
    POST_NOT_FOUND = (status.HTTP_404_NOT_FOUND, "Post not found")
    COMMENT_NOT_FOUND = (status.HTTP_404_NOT_FOUND, "Comment not found")
    DUPLICATE_EMAIL = (status.HTTP_409_CONFLICT, "Email already registered")
    FILE_UPLOAD_FAILED = (status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to upload image files")
    OBJECT_STORAGE_ERROR = (status.HTTP_502_BAD_GATEWAY, "Object storage request failed")

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message


class AppError(Exception):
    error_code: ErrorCode = ErrorCode.UNAUTHORIZED

    def __init__(self, message: str = None):
        self.message = message or self.error_code.message
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return self.error_code.status_code

    @property
    def code(self) -> str:
        return self.error_code.name


class Unauthorized(AppError):
    error_code = ErrorCode.UNAUTHORIZED


class ExpiredToken(AppError):
    error_code = ErrorCode.EXPIRED_TOKEN


class InvalidToken(AppError):
    error_code = ErrorCode.INVALID_TOKEN


class InvalidCredentials(AppError):
    error_code = ErrorCode.INVALID_CREDENTIALS


class Forbidden(AppError):
    error_code = ErrorCode.FORBIDDEN


class UserNotFound(AppError):
    error_code = ErrorCode.USER_NOT_FOUND


class PostNotFound(AppError):
    error_code = ErrorCode.POST_NOT_FOUND


class CommentNotFound(AppError):
    error_code = ErrorCode.COMMENT_NOT_FOUND


class DuplicateEmail(AppError):
    error_code = ErrorCode.DUPLICATE_EMAIL


class FileUploadFailed(AppError):
    error_code = ErrorCode.FILE_UPLOAD_FAILED


class ObjectStorageError(AppError):
    error_code = ErrorCode.OBJECT_STORAGE_ERROR


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message},
        headers=headers,
    )
