"""Application exception classes and handlers."""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from blogdesk.schemas.response_schema import error_content


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


# --- Authentication (401) ---


class AuthenticationError(AppException):
    """Base authentication error."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message=message, code="AUTHENTICATION_ERROR", status_code=401)


class TokenExpiredError(AppException):
    """Session marker has expired."""

    def __init__(self) -> None:
        super().__init__(
            message="Session has expired",
            code="TOKEN_EXPIRED",
            status_code=401,
        )


class TokenBlacklistedError(AppException):
    """Session marker has been revoked."""

    def __init__(self) -> None:
        super().__init__(
            message="Session has been revoked",
            code="TOKEN_BLACKLISTED",
            status_code=401,
        )


class InvalidTokenError(AppException):
    """Session marker is invalid."""

    def __init__(self) -> None:
        super().__init__(
            message="Invalid session",
            code="INVALID_TOKEN",
            status_code=401,
        )


class InvalidCredentialsError(AppException):
    """Wrong username or password, deliberately indistinguishable."""

    def __init__(self) -> None:
        super().__init__(
            message="Invalid username or password",
            code="INVALID_CREDENTIALS",
            status_code=401,
        )


# --- Authorization (403) ---


class ModelNotAvailableError(AppException):
    """Model exists but is not selectable by this caller."""

    def __init__(self, model_key: str) -> None:
        super().__init__(
            message=f"Model '{model_key}' is not available",
            code="MODEL_NOT_AVAILABLE",
            status_code=403,
        )


# --- Bad Request (400) ---


class UnknownModelError(AppException):
    """Model key is not in the catalogue."""

    def __init__(self, model_key: str) -> None:
        super().__init__(
            message=f"Unknown model '{model_key}'",
            code="UNKNOWN_MODEL",
            status_code=400,
        )


class EmptyMessageError(AppException):
    """Nothing to send."""

    def __init__(self) -> None:
        super().__init__(
            message="Message is empty",
            code="EMPTY_MESSAGE",
            status_code=400,
        )


# --- Not Found (404) ---


class SessionNotFoundError(AppException):
    """Chat session not found."""

    def __init__(self) -> None:
        super().__init__(
            message="Chat session not found",
            code="SESSION_NOT_FOUND",
            status_code=404,
        )


class ArticleNotFoundError(AppException):
    """Article not found or not visible to the caller."""

    def __init__(self) -> None:
        super().__init__(
            message="Article not found",
            code="ARTICLE_NOT_FOUND",
            status_code=404,
        )


class ProjectNotFoundError(AppException):
    """Project not found."""

    def __init__(self) -> None:
        super().__init__(
            message="Project not found",
            code="PROJECT_NOT_FOUND",
            status_code=404,
        )


# --- Upstream / configuration (502, 503) ---


class CompletionError(AppException):
    """Completion provider failed while generating."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="COMPLETION_ERROR", status_code=502)


class ProviderNotConfiguredError(AppException):
    """Selected provider has no credential."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(
            message=f"Provider '{provider}' is not configured",
            code="PROVIDER_NOT_CONFIGURED",
            status_code=503,
        )


class AdminNotConfiguredError(AppException):
    """Admin credentials are missing from the environment."""

    def __init__(self) -> None:
        super().__init__(
            message="Admin login is not configured",
            code="ADMIN_NOT_CONFIGURED",
            status_code=503,
        )


# --- Exception Handlers ---


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_content(exc.code, exc.message),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures in the same envelope."""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    detail = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content=error_content(
            "VALIDATION_ERROR", f"{location}: {detail}" if location else detail
        ),
    )
