from fastapi import HTTPException, status


# ═══════════════════════════════════════════════════════════════════════════════
# ERROR CODES: machine-readable constants for frontend switch/case
# ═══════════════════════════════════════════════════════════════════════════════
class ErrorCode:
    VALIDATION_ERROR        = "VALIDATION_ERROR"
    UNAUTHORIZED            = "UNAUTHORIZED"
    TOKEN_EXPIRED           = "TOKEN_EXPIRED"
    FORBIDDEN               = "FORBIDDEN"
    NOT_FOUND               = "NOT_FOUND"
    DUPLICATE_ENTRY         = "DUPLICATE_ENTRY"
    FGNR_EXISTS             = "FGNR_EXISTS"
    VERSION_INVALID         = "VERSION_INVALID"
    VERSION_OUTDATED        = "VERSION_OUTDATED"
    PRECONDITION_REQUIRED   = "PRECONDITION_REQUIRED"
    INTERNAL_SERVER_ERROR   = "INTERNAL_SERVER_ERROR"


# ═══════════════════════════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════════════════════════
class AppException(HTTPException):
    """
    Raised by the services; rendered by middleware/error_handler.py as
    {success: false, message, error: {code, details, field}}.
    """
    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str,
        details: list | None = None,
        field: str | None = None,
    ):
        self.message = message
        self.error_code = error_code
        super().__init__(status_code=status_code, detail={
            "message": message,
            "error": {
                "code": error_code,
                "details": details,
                "field": field,
            }
        })


# ═══════════════════════════════════════════════════════════════════════════════
# CONCRETE EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════════

class UnauthorizedException(AppException):
    def __init__(self, message: str = "Authentication required"):
        super().__init__(status.HTTP_401_UNAUTHORIZED, message, ErrorCode.UNAUTHORIZED)


class TokenExpiredException(AppException):
    def __init__(self):
        super().__init__(status.HTTP_401_UNAUTHORIZED, "Access token has expired", ErrorCode.TOKEN_EXPIRED)


class ForbiddenException(AppException):
    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(status.HTTP_403_FORBIDDEN, message, ErrorCode.FORBIDDEN)


class NotFoundException(AppException):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(status.HTTP_404_NOT_FOUND, message, ErrorCode.NOT_FOUND)


class InvalidCriteriaException(NotFoundException):
    """Unknown search key or illegal value. Reported as a plain 404."""
    def __init__(self, key: str | None = None):
        self.key = key
        super().__init__("Invalid search criteria")


class FgnrExistsException(AppException):
    def __init__(self, fgnr: str | None):
        self.fgnr = fgnr
        super().__init__(
            422,
            f"The FGNR {fgnr} already exists",
            ErrorCode.FGNR_EXISTS,
            field="fgnr",
        )


class VersionInvalidException(AppException):
    def __init__(self, version: str | None):
        self.version = version
        super().__init__(
            status.HTTP_412_PRECONDITION_FAILED,
            f"The version {version} is invalid",
            ErrorCode.VERSION_INVALID,
        )


class VersionOutdatedException(AppException):
    def __init__(self, version: int):
        self.version = version
        super().__init__(
            status.HTTP_412_PRECONDITION_FAILED,
            f"The version {version} is outdated",
            ErrorCode.VERSION_OUTDATED,
        )


class PreconditionRequiredException(AppException):
    def __init__(self, header: str = "If-Match"):
        super().__init__(
            status.HTTP_428_PRECONDITION_REQUIRED,
            f'Header "{header}" is missing',
            ErrorCode.PRECONDITION_REQUIRED,
        )
