"""
Domain errors for the Props With Pals API

Every expected client-facing failure is an ApiError carrying a stable code,
a human-readable message and the HTTP status it maps to.
"""


class ApiError(Exception):
    """Base class for errors returned to API callers"""

    status = 400
    code = "BAD_REQUEST"
    message = "Bad request"

    def __init__(self, message=None, code=None, status=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        if status is not None:
            self.status = status

    def to_dict(self):
        return {"code": self.code, "message": self.message}

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.code}: {self.message}>"


class ValidationError(ApiError):
    status = 400
    code = "VALIDATION_ERROR"
    message = "Invalid input"


class InvalidOption(ApiError):
    status = 400
    code = "INVALID_OPTION"
    message = "Option index out of range"


class InvalidTransition(ApiError):
    status = 400
    code = "INVALID_TRANSITION"
    message = "Invalid status transition"


class AlreadyResolved(ApiError):
    status = 400
    code = "ALREADY_RESOLVED"
    message = "Prop has already been resolved"


class AlreadyVoided(ApiError):
    status = 400
    code = "ALREADY_VOIDED"
    message = "Prop is already voided"


class PropVoided(ApiError):
    status = 400
    code = "PROP_VOIDED"
    message = "Prop has been voided"


class Unauthorized(ApiError):
    status = 401
    code = "UNAUTHORIZED"
    message = "Invalid secret"


class InvalidToken(ApiError):
    status = 401
    code = "INVALID_TOKEN"
    message = "Invalid or expired recovery link"


class PoolLocked(ApiError):
    status = 403
    code = "POOL_LOCKED"
    message = "Pool is already locked or completed"


class PoolNotLocked(ApiError):
    status = 403
    code = "POOL_NOT_LOCKED"
    message = "Pool must be locked first"


class PoolCompleted(ApiError):
    status = 403
    code = "POOL_COMPLETED"
    message = "Pool is completed"


class PoolNotFound(ApiError):
    status = 404
    code = "POOL_NOT_FOUND"
    message = "Pool not found"


class PropNotFound(ApiError):
    status = 404
    code = "PROP_NOT_FOUND"
    message = "Prop not found"


class PlayerNotFound(ApiError):
    status = 404
    code = "PLAYER_NOT_FOUND"
    message = "Player not found"


class NameTaken(ApiError):
    status = 409
    code = "NAME_TAKEN"
    message = "Name is already taken in this pool"


class CodeTaken(ApiError):
    status = 409
    code = "CODE_TAKEN"
    message = "This invite code is already in use"


# Maps status guard failures reported by the models onto errors
STATUS_ERRORS = {
    "POOL_LOCKED": PoolLocked,
    "POOL_NOT_LOCKED": PoolNotLocked,
    "POOL_COMPLETED": PoolCompleted,
    "INVALID_TRANSITION": InvalidTransition,
    "VALIDATION_ERROR": ValidationError,
}


def status_error(code, message):
    """Build the ApiError for a (code, message) pair returned by a status guard"""
    return STATUS_ERRORS[code](message)


def require_allowed(check):
    """Raise the mapped error when a status guard rejected the operation"""
    code, message = check
    if code:
        raise status_error(code, message)
