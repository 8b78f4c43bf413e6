# teamtasks/core/exceptions.py
from typing import Any, Optional


class AppError(Exception):
    """Base class for every application error. Carries a stable code and an HTTP status."""
    code: str = "APP_ERROR"
    status_code: int = 400

    def __init__(self, message: str = "Application error", code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

# ==== Invalid input ====

class InvalidInputError(AppError):
    """Bad or missing input values."""
    code = "INVALID_INPUT"
    status_code = 400

    def __init__(self, message: str = "Invalid input", code: Optional[str] = None):
        super().__init__(message, code)

class InvalidDateError(InvalidInputError):
    code = "INVALID_DATE"

    def __init__(self, message: str = "Invalid date"):
        super().__init__(message)

class NoFieldsToUpdateError(InvalidInputError):
    code = "NO_FIELDS_TO_UPDATE"

    def __init__(self, message: str = "At least one field must be provided for update"):
        super().__init__(message)

class EmptyFileError(InvalidInputError):
    code = "EMPTY_FILE"

    def __init__(self, message: str = "File is empty"):
        super().__init__(message)

class FileTooLargeError(InvalidInputError):
    code = "FILE_TOO_LARGE"

    def __init__(self, message: str = "File exceeds the maximum allowed size"):
        super().__init__(message)

# ==== Authentication ====

class NotAuthenticatedError(AppError):
    """The caller could not be identified."""
    code = "AUTHENTICATION_FAILED"
    status_code = 401

    def __init__(self, message: str = "Could not validate credentials", code: Optional[str] = None):
        super().__init__(message, code)

class InvalidCredentialsError(NotAuthenticatedError):
    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)

class TokenError(AppError):
    """
    Refresh/access token failure. Every subclass answers with the same code and
    message; the precise reason is only kept for logging.
    """
    code = "TOKEN_INVALID"
    status_code = 401
    reason = "invalid"

    def __init__(self, message: str = "Session is no longer valid, please login again"):
        super().__init__(message)

class TokenInvalidError(TokenError):
    reason = "invalid"

class TokenExpiredError(TokenError):
    reason = "expired"

class TokenRevokedError(TokenError):
    reason = "revoked"

# ==== Authorization ====

class AccessDeniedError(AppError):
    code = "ACCESS_DENIED"
    status_code = 403

    def __init__(self, message: str = "Access denied", code: Optional[str] = None):
        super().__init__(message, code)

class UserNotActiveError(AccessDeniedError):
    code = "USER_NOT_ACTIVE"

    def __init__(self, message: str = "User account is not active"):
        super().__init__(message)

class SelfOperationNotAllowedError(AccessDeniedError):
    code = "SELF_OPERATION_NOT_ALLOWED"

    def __init__(self, message: str = "This operation cannot be applied to your own account"):
        super().__init__(message)

# ==== NotFound ====

class NotFoundError(AppError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Resource not found", code: Optional[str] = None):
        super().__init__(message, code)

class UserNotFound(NotFoundError):
    code = "USER_NOT_FOUND"

    def __init__(self, message: str = "User not found"):
        super().__init__(message)

class TeamNotFound(NotFoundError):
    code = "TEAM_NOT_FOUND"

    def __init__(self, message: str = "Team not found"):
        super().__init__(message)

class TeamMemberNotFound(NotFoundError):
    code = "USER_NOT_IN_TEAM"

    def __init__(self, message: str = "User is not a member of this team"):
        super().__init__(message)

class ProjectNotFound(NotFoundError):
    code = "PROJECT_NOT_FOUND"

    def __init__(self, message: str = "Project not found"):
        super().__init__(message)

class TaskNotFound(NotFoundError):
    code = "TASK_NOT_FOUND"

    def __init__(self, message: str = "Task not found"):
        super().__init__(message)

class CommentNotFound(NotFoundError):
    code = "COMMENT_NOT_FOUND"

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message)

class AttachmentNotFound(NotFoundError):
    code = "ATTACHMENT_NOT_FOUND"

    def __init__(self, message: str = "Attachment not found"):
        super().__init__(message)

# ==== Duplicates ====

class DuplicateResourceError(AppError):
    """A unique key is already taken (pre-check or constraint violation)."""
    code = "DUPLICATE_RESOURCE"
    status_code = 409

    def __init__(self, message: str = "Resource already exists", code: Optional[str] = None):
        super().__init__(message, code)

class EmailAlreadyRegistered(DuplicateResourceError):
    code = "EMAIL_ALREADY_REGISTERED"

    def __init__(self, message: str = "Email is already registered"):
        super().__init__(message)

class DuplicateTeamName(DuplicateResourceError):
    code = "TEAM_NAME_TAKEN"

    def __init__(self, message: str = "Team with this name already exists"):
        super().__init__(message)

class DuplicateProjectName(DuplicateResourceError):
    code = "PROJECT_NAME_TAKEN"

    def __init__(self, message: str = "Project with this name already exists in the team"):
        super().__init__(message)

class DuplicateTaskTitle(DuplicateResourceError):
    code = "TASK_TITLE_TAKEN"

    def __init__(self, message: str = "Task with this title already exists in the project"):
        super().__init__(message)

class UserAlreadyInTeam(DuplicateResourceError):
    code = "USER_ALREADY_IN_TEAM"

    def __init__(self, message: str = "User is already a member of this team"):
        super().__init__(message)

# ==== State ====

class InvalidStateError(AppError):
    code = "INVALID_STATE"
    status_code = 409

    def __init__(self, message: str = "Operation is not allowed in the current state", code: Optional[str] = None):
        super().__init__(message, code)

class InvalidStatusTransitionError(InvalidStateError):
    """Status change not allowed by the entity lifecycle. Keeps both ends for diagnostics."""
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, old_status: Any = None, new_status: Any = None, message: Optional[str] = None):
        self.old_status = old_status
        self.new_status = new_status
        if message is None:
            message = f"Invalid status transition: {_label(old_status)} -> {_label(new_status)}"
        super().__init__(message)

class InvalidProjectStatusError(InvalidStatusTransitionError):
    code = "INVALID_PROJECT_STATUS"

class InvalidRoleTransitionError(InvalidStateError):
    code = "INVALID_ROLE_TRANSITION"

    def __init__(self, message: str = "Invalid role transition"):
        super().__init__(message)

class AlreadyDeletedError(InvalidStateError):
    code = "ALREADY_DELETED"

    def __init__(self, message: str = "Resource is already deleted"):
        super().__init__(message)

class AttachmentLimitReachedError(InvalidStateError):
    code = "ATTACHMENT_LIMIT_REACHED"

    def __init__(self, message: str = "Maximum number of attachments for this task reached"):
        super().__init__(message)

class LastAdminProtectedError(AppError):
    code = "LAST_ADMIN_PROTECTED"
    status_code = 409

    def __init__(self, message: str = "Operation would leave the system without an active administrator"):
        super().__init__(message)

# ==== Infrastructure ====

class StorageError(AppError):
    code = "STORAGE_ERROR"
    status_code = 502

    def __init__(self, message: str = "File storage is unavailable"):
        super().__init__(message)


def _label(status: Any) -> str:
    return getattr(status, "value", None) or str(status)
