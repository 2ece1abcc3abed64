"""Error taxonomy shared by the rule modules, the club gate and the HTTP layer.

Every error knows the HTTP status it maps to and carries a message that is
safe to show to the caller. Rule failures are ``ValidationFailed`` subclasses
with a fixed field path so they can be rendered as ``details`` entries.
"""

from __future__ import annotations

from typing import Optional


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"success": False, "error": self.message}


class ValidationFailed(AppError):
    status_code = 400
    default_message = "Validation failed"
    path = ""

    def __init__(self, message: Optional[str] = None, details: Optional[list[dict]] = None, path: Optional[str] = None):
        super().__init__(message)
        if path is not None:
            self.path = path
        if details is None:
            details = [{"path": self.path, "message": self.message}]
        self.details = details

    def to_payload(self) -> dict:
        return {"success": False, "error": "Validation failed", "details": self.details}


# ---------------------------
# Rule failures
# ---------------------------

class SeasonIdRequired(ValidationFailed):
    default_message = "Season ID is required"
    path = "seasonId"

class NameRequired(ValidationFailed):
    default_message = "Name is required"
    path = "name"

class NameTooLong(ValidationFailed):
    default_message = "Name is too long"
    path = "name"

class DisciplineTypeConflict(ValidationFailed):
    default_message = "Discipline cannot be both timed and measured"
    path = "isTimed"

class DisciplineTypeMissing(ValidationFailed):
    default_message = "Discipline must be either timed or measured"
    path = "isTimed"

class TeamSizeTooSmall(ValidationFailed):
    default_message = "Team size must be at least 1"
    path = "teamSize"

class TeamSizeTooLarge(ValidationFailed):
    default_message = "Team size cannot exceed 10 members"
    path = "teamSize"

class InvalidMedalPosition(ValidationFailed):
    default_message = "Invalid medal position"
    path = "position"

class InvalidMedalName(ValidationFailed):
    default_message = "Invalid medal name"
    path = "name"


# ---------------------------
# Authentication / authorization
# ---------------------------

class Unauthenticated(AppError):
    status_code = 401
    default_message = "Authentication required"

class ClubContextRequired(AppError):
    status_code = 400
    default_message = "Club context required - please select a club"

class AccessDenied(AppError):
    status_code = 403
    default_message = "Access denied to this club"

class ClubMismatch(AppError):
    status_code = 403
    default_message = "Unauthorized access to specified club"

class InsufficientPermissions(AppError):
    status_code = 403
    default_message = "Insufficient permissions - Admin or Owner role required"


# ---------------------------
# Store outcomes
# ---------------------------

class NotFound(AppError):
    status_code = 404
    default_message = "Not found"

class Conflict(AppError):
    status_code = 409
    default_message = "Conflict"


class PerformanceValidationFailed(ValidationFailed):
    default_message = "Performance validation failed"

    def __init__(self, details: list[dict], warnings: Optional[list[str]] = None):
        super().__init__(details=details)
        self.warnings = list(warnings or [])

    def to_payload(self) -> dict:
        return {
            "success": False,
            "error": self.message,
            "details": self.details,
            "warnings": self.warnings,
        }
