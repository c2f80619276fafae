from typing import Iterable

from missionhub.core.constants import (
    BadgeErrorDetails,
    ErrorCode,
    GeneralErrorDetails,
    MissionErrorDetails,
)


class AppException(Exception):
    """Base application exception with message, status code, error code and optional data."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        data: dict = None,
        code: str = ErrorCode.COMMON_BAD_REQUEST,
    ):
        self.message = message
        self.status_code = status_code
        self.data = data or {}
        self.code = code
        super().__init__(self.message)


class _DomainException(AppException):
    """Exception with a fixed message, status and code declared on the class."""

    default_message: str = GeneralErrorDetails.BAD_REQUEST
    status_code_default: int = 400
    error_code: str = ErrorCode.COMMON_BAD_REQUEST

    def __init__(self, message: str | None = None, data: dict = None):
        super().__init__(
            message=message or self.default_message,
            status_code=self.status_code_default,
            data=data,
            code=self.error_code,
        )


class CategoryNotFoundException(_DomainException):
    """Raised when a mission references an unknown category."""
    default_message = MissionErrorDetails.CATEGORY_NOT_FOUND
    error_code = ErrorCode.MISSION_CATEGORY_NOT_FOUND


class TemplateNotFoundException(_DomainException):
    """Raised when a mission references an unknown template."""
    default_message = MissionErrorDetails.TEMPLATE_NOT_FOUND
    error_code = ErrorCode.MISSION_TEMPLATE_NOT_FOUND


class ParentMissionNotFoundException(_DomainException):
    """Raised when the parent mission is missing or cannot hold sub-missions."""
    default_message = MissionErrorDetails.PARENT_NOT_FOUND
    error_code = ErrorCode.MISSION_PARENT_NOT_FOUND


class MissionNotFoundException(_DomainException):
    default_message = MissionErrorDetails.MISSION_NOT_FOUND
    status_code_default = 404
    error_code = ErrorCode.MISSION_NOT_FOUND


class MissionImmutableException(_DomainException):
    """Raised when a completed mission would be modified."""
    default_message = MissionErrorDetails.MISSION_IMMUTABLE
    error_code = ErrorCode.MISSION_IMMUTABLE


class InvalidTransitionException(_DomainException):
    """Raised when a status change is not allowed by the mission state machine."""
    default_message = MissionErrorDetails.INVALID_TRANSITION
    error_code = ErrorCode.MISSION_INVALID_TRANSITION

    def __init__(self, current_status: str, requested_status: str):
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            message=f"Cannot change mission status from {current_status} to {requested_status}",
            data={"current_status": str(current_status), "requested_status": str(requested_status)},
        )


class TransactionsNotFoundException(_DomainException):
    """Raised when one or more transaction ids do not resolve; nothing is linked."""
    default_message = MissionErrorDetails.TRANSACTIONS_NOT_FOUND
    status_code_default = 404
    error_code = ErrorCode.MISSION_TRANSACTIONS_NOT_FOUND

    def __init__(self, missing_ids: Iterable[str]):
        self.missing_ids = sorted(missing_ids)
        super().__init__(data={"missing_transaction_ids": self.missing_ids})


class TransactionsLockedException(_DomainException):
    """Raised when a link would move transactions away from a completed mission; nothing is linked."""
    default_message = MissionErrorDetails.TRANSACTIONS_LOCKED
    error_code = ErrorCode.MISSION_TRANSACTIONS_LOCKED

    def __init__(self, transaction_ids: Iterable[str]):
        self.transaction_ids = sorted(transaction_ids)
        super().__init__(data={"locked_transaction_ids": self.transaction_ids})


class ForbiddenMissionAccessException(_DomainException):
    default_message = MissionErrorDetails.FORBIDDEN
    status_code_default = 403
    error_code = ErrorCode.MISSION_FORBIDDEN


class BadgeNotFoundException(_DomainException):
    default_message = BadgeErrorDetails.BADGE_NOT_FOUND
    status_code_default = 404
    error_code = ErrorCode.BADGE_NOT_FOUND


class AlreadyAwardedException(_DomainException):
    """Raised by the user badge repository when the (user, badge) pair already exists."""
    default_message = BadgeErrorDetails.ALREADY_AWARDED
    error_code = ErrorCode.BADGE_ALREADY_AWARDED

    def __init__(self, user_id: str, badge_id: str):
        self.user_id = user_id
        self.badge_id = badge_id
        super().__init__(data={"user_id": user_id, "badge_id": badge_id})
