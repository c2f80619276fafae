from enum import StrEnum


class MissionStatus(StrEnum):
    """Mission lifecycle status."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class MissionType(StrEnum):
    TEMPLATE = "template"
    CUSTOM = "custom"


class MissionLevel(StrEnum):
    MAIN = "main"
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    DAILY = "daily"


class GoalType(StrEnum):
    AMOUNT = "amount"
    AMOUNT_COUNT = "amount_count"


class CategoryStatus(StrEnum):
    """Status shared by categories, templates and badges."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class TransactionType(StrEnum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


class BadgeType(StrEnum):
    LIFECYCLE = "lifecycle"
    STREAK = "streak"
    FAMILY = "family"
    ACHIEVEMENT = "achievement"
    SPECIAL = "special"


class BadgeConditionType(StrEnum):
    """Condition types understood by the badge rule engine."""
    MISSION_COMPLETE = "mission_complete"
    CATEGORY_COMPLETE = "category_complete"
    CONSECUTIVE_MONTHS = "consecutive_months"
    FAMILY_MISSION_COMPLETE = "family_mission_complete"
    SAVINGS_AMOUNT = "savings_amount"
    FIRST_ACTION = "first_action"


class FirstActionType(StrEnum):
    """Actions a first-action badge can require."""
    MISSION = "mission"
    FAMILY = "family"


class BadgeIssueType(StrEnum):
    AUTO = "auto"
    MANUAL = "manual"


class FamilyGroupStatus(StrEnum):
    ACTIVE = "active"
    DISSOLVED = "dissolved"


class RealtimeMessageType(StrEnum):
    """Message tags pushed over the real-time stream."""
    HEARTBEAT = "heartbeat"
    MISSION_CREATED = "mission_created"
    FAMILY_MISSION_CREATED = "family_mission_created"
    MISSION_UPDATED = "mission_updated"
    MISSION_STATUS_CHANGED = "mission_status_changed"
    FAMILY_DATA_UPDATED = "family_data_updated"
    MISSION_COMPLETED = "mission_completed"
    PARTNER_MISSION_COMPLETED = "partner_mission_completed"
    TRANSACTIONS_LINKED = "transactions_linked"
    BADGE_EARNED = "badge_earned"


MAX_FAMILY_MEMBERS = 2


class ErrorCode(StrEnum):
    """Stable error codes surfaced to the transport layer."""

    MISSION_CATEGORY_NOT_FOUND = "MISSION_001"
    MISSION_TEMPLATE_NOT_FOUND = "MISSION_002"
    MISSION_PARENT_NOT_FOUND = "MISSION_003"
    MISSION_NOT_FOUND = "MISSION_004"
    MISSION_IMMUTABLE = "MISSION_005"
    MISSION_INVALID_TRANSITION = "MISSION_006"
    MISSION_TRANSACTIONS_NOT_FOUND = "MISSION_007"
    MISSION_FORBIDDEN = "MISSION_008"
    MISSION_TRANSACTIONS_LOCKED = "MISSION_009"

    BADGE_NOT_FOUND = "BADGE_001"
    BADGE_ALREADY_AWARDED = "BADGE_002"

    COMMON_BAD_REQUEST = "COMMON_001"
    COMMON_VALIDATION = "COMMON_002"
    COMMON_INTERNAL = "COMMON_003"
    COMMON_UNAUTHORIZED = "COMMON_004"


class MissionErrorDetails(StrEnum):
    """Mission related error messages."""

    CATEGORY_NOT_FOUND = "Invalid mission category"
    TEMPLATE_NOT_FOUND = "Invalid mission template"
    PARENT_NOT_FOUND = "Invalid parent mission"
    MISSION_NOT_FOUND = "Mission not found"
    MISSION_IMMUTABLE = "Completed missions cannot be modified"
    INVALID_TRANSITION = "Invalid mission status transition"
    TRANSACTIONS_NOT_FOUND = "Some transactions could not be found"
    FORBIDDEN = "You do not have access to this mission"
    TRANSACTIONS_LOCKED = "Transactions backing a completed mission cannot be moved"


class BadgeErrorDetails(StrEnum):
    """Badge related error messages."""

    BADGE_NOT_FOUND = "Badge not found"
    ALREADY_AWARDED = "Badge already earned"


class GeneralErrorDetails(StrEnum):
    """General application error messages."""

    INTERNAL_SERVER_ERROR = "An internal server error occurred"
    BAD_REQUEST = "Invalid request"
    UNAUTHORIZED = "Authentication required"
    NOT_FOUND = "Resource not found"
