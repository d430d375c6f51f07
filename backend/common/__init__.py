"""Common module — shared utilities for SIAP CUTI."""

from backend.common.constants import (
    ALL_STATUSES,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    LeaveStatus,
    NotificationOutcome,
    UserRole,
)
from backend.common.exceptions import (
    AppException,
    ConfigurationException,
    ConflictError,
    DateRangeException,
    DeliveryException,
    ForbiddenException,
    InsufficientBalanceException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
    register_exception_handlers,
)
from backend.common.filters import apply_filters, apply_search, apply_sorting
from backend.common.pagination import (
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Constants / Enums
    "ALL_STATUSES",
    "LeaveStatus",
    "NotificationOutcome",
    "UserRole",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AppException",
    "ConfigurationException",
    "ConflictError",
    "DateRangeException",
    "DeliveryException",
    "ForbiddenException",
    "InsufficientBalanceException",
    "InvalidTransitionException",
    "NotFoundException",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_search",
    "apply_sorting",
    # Pagination
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
