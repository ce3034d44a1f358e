"""Utility functions for the site link controller."""

from .conditions import (
    MILESTONE_CONDITIONS,
    condition_type_for,
    latest_condition,
)
from .errors import (
    ConditionFailedError,
    ConflictError,
    GrantConfigurationError,
    NotFoundError,
    OperatorError,
    StoreError,
    ValidationError,
    WaitTimeoutError,
    sanitize_exception,
)
from .rate_limit import rate_limit_k8s
from .retry import PRODUCTION_PROFILE, TEST_PROFILE, RetryProfile, format_duration

__all__ = [
    "MILESTONE_CONDITIONS",
    "condition_type_for",
    "latest_condition",
    "ConditionFailedError",
    "ConflictError",
    "GrantConfigurationError",
    "NotFoundError",
    "OperatorError",
    "StoreError",
    "ValidationError",
    "WaitTimeoutError",
    "sanitize_exception",
    "rate_limit_k8s",
    "PRODUCTION_PROFILE",
    "TEST_PROFILE",
    "RetryProfile",
    "format_duration",
]
