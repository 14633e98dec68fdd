from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    BUSINESS_LOGIC = "business_logic"
    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication"
    SYSTEM = "system"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorDetail(BaseModel):
    category: ErrorCategory
    severity: ErrorSeverity
    retryable: bool = False
    reason: str
    fields: Dict[str, str] = Field(default_factory=dict)


class DomainError(Exception):
    """Carries an ErrorDetail; callers branch on ``detail.category``."""

    def __init__(self, detail: ErrorDetail) -> None:
        super().__init__(detail.reason)
        self.detail = detail


def validation_error(reason: str, fields: Optional[Dict[str, str]] = None) -> ErrorDetail:
    return ErrorDetail(
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.LOW,
        reason=reason,
        fields=fields or {},
    )


def business_error(reason: str) -> ErrorDetail:
    return ErrorDetail(category=ErrorCategory.BUSINESS_LOGIC, severity=ErrorSeverity.MEDIUM, reason=reason)


def stock_race_error(reason: str) -> ErrorDetail:
    return ErrorDetail(
        category=ErrorCategory.BUSINESS_LOGIC,
        severity=ErrorSeverity.MEDIUM,
        retryable=True,
        reason=reason,
    )


def not_found_error(resource: str, identifier: Optional[str] = None) -> ErrorDetail:
    reason = f"{resource} with identifier '{identifier}' not found" if identifier else f"{resource} not found"
    return ErrorDetail(category=ErrorCategory.NOT_FOUND, severity=ErrorSeverity.LOW, reason=reason)


def unauthorized_error(reason: str = "Authentication required") -> ErrorDetail:
    return ErrorDetail(category=ErrorCategory.AUTHENTICATION, severity=ErrorSeverity.MEDIUM, reason=reason)


def system_error(reason: str) -> ErrorDetail:
    return ErrorDetail(
        category=ErrorCategory.SYSTEM,
        severity=ErrorSeverity.HIGH,
        retryable=True,
        reason=reason,
    )
