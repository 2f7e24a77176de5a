"""
Data Models Package

This package contains all Pydantic models used in Bill Tracker.
All data flowing through the system must conform to these schemas.
"""

from billtracker.models.bill import (
    BackupPayload,
    Bill,
    BillCategory,
    BillFrequency,
    BillStatus,
    ImportResult,
    Money,
    PaymentMethod,
    PaymentRecord,
    ValidationIssue,
    ValidationResult,
    generate_id,
)
from billtracker.models.analytics import (
    BillSummary,
    CategorySlice,
    CategorySummary,
    ChartData,
    MonthlyAnalytics,
    MonthlySpendingPoint,
    PaymentMethodStats,
    SpendingByStatus,
    SpendingTrend,
    StatusSlice,
    TopCategory,
    YearlySummary,
)
from billtracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Bill models
    "BackupPayload",
    "Bill",
    "BillCategory",
    "BillFrequency",
    "BillStatus",
    "ImportResult",
    "Money",
    "PaymentMethod",
    "PaymentRecord",
    "ValidationIssue",
    "ValidationResult",
    "generate_id",
    # Derived views
    "BillSummary",
    "CategorySlice",
    "CategorySummary",
    "ChartData",
    "MonthlyAnalytics",
    "MonthlySpendingPoint",
    "PaymentMethodStats",
    "SpendingByStatus",
    "SpendingTrend",
    "StatusSlice",
    "TopCategory",
    "YearlySummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
