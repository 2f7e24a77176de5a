"""
Core Data Models for Bill Tracker

These models define the strict schemas for bills and payments.
They are designed to:
1. Enforce type safety at runtime
2. Round every money value to cents at the point of input
3. Serialize to the portable camelCase JSON used by backups
4. Keep status a derived value, never a caller-supplied one

DESIGN DECISION: We use Pydantic v2 with camelCase aliases so the
on-disk format matches exported backups, while Python code keeps
snake_case field names (populate_by_name=True).
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from billtracker.utils.dates import FREQUENCY_MONTHS
from billtracker.utils.money import round_to_cents


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class BillCategory(str, Enum):
    """
    Supported bill categories.

    DESIGN DECISION: Using explicit categories rather than free text ensures
    consistent grouping in the category breakdowns.
    """
    UTILITIES = "utilities"
    RENT = "rent"
    MORTGAGE = "mortgage"
    INSURANCE = "insurance"
    SUBSCRIPTIONS = "subscriptions"
    INTERNET = "internet"
    PHONE = "phone"
    FOOD = "food"
    TRANSPORTATION = "transportation"
    HEALTHCARE = "healthcare"
    ENTERTAINMENT = "entertainment"
    OTHER = "other"


class BillFrequency(str, Enum):
    """How often a bill recurs."""
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    SEMI_ANNUAL = "semi-annual"
    ANNUAL = "annual"

    @property
    def months(self) -> int:
        """Number of months between two due dates."""
        return FREQUENCY_MONTHS[self.value]


class BillStatus(str, Enum):
    """
    Lifecycle status of a bill.

    CRITICAL: Status is always derived from amount, payments and due date.
    See billtracker.analytics.status.derive_status.
    """
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentMethod(str, Enum):
    """How a payment was made."""
    CREDIT_CARD = "credit-card"
    DEBIT_CARD = "debit-card"
    BANK_TRANSFER = "bank-transfer"
    CASH = "cash"
    CHECK = "check"
    DIGITAL_WALLET = "digital-wallet"
    AUTO_PAY = "auto-pay"


# =============================================================================
# MONEY
# =============================================================================

def _coerce_money(value: Any) -> Any:
    """
    Round incoming numbers to cents.

    Anything that is not a finite number is passed through untouched so
    that pydantic reports it as a normal validation error.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        return value
    try:
        candidate = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    except InvalidOperation:
        return value
    if not candidate.is_finite():
        return value
    return round_to_cents(candidate)


# Serialized as a JSON number, like the backups the app has always produced
Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


def generate_id() -> str:
    """Generate an opaque unique identifier."""
    return uuid4().hex


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# CORE MODELS
# =============================================================================

class PaymentRecord(CamelModel):
    """
    A single payment applied toward a bill.

    bill_id is a back-reference, not an ownership pointer:
    many payments can point at one bill.
    """

    id: str = Field(
        default_factory=generate_id,
        min_length=1,
        description="Unique payment ID"
    )
    bill_id: str = Field(
        ...,
        min_length=1,
        description="ID of the bill this payment applies to"
    )
    amount: Money = Field(
        ...,
        gt=0,
        description="Amount paid"
    )
    paid_date: date = Field(
        ...,
        description="Date the payment was made"
    )
    payment_method: PaymentMethod = Field(
        default=PaymentMethod.CREDIT_CARD,
        description="How the payment was made"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
    )

    @field_validator("amount", mode="before")
    @classmethod
    def round_amount(cls, v: Any) -> Any:
        """Round to cents before range checks."""
        return _coerce_money(v)


class Bill(CamelModel):
    """
    A recurring obligation to pay a fixed amount by a due date.

    payment_history is a derived view of the payment store, rebuilt by the
    ledger in recording order. status is likewise derived; a stored value
    is only the most recent derivation and must not be trusted long-term.
    """

    # Identity
    id: str = Field(
        default_factory=generate_id,
        min_length=1,
        description="Unique bill ID"
    )

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Bill name (e.g., 'Electricity')"
    )
    amount: Money = Field(
        ...,
        gt=0,
        description="Amount due each period"
    )
    due_date: date = Field(
        ...,
        description="Next due date"
    )
    category: BillCategory = Field(
        default=BillCategory.OTHER,
    )
    frequency: BillFrequency = Field(
        default=BillFrequency.MONTHLY,
    )
    status: BillStatus = Field(
        default=BillStatus.PENDING,
        description="Derived lifecycle status"
    )
    payment_history: list[PaymentRecord] = Field(
        default_factory=list,
        description="Payments in recording order (derived from the payment store)"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000,
        description="User notes about this bill"
    )

    # Timestamps
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Bumped on every mutation"
    )

    @field_validator("amount", mode="before")
    @classmethod
    def round_amount(cls, v: Any) -> Any:
        """Round to cents before range checks."""
        return _coerce_money(v)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in an import payload."""

    field: str = Field(
        ...,
        description="Where the issue was found (e.g., 'payments[3].billId')"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'orphan_payment', 'duplicate_id')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Result of the two-stage import validation.

    Stage 1: Schema validation (identity and structure)
    Stage 2: Semantic validation (referential integrity, sanity checks)
    """

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )
    schema_valid: bool
    semantic_valid: bool
    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")


# =============================================================================
# BACKUP MODELS
# =============================================================================

class BackupPayload(CamelModel):
    """Parsed contents of an exported backup."""

    bills: list[Bill]
    payments: list[PaymentRecord]
    export_date: Optional[datetime] = None
    version: str = "1.0"


class ImportResult(BaseModel):
    """Outcome of a successful import."""

    bills_imported: int = Field(ge=0)
    payments_imported: int = Field(ge=0)
    message: str
    warnings: list[str] = Field(default_factory=list)
