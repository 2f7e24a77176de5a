"""
Two-Stage Import Validation

DESIGN DECISION: A backup is validated in two distinct stages before it
is allowed to replace the user's data.

STAGE 1 - SCHEMA VALIDATION:
- Duplicate bill ids
- Duplicate payment ids
(Field types and required keys are already enforced by the pydantic models
while parsing; this stage checks identity across records.)

STAGE 2 - SEMANTIC VALIDATION:
- Payments referencing a bill that is not in the backup (error)
- Bills whose payments exceed the bill amount (warning)
- Payments dated in the future (warning)
- Absurd bill amounts (warning)

IMPORTANT: Validation NEVER silently fixes issues.
It reports them; the ledger refuses to import anything with errors.
"""

from collections import Counter
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from billtracker.config import AppSettings, get_settings
from billtracker.models.bill import BackupPayload, ValidationIssue, ValidationResult
from billtracker.utils.money import calculate_total


class BackupValidator:
    """
    Validates a parsed backup through a two-stage pipeline.

    Stage 2 only runs when stage 1 passes.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        today: Optional[date] = None,
    ):
        self._settings = settings or get_settings().app
        self._today = today

    def _validate_schema(
        self,
        payload: BackupPayload,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Identity checks.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        bill_ids = Counter(bill.id for bill in payload.bills)
        for bill_id, count in bill_ids.items():
            if count > 1:
                issues.append(ValidationIssue(
                    field="bills",
                    issue_type="duplicate_id",
                    message=f"Bill id {bill_id} appears {count} times",
                    severity="error",
                    suggested_fix="Export the data again from the app",
                ))

        payment_ids = Counter(payment.id for payment in payload.payments)
        for payment_id, count in payment_ids.items():
            if count > 1:
                issues.append(ValidationIssue(
                    field="payments",
                    issue_type="duplicate_id",
                    message=f"Payment id {payment_id} appears {count} times",
                    severity="error",
                    suggested_fix="Export the data again from the app",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        payload: BackupPayload,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Referential integrity and sanity checks.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        today = self._today or date.today()
        bills_by_id = {bill.id: bill for bill in payload.bills}

        # Every payment must point at a bill in the same backup
        for index, payment in enumerate(payload.payments):
            if payment.bill_id not in bills_by_id:
                issues.append(ValidationIssue(
                    field=f"payments[{index}].billId",
                    issue_type="orphan_payment",
                    message=(
                        f"Payment {payment.id} refers to unknown bill {payment.bill_id}"
                    ),
                    severity="error",
                    suggested_fix="Remove the payment or restore its bill",
                ))

        # Future-dated payments (with tolerance)
        max_future = today + timedelta(days=self._settings.future_date_tolerance_days)
        for index, payment in enumerate(payload.payments):
            if payment.paid_date > max_future:
                issues.append(ValidationIssue(
                    field=f"payments[{index}].paidDate",
                    issue_type="future_date",
                    message=f"Payment {payment.id} is dated {payment.paid_date}",
                    severity="warning",
                    suggested_fix="Please verify the payment date",
                ))

        # Overpaid bills and absurd amounts
        max_amount = Decimal(str(self._settings.max_bill_amount))
        for index, bill in enumerate(payload.bills):
            paid = calculate_total(
                p.amount for p in payload.payments if p.bill_id == bill.id
            )
            if paid > bill.amount:
                issues.append(ValidationIssue(
                    field=f"bills[{index}]",
                    issue_type="overpaid",
                    message=(
                        f"Bill '{bill.name}' has {paid} paid against an amount of "
                        f"{bill.amount}"
                    ),
                    severity="warning",
                ))
            if bill.amount > max_amount:
                issues.append(ValidationIssue(
                    field=f"bills[{index}].amount",
                    issue_type="suspicious_value",
                    message=f"Amount of bill '{bill.name}' ({bill.amount:,.2f}) seems unusually high",
                    severity="warning",
                    suggested_fix="Please verify this amount is correct",
                ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(self, payload: BackupPayload) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            payload: The parsed backup to validate

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(payload)
        all_issues.extend(schema_issues)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(payload)
            all_issues.extend(semantic_issues)

        warnings = [i.message for i in all_issues if i.severity == "warning"]

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """Plain-text summary of validation results for the user."""
        if result.is_valid and not result.warnings:
            return "All checks passed. The backup is ready to import."

        lines = []

        if result.has_errors:
            lines.append("The backup cannot be imported:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   - {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     Hint: {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   - {warning}")

        return "\n".join(lines)
