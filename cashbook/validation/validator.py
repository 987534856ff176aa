"""
Two-Stage Receipt Validation

DESIGN DECISION: A scanned receipt is validated in two distinct stages
before the user is asked to confirm it:

STAGE 1 - SCHEMA VALIDATION:
- Amount present and positive
- Merchant present
- Date present and readable as YYYY-MM-DD
- This catches unreadable photos and malformed model answers

STAGE 2 - SEMANTIC VALIDATION:
- Future date detection
- Very old date detection
- Implausible amount detection
- Category outside the configured expense categories
- Probable duplicate of an existing transaction
- This catches suspicious but well-formed data

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for human review.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from cashbook.config import AppSettings, get_settings
from cashbook.models.ledger import (
    ReceiptScan,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from cashbook.reports.periods import parse_day, transaction_day


class ReceiptValidator:
    """
    Validates a ReceiptScan through a two-stage pipeline.

    Stage 2 only runs when stage 1 passes.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _validate_schema(
        self,
        scan: ReceiptScan,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if scan.amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Total amount could not be read from the receipt",
                severity="error",
                suggested_fix="Ensure the total is clearly visible in the photo",
            ))
        elif scan.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Total amount must be greater than zero",
                severity="error",
                suggested_fix="Check if the amount was read correctly",
            ))

        if not scan.merchant:
            issues.append(ValidationIssue(
                field="merchant",
                issue_type="missing",
                message="Merchant name could not be read",
                severity="warning",  # user can type it in
                suggested_fix="You'll need to enter the merchant name manually",
            ))

        if scan.date is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Receipt date could not be read",
                severity="warning",
                suggested_fix="The transaction will use today's date unless you change it",
            ))
        elif parse_day(scan.date) is None:
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=f"Receipt date ({scan.date}) is not a valid YYYY-MM-DD date",
                severity="warning",
                suggested_fix="Please enter the date manually",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_semantic(
        self,
        scan: ReceiptScan,
        today: date,
        categories: Optional[list[str]],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []
        receipt_day = parse_day(scan.date)

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if receipt_day and receipt_day > max_future_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Receipt date ({receipt_day}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        min_reasonable_date = today - timedelta(days=365 * 2)
        if receipt_day and receipt_day < min_reasonable_date:
            issues.append(ValidationIssue(
                field="date",
                issue_type="suspicious_date",
                message=f"Receipt date ({receipt_day}) seems unusually old",
                severity="warning",
                suggested_fix="Please verify the date was read correctly",
            ))

        max_amount = Decimal(str(self._settings.max_receipt_amount))
        if scan.amount and scan.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({scan.amount:,}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        if categories is not None and scan.category and scan.category not in categories:
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"Category '{scan.category}' is not one of your expense categories",
                severity="warning",
                suggested_fix="Pick one of your categories or add this one in settings",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _check_duplicates(
        self,
        scan: ReceiptScan,
        existing: Iterable[Transaction],
    ) -> list[ValidationIssue]:
        """Same day, same amount and same merchant as an existing expense."""
        receipt_day = parse_day(scan.date)
        if receipt_day is None or scan.amount is None or not scan.merchant:
            return []

        merchant = scan.merchant.casefold()
        for t in existing:
            if (
                t.type == TransactionType.EXPENSE
                and t.amount == scan.amount
                and (t.merchant or "").casefold() == merchant
                and transaction_day(t) == receipt_day
            ):
                return [ValidationIssue(
                    field="duplicate",
                    issue_type="potential_duplicate",
                    message=(
                        f"An expense at {scan.merchant} for {scan.amount} "
                        f"on {receipt_day} is already recorded"
                    ),
                    severity="warning",
                    suggested_fix="Please verify this isn't a duplicate entry",
                )]
        return []

    def validate(
        self,
        scan: ReceiptScan,
        existing: Iterable[Transaction] = (),
        categories: Optional[list[str]] = None,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Args:
            scan: The scanned receipt
            existing: Ledger transactions used for duplicate detection
            categories: Allowed expense categories (None skips the check)
            today: Reference day for date checks (defaults to today)

        Returns:
            ValidationResult with all issues found
        """
        today = today or date.today()
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(scan)
        all_issues.extend(schema_issues)

        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(scan, today, categories)
            all_issues.extend(semantic_issues)
            all_issues.extend(self._check_duplicates(scan, existing))

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]

        return ValidationResult(
            scan_id=scan.scan_id,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            can_proceed_with_review=scan.amount is not None and schema_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed. Please review the details below."

        lines = []

        if not result.schema_valid:
            lines.append("Some required information could not be read:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   - {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     Tip: {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   - {warning}")

        lines.append("")
        if result.can_proceed_with_review:
            lines.append("You can still proceed, but please review carefully.")
        else:
            lines.append("Please fix the issues above before continuing.")

        return "\n".join(lines)
