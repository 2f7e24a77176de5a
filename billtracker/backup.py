"""
Backup and Restore

Serializes bills and payments to a portable JSON document and parses the
inverse. The document layout is:

    {
      "bills": [...],          # bills with their paymentHistory
      "payments": [...],       # the authoritative payment records
      "exportDate": "<ISO timestamp>",
      "version": "1.0"
    }

Parsing only checks structure; BackupValidator checks the contents and
BillLedger.import_data performs the write with rollback.
"""

import json
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from billtracker.errors import DataImportError
from billtracker.models.bill import BackupPayload, Bill, PaymentRecord

BACKUP_VERSION = "1.0"


def export_data(
    bills: list[Bill],
    payments: list[PaymentRecord],
    now: Optional[datetime] = None,
) -> str:
    """Serialize a snapshot to pretty-printed JSON."""
    exported_at = now or datetime.now(timezone.utc)
    document = {
        "bills": [bill.model_dump(mode="json", by_alias=True) for bill in bills],
        "payments": [p.model_dump(mode="json", by_alias=True) for p in payments],
        "exportDate": exported_at.isoformat(),
        "version": BACKUP_VERSION,
    }
    return json.dumps(document, indent=2)


def parse_backup(text: str) -> BackupPayload:
    """
    Parse an exported backup.

    Raises:
        DataImportError: If the text is not JSON, if `bills` or `payments`
                         is missing or not an array, or if any record fails
                         model validation
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        raise DataImportError("Invalid JSON format")

    if not isinstance(data, dict):
        raise DataImportError("Invalid data format: expected a JSON object")
    if not isinstance(data.get("bills"), list):
        raise DataImportError("Invalid data format: missing bills array")
    if not isinstance(data.get("payments"), list):
        raise DataImportError("Invalid data format: missing payments array")

    try:
        return BackupPayload.model_validate(data)
    except ValidationError as e:
        issues = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "issue_type": error["type"],
                "message": error["msg"],
                "severity": "error",
            }
            for error in e.errors()
        ]
        raise DataImportError(
            f"Invalid data format: {e.error_count()} invalid field(s)",
            issues=issues,
        )
