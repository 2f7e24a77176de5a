"""
Document encoding for the key-value stores.

Bills and payments are stored as JSON arrays in the same camelCase format
used by exported backups. Bills are written without their payment history:
the payment collection is the only place payments live at rest.
"""

import json

import structlog
from pydantic import TypeAdapter, ValidationError

from billtracker.models.bill import Bill, PaymentRecord

logger = structlog.get_logger(__name__)

_BILLS = TypeAdapter(list[Bill])
_PAYMENTS = TypeAdapter(list[PaymentRecord])


def encode_bills(bills: list[Bill]) -> str:
    return json.dumps([
        bill.model_dump(mode="json", by_alias=True, exclude={"payment_history"})
        for bill in bills
    ])


def encode_payments(payments: list[PaymentRecord]) -> str:
    return json.dumps([
        payment.model_dump(mode="json", by_alias=True)
        for payment in payments
    ])


def decode_bills(document: str, key: str) -> list[Bill]:
    """Decode a bills document; a corrupt document reads as empty."""
    if not document:
        return []
    try:
        return _BILLS.validate_json(document)
    except ValidationError as e:
        logger.error("bills_document_unreadable", key=key, error=str(e))
        return []


def decode_payments(document: str, key: str) -> list[PaymentRecord]:
    """Decode a payments document; a corrupt document reads as empty."""
    if not document:
        return []
    try:
        return _PAYMENTS.validate_json(document)
    except ValidationError as e:
        logger.error("payments_document_unreadable", key=key, error=str(e))
        return []


def document_size(document: str) -> int:
    """Approximate stored size: two bytes per character, as browsers count it."""
    return len(document) * 2
