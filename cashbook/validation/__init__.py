"""Receipt validation package."""

from cashbook.validation.validator import ReceiptValidator

__all__ = ["ReceiptValidator"]
