"""Validation package."""

from bizledger.validation.validator import (
    parse_model,
    parse_transaction,
    validate_amount,
    validate_date,
    validate_percentage,
    validate_period,
    validate_text,
)

__all__ = [
    "parse_model",
    "parse_transaction",
    "validate_amount",
    "validate_date",
    "validate_percentage",
    "validate_period",
    "validate_text",
]
