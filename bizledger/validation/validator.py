"""
Boundary Validation

DESIGN DECISION: Everything entering the ledger is validated here,
before any state is touched. A rejected call leaves the store exactly
as it was.

IMPORTANT: Validation NEVER silently fixes issues.
A negative or non-numeric amount is rejected, not coerced to zero.

pydantic does the structural work; this module turns its
ValidationError into the ledger's own exception types so callers only
need to catch InvalidInputError.
"""

import datetime as dt
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, TypeVar, Union

from pydantic import BaseModel, ValidationError

from bizledger.ledger.errors import InvalidAmountError, InvalidInputError
from bizledger.models.ledger import Transaction
from bizledger.models.reports import PeriodFilter


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_amount(value: Any, field: str = "amount") -> Decimal:
    """
    Convert a caller-supplied amount to a non-negative, finite Decimal.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not its
    binary approximation.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidAmountError(f"{field} must be a number, got {value!r}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float, str)):
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidAmountError(f"{field} must be finite, got {value!r}")
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmountError(f"{field} must be a number, got {value!r}") from None
    else:
        raise InvalidAmountError(f"{field} must be a number, got {type(value).__name__}")

    if not amount.is_finite():
        raise InvalidAmountError(f"{field} must be finite, got {value!r}")
    if amount < 0:
        raise InvalidAmountError(f"{field} cannot be negative, got {value!r}")

    return amount


def validate_percentage(value: Any, field: str = "percentage") -> float:
    """Percentages are floats in [0, 100]."""
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a number, got {value!r}")
    try:
        pct = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{field} must be a number, got {value!r}") from None

    if not math.isfinite(pct) or pct < 0 or pct > 100:
        raise InvalidInputError(f"{field} must be between 0 and 100, got {value!r}")

    return pct


def validate_period(
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> PeriodFilter:
    """Build a PeriodFilter; month is 0-indexed (0 = January)."""
    for name, value in (("month", month), ("year", year)):
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise InvalidInputError(f"{name} must be an integer, got {value!r}")
    return parse_model(PeriodFilter, {"month": month, "year": year})


def validate_text(value: Any, field: str, max_length: int = 200) -> str:
    """Non-empty text, whitespace stripped."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field} is required")
    text = value.strip()
    if len(text) > max_length:
        raise InvalidInputError(f"{field} cannot exceed {max_length} characters")
    return text


def validate_date(value: Any, field: str = "date") -> dt.date:
    """Accept a date or an ISO-8601 date string."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        try:
            return dt.date.fromisoformat(value.strip())
        except ValueError:
            raise InvalidInputError(f"{field} must be an ISO date, got {value!r}") from None
    raise InvalidInputError(f"{field} must be a date, got {type(value).__name__}")


def parse_model(model: type[ModelT], payload: Any) -> ModelT:
    """Validate a payload against a model, raising InvalidInputError on failure."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise InvalidInputError(_describe(model.__name__, e)) from e


def parse_transaction(payload: Union[Transaction, dict]) -> Transaction:
    """
    Validate a transaction payload.

    The amount is checked first so that a bad amount always surfaces as
    InvalidAmountError, whatever else is wrong with the payload.
    """
    if isinstance(payload, Transaction):
        return payload
    if not isinstance(payload, dict):
        raise InvalidInputError(
            f"Transaction payload must be a mapping, got {type(payload).__name__}"
        )

    data = dict(payload)
    data["amount"] = validate_amount(data.get("amount"))
    return parse_model(Transaction, data)


def _describe(model_name: str, error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item["loc"]) or model_name
        parts.append(f"{loc}: {item['msg']}")
    return f"Invalid {model_name}: " + "; ".join(parts)
