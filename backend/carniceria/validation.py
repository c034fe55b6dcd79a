from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Boolean, Integer, Numeric, String, Text
from sqlalchemy.orm import DeclarativeMeta

# Signed 64-bit range of INTEGER/BIGINT columns on SQLite and PostgreSQL
MIN_DB_INTEGER = -(2 ** 63)
MAX_DB_INTEGER = 2 ** 63 - 1


class ValidationError(ValueError):
    """400-level input problem. `field` names the offending wire field."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        body = {"error": str(self)}
        if self.field:
            body["field"] = self.field
        return body


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - aliases: wire field name -> column key (the API speaks camelCase)
    - required_on_create: wire fields required for POST
    - choices: closed sets of allowed values per wire field
    Only fields listed in `aliases` are writable.
    """
    aliases: dict[str, str]
    required_on_create: tuple[str, ...] = ()
    choices: dict[str, tuple[str, ...]] = field(default_factory=dict)


def fits_db_integer(value: int) -> bool:
    return MIN_DB_INTEGER <= value <= MAX_DB_INTEGER


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_decimal(col, name: str, value: Any) -> Decimal:
    # Floats are accepted from JSON but read through their repr, not binary value
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a decimal number", field=name)
    if isinstance(value, float):
        value = repr(value)
    if isinstance(value, int):
        value = str(value)
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a decimal number", field=name)

    stripped = value.strip()
    if not stripped or "e" in stripped.lower():
        raise ValidationError(f"{name} must be a plain decimal number", field=name)
    try:
        number = Decimal(stripped)
    except InvalidOperation:
        raise ValidationError(f"{name} must be a decimal number", field=name)
    if not number.is_finite():
        raise ValidationError(f"{name} must be a decimal number", field=name)

    scale = col.type.scale or 0
    precision = col.type.precision
    exponent = number.as_tuple().exponent
    if -exponent > scale:
        raise ValidationError(f"{name} allows at most {scale} decimal places", field=name)
    if precision is not None and abs(number) >= Decimal(10) ** (precision - scale):
        raise ValidationError(f"{name} is too large", field=name)
    return number


def _coerce_value(col, name: str, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            number = value
        # String input - must be plain digits (with optional leading minus)
        elif isinstance(value, str):
            stripped = value.strip()
            digits = stripped[1:] if stripped.startswith("-") else stripped
            if not digits.isdigit():
                raise ValidationError(f"{name} must be an integer", field=name)
            number = int(stripped)
        else:
            raise ValidationError(f"{name} must be an integer", field=name)
        if not fits_db_integer(number):
            raise ValidationError(f"{name} is out of range", field=name)
        return number

    if isinstance(coltype, Numeric):
        return _coerce_decimal(col, name, value)

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{name} must be true or false", field=name)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if not isinstance(value, str):
            raise ValidationError(f"{name} must be a string", field=name)
        return value.strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: Any,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, Numeric precision/scale)
    - the policy allowlist and closed value sets
    - required_on_create (if partial=False)
    Returns a patch dict keyed by column key.

    Errors are raised for the first failing field, in payload order.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        for name in policy.required_on_create:
            if name not in payload:
                raise ValidationError(f"{name} is required", field=name)

    cols = _columns_by_key(model)
    patch: dict = {}

    for name, raw in payload.items():
        key = policy.aliases.get(name)
        if key is None:
            raise ValidationError(f"Field not allowed: {name}", field=name)
        col = cols[key]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{name} cannot be null", field=name)
            patch[key] = None
            continue

        val = _coerce_value(col, name, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable and val == "":
            raise ValidationError(f"{name} cannot be blank", field=name)

        allowed = policy.choices.get(name)
        if allowed is not None and val not in allowed:
            raise ValidationError(f"{name} must be one of: {', '.join(allowed)}", field=name)

        patch[key] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    for key, name in (
        ("quantity", "quantity"),
        ("cost_price", "costPrice"),
        ("sale_price", "salePrice"),
        ("min_stock", "minStock"),
    ):
        value = patch.get(key)
        if value is not None and value < 0:
            raise ValidationError(f"{name} must be >= 0", field=name)


def enforce_rules_sale(patch: dict) -> None:
    # A sale moves a positive quantity; the charged total may be zero (gift) but never negative
    if patch["quantity"] <= 0:
        raise ValidationError("quantity must be > 0", field="quantity")
    if patch["total_price"] < 0:
        raise ValidationError("totalPrice must be >= 0", field="totalPrice")
