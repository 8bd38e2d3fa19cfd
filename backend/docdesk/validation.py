from __future__ import annotations
import re
import types
from decimal import Decimal, InvalidOperation

from dataclasses import dataclass, fields
from typing import Any, Union, get_args, get_origin, get_type_hints

from .time_utils import parse_iso_date


# Maximum price: $9,999,999.99 (999,999,999 cents)
# This prevents overflow issues and nonsensical prices
MAX_PRICE_CENTS = 999_999_999

# Largest quantity accepted on a single document line
MAX_LINE_QUANTITY = 1_000_000

LOGO_POSITIONS = {"left", "center", "right"}
HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate product code)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - read_only_fields: accepted in payloads (clients echo them back) but dropped
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore
    read_only_fields: set[str] | None = None


def _field_types(model) -> dict[str, Any]:
    hints = get_type_hints(model)
    return {f.name: hints[f.name] for f in fields(model)}


def _unwrap_optional(hint) -> tuple[Any, bool]:
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(hint) if a is not type(None)]
        return args[0], len(args) < len(get_args(hint))
    return hint, False


def _coerce_value(key: str, hint, value: Any):
    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if hint is int:
        # Already an int (but not bool which is a subclass of int)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        # String input - must be plain digits (with optional leading minus)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{key} must be an integer")
            # Reject scientific notation (e.g., "1e15", "1E10")
            if 'e' in stripped.lower():
                raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
            # Reject decimal points (e.g., "12.5")
            if '.' in stripped:
                raise ValidationError(f"{key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{key} must be an integer")
        # Reject floats explicitly
        if isinstance(value, float):
            raise ValidationError(f"{key} must be an integer, not a decimal")
        # Other types
        raise ValidationError(f"{key} must be an integer")

    # Decimal numbers (tax rates)
    if hint is float:
        if isinstance(value, bool):
            raise ValidationError(f"{key} must be a number")
        if isinstance(value, (int, float)):
            return value
        if isinstance(value, str):
            try:
                parsed = Decimal(value.strip())
            except InvalidOperation:
                raise ValidationError(f"{key} must be a number")
            if not parsed.is_finite():
                raise ValidationError(f"{key} must be a number")
            return int(parsed) if parsed == parsed.to_integral_value() else float(parsed)
        raise ValidationError(f"{key} must be a number")

    # Booleans
    if hint is bool:
        if isinstance(value, bool):
            return value
        # fallback: truthiness
        return bool(value)

    # Strings
    if hint is str:
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{key} must be a string")
        return str(value).strip()

    # Default: leave as-is (nested lists are validated by their own policy)
    return value


def validate_payload(
    *,
    model,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - the record dataclass field annotations (type, optional)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    types_by_key = _field_types(model)
    read_only = policy.read_only_fields or set()

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k in read_only:
            continue
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in types_by_key:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        if k in read_only:
            continue
        hint, nullable = _unwrap_optional(types_by_key[k])

        # NULL handling
        if raw is None:
            if not nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(k, hint, raw)

        # Blank string check for required text fields
        if k in required and isinstance(val, str) and val == "":
            raise ValidationError(f"{k} cannot be blank")

        patch[k] = val

    return patch


def enforce_rules_product(patch: dict) -> None:
    """
    Business rules that are not captured by field annotations alone.
    Keep these small and centralized.
    """
    if "code" in patch and not patch["code"]:
        raise ValidationError("code cannot be blank")
    if "price_cents" in patch and patch["price_cents"] is not None:
        price = patch["price_cents"]
        # Range checks
        if price < 0:
            raise ValidationError("price_cents must be >= 0")
        if price > MAX_PRICE_CENTS:
            raise ValidationError(f"price_cents cannot exceed {MAX_PRICE_CENTS} (${MAX_PRICE_CENTS / 100:,.2f})")


def enforce_rules_client(patch: dict) -> None:
    if "name" in patch and not patch["name"]:
        raise ValidationError("name cannot be blank")


def enforce_rules_item(patch: dict) -> None:
    # Lines require qty > 0 and a non-negative unit price
    if "quantity" in patch:
        qty = patch["quantity"]
        if qty is None or qty <= 0:
            raise ValidationError("quantity must be > 0")
        if qty > MAX_LINE_QUANTITY:
            raise ValidationError(f"quantity cannot exceed {MAX_LINE_QUANTITY}")

    if "unit_price_cents" in patch and patch["unit_price_cents"] is not None:
        price = patch["unit_price_cents"]
        if price < 0:
            raise ValidationError("unit_price_cents must be >= 0")
        if price > MAX_PRICE_CENTS:
            raise ValidationError(f"unit_price_cents cannot exceed {MAX_PRICE_CENTS}")


def enforce_rules_tax_rate(key: str, rate) -> None:
    if rate is None:
        raise ValidationError(f"{key} cannot be null")
    if rate < 0:
        raise ValidationError(f"{key} must be >= 0")


def enforce_rules_document(patch: dict, document_types) -> None:
    if "type" in patch:
        doc_type = (patch["type"] or "").upper()
        if doc_type not in document_types:
            raise ValidationError(f"Invalid type. Must be one of: {', '.join(document_types)}")
        patch["type"] = doc_type

    if "tax_rate" in patch:
        enforce_rules_tax_rate("tax_rate", patch["tax_rate"])

    if "date" in patch and not patch["date"]:
        raise ValidationError("date cannot be blank")

    for key in ("date", "due_date"):
        if patch.get(key):
            try:
                parse_iso_date(patch[key])
            except ValueError:
                raise ValidationError(f"{key} must be an ISO-8601 date (YYYY-MM-DD)")


def enforce_rules_settings(patch: dict) -> None:
    for key in ("next_quote_number", "next_delivery_number"):
        if key in patch and (patch[key] is None or patch[key] < 1):
            raise ValidationError(f"{key} must be a positive integer")

    if "default_tax_rate" in patch:
        enforce_rules_tax_rate("default_tax_rate", patch["default_tax_rate"])

    if "logo_position" in patch and patch["logo_position"] not in LOGO_POSITIONS:
        raise ValidationError(f"logo_position must be one of: {', '.join(sorted(LOGO_POSITIONS))}")

    if "primary_color" in patch and not HEX_COLOR_RE.match(patch["primary_color"] or ""):
        raise ValidationError("primary_color must be a hex color like #0369a1")
