from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import InvalidArgumentError

# Largest value an INTEGER column holds on every supported backend (Postgres int4)
MAX_DB_INT = 2**31 - 1


def id_in_range(row_id: int) -> bool:
    """False for ids no INTEGER primary key can hold; such rows cannot exist."""
    return 0 < row_id <= MAX_DB_INT


@dataclass(frozen=True)
class LineItemRequest:
    """One (medicine, quantity) pair of a transaction request."""
    medicine_id: int
    quantity: int


def require_int(value: Any, field: str, *, minimum: int | None = None, maximum: int | None = None) -> int:
    """
    Strict integer coercion for ids and quantities.

    Accepts ints and plain digit strings. Rejects booleans, floats,
    decimals ("12.5") and scientific notation ("1e3").
    """
    if value is None:
        raise InvalidArgumentError(f"{field} is required", {"field": field})

    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise InvalidArgumentError(f"{field} must be an integer", {"field": field})
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise InvalidArgumentError(f"{field} must be a plain integer (scientific notation not allowed)", {"field": field})
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise InvalidArgumentError(f"{field} must be an integer (no decimals)", {"field": field})
        try:
            result = int(stripped)
        except ValueError:
            raise InvalidArgumentError(f"{field} must be an integer", {"field": field})
    elif isinstance(value, float):
        raise InvalidArgumentError(f"{field} must be an integer, not a decimal", {"field": field})
    else:
        raise InvalidArgumentError(f"{field} must be an integer", {"field": field})

    if minimum is not None and result < minimum:
        comparison = "> 0" if minimum == 1 else f">= {minimum}"
        raise InvalidArgumentError(f"{field} must be {comparison}", {"field": field, "value": result})
    if maximum is not None and result > maximum:
        raise InvalidArgumentError(f"{field} must be <= {maximum}", {"field": field, "value": result})
    return result


def require_positive_int(value: Any, field: str) -> int:
    return require_int(value, field, minimum=1)


def require_text(value: Any, field: str, *, max_length: int | None = None) -> str:
    if value is None:
        raise InvalidArgumentError(f"{field} is required", {"field": field})
    text = str(value).strip()
    if text == "":
        raise InvalidArgumentError(f"{field} cannot be blank", {"field": field})
    if max_length and len(text) > max_length:
        raise InvalidArgumentError(f"{field} exceeds max length {max_length}", {"field": field})
    return text


def optional_text(value: Any, field: str, *, max_length: int | None = None) -> str | None:
    """None and blank strings both mean "not provided"."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{field} must be a string", {"field": field})
    text = value.strip()
    if text == "":
        return None
    if max_length and len(text) > max_length:
        raise InvalidArgumentError(f"{field} exceeds max length {max_length}", {"field": field})
    return text


def parse_line_items(items: Any) -> list[LineItemRequest]:
    """
    Validate the items of a transaction request.

    Accepts LineItemRequest instances, (medicine_id, quantity) pairs, or
    {"medicine_id": ..., "quantity": ...} dicts. The list must be non-empty
    and every quantity must be > 0.
    """
    if items is None or isinstance(items, (str, bytes, dict)):
        raise InvalidArgumentError("items must be a non-empty list", {"field": "items"})
    items = list(items)
    if not items:
        raise InvalidArgumentError("items must contain at least one line item", {"field": "items"})

    parsed: list[LineItemRequest] = []
    for index, raw in enumerate(items):
        if isinstance(raw, LineItemRequest):
            medicine_id, quantity = raw.medicine_id, raw.quantity
        elif isinstance(raw, dict):
            medicine_id, quantity = raw.get("medicine_id"), raw.get("quantity")
        elif isinstance(raw, (tuple, list)) and len(raw) == 2:
            medicine_id, quantity = raw
        else:
            raise InvalidArgumentError(
                f"items[{index}] must be an object with medicine_id and quantity",
                {"field": "items", "index": index},
            )
        parsed.append(
            LineItemRequest(
                medicine_id=require_int(medicine_id, f"items[{index}].medicine_id", minimum=1),
                quantity=require_positive_int(quantity, f"items[{index}].quantity"),
            )
        )
    return parsed


def require_json_object(payload: Any) -> dict:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise InvalidArgumentError("Invalid JSON payload")
    return payload
