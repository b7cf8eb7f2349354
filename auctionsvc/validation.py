"""Decoding and validation of JSON request bodies."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Callable

from auctionsvc.auction_usecase import AuctionInput
from auctionsvc.bid_usecase import BidInput
from auctionsvc.errors import Cause, RestError, rest_bad_request, rest_not_found

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_JSON_WHITESPACE = " \t\n\r"
_CONDITION_CHOICES = (0, 1, 2)


@dataclass(frozen=True)
class FieldError:
    """One failed validation rule on one input field."""

    field: str
    tag: str
    message: str


class BindingError(Exception):
    """The body decoded, but some fields broke their validation rules."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(e.message for e in self.errors))


class TypeMismatchError(Exception):
    """A JSON value has a type that the target field cannot hold."""

    def __init__(self, field: str, found: str, expected: str) -> None:
        self.field = field
        self.found = found
        self.expected = expected
        super().__init__(f"cannot unmarshal {found} into field {field} of type {expected}")


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid character in JSON value {name}")


def _decode(payload: Any) -> Any:
    """Decode the first JSON value of a body; anything after it is ignored."""
    if isinstance(payload, (bytes, bytearray)):
        payload = bytes(payload).decode("utf-8", errors="replace")
    if not isinstance(payload, str):
        return payload
    text = payload.lstrip(_JSON_WHITESPACE)
    if not text:
        raise ValueError("empty request body")
    decoder = json.JSONDecoder(parse_constant=_reject_constant)
    value, _ = decoder.raw_decode(text)
    return value


def _to_string(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise TypeMismatchError(name, _kind(value), "string")
    return value


def _to_int64(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeMismatchError(name, _kind(value), "int64")
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise TypeMismatchError(name, "number", "int64")
    return value


def _to_float64(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeMismatchError(name, _kind(value), "float64")
    try:
        number = float(value)
    except OverflowError as exc:
        raise TypeMismatchError(name, "number", "float64") from exc
    if math.isinf(number):
        raise TypeMismatchError(name, "number", "float64")
    return number


@dataclass(frozen=True)
class _Field:
    json_name: str
    attr: str
    convert: Callable[[str, Any], Any]


def _lookup(fields: tuple[_Field, ...], key: str) -> _Field | None:
    for spec in fields:
        if spec.json_name == key:
            return spec
    folded = key.lower()
    for spec in fields:
        if spec.json_name.lower() == folded:
            return spec
    return None


def _bind(payload: Any, fields: tuple[_Field, ...], type_name: str) -> dict[str, Any]:
    document = _decode(payload)
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise TypeMismatchError(type_name, _kind(document), type_name)
    values: dict[str, Any] = {}
    for key, value in document.items():
        spec = _lookup(fields, key)
        if spec is None or value is None:
            continue
        values[spec.attr] = spec.convert(spec.json_name, value)
    return values


def _characters(count: int) -> str:
    return f"{count} character" if count == 1 else f"{count} characters"


def _check_text(
    field: str, value: str, minimum: int, maximum: int | None = None
) -> FieldError | None:
    if not value:
        return FieldError(field, "required", f"{field} is a required field")
    length = len(value)
    if length < minimum:
        return FieldError(
            field, "min", f"{field} must be at least {_characters(minimum)} in length"
        )
    if maximum is not None and length > maximum:
        return FieldError(
            field, "max", f"{field} must be a maximum of {_characters(maximum)} in length"
        )
    return None


_AUCTION_FIELDS = (
    _Field("product_name", "product_name", _to_string),
    _Field("category", "category", _to_string),
    _Field("description", "description", _to_string),
    _Field("condition", "condition", _to_int64),
)

_BID_FIELDS = (
    _Field("user_id", "user_id", _to_string),
    _Field("auction_id", "auction_id", _to_string),
    _Field("amount", "amount", _to_float64),
)


def bind_auction_input(payload: Any) -> AuctionInput:
    """Decode and validate the body of an auction creation request."""
    values = _bind(payload, _AUCTION_FIELDS, "AuctionInputDTO")
    auction_input = AuctionInput(
        product_name=values.get("product_name", ""),
        category=values.get("category", ""),
        description=values.get("description", ""),
        condition=values.get("condition", 0),
    )
    checks = [
        _check_text("ProductName", auction_input.product_name, 1),
        _check_text("Category", auction_input.category, 2),
        _check_text("Description", auction_input.description, 10, 200),
    ]
    if auction_input.condition not in _CONDITION_CHOICES:
        choices = " ".join(str(c) for c in _CONDITION_CHOICES)
        checks.append(
            FieldError("Condition", "oneof", f"Condition must be one of [{choices}]")
        )
    errors = [check for check in checks if check is not None]
    if errors:
        raise BindingError(errors)
    return auction_input


def bind_bid_input(payload: Any) -> BidInput:
    """Decode the body of a bid creation request."""
    values = _bind(payload, _BID_FIELDS, "BidInputDTO")
    return BidInput(
        user_id=values.get("user_id", ""),
        auction_id=values.get("auction_id", ""),
        amount=values.get("amount", 0.0),
    )


def validation_error_to_rest(error: BaseException) -> RestError:
    """Turn a decoding or validation failure into a REST error."""
    if isinstance(error, TypeMismatchError):
        return rest_not_found("Invalid type error")
    if isinstance(error, BindingError):
        causes = [Cause(e.field, e.message) for e in error.errors]
        return rest_bad_request("Invalid field values", *causes)
    return rest_bad_request("Error trying to convert fields")