"""Request handlers that turn use-case results into HTTP status and JSON bodies.

Each handler returns ``(status, body)``; ``body`` is a JSON-ready value, and is
``None`` for a 201 reply, which carries no body.
"""

from __future__ import annotations

import re
from http import HTTPStatus
from typing import Any

from auctionsvc.entities import is_valid_uuid
from auctionsvc.errors import Cause, InternalError, RestError, convert_error, rest_bad_request
from auctionsvc.validation import (
    BindingError,
    TypeMismatchError,
    bind_auction_input,
    bind_bid_input,
    validation_error_to_rest,
)

Reply = tuple[int, Any]

_DECIMAL = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_BIND_ERRORS = (BindingError, TypeMismatchError, ValueError)


def _failure(rest: RestError) -> Reply:
    return int(rest.code), rest.to_dict()


def _invalid_id(field: str) -> Reply:
    return _failure(rest_bad_request("Invalid fields", Cause(field, "Invalid UUID value")))


def _parse_int(text: str) -> int:
    if not _DECIMAL.fullmatch(text):
        raise ValueError(f"invalid integer {text!r}")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"integer out of range {text!r}")
    return value


def _list_body(items: list) -> list | None:
    return [item.to_dict() for item in items] or None


class AuctionController:
    """Handlers for the auction endpoints."""

    def __init__(self, auction_use_case) -> None:
        self.auction_use_case = auction_use_case

    def create_auction(self, payload: Any) -> Reply:
        try:
            auction_input = bind_auction_input(payload)
        except _BIND_ERRORS as exc:
            return _failure(validation_error_to_rest(exc))
        try:
            self.auction_use_case.create_auction(auction_input)
        except InternalError as exc:
            return _failure(convert_error(exc))
        return int(HTTPStatus.CREATED), None

    def find_auction_by_id(self, auction_id: str) -> Reply:
        if not is_valid_uuid(auction_id):
            return _invalid_id("auctionId")
        try:
            auction = self.auction_use_case.find_auction_by_id(auction_id)
        except InternalError as exc:
            return _failure(convert_error(exc))
        return int(HTTPStatus.OK), auction.to_dict()

    def find_auctions(self, status: str, category: str, product_name: str) -> Reply:
        try:
            status_number = _parse_int(status)
        except ValueError:
            return _failure(
                rest_bad_request("Error trying to validate auction status param")
            )
        try:
            auctions = self.auction_use_case.find_auctions(
                status_number, category, product_name
            )
        except InternalError as exc:
            return _failure(convert_error(exc))
        return int(HTTPStatus.OK), _list_body(auctions)

    def find_winning_bid_by_auction_id(self, auction_id: str) -> Reply:
        if not is_valid_uuid(auction_id):
            return _invalid_id("auctionId")
        try:
            info = self.auction_use_case.find_winning_bid_by_auction_id(auction_id)
        except InternalError as exc:
            return _failure(convert_error(exc))
        return int(HTTPStatus.OK), info.to_dict()


class BidController:
    """Handlers for the bid endpoints."""

    def __init__(self, bid_use_case) -> None:
        self.bid_use_case = bid_use_case

    def create_bid(self, payload: Any) -> Reply:
        try:
            bid_input = bind_bid_input(payload)
        except _BIND_ERRORS as exc:
            return _failure(validation_error_to_rest(exc))
        try:
            self.bid_use_case.create_bid(bid_input)
        except InternalError as exc:
            return _failure(convert_error(exc))
        return int(HTTPStatus.CREATED), None

    def find_bid_by_auction_id(self, auction_id: str) -> Reply:
        if not is_valid_uuid(auction_id):
            return _invalid_id("auctionId")
        try:
            bids = self.bid_use_case.find_bid_by_auction_id(auction_id)
        except InternalError as exc:
            return _failure(convert_error(exc))
        return int(HTTPStatus.OK), _list_body(bids)


class UserController:
    """Handlers for the user endpoints."""

    def __init__(self, user_use_case) -> None:
        self.user_use_case = user_use_case

    def find_user_by_id(self, user_id: str) -> Reply:
        if not is_valid_uuid(user_id):
            return _invalid_id("userId")
        try:
            user = self.user_use_case.find_user_by_id(user_id)
        except InternalError as exc:
            return _failure(convert_error(exc))
        return int(HTTPStatus.OK), user.to_dict()