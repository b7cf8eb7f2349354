"""Domain entities: auctions, bids and users."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Protocol

from auctionsvc.errors import BadRequestError


class ProductCondition(IntEnum):
    NEW = 1
    USED = 2
    REFURBISHED = 3


class AuctionStatus(IntEnum):
    ACTIVE = 0
    COMPLETED = 1


_VALID_CONDITIONS = frozenset(int(c) for c in ProductCondition)
_UUID36 = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_HEX32 = re.compile(r"[0-9a-fA-F]{32}")


def is_valid_uuid(value: object) -> bool:
    """Accept the canonical, braced, ``urn:uuid:`` and bare-hex UUID forms."""
    if not isinstance(value, str):
        return False
    match len(value):
        case 36:
            return bool(_UUID36.fullmatch(value))
        case 38:
            return value[0] == "{" and value[-1] == "}" and bool(_UUID36.fullmatch(value[1:-1]))
        case 45:
            return value[:9].lower() == "urn:uuid:" and bool(_UUID36.fullmatch(value[9:]))
        case 32:
            return bool(_HEX32.fullmatch(value))
        case _:
            return False


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Auction:
    id: str
    product_name: str
    category: str
    description: str
    condition: int
    status: AuctionStatus = AuctionStatus.ACTIVE
    timestamp: datetime = field(default_factory=_now)

    def validate(self) -> None:
        """Raise BadRequestError when the auction fields are not acceptable."""
        if (
            _byte_length(self.product_name) <= 1
            or _byte_length(self.category) <= 2
            or (
                _byte_length(self.description) <= 10
                and self.condition not in _VALID_CONDITIONS
            )
        ):
            raise BadRequestError("invalid auction object")


@dataclass
class Bid:
    id: str
    user_id: str
    auction_id: str
    amount: float
    timestamp: datetime = field(default_factory=_now)

    def validate(self) -> None:
        """Raise BadRequestError when the bid fields are not acceptable."""
        if not is_valid_uuid(self.user_id):
            raise BadRequestError("UserId is not a valid id")
        if not is_valid_uuid(self.auction_id):
            raise BadRequestError("AuctionId is not a valid id")
        if self.amount <= 0:
            raise BadRequestError("Amount is not a valid value")


@dataclass
class User:
    id: str
    name: str


def _as_condition(condition: int) -> int:
    try:
        return ProductCondition(condition)
    except ValueError:
        return int(condition)


def create_auction(
    product_name: str, category: str, description: str, condition: int
) -> Auction:
    """Create a new active auction stamped with the current time."""
    auction = Auction(
        id=_new_id(),
        product_name=product_name,
        category=category,
        description=description,
        condition=_as_condition(condition),
        status=AuctionStatus.ACTIVE,
        timestamp=_now(),
    )
    auction.validate()
    return auction


def create_bid(user_id: str, auction_id: str, amount: float) -> Bid:
    """Create a new bid stamped with the current time."""
    bid = Bid(
        id=_new_id(),
        user_id=user_id,
        auction_id=auction_id,
        amount=amount,
        timestamp=_now(),
    )
    bid.validate()
    return bid


class AuctionRepositoryProtocol(Protocol):
    """Storage for auctions."""

    def create_auction(self, auction: Auction) -> None:
        """Persist a new auction."""

    def find_auctions(
        self, status: AuctionStatus, category: str, product_name: str
    ) -> list[Auction]:
        """Return auctions matching the given filters."""

    def find_auction_by_id(self, auction_id: str) -> Auction:
        """Return the auction with the given id."""


class BidRepositoryProtocol(Protocol):
    """Storage for bids."""

    def create_bid(self, bids: list[Bid]) -> None:
        """Persist a batch of bids."""

    def find_bid_by_auction_id(self, auction_id: str) -> list[Bid]:
        """Return the bids placed on an auction."""

    def find_winning_bid_by_auction_id(self, auction_id: str) -> Bid:
        """Return the highest bid placed on an auction."""


class UserRepositoryProtocol(Protocol):
    """Storage for users."""

    def find_user_by_id(self, user_id: str) -> User:
        """Return the user with the given id."""