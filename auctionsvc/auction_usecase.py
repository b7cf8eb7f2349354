"""Use cases for creating and querying auctions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from auctionsvc import entities, logger
from auctionsvc.bid_usecase import BidOutput, _json_time
from auctionsvc.entities import (
    Auction,
    AuctionRepositoryProtocol,
    BidRepositoryProtocol,
)
from auctionsvc.errors import InternalError


@dataclass
class AuctionInput:
    product_name: str
    category: str
    description: str
    condition: int = 0


@dataclass
class AuctionOutput:
    id: str
    product_name: str
    category: str
    description: str
    condition: int
    status: int
    timestamp: datetime

    @classmethod
    def from_auction(cls, auction: Auction) -> AuctionOutput:
        return cls(
            id=auction.id,
            product_name=auction.product_name,
            category=auction.category,
            description=auction.description,
            condition=int(auction.condition),
            status=int(auction.status),
            timestamp=auction.timestamp,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "product_name": self.product_name,
            "category": self.category,
            "description": self.description,
            "condition": self.condition,
            "status": self.status,
            "timestamp": _json_time(self.timestamp),
        }


@dataclass
class WinningInfoOutput:
    auction: AuctionOutput
    bid: BidOutput | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"auction": self.auction.to_dict()}
        if self.bid is not None:
            result["bid"] = self.bid.to_dict()
        return result


class AuctionUseCase:
    """Application operations on auctions."""

    def __init__(
        self,
        auction_repository: AuctionRepositoryProtocol,
        bid_repository: BidRepositoryProtocol,
    ) -> None:
        self.auction_repository = auction_repository
        self.bid_repository = bid_repository

    def create_auction(self, auction_input: AuctionInput) -> None:
        """Validate and store a new auction."""
        auction = entities.create_auction(
            auction_input.product_name,
            auction_input.category,
            auction_input.description,
            auction_input.condition,
        )
        self.auction_repository.create_auction(auction)

    def find_auction_by_id(self, auction_id: str) -> AuctionOutput:
        """Return one auction."""
        return AuctionOutput.from_auction(
            self.auction_repository.find_auction_by_id(auction_id)
        )

    def find_auctions(
        self, status: int, category: str, product_name: str
    ) -> list[AuctionOutput]:
        """Return the auctions matching the given filters."""
        auctions = self.auction_repository.find_auctions(status, category, product_name)
        return [AuctionOutput.from_auction(auction) for auction in auctions]

    def find_winning_bid_by_auction_id(self, auction_id: str) -> WinningInfoOutput:
        """Return an auction together with its highest bid, if any bid is found."""
        auction = self.auction_repository.find_auction_by_id(auction_id)
        auction_output = AuctionOutput.from_auction(auction)
        try:
            winner = self.bid_repository.find_winning_bid_by_auction_id(auction.id)
        except InternalError as exc:
            logger.error("", exc)
            return WinningInfoOutput(auction=auction_output, bid=None)
        return WinningInfoOutput(auction=auction_output, bid=BidOutput.from_bid(winner))