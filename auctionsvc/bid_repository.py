"""MongoDB storage for bids."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any

from pymongo.database import Database
from pymongo.errors import PyMongoError

from auctionsvc import logger
from auctionsvc.config import auction_interval as _default_auction_interval
from auctionsvc.entities import AuctionRepositoryProtocol, AuctionStatus, Bid
from auctionsvc.errors import InternalError, InternalServerError

_COLLECTION = "bids"
_MAX_WORKERS = 32


def bid_to_document(bid: Bid) -> dict[str, Any]:
    """Turn a bid into the document stored in the database."""
    return {
        "_id": bid.id,
        "user_id": bid.user_id,
        "auction_id": bid.auction_id,
        "amount": bid.amount,
        "timestamp": int(bid.timestamp.timestamp()),
    }


def bid_from_document(document: dict[str, Any]) -> Bid:
    """Rebuild a bid from its stored document."""
    return Bid(
        id=document["_id"],
        user_id=document.get("user_id", ""),
        auction_id=document.get("auction_id", ""),
        amount=document.get("amount", 0.0),
        timestamp=datetime.fromtimestamp(document.get("timestamp", 0), tz=timezone.utc),
    )


class BidRepository:
    """Bid persistence backed by the ``bids`` collection.

    Bids on auctions that are completed, or whose known end time has passed,
    are dropped. Auction status and end time are cached after the first lookup.
    """

    def __init__(
        self,
        database: Database,
        auction_repository: AuctionRepositoryProtocol,
        auction_interval: timedelta | None = None,
    ) -> None:
        self.collection = database[_COLLECTION]
        self.auction_repository = auction_repository
        self.auction_interval = (
            _default_auction_interval() if auction_interval is None else auction_interval
        )
        self._status_cache: dict[str, AuctionStatus] = {}
        self._end_time_cache: dict[str, datetime] = {}
        self._status_lock = threading.Lock()
        self._end_time_lock = threading.Lock()

    def create_bid(self, bids: list[Bid]) -> None:
        """Store a batch of bids concurrently, skipping those on closed auctions."""
        if not bids:
            return
        with ThreadPoolExecutor(max_workers=min(len(bids), _MAX_WORKERS)) as pool:
            list(pool.map(self._store_bid, bids))

    def _insert(self, bid: Bid) -> None:
        try:
            self.collection.insert_one(bid_to_document(bid))
        except PyMongoError as exc:
            logger.error("Error trying to insert bid", exc)

    def _store_bid(self, bid: Bid) -> None:
        with self._status_lock:
            status = self._status_cache.get(bid.auction_id)
        with self._end_time_lock:
            end_time = self._end_time_cache.get(bid.auction_id)

        if status is not None and end_time is not None:
            if status == AuctionStatus.COMPLETED or datetime.now(timezone.utc) > end_time:
                return
            self._insert(bid)
            return

        try:
            auction = self.auction_repository.find_auction_by_id(bid.auction_id)
        except InternalError as exc:
            logger.error("Error trying to find auction by id", exc)
            return
        if auction.status == AuctionStatus.COMPLETED:
            return

        with self._status_lock:
            self._status_cache[bid.auction_id] = auction.status
        with self._end_time_lock:
            self._end_time_cache[bid.auction_id] = auction.timestamp + self.auction_interval

        self._insert(bid)

    def find_bid_by_auction_id(self, auction_id: str) -> list[Bid]:
        """Return the bids stored for an auction."""
        message = f"Error trying to find bids by auctionId {auction_id}"
        try:
            documents = list(self.collection.find({"auctionId": auction_id}))
        except PyMongoError as exc:
            logger.error(message, exc)
            raise InternalServerError(message) from exc
        return [bid_from_document(document) for document in documents]

    def find_winning_bid_by_auction_id(self, auction_id: str) -> Bid:
        """Return the highest bid stored for an auction."""
        try:
            document = self.collection.find_one(
                {"auction_id": auction_id}, sort=[("amount", -1)]
            )
            failure: BaseException | None = None
        except PyMongoError as exc:
            document, failure = None, exc
        if document is None:
            logger.error(
                "Error trying to find the auction winner",
                failure or LookupError("no documents in result"),
            )
            raise InternalServerError("Error trying to find the auction winner")
        return bid_from_document(document)