"""MongoDB storage for auctions, including automatic expiry."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Any

from pymongo.database import Database
from pymongo.errors import PyMongoError

from auctionsvc import logger
from auctionsvc.config import auction_interval as _default_auction_interval
from auctionsvc.entities import Auction, AuctionStatus, ProductCondition
from auctionsvc.errors import InternalServerError

_COLLECTION = "auctions"


def _as_condition(value: int) -> int:
    try:
        return ProductCondition(value)
    except ValueError:
        return int(value)


def _as_status(value: int) -> int:
    try:
        return AuctionStatus(value)
    except ValueError:
        return int(value)


def auction_to_document(auction: Auction) -> dict[str, Any]:
    """Turn an auction into the document stored in the database."""
    return {
        "_id": auction.id,
        "product_name": auction.product_name,
        "category": auction.category,
        "description": auction.description,
        "condition": int(auction.condition),
        "status": int(auction.status),
        "timestamp": int(auction.timestamp.timestamp()),
    }


def auction_from_document(document: dict[str, Any]) -> Auction:
    """Rebuild an auction from its stored document."""
    return Auction(
        id=document["_id"],
        product_name=document.get("product_name", ""),
        category=document.get("category", ""),
        description=document.get("description", ""),
        condition=_as_condition(document.get("condition", 0)),
        status=_as_status(document.get("status", 0)),
        timestamp=datetime.fromtimestamp(document.get("timestamp", 0), tz=timezone.utc),
    )


class AuctionRepository:
    """Auction persistence backed by the ``auctions`` collection."""

    def __init__(self, database: Database, auction_interval: timedelta | None = None) -> None:
        self.collection = database[_COLLECTION]
        self.auction_interval = (
            _default_auction_interval() if auction_interval is None else auction_interval
        )
        self._timers: set[threading.Timer] = set()
        self._timers_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._scheduler: threading.Thread | None = None

    def create_auction(self, auction: Auction) -> None:
        """Store a new auction and arrange for it to close once its interval passes."""
        document = auction_to_document(auction)
        try:
            self.collection.insert_one(document)
        except PyMongoError as exc:
            logger.error("Error trying to insert auction", exc)
            raise InternalServerError("Error trying to insert auction") from exc

        timer = threading.Timer(
            self.auction_interval.total_seconds(), self._close_auction, args=(auction.id,)
        )
        timer.daemon = True
        with self._timers_lock:
            self._timers.add(timer)
        timer.start()

    def _close_auction(self, auction_id: str) -> None:
        with self._timers_lock:
            self._timers = {t for t in self._timers if t.is_alive() and t is not threading.current_thread()}
        try:
            self.collection.update_one(
                {"_id": auction_id},
                {"$set": {"status": int(AuctionStatus.COMPLETED)}},
            )
        except PyMongoError as exc:
            logger.error("Error updating auction status", exc)
            return
        logger.info("Auction closed automatically")

    def find_auction_by_id(self, auction_id: str) -> Auction:
        """Return the auction with the given id."""
        try:
            document = self.collection.find_one({"_id": auction_id})
            failure: BaseException | None = None
        except PyMongoError as exc:
            document, failure = None, exc
        if document is None:
            logger.error(
                f"Error trying to find auction by id = {auction_id}",
                failure or LookupError("no documents in result"),
            )
            raise InternalServerError("Error trying to find auction by id")
        return auction_from_document(document)

    def find_auctions(self, status: int, category: str, product_name: str) -> list[Auction]:
        """Return auctions filtered by status, category and product name."""
        query: dict[str, Any] = {}
        if status != 0:
            query["status"] = int(status)
        if category:
            query["category"] = category
        if product_name:
            query["productName"] = {"$regex": product_name, "$options": "i"}

        try:
            cursor = self.collection.find(query)
        except PyMongoError as exc:
            logger.error("Error finding auctions", exc)
            raise InternalServerError("Error finding auctions") from exc
        try:
            documents = list(cursor)
        except PyMongoError as exc:
            logger.error("Error decoding auctions", exc)
            raise InternalServerError("Error decoding auctions") from exc
        return [auction_from_document(document) for document in documents]

    def expire_auctions(self) -> int:
        """Complete every active auction older than the auction interval; return how many."""
        expiration = int(
            (datetime.now(timezone.utc) - self.auction_interval).timestamp()
        )
        try:
            result = self.collection.update_many(
                {"status": int(AuctionStatus.ACTIVE), "timestamp": {"$lte": expiration}},
                {"$set": {"status": int(AuctionStatus.COMPLETED)}},
            )
        except PyMongoError as exc:
            logger.error("Error trying to expire auctions in scheduler", exc)
            return 0
        modified = result.modified_count
        if modified > 0:
            logger.info(f"Scheduler: {modified} auction(s) expired automatically")
        return modified

    def start_expiration_scheduler(self, period: timedelta = timedelta(minutes=1)) -> None:
        """Run :meth:`expire_auctions` every ``period`` in a background thread."""
        if self._scheduler is not None and self._scheduler.is_alive():
            return
        self._stop_event.clear()
        seconds = period.total_seconds()

        def loop() -> None:
            while not self._stop_event.wait(seconds):
                self.expire_auctions()

        self._scheduler = threading.Thread(target=loop, name="auction-expiry", daemon=True)
        self._scheduler.start()

    def stop(self) -> None:
        """Stop the scheduler and cancel pending automatic closings."""
        self._stop_event.set()
        if self._scheduler is not None:
            self._scheduler.join()
            self._scheduler = None
        with self._timers_lock:
            timers, self._timers = self._timers, set()
        for timer in timers:
            timer.cancel()