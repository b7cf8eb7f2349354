"""Use cases for placing and querying bids, with batched persistence."""

from __future__ import annotations

import queue
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from auctionsvc import entities, logger
from auctionsvc.config import env_duration, env_int
from auctionsvc.entities import Bid, BidRepositoryProtocol

_STOP = object()


def _json_time(moment: datetime) -> str:
    """Render a timestamp in RFC 3339 form with trailing fractional zeros dropped."""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if moment.microsecond:
        text += "." + f"{moment.microsecond:06d}".rstrip("0")
    offset = moment.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def max_batch_size_from_env() -> int:
    """Bids per batch (``MAX_BATCH_SIZE``, default 5)."""
    return env_int("MAX_BATCH_SIZE", 5)


def batch_insert_interval_from_env() -> timedelta:
    """Longest wait before a partial batch is written (``BATCH_INSERT_INTERVAL``, default 3 minutes)."""
    return env_duration("BATCH_INSERT_INTERVAL", timedelta(minutes=3))


@dataclass
class BidInput:
    user_id: str
    auction_id: str
    amount: float


@dataclass
class BidOutput:
    id: str
    user_id: str
    auction_id: str
    amount: float
    timestamp: datetime

    @classmethod
    def from_bid(cls, bid: Bid) -> BidOutput:
        return cls(
            id=bid.id,
            user_id=bid.user_id,
            auction_id=bid.auction_id,
            amount=bid.amount,
            timestamp=bid.timestamp,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "auction_id": self.auction_id,
            "amount": self.amount,
            "timestamp": _json_time(self.timestamp),
        }


class BidUseCase:
    """Accepts bids and writes them to the repository in batches from a worker thread.

    A batch is written once it reaches ``max_batch_size`` bids, or when
    ``batch_insert_interval`` passes without a full batch.
    """

    def __init__(
        self,
        bid_repository: BidRepositoryProtocol,
        max_batch_size: int | None = None,
        batch_insert_interval: timedelta | None = None,
    ) -> None:
        if max_batch_size is None:
            max_batch_size = max_batch_size_from_env()
        if batch_insert_interval is None:
            batch_insert_interval = batch_insert_interval_from_env()
        if max_batch_size < 0:
            raise ValueError("max_batch_size must not be negative")
        self.bid_repository = bid_repository
        self._max_batch_size = max_batch_size
        self._interval = batch_insert_interval.total_seconds()
        self._queue: queue.Queue = queue.Queue(maxsize=max(max_batch_size, 1))
        self._closed = False
        self._close_lock = threading.Lock()
        self._worker = threading.Thread(
            target=self._run, name="bid-batcher", daemon=True
        )
        self._worker.start()

    def __enter__(self) -> BidUseCase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _flush(self, batch: list[Bid]) -> None:
        try:
            self.bid_repository.create_bid(batch)
        except Exception as exc:  # the worker must outlive a failed batch
            logger.error("error trying to process bid batch list", exc)

    def _run(self) -> None:
        batch: list[Bid] = []
        deadline = time.monotonic() + self._interval
        while True:
            timeout = max(0.0, deadline - time.monotonic())
            try:
                item = self._queue.get(timeout=timeout)
            except queue.Empty:
                self._flush(batch)
                batch = []
                deadline = time.monotonic() + self._interval
                continue
            if item is _STOP:
                if batch:
                    self._flush(batch)
                return
            batch.append(item)
            if len(batch) >= self._max_batch_size:
                self._flush(batch)
                batch = []
                deadline = time.monotonic() + self._interval

    def create_bid(self, bid_input: BidInput) -> None:
        """Validate a bid and queue it for the next batch."""
        if self._closed:
            raise RuntimeError("bid use case is closed")
        bid = entities.create_bid(
            bid_input.user_id, bid_input.auction_id, bid_input.amount
        )
        self._queue.put(bid)

    def find_bid_by_auction_id(self, auction_id: str) -> list[BidOutput]:
        """Return every bid stored for an auction."""
        bids = self.bid_repository.find_bid_by_auction_id(auction_id)
        return [BidOutput.from_bid(bid) for bid in bids]

    def find_winning_bid_by_auction_id(self, auction_id: str) -> BidOutput:
        """Return the highest bid stored for an auction."""
        bid = self.bid_repository.find_winning_bid_by_auction_id(auction_id)
        return BidOutput.from_bid(bid)

    def close(self) -> None:
        """Stop the worker, writing any bids still waiting in the batch."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._queue.put(_STOP)
        self._worker.join()