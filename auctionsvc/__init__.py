"""Auction service: auctions, batched bids, user lookup and automatic expiry over HTTP."""

__version__ = "0.1.0"