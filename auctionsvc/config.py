"""Environment-driven settings and the database connection."""

from __future__ import annotations

import os
import re
from datetime import timedelta
from fractions import Fraction

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from auctionsvc import logger

MONGODB_URL = "MONGODB_URL"
MONGODB_DB = "MONGODB_DB"

_UNIT_NANOS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_MAX_NANOS = 2**63 - 1
_COMPONENT = re.compile(r"([0-9]*)(?:\.([0-9]*))?([^0-9.]*)")
_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``"300ms"``, ``"-1.5h"`` or ``"2h45m"``."""
    rest = text
    negative = False
    if rest and rest[0] in "+-":
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ValueError(f"invalid duration {text!r}")

    total = Fraction(0)
    while rest:
        match = _COMPONENT.match(rest)
        whole, fraction, unit = match.group(1), match.group(2), match.group(3)
        if not whole and not fraction:
            raise ValueError(f"invalid duration {text!r}")
        if not unit:
            raise ValueError(f"missing unit in duration {text!r}")
        if unit not in _UNIT_NANOS:
            raise ValueError(f"unknown unit {unit!r} in duration {text!r}")
        value = Fraction(int(whole or "0"))
        if fraction:
            value += Fraction(int(fraction), 10 ** len(fraction))
        total += value * _UNIT_NANOS[unit]
        if total > _MAX_NANOS:
            raise ValueError(f"invalid duration {text!r}")
        rest = rest[match.end():]

    micros = int(total) // 1000
    result = timedelta(microseconds=micros)
    return -result if negative else result


def env_duration(name: str, default: timedelta) -> timedelta:
    """Read a duration from the environment, falling back on a bad or missing value."""
    try:
        return parse_duration(os.environ.get(name, ""))
    except ValueError:
        return default


def env_int(name: str, default: int) -> int:
    """Read a decimal integer from the environment, falling back on a bad or missing value."""
    value = os.environ.get(name, "")
    if not _INTEGER.fullmatch(value):
        return default
    return int(value)


def auction_interval() -> timedelta:
    """How long an auction stays open (``AUCTION_INTERVAL``, default five minutes)."""
    return env_duration("AUCTION_INTERVAL", timedelta(minutes=5))


def connect_database() -> Database:
    """Connect to MongoDB using ``MONGODB_URL`` and ``MONGODB_DB`` and verify it answers."""
    url = os.environ.get(MONGODB_URL, "")
    name = os.environ.get(MONGODB_DB, "")
    try:
        client = MongoClient(url)
    except PyMongoError as exc:
        logger.error("Error trying to connect to mongodb database", exc)
        raise
    try:
        client.admin.command("ping")
    except PyMongoError as exc:
        logger.error("Error trying to ping mongodb database", exc)
        client.close()
        raise
    return client[name]