import uuid
from datetime import datetime, timedelta, timezone

import pytest

from auctionsvc.entities import (
    Auction,
    AuctionStatus,
    Bid,
    ProductCondition,
    create_auction,
    create_bid,
    is_valid_uuid,
)
from auctionsvc.errors import BadRequestError, InternalError

LONG_DESCRIPTION = "A barely used road bike in good shape"


def test_enum_values_follow_source():
    used = create_auction("Bike", "Sports", LONG_DESCRIPTION, 2)
    refurbished = create_auction("Bike", "Sports", LONG_DESCRIPTION, 3)
    assert used.condition is ProductCondition.USED
    assert refurbished.condition is ProductCondition.REFURBISHED
    assert used.status == 0
    assert used.status is AuctionStatus.ACTIVE


def test_create_auction_valid():
    before = datetime.now(timezone.utc)
    auction = create_auction("Bike", "Sports", LONG_DESCRIPTION, ProductCondition.USED)
    assert auction.product_name == "Bike"
    assert auction.category == "Sports"
    assert auction.description == LONG_DESCRIPTION
    assert auction.condition is ProductCondition.USED
    assert auction.status is AuctionStatus.ACTIVE
    assert is_valid_uuid(auction.id)
    assert before - timedelta(seconds=1) <= auction.timestamp <= datetime.now(timezone.utc)


def test_create_auction_ids_are_unique():
    first = create_auction("Bike", "Sports", LONG_DESCRIPTION, 1)
    second = create_auction("Bike", "Sports", LONG_DESCRIPTION, 1)
    assert first.id != second.id
    assert first.condition is ProductCondition.NEW


@pytest.mark.parametrize(
    "name, category, description, condition",
    [
        ("B", "Sports", LONG_DESCRIPTION, 1),
        ("Bike", "ab", LONG_DESCRIPTION, 1),
        ("Bike", "Sports", "short", 0),
    ],
)
def test_create_auction_invalid(name, category, description, condition):
    with pytest.raises(BadRequestError) as info:
        create_auction(name, category, description, condition)
    assert str(info.value) == "invalid auction object"
    assert info.value.err == "bad_request"


def test_short_description_passes_with_known_condition():
    auction = create_auction("Bike", "Sports", "short", ProductCondition.REFURBISHED)
    assert auction.description == "short"


def test_unknown_condition_passes_with_long_description():
    auction = create_auction("Bike", "Sports", LONG_DESCRIPTION, 0)
    assert auction.condition == 0


def test_lengths_are_counted_in_bytes():
    auction = create_auction("\u00e9", "Sports", LONG_DESCRIPTION, 1)
    assert auction.product_name == "\u00e9"


def test_auction_validate_directly():
    auction = Auction(
        id=str(uuid.uuid4()),
        product_name="Bike",
        category="xy",
        description=LONG_DESCRIPTION,
        condition=1,
    )
    with pytest.raises(InternalError):
        auction.validate()
    auction.category = "Sports"
    auction.validate()
    assert auction.status is AuctionStatus.ACTIVE


def test_create_bid_valid():
    user_id, auction_id = str(uuid.uuid4()), str(uuid.uuid4())
    bid = create_bid(user_id, auction_id, 10.5)
    assert (bid.user_id, bid.auction_id, bid.amount) == (user_id, auction_id, 10.5)
    assert is_valid_uuid(bid.id)
    assert bid.timestamp.tzinfo is not None


@pytest.mark.parametrize(
    "user_id, auction_id, amount, message",
    [
        ("nope", str(uuid.uuid4()), 1.0, "UserId is not a valid id"),
        (str(uuid.uuid4()), "nope", 1.0, "AuctionId is not a valid id"),
        (str(uuid.uuid4()), str(uuid.uuid4()), 0.0, "Amount is not a valid value"),
        (str(uuid.uuid4()), str(uuid.uuid4()), -5.0, "Amount is not a valid value"),
        ("nope", "nope", -1.0, "UserId is not a valid id"),
    ],
)
def test_create_bid_invalid(user_id, auction_id, amount, message):
    with pytest.raises(BadRequestError) as info:
        create_bid(user_id, auction_id, amount)
    assert str(info.value) == message


def test_bid_validate_directly():
    bid = Bid(id="x", user_id=str(uuid.uuid4()), auction_id=str(uuid.uuid4()), amount=1)
    bid.validate()
    bid.amount = 0
    with pytest.raises(BadRequestError):
        bid.validate()


def test_is_valid_uuid_accepted_forms():
    value = uuid.uuid4()
    text = str(value)
    assert is_valid_uuid(text)
    assert is_valid_uuid(text.upper())
    assert is_valid_uuid("{" + text + "}")
    assert is_valid_uuid(value.urn)
    assert is_valid_uuid("URN:UUID:" + text)
    assert is_valid_uuid(value.hex)


@pytest.mark.parametrize(
    "value",
    ["", "not-a-uuid", None, 42],
)
def test_is_valid_uuid_rejects_garbage(value):
    assert is_valid_uuid(value) is False


def test_is_valid_uuid_rejects_near_misses():
    text = str(uuid.uuid4())
    assert not is_valid_uuid(text[:-1])
    assert not is_valid_uuid(text[:-1] + "g")
    assert not is_valid_uuid(text.replace("-", "_"))
    assert not is_valid_uuid("[" + text + "]")
    assert not is_valid_uuid("urn:uid::" + text)
    assert not is_valid_uuid(uuid.uuid4().hex[:-1] + "z")