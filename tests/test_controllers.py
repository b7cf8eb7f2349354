import uuid
from datetime import datetime, timezone

import pytest

from auctionsvc.auction_usecase import AuctionInput, AuctionOutput, WinningInfoOutput
from auctionsvc.bid_usecase import BidInput, BidOutput
from auctionsvc.controllers import AuctionController, BidController, UserController
from auctionsvc.errors import BadRequestError, InternalServerError, NotFoundError
from auctionsvc.user_usecase import UserOutput

WHEN = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
AUCTION_ID = str(uuid.uuid4())
USER_ID = str(uuid.uuid4())

GOOD_AUCTION = {
    "product_name": "Phone",
    "category": "tech",
    "description": "A very good phone indeed",
    "condition": 1,
}


def make_auction():
    return AuctionOutput(AUCTION_ID, "Phone", "tech", "A very good phone indeed", 1, 0, WHEN)


def make_bid():
    return BidOutput(str(uuid.uuid4()), USER_ID, AUCTION_ID, 100.0, WHEN)


class FakeAuctionUseCase:
    def __init__(self, error=None, auctions=None, winner=None):
        self.error = error
        self.auctions = auctions or []
        self.winner = winner
        self.created = []
        self.queries = []

    def _raise(self):
        if self.error is not None:
            raise self.error

    def create_auction(self, auction_input):
        self._raise()
        self.created.append(auction_input)

    def find_auction_by_id(self, auction_id):
        self._raise()
        return make_auction()

    def find_auctions(self, status, category, product_name):
        self._raise()
        self.queries.append((status, category, product_name))
        return self.auctions

    def find_winning_bid_by_auction_id(self, auction_id):
        self._raise()
        return WinningInfoOutput(make_auction(), self.winner)


class FakeBidUseCase:
    def __init__(self, error=None, bids=None):
        self.error = error
        self.bids = bids or []
        self.created = []

    def create_bid(self, bid_input):
        if self.error is not None:
            raise self.error
        self.created.append(bid_input)

    def find_bid_by_auction_id(self, auction_id):
        if self.error is not None:
            raise self.error
        return self.bids


class FakeUserUseCase:
    def __init__(self, error=None):
        self.error = error

    def find_user_by_id(self, user_id):
        if self.error is not None:
            raise self.error
        return UserOutput(user_id, "Alice")


def test_create_auction_success():
    use_case = FakeAuctionUseCase()
    status, body = AuctionController(use_case).create_auction(GOOD_AUCTION)
    assert (status, body) == (201, None)
    assert use_case.created == [AuctionInput("Phone", "tech", "A very good phone indeed", 1)]


def test_create_auction_invalid_fields():
    use_case = FakeAuctionUseCase()
    status, body = AuctionController(use_case).create_auction({})
    assert status == 400
    assert body["message"] == "Invalid field values"
    assert [c["field"] for c in body["causes"]] == ["ProductName", "Category", "Description"]
    assert use_case.created == []


def test_create_auction_type_mismatch():
    status, body = AuctionController(FakeAuctionUseCase()).create_auction(
        dict(GOOD_AUCTION, condition="new")
    )
    assert status == 404
    assert body["message"] == "Invalid type error"


def test_create_auction_malformed_json():
    status, body = AuctionController(FakeAuctionUseCase()).create_auction(b"{oops")
    assert status == 400
    assert body["message"] == "Error trying to convert fields"


def test_create_auction_use_case_error():
    use_case = FakeAuctionUseCase(error=BadRequestError("invalid auction object"))
    status, body = AuctionController(use_case).create_auction(GOOD_AUCTION)
    assert status == 400
    assert body["message"] == "invalid auction object"
    assert body["err"] == "bad_request"


@pytest.mark.parametrize("method", ["find_auction_by_id", "find_winning_bid_by_auction_id"])
def test_auction_id_must_be_uuid(method):
    status, body = getattr(AuctionController(FakeAuctionUseCase()), method)("abc")
    assert status == 400
    assert body["message"] == "Invalid fields"
    assert body["causes"] == [{"field": "auctionId", "message": "Invalid UUID value"}]


def test_find_auction_by_id_success():
    status, body = AuctionController(FakeAuctionUseCase()).find_auction_by_id(AUCTION_ID)
    assert status == 200
    assert body == make_auction().to_dict()


def test_find_auction_by_id_not_found():
    use_case = FakeAuctionUseCase(error=NotFoundError("missing"))
    status, body = AuctionController(use_case).find_auction_by_id(AUCTION_ID)
    assert status == 404
    assert body["message"] == "missing"


@pytest.mark.parametrize("status_param", ["", "abc", "1.5", "99999999999999999999"])
def test_find_auctions_bad_status(status_param):
    use_case = FakeAuctionUseCase()
    status, body = AuctionController(use_case).find_auctions(status_param, "", "")
    assert status == 400
    assert body["message"] == "Error trying to validate auction status param"
    assert use_case.queries == []


def test_find_auctions_passes_filters():
    use_case = FakeAuctionUseCase(auctions=[make_auction()])
    status, body = AuctionController(use_case).find_auctions("+1", "tech", "Pho")
    assert status == 200
    assert body == [make_auction().to_dict()]
    assert use_case.queries == [(1, "tech", "Pho")]


def test_find_auctions_empty_is_null():
    status, body = AuctionController(FakeAuctionUseCase()).find_auctions("0", "", "")
    assert (status, body) == (200, None)


def test_find_auctions_internal_error():
    use_case = FakeAuctionUseCase(error=InternalServerError("Error finding auctions"))
    status, body = AuctionController(use_case).find_auctions("0", "", "")
    assert status == 500
    assert body["err"] == "internal_server"


def test_find_winning_bid_with_and_without_bid():
    bid = make_bid()
    status, body = AuctionController(FakeAuctionUseCase(winner=bid)).find_winning_bid_by_auction_id(AUCTION_ID)
    assert status == 200
    assert body["bid"] == bid.to_dict()
    status, body = AuctionController(FakeAuctionUseCase()).find_winning_bid_by_auction_id(AUCTION_ID)
    assert "bid" not in body
    assert body["auction"] == make_auction().to_dict()


def test_create_bid_success():
    use_case = FakeBidUseCase()
    payload = {"user_id": USER_ID, "auction_id": AUCTION_ID, "amount": 10}
    assert BidController(use_case).create_bid(payload) == (201, None)
    assert use_case.created == [BidInput(USER_ID, AUCTION_ID, 10.0)]


def test_create_bid_type_mismatch():
    status, body = BidController(FakeBidUseCase()).create_bid({"amount": "ten"})
    assert status == 404
    assert body["message"] == "Invalid type error"


def test_create_bid_rejected_by_use_case():
    use_case = FakeBidUseCase(error=BadRequestError("UserId is not a valid id"))
    status, body = BidController(use_case).create_bid({"user_id": "x"})
    assert status == 400
    assert body["message"] == "UserId is not a valid id"


def test_find_bids():
    bid = make_bid()
    controller = BidController(FakeBidUseCase(bids=[bid]))
    assert controller.find_bid_by_auction_id(AUCTION_ID) == (200, [bid.to_dict()])
    assert BidController(FakeBidUseCase()).find_bid_by_auction_id(AUCTION_ID) == (200, None)
    status, body = controller.find_bid_by_auction_id("nope")
    assert status == 400
    assert body["causes"][0]["field"] == "auctionId"


def test_find_bids_internal_error():
    use_case = FakeBidUseCase(error=InternalServerError("boom"))
    status, body = BidController(use_case).find_bid_by_auction_id(AUCTION_ID)
    assert status == 500
    assert body["message"] == "boom"


def test_find_user():
    controller = UserController(FakeUserUseCase())
    assert controller.find_user_by_id(USER_ID) == (200, {"id": USER_ID, "name": "Alice"})
    status, body = controller.find_user_by_id("bad")
    assert status == 400
    assert body["causes"] == [{"field": "userId", "message": "Invalid UUID value"}]


def test_find_user_not_found():
    use_case = FakeUserUseCase(error=NotFoundError("User not found"))
    status, body = UserController(use_case).find_user_by_id(USER_ID)
    assert status == 404
    assert body["err"] == "not_found"