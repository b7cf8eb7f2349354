"""HTTP application wiring and the service entry point."""

from __future__ import annotations

import argparse
import json
import os
from http import HTTPStatus
from typing import Any

from dotenv import load_dotenv
from flask import Flask, Response, request
from pymongo.database import Database
from pymongo.errors import PyMongoError

from auctionsvc.auction_repository import AuctionRepository
from auctionsvc.auction_usecase import AuctionUseCase
from auctionsvc.bid_repository import BidRepository
from auctionsvc.bid_usecase import BidUseCase
from auctionsvc.config import connect_database
from auctionsvc.controllers import AuctionController, BidController, UserController
from auctionsvc.user_repository import UserRepository
from auctionsvc.user_usecase import UserUseCase

_ENV_FILE = "cmd/auction/.env"
_JSON_CONTENT_TYPE = "application/json; charset=utf-8"
_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def build_controllers(
    database: Database,
) -> tuple[AuctionController, BidController, UserController]:
    """Create repositories, use cases and controllers over one database."""
    auction_repository = AuctionRepository(database)
    auction_repository.start_expiration_scheduler()
    bid_repository = BidRepository(database, auction_repository)
    user_repository = UserRepository(database)

    return (
        AuctionController(AuctionUseCase(auction_repository, bid_repository)),
        BidController(BidUseCase(bid_repository)),
        UserController(UserUseCase(user_repository)),
    )


def _plain_numbers(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return int(value)
    if isinstance(value, dict):
        return {key: _plain_numbers(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain_numbers(item) for item in value]
    return value


def _reply(status: int, body: Any) -> Response:
    if body is None and status == HTTPStatus.CREATED:
        return Response(status=status)
    text = json.dumps(_plain_numbers(body), ensure_ascii=False, separators=(",", ":"))
    for raw, escaped in _ESCAPES:
        text = text.replace(raw, escaped)
    return Response(text, status=status, content_type=_JSON_CONTENT_TYPE)


def create_app(
    auction_controller: AuctionController,
    bid_controller: BidController,
    user_controller: UserController,
) -> Flask:
    """Build the Flask application routing requests to the controllers."""
    app = Flask("auctionsvc")

    @app.get("/auction")
    def find_auctions() -> Response:
        args = request.args
        return _reply(
            *auction_controller.find_auctions(
                args.get("status", ""), args.get("category", ""), args.get("productName", "")
            )
        )

    @app.get("/auction/<auction_id>")
    def find_auction_by_id(auction_id: str) -> Response:
        return _reply(*auction_controller.find_auction_by_id(auction_id))

    @app.post("/auction")
    def create_auction() -> Response:
        return _reply(*auction_controller.create_auction(request.get_data()))

    @app.get("/auction/winner/<auction_id>")
    def find_winning_bid(auction_id: str) -> Response:
        return _reply(*auction_controller.find_winning_bid_by_auction_id(auction_id))

    @app.post("/bid")
    def create_bid() -> Response:
        return _reply(*bid_controller.create_bid(request.get_data()))

    @app.get("/bid/<auction_id>")
    def find_bids(auction_id: str) -> Response:
        return _reply(*bid_controller.find_bid_by_auction_id(auction_id))

    @app.get("/user/<user_id>")
    def find_user(user_id: str) -> Response:
        return _reply(*user_controller.find_user_by_id(user_id))

    def not_found(_error: Exception) -> Response:
        return Response(
            "404 page not found", status=HTTPStatus.NOT_FOUND, content_type="text/plain"
        )

    app.register_error_handler(404, not_found)
    app.register_error_handler(405, not_found)
    return app


def main(argv: list[str] | None = None) -> int:
    """Load settings, connect to the database and serve the HTTP API."""
    parser = argparse.ArgumentParser(prog="auctionsvc", description="Run the auction HTTP service.")
    parser.add_argument("--env-file", default=_ENV_FILE, help="file with environment settings")
    parser.add_argument("--host", default="0.0.0.0", help="address to listen on")
    parser.add_argument("--port", type=int, default=8080, help="port to listen on")
    args = parser.parse_args(argv)

    if not os.path.isfile(args.env_file):
        raise SystemExit("Error trying to load env variables")
    load_dotenv(args.env_file)

    try:
        database = connect_database()
    except PyMongoError as exc:
        raise SystemExit(str(exc)) from exc

    auction_controller, bid_controller, user_controller = build_controllers(database)
    app = create_app(auction_controller, bid_controller, user_controller)
    app.run(host=args.host, port=args.port)
    return 0