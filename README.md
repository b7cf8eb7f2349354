# auctionsvc

A small HTTP service for running auctions, built on Flask and MongoDB.
Clients create auctions, place bids, list auctions and bids, look up
users, and ask for the winning bid of an auction.

Two properties shape its behaviour:

- **Bids are written in batches.** A bid that passes validation is queued
  and the request is answered with `201 Created` straight away. A worker
  thread writes the queued bids to the database when the batch reaches
  `MAX_BATCH_SIZE` bids or when `BATCH_INSERT_INTERVAL` runs out,
  whichever comes first. When a batch is written, each bid's auction is
  looked up (and its status and end time cached); bids on an auction that
  is completed, or past its cached end time, are dropped.
- **Auctions expire by themselves.** After an auction is stored, a timer
  marks it completed once `AUCTION_INTERVAL` has passed. A background
  scheduler also sweeps the database once a minute and completes every
  active auction older than the interval.

## Installation

```
pip install auctionsvc
```

To run the test suite:

```
pip install "auctionsvc[test]"
pytest
```

## Configuration

Settings are read from environment variables. The `auctionsvc` command
loads them from an env file first; variables already set in the
environment take precedence over the file.

| Variable                | Meaning                                         | Default     |
|-------------------------|-------------------------------------------------|-------------|
| `MONGODB_URL`           | MongoDB connection string                       | (required)  |
| `MONGODB_DB`            | Name of the database to use                     | (required)  |
| `AUCTION_INTERVAL`      | How long an auction stays open, e.g. `20s`      | `5m`        |
| `BATCH_INSERT_INTERVAL` | Longest time a partial batch of bids waits      | `3m`        |
| `MAX_BATCH_SIZE`        | Number of queued bids that forces a write       | `5`         |

Durations use the form `1h30m`, `90s`, `500ms`, `1.5h` and so on (units
`ns`, `us`, `ms`, `s`, `m`, `h`). A value that is missing or cannot be
parsed falls back to the default; the same holds for `MAX_BATCH_SIZE`.

Example env file:

```
MONGODB_URL=mongodb://localhost:27017
MONGODB_DB=auctions
AUCTION_INTERVAL=20s
BATCH_INSERT_INTERVAL=20s
MAX_BATCH_SIZE=4
```

## Running

```
auctionsvc [--env-file PATH] [--host HOST] [--port PORT]
```

| Option       | Default             |
|--------------|---------------------|
| `--env-file` | `cmd/auction/.env` (relative to the working directory) |
| `--host`     | `0.0.0.0`           |
| `--port`     | `8080`              |

The env file must exist; otherwise the command exits with
`Error trying to load env variables`. The command then connects to
MongoDB and pings it (exiting with the error text if that fails), starts
the expiry scheduler and serves the API with Flask's built-in server.

## HTTP API

| Method | Path                          | Description                                   |
|--------|-------------------------------|-----------------------------------------------|
| GET    | `/auction`                    | List auctions, filtered by query parameters   |
| GET    | `/auction/<auctionId>`        | Fetch one auction                             |
| POST   | `/auction`                    | Create an auction                             |
| GET    | `/auction/winner/<auctionId>` | Fetch an auction together with its top bid    |
| POST   | `/bid`                        | Place a bid                                   |
| GET    | `/bid/<auctionId>`            | List the bids on an auction                   |
| GET    | `/user/<userId>`              | Fetch a user                                  |

Path identifiers must be UUIDs (canonical, braced, `urn:uuid:` or 32 hex
digits); anything else is answered with `400 Bad Request` and a cause
naming the field. Unknown paths and wrong methods get a plain-text
`404 page not found`.

Responses are compact JSON. Timestamps are RFC 3339 strings; auction
status is `0` for active and `1` for completed. An empty list is sent as
`null`.

### Creating an auction

```
POST /auction
{
  "product_name": "Camera",
  "category": "Electronics",
  "description": "Compact camera, lightly used, with charger",
  "condition": 1
}
```

`product_name` (at least 1 character), `category` (at least 2) and
`description` (10 to 200 characters) are required, and `condition`, if
given, must be `0`, `1` or `2`. Field names are matched
case-insensitively. A successful call returns `201 Created` with no body.

### Listing auctions

```
GET /auction?status=1&category=Electronics&productName=camera
```

`status` is required and must be an integer, otherwise the reply is
`400`. A status of `0` applies no status filter. `category` is matched
exactly; `productName` is sent to MongoDB as a case-insensitive regular
expression on the document key `productName`.

### Placing a bid

```
POST /bid
{
  "user_id": "6b1f3c52-9c3e-4a8e-9d0b-2f4e5a6b7c8d",
  "auction_id": "0e7d2b1a-3c4f-4d5e-8f9a-1b2c3d4e5f60",
  "amount": 150.0
}
```

Both identifiers must be UUIDs and the amount must be greater than zero.
The call returns `201 Created` once the bid has been queued.

### Listing bids

`GET /bid/<auctionId>` queries the `bids` collection on the document key
`auctionId`. Bids are stored under `auction_id`, so this endpoint only
finds documents that carry an `auctionId` key.

### Winning bid

`GET /auction/winner/<auctionId>` returns the auction under `auction` and
the highest bid under `bid`. When no bid can be found, `bid` is left out.

### Errors

Every error response has the same shape:

```
{
  "message": "Invalid fields",
  "err": "bad_request",
  "code": 400,
  "causes": [{"field": "auctionId", "message": "Invalid UUID value"}]
}
```

`err` is one of `bad_request`, `not_found` or `internal_server`, and
`causes` is `null` when there are none. A request body whose values have
the wrong JSON type is answered with `404` and `Invalid type error`; a
body that breaks the field rules gets `400 Invalid field values` with one
cause per field; a body that is not JSON gets
`400 Error trying to convert fields`. A user that does not exist gives
`404`; a missing auction gives `500`.

## Using it as a library

The pieces can be wired together without the command:

```python
from auctionsvc.config import connect_database
from auctionsvc.app import build_controllers, create_app

database = connect_database()  # reads MONGODB_URL and MONGODB_DB
auction_controller, bid_controller, user_controller = build_controllers(database)
app = create_app(auction_controller, bid_controller, user_controller)
app.run(port=8080)
```

The controllers in `auctionsvc.controllers` return `(status, body)`
tuples and can be called directly. The use cases in
`auctionsvc.auction_usecase`, `auctionsvc.bid_usecase` and
`auctionsvc.user_usecase` accept any object that provides the repository
methods described by the protocols in `auctionsvc.entities`, so they can
be driven by in-memory repositories. `BidUseCase` is also a context
manager; `close()` stops its worker and writes any bids still queued.
`AuctionRepository.stop()` stops the scheduler and cancels pending
automatic closings.

Logs are written to standard error as one JSON object per line, with
`level`, `time` and `message` keys plus any extra fields.

## What it does not do

- There is no endpoint to create or change users; users are only read
  from the `users` collection.
- There is no authentication or authorisation.
- The command does not close the bid worker on shutdown, so bids still
  waiting in a partial batch when the process stops are not written.