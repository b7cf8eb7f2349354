"""MongoDB storage for users."""

from __future__ import annotations

from pymongo.database import Database
from pymongo.errors import PyMongoError

from auctionsvc import logger
from auctionsvc.entities import User
from auctionsvc.errors import InternalServerError, NotFoundError

_COLLECTION = "users"


class UserRepository:
    """User lookups backed by the ``users`` collection."""

    def __init__(self, database: Database) -> None:
        self.collection = database[_COLLECTION]

    def find_user_by_id(self, user_id: str) -> User:
        """Return the user with the given id."""
        try:
            document = self.collection.find_one({"_id": user_id})
        except PyMongoError as exc:
            logger.error("Error trying to find user by userId", exc)
            raise InternalServerError("Error trying to find user by userId") from exc
        if document is None:
            message = f"User not found with this id = {user_id}"
            logger.error(message, LookupError("no documents in result"))
            raise NotFoundError(message)
        return User(id=document["_id"], name=document.get("name", ""))