"""Use case for looking up users."""

from __future__ import annotations

from dataclasses import dataclass

from auctionsvc.entities import UserRepositoryProtocol


@dataclass
class UserOutput:
    id: str
    name: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "name": self.name}


class UserUseCase:
    """Application operations on users."""

    def __init__(self, user_repository: UserRepositoryProtocol) -> None:
        self.user_repository = user_repository

    def find_user_by_id(self, user_id: str) -> UserOutput:
        """Return one user."""
        user = self.user_repository.find_user_by_id(user_id)
        return UserOutput(id=user.id, name=user.name)