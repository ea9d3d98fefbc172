"""
User repository: the four storage operations the users API needs.

It adds no business rules. Uniqueness of username/email is left entirely to
the table's unique constraints, and a failed insert surfaces the raw storage
error for the signup workflow to classify.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from user_service.models.user import User
from user_service.schemas.user import UserCreate
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for User entity operations.

    Each method maps one-to-one onto a BaseRepository primitive with the User
    model bound, so the service layer reads in domain terms.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def list_users(self) -> list[User]:
        """Every user, in storage order. An empty table yields an empty list."""
        return await self.get_all()

    async def insert_user(self, payload: UserCreate) -> User:
        """
        Persist a new user and return it with the generated id.

        Args:
            payload: The five writable fields. Stored exactly as given.

        Raises:
            sqlalchemy.exc.SQLAlchemyError (or a driver/OS error) on any constraint
            violation or connectivity failure. Not translated here.
        """
        logger.info("repo.user.insert", extra={"username": payload.username})
        return await self.create(**payload.model_dump())

    async def fetch_user(self, user_id: int) -> User | None:
        """The user with this id, or None when no row matches."""
        return await self.get_by_id(user_id)

    async def delete_user(self, user_id: int) -> bool:
        """True only if exactly one row was removed."""
        return await self.delete(user_id)
