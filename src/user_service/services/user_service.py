"""
User service: transaction boundaries and the signup workflow.

The repository issues single statements and never commits; this layer commits
after a successful write and decides what a failure means for the caller:

    signup()      -> SignupError(kind)  (409 for duplicates, 500 otherwise)
    get_user()    -> NotFoundError      (404) when the id does not exist
    delete_user() -> NotFoundError      (404) when no row was removed
    any read/delete storage failure -> StorageError (500), raised by the repository
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from user_service.exceptions.base import NotFoundError, SignupError, StorageError
from user_service.exceptions.integrity_classifier import classify_storage_error
from user_service.exceptions.mapper import db_error_handler, rollback_on_error
from user_service.models.user import User
from user_service.repositories.user_repository import UserRepository
from user_service.schemas.user import UserCreate

logger = logging.getLogger(__name__)


def user_location(user_id: int) -> str:
    """Path of a user resource, as sent in the Location header after signup."""
    return f"/users/{user_id}"


class UserService:
    def __init__(self, db: AsyncSession, users: UserRepository | None = None):
        self.db = db
        self.users = users or UserRepository(db)

    async def list_users(self) -> list[User]:
        return await self.users.list_users()

    async def get_user(self, user_id: int) -> User:
        user = await self.users.fetch_user(user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    async def delete_user(self, user_id: int) -> None:
        removed = await self.users.delete_user(user_id)
        if not removed:
            raise NotFoundError(f"User with ID {user_id} not found")

        async with db_error_handler(self.db, "User", "delete"):
            await self.db.commit()
        logger.info("user.deleted", extra={"id": user_id})

    async def signup(self, payload: UserCreate) -> User:
        """
        Insert a new user and commit.

        A failed INSERT is a single statement that has already been rolled back,
        so there is nothing to compensate. The storage error is classified once,
        here, and never retried.

        Raises:
            SignupError: carrying DUPLICATE_KEY, UNKNOWN_QUERY or UNKNOWN_DATABASE.
        """
        try:
            user = await self.users.insert_user(payload)
            async with rollback_on_error(self.db, "User"):
                await self.db.commit()
        # OSError covers refused connections and TimeoutError; StorageError wraps
        # any other exception raised while the statement or commit ran.
        except (SQLAlchemyError, OSError, StorageError) as exc:
            kind = classify_storage_error(exc)
            logger.info("signup.failed", extra={"kind": kind.value})
            raise SignupError(kind) from exc

        logger.info("signup.success", extra={"id": user.id})
        return user
