"""Admin user directory: listing and soft deletion."""

import logging
from uuid import UUID

from sqlmodel import func, select

from taskflow.datetime_utils import utcnow
from taskflow.db.session import Store
from taskflow.errors import NotFound
from taskflow.models.user import User
from taskflow.services.query import PageQuery

logger = logging.getLogger(__name__)


async def list_active_users(store: Store, query: PageQuery) -> tuple[list[User], int]:
    """
    Get active users, newest first.
    Returns (users, total_count).
    """
    statement = (
        select(User)
        .where(User.is_active == True)  # noqa: E712
        .order_by(User.created_at.desc(), User.id)
        .offset(query.offset)
        .limit(query.limit)
    )
    count_statement = (
        select(func.count()).select_from(User).where(User.is_active == True)  # noqa: E712
    )

    async with store.session() as session:
        total = (await session.exec(count_statement)).one()
        users = list((await session.exec(statement)).all())

    return users, total


async def deactivate_user(store: Store, user_id: UUID) -> User:
    """Soft-delete a user; the record and its tasks are retained.

    Raises:
        NotFound: If no such user exists
    """
    async with store.session() as session:
        user = await session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        user.is_active = False
        user.updated_at = utcnow()
        session.add(user)
        await session.commit()

    logger.info("User deactivated", extra={"user_id": str(user_id)})
    return user
