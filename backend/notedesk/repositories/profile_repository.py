"""
NoteDesk Backend — Profile Repository
=======================================

What:  Read and partially update the authenticated user's profile row.
How:   The row is keyed by the owner id bound at construction.
"""

import logging
from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notedesk.exceptions import DatabaseError, NotFoundError
from notedesk.models.note import utcnow
from notedesk.models.profile import Profile
from notedesk.schemas.auth import AuthUser

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "timezone"})


class ProfileRepository:

    def __init__(self, session: AsyncSession, user: AuthUser):
        self.session = session
        self.user = user

    async def get(self) -> Profile:
        """
        The owner's profile.

        Raises:
            NotFoundError: no row for the owner (provisioning did not run)
            DatabaseError: query execution failed
        """
        try:
            result = await self.session.execute(
                select(Profile).where(Profile.id == self.user.id)
            )
            profile = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching profile %s: %s", self.user.id, str(e))
            raise DatabaseError(
                message="Could not retrieve your profile. Please try again.",
                context={"operation": "profile.get"},
            )

        if profile is None:
            raise NotFoundError(resource="profile")
        return profile

    async def update(self, fields: Dict[str, Any]) -> Profile:
        """Partial update of name/timezone; stamps `updated_at`."""
        profile = await self.get()

        for name, value in fields.items():
            if name in UPDATABLE_FIELDS and value is not None:
                setattr(profile, name, value)
        profile.updated_at = utcnow()

        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating profile %s: %s", self.user.id, str(e))
            raise DatabaseError(
                message="Could not update your profile. Please try again.",
                context={"operation": "profile.update"},
            )

        logger.info("Profile %s updated (%s)", self.user.id, ", ".join(sorted(fields)))
        return profile
