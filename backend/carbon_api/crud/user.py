# carbon_api/crud/user.py
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from carbon_api.core.ids import normalize_email
from carbon_api.models.organization_membership import OrganizationMembership
from carbon_api.models.user import User


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    res = await db.execute(select(User).where(User.email == normalize_email(email)))
    return res.scalar_one_or_none()


async def create_user(db: AsyncSession, email: str, name: Optional[str] = None, role: str = "user") -> User:
    user = User(email=normalize_email(email), name=User.normalize_name(name), role=role, is_active=True)
    db.add(user)
    await db.flush()
    return user


async def delete_user(db: AsyncSession, user: User) -> None:
    await db.execute(delete(OrganizationMembership).where(OrganizationMembership.user_id == user.id))
    await db.delete(user)
    await db.flush()
