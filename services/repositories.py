"""
services/repositories.py
────────────────────────────────────────────────────────────────────────
Small DAO helpers used by the tools.  Every mutating query is scoped by
`user_id`.  Repositories only flush; the calling tool owns the commit so
one tool call is one transaction.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from services.db import FoodEntry, ProfileTracking, User, UserProfile, new_id, utc_now


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._db = session

    async def find_by_id(self, user_id: str) -> User | None:
        return await self._db.get(User, user_id)

    async def find_by_email(self, email: str) -> User | None:
        res = await self._db.execute(select(User).where(User.email == email))
        return res.scalar_one_or_none()

    async def find_by_api_key_hash(self, api_key_hash: str) -> User | None:
        res = await self._db.execute(
            select(User).where(User.api_key_hash == api_key_hash)
        )
        return res.scalar_one_or_none()

    async def create(
        self,
        *,
        name: str,
        email: str,
        api_key_hash: str,
        role: str = "user",
        user_id: str | None = None,
    ) -> User:
        user = User(
            id=user_id or new_id(),
            name=name,
            email=email,
            api_key_hash=api_key_hash,
            role=role,
        )
        self._db.add(user)
        await self._db.flush()
        return user

    async def revoke_api_key(self, user_id: str) -> bool:
        user = await self.find_by_id(user_id)
        if user is None:
            return False
        user.api_key_hash = None
        user.updated_at = utc_now()
        await self._db.flush()
        return True


class UserProfileRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._db = session

    async def get(self, user_id: str) -> UserProfile | None:
        return await self._db.get(UserProfile, user_id)

    async def get_with_latest_tracking(
        self, user_id: str
    ) -> tuple[UserProfile, ProfileTracking | None] | None:
        """Profile plus its most recent tracking row (max recorded_date)."""
        profile = await self.get(user_id)
        if profile is None:
            return None
        latest = await ProfileTrackingRepository(self._db).latest(user_id)
        return profile, latest

    async def create(
        self,
        *,
        user_id: str,
        height_cm: float,
        age: int,
        gender: str,
        activity_level: str = "sedentary",
    ) -> UserProfile:
        profile = UserProfile(
            user_id=user_id,
            height_cm=height_cm,
            age=age,
            gender=gender,
            activity_level=activity_level,
        )
        self._db.add(profile)
        await self._db.flush()
        return profile

    async def update(self, profile: UserProfile, fields: dict[str, Any]) -> UserProfile:
        for key, value in fields.items():
            setattr(profile, key, value)
        # touched on every write, even when no column value changes
        profile.updated_at = utc_now()
        await self._db.flush()
        return profile


class ProfileTrackingRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._db = session

    async def latest(self, user_id: str) -> ProfileTracking | None:
        res = await self._db.execute(
            select(ProfileTracking)
            .where(ProfileTracking.user_id == user_id)
            .order_by(
                ProfileTracking.recorded_date.desc(),
                ProfileTracking.created_at.desc(),
            )
            .limit(1)
        )
        return res.scalar_one_or_none()

    async def for_date(self, user_id: str, day: date) -> ProfileTracking | None:
        res = await self._db.execute(
            select(ProfileTracking).where(
                ProfileTracking.user_id == user_id,
                ProfileTracking.recorded_date == day,
            )
        )
        return res.scalar_one_or_none()

    async def history(
        self,
        user_id: str,
        *,
        day: date | None = None,
        start: date | None = None,
        end: date | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Sequence[ProfileTracking]:
        q = select(ProfileTracking).where(ProfileTracking.user_id == user_id)
        if day is not None:
            q = q.where(ProfileTracking.recorded_date == day)
        else:
            if start is not None:
                q = q.where(ProfileTracking.recorded_date >= start)
            if end is not None:
                q = q.where(ProfileTracking.recorded_date <= end)
        q = (
            q.order_by(ProfileTracking.recorded_date.desc())
            .limit(limit)
            .offset(offset)
        )
        res = await self._db.execute(q)
        return res.scalars().all()

    async def create(self, *, user_id: str, recorded_date: date, **fields: Any) -> ProfileTracking:
        row = ProfileTracking(
            id=new_id(), user_id=user_id, recorded_date=recorded_date, **fields
        )
        self._db.add(row)
        await self._db.flush()
        return row

    async def update(self, row: ProfileTracking, fields: dict[str, Any]) -> ProfileTracking:
        for key, value in fields.items():
            setattr(row, key, value)
        await self._db.flush()
        return row


class FoodEntryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._db = session

    async def create(self, *, user_id: str, entry_date: date, **fields: Any) -> FoodEntry:
        entry = FoodEntry(id=new_id(), user_id=user_id, entry_date=entry_date, **fields)
        self._db.add(entry)
        await self._db.flush()
        return entry

    async def list_for_date(
        self, user_id: str, day: date, *, limit: int = 10, offset: int = 0
    ) -> Sequence[FoodEntry]:
        res = await self._db.execute(
            select(FoodEntry)
            .where(FoodEntry.user_id == user_id, FoodEntry.entry_date == day)
            .order_by(FoodEntry.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return res.scalars().all()

    async def get_owned(self, entry_id: str, user_id: str) -> FoodEntry | None:
        res = await self._db.execute(
            select(FoodEntry).where(FoodEntry.id == entry_id, FoodEntry.user_id == user_id)
        )
        return res.scalar_one_or_none()

    async def update(self, entry_id: str, user_id: str, fields: dict[str, Any]) -> FoodEntry | None:
        entry = await self.get_owned(entry_id, user_id)
        if entry is None:
            return None
        for key, value in fields.items():
            setattr(entry, key, value)
        entry.updated_at = utc_now()
        await self._db.flush()
        return entry

    async def delete(self, entry_id: str, user_id: str) -> bool:
        res = await self._db.execute(
            delete(FoodEntry).where(FoodEntry.id == entry_id, FoodEntry.user_id == user_id)
        )
        return res.rowcount > 0
