"""
services/db.py
────────────────────────────────────────────────────────────────────────
* Async SQLAlchemy v2 setup
* Models for the four tracker tables
* `Database` handle injected into the authenticator and the tools
"""
from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.ext.asyncio import (
    AsyncAttrs,
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from config import settings

_LOG = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ───────── declarative base ──────────────────────────────────────────
Base = declarative_base(cls=AsyncAttrs)


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String)
    email: Mapped[str] = mapped_column(String, unique=True)
    # NULL means revoked
    api_key_hash: Mapped[str | None] = mapped_column(String(64), unique=True, index=True)
    role: Mapped[str] = mapped_column(String(16), default="user")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


class UserProfile(Base):
    __tablename__ = "user_profiles"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), primary_key=True
    )
    height_cm: Mapped[float] = mapped_column(Float)
    age: Mapped[int] = mapped_column(Integer)
    gender: Mapped[str] = mapped_column(String(8))
    activity_level: Mapped[str] = mapped_column(String(16), default="sedentary")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


class ProfileTracking(Base):
    __tablename__ = "profile_tracking"
    # one row per user per day; concurrent same-day inserts lose at the DB
    __table_args__ = (UniqueConstraint("user_id", "recorded_date"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("user_profiles.user_id"), index=True
    )
    weight_kg: Mapped[float | None] = mapped_column(Float)
    muscle_mass_kg: Mapped[float | None] = mapped_column(Float)
    body_fat_percentage: Mapped[float | None] = mapped_column(Float)
    bmr_calories: Mapped[int | None] = mapped_column(Integer)
    tdee_calories: Mapped[int | None] = mapped_column(Integer)
    recorded_date: Mapped[date] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)


class FoodEntry(Base):
    __tablename__ = "food_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), index=True)
    food_name: Mapped[str] = mapped_column(String)
    calories: Mapped[int] = mapped_column(Integer)
    protein_g: Mapped[float | None] = mapped_column(Float)
    carbs_g: Mapped[float | None] = mapped_column(Float)
    fat_g: Mapped[float | None] = mapped_column(Float)
    meal_type: Mapped[str | None] = mapped_column(String(16))
    entry_date: Mapped[date] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), onupdate=utc_now
    )


# ───────── database handle ───────────────────────────────────────────
class Database:
    """Engine + session factory.  Pool lifecycle lives here, not in callers."""

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, url: str, **engine_kwargs) -> "Database":
        return cls(create_async_engine(url, **engine_kwargs))

    def session(self) -> AsyncSession:
        return self._sessions()

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


# ───────── connection helper ────────────────────────────────────────
def _create_engine() -> AsyncEngine | None:
    # 1) plain URL (sqlite+aiosqlite / postgresql+asyncpg)
    if settings.database_url:
        return create_async_engine(
            settings.database_url, pool_pre_ping=True, echo=settings.sql_echo
        )

    # 2) Cloud SQL connector (only if URL not supplied)
    if not settings.cloud_sql_instance:
        _LOG.warning(
            "Neither DATABASE_URL nor CLOUD_SQL_CONNECTION_NAME is set; "
            "running without storage, all requests will be rejected"
        )
        return None

    # lazy import here
    try:
        from google.cloud.sql.connector import IPTypes, create_async_connector  # type: ignore
    except ImportError as exc:
        raise RuntimeError(
            "cloud-sql-python-connector missing. Run:\n"
            "pip install 'cloud-sql-python-connector[asyncpg]>=1.4.0'"
        ) from exc

    connector = None

    async def _getconn():  # type: ignore[name-defined]
        nonlocal connector
        if connector is None:
            connector = await create_async_connector()
        return await connector.connect_async(
            settings.cloud_sql_instance,
            "asyncpg",
            user=settings.db_user,
            password=settings.db_pass,
            db=settings.db_name,
            ip_type=IPTypes.PRIVATE,
        )

    return create_async_engine(
        "postgresql+asyncpg://",
        async_creator=_getconn,
        pool_pre_ping=True,
        echo=settings.sql_echo,
    )


def database_from_settings() -> Database | None:
    eng = _create_engine()
    return Database(eng) if eng is not None else None
