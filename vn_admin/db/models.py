"""SQLAlchemy ORM models for provinces and administrative units."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ProvinceDB(Base):
    """
    Database model for provinces.

    The primary key is the remote source's id, so re-ingesting a province
    overwrites the existing row.
    """

    __tablename__ = "provinces"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    # Stored as text; the API exposes it as an optional integer
    code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now, onupdate=_utc_now)

    def __repr__(self) -> str:
        return f"<ProvinceDB(id={self.id}, name='{self.name}')>"


class AdminUnitDB(Base):
    """Database model for wards, communes and other sub-province units."""

    __tablename__ = "admin_units"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    province_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("provinces.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="", index=True)
    level: Mapped[str] = mapped_column(String(50), default="")
    code: Mapped[str] = mapped_column(String(20), default="")
    pre_merger_desc: Mapped[str | None] = mapped_column(Text, nullable=True)
    lat: Mapped[float] = mapped_column(Float, default=0.0)
    long: Mapped[float] = mapped_column(Float, default=0.0)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now, onupdate=_utc_now)

    def __repr__(self) -> str:
        return f"<AdminUnitDB(id={self.id}, province_id={self.province_id}, name='{self.name}')>"
