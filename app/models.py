"""
SQLAlchemy ORM Models for the Playlist Service

This module defines the tenant-owned playlist, category and channel tables.
"""
from datetime import datetime, timezone
from sqlalchemy import Integer, String, DateTime, Index, UniqueConstraint, ForeignKey
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


class Tenant(Base):
    """Customer account; created on the tenant's first import"""
    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name={self.name})>"


class Playlist(Base):
    """Imported playlist, created once per successful import"""
    __tablename__ = "playlists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tenant_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    source_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_playlists_tenant", "tenant_id"),
    )

    def __repr__(self) -> str:
        return f"<Playlist(id={self.id}, name={self.name}, tenant={self.tenant_id})>"


class Category(Base):
    """Playlist group-title"""
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    playlist_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("playlists.id", ondelete="CASCADE"),
        nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("playlist_id", "name", name="uq_category_playlist_name"),
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name}, playlist={self.playlist_id})>"


class Channel(Base):
    """Stream entry within a category"""
    __tablename__ = "channels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    logo_url: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    stream_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("category_id", "stream_url", name="uq_channel_category_stream"),
    )

    def __repr__(self) -> str:
        return f"<Channel(id={self.id}, name={self.name}, category={self.category_id})>"
