from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockledger.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StockLevel(Base):
    """
    Materialized quantity per (barcode, location). Written only by the stock projector.
    """
    __tablename__ = "stock_levels"

    barcode: Mapped[str] = mapped_column(String(128), primary_key=True)
    location: Mapped[str] = mapped_column(String(120), primary_key=True)
    qty: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")


class Movement(Base):
    """
    One row per receipt (IN) or issue (OUT). Append-only.
    """
    __tablename__ = "movements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    action: Mapped[str] = mapped_column(String(3), nullable=False)
    barcode: Mapped[str] = mapped_column(String(128), nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    location: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        CheckConstraint("action IN ('IN', 'OUT')", name="ck_movements_action"),
        CheckConstraint("qty > 0", name="ck_movements_qty_positive"),
        Index("ix_movements_created_at", "created_at"),
        Index("ix_movements_barcode_location", "barcode", "location"),
    )


class Transfer(Base):
    __tablename__ = "transfers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    barcode: Mapped[str] = mapped_column(String(128), nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    from_location: Mapped[str] = mapped_column(String(120), nullable=False)
    to_location: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        CheckConstraint("qty > 0", name="ck_transfers_qty_positive"),
        CheckConstraint("from_location <> to_location", name="ck_transfers_distinct_locations"),
        Index("ix_transfers_created_at", "created_at"),
    )


class CountSession(Base):
    __tablename__ = "counts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    location: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    lines: Mapped[list["CountLine"]] = relationship(
        back_populates="count",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CountLine.id",
    )

    __table_args__ = (
        Index("ix_counts_created_at", "created_at"),
    )


class CountLine(Base):
    __tablename__ = "count_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    count_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("counts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    barcode: Mapped[str] = mapped_column(String(128), nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    # Corrective delta pushed into stock_levels; NULL when counts were not applied.
    applied_delta: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    count: Mapped[CountSession] = relationship(back_populates="lines")

    __table_args__ = (
        CheckConstraint("qty >= 0", name="ck_count_lines_qty_non_negative"),
    )
