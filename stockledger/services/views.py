from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from stockledger.models.inventory import CountLine, CountSession, Movement, StockLevel, Transfer
from stockledger.models.product import Product
from stockledger.services.projector import get_stock_level

DEFAULT_LIST_LIMIT = 100


class InventoryViews:
    """Side-effect free queries over the ledger and the materialized levels."""

    def __init__(self, db: Session):
        self.db = db

    def current_level(self, barcode: str, location: str) -> int:
        return get_stock_level(self.db, barcode=barcode, location=location)

    def all_levels(self) -> list[StockLevel]:
        stmt = select(StockLevel).order_by(StockLevel.location, StockLevel.barcode)
        return list(self.db.execute(stmt).scalars().all())

    def recent_movements(self, limit: int = DEFAULT_LIST_LIMIT) -> list[Movement]:
        stmt = (
            select(Movement)
            .order_by(Movement.created_at.desc(), Movement.id.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def recent_transfers(self, limit: int = DEFAULT_LIST_LIMIT) -> list[Transfer]:
        stmt = (
            select(Transfer)
            .order_by(Transfer.created_at.desc(), Transfer.id.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def recent_counts(self, limit: int = DEFAULT_LIST_LIMIT) -> list[tuple[CountSession, int]]:
        """Count headers, newest first, each paired with its number of lines."""
        lines_count = (
            select(func.count(CountLine.id))
            .where(CountLine.count_id == CountSession.id)
            .correlate(CountSession)
            .scalar_subquery()
        )
        stmt = (
            select(CountSession, lines_count)
            .order_by(CountSession.created_at.desc(), CountSession.id.desc())
            .limit(limit)
        )
        return [(row[0], int(row[1])) for row in self.db.execute(stmt).all()]

    def count_session(self, count_id: int) -> CountSession | None:
        stmt = (
            select(CountSession)
            .options(selectinload(CountSession.lines))
            .where(CountSession.id == count_id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def product_by_barcode(self, barcode: str) -> Product | None:
        return self.db.get(Product, barcode)
