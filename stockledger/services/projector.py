from sqlalchemy import select
from sqlalchemy.orm import Session

from stockledger.models.inventory import StockLevel


def get_stock_level(db: Session, *, barcode: str, location: str, for_update: bool = False) -> int:
    q = select(StockLevel.qty).where(
        StockLevel.barcode == barcode,
        StockLevel.location == location,
    )
    if for_update:
        # Held until commit so a read-then-correct cannot interleave with other writers.
        q = q.with_for_update()
    qty = db.execute(q).scalar_one_or_none()
    return int(qty) if qty is not None else 0


def apply_stock_delta(db: Session, *, barcode: str, location: str, delta: int) -> None:
    """Fold one ledger delta into ``stock_levels``.

    A missing row is created with ``max(0, delta)``; an existing row takes
    ``qty + delta`` unfloored. Must run inside the transaction that appends
    the matching ledger record.
    """
    row = db.execute(
        select(StockLevel)
        .where(StockLevel.barcode == barcode, StockLevel.location == location)
        .with_for_update()
    ).scalar_one_or_none()
    if row is None:
        db.add(StockLevel(barcode=barcode, location=location, qty=max(0, delta)))
    else:
        row.qty = (row.qty or 0) + delta
    db.flush()
