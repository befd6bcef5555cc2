from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from stockledger.core.config import settings
from stockledger.db.session import SessionLocal
from stockledger.services.operations import InventoryOperations
from stockledger.services.views import InventoryViews


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_operations(db: Session = Depends(get_db)) -> InventoryOperations:
    return InventoryOperations(db, apply_count=settings.apply_count)


def get_views(db: Session = Depends(get_db)) -> InventoryViews:
    return InventoryViews(db)
