from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.core.errors import StorageError
from stockledger.models.product import Product
from stockledger.services.operations import MAX_BARCODE_LENGTH, bounded_text, require_fields

MAX_NAME_LENGTH = 255
MAX_SKU_LENGTH = 100


def upsert_product(db: Session, *, barcode: Any, name: Any, sku: Any = None) -> Product:
    """Create the product or fully replace the one stored under ``barcode``."""
    require_fields({"barcode": barcode, "name": name}, ("barcode", "name"))
    cleaned_barcode = bounded_text("barcode", barcode, MAX_BARCODE_LENGTH)
    cleaned_name = bounded_text("name", name, MAX_NAME_LENGTH)
    cleaned_sku = bounded_text("sku", sku, MAX_SKU_LENGTH) if sku is not None else None

    try:
        product = db.merge(
            Product(
                barcode=cleaned_barcode,
                name=cleaned_name,
                sku=cleaned_sku or None,
                created_at=datetime.now(timezone.utc),
            )
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StorageError(f"Product upsert failed: {exc}") from exc
    return product
