from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockledger.core.api_docs import error_responses
from stockledger.core.deps import get_db, get_views
from stockledger.core.errors import ValidationError
from stockledger.schemas.common import OkOut
from stockledger.schemas.product import ProductLookupOut, ProductUpsertIn
from stockledger.services.catalog import upsert_product
from stockledger.services.views import InventoryViews

router = APIRouter(prefix="/products", tags=["products"])


@router.get(
    "/by-barcode",
    response_model=ProductLookupOut,
    summary="Look up a product name by barcode",
    responses=error_responses(400, 500),
)
def lookup_product(
    code: str = Query(default="", description="Barcode to look up"),
    views: InventoryViews = Depends(get_views),
):
    code = code.strip()
    if not code:
        raise ValidationError("code required")
    product = views.product_by_barcode(code)
    if product is None:
        return ProductLookupOut(name=None)
    return ProductLookupOut(name=product.name, sku=product.sku)


@router.post(
    "",
    response_model=OkOut,
    summary="Create or replace a product by barcode",
    responses=error_responses(400, 422, 500),
)
def create_or_replace_product(
    payload: ProductUpsertIn,
    db: Session = Depends(get_db),
):
    upsert_product(db, barcode=payload.barcode, name=payload.name, sku=payload.sku)
    return OkOut()
