from fastapi import APIRouter, Depends, HTTPException

from stockledger.core.api_docs import error_responses
from stockledger.core.config import settings
from stockledger.core.deps import get_operations, get_views
from stockledger.schemas.inventory import (
    CountLineOut,
    CountSessionDetailOut,
    CountSessionListOut,
    CountSessionOut,
    MovementListOut,
    MovementOut,
    StockCountIn,
    StockCountOut,
    StockLevelListOut,
    StockLevelOut,
    StockMoveIn,
    StockMoveOut,
    StockTransferIn,
    StockTransferOut,
    TransferListOut,
    TransferRecordOut,
)
from stockledger.services.operations import InventoryOperations
from stockledger.services.views import InventoryViews

router = APIRouter(prefix="/stock", tags=["stock"])

_NOT_IDEMPOTENT = "Not idempotent: every successful call appends a new ledger record."


@router.post(
    "/move",
    response_model=StockMoveOut,
    summary="Receive (IN) or issue (OUT) stock at a location",
    description=_NOT_IDEMPOTENT,
    responses=error_responses(400, 422, 500),
)
def move_stock(
    payload: StockMoveIn,
    ops: InventoryOperations = Depends(get_operations),
):
    result = ops.move(payload.action, payload.barcode, payload.qty, payload.location)
    return StockMoveOut(barcode=result.barcode, location=result.location, level=result.level)


@router.post(
    "/transfer",
    response_model=StockTransferOut,
    summary="Move stock between two locations",
    description=_NOT_IDEMPOTENT,
    responses=error_responses(400, 422, 500),
)
def transfer_stock(
    payload: StockTransferIn,
    ops: InventoryOperations = Depends(get_operations),
):
    result = ops.transfer(payload.barcode, payload.qty, payload.from_location, payload.to_location)
    return StockTransferOut(
        barcode=result.barcode,
        from_location=result.from_location,
        to_location=result.to_location,
        from_level=result.from_level,
        to_level=result.to_level,
    )


@router.post(
    "/count",
    response_model=StockCountOut,
    summary="Record a physical count session",
    description=(
        "When APPLY_COUNT is enabled each counted line overwrites the stock level "
        "through a corrective delta. " + _NOT_IDEMPOTENT
    ),
    responses=error_responses(400, 422, 500),
)
def count_stock(
    payload: StockCountIn,
    ops: InventoryOperations = Depends(get_operations),
):
    result = ops.count(payload.location, payload.lines)
    return StockCountOut(
        count_id=result.count_id,
        applied=result.applied,
        lines=[
            CountLineOut(barcode=line.barcode, qty=line.qty, applied_delta=line.applied_delta)
            for line in result.lines
        ],
    )


@router.get(
    "/levels",
    response_model=StockLevelListOut,
    summary="List all stock levels",
    responses=error_responses(500),
)
def list_stock_levels(views: InventoryViews = Depends(get_views)):
    rows = views.all_levels()
    return StockLevelListOut(
        rows=[StockLevelOut(barcode=row.barcode, location=row.location, qty=row.qty) for row in rows]
    )


@router.get(
    "/movements",
    response_model=MovementListOut,
    summary="List the most recent IN/OUT movements",
    responses=error_responses(500),
)
def list_movements(views: InventoryViews = Depends(get_views)):
    rows = views.recent_movements(limit=settings.movements_list_limit)
    return MovementListOut(
        rows=[
            MovementOut(
                id=row.id,
                action=row.action,
                barcode=row.barcode,
                qty=row.qty,
                location=row.location,
                created_at=row.created_at,
            )
            for row in rows
        ]
    )


@router.get(
    "/transfers",
    response_model=TransferListOut,
    summary="List the most recent transfers",
    responses=error_responses(500),
)
def list_transfers(views: InventoryViews = Depends(get_views)):
    rows = views.recent_transfers(limit=settings.movements_list_limit)
    return TransferListOut(
        rows=[
            TransferRecordOut(
                id=row.id,
                barcode=row.barcode,
                qty=row.qty,
                from_location=row.from_location,
                to_location=row.to_location,
                created_at=row.created_at,
            )
            for row in rows
        ]
    )


@router.get(
    "/counts",
    response_model=CountSessionListOut,
    summary="List the most recent count sessions",
    responses=error_responses(500),
)
def list_counts(views: InventoryViews = Depends(get_views)):
    rows = views.recent_counts(limit=settings.movements_list_limit)
    return CountSessionListOut(
        rows=[
            CountSessionOut(
                id=session.id,
                location=session.location,
                created_at=session.created_at,
                lines_count=lines_count,
            )
            for session, lines_count in rows
        ]
    )


@router.get(
    "/counts/{count_id}",
    response_model=CountSessionDetailOut,
    summary="Get a count session with its lines",
    responses=error_responses(404, 422, 500),
)
def get_count(count_id: int, views: InventoryViews = Depends(get_views)):
    session = views.count_session(count_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Count session not found")
    return CountSessionDetailOut(
        id=session.id,
        location=session.location,
        created_at=session.created_at,
        lines=[
            CountLineOut(barcode=line.barcode, qty=line.qty, applied_delta=line.applied_delta)
            for line in session.lines
        ],
    )
