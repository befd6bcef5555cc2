from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from stockledger.schemas.common import Identifier

# Request models only shape the payload. Presence, positivity and integrality
# are enforced by InventoryOperations so every binding gets the same rules;
# qty is passed through untouched so booleans and oversized numbers get
# the same 400 as any other bad quantity.
QtyIn = Any


class StockMoveIn(BaseModel):
    action: str | None = Field(default=None, description="IN or OUT")
    barcode: Identifier = None
    qty: QtyIn = Field(default=None, description="Positive integer")
    location: Identifier = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "action": "IN",
                "barcode": "8690000000017",
                "qty": 10,
                "location": "A1",
            }
        }
    )


class StockMoveOut(BaseModel):
    ok: bool = True
    barcode: str
    location: str
    level: int


class StockTransferIn(BaseModel):
    barcode: Identifier = None
    qty: QtyIn = Field(default=None, description="Positive integer")
    from_location: Identifier = Field(
        default=None,
        validation_alias=AliasChoices("from_location", "fromLocation"),
    )
    to_location: Identifier = Field(
        default=None,
        validation_alias=AliasChoices("to_location", "toLocation"),
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "barcode": "8690000000017",
                "qty": 5,
                "fromLocation": "A1",
                "toLocation": "B2",
            }
        },
    )


class StockTransferOut(BaseModel):
    ok: bool = True
    barcode: str
    from_location: str
    to_location: str
    from_level: int
    to_level: int


class CountLineIn(BaseModel):
    barcode: Identifier = None
    qty: QtyIn = Field(default=None, description="Non-negative integer")


class StockCountIn(BaseModel):
    location: Identifier = None
    lines: list[CountLineIn] | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "location": "A1",
                "lines": [
                    {"barcode": "8690000000017", "qty": 7},
                    {"barcode": "8690000000024", "qty": 0},
                ],
            }
        }
    )


class CountLineOut(BaseModel):
    barcode: str
    qty: int
    applied_delta: int | None = None


class StockCountOut(BaseModel):
    ok: bool = True
    count_id: int
    applied: bool
    lines: list[CountLineOut]


class StockLevelOut(BaseModel):
    barcode: str
    location: str
    qty: int


class StockLevelListOut(BaseModel):
    ok: bool = True
    rows: list[StockLevelOut]


class MovementOut(BaseModel):
    id: int
    action: str
    barcode: str
    qty: int
    location: str
    created_at: datetime


class MovementListOut(BaseModel):
    ok: bool = True
    rows: list[MovementOut]


class TransferRecordOut(BaseModel):
    id: int
    barcode: str
    qty: int
    from_location: str
    to_location: str
    created_at: datetime


class TransferListOut(BaseModel):
    ok: bool = True
    rows: list[TransferRecordOut]


class CountSessionOut(BaseModel):
    id: int
    location: str
    created_at: datetime
    lines_count: int


class CountSessionListOut(BaseModel):
    ok: bool = True
    rows: list[CountSessionOut]


class CountSessionDetailOut(BaseModel):
    ok: bool = True
    id: int
    location: str
    created_at: datetime
    lines: list[CountLineOut]
