from pydantic import BaseModel, ConfigDict

from stockledger.schemas.common import Identifier


class ProductUpsertIn(BaseModel):
    barcode: Identifier = None
    name: str | None = None
    sku: Identifier = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "barcode": "8690000000017",
                "name": "Sparkling Water 500ml",
                "sku": "SW-500",
            }
        }
    )


class ProductLookupOut(BaseModel):
    ok: bool = True
    name: str | None = None
    sku: str | None = None
