from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

import stockledger.models  # noqa: F401
from stockledger.core.config import settings
from stockledger.core.errors import InventoryError
from stockledger.core.observability import (
    http_exception_handler,
    inventory_error_handler,
    log_event,
    request_logging_middleware,
    setup_observability,
    unhandled_exception_handler,
    validation_exception_handler,
)
from stockledger.db.base import Base
from stockledger.db.session import engine
from stockledger.routers import products, stock


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_schema:
        Base.metadata.create_all(bind=engine)
    log_event(
        "startup",
        app=settings.app_name,
        allowed_origins=settings.allowed_origins or "(ALL)",
        apply_count=settings.apply_count,
    )
    yield


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description=(
        "Per-location stock ledger for barcoded products.\n\n"
        "Every mutation (`/stock/move`, `/stock/transfer`, `/stock/count`) appends to an "
        "immutable ledger and updates the materialized stock level in the same transaction."
    ),
    swagger_ui_parameters={
        "displayRequestDuration": True,
        "defaultModelsExpandDepth": 1,
    },
    openapi_tags=[
        {"name": "health", "description": "Service status and quick links."},
        {"name": "products", "description": "Barcode lookup and product seeding."},
        {"name": "stock", "description": "Stock movements, transfers, counts and levels."},
    ],
    lifespan=lifespan,
)

setup_observability()
app.middleware("http")(request_logging_middleware)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(InventoryError, inventory_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# An empty allow-list admits every origin.
allow_all_origins = not settings.allowed_origins or "*" in settings.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all_origins else settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(products.router)
app.include_router(stock.router)


@app.get("/", tags=["health"])
def root():
    return {
        "app": settings.app_name,
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/health",
        "ready": "/ready",
    }


@app.get("/health", tags=["health"])
def health():
    return {"ok": True, "time": datetime.now(timezone.utc).isoformat()}


@app.get("/ready", tags=["health"])
def ready():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        return {"ok": False}
    return {"ok": True}


def run() -> None:
    uvicorn.run("stockledger.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
