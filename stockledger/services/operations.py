"""
Inventory operations engine.

Move, Transfer and Count each validate their input up front, then append to
the ledger and fold the resulting deltas into ``stock_levels`` inside one
session transaction. Any storage failure rolls the whole transaction back.

None of the operations is idempotent: submitting the same request twice
appends two ledger records.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stockledger.core.errors import StorageError, ValidationError
from stockledger.models.inventory import CountLine, CountSession, Movement, Transfer
from stockledger.services.projector import apply_stock_delta, get_stock_level

MOVE_ACTIONS = ("IN", "OUT")

# Ledger and level columns are 32-bit INTEGER on row-locking stores.
MAX_QTY = 2**31 - 1
MAX_BARCODE_LENGTH = 128
MAX_LOCATION_LENGTH = 120


@dataclass(frozen=True)
class MoveResult:
    barcode: str
    location: str
    level: int


@dataclass(frozen=True)
class TransferResult:
    barcode: str
    from_location: str
    to_location: str
    from_level: int
    to_level: int


@dataclass(frozen=True)
class CountLineResult:
    barcode: str
    qty: int
    applied_delta: int | None


@dataclass(frozen=True)
class CountResult:
    count_id: int
    location: str
    applied: bool
    lines: list[CountLineResult]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(values: Mapping[str, Any], fields: Iterable[str]) -> None:
    for field in fields:
        if _is_blank(values.get(field)):
            raise ValidationError(f"Missing field: {field}")


def coerce_int(value: Any) -> int | None:
    """Return ``value`` as an int when it denotes a whole number, else None.

    Accepts ints, integral floats and numeric strings. Booleans are rejected.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        if math.isfinite(number) and number.is_integer():
            return int(number)
    return None


def _positive_qty(value: Any) -> int:
    qty = coerce_int(value)
    if qty is None or qty <= 0 or qty > MAX_QTY:
        raise ValidationError("qty must be positive integer")
    return qty


def bounded_text(field: str, value: Any, max_length: int) -> str:
    text = str(value).strip()
    if len(text) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return text


def _line_field(line: Any, name: str) -> Any:
    if isinstance(line, Mapping):
        return line.get(name)
    return getattr(line, name, None)


class InventoryOperations:
    """Mutating operations over one store session.

    ``apply_count`` makes physical counts authoritative: each counted line
    pushes a corrective delta so the level ends at exactly the counted qty.
    """

    def __init__(self, db: Session, *, apply_count: bool = False):
        self.db = db
        self.apply_count = apply_count

    def move(self, action: Any, barcode: Any, qty: Any, location: Any) -> MoveResult:
        require_fields(
            {"action": action, "barcode": barcode, "qty": qty, "location": location},
            ("action", "barcode", "qty", "location"),
        )
        if action not in MOVE_ACTIONS:
            raise ValidationError("action must be IN or OUT")
        n_qty = _positive_qty(qty)
        barcode = bounded_text("barcode", barcode, MAX_BARCODE_LENGTH)
        location = bounded_text("location", location, MAX_LOCATION_LENGTH)
        delta = n_qty if action == "IN" else -n_qty

        try:
            self.db.add(
                Movement(action=action, barcode=barcode, qty=n_qty, location=location)
            )
            apply_stock_delta(self.db, barcode=barcode, location=location, delta=delta)
            level = get_stock_level(self.db, barcode=barcode, location=location)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f"Stock move failed: {exc}") from exc
        except Exception:
            self.db.rollback()
            raise

        return MoveResult(barcode=barcode, location=location, level=level)

    def transfer(self, barcode: Any, qty: Any, from_location: Any, to_location: Any) -> TransferResult:
        require_fields(
            {
                "barcode": barcode,
                "qty": qty,
                "fromLocation": from_location,
                "toLocation": to_location,
            },
            ("barcode", "qty", "fromLocation", "toLocation"),
        )
        barcode = bounded_text("barcode", barcode, MAX_BARCODE_LENGTH)
        from_location = bounded_text("fromLocation", from_location, MAX_LOCATION_LENGTH)
        to_location = bounded_text("toLocation", to_location, MAX_LOCATION_LENGTH)
        if from_location == to_location:
            raise ValidationError("fromLocation must differ from toLocation")
        n_qty = _positive_qty(qty)

        try:
            self.db.add(
                Transfer(
                    barcode=barcode,
                    qty=n_qty,
                    from_location=from_location,
                    to_location=to_location,
                )
            )
            apply_stock_delta(self.db, barcode=barcode, location=from_location, delta=-n_qty)
            apply_stock_delta(self.db, barcode=barcode, location=to_location, delta=n_qty)
            from_level = get_stock_level(self.db, barcode=barcode, location=from_location)
            to_level = get_stock_level(self.db, barcode=barcode, location=to_location)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f"Stock transfer failed: {exc}") from exc
        except Exception:
            self.db.rollback()
            raise

        return TransferResult(
            barcode=barcode,
            from_location=from_location,
            to_location=to_location,
            from_level=from_level,
            to_level=to_level,
        )

    def _validated_count_lines(self, lines: Any) -> list[tuple[str, int]]:
        if isinstance(lines, (str, bytes, Mapping)) or not isinstance(lines, Iterable):
            raise ValidationError("lines must be non-empty array")
        lines = list(lines)
        if not lines:
            raise ValidationError("lines must be non-empty array")

        validated: list[tuple[str, int]] = []
        for index, line in enumerate(lines):
            raw_barcode = _line_field(line, "barcode")
            barcode = "" if raw_barcode is None else str(raw_barcode).strip()
            qty = coerce_int(_line_field(line, "qty"))
            if (
                not barcode
                or len(barcode) > MAX_BARCODE_LENGTH
                or qty is None
                or qty < 0
                or qty > MAX_QTY
            ):
                raise ValidationError(f"invalid line item at index {index}")
            validated.append((barcode, qty))
        return validated

    def count(self, location: Any, lines: Any) -> CountResult:
        require_fields({"location": location, "lines": lines}, ("location", "lines"))
        location = bounded_text("location", location, MAX_LOCATION_LENGTH)
        validated = self._validated_count_lines(lines)

        results: list[CountLineResult] = []
        try:
            header = CountSession(location=location)
            self.db.add(header)
            self.db.flush()

            # Ordered fold: each line reads the level left by the previous one.
            for barcode, qty in validated:
                applied_delta = None
                if self.apply_count:
                    current = get_stock_level(
                        self.db, barcode=barcode, location=location, for_update=True
                    )
                    applied_delta = qty - current
                    apply_stock_delta(self.db, barcode=barcode, location=location, delta=applied_delta)
                self.db.add(
                    CountLine(
                        count_id=header.id,
                        barcode=barcode,
                        qty=qty,
                        applied_delta=applied_delta,
                    )
                )
                results.append(CountLineResult(barcode=barcode, qty=qty, applied_delta=applied_delta))
            self.db.flush()
            count_id = header.id
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(f"Stock count failed: {exc}") from exc
        except Exception:
            self.db.rollback()
            raise

        return CountResult(
            count_id=count_id,
            location=location,
            applied=self.apply_count,
            lines=results,
        )
