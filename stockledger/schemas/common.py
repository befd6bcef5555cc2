from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict


def _number_as_text(value: Any) -> Any:
    # Whole JSON numbers become their decimal text; booleans stay invalid.
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return value


Identifier = Annotated[str | None, BeforeValidator(_number_as_text)]


class OkOut(BaseModel):
    ok: bool = True


class ValidationIssueOut(BaseModel):
    field: str
    message: str
    type: str | None = None


class ErrorDetailOut(BaseModel):
    code: str
    message: str
    request_id: str
    path: str
    details: list[ValidationIssueOut] | None = None


class ErrorOut(BaseModel):
    error: ErrorDetailOut

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": {
                    "code": "bad_request",
                    "message": "qty must be positive integer",
                    "request_id": "8d8f2b00-6c79-4a45-8ff4-b0a5f2bc4bc2",
                    "path": "/stock/move",
                    "details": None,
                }
            }
        }
    )
