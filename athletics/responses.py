from __future__ import annotations

from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel


def dump(schema: type[BaseModel], obj: Any) -> Any:
    """Render ORM rows (or lists of them) through ``schema`` as camelCase JSON data."""
    if isinstance(obj, (list, tuple)):
        return [dump(schema, o) for o in obj]
    return schema.model_validate(obj).model_dump(by_alias=True, mode="json")


def ok(data: Any = None, message: Optional[str] = None, status_code: int = 200, **extra: Any) -> JSONResponse:
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    body.update(extra)
    return JSONResponse(body, status_code=status_code)


def created(data: Any = None, message: Optional[str] = None, **extra: Any) -> JSONResponse:
    return ok(data, message, status_code=201, **extra)
