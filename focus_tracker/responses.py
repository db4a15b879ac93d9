from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse


def success(data: Any = None, status_code: int = 200, message: str | None = None) -> JSONResponse:
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    body["data"] = data
    return JSONResponse(body, status_code=status_code)


def failure(message: str, status_code: int, errors: list[dict] | None = None) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return JSONResponse(body, status_code=status_code)
