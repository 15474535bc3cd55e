from pydantic import BaseModel
from typing import Any

from auto_api.services.pageable import Pageable, Slice


# ─── Error Detail (per field) ──────────────────────────────────────────────────
class ErrorDetail(BaseModel):
    field: str
    message: str


# ─── Error Body ───────────────────────────────────────────────────────────────
class ErrorBody(BaseModel):
    code: str
    details: list[ErrorDetail] | None = None
    field: str | None = None


# ─── Error Response ───────────────────────────────────────────────────────────
class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: ErrorBody


# ─── Helper Functions ─────────────────────────────────────────────────────────
def success_response(message: str, data: Any = None) -> dict:
    """Return a standardized success dict (used in route handlers)."""
    return {"success": True, "message": message, "data": data}


def page_response(message: str, data: list, result: Slice, pageable: Pageable) -> dict:
    """
    Wrap one page of a search. With size 0 (no paging) everything is on page 0.
    """
    total = result.total_elements
    if pageable.size == 0:
        size, total_pages = total, 1
    else:
        size = pageable.size
        total_pages = (total + size - 1) // size
    return {
        "success": True,
        "message": message,
        "data": data,
        "meta": {
            "page": pageable.number,
            "size": size,
            "totalElements": total,
            "totalPages": total_pages,
        }
    }
