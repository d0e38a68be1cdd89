# utils/responses.py
from typing import Any, Generic, List, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


# Envelope shared by every endpoint: {status, message, data, errors}
class ApiResponse(BaseModel, Generic[T]):
    status: str = "success"
    message: Optional[str] = None
    data: Optional[T] = None
    errors: Optional[Any] = None


# Paginated collection carried inside the envelope's data
class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    page_size: int


def ok(data=None, message: Optional[str] = None) -> dict:
    return {"status": "success", "message": message, "data": data}


def error_body(message: str, errors=None) -> dict:
    return {"status": "error", "message": message, "data": None, "errors": errors}


def paginate(query, page: int, page_size: int) -> dict:
    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()
    return {"items": items, "total": total, "page": page, "page_size": page_size}
