from fastapi.encoders import jsonable_encoder
from typing import Any, Optional, Dict


def success(data: Optional[Any] = None, message: str = "Success"):
    response = {
        "success": True,
        "message": message,
        "data": data,
        "errors": None,
    }

    # Ensure SQLAlchemy models, datetimes, etc. are JSON-serializable.
    return jsonable_encoder(response)


def pagination_meta(total: int, page: int, limit: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": (total + limit - 1) // limit,
    }
