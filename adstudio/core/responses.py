from typing import Any, Dict, Optional


def success(data: Any = None, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    """Standard `{success, data, message}` envelope returned by every route."""
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    body.update(extra)
    return body


def failure(error: str, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "error": error}
    body.update(extra)
    return body


def pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": (total + limit - 1) // limit if limit else 0,
    }
