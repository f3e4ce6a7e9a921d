from typing import Any


def success_response(data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    return {"success": True, "data": data, "meta": meta or {}}


def error_response(message: str) -> dict[str, Any]:
    return {"error": message}


def routes_response(routes: list[dict[str, Any]]) -> dict[str, Any]:
    return {"routes": routes}
