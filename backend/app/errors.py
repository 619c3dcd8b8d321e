from __future__ import annotations

from typing import Any, Dict

BAD_REQUEST = "BAD_REQUEST"
INTERNAL_ERROR = "INTERNAL_ERROR"


class ApiError(Exception):
    """Error rendered as ``{"error": {"code", "message"}}`` by the app."""

    def __init__(self, status_code: int, code: str, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message

    def to_body(self) -> Dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message}}


def bad_request(message: str) -> ApiError:
    return ApiError(400, BAD_REQUEST, message)


def internal_error(message: str) -> ApiError:
    return ApiError(500, INTERNAL_ERROR, message)


def first_validation_message(errors: list[dict[str, Any]]) -> str:
    """Human-readable message for the first failed constraint."""
    if not errors:
        return "Invalid input"
    first = errors[0]
    ctx = first.get("ctx") or {}
    if first.get("type") == "value_error" and "error" in ctx:
        return str(ctx["error"])
    if first.get("type") == "json_invalid":
        return "Invalid input"
    loc = [str(p) for p in first.get("loc", ()) if p != "body"]
    msg = str(first.get("msg") or "Invalid input")
    return f"{'.'.join(loc)}: {msg}" if loc else msg
