"""Error response envelope."""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error body shared by every handler.

    Attributes:
        error: Short error category (e.g. "Unauthorized")
        detail: Human-readable reason
        correlation_id: Request tracking ID for debugging
        field: Colliding field for registration conflicts
    """

    error: str
    detail: str
    correlation_id: str
    field: Optional[str] = None
