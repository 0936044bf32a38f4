from typing import Any, Dict, Optional


class WistException(Exception):
    """Base exception for Wist"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(WistException):
    """The caller sent something unusable, e.g. a blank or malformed URL"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message=message,
            status_code=400,
            details={"field": field} if field else {}
        )


class NotFoundError(WistException):
    """Wishlist or item does not exist (or is soft deleted)"""

    def __init__(self, resource: str, resource_id: int):
        super().__init__(
            message=f"{resource} not found",
            status_code=404,
            details={"resource": resource, "id": resource_id}
        )


class UpstreamError(WistException):
    """The scraping service was unreachable, failed, or returned an unusable payload.

    The message carries the upstream's own error text when there is one.
    """

    def __init__(self, reason: str, url: Optional[str] = None, status: Optional[int] = None):
        details: Dict[str, Any] = {"reason": reason}
        if url:
            details["url"] = url
        if status is not None:
            details["upstream_status"] = status
        super().__init__(message=reason, status_code=502, details=details)
        self.reason = reason


class PersistenceError(WistException):
    """Storage write failed after a successful scrape; the scraped data is lost"""

    def __init__(self, reason: str, wishlist_id: Optional[int] = None):
        super().__init__(
            message=reason,
            status_code=500,
            details={"wishlist_id": wishlist_id} if wishlist_id is not None else {}
        )
        self.reason = reason
