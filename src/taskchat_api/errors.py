from __future__ import annotations

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """
    Base class for errors that terminate a request with a JSON body.

    Subclasses fix the HTTP status code; the message is sent to the caller as
    ``{"message": ...}``.
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_content(self) -> Dict[str, Any]:
        return {"message": self.message}


# PUBLIC_INTERFACE
class ValidationError(ServiceError):
    """A required input field is missing or empty."""

    status_code = 400


# PUBLIC_INTERFACE
class NotFoundError(ServiceError):
    """The base store read returned nothing."""

    status_code = 404


# PUBLIC_INTERFACE
class StoreError(ServiceError):
    """
    Any failure reported by the document store or the realtime store.

    The underlying exception is kept on ``cause`` and echoed to the caller as
    ``{"type": ..., "detail": ...}`` next to the generic message.
    """

    status_code = 500

    def __init__(self, cause: Optional[BaseException] = None, message: str = "Server error") -> None:
        super().__init__(message)
        self.cause = cause

    def to_content(self) -> Dict[str, Any]:
        content = super().to_content()
        if self.cause is not None:
            content["error"] = {
                "type": type(self.cause).__name__,
                "detail": str(self.cause),
            }
        return content
