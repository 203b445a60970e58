"""Domain errors raised by the anti-abuse core and mapped to HTTP by the routers."""
from typing import Any, Dict, List, Optional

from fastapi import status


class FeedbackError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(FeedbackError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid form data"

    def __init__(self, message: Optional[str] = None, details: Optional[List[Dict[str, str]]] = None) -> None:
        super().__init__(message)
        self.details = details or []

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        if self.details:
            body["details"] = self.details
        return body


class AuthzError(FeedbackError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Forbidden"


class InvalidToken(AuthzError):
    message = "Invalid token"


class TokenAlreadyUsed(AuthzError):
    message = "Token already used"


class TokenExpired(AuthzError):
    message = "Token expired"


class MalformedToken(AuthzError):
    message = "Invalid token format"


class InvalidSignature(AuthzError):
    message = "Invalid token signature"


class DownloadLinkExpired(AuthzError):
    message = "Download link expired"


class RateLimited(FeedbackError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "Too many requests"


class CooldownActive(RateLimited):
    def __init__(self, remaining_seconds: int) -> None:
        self.remaining_seconds = remaining_seconds
        super().__init__(f"Please wait {remaining_seconds} seconds before submitting again.")

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, "remainingSeconds": self.remaining_seconds}


class DownloadRateLimited(RateLimited):
    _messages = {
        "ip": "Rate limit exceeded (IP). Please try again later.",
        "token": "Download limit exceeded for this session.",
    }

    def __init__(self, scope: str) -> None:
        self.scope = scope
        super().__init__(self._messages[scope])


class NotFound(FeedbackError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class StorageError(FeedbackError):
    message = "Storage failure"
