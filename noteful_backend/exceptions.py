"""
Application exception hierarchy.

Services and routes raise these; the handlers registered in api.main turn
them into JSON bodies of the form {"code", "reason", "message", "location"?}.

    NotefulError
    ├── ValidationError     422  malformed or missing input
    ├── InvalidReference    400  well-formed id that is malformed, missing or foreign
    ├── LoginError          400  bad credentials (location kept for logs only)
    ├── Unauthorized        401  missing, invalid or expired bearer token
    ├── Conflict            400  duplicate unique field
    └── NotFound            404  no matching entity owned by the caller
"""
from typing import Any, Dict, Optional


class NotefulError(Exception):
    status_code = 500
    reason = "InternalError"
    headers: Optional[Dict[str, str]] = None

    def __init__(
        self,
        message: str = "Internal Server Error",
        location: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.location = location
        # logged, never returned to the client
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body = {"code": self.status_code, "reason": self.reason, "message": self.message}
        if self.location:
            body["location"] = self.location
        return body


class ValidationError(NotefulError):
    status_code = 422
    reason = "ValidationError"


class InvalidReference(NotefulError):
    status_code = 400
    reason = "InvalidReference"

    def __init__(self, location: str, message: Optional[str] = None, context=None):
        if message is None:
            message = f"The `{location}` is not valid"
        super().__init__(message=message, location=location, context=context)


class LoginError(NotefulError):
    status_code = 400
    reason = "LoginError"
    public_message = "Incorrect username or password"

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.status_code, "reason": self.reason, "message": self.public_message}


class Unauthorized(NotefulError):
    status_code = 401
    reason = "Unauthorized"
    headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self, message: str = "Unauthorized", context=None):
        super().__init__(message=message, context=context)


class Conflict(NotefulError):
    status_code = 400
    reason = "Conflict"


class NotFound(NotefulError):
    status_code = 404
    reason = "NotFound"

    def __init__(self, message: str = "Not Found", context=None):
        super().__init__(message=message, context=context)
