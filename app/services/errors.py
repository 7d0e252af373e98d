from typing import Optional


class ChatRouterError(Exception):
    """Base class for failures raised while serving a chat request."""


class ValidationError(ChatRouterError):
    status_code = 400


class MethodNotAllowed(ChatRouterError):
    status_code = 405


class ConfigurationError(ChatRouterError):
    """A required endpoint or credential is missing from the settings."""


class BackendHTTPError(ChatRouterError):
    """A model backend answered with a non-success HTTP status."""

    def __init__(self, prefix: str, status_code: int, reason: str, body: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        message = f"{prefix}: {status_code} {reason}"
        if body is not None:
            message = f"{message}: {body}"
        super().__init__(message)
