from typing import Optional, Any


class VaultError(Exception):
    """
    Base exception for the family vault client.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class NotAuthenticatedError(VaultError):
    """
    Raised when there is neither a live user nor a persisted token.
    """
    def __init__(self, message: str = "Not authenticated", details: Optional[Any] = None):
        super().__init__(message, code="NOT_AUTHENTICATED", status_code=401, details=details)


class TransportError(VaultError):
    """
    Raised when the backend cannot be reached (network, DNS, TLS, timeout).
    """
    def __init__(self, message: str = "Unable to reach the server", details: Optional[Any] = None):
        super().__init__(message, code="TRANSPORT_ERROR", status_code=503, details=details)


class RemoteError(VaultError):
    """
    Raised when the backend answers with a non-2xx status.
    """
    def __init__(self, status: int, message: str = "Request failed", details: Optional[Any] = None):
        self.status = status
        super().__init__(message, code="REMOTE_ERROR", status_code=status, details=details)


class ValidationError(VaultError):
    """
    Raised when a client-side precondition fails.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=422, details=details)


class StaleReferenceError(VaultError):
    """
    Raised when an action references something the client can no longer use
    (missing invitation token, deleted or unknown document id).
    """
    def __init__(self, message: str = "Stale reference", details: Optional[Any] = None):
        super().__init__(message, code="STALE_REFERENCE", status_code=409, details=details)


class IdentityError(VaultError):
    """
    Raised when the identity provider rejects a sign-in, sign-up or refresh.
    """
    def __init__(self, provider_code: str, message: str = "Authentication failed", details: Optional[Any] = None):
        self.provider_code = provider_code
        super().__init__(message, code="IDENTITY_ERROR", status_code=401, details=details)
