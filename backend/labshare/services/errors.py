class AuthError(Exception):
    """Base class for auth failures surfaced to callers.

    Each subclass carries the HTTP status and a stable error code; messages are
    safe to show to end users (they never include the submitted code and never
    say more about an email than UnknownIdentity does).
    """

    status_code: int = 400
    error_code: str = "auth_error"
    message: str = "Authentication error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"error": self.error_code, "message": self.message}


class UnknownIdentity(AuthError):
    status_code = 404
    error_code = "unknown_identity"
    message = "Email not found in student database"


class RateLimited(AuthError):
    status_code = 429
    error_code = "rate_limited"

    def __init__(self, retry_after: int):
        self.retry_after = max(0, int(retry_after))
        minutes = max(1, -(-self.retry_after // 60))
        super().__init__(f"Too many requests. Please wait {minutes} minute(s) before requesting a new code.")

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["retry_after"] = self.retry_after
        return payload


class DeliveryUnavailable(AuthError):
    status_code = 502
    error_code = "delivery_unavailable"
    message = "Failed to send email. Please try again."


class InvalidCode(AuthError):
    status_code = 400
    error_code = "invalid_code"
    message = "Invalid code"


class ExpiredCode(AuthError):
    status_code = 400
    error_code = "expired_code"

    def __init__(self, overage_minutes: int):
        self.overage_minutes = max(0, int(overage_minutes))
        super().__init__(
            f"Code has expired {self.overage_minutes} minute(s) ago. Please request a new code."
        )


class Unauthenticated(AuthError):
    status_code = 401
    error_code = "unauthenticated"
    message = "Unauthorized"


class StoreUnavailable(AuthError):
    status_code = 503
    error_code = "store_unavailable"
    message = "Service temporarily unavailable. Please try again."
