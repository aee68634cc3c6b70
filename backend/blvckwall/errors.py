from typing import List, Optional


class BlvckwallError(Exception):
    """Base class for every error the data access layer is allowed to raise."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "message": self.message}


class ValidationError(BlvckwallError):
    status_code = 422

    def __init__(self, violations: List[str]) -> None:
        super().__init__("Validation failed: " + ", ".join(violations))
        self.violations = list(violations)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["violations"] = self.violations
        return data


class NotFound(BlvckwallError):
    status_code = 404

    def __init__(self, category: str, record_id: str) -> None:
        super().__init__(f"{category} record not found: {record_id}")
        self.category = category
        self.record_id = record_id


class Unauthorized(BlvckwallError):
    status_code = 401


class StoreUnavailable(BlvckwallError):
    status_code = 503


class DecryptionError(BlvckwallError):
    pass


class RateLimited(BlvckwallError):
    status_code = 429

    def __init__(self, message: str, retry_after: float) -> None:
        super().__init__(message)
        self.retry_after = retry_after

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["retry_after"] = self.retry_after
        return data


class ProviderError(BlvckwallError):
    status_code = 502

    def __init__(self, provider: str, message: str, status: Optional[int] = None) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status = status
