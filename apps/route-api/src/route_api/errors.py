from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ApiError(Exception):
    code: str
    message: str
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)


class RequestValidationFailed(ApiError):
    def __init__(self, message: str) -> None:
        super().__init__("VALIDATION_ERROR", message, 400)


class TenantNotAuthorized(ApiError):
    def __init__(self) -> None:
        super().__init__("TENANT_NOT_AUTHORIZED", "Tenant is not authorized", 403)


class RateLimitExceeded(ApiError):
    def __init__(self, retry_after_seconds: int) -> None:
        super().__init__(
            "RATE_LIMIT_EXCEEDED",
            "Too many requests. Please try again later.",
            429,
            {"Retry-After": str(retry_after_seconds)},
        )
        self.retry_after_seconds = retry_after_seconds


class ConfigurationError(ApiError):
    def __init__(self, message: str = "Server configuration error") -> None:
        super().__init__("CONFIGURATION_ERROR", message, 500)


class UpstreamHardFailure(ApiError):
    def __init__(self, message: str) -> None:
        super().__init__("UPSTREAM_FAILURE", message, 502)
