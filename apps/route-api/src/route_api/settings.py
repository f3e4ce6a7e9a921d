from __future__ import annotations

from functools import lru_cache

from locator_devkit.config import ServiceSettings


class RouteApiSettings(ServiceSettings):
    SERVICE_NAME: str = "route-api"

    GOOGLE_MAPS_API_KEY: str | None = None
    GOOGLE_DISTANCE_MATRIX_URL: str = "https://maps.googleapis.com/maps/api/distancematrix/json"
    DISTANCE_MATRIX_LANGUAGE: str = "pt-BR"
    OSRM_BASE_URL: str = "https://router.project-osrm.org"
    ROUTING_USER_AGENT: str = "RouteLocator/1.0"
    PROVIDER_TIMEOUT_SECONDS: float = 10.0

    PREFILTER_MAX_DISTANCE_KM: float = 60.0
    DISPLAY_MAX_DISTANCE_KM: float = 40.0
    MAX_ROUTED_CANDIDATES: int = 20
    MATRIX_BATCH_SIZE: int = 10
    BATCH_DELAY_SECONDS: float = 0.2

    RATE_LIMIT_MAX_ATTEMPTS: int = 20
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    CORS_ALLOWED_ORIGINS: list[str] = ["http://localhost:5173", "http://localhost:8080"]
    # Preview and production deployments on the hosting platform
    CORS_ALLOWED_ORIGIN_REGEX: str | None = r"https://[a-z0-9.-]+\.(lovable\.app|lovableproject\.com)"

    # Comma separated tenant ids accepted when no DATABASE_URL is configured.
    ACTIVE_TENANT_IDS: str = ""

    def active_tenant_ids(self) -> set[str]:
        return {item.strip().lower() for item in self.ACTIVE_TENANT_IDS.split(",") if item.strip()}


@lru_cache
def get_settings() -> RouteApiSettings:
    return RouteApiSettings()
