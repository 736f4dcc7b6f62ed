from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

WEEK_IN_SECONDS = 7 * 24 * 3600
HOUR_IN_SECONDS = 3600


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ONESEARCH_", env_file=".env", extra="ignore")

    app_name: str = "onesearch"
    env: str = "dev"
    host: str = "0.0.0.0"  # nosec B104 - intentional for container deployments
    port: int = 8080

    # Public URL of this node, sent as the requesting origin to peers
    site_url: str = "http://localhost:8080/"

    # Backends
    store_backend: str = "memory"  # memory or redis
    cache_backend: str = "memory"  # memory or redis
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")

    # Secret Store
    encryption_key: str | None = None
    encryption_salt: str | None = None

    # Administrator session (bearer token); unset disables admin access
    admin_token: str | None = None

    # Outbound peer requests
    http_timeout: float = 10.0
    user_agent: str = "OneSearch/0.1.0"

    # Proxy cache TTLs
    credentials_cache_ttl: int = WEEK_IN_SECONDS
    searchable_sites_cache_ttl: int = HOUR_IN_SECONDS
    search_settings_cache_ttl: int = HOUR_IN_SECONDS

    # Refuse to overwrite an already-set site role
    role_guard_enabled: bool = True

    # Observability
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def is_production(self) -> bool:
        return self.env in ("prod", "production")


settings = Settings()
