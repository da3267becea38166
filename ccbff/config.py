import os

from .utils import env_bool, env_int, env_list


class Settings:
    ENV: str = os.getenv("ENV", "dev")
    DEV_MODE: bool = ENV.lower() == "dev"
    APP_HOST: str = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT: int = int(os.getenv("APP_PORT", "8070"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    ALLOWED_ORIGINS: list[str] = env_list(
        "ALLOWED_ORIGINS",
        default=["*"] if DEV_MODE else [],
    )
    # Service directory (CSDS)
    CSDS_BASE_URL: str = os.getenv("CSDS_BASE_URL", "https://api.liveperson.net")
    DOMAIN_CACHE_TTL_SECS: int = env_int("DOMAIN_CACHE_TTL_SECS", default=3600, minimum=1)
    CACHE_MAX_ENTRIES: int = env_int("CACHE_MAX_ENTRIES", default=4096, minimum=16)
    CACHE_MAX_ACCOUNTS: int = env_int("CACHE_MAX_ACCOUNTS", default=1024, minimum=1)
    # Upstream HTTP
    UPSTREAM_TIMEOUT_SECS: int = env_int("UPSTREAM_TIMEOUT_SECS", default=30, minimum=5, maximum=40)
    # Sign-in client registered with sentinel
    IDP_CLIENT_ID: str = os.getenv("IDP_CLIENT_ID") or os.getenv("VUE_APP_CLIENT_ID", "")
    IDP_CLIENT_SECRET: str = os.getenv("IDP_CLIENT_SECRET") or os.getenv("VUE_APP_CLIENT_SECRET", "")
    # Connector API app credentials
    CONNECTOR_API_CLIENT_ID: str = os.getenv("CONNECTOR_API_CLIENT_ID") or os.getenv("CONNECTOR_API_BASIC_CLIENT_ID", "")
    CONNECTOR_API_CLIENT_SECRET: str = (
        os.getenv("CONNECTOR_API_CLIENT_SECRET") or os.getenv("CONNECTOR_API_BASIC_CLIENT_SECRET", "")
    )
    # Credential encryption
    ENCRYPTION_PASSWORD: str = os.getenv("ENCRYPTION_PASSWORD") or os.getenv("SALT_TOKEN", "")
    ENCRYPTION_SALT: str = os.getenv("ENCRYPTION_SALT", "")
    # Document store
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "memory")  # memory|redis
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://redis:6379/0")
    STORE_PREFIX: str = os.getenv("STORE_PREFIX", "ccbff")
    # Locally issued HS256 tokens (optional)
    JWT_SECRET: str = os.getenv("JWT_SECRET", "")
    JWT_SECRETS_LIST_RAW: str | None = os.getenv("JWT_SECRETS")
    # Tracing
    OTEL_ENABLED: bool = env_bool("OTEL_ENABLED", default=False)
    OTEL_EXPORTER_OTLP_ENDPOINT: str = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://otel-collector:4318")
    OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "ccbff")
    # Feature flags
    FEATURE_PROACTIVE: bool = env_bool("FEATURE_PROACTIVE", default=True)
    FEATURE_AI_STUDIO: bool = env_bool("FEATURE_AI_STUDIO", default=True)

    @property
    def JWT_SECRETS(self) -> list[str]:  # current-first
        secrets: list[str] = []
        if self.JWT_SECRETS_LIST_RAW:
            secrets.extend([s.strip() for s in self.JWT_SECRETS_LIST_RAW.split(",") if s.strip()])
        if self.JWT_SECRET and self.JWT_SECRET not in secrets:
            secrets.insert(0, self.JWT_SECRET)
        return secrets


settings = Settings()

# Harden secrets for non-dev environments
if not settings.DEV_MODE:
    if not settings.ALLOWED_ORIGINS or "*" in settings.ALLOWED_ORIGINS:
        raise RuntimeError("ALLOWED_ORIGINS must list explicit origins when ENV!=dev")
    if not settings.ENCRYPTION_PASSWORD or not settings.ENCRYPTION_SALT:
        raise RuntimeError("ENCRYPTION_PASSWORD and ENCRYPTION_SALT must be set when ENV!=dev")
    if settings.STORE_BACKEND.lower() != "redis":
        raise RuntimeError("STORE_BACKEND must be redis when ENV!=dev")
