"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.03.00"

    LOG_LEVEL: str = "INFO"

    # Session Token (supports key rotation)
    JWT_SECRET: str = "change-this-in-production"
    JWT_SECRET_PREVIOUS: str = ""  # Set during rotation, clear after
    SESSION_EXPIRES_HOURS: int = 8

    # Built-in login (first.last@<domain> with derived password)
    COMPANY_EMAIL_DOMAIN: str = "frostrek.com"
    LOGIN_PASSWORD_SUFFIX: str = "@123"
    DEFAULT_LOGIN_ROLE: str = "admin"

    # "local" (signed cookie issued here) or "identity_provider"
    AUTH_PROVIDER: str = "local"
    IDP_JWKS_URL: str = ""
    IDP_ISSUER: str = ""
    IDP_AUDIENCE: str = ""
    IDP_SIGN_OUT_URL: str = ""

    # Domain restriction (comma-separated)
    ALLOWED_EMAIL_DOMAINS: str = ""

    # Data backend (REST query API)
    BACKEND_URL: str = "http://localhost:54321"
    BACKEND_SERVICE_KEY: str = ""
    BACKEND_PAGE_SIZE: int = 1000
    BACKEND_MESSAGES_TABLE: str = "chat_logs"
    BACKEND_TICKETS_TABLE: str = "tickets"
    BACKEND_PROFILES_TABLE: str = "profiles"

    # Shared secret sent by the backend's database webhooks
    BACKEND_WEBHOOK_SECRET: str = ""

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Frontend (for invite redirects)
    FRONTEND_URL: str = "http://localhost:3000"

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Rate Limiting (requests per minute)
    RATE_LIMIT_AUTH: int = 5  # Login attempts

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def allowed_domains_list(self) -> list[str]:
        """Parse ALLOWED_EMAIL_DOMAINS into lowercase list."""
        if not self.ALLOWED_EMAIL_DOMAINS:
            return []
        return [d.strip().lower() for d in self.ALLOWED_EMAIL_DOMAINS.split(",") if d.strip()]

    @property
    def jwt_secrets(self) -> list[str]:
        """Returns list of valid secrets (current first, then previous if set)."""
        secrets = [self.JWT_SECRET]
        if self.JWT_SECRET_PREVIOUS:
            secrets.append(self.JWT_SECRET_PREVIOUS)
        return secrets

    @property
    def cookie_secure(self) -> bool:
        """Secure cookies only in production."""
        return self.ENV != "dev"

    @property
    def uses_identity_provider(self) -> bool:
        return self.AUTH_PROVIDER == "identity_provider"


settings = Settings()
