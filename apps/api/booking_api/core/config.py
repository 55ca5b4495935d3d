"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")
    
    # Environment
    ENV: str = "dev"
    
    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"
    
    # Logging
    LOG_LEVEL: str = "INFO"
    
    # Database
    DATABASE_URL: str
    # Applied on PostgreSQL; booking check-then-insert relies on it
    DB_ISOLATION_LEVEL: str = "SERIALIZABLE"
    # SQLite only: how long a writer waits for the database lock
    SQLITE_BUSY_TIMEOUT_SECONDS: int = 30
    
    # Session Token (supports key rotation)
    JWT_SECRET: str = "change-this-in-production"
    JWT_SECRET_PREVIOUS: str = ""  # Set during rotation, clear after
    JWT_EXPIRES_HOURS: int = 4
    
    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"
    
    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""
    
    # Rate Limiting (requests per minute)
    RATE_LIMIT_API: int = 60  # General API
    RATE_LIMIT_BOOKING: int = 20  # Appointment creation
    
    # Booking defaults
    DEFAULT_CURRENCY: str = "USD"
    NOTIFICATION_CHANNEL: str = "email"
    DEFAULT_PAGE_SIZE: int = 20
    
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
    
    @property
    def jwt_secrets(self) -> list[str]:
        """Returns list of valid secrets (current first, then previous if set)."""
        secrets = [self.JWT_SECRET]
        if self.JWT_SECRET_PREVIOUS:
            secrets.append(self.JWT_SECRET_PREVIOUS)
        return secrets


settings = Settings()
