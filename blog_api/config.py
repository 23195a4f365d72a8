from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = "sqlite:///./blog.db"

    # API
    API_TITLE: str = "Blog API"
    API_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # development | test | production
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # Security
    SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN_DAYS: int = 7
    JWT_REFRESH_EXPIRES_IN_DAYS: int = 30
    JWT_ISSUER: str = "blog-api"
    JWT_AUDIENCE: str = "blog-api-users"

    # Rate limiting (per client address)
    AUTH_RATE_LIMIT_PER_MINUTE: int = 20

    # Logging
    LOG_LEVEL: Optional[str] = None
    SLOW_REQUEST_MS: int = 1000

    # Seed admin account (init_db)
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create settings instance
settings = Settings()
