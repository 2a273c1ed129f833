"""
Configuration module for the Tool Finder backend.

Loads environment variables and validates required settings.
"""
import os
from typing import List
from dotenv import load_dotenv

# Load .env file
load_dotenv()

DEFAULT_SESSION_SECRET = "tool-finder-secret-key-change-in-production"


class Settings:
    """Application settings loaded from environment variables."""

    # Database (any SQLAlchemy URL; SQLite file by default)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./database/tool-finder.db")

    # Session cookie (signed JWT, HS256)
    SESSION_SECRET: str = os.getenv("SESSION_SECRET", DEFAULT_SESSION_SECRET)
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "toolfinder_session")
    SESSION_MAX_AGE_SECONDS: int = int(os.getenv("SESSION_MAX_AGE_SECONDS", str(24 * 60 * 60)))

    # Password hashing
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Google Gemini API (the API key itself is per-user)
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    GEMINI_TIMEOUT_SECONDS: float = float(os.getenv("GEMINI_TIMEOUT_SECONDS", "30"))

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Settings
    CORS_ALLOWED_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]

    def validate(self) -> None:
        """
        Validate that all required settings are configured.

        Raises:
            ValueError: If any required setting is missing or insecure.
        """
        required_settings = {
            "DATABASE_URL": self.DATABASE_URL,
            "SESSION_SECRET": self.SESSION_SECRET,
        }

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

        if self.SESSION_SECRET == DEFAULT_SESSION_SECRET and not self.is_development():
            raise ValueError(
                "SESSION_SECRET is still the development default. "
                "Set a strong random SESSION_SECRET outside development."
            )

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT.lower() in ("development", "testing")


# Create a singleton instance
settings = Settings()

# Validate settings on module import (will fail fast if misconfigured)
# Skip validation during tests or when importing for introspection
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # In development, warn but don't crash
        if settings.is_development():
            print(f"⚠️  Warning: {e}")
            print("   The app may not work correctly until you configure your .env file.")
        else:
            # In production or staging, fail immediately
            raise
