"""
Configuration module for the Job Ledger backend.

Loads environment variables and validates required settings.
"""
import os
from typing import List
from dotenv import load_dotenv

# Load .env file
load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from environment variables."""

    # Supabase Configuration
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_PUBLISHABLE_KEY: str = os.getenv("SUPABASE_PUBLISHABLE_KEY", "")

    @property
    def SUPABASE_JWKS_URL(self) -> str:
        """Get the JWKS URL for JWT verification."""
        if not self.SUPABASE_URL:
            return ""
        return f"{self.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"

    # Record store backend: "supabase" (default) or "memory" (local development)
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "supabase").lower()

    # Well-known categories targeted by derived transactions
    SERVICES_RENDERED_CATEGORY: str = os.getenv(
        "SERVICES_RENDERED_CATEGORY", "Services Rendered"
    )
    ADDITIONAL_EXPENSES_CATEGORY: str = os.getenv(
        "ADDITIONAL_EXPENSES_CATEGORY", "Additional Expenses"
    )

    # Treat a unique-constraint violation on category creation as
    # "already exists" and re-read. Requires UNIQUE (user_id, name, type).
    ATOMIC_CATEGORY_RESOLUTION: bool = _as_bool(
        os.getenv("ATOMIC_CATEGORY_RESOLUTION", "false")
    )

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Settings (production only, comma separated)
    CORS_ALLOWED_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required settings are configured.

        Raises:
            ValueError: If any required setting is missing or invalid.
        """
        if cls.STORE_BACKEND not in ("supabase", "memory"):
            raise ValueError(
                f"Invalid STORE_BACKEND: {cls.STORE_BACKEND}. "
                "Must be 'supabase' or 'memory'."
            )

        required_settings = {}
        if cls.STORE_BACKEND == "supabase":
            required_settings["SUPABASE_URL"] = cls.SUPABASE_URL

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_staging(cls) -> bool:
        """Check if running in staging environment."""
        return cls.ENVIRONMENT.lower() == "staging"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"


# Create a singleton instance
settings = Settings()

# Validate settings on module import (fail fast if misconfigured).
# Tests set VALIDATE_CONFIG=false before importing.
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # In development, warn but don't crash
        if settings.is_development():
            print(f"Warning: {e}")
            print("   The app may not work correctly until you configure your .env file.")
        else:
            raise
