"""
Configuration module for Pastebin Lite.
Loads environment variables and provides config objects.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self, **overrides):
        self.REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
        self.DEBUG: bool = _env_flag("DEBUG")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        # Request body cap, 10 MB by default
        self.MAX_BODY_BYTES: int = int(os.getenv("MAX_BODY_BYTES", str(10 * 1024 * 1024)))
        # Enables the x-test-now-ms clock override; never set in production
        self.TEST_MODE: bool = _env_flag("TEST_MODE")

        for name, value in overrides.items():
            if not hasattr(self, name):
                raise AttributeError(f"Unknown setting: {name}")
            setattr(self, name, value)


settings = Settings()
