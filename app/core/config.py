import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return int(value)


class Settings:
    # API Settings
    PROJECT_NAME: str = "LlamaFlow"
    VERSION: str = "1.0.0"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 3000))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Metrics Store Settings
    PROTOCOL_ID: str = os.getenv("PROTOCOL_ID", "llamaflow")
    HISTORY_CAPACITY: int = int(os.getenv("HISTORY_CAPACITY", 1000))
    SEED_POINTS: int = int(os.getenv("SEED_POINTS", 25))
    UPDATE_INTERVAL_S: float = float(os.getenv("UPDATE_INTERVAL_S", 5.0))
    RANDOM_SEED: Optional[int] = _optional_int("RANDOM_SEED")  # unset = nondeterministic

    # Auth Settings
    JWT_SECRET: str = os.getenv("JWT_SECRET", "llamaflow-secret")
    JWT_ALGORITHM: str = "HS256"

    # Rate limiting for /api/*
    RATE_LIMIT_MAX: int = int(os.getenv("RATE_LIMIT_MAX", 120))
    RATE_LIMIT_WINDOW_S: float = float(os.getenv("RATE_LIMIT_WINDOW_S", 60))

    # Directory Settings
    STATIC_DIR: str = os.getenv("STATIC_DIR", "dist/web")


settings = Settings()
