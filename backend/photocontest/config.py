from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "photocontest-engine")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "Photo Contest")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/photocontest_dev")

    # Contest finalization poller
    scheduler_enabled: bool = os.getenv("SCHEDULER_ENABLED", "1") == "1"
    scheduler_interval_seconds: float = float(os.getenv("SCHEDULER_INTERVAL_SECONDS", "30"))

    # Read API limits
    leaderboard_max_limit: int = int(os.getenv("LEADERBOARD_MAX_LIMIT", "100"))

    # Users allowed to run a reward pass by hand (comma-separated token subjects)
    admin_user_ids: list[str] = [u.strip() for u in os.getenv("ADMIN_USER_IDS", "").split(",") if u.strip()]

settings = Settings()
