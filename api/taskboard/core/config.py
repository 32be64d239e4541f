import os
from typing import List, Optional

from pydantic import BaseModel

APP_NAME = "Task Board API"

SESSION_COOKIE = "token"


class ConfigError(RuntimeError):
    pass


class Settings(BaseModel):
    db_url: str
    jwt_secret: str
    access_token_expire_seconds: int = 3600
    environment: str = "development"
    cors_origins: List[str] = ["http://localhost:3000"]
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"

    @property
    def secure_cookies(self) -> bool:
        return self.environment.lower() == "production"


def _split(value: str) -> List[str]:
    return [o.strip() for o in value.split(",") if o.strip()]


def get_settings(env: Optional[dict] = None) -> Settings:
    """Build settings from the environment, refusing to start without a secret or a database."""
    env = os.environ if env is None else env
    missing = [k for k in ("DB_URL", "JWT_SECRET") if not env.get(k)]
    if missing:
        raise ConfigError(f"Missing environment variables: {', '.join(missing)}")
    return Settings(
        db_url=env["DB_URL"],
        jwt_secret=env["JWT_SECRET"],
        access_token_expire_seconds=int(env.get("ACCESS_TOKEN_EXPIRE_SECONDS", "3600")),
        environment=env.get("ENVIRONMENT", "development"),
        cors_origins=_split(env.get("CORS_ORIGINS", "http://localhost:3000")),
        host=env.get("HOST", "0.0.0.0"),
        port=int(env.get("PORT", "5000")),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
