import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load env from backend/.env.local if exists
_env_path = Path(__file__).resolve().parent.parent / ".env.local"
if _env_path.exists():
    load_dotenv(_env_path)


class Settings(BaseModel):
    uri: str = "mongodb://localhost:27017"
    host: str = "0.0.0.0"
    port: int = 32345
    action_prefix: str = "/ms-mongo"
    rest_prefix: str = "/ms-mongo-rest"
    connect_timeout: float = 10.0
    # Per-operation deadlines in seconds, measured from request start
    insert_timeout: float = Field(10.0, gt=0)
    find_timeout: float = Field(30.0, gt=0)
    update_timeout: float = Field(10.0, gt=0)
    delete_timeout: float = Field(10.0, gt=0)
    log_level: str = "INFO"
    log_file: Optional[str] = "logs/ms-mongo.log"

    @classmethod
    def from_env(cls) -> "Settings":
        values = {}
        for name in cls.model_fields:
            raw = os.getenv(f"MS_MONGO_{name.upper()}")
            if raw is not None:
                values[name] = raw
        settings = cls(**values)
        if settings.action_prefix.rstrip("/") == settings.rest_prefix.rstrip("/"):
            raise ValueError("Action and REST prefixes must differ")
        return settings
