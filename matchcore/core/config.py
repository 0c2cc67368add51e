from pydantic_settings import BaseSettings
from typing import List, Union
from pydantic import field_validator
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Match Core API"

    # Database Settings
    POSTGRES_USER: str = "user"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: str = "5432"
    POSTGRES_DB: str = "talent_db"

    @property
    def DATABASE_URL(self) -> str:
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Redis Settings (for Celery task queue)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    @property
    def REDIS_URL(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Logging
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # OpenAI Settings (explanation polishing)
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_TEMPERATURE: float = 0.2
    EXPLANATION_TIMEOUT_SECONDS: float = 20.0
    EXPLANATION_VERSION: int = 1

    # Aggregation windows
    JUDGMENT_WINDOW_DAYS: int = 90
    BENCHMARK_WINDOW_DAYS: int = 90
    MQI_SNAPSHOT_WINDOWS: Union[List[int], str] = [30, 60, 90]

    @field_validator("MQI_SNAPSHOT_WINDOWS", mode="before")
    @classmethod
    def parse_snapshot_windows(cls, v: Union[List[int], str]) -> List[int]:
        """Parse MQI windows from JSON string or comma-separated list"""
        if isinstance(v, str):
            try:
                return [int(day) for day in json.loads(v)]
            except json.JSONDecodeError:
                return [int(day.strip()) for day in v.split(",") if day.strip()]
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
