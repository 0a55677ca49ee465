from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Library
    AUDIOBOOKS_DIR: str = "/data/Audiobooks"
    SYNC_MAP_FILENAME: str = "sync_map.json"

    # Player control bridge
    PLAYER_CONTROL_URL: Optional[str] = None
    PLAYER_CONTROL_TOKEN: Optional[str] = None
    SEEK_SMALL_SECONDS: int = 7
    SEEK_LARGE_SECONDS: int = 30

    # System
    LOG_LEVEL: str = "INFO"
    DRY_RUN: bool = False
    HTTP_SERVER_ENABLED: bool = True
    HTTP_SERVER_HOST: str = "0.0.0.0"
    HTTP_SERVER_PORT: int = 8080
    HTTP_SERVER_TOKEN: Optional[str] = None
    REQUEST_TIMEOUT_SECONDS: int = 10

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

settings = Settings()
