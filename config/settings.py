from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = f"sqlite+aiosqlite:///{BASE_DIR / 'data' / 'tasktrack.db'}"

    # Web server
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # Client
    api_base_url: str = "http://localhost:8000/api"
    http_timeout_seconds: float = 10.0
    undo_window_seconds: float = 5.0
    search_debounce_seconds: float = 0.3

    # Defaults
    default_tag_color: str = "#6366f1"


settings = Settings()
