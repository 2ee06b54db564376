from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    # Remote API
    API_BASE_URL: str = "http://localhost:8000"
    API_TIMEOUT_SECONDS: float = 10.0

    # Security
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    SESSION_EXPIRE_HOURS: int = 12
    SESSION_COOKIE_NAME: str = "padron_session"

    # Daily report
    REPORT_RESET_DELAY_SECONDS: float = 3.0  # Delay before clearing a submitted draft
    HISTORY_PAGE_SIZE: int = 10

    # Application
    APP_NAME: str = "Empadronamiento"
    DEBUG: bool = False
    ALLOWED_ORIGINS: str = "http://localhost:8080"
    LOG_DIR: str = "./logs"

    # Server
    # Default to 0.0.0.0 for development, use env var HOST in production
    HOST: str = "0.0.0.0"  # nosec: B104
    PORT: int = 8080

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )


settings = Settings()  # type: ignore
