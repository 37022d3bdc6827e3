#config.py
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from typing import List
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)
    # Application Settings
    APP_NAME: str = "Simple Mercari API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = 9000

    # Database Settings
    DATABASE_URL: str = "sqlite:///./db/mercari.sqlite3"

    # Image Settings
    IMAGE_DIR: str = "images"
    DEFAULT_IMAGE: str = "default.jpg"
    ALLOWED_IMAGE_SUFFIXES: List[str] = [".jpg", ".jpeg"]
    MAX_FILE_SIZE: int = 32 * 1024 * 1024  # 32MB

    # CORS Settings (accept comma-separated strings to avoid JSON parsing in env)
    FRONT_URL: str = "http://localhost:3000"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.FRONT_URL)


@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings: Settings = get_settings()
