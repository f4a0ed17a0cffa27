import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find .env even in frozen or packaged mode
POSSIBLE_ENV_PATHS = [
    Path(__file__).resolve().parent.parent / ".env",        # normal
    Path(sys.executable).resolve().parent / ".env",         # frozen exe
    Path.cwd() / ".env",                                   # runtime cwd
]

for env_path in POSSIBLE_ENV_PATHS:
    if env_path.exists():
        load_dotenv(env_path, override=True)
        break


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./mobile_shop.db"

    # JWT
    SECRET_KEY: str = "mobile-shop-secret-key-change-this"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 24 * 60

    # Seed password for the default admin / superuser accounts
    DEFAULT_PASSWORD: str = "admin123"

    # Shop rules
    LOW_STOCK_THRESHOLD: int = 5
    TOP_PRODUCTS_LIMIT: int = 10
    ALLOW_OVERSELL: bool = True
    TIMEZONE: str = "Asia/Karachi"

    # Files
    BACKUP_DIR: str = "backup_files"
    UPLOAD_DIR: str = "uploads"

    # Logging
    LOG_FILE: str = "app.log"
    LOG_LEVEL: str = "DEBUG"
    LOG_ROTATION: str = "500 MB"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
