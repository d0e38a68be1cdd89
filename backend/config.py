# backend/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 480
    DATABASE_URL: str = "sqlite:///./pos.db"

    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # Defaults used when the store settings row is created or reset
    STORE_NAME: str = "POS Store"
    DEFAULT_CURRENCY: str = "IDR"
    DEFAULT_TAX_PERCENTAGE: float = 0.0
    DEFAULT_LOW_STOCK_THRESHOLD: int = 5
    RECEIPT_FOOTER: str = "Thank you for your purchase!"

    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")

settings = Settings()
