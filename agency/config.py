# agency/config.py
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # App
    APP_ENV: Literal["dev", "prod", "staging"] = "dev"

    # Airline / ticketing gateway (VietJet, Vietnam Airlines, reprice, PNR, email)
    BACKEND_BASE_URL: str = "https://thuhongtour.com"

    # Hosted price-configuration table (PostgREST endpoint)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    PRICE_CONFIG_TABLE: str = "price_configs"

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_TTL_SECONDS: int = 43200  # 12 hours staff session TTL
    SESSION_STORE: Literal["memory", "redis"] = "memory"

    # read .env and ignore any extra keys so this doesn't break again
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()
