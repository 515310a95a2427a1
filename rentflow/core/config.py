from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

class Settings(BaseSettings):
    DATABASE_URL: str
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    # Supabase (Auth + Storage)
    SUPABASE_URL: str
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    SUPABASE_JWT_SECRET: Optional[str] = None

    # Storage buckets
    TENANT_DOCUMENTS_BUCKET: str = "tenant-documents"
    PUBLIC_ASSETS_BUCKET: str = "rentflow-public"
    GENERAL_DOCUMENTS_BUCKET: str = "general-documents"
    DEPOSIT_RECEIPTS_BUCKET: str = "deposit-receipts"
    ZAKAT_RECEIPTS_BUCKET: str = "zakat-receipts"
    MAX_UPLOAD_MB: int = 20

    # Settings row + browser-style local overlay
    SETTINGS_ROW_ID: int = 1
    LOCAL_SETTINGS_PATH: str = "local-settings.json"
    LOCAL_SETTINGS_KEY: str = "appSettings"

    # Dashboard look-back window
    HISTORY_YEARS: int = 2

    # OpenAI (tenant info extraction, notice drafting)
    OPENAI_API_KEY: Optional[str] = None

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:9002",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
