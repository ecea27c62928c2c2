from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required when INTENT_STORAGE_BACKEND=supabase (client_storage bypasses RLS)

    # Gating
    auth_route: str = "/auth"
    client_id_header: str = "X-Client-Id"

    # Pending intents
    intent_storage_backend: str = "memory"  # memory | supabase
    intent_ttl_hours: int = 24  # 0 disables expiry

    # Engagement tracking
    tracking_enabled: bool = True
    engagement_cooldown_seconds: float = 1.0

    # App
    app_name: str = "caregate-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
