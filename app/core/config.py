from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "frontdesk-api"

    # Supabase configuration (required)
    supabase_url: str = Field(..., env="SUPABASE_URL")
    supabase_service_key: str = Field(..., env="SUPABASE_SERVICE_KEY")

    # JWT configuration
    jwt_secret: str = Field(..., env="JWT_SECRET")
    algorithm: str = "HS256"

    log_level: str = Field("INFO", env="LOG_LEVEL")

    # Booking rules
    group_window_seconds: int = 30
    bill_tax_rate: float = 0.18
    calendar_days: int = 14

    @model_validator(mode="after")
    def validate_settings(self):
        if not self.supabase_url or not self.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required. "
                "Get these from your Supabase project settings."
            )

        if not self.supabase_url.startswith(("http://", "https://")):
            raise ValueError(
                "SUPABASE_URL must be an absolute http(s) URL "
                "(e.g., https://<project>.supabase.co)"
            )

        if self.group_window_seconds < 0:
            raise ValueError("GROUP_WINDOW_SECONDS must not be negative.")

        if not 0 <= self.bill_tax_rate < 1:
            raise ValueError("BILL_TAX_RATE must be a fraction between 0 and 1.")

        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()
