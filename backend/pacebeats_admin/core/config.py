from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Postgres endpoint of the hosted store, without credentials, e.g.
    # "postgresql+psycopg2://postgres@db.<project>.supabase.co:5432/postgres"
    supabase_db_url: str | None = None
    # Public key: only the standalone simulator connects with it
    supabase_anon_key: str | None = None
    # Privileged key used by every API route (bypasses row level security)
    supabase_service_role_key: str | None = None

    log_level: str = "INFO"
    # Comma separated, "*" allows any origin
    cors_origins: str = "*"

    # Live runner simulator defaults
    simulator_user_email: str | None = None
    simulator_tick_seconds: float = 3.0
    simulator_max_minutes: float = 5.0

    # Allow empty env strings for optional fields
    @field_validator(
        "supabase_db_url",
        "supabase_anon_key",
        "supabase_service_role_key",
        "simulator_user_email",
        mode="before",
    )
    @classmethod
    def _empty_to_none(cls, v):
        if v in ("", None, "null", "None"):
            return None
        return v

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
