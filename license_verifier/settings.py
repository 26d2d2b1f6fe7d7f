from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"

    # Policy: "machine" binds a code to the first machine that activates it,
    # "single_use" burns the code on first use with no machine binding.
    binding_policy: Literal["machine", "single_use"] = "machine"

    # Code store
    code_store: Literal["rest", "postgres"] = "rest"
    code_store_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("code_store_url", "supabase_url"),
    )
    code_store_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("code_store_key", "supabase_anon_key"),
    )
    code_store_table: str = "verification_codes"
    database_url: str | None = None

    # Infra
    http_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
