from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="SLOTPLAN_", extra="ignore")

    app_name: str = "slotplan"
    debug: bool = False
    log_level: str = "INFO"
    # When False, a dependsOn entry naming a task absent from the request is an InputError.
    allow_unknown_dependencies: bool = Field(False, description="Ignore dependsOn entries that reference unknown tasks")
    max_duration: int = Field(100_000, description="Largest accepted task duration in time units")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
