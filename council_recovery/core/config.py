from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from council_recovery.domain.sections import DEFAULT_KNOWN_SECTIONS, KnownFieldSet


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="COUNCIL_RECOVERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Expected chairman output schema, in processing order
    known_sections: list[str] = list(DEFAULT_KNOWN_SECTIONS)

    # Logging
    log_level: str = "INFO"
    json_logs: bool = True
    debug_logging: bool = False  # env: COUNCIL_RECOVERY_DEBUG_LOGGING, logs raw response previews
    preview_chars: int = 200

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    def known_field_set(self) -> KnownFieldSet:
        return KnownFieldSet.from_names(self.known_sections)


@lru_cache
def get_settings() -> Settings:
    return Settings()
