"""Application settings loaded from .env file."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: str = "http://localhost:3000"

    # Sync
    METADATA_SYNC_SCHEDULE: str = "0 50 * * * ? *"
    CACHE_FIELD_VALUES_SCHEDULE: str = "0 50 0 * * ? *"
    CATEGORY_CARDINALITY_THRESHOLD: int = 30
    FIELD_VALUES_MAX_DISTINCT: int = 300

    # Metadata
    LIST_VALUES_SPECIAL_TYPES: str = "type/Category,type/Enum"
    BINNING_ENGINES: str = "sqlite,postgresql,h2"

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def list_values_special_types(self) -> list[str]:
        return [t.strip() for t in self.LIST_VALUES_SPECIAL_TYPES.split(",") if t.strip()]

    @property
    def binning_engine_list(self) -> list[str]:
        return [e.strip().lower() for e in self.BINNING_ENGINES.split(",") if e.strip()]


settings = Settings()
