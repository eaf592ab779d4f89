"""Pydantic schemas for database connection requests and registered databases."""
from typing import Optional, Literal
from pydantic import BaseModel, ConfigDict, Field

from config import settings


class ConnectionRequest(BaseModel):
    engine: Literal["sqlite", "postgresql"] = Field(..., description="Database engine type")
    name: str = Field(..., description="Display name for this database")

    # SQLite only
    file_path: Optional[str] = Field(None, description="Absolute path to .db file (SQLite only)")

    # PostgreSQL only
    host: Optional[str] = Field(None, description="Database host")
    port: Optional[int] = Field(5432, description="Database port")
    database: Optional[str] = Field(None, description="Database name")
    username: Optional[str] = Field(None, description="Username")
    password: Optional[str] = Field(None, description="Password")

    is_full_sync: bool = True
    metadata_sync_schedule: str = Field(default_factory=lambda: settings.METADATA_SYNC_SCHEDULE)
    cache_field_values_schedule: str = Field(default_factory=lambda: settings.CACHE_FIELD_VALUES_SCHEDULE)

    def get_sqlalchemy_url(self) -> str:
        if self.engine == "sqlite":
            return f"sqlite:///{self.file_path}"
        return (
            f"postgresql+psycopg2://{self.username}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    def public_details(self) -> dict:
        """Connection details safe to echo back to clients (no password)."""
        if self.engine == "sqlite":
            return {"db": self.file_path}
        return {"host": self.host, "port": self.port, "dbname": self.database, "user": self.username}


class Database(BaseModel):
    """A registered database as exposed in metadata responses."""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    engine: str
    details: dict = Field(default_factory=dict)
    is_sample: bool = False
    is_full_sync: bool = True
    description: Optional[str] = None
    caveats: Optional[str] = None
    points_of_interest: Optional[str] = None
    features: list[str] = Field(default_factory=list)
    metadata_sync_schedule: str = settings.METADATA_SYNC_SCHEDULE
    cache_field_values_schedule: str = settings.CACHE_FIELD_VALUES_SCHEDULE

    @property
    def supports_binning(self) -> bool:
        return "binning" in self.features


class SyncResponse(BaseModel):
    database_id: int
    tables_synced: int
    fields_synced: int
    fields_fingerprinted: int
    duration_seconds: float
    tables: list[str]
