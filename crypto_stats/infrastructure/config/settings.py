from datetime import time

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    The composition root calls load_dotenv() first, so a local .env file works too.
    """

    model_config = SettingsConfigDict(
        extra="ignore",  # allow extra env vars without crashing
    )

    # App
    APP_NAME: str = Field("Crypto Statistics API", description="Title shown in the OpenAPI docs")
    LOG_LEVEL: str = Field("INFO", description="Level of the crypto_stats logger")

    # Storage
    DATABASE_URL: str = Field("sqlite://", description="SQLAlchemy URL; the default is an in-memory SQLite DB")

    # Symbol policy
    FORBIDDEN_SYMBOLS: str = Field("ETH,SOL,SHIB", description="Comma separated tickers that may not be queried")

    # Ingestion
    TIMEZONE: str = Field("UTC", description="Zone used to turn epoch-millisecond timestamps into wall time")
    SOURCE_DIR: str = Field("data/prices", description="Directory scanned for price CSV files")
    FILE_NAME_PATTERN: str = Field("*_values.csv", description="Glob pattern of price CSV files")
    INGEST_CHUNK_SIZE: int = Field(10000, gt=0, description="Rows read and written per chunk")
    INGEST_ON_STARTUP: bool = Field(True, description="Run one ingestion when the app starts")

    # Scheduling
    SCHEDULE_ENABLED: bool = Field(True, description="Re-run the ingestion daily")
    SCHEDULE_TIME: time = Field(time(1, 0), description="Wall time of the daily ingestion")
    SCHEDULE_TIMEZONE: str = Field("Asia/Nicosia", description="Zone of SCHEDULE_TIME")

    # Rate limiting
    RATE_LIMIT: str = Field("5/second", description="Per-client limit in slowapi notation")
    RATE_LIMIT_ENABLED: bool = Field(True, description="Disable to lift the limit entirely")

    @property
    def forbidden_symbols(self) -> frozenset[str]:
        return frozenset(s.strip() for s in self.FORBIDDEN_SYMBOLS.split(",") if s.strip())
