"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.
"""
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── TiDB (MySQL-protocol compatible) ───────────────────────────────────
    tidb_host: str = "tidb"
    tidb_port: int = 4000
    tidb_user: str = "root"
    tidb_password: str = ""
    tidb_database: str = "soundgraph"
    # Full SQLAlchemy URL; takes precedence over the tidb_* parts when set
    database_url: Optional[str] = None

    @property
    def tidb_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+aiomysql://{self.tidb_user}:{self.tidb_password}"
            f"@{self.tidb_host}:{self.tidb_port}/{self.tidb_database}"
        )

    # ── Social graph ───────────────────────────────────────────────────────
    default_page_size: int = 20
    max_page_size: int = 100

    # ── Recommendations ────────────────────────────────────────────────────
    recommendation_limit: int = 10
    # None = derive taste from the whole retained history
    history_lookback_days: Optional[int] = None

    # ── Auto-generated playlists ───────────────────────────────────────────
    mix_title: str = "Mix20"
    mix_size: int = 20
    curated_sample_size: int = 4

    # ── Observability ──────────────────────────────────────────────────────
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    tracing_enabled: bool = True
    service_name: str = "soundgraph-api"
    environment: str = "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
