from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "CSV Converter API"
    environment: str = Field(default="development", validation_alias="APP_ENV")

    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=3000, validation_alias="PORT")

    upload_dir: Path = Field(default=Path("uploads"), validation_alias="UPLOAD_DIR")
    max_file_size_bytes: int = Field(default=10 * 1024 * 1024, gt=0, validation_alias="MAX_FILE_SIZE_BYTES")
    upload_chunk_size: int = Field(default=64 * 1024, gt=0)
    allowed_content_types: list[str] = Field(default_factory=lambda: ["text/csv"])
    allowed_extensions: list[str] = Field(default_factory=lambda: [".csv"])

    max_rows: int = Field(default=100_000, gt=0, validation_alias="MAX_ROWS")
    progress_log_interval: int = Field(default=10_000, gt=0)

    shutdown_grace_seconds: float = Field(default=10.0, ge=0, validation_alias="SHUTDOWN_GRACE_SECONDS")
    crash_exit_delay_seconds: float = Field(default=1.0, ge=0, validation_alias="CRASH_EXIT_DELAY_SECONDS")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True
