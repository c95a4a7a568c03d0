"""Runtime settings.

Every field can be overridden with an ``OBD_READER_`` prefixed environment
variable (e.g. ``OBD_READER_PORT=/dev/rfcomm1``) or a ``.env`` file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReaderSettings(BaseSettings):
    """OBD reader runtime settings."""

    model_config = SettingsConfigDict(env_prefix="OBD_READER_", env_file=".env", extra="ignore")

    # -- adapter ------------------------------------------------------------
    port: str = Field(default="/dev/rfcomm0", description="Serial device bound to the adapter")
    baudrate: int = Field(default=38400, gt=0, description="Serial baud rate")

    # -- timing -------------------------------------------------------------
    command_timeout: float = Field(default=2.0, gt=0, description="Seconds to wait for the prompt")
    reset_timeout: float = Field(default=5.0, gt=0, description="Seconds to wait after ATZ")
    init_delay: float = Field(default=0.1, ge=0, description="Pause between handshake commands")

    # -- storage ------------------------------------------------------------
    data_dir: Path = Field(default=Path.home() / ".obd-reader", description="Snapshot directory")
    snapshot_filename: str = Field(default="obd_session.json", description="Default snapshot file")

    # -- behaviour ----------------------------------------------------------
    log_level: str = Field(default="WARNING", description="Logging level for the CLI")


@lru_cache(maxsize=1)
def get_settings() -> ReaderSettings:
    """Get the process-wide settings instance."""
    return ReaderSettings()
