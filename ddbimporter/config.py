"""Process configuration read from environment variables.

from_env() first loads the repository .env file, if there is one. Exported
variables win over values in the file.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

ENV_FILE = Path(__file__).resolve().parent.parent / ".env"

DEFAULT_BASE_URL = "https://www.dndbeyond.com"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

PACKAGE_LOGGER = "ddbimporter"

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s | %(message)s"


@dataclass
class AppConfig:
    db_path: str = "ddbimporter.db"
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout: float = 30.0
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:30000"])

    @classmethod
    def from_env(cls, env_file: Path | None = ENV_FILE) -> "AppConfig":
        if env_file is not None:
            load_dotenv(env_file)
        origins = os.environ.get("DDB_IMPORTER_CORS_ORIGINS")
        return cls(
            db_path=os.environ.get("DDB_IMPORTER_DB", cls.db_path),
            base_url=os.environ.get("DDB_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            user_agent=os.environ.get("DDB_USER_AGENT", DEFAULT_USER_AGENT),
            timeout=float(os.environ.get("DDB_TIMEOUT", cls.timeout)),
            log_level=os.environ.get("DDB_IMPORTER_LOG_LEVEL", cls.log_level).upper(),
            cors_origins=(
                [o.strip() for o in origins.split(",") if o.strip()]
                if origins
                else ["http://localhost:30000"]
            ),
        )


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler once and set the package log level."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=_LOG_FORMAT)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)


def set_debug_logging(enabled: bool, base_level: str = "INFO") -> None:
    """Switch the package logger between DEBUG and its configured level."""
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if enabled else base_level)
