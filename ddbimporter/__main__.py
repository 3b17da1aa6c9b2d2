"""Run the importer API: python -m ddbimporter."""

import os

import uvicorn

from ddbimporter.config import AppConfig


def main() -> None:
    config = AppConfig.from_env()
    uvicorn.run(
        "ddbimporter.main:app",
        host=os.environ.get("DDB_IMPORTER_HOST", "127.0.0.1"),
        port=int(os.environ.get("DDB_IMPORTER_PORT", "8000")),
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
