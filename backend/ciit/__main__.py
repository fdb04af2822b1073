"""Run the API server: ``python -m ciit``."""
import uvicorn

from ciit.core.config import API_HOST, API_PORT, LOG_LEVEL
from ciit.core.logging_config import setup_logging


def main() -> None:
    setup_logging()
    uvicorn.run("ciit.main:app", host=API_HOST, port=API_PORT, log_level=LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
