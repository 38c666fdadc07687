"""Logging setup shared by the CLI and the web server."""

import logging
from pathlib import Path

from rich.logging import RichHandler

FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(log_file: str | Path | None = None, debug: bool = False) -> None:
    """
    Send log records to the console and, optionally, to a file.

    Args:
        log_file: Path of a log file to append to. Parent directories are
                  created. If the file cannot be opened, logging continues
                  on the console only.
        debug: If True, log at DEBUG level instead of INFO.
    """
    level = logging.DEBUG if debug else logging.INFO
    handlers: list[logging.Handler] = [RichHandler(rich_tracebacks=True, show_path=False)]

    if log_file:
        path = Path(log_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
        except OSError as e:
            logging.getLogger(__name__).warning(f"Cannot open log file {path}: {e}")
        else:
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", handlers=handlers, force=True)
