"""Logging helpers for the bridge."""

from __future__ import annotations

import logging
from pathlib import Path


class EngineStreamFilter(logging.Filter):
    """Keep engine stdout/stderr lines out of the narrative log below WARNING."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if record.levelno >= logging.WARNING:
            return True
        return not record.name.startswith("tippecanoe_bridge.engine.stream")


def configure_logging(level: int = logging.INFO, log_path: str | None = None) -> None:
    """Configure default logging if no handlers are present."""
    root = logging.getLogger()
    if root.handlers:
        return
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_path:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.addFilter(EngineStreamFilter())
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )
