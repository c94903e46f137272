from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    """Install a single stream handler on the ``board_client`` logger.

    Library modules only create loggers; the application calls this once at
    start-up. Calling it again just adjusts the level.
    """
    logger = logging.getLogger("board_client")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    if any(getattr(handler, "_board_client", False) for handler in logger.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._board_client = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
