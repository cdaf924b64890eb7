from __future__ import annotations

import logging

FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(format=FORMAT, level=resolved)
    # discord.py's gateway chatter is noisy at DEBUG
    logging.getLogger("discord").setLevel(max(resolved, logging.INFO))
    logging.getLogger("discord.http").setLevel(logging.WARNING)
    return logging.getLogger("vaultbot")
