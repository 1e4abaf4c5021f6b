"""Root logger setup for the CLI entry points."""

from __future__ import annotations

import logging


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=force,
    )
    # one line per request is noise next to the sync log
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
