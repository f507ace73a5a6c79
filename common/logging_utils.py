"""Centralised logging configuration helpers."""

from __future__ import annotations

import logging
from typing import Optional, TextIO


def setup_logging(
    *,
    level: int = logging.INFO,
    fmt: str = "[%(levelname)s] %(message)s",
    stream_target: Optional[TextIO] = None,
    force: bool = True,
) -> None:
    """Configure root logging with a single stream handler.

    Args:
        level: Logging level to apply.
        fmt: Log message format string.
        stream_target: Stream for the handler; ``None`` means stderr.
        force: Whether to override existing logging configuration.
    """
    logging.basicConfig(
        level=level,
        format=fmt,
        handlers=[logging.StreamHandler(stream_target)],
        force=force,
    )
