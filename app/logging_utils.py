"""
Structured logging helpers for the aggregation pipeline.
"""

from __future__ import annotations

import json
import logging
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def log_data_quality_skip(
    logger: logging.Logger,
    *,
    record_id: Any,
    kind: str | None,
    reason: str,
) -> None:
    """
    Record a dropped input row. Skips are never surfaced to the caller.
    """

    log_event(
        logger,
        logging.WARNING,
        "data_quality_skip",
        record_id=record_id,
        kind=kind,
        reason=reason,
    )
