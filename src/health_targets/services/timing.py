"""Duration measurement against soft latency targets."""

import logging
import time


def start_timer() -> float:
    return time.perf_counter()


def elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


def log_if_slow(
    logger: logging.Logger,
    operation: str,
    started: float,
    target_ms: int,
    **fields: object,
) -> float:
    """Warn when an operation exceeded its p95 target and return its duration."""
    duration_ms = elapsed_ms(started)
    if duration_ms > target_ms:
        details = " ".join(f"{key}={value}" for key, value in fields.items())
        logger.warning(
            "%s exceeded p95 target: duration_ms=%.1f target_ms=%s %s",
            operation,
            duration_ms,
            target_ms,
            details,
        )
    return duration_ms
