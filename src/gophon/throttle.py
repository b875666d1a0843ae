"""CPU throttling configuration for the scan worker pool."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel

logger = logging.getLogger(__name__)

CPU_LIMIT_ENV = "GOPHON_CPU_LIMIT"

# Delay added per dispatched package for every percent below 100.
_DELAY_PER_PERCENT = 0.002


class ThrottleConfig(BaseModel):
    """Worker-pool limits derived from ``GOPHON_CPU_LIMIT``.

    Precedence: explicit constructor values > environment > full speed.
    """

    cpu_limit_percent: int = 100
    """Share of the host's CPUs the scan may use (1-100)."""

    max_workers: int = 1
    """Upper bound on concurrent package loads."""

    worker_delay: float = 0.0
    """Seconds a worker sleeps before loading each package."""

    @property
    def post_work_delay(self) -> float:
        """Extra back-off after each package under heavy throttling (< 50%)."""
        if self.cpu_limit_percent < 50:
            return self.worker_delay / 2
        return 0.0

    @classmethod
    def unthrottled(cls, cpu_count: int | None = None) -> ThrottleConfig:
        return cls(cpu_limit_percent=100, max_workers=max(1, cpu_count or os.cpu_count() or 1))


def parse_cpu_limit(raw: str | None) -> int:
    """Return the requested percentage, or 100 for missing/invalid values."""
    if raw is None or not raw.strip():
        return 100
    try:
        percent = int(raw.strip())
    except ValueError:
        logger.debug("Ignoring non-numeric %s=%r", CPU_LIMIT_ENV, raw)
        return 100
    if not 1 <= percent <= 100:
        logger.debug("Ignoring out-of-range %s=%r", CPU_LIMIT_ENV, raw)
        return 100
    return percent


def throttle_for_percent(percent: int, cpu_count: int | None = None) -> ThrottleConfig:
    cpus = max(1, cpu_count or os.cpu_count() or 1)
    if not 1 <= percent < 100:
        return ThrottleConfig.unthrottled(cpus)
    return ThrottleConfig(
        cpu_limit_percent=percent,
        max_workers=max(1, cpus * percent // 100),
        worker_delay=(100 - percent) * _DELAY_PER_PERCENT,
    )


def load_throttle_config(
    env: Mapping[str, str] | None = None, cpu_count: int | None = None
) -> ThrottleConfig:
    """Build a ThrottleConfig from *env* (defaults to ``os.environ``)."""
    env = os.environ if env is None else env
    percent = parse_cpu_limit(env.get(CPU_LIMIT_ENV))
    config = throttle_for_percent(percent, cpu_count)
    if config.cpu_limit_percent < 100:
        logger.info(
            "CPU limit %d%%: %d worker(s), %.0f ms delay per package",
            config.cpu_limit_percent, config.max_workers, config.worker_delay * 1000,
        )
    return config
