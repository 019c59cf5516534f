"""
app/config.py

Environment-driven settings for the pipeline and its data connectors.

Values come from the process environment, with ``.env`` and ``.env.local``
at the project root read once as a fallback. A malformed value never
raises; it falls back to the default and is then bounded to a sane range.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import TypeVar

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_FILES: tuple[str, ...] = (".env", ".env.local")

_N = TypeVar("_N", int, float)


def _parse_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, _, value = line.partition("=")
    key = key.strip()
    return (key, value.strip().strip("'\"")) if key else None


def load_env_files(root: Path = _PROJECT_ROOT) -> None:
    """
    Copy ``KEY=VALUE`` pairs from the env files under *root* into
    ``os.environ``. Variables already set in the process win.
    """
    for name in ENV_FILES:
        path = root / name
        if not path.is_file():
            continue
        for line in path.read_text(encoding="utf-8").splitlines():
            pair = _parse_env_line(line)
            if pair is not None:
                os.environ.setdefault(*pair)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _env(name: str) -> str | None:
    """Stripped value of *name*, or None when unset or blank."""
    _load_env_once()
    value = os.getenv(name, "").strip()
    return value or None


def _env_str(name: str, default: str) -> str:
    return _env(name) or default


def _env_number(name: str, default: _N, cast: Callable[[str], _N]) -> _N:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError:
        return default


def _bounded(value: _N, low: _N | None = None, high: _N | None = None) -> _N:
    if low is not None and value < low:
        return low
    if high is not None and value > high:
        return high
    return value


@dataclass(frozen=True)
class PipelineSettings:
    """
    Tunable constants of the aggregation pipeline.

    The forecast values are placeholder policy, not a fitted model: a flat
    fallback daily rate and fixed optimistic/pessimistic multipliers.
    """

    default_daily_rate: float = 1500.0
    optimistic_multiplier: float = 1.2
    pessimistic_multiplier: float = 0.8
    optimistic_goal_ceiling: float = 1.1
    top_n: int = 10
    social_reach_ceiling: float = 10_000.0


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    Timeout, retry and rate-limit policy shared by connectors.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 5.0


@dataclass(frozen=True)
class SupabaseSettings:
    """
    Backend-as-a-service REST endpoint settings.
    """

    url: str | None = None
    anon_key: str | None = None
    schema: str = "public"
    page_size: int = 1000


@lru_cache(maxsize=1)
def get_pipeline_settings() -> PipelineSettings:
    """
    Pipeline constants, overridable through ``METRICS_*`` variables.
    """
    return PipelineSettings(
        default_daily_rate=_bounded(_env_number("METRICS_FORECAST_DEFAULT_DAILY_RATE", 1500.0, float), 0.0),
        optimistic_multiplier=_bounded(_env_number("METRICS_FORECAST_OPTIMISTIC_MULTIPLIER", 1.2, float), 1.0),
        pessimistic_multiplier=_bounded(_env_number("METRICS_FORECAST_PESSIMISTIC_MULTIPLIER", 0.8, float), 0.0, 1.0),
        optimistic_goal_ceiling=_bounded(_env_number("METRICS_FORECAST_OPTIMISTIC_GOAL_CEILING", 1.1, float), 1.0),
        top_n=_bounded(_env_number("METRICS_TOP_N", 10, int), 1),
        social_reach_ceiling=_bounded(_env_number("METRICS_SOCIAL_REACH_CEILING", 10_000.0, float), 1.0),
    )


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Connector HTTP behaviour from ``EXTERNAL_HTTP_*`` variables.
    """
    return ExternalHTTPSettings(
        timeout_seconds=_bounded(_env_number("EXTERNAL_HTTP_TIMEOUT_SECONDS", 15.0, float), 1.0),
        max_retries=_bounded(_env_number("EXTERNAL_HTTP_MAX_RETRIES", 3, int), 0),
        backoff_initial_seconds=_bounded(_env_number("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5, float), 0.1),
        backoff_multiplier=_bounded(_env_number("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0, float), 1.0),
        rate_limit_per_second=_bounded(_env_number("EXTERNAL_HTTP_RATE_LIMIT_PER_SECOND", 5.0, float), 0.1),
    )


@lru_cache(maxsize=1)
def get_supabase_settings() -> SupabaseSettings:
    """
    Backend REST endpoint from ``SUPABASE_*`` variables. URL and key stay
    None when unset; the connector refuses to start without them.
    """
    return SupabaseSettings(
        url=_env("SUPABASE_URL"),
        anon_key=_env("SUPABASE_ANON_KEY"),
        schema=_env_str("SUPABASE_SCHEMA", "public"),
        page_size=_bounded(_env_number("SUPABASE_PAGE_SIZE", 1000, int), 1),
    )
