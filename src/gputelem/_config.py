"""Runtime configuration."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from gputelem._types import SampleWindow

_ENV_PREFIX = "GPUTELEM_"
_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class TelemetryConfig:
    """Immutable sampling configuration.

    Defaults match the stock ``gpu_util`` behaviour: one sample, one second
    between samples when more are requested.
    """

    sample_count: int = 1
    inter_sample_delay_seconds: int = 1
    advance_cursor: bool = True
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        SampleWindow(self.sample_count, self.inter_sample_delay_seconds)
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"unknown log level {self.log_level!r}")

    @property
    def window(self) -> SampleWindow:
        return SampleWindow(
            sample_count=self.sample_count,
            inter_sample_delay_seconds=self.inter_sample_delay_seconds,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> TelemetryConfig:
        """Build a config from ``GPUTELEM_*`` variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            sample_count=_int(env, "SAMPLE_COUNT", defaults.sample_count),
            inter_sample_delay_seconds=_int(
                env, "SAMPLE_DELAY", defaults.inter_sample_delay_seconds
            ),
            advance_cursor=_bool(env, "ADVANCE_CURSOR", defaults.advance_cursor),
            log_level=env.get(_ENV_PREFIX + "LOG_LEVEL", defaults.log_level).upper(),
        )


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(_ENV_PREFIX + key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{_ENV_PREFIX}{key} must be an integer, got {raw!r}") from None


def _bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(_ENV_PREFIX + key)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{_ENV_PREFIX}{key} must be a boolean, got {raw!r}")
