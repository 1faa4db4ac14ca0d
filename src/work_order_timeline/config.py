"""Environment-driven settings with optional ``.env`` loading."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping

from .models import Granularity

__all__ = ["ConfigError", "Settings", "load_env_file", "load_settings"]

ENV_PREFIX = "WORK_ORDER_TIMELINE_"
DEFAULT_STORE_PATH = Path("work_orders.yaml")


class ConfigError(RuntimeError):
    """Raised when configuration values are malformed."""


@dataclass(frozen=True)
class Settings:
    store_path: Path = DEFAULT_STORE_PATH
    zoom: Granularity = Granularity.MONTH
    log_level: str = "INFO"
    column_width: float = 110.0


def load_env_file(env_file: str | Path | None = None) -> None:
    """Load environment variables from ``env_file`` if provided.

    When ``env_file`` is :data:`None`, the loader looks for a ``.env`` file in the
    current working directory. Existing environment variables are never overwritten.
    """

    path = Path(env_file) if env_file is not None else Path.cwd() / ".env"
    if not path.exists() or not path.is_file():
        return

    for key, value in _iter_env_entries(path):
        os.environ.setdefault(key, value)


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Resolve :class:`Settings` from ``WORK_ORDER_TIMELINE_*`` variables."""

    env = os.environ if environ is None else environ
    defaults = Settings()

    store_path = Path(env.get(f"{ENV_PREFIX}STORE", str(defaults.store_path)))

    raw_zoom = env.get(f"{ENV_PREFIX}ZOOM", defaults.zoom.value)
    try:
        zoom = Granularity(raw_zoom.strip().lower())
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}ZOOM must be one of day, week, month; got {raw_zoom!r}") from exc

    log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level).strip().upper()

    raw_width = env.get(f"{ENV_PREFIX}COLUMN_WIDTH")
    column_width = defaults.column_width
    if raw_width is not None:
        try:
            column_width = float(raw_width)
        except ValueError as exc:
            raise ConfigError(f"{ENV_PREFIX}COLUMN_WIDTH must be a number; got {raw_width!r}") from exc
        if column_width <= 0:
            raise ConfigError(f"{ENV_PREFIX}COLUMN_WIDTH must be positive; got {raw_width!r}")

    return Settings(store_path=store_path, zoom=zoom, log_level=log_level, column_width=column_width)


def _iter_env_entries(path: Path) -> Iterable[tuple[str, str]]:
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            raise ConfigError(
                f"Invalid line in {path.name!r}: {raw_line!r}. Expected KEY=VALUE format."
            )
        key, raw_value = line.split("=", 1)
        key = key.strip()
        value = raw_value.strip().strip('"').strip("'")
        if not key:
            raise ConfigError(f"Environment variable key is missing in line: {raw_line!r}")
        yield key, value
