"""Connection settings loaded from the environment or a ``.env`` file."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

from propcollect.core.exceptions import ConfigurationError

DEFAULT_PORT = 443
DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True)
class Settings:
    """vCenter/ESXi connection parameters."""

    host: str
    user: str
    password: str = ""
    port: int = DEFAULT_PORT
    verify_ssl: bool = True
    page_size: int = DEFAULT_PAGE_SIZE

    def with_overrides(self, **overrides: object) -> Settings:
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def __repr__(self) -> str:
        return (
            f"Settings(host={self.host!r}, user={self.user!r}, port={self.port}, "
            f"verify_ssl={self.verify_ssl}, page_size={self.page_size})"
        )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def load_settings(
    env_file: Path | None = None,
    *,
    host: str | None = None,
    user: str | None = None,
) -> Settings:
    """Load settings from ``env_file`` (or ``./.env``) and the environment.

    Environment:
        VCENTER_HOST, VCENTER_USER, VCENTER_PASSWORD, VCENTER_PORT,
        VCENTER_DISABLE_SSL_VERIFICATION (``true``/``false``),
        PROPCOLLECT_PAGE_SIZE

    Raises:
        ConfigurationError: if host or user is missing, or a number is invalid.
    """
    load_dotenv(dotenv_path=env_file)

    host = host or os.getenv("VCENTER_HOST", "")
    user = user or os.getenv("VCENTER_USER", "")
    if not (host and user):
        raise ConfigurationError("Missing VCENTER_HOST or VCENTER_USER")

    disable_ssl = os.getenv("VCENTER_DISABLE_SSL_VERIFICATION", "false").lower() == "true"

    return Settings(
        host=host,
        user=user,
        password=os.getenv("VCENTER_PASSWORD", ""),
        port=_int_env("VCENTER_PORT", DEFAULT_PORT),
        verify_ssl=not disable_ssl,
        page_size=_int_env("PROPCOLLECT_PAGE_SIZE", DEFAULT_PAGE_SIZE),
    )
