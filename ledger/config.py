"""Configuration for the ledger client and backend.

Values come from environment variables with defaults suitable for a local
backend; ``load_settings`` takes the mapping explicitly so callers and tests
can pass their own.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from ledger.errors import ValidationError

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()
DATA_DIR = _PROJECT_ROOT / "data"


@dataclass(frozen=True)
class Settings:
    api_url: str
    auth_url: str
    anon_key: str
    service_key: str
    service_prefix: str
    kv_path: Path
    http_timeout: Optional[float]
    log_level: str

    def validate(self) -> None:
        """Check the values the backend cannot start without."""
        missing = [
            name
            for name, value in (
                ("LEDGER_AUTH_URL", self.auth_url),
                ("LEDGER_SERVICE_KEY", self.service_key),
            )
            if not value
        ]
        if missing:
            raise ValidationError([f"{name} is not set" for name in missing])


def _timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ValidationError(f"LEDGER_HTTP_TIMEOUT must be a number, got {raw!r}") from e


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env
    prefix = env.get("LEDGER_SERVICE_PREFIX", "make-server").strip("/")
    return Settings(
        api_url=env.get("LEDGER_API_URL", f"http://localhost:5000/{prefix}").rstrip("/"),
        auth_url=env.get("LEDGER_AUTH_URL", "").rstrip("/"),
        anon_key=env.get("LEDGER_ANON_KEY", ""),
        service_key=env.get("LEDGER_SERVICE_KEY", ""),
        service_prefix=prefix,
        kv_path=Path(env.get("LEDGER_KV_PATH", DATA_DIR / "kv_store.db")),
        http_timeout=_timeout(env.get("LEDGER_HTTP_TIMEOUT")),
        log_level=env.get("LEDGER_LOG_LEVEL", "INFO"),
    )
