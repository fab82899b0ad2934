# lectura de env vars + defaults
from __future__ import annotations

import os
from dataclasses import dataclass, replace

from dotenv import load_dotenv

# No sobre-escribimos env vars ya definidas en el entorno.
load_dotenv(override=False)

DEFAULT_DB_PATH = "./gh-hits-badge.db"
DEFAULT_PORT = 8080
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip()
    return val if val else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except Exception:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except Exception:
        return default


def _env_log_level(name: str, default: str) -> str:
    val = _env_str(name, default).upper()
    return val if val in LOG_LEVELS else default


@dataclass(frozen=True)
class Settings:
    """
    Settings centralizados (env vars). Esto evita `os.getenv(...)` disperso.

    Notas importantes:
    - CORS: si CORS_ORIGINS="*" -> allow_credentials=False para compatibilidad browser.
    - Los flags del CLI (--db/--port/--host/--log-level) se aplican con `override()`.
    """

    log_level: str

    db_path: str
    db_busy_timeout_s: float

    host: str
    port: int

    cors_origins_raw: str
    cors_allow_credentials: bool

    gzip_min_size: int

    log_file: str = ""

    def cors_allow_origins(self) -> list[str]:
        raw = self.cors_origins_raw.strip()
        if raw == "*":
            return ["*"]
        parts = [p.strip() for p in raw.split(",")]
        return [p for p in parts if p]

    def override(self, **changes: object) -> "Settings":
        """Copia con los valores no-None de `changes` aplicados."""
        clean = {k: v for k, v in changes.items() if v is not None}
        if "log_level" in clean:
            clean["log_level"] = str(clean["log_level"]).upper()
        return replace(self, **clean)  # type: ignore[arg-type]

    @staticmethod
    def from_env() -> "Settings":
        cors_raw = _env_str("CORS_ORIGINS", "*")
        allow_origins = ["*"] if cors_raw.strip() == "*" else [p.strip() for p in cors_raw.split(",") if p.strip()]

        # Regla browser: "*" + credentials=True no es válido
        cors_allow_credentials = True
        if allow_origins == ["*"]:
            cors_allow_credentials = False

        return Settings(
            log_level=_env_log_level("LOG_LEVEL", "INFO"),
            db_path=_env_str("HITS_DB_PATH", DEFAULT_DB_PATH),
            db_busy_timeout_s=max(0.0, _env_float("DB_BUSY_TIMEOUT_S", 5.0)),
            host=_env_str("API_HOST", "127.0.0.1"),
            port=_env_int("API_PORT", DEFAULT_PORT),
            cors_origins_raw=cors_raw,
            cors_allow_credentials=cors_allow_credentials,
            gzip_min_size=_env_int("GZIP_MIN_SIZE", 800),
            log_file=_env_str("LOGGER_FILE_PATH", ""),
        )
