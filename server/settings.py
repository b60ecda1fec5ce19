"""Environment-driven settings for the local scoreboard server."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

DEFAULT_CORS_ORIGINS: tuple[str, ...] = ("http://localhost:5173", "http://127.0.0.1:5173")

_DOTENV_LOADED = False


def load_dotenv(path: str | Path = ".env") -> None:
    """Load environment variables from a .env file without overriding existing values."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return

    dotenv_path = Path(path)
    if not dotenv_path.exists():
        _DOTENV_LOADED = True
        return

    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[7:].strip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if value.startswith(("'", '"')) and value.endswith(("'", '"')) and len(value) >= 2:
            value = value[1:-1]
        os.environ.setdefault(key, value)

    _DOTENV_LOADED = True


def _env(name: str) -> str | None:
    """Read one setting, treating an empty value as unset."""
    load_dotenv()
    return os.getenv(name) or None


@dataclass(frozen=True)
class ServerSettings:
    """File locations, log level, and CORS origins."""

    roster_path: Path
    draft_path: Path
    log_level: str = "INFO"
    log_dir: Path | None = None
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS

    @classmethod
    def from_env(cls) -> "ServerSettings":
        log_dir = _env("SCOREBOARD_LOG_DIR")
        origins = _env("SCOREBOARD_CORS_ORIGINS")
        return cls(
            roster_path=Path(_env("SCOREBOARD_ROSTER_PATH") or "server/data/roster.json"),
            draft_path=Path(_env("SCOREBOARD_DRAFT_PATH") or "server/data/draft.json"),
            log_level=(_env("SCOREBOARD_LOG_LEVEL") or "INFO").upper(),
            log_dir=Path(log_dir) if log_dir else None,
            cors_origins=tuple(item.strip() for item in origins.split(",") if item.strip())
            if origins
            else DEFAULT_CORS_ORIGINS,
        )
