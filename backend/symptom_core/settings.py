from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]

_ENV_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_QUOTES = ("'", '"')


def is_source_checkout() -> bool:
    # An installed copy sits in site-packages with no pyproject.toml beside it.
    return (BACKEND_DIR / "main.py").is_file() and (BACKEND_DIR.parent / "pyproject.toml").is_file()


def runtime_base_dir() -> Path:
    """Directory that relative paths and ``.env`` lookups resolve against.

    ``backend/`` when running from a checkout or an editable install,
    otherwise the current working directory.
    """
    return BACKEND_DIR if is_source_checkout() else Path.cwd()


@dataclass(frozen=True)
class Settings:
    openai_api_key: str
    gemini_api_key: str
    port: int
    upload_dir: Path
    openai_base_url: str
    gemini_base_url: str
    whisper_model: str
    transcription_language: str
    text_model: str
    vision_model: str
    provider_timeout_seconds: float
    max_upload_bytes: int
    allowed_origins: list[str]
    log_level: str
    json_logs: bool

    def missing_secrets(self) -> list[str]:
        missing: list[str] = []
        if not self.openai_api_key:
            missing.append("OPENAI_API_KEY")
        if not self.gemini_api_key:
            missing.append("GEMINI_API_KEY")
        return missing


def _parse_env_line(raw: str) -> tuple[str, str] | None:
    """``KEY=value`` from one ``.env`` line; comments, blanks and junk yield None."""
    line = raw.strip()
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or line.startswith("#") or not _ENV_KEY_RE.fullmatch(key):
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        value = value[1:-1]
    return key, value


def _load_local_env_file(path: Path) -> list[str]:
    """Export the pairs in ``path`` that are not already set; returns the keys applied."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        return []
    applied: list[str] = []
    for pair in filter(None, map(_parse_env_line, text.splitlines())):
        key, value = pair
        if key in os.environ:
            continue
        os.environ[key] = value
        applied.append(key)
    return applied


def env_file_candidates() -> list[Path]:
    base = runtime_base_dir()
    if base == BACKEND_DIR:
        return [BACKEND_DIR.parent / ".env", BACKEND_DIR / ".env"]
    return [base / ".env"]


def bootstrap_local_env() -> None:
    for candidate in env_file_candidates():
        if candidate.is_file():
            _load_local_env_file(candidate)


def _env_str(name: str, default: str) -> str:
    return (os.getenv(name) or default).strip()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_settings_from_env() -> Settings:
    upload_dir = Path(_env_str("UPLOAD_DIR", "uploads"))
    if not upload_dir.is_absolute():
        upload_dir = runtime_base_dir() / upload_dir

    origins = _env_str("ALLOWED_ORIGINS", "*")
    return Settings(
        openai_api_key=_env_str("OPENAI_API_KEY", ""),
        gemini_api_key=_env_str("GEMINI_API_KEY", ""),
        port=_env_int("PORT", 3000),
        upload_dir=upload_dir,
        openai_base_url=_env_str("OPENAI_API_BASE_URL", "https://api.openai.com/v1").rstrip("/"),
        gemini_base_url=_env_str(
            "GEMINI_API_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        ).rstrip("/"),
        whisper_model=_env_str("SYMPTOM_WHISPER_MODEL", "whisper-1"),
        transcription_language=_env_str("SYMPTOM_TRANSCRIPTION_LANGUAGE", "fr"),
        text_model=_env_str("SYMPTOM_TEXT_MODEL", "gemini-1.5-flash"),
        vision_model=_env_str("SYMPTOM_VISION_MODEL", "gemini-1.5-flash"),
        provider_timeout_seconds=max(1.0, _env_float("SYMPTOM_PROVIDER_TIMEOUT_SECONDS", 60.0)),
        max_upload_bytes=max(1, _env_int("SYMPTOM_MAX_UPLOAD_BYTES", 20 * 1024 * 1024)),
        allowed_origins=[origin.strip() for origin in origins.split(",") if origin.strip()] or ["*"],
        log_level=_env_str("SYMPTOM_LOG_LEVEL", "INFO").upper(),
        json_logs=_env_bool("SYMPTOM_JSON_LOGS", False),
    )
