"""
Configuration loading.

Settings come from ``args/voxmail.yaml``; ``.env`` is loaded with
python-dotenv so that the environment can override paths and the mail
transport without editing the YAML.

Environment overrides:
    VOXMAIL_CONFIG    Alternate YAML path
    VOXMAIL_DB_PATH   SQLite database file
    VOXMAIL_API_URL   Base URL the client talks to
    SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, SMTP_SECURE
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from voxmail import CONFIG_PATH, DATA_DIR, PROJECT_ROOT

logger = logging.getLogger(__name__)

load_dotenv()

TRUTHY = ("1", "true", "yes", "on")


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from YAML. Missing file means defaults."""
    if path is None:
        env_path = os.environ.get("VOXMAIL_CONFIG")
        path = Path(env_path) if env_path else CONFIG_PATH

    if not path.exists():
        logger.debug(f"Config file not found: {path}, using defaults")
        return {}

    try:
        with open(path) as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse config {path}: {e}")
        return {}


def get_section(name: str, config: dict[str, Any] | None = None) -> dict[str, Any]:
    if config is None:
        config = load_config()
    section = config.get(name)
    return section if isinstance(section, dict) else {}


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in TRUTHY


def get_db_path() -> Path:
    env_path = os.environ.get("VOXMAIL_DB_PATH")
    if env_path:
        return Path(env_path)
    return DATA_DIR / "voxmail.db"


def get_attachments_dir() -> Path:
    return DATA_DIR / "attachments"


def get_api_url(config: dict[str, Any] | None = None) -> str:
    env_url = os.environ.get("VOXMAIL_API_URL")
    if env_url:
        return env_url.rstrip("/")
    return str(get_section("client", config).get("api_url", "http://127.0.0.1:5000")).rstrip("/")


def get_token_file(config: dict[str, Any] | None = None) -> Path:
    raw = get_section("client", config).get("token_file", "data/client_token")
    path = Path(raw)
    return path if path.is_absolute() else PROJECT_ROOT / path


@dataclass
class SmtpSettings:
    """Outgoing mail transport settings."""

    host: str = ""
    port: int = 465
    user: str = ""
    password: str = ""
    secure: bool = True

    @property
    def configured(self) -> bool:
        return bool(self.host)


def get_smtp_settings(config: dict[str, Any] | None = None) -> SmtpSettings:
    mail = get_section("mail", config)

    port_raw = os.environ.get("SMTP_PORT") or mail.get("port", 465)
    try:
        port = int(port_raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid SMTP port {port_raw!r}, using 465")
        port = 465

    return SmtpSettings(
        host=os.environ.get("SMTP_HOST") or str(mail.get("host") or ""),
        port=port,
        user=os.environ.get("SMTP_USER", ""),
        password=os.environ.get("SMTP_PASS", ""),
        secure=_env_bool("SMTP_SECURE", bool(mail.get("secure", True))),
    )


__all__ = [
    "SmtpSettings",
    "get_api_url",
    "get_attachments_dir",
    "get_db_path",
    "get_section",
    "get_smtp_settings",
    "get_token_file",
    "load_config",
]
