"""
Centralized tool settings.

These describe *how* a vendor space is built (which vendoring tool to run,
where artifacts go, how scripts are executed). *What* is built comes from the
``vendor-space.toml`` file handled by :mod:`vendorspace.config`.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    import tomli as tomllib  # type: ignore[attr-defined]

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Tool settings loaded from env or an optional TOML settings file."""

    model_config = SettingsConfigDict(
        env_prefix="VENDOR_SPACE_",
        extra="ignore",
    )

    config_filename: str = "vendor-space.toml"
    default_branch: str = "master"
    vendor_command: str = "cargo vendor --versioned-dirs"
    vendor_incremental_flag: str = "--no-delete"
    artifact_dir: str = ".cargo"
    artifact_suffix: str = ".config.toml"
    active_config_name: str = "config.toml"
    shell: str = "bash"
    strict_prefix: str = "set -euxo pipefail"
    log_level: str = "INFO"


_CONFIG_ENV_VAR = "VENDOR_SPACE_SETTINGS_PATH"


def _load_toml_config() -> Dict[str, Any]:
    """Load settings from the TOML file named by the environment, if any."""
    config_override = os.getenv(_CONFIG_ENV_VAR)
    if not config_override:
        return {}
    candidate = Path(config_override).expanduser()
    if candidate.is_file():
        with candidate.open("rb") as handle:
            return tomllib.load(handle)
    return {}


def _flatten_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Translate grouped TOML sections into AppSettings keyword arguments."""
    data: Dict[str, Any] = {}

    vendor = raw.get("vendor", {})
    if "command" in vendor:
        data["vendor_command"] = vendor["command"]
    if "incremental_flag" in vendor:
        data["vendor_incremental_flag"] = vendor["incremental_flag"]
    if "artifact_dir" in vendor:
        data["artifact_dir"] = vendor["artifact_dir"]
    if "artifact_suffix" in vendor:
        data["artifact_suffix"] = vendor["artifact_suffix"]
    if "active_config_name" in vendor:
        data["active_config_name"] = vendor["active_config_name"]

    shell = raw.get("shell", {})
    if "program" in shell:
        data["shell"] = shell["program"]
    if "strict_prefix" in shell:
        data["strict_prefix"] = shell["strict_prefix"]

    general = raw.get("general", {})
    if "config_filename" in general:
        data["config_filename"] = general["config_filename"]
    if "default_branch" in general:
        data["default_branch"] = general["default_branch"]
    if "log_level" in general:
        data["log_level"] = general["log_level"]

    return data


def load_settings() -> AppSettings:
    raw = _load_toml_config()
    flattened = _flatten_config(raw)
    # Environment variables take precedence over the settings file.
    for key in list(flattened):
        if f"VENDOR_SPACE_{key.upper()}" in os.environ:
            flattened.pop(key)
    return AppSettings(**flattened)


settings = load_settings()
