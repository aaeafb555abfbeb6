from __future__ import annotations

import configparser
from pathlib import Path

from vulnrisk_cli.exceptions import ConfigError
from vulnrisk_cli.models.config import AppConfig

CONFIG_FILENAME = ".vulnrisk-cli.ini"
_SECTION = "vulnrisk"
_REQUIRED_KEYS = ("output_dir", "ttl_minutes", "log_level")


def config_exists(directory: Path) -> bool:
    return (directory / CONFIG_FILENAME).is_file()


def write_config(directory: Path, config: AppConfig) -> None:
    cp = configparser.ConfigParser()
    cp[_SECTION] = {
        "output_dir": config.output_dir,
        "ttl_minutes": str(config.ttl_minutes),
        "log_level": config.log_level,
    }
    path = directory / CONFIG_FILENAME
    with open(path, "w", encoding="utf-8") as f:
        cp.write(f)


def read_config(directory: Path) -> AppConfig:
    path = directory / CONFIG_FILENAME
    if not path.is_file():
        raise ConfigError(
            "Configuration not found. Run vulnrisk-cli --init first."
        )

    cp = configparser.ConfigParser()
    try:
        cp.read(str(path), encoding="utf-8")
    except configparser.Error as exc:
        raise ConfigError(
            f"Invalid configuration format in {CONFIG_FILENAME}. "
            "Run vulnrisk-cli --init to reconfigure."
        ) from exc

    if not cp.has_section(_SECTION):
        raise ConfigError(
            f"Invalid configuration: missing [{_SECTION}] section in {CONFIG_FILENAME}."
        )

    for key in _REQUIRED_KEYS:
        if not cp.has_option(_SECTION, key) or not cp.get(_SECTION, key).strip():
            raise ConfigError(
                f"Invalid configuration: missing or empty '{key}' in {CONFIG_FILENAME}. "
                "Run vulnrisk-cli --init to reconfigure."
            )

    try:
        ttl_minutes = cp.getint(_SECTION, "ttl_minutes")
    except ValueError as exc:
        raise ConfigError(
            f"Invalid configuration: 'ttl_minutes' in {CONFIG_FILENAME} must be a whole number."
        ) from exc

    return AppConfig(
        output_dir=cp.get(_SECTION, "output_dir"),
        ttl_minutes=ttl_minutes,
        log_level=cp.get(_SECTION, "log_level"),
    )


def load_config(directory: Path) -> AppConfig:
    """Return the stored configuration, or defaults when none was written."""
    if not config_exists(directory):
        return AppConfig()
    return read_config(directory)
