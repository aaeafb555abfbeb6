from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path

import pytest

from vulnrisk_cli.config import (
    CONFIG_FILENAME,
    config_exists,
    load_config,
    read_config,
    write_config,
)
from vulnrisk_cli.exceptions import ConfigError
from vulnrisk_cli.models.config import AppConfig


def _make_config(
    output_dir: str = "reports",
    ttl_minutes: int = 60,
    log_level: str = "WARNING",
) -> AppConfig:
    return AppConfig(output_dir=output_dir, ttl_minutes=ttl_minutes, log_level=log_level)


class TestAppConfig:
    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert cfg.output_dir == "reports"
        assert cfg.ttl == timedelta(hours=1)
        assert cfg.logging_level == logging.WARNING

    def test_values_are_normalized(self) -> None:
        cfg = _make_config(output_dir="  out ", log_level=" debug ")
        assert cfg.output_dir == "out"
        assert cfg.log_level == "DEBUG"
        assert cfg.logging_level == logging.DEBUG

    def test_empty_output_dir_raises(self) -> None:
        with pytest.raises(ConfigError, match="Report directory cannot be empty"):
            _make_config(output_dir="  ")

    @pytest.mark.parametrize("minutes", [0, -5])
    def test_non_positive_ttl_raises(self, minutes: int) -> None:
        with pytest.raises(ConfigError, match="positive number of minutes"):
            _make_config(ttl_minutes=minutes)

    def test_unknown_log_level_raises(self) -> None:
        with pytest.raises(ConfigError, match="Unknown log level 'LOUD'"):
            _make_config(log_level="loud")


class TestConfigFile:
    def test_round_trip(self, tmp_path: Path) -> None:
        original = _make_config(output_dir="out/reports", ttl_minutes=15, log_level="INFO")
        write_config(tmp_path, original)

        assert config_exists(tmp_path) is True
        assert read_config(tmp_path) == original

    def test_file_layout(self, tmp_path: Path) -> None:
        write_config(tmp_path, _make_config())
        content = (tmp_path / CONFIG_FILENAME).read_text(encoding="utf-8")
        assert content.startswith("[vulnrisk]\n")
        assert "ttl_minutes = 60" in content

    def test_load_config_defaults_without_file(self, tmp_path: Path) -> None:
        assert config_exists(tmp_path) is False
        assert load_config(tmp_path) == AppConfig()

    def test_load_config_reads_file(self, tmp_path: Path) -> None:
        write_config(tmp_path, _make_config(ttl_minutes=5))
        assert load_config(tmp_path).ttl_minutes == 5


class TestReadConfigErrors:
    def _write(self, directory: Path, text: str) -> None:
        (directory / CONFIG_FILENAME).write_text(text, encoding="utf-8")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Configuration not found"):
            read_config(tmp_path)

    def test_missing_section(self, tmp_path: Path) -> None:
        self._write(tmp_path, "[wrong]\nkey = val\n")
        with pytest.raises(ConfigError, match="missing \\[vulnrisk\\] section"):
            read_config(tmp_path)

    def test_missing_key(self, tmp_path: Path) -> None:
        self._write(tmp_path, "[vulnrisk]\noutput_dir = reports\nttl_minutes = 60\n")
        with pytest.raises(ConfigError, match="missing or empty 'log_level'"):
            read_config(tmp_path)

    def test_empty_value(self, tmp_path: Path) -> None:
        self._write(tmp_path, "[vulnrisk]\noutput_dir =\nttl_minutes = 60\nlog_level = INFO\n")
        with pytest.raises(ConfigError, match="missing or empty 'output_dir'"):
            read_config(tmp_path)

    def test_non_integer_ttl(self, tmp_path: Path) -> None:
        self._write(tmp_path, "[vulnrisk]\noutput_dir = r\nttl_minutes = soon\nlog_level = INFO\n")
        with pytest.raises(ConfigError, match="must be a whole number"):
            read_config(tmp_path)

    def test_invalid_values_are_rejected(self, tmp_path: Path) -> None:
        self._write(tmp_path, "[vulnrisk]\noutput_dir = r\nttl_minutes = 0\nlog_level = INFO\n")
        with pytest.raises(ConfigError, match="positive number of minutes"):
            read_config(tmp_path)

    def test_malformed_ini_syntax(self, tmp_path: Path) -> None:
        self._write(tmp_path, "not-an-ini\noutput_dir = reports\n")
        with pytest.raises(ConfigError, match="Invalid configuration format"):
            read_config(tmp_path)
