"""Tests for DABBA_* environment configuration."""
from __future__ import annotations

import pytest

from dabba_mcp.infrastructure.settings import MonsoonMode, RainfallSource, Settings


def test_defaults_from_empty_environment() -> None:
    settings = Settings.from_env({})
    assert settings == Settings()
    assert settings.monsoon_mode == MonsoonMode.AUTO
    assert settings.rainfall_source == RainfallSource.STATIC
    assert settings.protocol_file is None


def test_reads_all_variables() -> None:
    settings = Settings.from_env(
        {
            "DABBA_PROTOCOL_FILE": "/etc/dabba/protocol.json",
            "DABBA_MONSOON_MODE": "ON",
            "DABBA_RAINFALL_SOURCE": "open-meteo",
            "DABBA_RAINFALL_KURLA_MM": "12.5",
            "DABBA_RAINFALL_PAREL_MM": "4",
            "DABBA_WEATHER_TIMEOUT": "3",
        }
    )
    assert settings.protocol_file == "/etc/dabba/protocol.json"
    assert settings.monsoon_mode == MonsoonMode.ON
    assert settings.rainfall_source == RainfallSource.OPEN_METEO
    assert settings.rainfall_kurla_mm == 12.5
    assert settings.rainfall_parel_mm == 4.0
    assert settings.weather_timeout == 3.0


def test_blank_protocol_file_means_bundled() -> None:
    assert Settings.from_env({"DABBA_PROTOCOL_FILE": ""}).protocol_file is None


@pytest.mark.parametrize(
    "environ",
    [
        {"DABBA_MONSOON_MODE": "sometimes"},
        {"DABBA_RAINFALL_SOURCE": "almanac"},
        {"DABBA_RAINFALL_KURLA_MM": "heavy"},
    ],
)
def test_invalid_values_raise(environ: dict[str, str]) -> None:
    with pytest.raises(ValueError, match="Invalid DABBA_"):
        Settings.from_env(environ)


def test_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DABBA_MONSOON_MODE", "off")
    assert Settings.from_env().monsoon_mode == MonsoonMode.OFF
