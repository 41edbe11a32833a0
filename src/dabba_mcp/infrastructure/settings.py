from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum


class MonsoonMode(str, Enum):
    AUTO = "auto"  # June to September by the Mumbai calendar
    ON = "on"
    OFF = "off"


class RainfallSource(str, Enum):
    STATIC = "static"  # Readings come from DABBA_RAINFALL_*_MM
    OPEN_METEO = "open-meteo"


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read from DABBA_* environment variables."""

    protocol_file: str | None = None
    monsoon_mode: MonsoonMode = MonsoonMode.AUTO
    rainfall_source: RainfallSource = RainfallSource.STATIC
    rainfall_kurla_mm: float = 0.0
    rainfall_parel_mm: float = 0.0
    weather_timeout: float = 10.0  # seconds

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from the process environment (or the given mapping).

        Raises ValueError for an unknown mode/source or a non-numeric reading.
        """
        env = environ if environ is not None else dict(os.environ)
        try:
            return cls(
                protocol_file=env.get("DABBA_PROTOCOL_FILE") or None,
                monsoon_mode=MonsoonMode(env.get("DABBA_MONSOON_MODE", "auto").lower()),
                rainfall_source=RainfallSource(env.get("DABBA_RAINFALL_SOURCE", "static").lower()),
                rainfall_kurla_mm=float(env.get("DABBA_RAINFALL_KURLA_MM", "0")),
                rainfall_parel_mm=float(env.get("DABBA_RAINFALL_PAREL_MM", "0")),
                weather_timeout=float(env.get("DABBA_WEATHER_TIMEOUT", "10")),
            )
        except ValueError as exc:
            raise ValueError(f"Invalid DABBA_* configuration: {exc}") from exc
