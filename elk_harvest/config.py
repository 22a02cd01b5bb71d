from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from elk_harvest.sources import infer_year

DEFAULT_SOURCE_PATH = Path("huntData") / "CO2017.csv"
DEFAULT_ANIMAL = "elk"
DEFAULT_YEAR = 2017
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_LOG_LEVEL = "INFO"

ENV_PREFIX = "HARVEST_"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass
class Settings:
    source_path: Path = DEFAULT_SOURCE_PATH
    animal: str = DEFAULT_ANIMAL
    year: int = DEFAULT_YEAR
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    def validate(self) -> None:
        problems = []
        if not self.animal.strip():
            problems.append("animal must not be empty")
        if not 1900 <= self.year <= 2100:
            problems.append(f"year out of range: {self.year}")
        if not 0 < self.port < 65536:
            problems.append(f"port out of range: {self.port}")
        if self.log_level.upper() not in LOG_LEVELS:
            problems.append(f"unknown log_level: {self.log_level}")
        if problems:
            raise ValueError("Invalid settings: " + "; ".join(problems))


def _env_int(environ: Mapping[str, str], key: str) -> Optional[int]:
    raw = environ.get(ENV_PREFIX + key)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX + key} must be an integer, got {raw!r}") from None


def load_settings(environ: Optional[Mapping[str, str]] = None, **overrides) -> Settings:
    """Build settings from HARVEST_* environment variables.

    Keyword overrides (typically parsed CLI flags) win over the environment;
    None means "not given". Without an explicit year, the year in the source
    file name is used, then DEFAULT_YEAR.
    """
    if environ is None:
        environ = os.environ

    values = {
        "source_path": environ.get(ENV_PREFIX + "SOURCE"),
        "animal": environ.get(ENV_PREFIX + "ANIMAL"),
        "year": _env_int(environ, "YEAR"),
        "host": environ.get(ENV_PREFIX + "HOST"),
        "port": _env_int(environ, "PORT"),
        "log_level": environ.get(ENV_PREFIX + "LOG_LEVEL"),
    }
    for key, value in overrides.items():
        if key not in values:
            raise TypeError(f"Unknown setting: {key}")
        if value is not None:
            values[key] = value

    source_path = Path(values["source_path"] or DEFAULT_SOURCE_PATH)
    year = values["year"]
    if year is None:
        year = infer_year(source_path) or DEFAULT_YEAR

    settings = Settings(
        source_path=source_path,
        animal=(values["animal"] or DEFAULT_ANIMAL).lower(),
        year=year,
        host=values["host"] or DEFAULT_HOST,
        port=values["port"] if values["port"] is not None else DEFAULT_PORT,
        log_level=(values["log_level"] or DEFAULT_LOG_LEVEL).upper(),
    )
    settings.validate()
    return settings
