"""Configuration loading for the compare command.

Example config file (compare.yaml):

    date_range:
      start: "2017-01-01"
      end: "2024-01-01"
    periodic_amount: 100
    initial_amount: 0
    frequency: "monthly"
    dca_assets:
      - "BTC-USD"
      - "PETR4.SA"
    lump_sum_assets:
      - "BTC-USD"
      - "FIXED-BRL-10.0"
    structured_notes:
      - underlying: "^GSPC"
        protected: true
        participation: 1.0
        cap_limit: 0.20
    use_native: false
    data_source: "yahoo"
    source_params:
      timeout: 30
      strict: false
    log_level: "INFO"
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from dca_platform.exceptions import ConfigError, InvalidParameterError
from dca_platform.types import (CompareConfig, DateRange, Frequency,
                                StructuredNoteSpec, Symbol)

# Valid data source types
VALID_DATA_SOURCES = frozenset(["yahoo", "csv"])

VALID_LOG_LEVELS = frozenset(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])


def _parse_datetime(value: str | datetime) -> datetime:
    """Parse a datetime string or pass through datetime objects.

    :param value: ISO format string or datetime object.
    :returns: Timezone-aware datetime (UTC if no timezone specified).
    :raises ConfigError: If parsing fails.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    # PyYAML turns unquoted YYYY-MM-DD into a date
    if hasattr(value, "isoformat") and not isinstance(value, str):
        value = value.isoformat()

    try:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    except ValueError:
        pass

    try:
        dt = datetime.strptime(str(value), "%Y-%m-%d")
        return dt.replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise ConfigError(f"Invalid datetime format: {value}") from e


def _check_amount(value: Any, label: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{label}' must be a number")
    if not math.isfinite(value):
        raise ConfigError(f"'{label}' must be a finite number")
    if value < 0:
        raise ConfigError(f"'{label}' must be non-negative")
    return float(value)


def _parse_amount(raw_config: dict[str, Any], field: str, default: float) -> float:
    value = raw_config.get(field, default)
    if value is None:
        return default
    return _check_amount(value, field)


def _parse_flag(raw: dict[str, Any], field: str, default: bool, label: str = "") -> bool:
    value = raw.get(field, default)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigError(f"'{label or field}' must be true or false")
    return value


def _parse_symbols(raw_config: dict[str, Any], field: str) -> list[Symbol]:
    raw_symbols = raw_config.get(field, [])
    if raw_symbols is None:
        return []
    if not isinstance(raw_symbols, list):
        raise ConfigError(f"'{field}' must be a list of symbols")
    return [Symbol(str(s).strip()) for s in raw_symbols if str(s).strip()]


def _parse_structured_notes(raw_notes: Any) -> list[StructuredNoteSpec]:
    if raw_notes is None:
        return []
    if not isinstance(raw_notes, list):
        raise ConfigError("'structured_notes' must be a list")

    notes: list[StructuredNoteSpec] = []
    for i, raw in enumerate(raw_notes):
        if not isinstance(raw, dict):
            raise ConfigError(f"'structured_notes[{i}]' must be a mapping")
        if "underlying" not in raw:
            raise ConfigError(f"'structured_notes[{i}]' is missing 'underlying'")

        values: dict[str, float] = {}
        for field in ("participation", "cap_limit", "amount"):
            value = raw.get(field)
            if value is None:
                continue
            values[field] = _check_amount(value, f"structured_notes[{i}].{field}")

        notes.append(
            StructuredNoteSpec(
                underlying=Symbol(str(raw["underlying"])),
                protected=_parse_flag(
                    raw, "protected", True, f"structured_notes[{i}].protected"
                ),
                participation=values.get("participation", 1.0),
                cap_limit=values.get("cap_limit", 0.0),
                amount=values.get("amount"),
            )
        )
    return notes


def parse_compare_config(raw_config: Any) -> CompareConfig:
    """Validate a raw mapping into a CompareConfig.

    :param raw_config: Mapping loaded from YAML (or built by the CLI).
    :returns: Validated CompareConfig object.
    :raises ConfigError: If the configuration is invalid.
    """
    if not isinstance(raw_config, dict):
        raise ConfigError("Configuration must be a YAML mapping")

    if "date_range" not in raw_config:
        raise ConfigError("Missing required field: date_range")

    # Parse date_range
    raw_date_range = raw_config["date_range"]
    if not isinstance(raw_date_range, dict):
        raise ConfigError("'date_range' must be a mapping with 'start' and 'end'")
    if "start" not in raw_date_range or "end" not in raw_date_range:
        raise ConfigError("'date_range' must contain 'start' and 'end'")

    start_dt = _parse_datetime(raw_date_range["start"])
    end_dt = _parse_datetime(raw_date_range["end"])

    if start_dt >= end_dt:
        raise ConfigError("'date_range.start' must be before 'date_range.end'")

    # Parse frequency
    try:
        frequency = Frequency.parse(raw_config.get("frequency", Frequency.MONTHLY))
    except InvalidParameterError as e:
        raise ConfigError(str(e)) from e

    # Parse assets
    dca_assets = _parse_symbols(raw_config, "dca_assets")
    lump_sum_assets = _parse_symbols(raw_config, "lump_sum_assets")
    structured_notes = _parse_structured_notes(raw_config.get("structured_notes"))

    if not dca_assets and not lump_sum_assets and not structured_notes:
        raise ConfigError(
            "Select at least one asset in 'dca_assets', 'lump_sum_assets' "
            "or 'structured_notes'"
        )

    # Parse data_source
    data_source = raw_config.get("data_source", "yahoo")
    if data_source not in VALID_DATA_SOURCES:
        raise ConfigError(
            f"Invalid data_source '{data_source}'. "
            f"Valid options: {sorted(VALID_DATA_SOURCES)}"
        )

    # Parse source_params (optional)
    source_params: dict[str, Any] = raw_config.get("source_params") or {}
    if not isinstance(source_params, dict):
        raise ConfigError("'source_params' must be a mapping")

    log_level = str(raw_config.get("log_level", "INFO")).upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ConfigError(
            f"Invalid log_level '{log_level}'. "
            f"Valid options: {sorted(VALID_LOG_LEVELS)}"
        )

    return CompareConfig(
        date_range=DateRange(start=start_dt, end=end_dt),
        periodic_amount=_parse_amount(raw_config, "periodic_amount", 100.0),
        initial_amount=_parse_amount(raw_config, "initial_amount", 0.0),
        frequency=frequency,
        dca_assets=dca_assets,
        lump_sum_assets=lump_sum_assets,
        structured_notes=structured_notes,
        use_native=_parse_flag(raw_config, "use_native", False),
        data_source=data_source,
        source_params=source_params,
        log_level=log_level,
    )


def load_compare_config(config_path: str | Path) -> CompareConfig:
    """Parse and validate a compare configuration file.

    :param config_path: Path to YAML configuration file.
    :returns: Validated CompareConfig object.
    :raises ConfigError: If file cannot be read or config is invalid.
    """
    config_path = Path(config_path)

    # Read and parse YAML
    try:
        with open(config_path) as f:
            raw_config = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {config_path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in configuration file: {e}") from e

    return parse_compare_config(raw_config)


__all__ = [
    "parse_compare_config",
    "load_compare_config",
]
