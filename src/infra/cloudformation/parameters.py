"""Parameter override file parsing.

Accepts every JSON shape the ``aws cloudformation deploy --parameter-overrides
file://...`` option accepts:

- ``["Key=Value", ...]``
- ``[{"ParameterKey": "Key", "ParameterValue": "Value"}, ...]``
- ``{"Parameters": {"Key": "Value"}}`` (CodePipeline configuration file)
- ``{"Key": "Value"}``
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from src.infra.errors import ConfigurationError


def load_parameter_overrides(path: Path) -> dict[str, str]:
    """Read a parameter override file into a key/value mapping.

    Args:
        path: Path to the JSON override file

    Returns:
        Mapping of parameter key to value, in file order

    Raises:
        ConfigurationError: If the file is unreadable or has an unknown shape
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read parameter file: {path}", str(e)) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Parameter file is not valid JSON: {path}", str(e)
        ) from e

    try:
        return _normalize(raw)
    except (TypeError, ValueError, KeyError) as e:
        raise ConfigurationError(
            f"Unsupported parameter file format: {path}", str(e)
        ) from e


def _normalize(raw: Any) -> dict[str, str]:
    if isinstance(raw, dict):
        if "Parameters" in raw and isinstance(raw["Parameters"], dict):
            raw = raw["Parameters"]
        return {str(key): _stringify(value) for key, value in raw.items()}

    if isinstance(raw, list):
        overrides: dict[str, str] = {}
        for item in raw:
            if isinstance(item, str):
                if "=" not in item:
                    raise ValueError(f"expected Key=Value, got {item!r}")
                key, value = item.split("=", 1)
                overrides[key] = value
            elif isinstance(item, dict):
                overrides[str(item["ParameterKey"])] = _stringify(
                    item["ParameterValue"]
                )
            else:
                raise TypeError(f"unexpected entry {item!r}")
        return overrides

    raise TypeError(f"expected a JSON object or array, got {type(raw).__name__}")


def _stringify(value: Any) -> str:
    # CloudFormation parameters are strings; lists become CommaDelimitedList
    if isinstance(value, list):
        return ",".join(str(v) for v in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
