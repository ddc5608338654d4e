"""Loading of the project configuration file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from nfpm_pipe.config.nfpm import ProjectConfig
from nfpm_pipe.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def parse_project_config(data: Dict[str, Any]) -> ProjectConfig:
    """Validate already-parsed configuration data.

    Raises:
        ConfigurationError: If the data does not match the schema
    """
    try:
        return ProjectConfig.model_validate(data or {})
    except ValidationError as err:
        raise ConfigurationError(f"invalid configuration: {err}", context={"errors": err.errors()}) from err


def load_project_config(path: Path) -> ProjectConfig:
    """Read and validate a YAML project configuration file.

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML, or
            does not match the schema
    """
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as err:
        raise ConfigurationError(f"could not read {path}: {err}", context={"path": str(path)}) from err
    except yaml.YAMLError as err:
        raise ConfigurationError(f"could not parse {path}: {err}", context={"path": str(path)}) from err

    if data is not None and not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a mapping at the top level", context={"path": str(path)})

    logger.debug(f"loaded configuration from {path}")
    return parse_project_config(data or {})
