"""Configuration loading utilities with JSON and YAML support."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml

from backdrop.core.config.models import AppConfig

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def detect_format(file_path: Path | str) -> str:
    """Detect config file format from extension.

    Raises:
        ValueError: If format cannot be determined

    Example:
        >>> detect_format("backdrop.json")
        'json'
        >>> detect_format("backdrop.yml")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()

    if suffix == ".json":
        return "json"
    elif suffix in [".yaml", ".yml"]:
        return "yaml"
    else:
        raise ValueError(f"Unsupported config format: {suffix}")


def load_config(path: str | Path) -> dict[str, Any]:
    """Load and return raw configuration dictionary.

    Args:
        path: Path to config file (.json, .yaml, or .yml)

    Returns:
        Raw configuration dictionary

    Raises:
        FileNotFoundError: If config file does not exist
        ValueError: If format is not supported or file content is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    fmt = detect_format(path)

    if fmt == "json":
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e
    else:
        try:
            with path.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
                # safe_load returns None for empty files
                return content if content is not None else {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration.

    An explicit path must exist. Without a path, the default file is used when
    present and defaults otherwise. Unset credentials and flags are then
    filled from the environment.

    Args:
        path: Path to app config file (.json, .yaml, or .yml)

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If an explicit path does not exist
        ValueError: If the file format is unsupported or malformed
        ValidationError: If config is invalid
    """
    if path is not None:
        config = AppConfig.model_validate(load_config(path))
    elif AppConfig.default_path().exists():
        config = AppConfig.model_validate(load_config(AppConfig.default_path()))
    else:
        config = AppConfig()

    _load_env_vars_into_config(config)
    return config


def _load_env_vars_into_config(config: AppConfig) -> None:
    """Fill unset generation and CRM settings from environment variables.

    Mutates the config object in place.
    """
    gen_updates: dict[str, Any] = {}

    enabled = os.getenv("BACKDROP_ENABLE_GENERATIVE_BACKGROUNDS")
    if enabled is not None:
        gen_updates["enabled"] = enabled.strip().lower() in _TRUTHY

    provider = os.getenv("BACKDROP_IMAGE_PROVIDER")
    if provider:
        gen_updates["provider"] = provider.strip().lower()

    if config.generation.client_id is None:
        client_id = os.getenv("BACKDROP_GENERATION_CLIENT_ID")
        if client_id:
            logger.debug("Loaded BACKDROP_GENERATION_CLIENT_ID from environment")
            gen_updates["client_id"] = client_id

    if config.generation.client_secret is None:
        client_secret = os.getenv("BACKDROP_GENERATION_CLIENT_SECRET")
        if client_secret:
            logger.debug("Loaded BACKDROP_GENERATION_CLIENT_SECRET from environment")
            gen_updates["client_secret"] = client_secret

    if gen_updates:
        config.generation = config.generation.model_validate(
            {**config.generation.model_dump(), **gen_updates}
        )

    crm_updates: dict[str, Any] = {}
    if config.crm_auth.client_id is None:
        crm_id = os.getenv("BACKDROP_CRM_CLIENT_ID")
        if crm_id:
            logger.debug("Loaded BACKDROP_CRM_CLIENT_ID from environment")
            crm_updates["client_id"] = crm_id
    if config.crm_auth.client_secret is None:
        crm_secret = os.getenv("BACKDROP_CRM_CLIENT_SECRET")
        if crm_secret:
            logger.debug("Loaded BACKDROP_CRM_CLIENT_SECRET from environment")
            crm_updates["client_secret"] = crm_secret

    if crm_updates:
        config.crm_auth = config.crm_auth.model_copy(update=crm_updates)
