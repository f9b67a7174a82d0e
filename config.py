import json
import os
import urllib.parse
from typing import Any, Dict, Tuple

from spotify_api.auth import DEFAULT_SCOPES, SpotifyConfig
from spotify_api.errors import ConfigError
from spotify_api.token_manager import DEFAULT_TOKEN_CACHE_PATH

CONFIG_PATH = "config.json"

# Default values for optional fields
DEFAULT_CONFIG = {
    "scopes": list(DEFAULT_SCOPES),
    "tokenPath": DEFAULT_TOKEN_CACHE_PATH,
}

# Validation rules for config fields
CONFIG_SCHEMA = {
    "clientId": {"type": str, "required": True, "non_empty": True},
    "clientSecret": {"type": str, "required": True, "non_empty": True},
    "redirectUri": {"type": str, "required": True, "non_empty": True, "url": True},
    "scopes": {"type": list, "required": False, "element_type": str},
    "tokenPath": {"type": str, "required": False, "non_empty": True},
}


def validate_config(config: Dict[str, Any]) -> Tuple[bool, list]:
    """
    Validate configuration against schema.
    Returns (is_valid, list_of_errors).
    """
    errors = []

    for key, rules in CONFIG_SCHEMA.items():
        # Check required fields
        if rules.get("required", False) and key not in config:
            errors.append(f"Missing required field: {key}")
            continue

        if key not in config:
            continue

        value = config[key]

        # Type check
        expected_type = rules.get("type")
        if expected_type and not isinstance(value, expected_type):
            errors.append(f"Field '{key}' must be {expected_type.__name__}, got {type(value).__name__}")
            continue

        if rules.get("non_empty") and isinstance(value, str) and not value.strip():
            errors.append(f"Field '{key}' must not be empty")
            continue

        # List element type check (when schema uses: {"type": list, "element_type": ...})
        if isinstance(value, list) and "element_type" in rules:
            elem_type = rules["element_type"]
            bad_elems = [v for v in value if not isinstance(v, elem_type)]
            if bad_elems:
                errors.append(
                    f"Field '{key}' must be a list of {elem_type.__name__}, got invalid elements: {bad_elems}"
                )
                continue

        if rules.get("url"):
            parsed = urllib.parse.urlparse(value.strip())
            if parsed.scheme not in ("http", "https") or not parsed.hostname:
                errors.append(f"Field '{key}' must be an http(s) URL with a host, got '{value}'")
                continue
            try:
                parsed.port
            except ValueError as e:
                errors.append(f"Field '{key}' has an invalid port: {e}")

    return len(errors) == 0, errors


def config_from_dict(data: Dict[str, Any]) -> SpotifyConfig:
    """Validate a raw config mapping and freeze it into a SpotifyConfig."""
    if not isinstance(data, dict):
        raise ConfigError("Config must be a JSON object with clientId, clientSecret and redirectUri")

    config = dict(data)

    # Apply defaults for missing fields
    for key, value in DEFAULT_CONFIG.items():
        if key not in config:
            config[key] = value

    is_valid, errors = validate_config(config)
    if not is_valid:
        raise ConfigError(f"Invalid config: {'; '.join(errors)}", details={"errors": errors})

    return SpotifyConfig(
        client_id=config["clientId"].strip(),
        client_secret=config["clientSecret"].strip(),
        redirect_uri=config["redirectUri"].strip(),
        scopes=tuple(s.strip() for s in config["scopes"] if s.strip()),
        token_path=config["tokenPath"],
    )


def load_config(path: str = CONFIG_PATH) -> SpotifyConfig:
    """Load configuration from file, applying defaults for missing optional fields."""
    if not os.path.exists(path):
        raise ConfigError(f"Config file {path} not found.", details={"path": path})

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError
        raise ConfigError(f"Config file {path} contains invalid JSON: {e}", details={"path": path}) from e

    return config_from_dict(data)
