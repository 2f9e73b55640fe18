import json
import os
from typing import Any, Dict

CONFIG_PATH = "config.json"

# Default configuration values
DEFAULT_CONFIG = {
    # Auth strategy: "oauth" (loopback consent flow) or "api_key"
    "youtube_auth_mode": "oauth",
    "youtube_client_secrets_file": "credentials.json",
    "youtube_token_file": os.path.join("~", ".youtube_token.json"),
    "youtube_api_key": "",
    "youtube_scopes": [
        "https://www.googleapis.com/auth/youtube.readonly",
    ],

    # Loopback redirect (must match the OAuth client when it is a web client)
    "youtube_redirect_host": "localhost",
    "youtube_redirect_port": 8080,
    "youtube_auth_timeout": 300,
    "youtube_open_browser": False,
    "youtube_auto_refresh": True,

    # Listing
    "youtube_page_size": 50,
    "youtube_request_timeout": 30,

    "log_level": "INFO",
}

# Validation rules for config fields
CONFIG_SCHEMA = {
    "youtube_auth_mode": {"type": str, "required": True, "choices": ["oauth", "api_key"]},
    "youtube_client_secrets_file": {"type": str, "required": False},
    "youtube_token_file": {"type": str, "required": True},
    "youtube_api_key": {"type": str, "required": False},
    "youtube_scopes": {"type": list, "required": False, "element_type": str},

    "youtube_redirect_host": {"type": str, "required": False},
    "youtube_redirect_port": {"type": int, "required": False, "min": 0, "max": 65535},
    "youtube_auth_timeout": {"type": (int, float), "required": False, "min": 1, "max": 3600},
    "youtube_open_browser": {"type": bool, "required": False},
    "youtube_auto_refresh": {"type": bool, "required": False},

    "youtube_page_size": {"type": int, "required": False, "min": 1, "max": 50},
    "youtube_request_timeout": {"type": (int, float), "required": False, "min": 1, "max": 300},

    "log_level": {"type": str, "required": False, "choices": ["DEBUG", "INFO", "WARNING", "ERROR"]},
}


def load_config(path: str = CONFIG_PATH) -> Dict[str, Any]:
    """Load configuration from file, applying defaults for missing fields."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file {path} not found.")

    with open(path, "r", encoding="utf-8") as f:
        config = json.load(f)

    # Apply defaults for missing fields
    for key, value in DEFAULT_CONFIG.items():
        if key not in config:
            config[key] = value

    return config


def save_config(config: Dict[str, Any], path: str = CONFIG_PATH) -> bool:
    """Save configuration to file."""
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except OSError as e:
        raise IOError(f"Failed to save config: {e}")


def validate_config(config: Dict[str, Any]) -> tuple[bool, list[str]]:
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

        # bool is an int subclass; don't let True pass as a port number.
        expected_type = rules.get("type")
        if isinstance(value, bool) and expected_type is not bool:
            errors.append(f"Field '{key}' must not be a boolean")
            continue

        # Type check
        if expected_type and not isinstance(value, expected_type):
            type_names = expected_type.__name__ if not isinstance(expected_type, tuple) else "/".join(t.__name__ for t in expected_type)
            errors.append(f"Field '{key}' must be {type_names}, got {type(value).__name__}")
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

        # Choices check
        if "choices" in rules and value not in rules["choices"]:
            errors.append(f"Field '{key}' must be one of {rules['choices']}, got '{value}'")

        # Range check for numeric values
        if isinstance(value, (int, float)):
            if "min" in rules and value < rules["min"]:
                errors.append(f"Field '{key}' must be >= {rules['min']}, got {value}")
            if "max" in rules and value > rules["max"]:
                errors.append(f"Field '{key}' must be <= {rules['max']}, got {value}")

    if config.get("youtube_auth_mode") == "api_key" and not str(config.get("youtube_api_key") or "").strip():
        errors.append("Field 'youtube_api_key' is required when youtube_auth_mode is 'api_key'")

    return len(errors) == 0, errors


def update_config(key: str, value: Any, path: str = CONFIG_PATH) -> tuple[bool, str]:
    """
    Update a single config field with validation.
    Returns (success, message).
    """
    config = load_config(path)

    # Check if key is valid
    if key not in CONFIG_SCHEMA:
        return False, f"Unknown config key: {key}"

    # Create temporary config with new value
    test_config = config.copy()
    test_config[key] = value

    # Validate the change
    is_valid, errors = validate_config(test_config)
    if not is_valid:
        return False, f"Validation failed: {', '.join(errors)}"

    # Save the updated config
    config[key] = value
    save_config(config, path)

    return True, f"Updated '{key}' to '{value}'"
