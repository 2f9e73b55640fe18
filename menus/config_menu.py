import questionary
from config import CONFIG_SCHEMA, update_config, validate_config
from utils.logger import log_info, log_error, log_success, log_warning

# Settings that only matter for one auth strategy.
OAUTH_SETTINGS = [
    "youtube_client_secrets_file",
    "youtube_token_file",
    "youtube_redirect_host",
    "youtube_redirect_port",
    "youtube_auth_timeout",
    "youtube_open_browser",
    "youtube_auto_refresh",
]
API_KEY_SETTINGS = ["youtube_api_key"]
COMMON_SETTINGS = ["youtube_page_size", "youtube_request_timeout", "log_level"]

SECRET_KEYS = {"youtube_api_key"}


def config_menu(config: dict) -> dict:
    """Show the YouTube settings menu. Returns the possibly updated config."""
    while True:
        mode = config.get("youtube_auth_mode", "oauth")
        choice = questionary.select(
            f"⚙️ Settings (auth mode: {mode})",
            choices=[
                "Show settings",
                "Switch auth mode",
                f"Edit {mode} settings",
                "Edit listing and logging settings",
                "Check settings",
                "Back",
            ],
        ).ask()

        if choice == "Show settings":
            show_settings(config)

        elif choice == "Switch auth mode":
            config = switch_auth_mode_menu(config)

        elif choice == f"Edit {mode} settings":
            config = edit_settings_menu(config, settings_for_mode(mode))

        elif choice == "Edit listing and logging settings":
            config = edit_settings_menu(config, COMMON_SETTINGS)

        elif choice == "Check settings":
            check_settings(config)

        elif choice == "Back" or choice is None:
            break

    return config


def settings_for_mode(mode: str) -> list:
    return API_KEY_SETTINGS if mode == "api_key" else OAUTH_SETTINGS


def _display_value(key: str, value):
    if key in SECRET_KEYS and value:
        value = str(value)
        return value[:4] + "…" if len(value) > 4 else "****"
    if isinstance(value, bool):
        return "on" if value else "off"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) or "(none)"
    return value


def show_settings(config: dict):
    """Log the settings that apply to the active auth mode, then the shared ones."""
    mode = config.get("youtube_auth_mode", "oauth")
    log_info(f"Auth mode: {mode}")
    if mode == "oauth":
        log_info(f"  youtube_scopes: {_display_value('youtube_scopes', config.get('youtube_scopes', []))}")
    for key in settings_for_mode(mode) + COMMON_SETTINGS:
        log_info(f"  {key}: {_display_value(key, config.get(key, '(not set)'))}")


def _ask_value(key: str, current):
    """Prompt for a new value of key using its CONFIG_SCHEMA type. None means cancelled."""
    rules = CONFIG_SCHEMA.get(key, {})
    expected = rules.get("type")

    if "choices" in rules:
        default = current if current in rules["choices"] else None
        return questionary.select(f"{key}:", choices=rules["choices"], default=default).ask()

    if expected is bool:
        return questionary.confirm(f"{key}?", default=bool(current)).ask()

    if key in SECRET_KEYS:
        answer = questionary.password(f"{key}:").ask()
        return answer.strip() if answer is not None else None

    answer = questionary.text(f"{key}:", default="" if current is None else str(current)).ask()
    if answer is None or expected is str:
        return answer

    try:
        return int(answer) if expected is int else float(answer)
    except ValueError:
        log_error(f"{key} needs a number, got '{answer}'")
        return None


def edit_settings_menu(config: dict, keys: list) -> dict:
    """Pick one of keys and store a new value for it in config.json."""
    choices = [
        questionary.Choice(title=f"{key} = {_display_value(key, config.get(key))}", value=key)
        for key in keys
    ]
    choices.append(questionary.Choice(title="Back", value=None))

    key = questionary.select("Which setting?", choices=choices).ask()
    if key is None:
        return config

    value = _ask_value(key, config.get(key))
    if value is None:
        return config

    success, message = update_config(key, value)
    if not success:
        log_error(message)
        return config

    log_success(f"Saved {key}" if key in SECRET_KEYS else message)
    config[key] = value
    return config


def switch_auth_mode_menu(config: dict) -> dict:
    """Toggle between the OAuth consent flow and a static API key."""
    current = config.get("youtube_auth_mode", "oauth")

    choice = questionary.select(
        "Select auth mode:",
        choices=[
            questionary.Choice(title="OAuth (your playlists, browser consent)", value="oauth"),
            questionary.Choice(title="API key (public playlists only)", value="api_key"),
            questionary.Choice(title="Back", value=None),
        ],
    ).ask()

    if not choice or choice == current:
        return config

    if choice == "api_key" and not str(config.get("youtube_api_key") or "").strip():
        api_key = _ask_value("youtube_api_key", "")
        if not api_key:
            log_error("An API key is required for api_key mode.")
            return config
        success, message = update_config("youtube_api_key", api_key)
        if not success:
            log_error(message)
            return config
        config["youtube_api_key"] = api_key

    success, message = update_config("youtube_auth_mode", choice)
    if success:
        log_success(message)
        config["youtube_auth_mode"] = choice
    else:
        log_error(message)

    return config


def check_settings(config: dict) -> bool:
    """Validate config and, in oauth mode, the client secrets file it points at."""
    from youtube_api.auth import check_youtube_credentials

    is_valid, errors = validate_config(config)
    for error in errors:
        log_error(f"✗ {error}")

    creds = check_youtube_credentials(config)
    if creds.get("ok"):
        log_info(creds.get("message"))
    else:
        log_warning(creds.get("message"))

    if is_valid and creds.get("ok"):
        log_success("Settings look good.")
        return True
    return False
