import json
import sys

from config import load_config, validate_config
from utils.logger import setup_logging, log_info, log_error
from menus.main_menu import main_menu
from menus.youtube_menu import youtube_menu
from menus.config_menu import config_menu


def main() -> int:
    setup_logging()

    try:
        config = load_config()
    except FileNotFoundError as e:
        log_error(f"Config file not found: {e}")
        log_error("Please create config.json with required settings.")
        return 1
    except json.JSONDecodeError as e:
        log_error(f"Config file contains invalid JSON: {e}")
        return 1
    except Exception as e:
        log_error(f"Error loading config: {e}")
        return 1

    setup_logging(config.get("log_level", "INFO"))

    is_valid, errors = validate_config(config)
    if not is_valid:
        for error in errors:
            log_error(error)
        return 1

    if config.get("youtube_auth_mode", "oauth") == "oauth":
        from youtube_api.auth import load_client_config, client_secrets_path
        from youtube_api.exceptions import ClientSecretsError

        try:
            load_client_config(client_secrets_path(config))
        except ClientSecretsError as e:
            log_error(str(e))
            return 1

    while True:
        choice = main_menu()

        # YouTube Menu
        if choice == "YouTube Menu":
            youtube_menu(config)

        # Config Menu
        elif choice == "Config Menu":
            config = config_menu(config)

        # Exit
        elif choice == "Exit":
            log_info("Exiting program...")
            break

        else:
            log_error("Invalid choice.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
