import questionary


MAIN_MENU_CHOICES = [
    "YouTube Menu",
    "Config Menu",
    "Exit",
]


def main_menu() -> str:
    """Top-level menu. Ctrl-C / Esc is treated as Exit."""
    choice = questionary.select(
        "📺 YouTube Playlists — What would you like to do?",
        choices=MAIN_MENU_CHOICES,
    ).ask()
    return choice or "Exit"
