import time

import questionary

from utils.logger import log_info, log_warning, log_error, log_success


def _redirect_uri(config: dict) -> str:
    host = config.get("youtube_redirect_host") or "localhost"
    port = config.get("youtube_redirect_port", 8080)
    return f"http://{host}:{port}/"


def _youtube_setup_help(config: dict) -> None:
    try:
        from youtube_api.auth import check_youtube_credentials, youtube_app_setup_instructions

        creds = check_youtube_credentials(config)
        log_info("\n" + "=" * 72)
        log_info("YOUTUBE DATA API SETUP")
        log_info("=" * 72)
        log_info(youtube_app_setup_instructions(redirect_uri=_redirect_uri(config)))
        log_info("")
        log_info("Current config status:")
        log_info(f"- youtube_auth_mode: {creds.get('mode')}")
        log_info(f"- youtube_client_secrets_file: {creds.get('client_secrets_file')}")
        log_info(f"- youtube_api_key: {('SET' if (config.get('youtube_api_key') or '').strip() else 'NOT SET')}")
        log_info(f"- redirect URI: {_redirect_uri(config)}")
        log_info("")
        if not creds.get("ok"):
            log_warning(creds.get("message") or "YouTube credentials are incomplete.")
        else:
            log_info(creds.get("message") or "YouTube credentials look OK.")
        log_info("=" * 72 + "\n")
    except Exception as e:
        log_error(f"Failed to show YouTube setup help: {e}")


def _youtube_token_status(config: dict) -> str:
    try:
        from youtube_api.token_manager import TokenManager

        tm = TokenManager.from_config(config)
        token = tm.load()
        if token is None:
            return f"No cached YouTube token found at {tm.cache_path}."
        if not token.expires_at:
            return f"Token cached: YES | Expiry: unknown | Refresh token: {'YES' if token.refresh_token else 'NO'}"
        expired = tm.is_expired(token)
        exp_str = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(float(token.expires_at)))
        return (
            f"Token cached: YES | Expired: {'YES' if expired else 'NO'} | Expires at: {exp_str}"
            f" | Refresh token: {'YES' if token.refresh_token else 'NO'}"
        )
    except Exception as e:
        return f"Token status unavailable: {e}"


def _get_client(config: dict):
    """Return an authorized client, running the consent flow when nothing is cached."""
    from youtube_api.bootstrap import obtain_client

    return obtain_client(config, notify=log_info)


def _youtube_authenticate(config: dict) -> None:
    """Run the loopback OAuth flow, replacing any cached token."""
    try:
        from youtube_api.auth import YouTubeOAuth, check_youtube_credentials
        from youtube_api.bootstrap import run_interactive_flow

        if config.get("youtube_auth_mode") == "api_key":
            log_info("Auth mode is api_key; no browser login is needed.")
            return

        creds = check_youtube_credentials(config)
        if not creds.get("ok"):
            log_warning(creds.get("message") or "YouTube credentials are incomplete.")
            _youtube_setup_help(config)
            return

        auth = YouTubeOAuth(config)
        open_browser = questionary.confirm(
            "Open the authorize URL in your default browser?", default=bool(config.get("youtube_open_browser", False))
        ).ask()

        log_info("\n" + "=" * 72)
        log_info("YOUTUBE AUTHENTICATION")
        log_info("=" * 72)
        log_info("1) Open the URL below and approve read-only access.")
        log_info(f"2) Google redirects back to {_redirect_uri(config)} and this prompt continues.")
        log_info(f"3) Waiting up to {int(config.get('youtube_auth_timeout', 300))} seconds.")
        log_info("=" * 72)

        token = run_interactive_flow(auth, notify=log_info, open_browser=bool(open_browser))
        if token.expires_at:
            exp_str = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(float(token.expires_at)))
            log_success(f"YouTube authentication successful. Token expires at: {exp_str}")
        else:
            log_success("YouTube authentication successful.")
    except Exception as e:
        log_error(f"YouTube authentication failed: {e}")


def format_playlist(p: dict) -> str:
    snippet = p.get("snippet") or {}
    details = p.get("contentDetails") or {}
    title = (snippet.get("title") or "(untitled)").strip()
    count = details.get("itemCount")
    count_str = str(count) if count is not None else "?"
    return f"{title} ({count_str} items) [{p.get('id') or '?'}]"


def format_playlist_item(item: dict) -> str:
    snippet = item.get("snippet") or {}
    details = item.get("contentDetails") or {}
    position = snippet.get("position")
    pos_str = f"{int(position) + 1:>4}" if isinstance(position, int) else "   ?"
    title = (snippet.get("title") or "(untitled)").strip()
    video_id = details.get("videoId") or (snippet.get("resourceId") or {}).get("videoId") or "?"
    return f"{pos_str}. {title} [{video_id}]"


def _list_my_playlists(config: dict) -> None:
    try:
        client = _get_client(config)
        with client:
            playlists = client.list_my_playlists()
    except Exception as e:
        log_error(f"Failed to list playlists: {e}")
        return

    if not playlists:
        log_info("No playlists found for this account.")
        return

    log_info(f"Found {len(playlists)} playlist(s):")
    for p in playlists:
        log_info(f"  {format_playlist(p)}")


def _list_playlist_items(config: dict) -> None:
    playlist_id = (questionary.text("Playlist ID (e.g. PL...):").ask() or "").strip()
    if not playlist_id:
        log_warning("No playlist ID provided.")
        return

    try:
        client = _get_client(config)
        with client:
            items = client.list_playlist_items(playlist_id)
    except Exception as e:
        log_error(f"Failed to list playlist items: {e}")
        return

    if not items:
        log_info(f"Playlist {playlist_id} is empty.")
        return

    log_info(f"Playlist {playlist_id}: {len(items)} item(s)")
    for item in items:
        log_info(f"  {format_playlist_item(item)}")


def _forget_token(config: dict) -> None:
    from youtube_api.token_manager import TokenManager

    tm = TokenManager.from_config(config)
    if not questionary.confirm(f"Delete cached token at {tm.cache_path}?", default=False).ask():
        return
    if tm.clear():
        log_success("Cached YouTube token removed.")
    else:
        log_error(f"Could not remove {tm.cache_path}.")


def youtube_menu(config: dict) -> None:
    while True:
        choice = questionary.select(
            "📺 YouTube Menu — What would you like to do?",
            choices=[
                "Authenticate with YouTube",
                "Show token status",
                "List my playlists",
                "List items in a playlist",
                "Show setup help",
                "Forget cached token",
                "Back",
            ],
        ).ask()

        if choice == "Authenticate with YouTube":
            _youtube_authenticate(config)

        elif choice == "Show token status":
            log_info(_youtube_token_status(config))

        elif choice == "List my playlists":
            _list_my_playlists(config)

        elif choice == "List items in a playlist":
            _list_playlist_items(config)

        elif choice == "Show setup help":
            _youtube_setup_help(config)

        elif choice == "Forget cached token":
            _forget_token(config)

        elif choice == "Back" or choice is None:
            break
