import logging

from data.config import config
from youtube_api import (
    CookieStore,
    ProxyManager,
    SessionManager,
    Transport,
    YouTubeClient,
    YtDlpPlatform,
)


def setup_logging(level: int = logging.INFO):
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)-5.5s]  %(message)s",
        handlers=[
            logging.StreamHandler()
        ]
    )
    logging.getLogger('yt_dlp').setLevel(logging.WARNING)
    logging.getLogger('aiohttp').setLevel(logging.WARNING)


def create_client() -> YouTubeClient:
    """Create a YouTubeClient configured from the environment."""
    auth = config["auth"]
    network = config["network"]
    youtube = config["youtube"]

    store = CookieStore(auth["cookie_path"]) if auth["cookie_path"] else None
    proxy_manager = None
    if network["proxy_file"]:
        proxy_manager = ProxyManager.initialize(network["proxy_file"], network["include_host"])

    platform = YtDlpPlatform(hl=youtube["hl"], gl=youtube["gl"], cache_dir=youtube["cache_dir"])
    session_manager = SessionManager(
        platform,
        credential_store=store,
        token_url=auth["oauth_token_url"],
        default_client={
            "client_id": auth["oauth_client_id"],
            "client_secret": auth["oauth_client_secret"],
        },
    )
    return YouTubeClient(
        session_manager,
        duration_limit=youtube["duration_limit"],
        transport=Transport(timeout=network["request_timeout"]),
        proxy_manager=proxy_manager,
    )


async def shutdown():
    """Release shared connections and worker threads."""
    await Transport.close_connector()
    YtDlpPlatform.shutdown_executor()
