import os

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv())


config = {
    "youtube": {
        "duration_limit": int(os.getenv("DURATION_LIMIT", "10800")),
        "hl": os.getenv("YOUTUBE_HL", "en"),
        "gl": os.getenv("YOUTUBE_GL", "US"),
        "cache_dir": os.getenv("YTDLP_CACHE_DIR", ""),
    },
    "auth": {
        "cookie_path": os.getenv("COOKIE_PATH", ""),
        "oauth_token_url": os.getenv("OAUTH_TOKEN_URL", "https://oauth2.googleapis.com/token"),
        "oauth_client_id": os.getenv("OAUTH_CLIENT_ID", ""),
        "oauth_client_secret": os.getenv("OAUTH_CLIENT_SECRET", ""),
    },
    "network": {
        "proxy_file": os.getenv("PROXY_FILE", ""),
        "include_host": os.getenv("INCLUDE_HOST", "true").lower() == "true",
        "request_timeout": int(os.getenv("REQUEST_TIMEOUT", "30")),
    },
}
