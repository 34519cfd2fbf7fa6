"""Session lifecycle for YouTube clients.

A single warmed-up client is shared by the whole process and rebuilt every
15 minutes so that player data does not go stale. Each request gets its own
:class:`ClientSession` cloned from the shared one, bound to the request's
transport and, when credentials are stored, to a refreshed OAuth token.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

from .cookies import Cookie, CredentialStore
from .exceptions import YouTubeDecipherError, YouTubeError, YouTubeTokenExpiredError
from .transport import Transport

if TYPE_CHECKING:
    from .platform import PlatformClient, PlatformFactory

logger = logging.getLogger(__name__)

PLAYER_REFRESH_PERIOD = 15 * 60  # seconds
OAUTH_COOKIE = "youtube_oauth"
DEFAULT_TOKEN_URL = "https://oauth2.googleapis.com/token"

# Tokens expiring within this window are refreshed before use
TOKEN_REFRESH_MARGIN = timedelta(seconds=60)

REQUIRED_OAUTH_VALUES = ("access_token", "refresh_token")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_expiry(value: Any) -> Optional[datetime]:
    """Parse a stored expiry (ISO-8601 string or epoch milliseconds).

    Returns None for missing or unparseable values. Naive timestamps are
    taken as UTC. Precision is cut to milliseconds, the precision expiries
    are stored with.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        try:
            if text.isdigit():
                parsed = datetime.fromtimestamp(int(text) / 1000, tz=timezone.utc)
            else:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except (ValueError, OverflowError, OSError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return _truncate_ms(parsed.astimezone(timezone.utc))


def format_expiry(value: datetime) -> str:
    """Format an expiry as ISO-8601 UTC with milliseconds, e.g. 2026-10-18T12:00:00.000Z"""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def _truncate_ms(value: datetime) -> datetime:
    return value.replace(microsecond=value.microsecond // 1000 * 1000)


def transform_session_data(cookie: Optional[Cookie]) -> Optional[dict[str, str]]:
    """Turn a stored OAuth cookie into session credentials.

    The bundle must carry string ``access_token`` and ``refresh_token`` values
    and an expiry, either as ``expires`` (renamed to ``expiry_date``) or
    ``expiry_date``, that parses as a timestamp. Anything else yields None and
    the session stays unauthenticated.
    """
    if not cookie:
        return None

    values = cookie.values()
    for key in REQUIRED_OAUTH_VALUES:
        if not isinstance(values.get(key), str) or not values[key]:
            return None

    if values.get("expires"):
        values["expiry_date"] = values.pop("expires")
    elif not values.get("expiry_date"):
        return None

    if parse_expiry(values["expiry_date"]) is None:
        return None

    return values


def translate_session_error(exc: BaseException) -> Optional[YouTubeError]:
    """Map a client construction failure to a typed error.

    Only two failures are understood: a player whose decipher algorithm
    could not be extracted, and a rejected OAuth refresh. Returns None for
    everything else so the caller re-raises it.
    """
    message = str(exc)
    if message.endswith("decipher algorithm"):
        return YouTubeDecipherError(message)
    if "refresh access token" in message:
        return YouTubeTokenExpiredError(message)
    return None


class OAuthError(Exception):
    """OAuth token handling failed."""


@dataclass
class OAuthTokens:
    """OAuth2 tokens of a signed-in session."""

    access_token: str
    refresh_token: str
    expiry_date: datetime
    token_type: str = "Bearer"
    scope: Optional[str] = None

    def to_dict(self) -> dict[str, str]:
        data = {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
        }
        if self.scope:
            data["scope"] = self.scope
        return data


class OAuth:
    """OAuth2 state of one client session.

    Args:
        transport: Transport used for token requests
        token_url: Token endpoint
        default_client: Fallback client_id/client_secret when credentials
            do not carry their own
        clock: Returns the current time as an aware datetime
    """

    def __init__(
        self,
        transport: Transport,
        token_url: str = DEFAULT_TOKEN_URL,
        default_client: Optional[Mapping[str, str]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.transport = transport
        self.token_url = token_url
        self.default_client = dict(default_client or {})
        self.clock = clock
        self.client_id: Optional[dict[str, str]] = None
        self.oauth2_tokens: Optional[OAuthTokens] = None

    async def init(self, credentials: Mapping[str, str]) -> None:
        """Load tokens and client credentials from a transformed bundle.

        Raises:
            OAuthError: When the credentials lack tokens or a valid expiry
        """
        expiry = parse_expiry(credentials.get("expiry_date"))
        if not credentials.get("access_token") or not credentials.get("refresh_token") or expiry is None:
            raise OAuthError("Invalid OAuth credentials")

        self.oauth2_tokens = OAuthTokens(
            access_token=credentials["access_token"],
            refresh_token=credentials["refresh_token"],
            expiry_date=expiry,
            token_type=credentials.get("token_type") or "Bearer",
            scope=credentials.get("scope"),
        )

        client_id = credentials.get("client_id") or self.default_client.get("client_id")
        client_secret = credentials.get("client_secret") or self.default_client.get("client_secret")
        if client_id and client_secret:
            self.client_id = {"client_id": client_id, "client_secret": client_secret}

    def should_refresh_token(self) -> bool:
        """True when the access token is expired or about to expire."""
        if self.oauth2_tokens is None:
            return False
        return self.clock() + TOKEN_REFRESH_MARGIN >= self.oauth2_tokens.expiry_date

    async def refresh_access_token(self) -> None:
        """Exchange the refresh token for a new access token.

        Raises:
            OAuthError: "Failed to refresh access token: ..." on any rejection
        """
        if self.oauth2_tokens is None:
            raise OAuthError("Failed to refresh access token: not signed in")
        if self.client_id is None:
            raise OAuthError("Failed to refresh access token: missing client credentials")

        response = await self.transport.post_form(
            self.token_url,
            {
                **self.client_id,
                "refresh_token": self.oauth2_tokens.refresh_token,
                "grant_type": "refresh_token",
            },
        )
        if not response.ok:
            raise OAuthError(f"Failed to refresh access token: HTTP {response.status}")

        try:
            data = response.json()
        except ValueError as e:
            raise OAuthError(f"Failed to refresh access token: {e}") from e

        if not isinstance(data, dict) or data.get("error") or not data.get("access_token"):
            error = data.get("error") if isinstance(data, dict) else "malformed response"
            raise OAuthError(f"Failed to refresh access token: {error}")

        expires_in = int(data.get("expires_in") or 0)
        self.oauth2_tokens = OAuthTokens(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token") or self.oauth2_tokens.refresh_token,
            expiry_date=_truncate_ms(self.clock() + timedelta(seconds=expires_in)),
            token_type=data.get("token_type") or self.oauth2_tokens.token_type,
            scope=data.get("scope") or self.oauth2_tokens.scope,
        )
        logger.info(f"Refreshed YouTube access token, expires in {expires_in}s")

    @property
    def authorization(self) -> Optional[str]:
        """Authorization header value, or None when not signed in."""
        if self.oauth2_tokens is None:
            return None
        return f"{self.oauth2_tokens.token_type} {self.oauth2_tokens.access_token}"


class ClientSession:
    """Per-request client state.

    Wraps the shared client's context (locale, API key and version, account
    index, player data, cache) together with the transport and OAuth state of
    one request. Instances are never shared between requests.
    """

    def __init__(
        self,
        context: Any,
        key: Optional[str],
        api_version: str,
        account_index: int,
        player: Any,
        transport: Transport,
        cache: Any = None,
        oauth: Optional[OAuth] = None,
    ):
        self.context = context
        self.key = key
        self.api_version = api_version
        self.account_index = account_index
        self.player = player
        self.transport = transport
        self.cache = cache
        self.oauth = oauth or OAuth(transport)
        self.logged_in = False

    def clone(
        self,
        transport: Optional[Transport] = None,
        token_url: str = DEFAULT_TOKEN_URL,
        default_client: Optional[Mapping[str, str]] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> "ClientSession":
        """Create a fresh, signed-out session sharing this session's context."""
        transport = transport or self.transport
        return ClientSession(
            context=self.context,
            key=self.key,
            api_version=self.api_version,
            account_index=self.account_index,
            player=self.player,
            transport=transport,
            cache=self.cache,
            oauth=OAuth(transport, token_url, default_client, clock),
        )


class SharedClientCache:
    """Process-wide holder of the shared client and its refresh timestamp.

    Args:
        refresh_period: Seconds after which the client is rebuilt
        clock: Monotonic clock returning seconds
    """

    _instance: Optional["SharedClientCache"] = None
    _instance_lock = threading.Lock()

    def __init__(
        self,
        refresh_period: float = PLAYER_REFRESH_PERIOD,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.refresh_period = refresh_period
        self.clock = clock
        self.client: Optional["PlatformClient"] = None
        self.last_refreshed_at: Optional[float] = None
        self.rebuild_count = 0

    def needs_rebuild(self) -> bool:
        if self.client is None or self.last_refreshed_at is None:
            return True
        return self.clock() - self.last_refreshed_at >= self.refresh_period

    def store(self, client: "PlatformClient") -> None:
        self.client = client
        self.last_refreshed_at = self.clock()
        self.rebuild_count += 1

    @classmethod
    def get_instance(cls) -> "SharedClientCache":
        """Get the process-wide cache, creating it on first use."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the process-wide cache (mainly for testing)."""
        with cls._instance_lock:
            cls._instance = None


class SessionManager:
    """Hands out per-request clients built on the shared client.

    Args:
        platform: Factory creating platform clients
        credential_store: Store holding the ``youtube_oauth`` bundle, if any
        cache: Shared client cache (process-wide instance by default)
        token_url: OAuth token endpoint
        default_client: Fallback OAuth client_id/client_secret
        clock: Wall clock for token expiry checks

    Example:
        >>> manager = SessionManager(YtDlpPlatform(), CookieStore("cookies.json"))
        >>> client = await manager.acquire_client(Transport(proxy=None))
        >>> client.session.logged_in
        True
    """

    def __init__(
        self,
        platform: "PlatformFactory",
        credential_store: Optional[CredentialStore] = None,
        cache: Optional[SharedClientCache] = None,
        token_url: str = DEFAULT_TOKEN_URL,
        default_client: Optional[Mapping[str, str]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.platform = platform
        self.credential_store = credential_store
        self.cache = cache or SharedClientCache.get_instance()
        self.token_url = token_url
        self.default_client = dict(default_client or {})
        self.clock = clock
        self._rebuild_lock = asyncio.Lock()

    async def _get_shared_client(self, transport: Optional[Transport]) -> "PlatformClient":
        async with self._rebuild_lock:
            if self.cache.needs_rebuild():
                logger.info("Creating shared YouTube client")
                self.cache.store(await self.platform.create(transport))
            return self.cache.client

    async def acquire_client(self, transport: Optional[Transport] = None) -> "PlatformClient":
        """Build a client for one request.

        Raises:
            OAuthError: When a stale access token cannot be refreshed
            Exception: Whatever the platform raises while creating the shared client
        """
        shared = await self._get_shared_client(transport)
        session = shared.session.clone(
            transport,
            token_url=self.token_url,
            default_client=self.default_client,
            clock=self.clock,
        )

        cookie = self.credential_store.get(OAUTH_COOKIE) if self.credential_store else None
        oauth_data = transform_session_data(cookie)

        if not session.logged_in and oauth_data:
            await session.oauth.init(oauth_data)
            session.logged_in = True

        if session.logged_in:
            if session.oauth.should_refresh_token():
                await session.oauth.refresh_access_token()
            self._save_expiry(cookie, session)

        return self.platform.from_session(session)

    def _save_expiry(self, cookie: Optional[Cookie], session: ClientSession) -> None:
        """Write refreshed tokens back to the store when the expiry changed."""
        tokens = session.oauth.oauth2_tokens
        if cookie is None or tokens is None:
            return

        old_expiry = parse_expiry(cookie.values().get("expiry_date"))
        if old_expiry == tokens.expiry_date:
            return

        logger.debug(f"OAuth expiry changed ({old_expiry} -> {tokens.expiry_date}), saving")
        values = {
            **(session.oauth.client_id or {}),
            **tokens.to_dict(),
            "expiry_date": format_expiry(tokens.expiry_date),
        }
        # transform_session_data prefers "expires", so it must not go stale
        if "expires" in cookie.values():
            values["expires"] = values["expiry_date"]
        self.credential_store.update(cookie, values)
