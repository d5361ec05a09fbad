"""ESPN HTTP client for the NFL scoreboard and game summary endpoints."""

import http.client
import json
import logging
import re
from typing import Optional
from urllib.error import HTTPError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from nflwatch import mapper
from nflwatch.models import Game, GameReplay, GameStats, GameSummary

logger = logging.getLogger(__name__)

ESPN_BASE_URL = "https://site.api.espn.com"
SCOREBOARD_PATH = "/apis/site/v2/sports/football/nfl/scoreboard"
SUMMARY_PATH = "/apis/site/v2/sports/football/nfl/summary"
DEFAULT_TIMEOUT_SECONDS = 10
MAX_RESPONSE_BYTES = 10 * 1024 * 1024
DEFAULT_USER_AGENT = "nflwatch/0.1"

_SINGLE_DATE = re.compile(r"\d{8}")
_DATE_RANGE = re.compile(r"\d{8}-\d{8}")
_GAME_ID = re.compile(r"\d+")


class NFLWatchError(Exception):
    """Base class for every error the client surfaces."""


class InvalidInput(NFLWatchError, ValueError):
    """Malformed date filter or game id, detected before any request."""


class NetworkError(NFLWatchError):
    """Transport failure: DNS, refused connection, timeout, reset."""


class UnexpectedStatus(NFLWatchError):
    def __init__(self, status: int, url: str = ""):
        super().__init__(f"unexpected status code: {status}")
        self.status = status
        self.url = url


class DecodeError(NFLWatchError):
    """Body is oversized, not UTF-8, not JSON, or not a JSON object."""


def validate_dates(dates: str) -> str:
    """Accept ``YYYYMMDD`` or ``YYYYMMDD-YYYYMMDD``; raise InvalidInput otherwise."""
    if dates.isascii() and (_SINGLE_DATE.fullmatch(dates) or _DATE_RANGE.fullmatch(dates)):
        return dates
    raise InvalidInput("invalid date format: expected YYYYMMDD or YYYYMMDD-YYYYMMDD")


def validate_game_id(game_id: str) -> str:
    # re's \d also matches non-ASCII digits, which ESPN ids never contain
    if game_id.isascii() and _GAME_ID.fullmatch(game_id):
        return game_id
    raise InvalidInput("invalid game ID: expected numeric value")


def decode_body(raw: bytes) -> dict:
    if len(raw) > MAX_RESPONSE_BYTES:
        raise DecodeError(f"failed to parse response: body exceeds {MAX_RESPONSE_BYTES} bytes")
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(f"failed to parse response: {exc}") from exc
    if not isinstance(payload, dict):
        raise DecodeError("failed to parse response: expected a JSON object")
    return payload


class ESPNClient:
    """Single-attempt JSON fetches against the ESPN site API.

    Every failure surfaces immediately as one of InvalidInput, NetworkError,
    UnexpectedStatus or DecodeError; nothing is retried.
    """

    def __init__(self, base_url: str = ESPN_BASE_URL, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def scoreboard_url(self, dates: str = "") -> str:
        """Scoreboard URL; validates ``dates`` when given."""
        url = f"{self.base_url}{SCOREBOARD_PATH}"
        if dates:
            url = f"{url}?{urlencode({'dates': validate_dates(dates)})}"
        return url

    def summary_url(self, game_id: str) -> str:
        """Game summary URL; validates ``game_id``."""
        return f"{self.base_url}{SUMMARY_PATH}?{urlencode({'event': validate_game_id(game_id)})}"

    def _get_json(self, url: str) -> dict:
        """GET ``url`` once and decode the body as a JSON object."""
        request = Request(url, headers={
            "User-Agent": DEFAULT_USER_AGENT,
            "Accept": "application/json",
        })
        logger.debug("GET %s", url)
        try:
            with urlopen(request, timeout=self.timeout) as response:
                status = getattr(response, "status", 200)
                if status != 200:
                    logger.error("ESPN non-200 status=%s url=%s", status, url)
                    raise UnexpectedStatus(status, url)
                raw = response.read(MAX_RESPONSE_BYTES + 1)
        except HTTPError as exc:
            logger.error("ESPN HTTPError status=%s url=%s", exc.code, url)
            raise UnexpectedStatus(exc.code, url) from exc
        except (OSError, http.client.HTTPException) as exc:
            logger.warning("ESPN request failed url=%s error=%s", url, exc)
            raise NetworkError(f"failed to fetch {url}: {exc}") from exc

        return decode_body(raw)

    def fetch_scoreboard(self, dates: str = "") -> list[Game]:
        """Fetch the scoreboard, optionally for a date or date range."""
        return mapper.to_games(self._get_json(self.scoreboard_url(dates)))

    def fetch_summary_payload(self, game_id: str) -> dict:
        """Raw summary JSON, shared by the summary, replay and stats mappers."""
        return self._get_json(self.summary_url(game_id))

    def fetch_summary(self, game_id: str) -> Optional[GameSummary]:
        """Live summary of a game, or None when the payload has no competition."""
        return mapper.to_game_summary(self.fetch_summary_payload(game_id))

    def fetch_replay(self, game_id: str) -> Optional[GameReplay]:
        """Flattened play-by-play of a game from its completed drives."""
        return mapper.to_game_replay(self.fetch_summary_payload(game_id))

    def fetch_stats(self, game_id: str) -> Optional[GameStats]:
        """Team totals and player stat tables for a game."""
        return mapper.to_game_stats(self.fetch_summary_payload(game_id))
