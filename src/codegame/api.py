"""REST endpoints of a CodeGame server.

These calls handle everything that happens outside the websocket: server
discovery, game creation, player registration, and name lookups.
"""

from __future__ import annotations

import logging
import socket as pysocket
import ssl
import urllib.parse
from typing import Any, Dict, Optional, Tuple

import requests


logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A REST call failed or returned an unexpected response."""


def trim_url(url: str) -> str:
    """Remove the protocol component and any trailing slashes."""

    for prefix in ("http://", "https://", "ws://", "wss://"):
        if url.startswith(prefix):
            url = url[len(prefix):]
            break
    return url.rstrip("/")


def base_url(protocol: str, tls: bool, trimmed_url: str, *args: Any) -> str:
    """Prepend ``protocol://`` or ``protocols://`` depending on *tls*.

    Any *args* are interpolated into *trimmed_url* with ``%``, after being
    quoted for use in a URL path.
    """

    if args:
        args = tuple(urllib.parse.quote(str(arg), safe="") for arg in args)
        trimmed_url = trimmed_url % args
    if tls:
        return f"{protocol}s://{trimmed_url}"
    return f"{protocol}://{trimmed_url}"


def is_tls(trimmed_url: str, timeout: float = 5) -> bool:
    """Return True if the host behind *trimmed_url* presents a valid TLS
    certificate for its hostname."""

    parsed = urllib.parse.urlsplit("https://" + trimmed_url)
    hostname = parsed.hostname
    if not hostname:
        return False

    try:
        port = parsed.port or 443
    except ValueError:
        return False

    context = ssl.create_default_context()
    try:
        with pysocket.create_connection((hostname, port), timeout=timeout) as raw:
            with context.wrap_socket(raw, server_hostname=hostname):
                return True
    except (OSError, ssl.SSLError):
        return False


class Api:
    """REST client for a single CodeGame server."""

    timeout = 10

    def __init__(self, url: str, tls: Optional[bool] = None):
        self.url = trim_url(url)
        if tls is None:
            tls = is_tls(self.url)
        self.tls = tls

    def __repr__(self) -> str:
        return f"Api({self.url!r}, tls={self.tls})"

    def http_url(self, path: str, *args: Any) -> str:
        return base_url("http", self.tls, self.url + path, *args)

    def websocket_url(self, path: str, *args: Any) -> str:
        return base_url("ws", self.tls, self.url + path, *args)

    # --- internal ---
    def _call(self, method: str, url: str, expected: int, description: str, body: Any = None) -> Any:
        logger.debug("%s %s", method, url)
        try:
            response = requests.request(method, url, json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ApiError(f"failed to {description}: {exc}") from exc

        if response.status_code != expected:
            text = response.text
            if text:
                raise ApiError(f"failed to {description}: {text}")
            raise ApiError(
                f"invalid response code: expected {expected}, got {response.status_code}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"failed to decode response to {description}: {exc}") from exc

    # --- endpoints ---
    def fetch_info(self) -> Dict[str, Any]:
        info = self._call("GET", self.http_url("/api/info"), 200, "fetch game info")
        if not isinstance(info, dict):
            raise ApiError("invalid game info")
        if not info.get("name"):
            raise ApiError("empty `name` field")
        if not info.get("cg_version"):
            raise ApiError("empty `cg_version` field")
        return info

    def create_game(self, public: bool, protected: bool = False, config: Any = None) -> Tuple[str, str]:
        body: Dict[str, Any] = {"public": public, "protected": protected}
        if config is not None:
            body["config"] = config

        result = self._call("POST", self.http_url("/api/games"), 201, "create game", body=body)
        return result.get("game_id", ""), result.get("join_secret", "")

    def create_player(self, game_id: str, username: str, join_secret: Optional[str] = None) -> Tuple[str, str]:
        body = {"username": username}
        if join_secret:
            body["join_secret"] = join_secret

        url = self.http_url("/api/games/%s/players", game_id)
        result = self._call("POST", url, 201, "create player", body=body)
        return result.get("player_id", ""), result.get("player_secret", "")

    def fetch_username(self, game_id: str, player_id: str) -> str:
        url = self.http_url("/api/games/%s/players/%s", game_id, player_id)
        result = self._call("GET", url, 200, f"fetch username of {player_id}")
        return result.get("username", "")

    def fetch_players(self, game_id: str) -> Dict[str, str]:
        url = self.http_url("/api/games/%s/players", game_id)
        result = self._call("GET", url, 200, "fetch players")
        if not isinstance(result, dict):
            raise ApiError("invalid player list")
        return result

    def fetch_game_config(self, game_id: str) -> Any:
        url = self.http_url("/api/games/%s", game_id)
        result = self._call("GET", url, 200, "fetch game config")
        return result.get("config")
