# utils/api.py
from __future__ import annotations

import json
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urljoin, urlparse

import requests
from requests_oauthlib import OAuth1

from models import OAuthToken
from utils.config import DEFAULT_API_BASE, DEFAULT_TIMEOUT
from utils.errors import ApiError, HttpError, PayloadError

# --- Tunables ---------------------------------------------------------------
USER_AGENT = "SchoologyExport/1.0"
OAUTH_REALM = "Schoology API"
MAX_REDIRECTS = 5
_REDIRECT_CODES = {301, 302, 303, 307, 308}

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResponse:
    status_code: int
    body: bytes
    content_type: str
    url: str

    def json(self) -> Any:
        try:
            return json.loads(self.body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise PayloadError(f"response is not valid JSON: {e}", url=self.url) from None


class SchoologyAPI:
    """
    Signed Schoology REST client.

    Every signed request carries an OAuth1 HMAC-SHA1 Authorization header whose
    signature key is "client_secret&token_secret". Without a token (handshake
    bootstrap) the token part is empty.
    """

    def __init__(
        self,
        client_key: str,
        client_secret: str,
        token: Optional[OAuthToken] = None,
        *,
        api_base: str = DEFAULT_API_BASE,
        timeout: tuple[float, float] = DEFAULT_TIMEOUT,
        retries: int = 0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not client_key or not client_secret:
            raise ValueError("SchoologyAPI client_key and client_secret are required")

        self.client_key = client_key
        self.client_secret = client_secret
        self.token = token
        self.api_root = api_base.rstrip("/") + "/"   # canonical API root (trailing slash)
        self.timeout = timeout
        self.retries = max(0, int(retries))

        self.session = session or requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })

    # Accept endpoints relative to the API root or absolute URLs (links.self, links.next, downloads)
    def _full_url(self, endpoint: str) -> str:
        ep = (endpoint or "").strip()
        if ep.startswith("http://") or ep.startswith("https://"):
            return ep
        return urljoin(self.api_root, ep.lstrip("/"))

    def auth_for(self, token: Optional[OAuthToken] = None) -> OAuth1:
        """OAuth1 signer for the client credentials plus the given (or current) token."""
        tok = token if token is not None else self.token
        return OAuth1(
            self.client_key,
            client_secret=self.client_secret,
            resource_owner_key=tok.key if tok else None,
            resource_owner_secret=tok.secret if tok else None,
            realm=OAUTH_REALM,
        )

    def with_token(self, token: OAuthToken) -> "SchoologyAPI":
        """Return a client sharing this session but signing with `token`."""
        return SchoologyAPI(
            self.client_key,
            self.client_secret,
            token,
            api_base=self.api_root,
            timeout=self.timeout,
            retries=self.retries,
            session=self.session,
        )

    def _same_origin(self, url: str) -> bool:
        hop, root = urlparse(url), urlparse(self.api_root)
        return (hop.scheme, hop.netloc.lower()) == (root.scheme, root.netloc.lower())

    def _send_once(self, method: str, url: str, params, auth) -> requests.Response:
        """
        One logical request. Redirects are followed by hand so every hop on the
        API host is signed for its own URL; hops to other hosts (file CDNs,
        pre-signed object stores) go out unsigned.
        """
        hop_auth = auth
        for _ in range(MAX_REDIRECTS + 1):
            log.debug("Fetching %s", url, extra={"method": method, "signed": hop_auth is not None})
            try:
                resp = self.session.request(
                    method, url, params=params, auth=hop_auth,
                    timeout=self.timeout, allow_redirects=False,
                )
            except requests.RequestException as e:
                raise HttpError(f"{method} {url} failed: {e}") from e

            location = resp.headers.get("Location")
            if resp.status_code not in _REDIRECT_CODES or not location:
                return resp

            url = urljoin(resp.url or url, location)
            params = None  # the Location already carries the query
            if resp.status_code == 303:
                method = "GET"
            hop_auth = auth if self._same_origin(url) else None
        raise HttpError(f"too many redirects (>{MAX_REDIRECTS}) for {url}")

    # Optional retry/backoff for 429/5xx + transport errors; off unless retries > 0
    def _request(self, method: str, url: str, params=None, auth=None) -> requests.Response:
        max_attempts = 1 + self.retries
        delay = 1.0
        for attempt in range(1, max_attempts + 1):
            try:
                resp = self._send_once(method, url, params, auth)
            except HttpError:
                if attempt < max_attempts:
                    wait_time = delay + random.uniform(0, 0.25 * delay)
                    log.warning(
                        "Connection/timeout error. Retrying after %.2fs (attempt %s/%s)",
                        wait_time, attempt, max_attempts,
                        extra={"url": url},
                    )
                    time.sleep(wait_time)
                    delay *= 2
                    continue
                raise

            status = resp.status_code
            transient = status == 429 or status >= 500
            if transient and attempt < max_attempts:
                if status == 429:
                    try:
                        wait_time = float(resp.headers.get("Retry-After", delay))
                    except ValueError:
                        wait_time = delay
                    log.warning(
                        "Rate limited: 429 received. Retrying after %.2fs (attempt %s/%s)",
                        wait_time, attempt, max_attempts,
                        extra={"url": url},
                    )
                else:
                    wait_time = delay + random.uniform(0, 0.25 * delay)
                    log.warning(
                        "Server error %s. Retrying after %.2fs (attempt %s/%s)",
                        status, wait_time, attempt, max_attempts,
                        extra={"url": url},
                    )
                time.sleep(wait_time)
                delay *= 2
                continue

            if not 200 <= status < 300:
                raise ApiError(status, resp.url or url, resp.text[:500])
            return resp

        raise HttpError(f"{method} {url} failed after {max_attempts} attempts")  # pragma: no cover

    def fetch(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        *,
        signed: bool = True,
        token: Optional[OAuthToken] = None,
    ) -> ApiResponse:
        """
        Issue one request and return status + raw body.
        Raises HttpError on transport failure and ApiError on non-2xx.
        """
        url = self._full_url(endpoint)
        auth = self.auth_for(token) if signed else None
        resp = self._request(method.upper(), url, params=params, auth=auth)
        return ApiResponse(
            status_code=resp.status_code,
            body=resp.content,
            content_type=resp.headers.get("Content-Type", ""),
            url=resp.url or url,
        )

    def get_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Signed GET returning parsed JSON."""
        return self.fetch("GET", endpoint, params).json()

    def get_bytes(self, endpoint: str, *, signed: bool = True) -> ApiResponse:
        """GET for binary payloads (pictures, attachments)."""
        return self.fetch("GET", endpoint, signed=signed)


__all__ = [
    "SchoologyAPI",
    "ApiResponse",
    "USER_AGENT",
    "OAUTH_REALM",
    "MAX_REDIRECTS",
]
