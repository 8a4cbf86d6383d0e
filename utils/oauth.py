# utils/oauth.py
from __future__ import annotations

import logging
from typing import Callable, Dict
from urllib.parse import parse_qsl, urlencode

from models import Credentials, OAuthToken
from utils.api import SchoologyAPI
from utils.errors import ApiError, AuthError, HttpError

log = logging.getLogger(__name__)

Prompt = Callable[[str], str]


def parse_token_body(body: str, what: str) -> OAuthToken:
    """
    Parse an urlencoded OAuth token answer:
      oauth_token=abc&oauth_token_secret=def[&...]
    """
    fields: Dict[str, str] = dict(parse_qsl(body.strip(), keep_blank_values=True))
    key = fields.get("oauth_token")
    secret = fields.get("oauth_token_secret")
    if not key or not secret:
        raise AuthError(f"malformed {what} answer: expected oauth_token and oauth_token_secret")
    return OAuthToken(key, secret)


def authorize_url(domain: str, request_token: OAuthToken, callback: str = "example.com") -> str:
    query = urlencode({"oauth_callback": callback, "oauth_token": request_token.key})
    return f"https://{domain}/oauth/authorize?{query}"


def _token_call(api: SchoologyAPI, method: str, endpoint: str, what: str, token=None) -> OAuthToken:
    try:
        resp = api.fetch(method, endpoint, token=token)
    except ApiError as e:
        raise AuthError(f"{what} failed with status {e.status_code}") from e
    except HttpError as e:
        raise AuthError(f"{what} failed: {e}") from e
    if resp.status_code != 200:
        raise AuthError(f"{what} failed with status {resp.status_code}")
    return parse_token_body(resp.body.decode("utf-8", errors="replace"), what)


def authorize(
    api: SchoologyAPI,
    credentials: Credentials,
    *,
    prompt: Prompt = input,
    callback: str = "example.com",
) -> OAuthToken:
    """
    Three-legged OAuth1:
      1) signed POST oauth/request_token with the client credentials
      2) operator opens the authorize URL and confirms on stdin
      3) signed GET oauth/access_token with the authorized request token
    Raises AuthError on any non-200, malformed body or closed stdin.
    """
    request_token = _token_call(api, "POST", "oauth/request_token", "request token", token=None)

    url = authorize_url(credentials.domain, request_token, callback)
    log.info("authorize this application at %s", url)
    try:
        prompt(f"{url}\nopen the above url and press ENTER once authorized ")
    except EOFError:
        raise AuthError("stdin closed before the authorization was confirmed") from None

    access = _token_call(api, "GET", "oauth/access_token", "access token", token=request_token)
    log.debug("obtained access token", extra={"token_key": access.key})
    return access
