"""Runtime utilities

Functions:
    running_locally() -> bool:
        True if lambda is running in local SAM, False otherwise.
    get_caller_identity(event) -> tuple[str, str | None]:
        Resolve who is calling, for idempotency fingerprinting.

Example:
    >>> event = {'headers': {'X-Forwarded-For': '203.0.113.7, 10.0.0.1'}}
    >>> get_caller_identity(event)
    ('203.0.113.7', None)
"""

import os
import uuid
from http.cookies import SimpleCookie, CookieError

from idemshort.types import LambdaEvent
from idemshort.constants import ENV, SESSION_COOKIE


def running_locally() -> bool:
    """Return True if running in SAM local invoke/api, False otherwise."""
    env = os.getenv(ENV.App.APP_ENV, '').lower()
    return env == 'local' or os.getenv(ENV.App.AWS_SAM_LOCAL) == 'true'


def get_header(event: LambdaEvent, name: str) -> str | None:
    """Case-insensitive header lookup (API Gateway preserves client casing)."""
    headers = event.get('headers') or {}
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _session_id(event: LambdaEvent) -> str | None:
    # HTTP API (payload v2) splits cookies into a list, REST API keeps the raw header
    raw_cookies = event.get('cookies') or []
    header = get_header(event, 'Cookie')
    if header:
        raw_cookies = [*raw_cookies, header]

    for raw in raw_cookies:
        cookie = SimpleCookie()
        try:
            cookie.load(raw)
        except CookieError:
            continue
        if SESSION_COOKIE in cookie and cookie[SESSION_COOKIE].value:
            return cookie[SESSION_COOKIE].value
    return None


def get_caller_identity(event: LambdaEvent) -> tuple[str, str | None]:
    """Resolve the caller identity used to deduplicate shorten requests.

    Precedence (each tried only if the previous one is absent):
        1. First entry of the X-Forwarded-For header, whitespace trimmed.
        2. Peer address observed by API Gateway (REST or HTTP API payloads).
        3. Session cookie; a new session id is created if none exists.

    NOTE: X-Forwarded-For is client controlled. A caller can spoof another
          caller's deduplication bucket or escape its own by varying it.

    Returns:
        tuple[str, str | None]:
            (caller identity, newly created session id or None).
            The handler must set the session cookie when a new id is returned.
    """
    forwarded_for = get_header(event, 'X-Forwarded-For')
    if forwarded_for:
        first = forwarded_for.split(',')[0].strip()
        if first:
            return first, None

    request_context = event.get('requestContext') or {}
    source_ip = (request_context.get('identity') or {}).get('sourceIp') or (request_context.get('http') or {}).get('sourceIp')
    if source_ip:
        return source_ip, None

    session_id = _session_id(event)
    if session_id:
        return f'session:{session_id}', None

    session_id = uuid.uuid4().hex
    return f'session:{session_id}', session_id
