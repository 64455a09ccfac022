"""Request fingerprinting for idempotent short link creation

A fingerprint identifies "the same shorten request from the same caller".
It is used purely as an idempotency cache key and is unrelated to shortcodes.

Example:
    >>> from idemshort.utils.fingerprint import fingerprint
    >>> key = fingerprint('https://example.com/a', '203.0.113.7')
    >>> len(key)
    43
"""

import base64
import hashlib


SEPARATOR = '|'


def _frame(field: str) -> str:
    # Length prefix keeps ('ab', 'c') and ('a', 'bc') apart whatever the fields contain
    return f'{len(field)}:{field}'


def fingerprint(url: str, caller_identity: str) -> str:
    """Derive a stable, collision-resistant key from (url, caller identity).

    The URL is used verbatim: no canonicalization is applied, so trailing
    slashes or query parameter order produce distinct fingerprints.

    Args:
        url (str): Target URL as submitted.
        caller_identity (str): Resolved caller identity (see runtime.get_caller_identity()).

    Returns:
        str: 43-character URL-safe Base64 (unpadded) SHA-256 digest.
    """
    if not isinstance(url, str) or not isinstance(caller_identity, str):
        raise TypeError('URL and caller identity must be strings.')

    normalized = SEPARATOR.join((_frame(url), _frame(caller_identity)))
    digest = hashlib.sha256(normalized.encode('utf-8')).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b'=').decode('ascii')
