"""Helper utilities for AWS lambda functions.

Functions:
    base_url() -> str
        Extract correct public base URL from API Gateway event
    get_short_url() -> str
        Get string representation of short URL for a given shortcode
    validate_url() -> str
        Reject empty or non-HTTP(S) URLs
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: Turn unexpected handler exceptions into a JSON 500 response

Example:
    Typical usage inside a Lambda handler:

        >>> from idemshort.utils.helpers import base_url
        >>> event = {
        ...     "requestContext": {
        ...         "domainName": "abc123.execute-api.us-east-1.amazonaws.com",
        ...         "stage": "Prod"
        ...     }
        ... }
        >>> base_url(event)
        'https://abc123.execute-api.us-east-1.amazonaws.com/Prod'

        >>> base_url({})
        'http://localhost:3000'
"""

import os
import functools
import logging
from urllib.parse import urlsplit
from collections.abc import Callable

from idemshort.types import LambdaEvent
from idemshort.exceptions import InvalidURLError, MissingEnvironmentVariableError
from idemshort.utils.responses import response_500


logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = frozenset({'http', 'https'})


def base_url(event: LambdaEvent) -> str:
    """Extract public base URL from API Gateway event

    If a custom domain is configured, the stage name is omitted.
    If using the default AWS execute-api domain, the stage name is included.
    """
    request_context = event.get('requestContext', {})
    domain = request_context.get('domainName', '')
    stage = request_context.get('stage', '')

    if domain and 'execute-api' not in domain:
        # If the domain is a custom domain (no execute-api), skip stage
        return f'https://{domain}'
    elif domain:
        # Otherwise include the stage (for AWS default domains)
        return f'https://{domain}/{stage}'
    else:
        # Fallback: local invocation (SAM CLI, tests, etc.)
        return 'http://localhost:3000'


def get_short_url(shortcode: str, event: LambdaEvent) -> str:
    return f'{base_url(event).rstrip("/")}/{shortcode}'


def validate_url(url: str | None) -> str:
    """Validate a URL submitted for shortening.

    The URL is returned unchanged: validation never rewrites or canonicalizes.

    Raises:
        InvalidURLError:
            If the URL is empty, not HTTP(S), or has no host.

    Example:
        >>> validate_url('https://example.com/a?b=1#c')
        'https://example.com/a?b=1#c'
        >>> validate_url('ftp://example.com')
        InvalidURLError: Invalid URL format. Please enter a valid URL starting with http:// or https://
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidURLError('URL cannot be empty. Please enter a valid URL.')

    try:
        components = urlsplit(url)
        hostname = components.hostname
    except ValueError as e:
        raise InvalidURLError('Invalid URL format. Please enter a valid URL starting with http:// or https://') from e

    if components.scheme.lower() not in ALLOWED_SCHEMES or not hostname or any(c.isspace() for c in url):
        raise InvalidURLError('Invalid URL format. Please enter a valid URL starting with http:// or https://')
    return url


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator: respond with 500 instead of crashing the Lambda runtime.

    Any exception escaping the handler is logged with its traceback and turned
    into an API Gateway compatible 500 response carrying a stable error code.
    """

    @functools.wraps(handler)
    def wrapper(event, context, *args, **kwargs):
        try:
            return handler(event, context, *args, **kwargs)
        except Exception as e:
            error_code = getattr(e, 'error_code', None)
            logger.exception('Unhandled exception in Lambda handler. Responding with 500.', extra={'errorCode': error_code})
            return response_500(error_code=error_code)

    return wrapper
