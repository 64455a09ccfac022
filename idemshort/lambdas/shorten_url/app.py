import json
import logging

from idemshort.types import LambdaConfiguration, LambdaContext, LambdaEvent, LambdaResponse
from idemshort.constants import CacheTTL, Defaults, SESSION_COOKIE
from idemshort.core import IdempotentCache, RedisIdentifierAllocator, ShortcodeGenerator, ShortenerService
from idemshort.dao.redis import ShortURLRedisDAO
from idemshort.dao.cache import IdempotencyCacheRedisDAO
from idemshort.exceptions import ExhaustedRetriesError, InvalidURLError
from idemshort.utils import ShortcodeEncoder, app_prefix, get_caller_identity, get_short_url, guarantee_500_response, load_config
from idemshort.utils.responses import response_200, response_400, response_500
from idemshort.lambdas.shorten_url.constants import (
    INVALID_JSON_BODY,
    INVALID_URL,
    SESSION_COOKIE_ATTRIBUTES,
    SHORT_URL_CREATED,
    SHORTCODE_SPACE_EXHAUSTED,
    URL_KEYS,
)


logger = logging.getLogger(__name__)


def build_service(app_config: LambdaConfiguration) -> ShortenerService:
    """Wire the shortener service from this lambda's AppConfig sections.

    The link store is mandatory. The idempotency cache uses the "cache"
    section if present (falling back to the link store's Redis) and is built
    non-strict: an unreachable cache degrades replay, never link creation.
    """
    redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
    cache_config = {f'redis_{k}': v for k, v in app_config.get('cache', app_config['redis']).items()}
    shortcode_config = app_config.get('shortcode', {})
    idempotency_config = app_config.get('idempotency', {})

    short_url_dao = ShortURLRedisDAO(**redis_config, prefix=app_prefix())
    cache_dao = IdempotencyCacheRedisDAO(**cache_config, prefix=app_prefix(), strict=False)

    encoder = ShortcodeEncoder(
        salt=shortcode_config.get('salt', Defaults.SHORTCODE_SALT),
        length=shortcode_config.get('length', Defaults.SHORTCODE_LENGTH),
        mult=shortcode_config.get('mult', Defaults.SHORTCODE_MULT),
    )
    generator = ShortcodeGenerator(
        allocator=RedisIdentifierAllocator(short_url_dao),
        encoder=encoder,
        max_retries=shortcode_config.get('max_retries', Defaults.MAX_RETRIES),
    )
    cache = IdempotentCache(
        cache_dao,
        default_ttl=idempotency_config.get('ttl', CacheTTL.IDEMPOTENCY),
        lock_ttl=idempotency_config.get('lock_ttl', CacheTTL.LOCK),
        lock_wait=idempotency_config.get('lock_wait', CacheTTL.LOCK_WAIT),
        poll_interval=idempotency_config.get('poll_interval', CacheTTL.POLL_INTERVAL),
    )
    return ShortenerService(short_url_dao=short_url_dao, generator=generator, cache=cache)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Load this lambda's configuration from AppConfig
    - Step 2: Extract original URL from request body
    - Step 3: Resolve caller identity (forwarded address, peer address, session)
    - Step 4: Shorten the URL, replaying the result of an identical recent request
    - Step 5: Respond to user with 200 success

    HTTP responses:
        200: Successful URL shortening (or replay of a duplicate request)
            message: success message
            shortcode: generated shortcode
            short_url: public short URL
            original_url: original url (provided in request)
        400: Bad client request
            message: invalid JSON body, missing or invalid URL
        500: Internal server error
            message: server experienced an internal error

    Example:
        >>> event = {'body': '{"url": "https://example.com"}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        200
        >>> json.loads(response['body'])['message']
        'Url shortened successfully'
    """
    # 1- Get application's config
    app_config = load_config('shorten_url')

    # 2- Extract original URL from request body
    try:
        request_body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)

    if not isinstance(request_body, dict):
        logger.info('JSON body is not an object. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400(message='JSON body must be an object', error_code=INVALID_JSON_BODY)
    target_url = next((request_body[key] for key in URL_KEYS if key in request_body), None)

    # 3- Resolve who is calling
    caller_identity, new_session_id = get_caller_identity(event)

    # 4- Shorten (idempotently)
    service = build_service(app_config)
    try:
        result = service.shorten(target_url, caller_identity)
    except InvalidURLError as e:
        logger.info('Invalid URL in request body. Responding with 400.', extra={'event': INVALID_URL})
        return response_400(message=str(e), error_code=INVALID_URL)
    except ExhaustedRetriesError as e:
        logger.info('Shortcode space exhausted. Responding with 500.', extra={'event': SHORTCODE_SPACE_EXHAUSTED})
        return response_500(message='could not allocate a short URL', error_code=e.error_code)

    # 5- Return successful response to user
    short_url = get_short_url(result.shortcode, event)
    headers = {}
    if new_session_id is not None:
        headers['Set-Cookie'] = f'{SESSION_COOKIE}={new_session_id}; {SESSION_COOKIE_ATTRIBUTES}'

    logger.info(
        'Shortened URL. Responding with 200.',
        extra={'shortcode': result.shortcode, 'event': SHORT_URL_CREATED},
    )
    return response_200(
        {
            'message': result.message,
            'shortcode': result.shortcode,
            'short_url': short_url,
            'original_url': result.target_url,
        },
        headers=headers,
    )
