import logging

from idemshort.types import LambdaContext, LambdaEvent, LambdaResponse
from idemshort.core import ShortenerService
from idemshort.dao.redis import ShortURLRedisDAO
from idemshort.dao.exceptions import ShortURLNotFoundError
from idemshort.utils import load_config, get_short_url, app_prefix, guarantee_500_response
from idemshort.utils.responses import response_302, response_400, response_404
from idemshort.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract shortcode from request path
    - Step 2: Resolve the shortcode to its target URL
    - Step 3: Redirect client to target URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
        400: Bad client request
            message: missing shortcode in path parameters
        404: Not found
            message: no short URL exists for the shortcode
        500: Internal server error
            message: server experienced an internal error

    Example:
        >>> event = {'pathParameters': {'shortcode': 'Gh71TCN'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 0- Get application's config
    app_config = load_config('redirect_url')
    logger.debug('Assuming Redis as the backend database for short URLs')
    redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}

    # 1- Extract shortcode from request's path
    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode:
        logger.info(
            'Missing "shortcode" in path. Responding with 400.',
            extra={'event': MISSING_SHORTCODE},
        )
        return response_400(message="missing 'shortcode' in path", error_code=MISSING_SHORTCODE)
    logger.debug('Client requested short URL %s.', get_short_url(shortcode, event))

    # 2- Resolve shortcode (the read path never touches the idempotency cache)
    service = ShortenerService(short_url_dao=ShortURLRedisDAO(**redis_config, prefix=app_prefix()))
    try:
        target_url = service.resolve(shortcode)
    except ShortURLNotFoundError:
        logger.info(
            'Short URL record not found in database. Responding with 404.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND},
        )
        return response_404(message=f"short url {get_short_url(shortcode, event)} doesn't exist", error_code=SHORT_URL_NOT_FOUND)

    # 3- Redirect client to target URL
    logger.info(
        'Redirecting client to target URL. Responding with 302.',
        extra={'shortcode': shortcode, 'event': REDIRECT_SUCCESS},
    )
    return response_302(location=target_url)
