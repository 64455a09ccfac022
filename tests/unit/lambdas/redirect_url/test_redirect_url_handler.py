"""Unit tests for the redirect_url AWS Lambda handler.

Test coverage includes:
    1. Known shortcode redirects with 302 and the stored URL unchanged
       (resolved through ShortenerService.resolve)
    2. Missing shortcode in path returns 400
    3. Unknown shortcode returns 404
    4. Store and configuration failures return 500
"""

import json
from typing import cast
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch

from idemshort.types import LambdaEvent, LambdaContext, LambdaConfiguration
from idemshort.lambdas.redirect_url import app
from idemshort.models import ShortURLModel
from idemshort.dao.base import ShortURLBaseDAO
from idemshort.dao.exceptions import DataStoreError, ShortURLNotFoundError
from idemshort.exceptions import AppConfigError


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def successful_event_302() -> LambdaEvent:
    return cast(LambdaEvent, {
        'resource': '/{shortcode}',
        'pathParameters': {'shortcode': 'abc1234'},
        'httpMethod': 'GET',
        'path': '/abc1234',
        'requestContext': {'domainName': 'testhost:1000', 'stage': 'test'},
    })


@pytest.fixture
def bad_request_400() -> LambdaEvent:
    return cast(LambdaEvent, {
        'resource': '/{shortcode}',
        'pathParameters': {'invalid': 'path'},
        'httpMethod': 'GET',
        'path': '/abc1234',
        'requestContext': {'domainName': 'testhost:1000', 'stage': 'test'},
    })


class TestRedirectUrlHandler:

    @pytest.fixture
    def context(self) -> LambdaContext:
        return cast(LambdaContext, {'function_name': 'redirect_url'})

    @pytest.fixture
    def config(self) -> LambdaConfiguration:
        return cast(LambdaConfiguration, {'redis': {'host': 'redis.test', 'port': 6379, 'db': 0}})

    @pytest.fixture
    def short_url_dao(self) -> ShortURLBaseDAO:
        dao = MagicMock(spec=ShortURLBaseDAO)
        dao.get.return_value = ShortURLModel(
            shortcode='abc1234',
            target='https://example.com/blog/chuck-norris-is-awesome?ref=x#top',
        )
        return dao

    @pytest.fixture(autouse=True)
    def setup(
        self,
        monkeypatch: MonkeyPatch,
        context: LambdaContext,
        config: LambdaConfiguration,
        short_url_dao: ShortURLBaseDAO,
    ) -> None:
        # Patch Lambda dependencies
        self.dao_kwargs = {}

        def make_dao(**kwargs):
            self.dao_kwargs = kwargs
            return short_url_dao

        monkeypatch.setattr(app, 'load_config', lambda *a, **kw: config)
        monkeypatch.setattr(app, 'ShortURLRedisDAO', make_dao)
        monkeypatch.setattr(app, 'app_prefix', lambda: 'testapp:test')

        self.context = context
        self.short_url_dao = short_url_dao

    def test_lambda_handler(self, successful_event_302: LambdaEvent) -> None:
        response = app.lambda_handler(successful_event_302, self.context)
        headers = response['headers']
        body = json.loads(response['body'])

        assert response['statusCode'] == 302
        assert body == {}
        assert headers['Location'] == 'https://example.com/blog/chuck-norris-is-awesome?ref=x#top'
        self.short_url_dao.get.assert_called_once_with('abc1234')
        assert self.dao_kwargs == {'redis_host': 'redis.test', 'redis_port': 6379, 'redis_db': 0, 'prefix': 'testapp:test'}

    def test_lambda_handler_resolves_through_service(self, monkeypatch: MonkeyPatch, successful_event_302: LambdaEvent) -> None:
        resolved = []
        resolve = app.ShortenerService.resolve

        def spy(service, shortcode):
            resolved.append(shortcode)
            return resolve(service, shortcode)

        monkeypatch.setattr(app.ShortenerService, 'resolve', spy)

        response = app.lambda_handler(successful_event_302, self.context)

        assert response['statusCode'] == 302
        assert resolved == ['abc1234']

    @pytest.mark.parametrize('path_parameters', [{'invalid': 'path'}, None, {'shortcode': ''}])
    def test_lambda_handler_with_invalid_path_parameters(self, bad_request_400: LambdaEvent, path_parameters) -> None:
        bad_request_400['pathParameters'] = path_parameters

        response = app.lambda_handler(bad_request_400, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 400
        assert body['message'] == "Bad Request (missing 'shortcode' in path)"
        assert body['errorCode'] == 'MISSING_SHORTCODE'
        self.short_url_dao.get.assert_not_called()

    def test_lambda_handler_with_unknown_shortcode(self, successful_event_302: LambdaEvent) -> None:
        self.short_url_dao.get.side_effect = ShortURLNotFoundError()
        short_url = 'https://testhost:1000/abc1234'

        response = app.lambda_handler(successful_event_302, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 404
        assert body['message'] == f"Not Found (short url {short_url} doesn't exist)"
        assert body['errorCode'] == 'SHORT_URL_NOT_FOUND'

    def test_lambda_handler_with_store_failure(self, successful_event_302: LambdaEvent) -> None:
        self.short_url_dao.get.side_effect = DataStoreError("Can't connect to Redis at redis.test:6379/0.")

        response = app.lambda_handler(successful_event_302, self.context)
        body = json.loads(response['body'])

        assert response['statusCode'] == 500
        assert body['errorCode'] == 'dao:data_store_error'

    def test_lambda_handler_with_config_failure(self, monkeypatch: MonkeyPatch, successful_event_302: LambdaEvent) -> None:
        def fail(*args, **kwargs):
            raise AppConfigError('Failed to fetch configuration from AWS AppConfig.')

        monkeypatch.setattr(app, 'load_config', fail)

        response = app.lambda_handler(successful_event_302, self.context)

        assert response['statusCode'] == 500
        assert json.loads(response['body'])['errorCode'] == 'infra:appconfig_error'
