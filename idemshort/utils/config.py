"""Utility functions for application configuration management.

Lambda functions read their configuration from **AWS AppConfig**. Each
environment (`APP_ENV`) has a dedicated AppConfig *Environment* within the
shared AppConfig *Application* identified by `APP_NAME`. The configuration is
a JSON document deployed under a configuration profile (typically
`backend-config`):

    {
        "build": 7,
        "active_backend": "redis",
        "configs": {
            "shorten_url": {
                "redis": { "host": ..., "port": ..., "db": ... },
                "cache": { "host": ..., "port": ..., "db": ... },
                "shortcode": { "salt": ..., "length": 7, "max_retries": 16 },
                "idempotency": { "ttl": 10, "lock_ttl": 5, "lock_wait": 3.0 }
            },
            "redirect_url": {
                "redis": { ... }
            }
        }
    }

`load_config()` returns the active backend section of the requested lambda
plus its optional "cache", "shortcode" and "idempotency" sections.

Typical usage inside a Lambda handler:
    >>> from idemshort.utils.config import load_config
    >>> config = load_config('shorten_url')
    >>> config['redis']['host']
    'redis-15501.host.docker.internal'
"""

import os
import json
import functools
import logging
import urllib.parse
import urllib.request
from collections.abc import Callable

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from idemshort.types import AppConfig, AppConfigDataClient, LambdaConfiguration
from idemshort.constants import ENV, Timeout
from idemshort.utils.helpers import require_environment
from idemshort.utils.runtime import running_locally
from idemshort.exceptions import AppConfigError, BadConfigurationError, MalformedResponseError


logger = logging.getLogger(__name__)

OPTIONAL_SECTIONS = ('cache', 'shortcode', 'idempotency')


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return the key namespace '<app name>:<app env>', or None if APP_NAME is unset."""
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def extract_lambda_config(document: AppConfig, lambda_name: str) -> LambdaConfiguration:
    """Pick the sections relevant to one lambda out of a full AppConfig document.

    Raises:
        MalformedResponseError: If the document lacks the backend or lambda section.
    """
    try:
        backend = document['active_backend']
        lambda_config = document['configs'][lambda_name]
        data = {backend: lambda_config[backend]}
    except (KeyError, TypeError) as e:
        raise MalformedResponseError(f'AppConfig document has no {lambda_name!r} configuration for the active backend.') from e

    for section in OPTIONAL_SECTIONS:
        if section in lambda_config:
            data[section] = lambda_config[section]
    return data


def _validate_appconfig_agent_url(url: str | None) -> str:
    if not url:
        return ''
    components = urllib.parse.urlparse(url)
    if components.scheme not in {'http', 'https'}:
        raise BadConfigurationError(f'Bad scheme {url}')
    if components.hostname not in {'localhost', '127.0.0.1', 'host.docker.internal', 'appconfig-agent'}:
        raise BadConfigurationError(f'Bad host {url}')
    if components.port not in {2772, None}:
        raise BadConfigurationError(f'Bad port {url}')
    return url


def _sam_load_local_appconfig(func: Callable) -> Callable:  # pragma: no cover
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM.

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a safe local URL, fetch the configuration JSON from the local agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).
    """

    @functools.wraps(func)
    def wrapper(lambda_name: str) -> LambdaConfiguration:
        agent_url = _validate_appconfig_agent_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not running_locally() or not agent_url:
            return func(lambda_name)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'lambdaName': lambda_name})
        with urllib.request.urlopen(url, timeout=Timeout.APPCONFIG_AGENT) as r:  # noqa: S310
            document = json.load(r)

        logger.debug('Loaded AppConfig from local agent.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
        return extract_lambda_config(document, lambda_name)

    return wrapper


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(lambda_name: str) -> LambdaConfiguration:
    """Load configuration for a given Lambda from AWS AppConfig.

    Raises:
        MissingEnvironmentVariableError: If the AppConfig identifiers are not set.
        AppConfigError: If the AppConfig Data API call fails or returns non-JSON content.
        MalformedResponseError: If the document lacks the lambda's configuration.
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name})

    try:
        appconfig: AppConfigDataClient = boto3.client('appconfigdata')
        session_token = appconfig.start_configuration_session(
            ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
            EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
            ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
        )['InitialConfigurationToken']

        response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
        document = json.loads(response['Configuration'].read().decode('utf-8'))
    except (BotoCoreError, ClientError) as e:
        raise AppConfigError('Failed to fetch configuration from AWS AppConfig.') from e
    except (KeyError, ValueError) as e:
        raise AppConfigError('AWS AppConfig returned an unreadable configuration document.') from e

    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'lambdaName': lambda_name, 'build': document.get('build')})
    return extract_lambda_config(document, lambda_name)
