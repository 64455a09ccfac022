class IdemShortError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:idemshort_error'


class MalformedResponseError(IdemShortError):
    """Raised when a response is malformed."""

    error_code = 'app:malformed_response_error'


class ShortenerError(IdemShortError):
    """Base exception for short link creation errors."""

    error_code = 'app:shortener_error'


class InvalidURLError(ShortenerError):
    """Raised when the URL to shorten is empty or malformed."""

    error_code = 'app:invalid_url_error'


class ExhaustedRetriesError(ShortenerError):
    """Raised when no unclaimed shortcode was found within the retry budget.

    This is a configuration fault (shortcode length too small for the
    allocation volume), not a transient failure.
    """

    error_code = 'app:exhausted_retries_error'


class ConfigurationError(IdemShortError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'


class InfrastructureError(IdemShortError):
    """Base exception for all infrastructure (AWS) errors."""

    error_code = 'infra:infrastructure_error'


class AppConfigError(InfrastructureError):
    """Raised when AppConfig responds with erroneous data."""

    error_code = 'infra:appconfig_error'
