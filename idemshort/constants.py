from enum import StrEnum


class Defaults:
    """Default tuning values (overridable through AppConfig)."""

    # First identifiers are reserved; the first allocated identifier is RESERVED_IDENTIFIERS + 1
    RESERVED_IDENTIFIERS = 1_000
    SHORTCODE_LENGTH = 7
    SHORTCODE_SALT = 'default_salt'
    SHORTCODE_MULT = 1_315_423_911
    # Collision retry budget for a single generate() call
    MAX_RETRIES = 16


class CacheTTL:
    """Idempotency cache durations in seconds."""

    IDEMPOTENCY = 10  # Duplicate shorten requests within this window are replayed
    LOCK = 5  # Per-key compute lock, released early by the winner
    LOCK_WAIT = 3.0  # How long losers wait for the winner's result
    POLL_INTERVAL = 0.05


class Timeout:
    """Bounded network timeouts in seconds."""

    REDIS_SOCKET = 0.5
    REDIS_CONNECT = 0.5
    APPCONFIG_AGENT = 5


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'


# Session cookie used as the weakest caller identity signal
SESSION_COOKIE = 'sid'

# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
