from idemshort.utils.config import app_env, app_name, app_prefix, load_config
from idemshort.utils.helpers import base_url, get_short_url, validate_url, require_environment, guarantee_500_response
from idemshort.utils.shortener import generate_shortcode, decode_shortcode, ShortcodeEncoder
from idemshort.utils.fingerprint import fingerprint
from idemshort.utils.runtime import running_locally, get_caller_identity
from idemshort.utils.logging import initialize_logging


__all__ = [
    'generate_shortcode',
    'decode_shortcode',
    'ShortcodeEncoder',
    'fingerprint',
    'app_env',
    'app_name',
    'app_prefix',
    'load_config',
    'base_url',
    'get_short_url',
    'validate_url',
    'require_environment',
    'guarantee_500_response',
    'running_locally',
    'get_caller_identity',
    'initialize_logging',
]
