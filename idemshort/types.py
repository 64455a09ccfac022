from collections.abc import Callable
from typing import Any

from botocore.client import BaseClient


# Type aliases for Python dictionaries
type LambdaEvent = dict[str, Any]
type LambdaContext = Any
type LambdaResponse = dict[str, Any]
type LambdaConfiguration = dict[str, Any]
type AppConfig = dict[str, Any]
type HttpHeaders = dict[str, str]

# Collaborators of the shortcode generator
type ExistsCheck = Callable[[str], bool]
type Persist = Callable[[str, str], None]

# Type aliases for boto3 clients
type AppConfigDataClient = BaseClient
