from .api_responses import (
    error_response,
    unauthorized_response,
    server_error_response,
    serialize_tags,
)
from .decorators import api_handler, sync_to_async
from .logging_config import setup_logging, get_logger
from .markdowns import to_html, to_text

__all__ = [
    'error_response',
    'unauthorized_response',
    'server_error_response',
    'serialize_tags',
    'api_handler',
    'sync_to_async',
    'setup_logging',
    'get_logger',
    'to_html',
    'to_text',
]
