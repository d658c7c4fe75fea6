"""
Decorators for API endpoints and service functions.

api_handler gives every endpoint the same error envelopes and the optional
reload-secret check. sync_to_async moves blocking sqlite work off the event
loop.
"""

from functools import wraps
from quart import jsonify, request
from typing import Callable, Any
import asyncio

from utils.api_responses import error_response, server_error_response, unauthorized_response
from utils.logging_config import get_logger

logger = get_logger('API')


def _secret_matches() -> bool:
    from config import RELOAD_SECRET
    secret = request.args.get('secret', '') or request.headers.get('X-Reload-Secret', '')
    return secret == RELOAD_SECRET


def api_handler(require_auth: bool = False, log_errors: bool = True):
    """
    Decorator for API endpoints that handles:
    - Exception catching with proper logging
    - Consistent response format
    - Optional authentication check

    Args:
        require_auth: If True, checks for the reload secret in the request
        log_errors: If True, logs the traceback of unexpected errors

    Usage:
        @api_blueprint.route('/tags/reload', methods=['POST'])
        @api_handler(require_auth=True)
        async def reload_tags():
            return {"results": ...}  # Auto-wrapped with success=True
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            try:
                if require_auth and not _secret_matches():
                    return unauthorized_response()

                result = await func(*args, **kwargs)

                # Auto-wrap dict responses
                if isinstance(result, dict):
                    if 'success' not in result:
                        result = {"success": True, **result}
                    return jsonify(result)

                return result

            except ValueError as e:
                if log_errors:
                    logger.warning(f"{func.__name__}: bad request: {e}")
                return error_response(str(e), 400)
            except Exception as e:
                if log_errors:
                    logger.error(f"{func.__name__} failed", exc_info=True)
                return server_error_response(e)

        return wrapper
    return decorator


def sync_to_async(func: Callable) -> Callable:
    """
    Decorator to run synchronous functions in a thread pool.
    Loaders block on sqlite, so routes call them through this.

    Usage:
        @sync_to_async
        def reload():
            return get_tag_cache().load_all()
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        return await asyncio.to_thread(func, *args, **kwargs)
    return wrapper

