from quart import request
from . import api_blueprint
import config
from core.tag_cache import get_tag_cache
from services import tag_cache_scheduler
from utils.api_responses import serialize_tags
from utils.decorators import api_handler, sync_to_async


@sync_to_async
def _reload_now():
    return get_tag_cache().load_all()


@sync_to_async
def _stored_count():
    return get_tag_cache().tag_repository.count()


@api_blueprint.route('/tags')
@api_handler()
async def all_tags():
    """All valid tags, sorted by title."""
    tags = get_tag_cache().get_tags()
    return {'tags': serialize_tags(tags), 'total': len(tags)}


@api_blueprint.route('/tags/new')
@api_handler()
async def new_tags():
    tags = get_tag_cache().get_new_tags()
    return {'tags': serialize_tags(tags), 'total': len(tags)}


@api_blueprint.route('/tags/icons')
@api_handler()
async def icon_tags():
    size = request.args.get('size', config.ICON_TAGS_FETCH_SIZE)
    try:
        size = int(size)
    except (TypeError, ValueError):
        raise ValueError(f"size must be an integer, got {size!r}")
    if size < 0:
        raise ValueError("size must not be negative")

    tags = get_tag_cache().get_icon_tags(size)
    return {'tags': serialize_tags(tags), 'total': len(tags)}


@api_blueprint.route('/tags/reload', methods=['POST'])
@api_handler(require_auth=True)
async def reload_tags():
    """
    Reload the tag cache.

    ?wait=false hands the reload to the background scheduler when it is
    running and returns immediately; otherwise the reload runs now and the
    per-view results are returned.
    """
    wait = request.args.get('wait', 'true').lower() != 'false'
    scheduler = tag_cache_scheduler.get_scheduler()

    if not wait and scheduler is not None and scheduler.is_running():
        scheduler.request_reload()
        return {'queued': True}

    results = await _reload_now()
    return {
        'queued': False,
        'results': {name: result.to_dict() for name, result in results.items()},
    }


@api_blueprint.route('/tags/status')
@api_handler()
async def tag_cache_status():
    """View sizes next to the stored tag count, scheduler state and settings."""
    cache = get_tag_cache()
    scheduler = tag_cache_scheduler.get_scheduler()
    return {
        'counts': cache.sizes(),
        'stored': await _stored_count(),
        'scheduler': scheduler.get_status() if scheduler is not None else {'running': False},
        'config': config.get_tag_cache_config(),
    }
