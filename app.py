import asyncio

import config
from quart import Quart
from dotenv import load_dotenv

load_dotenv(override=True)

from routers import api_blueprint
from database import initialize_database
from core.tag_cache import get_tag_cache
from utils.logging_config import setup_logging, get_logger


def create_app(start_scheduler: bool = None):
    """Create and configure the Quart application."""
    # Initialize logging first
    setup_logging(level=config.LOG_LEVEL)
    logger = get_logger('App')
    logger.info(f"Initializing {config.APP_NAME} application...")

    config.validate_config()

    app = Quart(__name__)
    app.config['RELOAD_SECRET'] = config.RELOAD_SECRET

    # Ensure the database file and tables exist.
    initialize_database()

    # Warm the cache so the first requests are not served from empty views
    results = get_tag_cache().load_all()
    for name, result in results.items():
        if result.ok:
            logger.info(f"✓ Loaded {result.count} {name}")
        else:
            logger.warning(f"⚠ Initial load of {name} finished with status {result.status.value}")

    if start_scheduler is None:
        start_scheduler = config.TAG_CACHE_SCHEDULER_ENABLED

    if start_scheduler:
        from services import tag_cache_scheduler
        if tag_cache_scheduler.start_scheduler(get_tag_cache(), run_immediately=False):
            logger.info("✓ Tag cache scheduler started automatically")
        else:
            logger.warning("⚠ Tag cache scheduler was already running")

        @app.after_serving
        async def shutdown_scheduler():
            # stop() joins the scheduler thread
            await asyncio.to_thread(tag_cache_scheduler.stop_scheduler)

    app.register_blueprint(api_blueprint, url_prefix='/api')

    return app


if __name__ == '__main__':
    import uvicorn
    app = create_app()
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level="info")
