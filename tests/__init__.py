"""
Tag Cache Test Suite

Test organization:
- test_tag_models.py: Tag value type and title rules
- test_tag_repository.py: Queries, updates and transactions against sqlite
- test_markdowns.py: Markdown rendering and HTML text extraction
- test_short_link_service.py: Tag short-link resolution
- test_tag_cache.py: Loaders, accessors and failure handling
- test_concurrency.py: Readers during reloads
- test_tag_cache_scheduler.py: Interval and on-demand reloading
- test_cache_events.py: Tag change notifications
- test_tag_api.py, test_decorators.py, test_api_responses.py: HTTP layer
- conftest.py: Shared fixtures and test utilities
"""
