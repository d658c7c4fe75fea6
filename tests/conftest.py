"""
Pytest fixtures and test configuration
"""
import pytest
import os
import tempfile
import shutil

# Set testing environment variables BEFORE importing app modules
os.environ['TESTING'] = 'true'
os.environ['TAG_CACHE_SCHEDULER_ENABLED'] = 'false'

# Now import app modules
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import config
import database.core
from database import initialize_database, Tag, TAG_STATUS_VALID
from repositories.tag_repository import TagRepository
from core.tag_cache import TagCache, reset_tag_cache
from events import cache_events


@pytest.fixture(autouse=True)
def tag_config(monkeypatch):
    """Pin the tag cache settings so tests do not depend on the environment."""
    monkeypatch.setattr(config, 'NEW_TAGS_CNT', 10)
    monkeypatch.setattr(config, 'ICON_TAGS_FETCH_SIZE', 12)
    monkeypatch.setattr(config, 'ICON_TAGS_KEEP_LAST_DROP', True)
    monkeypatch.setattr(config, 'MAX_TAG_TITLE_LENGTH', 9)
    monkeypatch.setattr(config, 'TAG_TITLE_WHITELIST', ['C#', 'hello world'])
    monkeypatch.setattr(config, 'SERVE_PATH', 'http://test.local')
    monkeypatch.setattr(config, 'RELOAD_SECRET', 'test-secret')
    monkeypatch.setattr(config, 'TAG_CACHE_SCHEDULER_ENABLED', False)


@pytest.fixture(autouse=True)
def reset_globals():
    """Each test starts without a shared cache instance or event subscribers."""
    reset_tag_cache()
    cache_events.clear_all_callbacks()
    yield
    reset_tag_cache()
    cache_events.clear_all_callbacks()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_db_path(temp_dir):
    """Path to test database file."""
    return os.path.join(temp_dir, 'test_tags.db')


@pytest.fixture
def db_connection(test_db_path, monkeypatch):
    """
    Create a test database connection.
    Uses monkeypatch to override the DB_FILE path.
    """
    monkeypatch.setattr(database.core, 'DB_FILE', test_db_path)
    monkeypatch.setattr(config, 'DATABASE_PATH', test_db_path)

    initialize_database()

    conn = database.core.get_db_connection()
    yield conn

    conn.close()


@pytest.fixture
def tag_repository(db_connection):
    return TagRepository()


@pytest.fixture
def add_tag(tag_repository):
    """
    Insert a tag and return it with its new ID.

    Usage:
        alpha = add_tag('alpha', reference_cnt=2)
    """
    def _add_tag(title, **fields):
        fields.setdefault('uri', title)
        fields.setdefault('status', TAG_STATUS_VALID)
        tag = Tag(id=None, title=title, **fields)
        tag_id = tag_repository.add(tag)
        return tag.with_changes(id=tag_id)
    return _add_tag


@pytest.fixture
def tag_cache(tag_repository):
    """A fresh cache with real markdown rendering and no short-link resolution."""
    return TagCache(tag_repository)


@pytest.fixture
def fetch_row(db_connection):
    """Read a tag row straight from the database."""
    def _fetch_row(tag_id):
        return db_connection.execute("SELECT * FROM tags WHERE id = ?", (tag_id,)).fetchone()
    return _fetch_row
