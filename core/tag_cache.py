"""
Tag Cache Module

Holds three derived views over the tags table so pages never have to query
and re-render tags per request:
- new_tags: in-use tags, most recently created first
- icon_tags: valid tags with an icon, in a freshly randomized order
- all_tags: every valid, current-format tag sorted case-insensitively

Each view is published as an immutable tuple by a single reference swap, so
readers never see a half-built collection and never need the lock. The lock
of each view only keeps two loaders of that view from racing each other.

Loaders never raise. A failed reload logs, keeps the last good view, and
reports what happened through the returned LoadResult.
"""

import random
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import quote_plus

import config
from database import RepositoryError, Tag, TAG_STATUS_VALID
from database.models import is_current_title
from events.cache_events import trigger_cache_invalidation
from repositories.query import (
    CompositeFilter,
    FilterOperator,
    PropertyFilter,
    Query,
    SortDirection,
)
from utils import markdowns
from utils.logging_config import get_logger

logger = get_logger('TagCache')

NEW_TAGS = 'new_tags'
ICON_TAGS = 'icon_tags'
ALL_TAGS = 'all_tags'


class LoadStatus(str, Enum):
    OK = 'ok'
    PARTIAL = 'partial'  # published, but a write back to the store failed
    FAILED = 'failed'    # nothing published, previous view kept


@dataclass(frozen=True)
class LoadResult:
    collection: str
    status: LoadStatus
    count: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == LoadStatus.OK

    def to_dict(self) -> dict:
        return {
            'collection': self.collection,
            'status': self.status.value,
            'count': self.count,
            'error': self.error,
        }


class TagCache:
    """In-memory views over the tags table, refreshed by the load_* methods."""

    def __init__(self, tag_repository, link_tag: Optional[Callable[[str], str]] = None,
                 to_html: Callable[[str], str] = markdowns.to_html,
                 to_text: Callable[[str], str] = markdowns.to_text):
        self.tag_repository = tag_repository
        self._link_tag = link_tag or (lambda content: content)
        self._to_html = to_html
        self._to_text = to_text

        self._new_tags: Tuple[Tag, ...] = ()
        self._icon_tags: Tuple[Tag, ...] = ()
        self._all_tags: Tuple[Tag, ...] = ()

        self._new_tags_lock = threading.Lock()
        self._icon_tags_lock = threading.Lock()
        self._all_tags_lock = threading.Lock()

    # ========================================================================
    # READERS
    # ========================================================================

    def get_new_tags(self) -> List[Tag]:
        return list(self._new_tags)

    def get_icon_tags(self, fetch_size: int) -> List[Tag]:
        """
        Get up to fetch_size icon tags.

        When fetch_size reaches the number of icon tags the last one is left
        out (ICON_TAGS_KEEP_LAST_DROP, on by default).
        """
        tags = self._icon_tags
        if not tags:
            return []

        if fetch_size >= len(tags):
            end = len(tags) - 1 if config.ICON_TAGS_KEEP_LAST_DROP else len(tags)
        else:
            end = fetch_size

        return list(tags[:max(end, 0)])

    def get_tags(self) -> List[Tag]:
        return list(self._all_tags)

    def sizes(self) -> Dict[str, int]:
        """Number of tags currently published in each view."""
        return {
            NEW_TAGS: len(self._new_tags),
            ICON_TAGS: len(self._icon_tags),
            ALL_TAGS: len(self._all_tags),
        }

    # ========================================================================
    # LOADERS
    # ========================================================================

    def load_new_tags(self) -> LoadResult:
        query = (Query()
                 .set_filter(PropertyFilter('reference_cnt', FilterOperator.GREATER_THAN, 0))
                 .add_sort('id', SortDirection.DESCENDING)
                 .set_current_page_num(1)
                 .set_page_size(config.NEW_TAGS_CNT)
                 .set_page_count(1))

        with self._new_tags_lock:
            try:
                tags = self.tag_repository.query(query)
            except RepositoryError as e:
                logger.error("Gets new tags failed", exc_info=True)
                return LoadResult(NEW_TAGS, LoadStatus.FAILED, len(self._new_tags), str(e))

            self._new_tags = tuple(tags)

        logger.debug(f"Loaded {len(tags)} new tags")
        return LoadResult(NEW_TAGS, LoadStatus.OK, len(tags))

    def load_icon_tags(self) -> LoadResult:
        query = (Query()
                 .set_filter(CompositeFilter.and_(
                     PropertyFilter('icon_path', FilterOperator.NOT_EQUAL, ''),
                     PropertyFilter('status', FilterOperator.EQUAL, TAG_STATUS_VALID)))
                 .set_current_page_num(1)
                 .set_page_size(None)
                 .set_page_count(1)
                 .add_sort('random_double', SortDirection.ASCENDING))

        with self._icon_tags_lock:
            try:
                originals = self.tag_repository.query(query)
            except RepositoryError as e:
                logger.error("Load icon tags failed", exc_info=True)
                return LoadResult(ICON_TAGS, LoadStatus.FAILED, len(self._icon_tags), str(e))

            # Only display copies carry the rendered description. The write
            # back below touches random_double alone, keyed by the originals
            display_tags = tuple(self._render_description(tag) for tag in originals)
            self._icon_tags = display_tags

        error = self._rerandomize(originals)
        if error is not None:
            return LoadResult(ICON_TAGS, LoadStatus.PARTIAL, len(display_tags), error)

        logger.debug(f"Loaded {len(display_tags)} icon tags")
        return LoadResult(ICON_TAGS, LoadStatus.OK, len(display_tags))

    def load_all_tags(self) -> LoadResult:
        query = (Query()
                 .set_filter(PropertyFilter('status', FilterOperator.EQUAL, TAG_STATUS_VALID))
                 .set_current_page_num(1)
                 .set_page_size(None)
                 .set_page_count(1))

        with self._all_tags_lock:
            try:
                tags = self.tag_repository.query(query)
            except RepositoryError as e:
                logger.error("Load all tags failed", exc_info=True)
                return LoadResult(ALL_TAGS, LoadStatus.FAILED, len(self._all_tags), str(e))

            tags, error = self._migrate_legacy_uris(tags)

            current = [tag for tag in tags if is_current_title(tag.title)]
            enriched = [
                self._render_description(tag).with_changes(title_lower_case=tag.title.lower())
                for tag in current
            ]
            # sorted() is stable, equal keys keep store order
            enriched = sorted(enriched, key=lambda tag: tag.title_lower_case)

            self._all_tags = tuple(enriched)

        if error is not None:
            return LoadResult(ALL_TAGS, LoadStatus.PARTIAL, len(enriched), error)

        logger.debug(f"Loaded {len(enriched)} tags")
        return LoadResult(ALL_TAGS, LoadStatus.OK, len(enriched))

    def load_all(self) -> Dict[str, LoadResult]:
        """Reload every view. Used on startup and by the reload endpoint."""
        return {
            NEW_TAGS: self.load_new_tags(),
            ICON_TAGS: self.load_icon_tags(),
            ALL_TAGS: self.load_all_tags(),
        }

    # ========================================================================
    # HELPERS
    # ========================================================================

    def _render_description(self, tag: Tag) -> Tag:
        """Display copy of tag with HTML description and its plain text."""
        description = tag.description
        if not description or not description.strip():
            return tag.with_changes(description_text=tag.title)

        html = self._to_html(self._link_tag(description))
        return tag.with_changes(description=html, description_text=self._to_text(html))

    def _rerandomize(self, originals: List[Tag]) -> Optional[str]:
        """
        Give every icon tag a new sampling key in one transaction.

        Only random_double is written, other columns keep their stored values.

        Returns the error message when the batch was rolled back.
        """
        if not originals:
            return None

        transaction = None
        try:
            transaction = self.tag_repository.begin_transaction()
            for tag in originals:
                self.tag_repository.update(tag.id, random_double=random.random())
            transaction.commit()
        except RepositoryError as e:
            _rollback(transaction)
            logger.error("Updates icon tags random double failed", exc_info=True)
            return str(e)

        return None

    def _migrate_legacy_uris(self, tags: List[Tag]) -> Tuple[List[Tag], Optional[str]]:
        """
        Fill in the URI of tags created before URIs existed and clear their css.

        All writes share one transaction and touch only uri and css. On failure
        it is rolled back and the fetched tags are returned unchanged together
        with the error message. After a commit the other views, which still
        hold the blank URIs, are flagged for reload.
        """
        legacy = [tag for tag in tags if not tag.uri or not tag.uri.strip()]
        if not legacy:
            return tags, None

        migrated: Dict[int, Tag] = {}
        transaction = None
        try:
            transaction = self.tag_repository.begin_transaction()
            for tag in legacy:
                fixed = tag.with_changes(uri=quote_plus(tag.title, encoding='utf-8'), css='')
                self.tag_repository.update(tag.id, uri=fixed.uri, css=fixed.css)
                migrated[tag.id] = fixed
                logger.info(f"Migrated tag [title={tag.title}]")
            transaction.commit()
        except (RepositoryError, UnicodeError) as e:
            _rollback(transaction)
            logger.error("Migrates tag data failed", exc_info=True)
            return tags, str(e)

        trigger_cache_invalidation([NEW_TAGS, ICON_TAGS])
        return [migrated.get(tag.id, tag) for tag in tags], None


def _rollback(transaction):
    """Roll back if still active. A failing rollback is logged, never raised."""
    if transaction is None or not transaction.is_active():
        return
    try:
        transaction.rollback()
    except RepositoryError:
        logger.error("Rolls back transaction failed", exc_info=True)


# Global instance
_tag_cache: Optional[TagCache] = None
_tag_cache_lock = threading.Lock()


def get_tag_cache() -> TagCache:
    """Get or create the process-wide tag cache"""
    global _tag_cache
    if _tag_cache is None:
        with _tag_cache_lock:
            if _tag_cache is None:
                from repositories.tag_repository import TagRepository
                from services.short_link_service import ShortLinkService

                repository = TagRepository()
                _tag_cache = TagCache(repository, link_tag=ShortLinkService(repository).link_tag)
    return _tag_cache


def reset_tag_cache():
    """Drop the global instance. Primarily for testing purposes."""
    global _tag_cache
    with _tag_cache_lock:
        _tag_cache = None
