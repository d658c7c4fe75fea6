# services/short_link_service.py
"""
Tag short-links.

Writers can mention a tag inline as " [title] " and it becomes a markdown
link to that tag's page, as long as the tag exists. "[x]" is left alone since
it is task-list syntax, and anything already followed by "(...)" is a regular
markdown link.
"""

import re

import config
from database import RepositoryError
from database.models import TAG_TITLE_PATTERN
from utils.logging_config import get_logger

logger = get_logger('ShortLink')

TAG_LINK_PATTERN = re.compile(
    r' \[(' + TAG_TITLE_PATTERN.pattern + r')\](?!\()',
    re.ASCII,
)


class ShortLinkService:
    """Resolves tag short-links in markdown using the tag repository."""

    def __init__(self, tag_repository):
        self.tag_repository = tag_repository

    def link_tag(self, content: str) -> str:
        """Replace every resolvable " [title]" with " [Title](serve/tag/uri)"."""
        if not content or '[' not in content:
            return content

        return TAG_LINK_PATTERN.sub(self._replace, content)

    def _replace(self, match: re.Match) -> str:
        title = match.group(1)
        if title == 'x':
            return match.group(0)

        try:
            tag = self.tag_repository.get_by_title(title)
        except RepositoryError as e:
            logger.warning(f"Resolving short link [{title}] failed: {e}")
            return match.group(0)

        if tag is None:
            return match.group(0)

        return f" [{tag.title}]({config.SERVE_PATH}/tag/{tag.uri})"
