"""
Tag data model.

A Tag is an immutable value. Loaders never modify a fetched tag in place;
they derive new values with dataclasses.replace(), so a snapshot taken for
persistence can never pick up display-only changes.
"""

import re
from dataclasses import dataclass, asdict, replace
from typing import Optional

import config

TAG_STATUS_VALID = 0
TAG_STATUS_INVALID = 1

# CJK unified ideographs, ASCII word characters and a handful of symbols
TAG_TITLE_PATTERN = re.compile(r'[\u4e00-\u9fa5\w&+\-.]+', re.ASCII)

FULL_WIDTH_SPACE = '\u3000'


@dataclass(frozen=True)
class Tag:
    """A tag row plus the transient fields computed by the cache."""
    id: Optional[int]
    title: str
    uri: str = ''
    css: str = ''
    description: str = ''
    status: int = TAG_STATUS_VALID
    icon_path: str = ''
    reference_cnt: int = 0
    random_double: float = 0.0

    # Transient, never written back to the store
    description_text: Optional[str] = None
    title_lower_case: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> 'Tag':
        return cls(
            id=row['id'],
            title=row['title'] or '',
            uri=row['uri'] or '',
            css=row['css'] or '',
            description=row['description'] or '',
            status=row['status'],
            icon_path=row['icon_path'] or '',
            reference_cnt=row['reference_cnt'],
            random_double=row['random_double'],
        )

    def to_row(self) -> dict:
        """Persistent columns only."""
        return {
            'title': self.title,
            'uri': self.uri,
            'css': self.css,
            'description': self.description,
            'status': self.status,
            'icon_path': self.icon_path,
            'reference_cnt': self.reference_cnt,
            'random_double': self.random_double,
        }

    def to_dict(self) -> dict:
        return asdict(self)

    def with_changes(self, **changes) -> 'Tag':
        return replace(self, **changes)

    @property
    def is_valid(self) -> bool:
        return self.status == TAG_STATUS_VALID


def contains_whitelist_tag(title: str) -> bool:
    """Check whether the title is on the configured whitelist (case-insensitive)."""
    lowered = title.lower()
    return any(lowered == allowed.lower() for allowed in config.TAG_TITLE_WHITELIST)


def has_space(title: str) -> bool:
    return ' ' in title or FULL_WIDTH_SPACE in title


def is_current_title(title: str) -> bool:
    """
    Check whether a title is acceptable for the public tag list.

    Titles with an ordinary or full-width space are legacy data and always
    rejected. Whitelisted titles skip the pattern and length checks.
    """
    if has_space(title):
        return False

    if contains_whitelist_tag(title):
        return True

    return bool(TAG_TITLE_PATTERN.fullmatch(title)) and len(title) <= config.MAX_TAG_TITLE_LENGTH
