"""Data models for the offline article archive."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class IndexEntry:
    """One record of the archive index.

    Attributes:
        byte_offset: Offset of the compressed block holding the record
        record_id: Archive-wide unique page id
        title: Page title (not unique: redirects share titles with targets)
    """

    byte_offset: int
    record_id: int
    title: str


@dataclass(frozen=True)
class Article:
    """One encyclopedia entry extracted from the archive.

    Attributes:
        id: Page id
        title: Page title
        last_changed_at: Timestamp of the latest revision (UTC)
        last_changed_by: Username of the latest revision's contributor
        body: Raw wikitext of the latest revision
    """

    id: int
    title: str
    last_changed_at: datetime
    last_changed_by: str
    body: str
