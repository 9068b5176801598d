"""Index and random-access reader for multistream archives."""

from wikireader.archive.index import Index, IndexBuilder
from wikireader.archive.models import Article, IndexEntry
from wikireader.archive.reader import ArchiveReader

__all__ = ["ArchiveReader", "Article", "Index", "IndexBuilder", "IndexEntry"]
