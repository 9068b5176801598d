"""Random-access reader for multistream bzip2 MediaWiki dumps.

A multistream dump is a concatenation of independent bzip2 streams. Each
stream decompresses to a run of ``<page>`` fragments with no enclosing root
element and no namespace declaration. The index records the byte offset of
the stream holding each page, so one lookup only ever decompresses one
stream.
"""

import bz2
import mmap
from datetime import datetime, timezone
from pathlib import Path
from types import TracebackType

import structlog
from lxml import etree

from wikireader.archive.models import Article, IndexEntry
from wikireader.utils.exceptions import (
    ArchiveIOError,
    ArticleNotFoundError,
    MissingPropertyError,
    ParseError,
)

logger = structlog.get_logger(__name__)

# Compressed bytes handed to the decompressor per step
READ_CHUNK_SIZE = 256 * 1024

ROOT_OPEN = b'<root xmlns="">'
ROOT_CLOSE = b"</root>"


def _xml_parser() -> etree.XMLParser:
    # No DTD loading, entity expansion or network access; article bodies
    # can exceed libxml2's default 10 MB text node limit.
    return etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        load_dtd=False,
        huge_tree=True,
    )


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 revision timestamp into an aware UTC datetime.

    Raises:
        ParseError: If the value is not a valid timestamp
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ParseError(f"Invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _require_child(elem: etree._Element, name: str) -> etree._Element:
    child = elem.find(name)
    if child is None:
        raise MissingPropertyError(name)
    return child


def _child_text(elem: etree._Element, name: str) -> str:
    return _require_child(elem, name).text or ""


class ArchiveReader:
    """Memory-mapped, read-only view of a multistream archive.

    The mapping is never written to, so one reader can serve concurrent
    :meth:`get_article` calls.

    Example:
        >>> with ArchiveReader.open("enwiki-pages-articles-multistream.xml.bz2") as reader:
        ...     article = reader.get_article(entry)
    """

    def __init__(self, data: mmap.mmap, path: Path) -> None:
        self._data = data
        self.path = path
        self.logger = logger.bind(component="archive_reader", path=str(path))

    @classmethod
    def open(cls, path: str | Path) -> "ArchiveReader":
        """Memory-map an archive file read-only.

        Args:
            path: Path to the ``.xml.bz2`` multistream archive

        Returns:
            Reader over the mapped file

        Raises:
            ArchiveIOError: If the file cannot be opened or mapped
        """
        path = Path(path)
        try:
            with path.open("rb") as f:
                data = mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ)
        except (OSError, ValueError) as e:
            # mmap raises ValueError for empty files
            raise ArchiveIOError(f"Cannot map archive {path}: {e}") from e

        reader = cls(data, path)
        reader.logger.info("archive_opened", size_bytes=len(data))
        return reader

    def close(self) -> None:
        self._data.close()

    def __enter__(self) -> "ArchiveReader":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._data)

    def get_article(self, entry: IndexEntry) -> Article:
        """Extract the article an index entry points at.

        Args:
            entry: Index entry naming the block offset and page id

        Returns:
            The matching article

        Raises:
            ArchiveIOError: If the block cannot be decompressed
            ParseError: If the block or record is malformed
            ArticleNotFoundError: If the block has no page with the entry's id
            MissingPropertyError: If the page lacks a required element
        """
        root = self._read_block(entry.byte_offset)
        wanted_id = str(entry.record_id)

        for page in root.iterchildren(tag=etree.Element):
            id_elem = page.find("id")
            if id_elem is not None and id_elem.text == wanted_id:
                return self._parse_article(page)

        self.logger.warning(
            "article_not_in_block",
            record_id=entry.record_id,
            byte_offset=entry.byte_offset,
            title=entry.title,
        )
        raise ArticleNotFoundError(
            f"Article {entry.record_id} not found in block at offset {entry.byte_offset}"
        )

    def decompress_block(self, byte_offset: int) -> bytes:
        """Decompress the single bzip2 stream starting at ``byte_offset``.

        Bytes after the stream's end-of-stream marker belong to later blocks
        and are never read past.

        Raises:
            ArchiveIOError: If the offset is out of range or the stream is
                corrupt or truncated
        """
        if byte_offset < 0 or byte_offset >= len(self._data):
            raise ArchiveIOError(
                f"Offset {byte_offset} outside archive of {len(self._data)} bytes"
            )

        decompressor = bz2.BZ2Decompressor()
        parts = []
        try:
            position = byte_offset
            while not decompressor.eof:
                if position >= len(self._data):
                    raise ArchiveIOError(
                        f"Compressed stream at offset {byte_offset} ends before its end marker"
                    )
                chunk = self._data[position : position + READ_CHUNK_SIZE]
                position += len(chunk)
                parts.append(decompressor.decompress(chunk))
        except OSError as e:
            raise ArchiveIOError(f"Corrupt compressed stream at offset {byte_offset}: {e}") from e

        return b"".join(parts)

    def _read_block(self, byte_offset: int) -> etree._Element:
        payload = self.decompress_block(byte_offset)
        wrapped = ROOT_OPEN + payload + ROOT_CLOSE
        try:
            return etree.fromstring(wrapped, parser=_xml_parser())
        except etree.XMLSyntaxError as e:
            raise ParseError(f"Malformed XML in block at offset {byte_offset}: {e}") from e

    def _parse_article(self, page: etree._Element) -> Article:
        id_text = _child_text(page, "id")
        try:
            page_id = int(id_text)
        except ValueError as e:
            raise ParseError(f"Invalid page id: {id_text!r}") from e

        title = _child_text(page, "title")

        revision = _require_child(page, "revision")
        body = _child_text(revision, "text")
        last_changed_at = parse_timestamp(_child_text(revision, "timestamp"))
        contributor = _require_child(revision, "contributor")
        last_changed_by = _child_text(contributor, "username")

        return Article(
            id=page_id,
            title=title,
            last_changed_at=last_changed_at,
            last_changed_by=last_changed_by,
            body=body,
        )
