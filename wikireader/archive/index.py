"""Title index over a multistream archive.

The index file holds one ``byteOffset:recordId:title`` record per line.
Only the first two colons are structural; the title keeps any further
colons verbatim (``Category:Foo``, ``Star Wars: Episode IV``).

Building and querying are split across two types: :class:`IndexBuilder`
accumulates parsed entries, :meth:`IndexBuilder.build` freezes them into an
:class:`Index` that only supports lookups.
"""

import os
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, as_completed, wait
from pathlib import Path
from typing import TypeVar

import structlog

from wikireader.archive.models import IndexEntry
from wikireader.utils.exceptions import ArchiveIOError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

MAX_PREFIX_RESULTS = 100
DEFAULT_BATCH_SIZE = 50_000
SKIPPED_SAMPLE_SIZE = 5


def parse_index_line(line: str) -> IndexEntry | None:
    """Parse one index line.

    Args:
        line: ``byteOffset:recordId:title`` without the line terminator

    Returns:
        Parsed entry, or None if the line is malformed
    """
    first = line.find(":")
    if first < 0:
        return None
    second = line.find(":", first + 1)
    if second < 0:
        return None

    offset_text = line[:first]
    record_id_text = line[first + 1 : second]
    if not (offset_text.isascii() and offset_text.isdigit()):
        return None
    if not (record_id_text.isascii() and record_id_text.isdigit()):
        return None

    return IndexEntry(
        byte_offset=int(offset_text),
        record_id=int(record_id_text),
        title=line[second + 1 :],
    )


def _parse_batch(start: int, lines: Sequence[str]) -> tuple[list[IndexEntry], list[int]]:
    """Parse a batch of lines.

    Returns:
        Tuple of (entries, 1-based line numbers of malformed lines)
    """
    entries = []
    malformed = []
    for offset, line in enumerate(lines):
        if not line.strip():
            continue
        entry = parse_index_line(line)
        if entry is None:
            malformed.append(start + offset + 1)
        else:
            entries.append(entry)
    return entries, malformed


def _batches(items: Sequence[T], size: int) -> Iterable[tuple[int, Sequence[T]]]:
    for start in range(0, len(items), size):
        yield start, items[start : start + size]


def _titles_equal(title: str, name: str) -> bool:
    if len(title) != len(name):
        return False
    for left, right in zip(title, name):
        if left != right and left.lower() != right.lower():
            return False
    return True


def _title_starts_with(title: str, prefix: str) -> bool:
    if len(title) < len(prefix):
        return False
    for left, right in zip(title, prefix):
        if left != right and left.lower() != right.lower():
            return False
    return True


class IndexBuilder:
    """Mutable accumulator producing a frozen :class:`Index`.

    Malformed lines never abort a load: they are skipped, counted in
    ``skipped_lines`` and reported in a single warning per :meth:`feed`.
    Blank lines are ignored without being counted.
    """

    def __init__(self, workers: int | None = None, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        """Initialize the builder.

        Args:
            workers: Thread pool size (defaults to the CPU count)
            batch_size: Number of lines per parsing task
        """
        self.workers = workers or os.cpu_count() or 1
        self.batch_size = batch_size
        self.skipped_lines = 0
        self._entries: list[IndexEntry] = []
        self.logger = logger.bind(component="index_builder")

    def feed(self, raw_text: str) -> "IndexBuilder":
        """Parse index text and append its entries.

        Args:
            raw_text: Full index text (one record per line)

        Returns:
            The builder itself, for chaining
        """
        lines = raw_text.splitlines()
        batches = list(_batches(lines, self.batch_size))
        malformed: list[int] = []

        if len(batches) <= 1 or self.workers == 1:
            results = [_parse_batch(start, batch) for start, batch in batches]
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as executor:
                results = list(executor.map(lambda b: _parse_batch(*b), batches))

        for entries, bad_lines in results:
            self._entries.extend(entries)
            malformed.extend(bad_lines)

        if malformed:
            self.skipped_lines += len(malformed)
            self.logger.warning(
                "malformed_index_lines_skipped",
                count=len(malformed),
                sample_line_numbers=malformed[:SKIPPED_SAMPLE_SIZE],
            )

        return self

    def build(self) -> "Index":
        """Freeze the accumulated entries into a read-only index."""
        return Index(tuple(self._entries), workers=self.workers, batch_size=self.batch_size)


class Index:
    """Read-only flat index with parallel linear-scan lookups."""

    def __init__(
        self,
        entries: tuple[IndexEntry, ...],
        workers: int | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self._entries = entries
        self.workers = workers or os.cpu_count() or 1
        self.batch_size = batch_size

    @classmethod
    def load(cls, raw_text: str, workers: int | None = None) -> "Index":
        """Build an index from raw index text."""
        return IndexBuilder(workers=workers).feed(raw_text).build()

    @classmethod
    def from_file(cls, path: str | Path, workers: int | None = None) -> "Index":
        """Build an index from an index file.

        Raises:
            ArchiveIOError: If the file cannot be read or is not UTF-8
        """
        path = Path(path)
        log = logger.bind(component="index", path=str(path))
        log.info("loading_index")
        try:
            raw_text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ArchiveIOError(f"Cannot read index file {path}: {e}") from e

        index = cls.load(raw_text, workers=workers)
        log.info("index_loaded", entries=index.size())
        return index

    @property
    def entries(self) -> tuple[IndexEntry, ...]:
        return self._entries

    def size(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def find_prefix(self, query: str) -> list[IndexEntry]:
        """Find entries whose title starts with ``query``, ignoring case.

        At most 100 entries are returned: the first matches in index order,
        then sorted by title length so that short, general titles come
        before long disambiguated ones. Equal-length titles keep index order.

        Args:
            query: Title prefix

        Returns:
            Matching entries, shortest titles first
        """
        query = query.lower()

        def scan(batch: Sequence[IndexEntry]) -> list[IndexEntry]:
            found = []
            for entry in batch:
                if _title_starts_with(entry.title, query):
                    found.append(entry)
                    if len(found) >= MAX_PREFIX_RESULTS:
                        break
            return found

        matches: list[IndexEntry] = []
        for found in self._map_batches(scan):
            matches.extend(found)
            if len(matches) >= MAX_PREFIX_RESULTS:
                break

        results = matches[:MAX_PREFIX_RESULTS]
        results.sort(key=lambda entry: len(entry.title))
        return results

    def find_exact(self, name: str) -> IndexEntry | None:
        """Find an entry whose title equals ``name``, ignoring case.

        When several titles match, the one returned is whichever a worker
        finds first.

        Args:
            name: Full title

        Returns:
            Matching entry or None
        """

        def scan(batch: Sequence[IndexEntry]) -> IndexEntry | None:
            for entry in batch:
                if _titles_equal(entry.title, name):
                    return entry
            return None

        if len(self._entries) <= self.batch_size or self.workers == 1:
            return scan(self._entries)

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            pending = {
                executor.submit(scan, batch) for _, batch in _batches(self._entries, self.batch_size)
            }
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    entry = future.result()
                    if entry is not None:
                        for other in pending:
                            other.cancel()
                        return entry
        return None

    def _map_batches(self, scan: Callable[[Sequence[IndexEntry]], T]) -> list[T]:
        """Run ``scan`` over every batch, results in index order."""
        if len(self._entries) <= self.batch_size or self.workers == 1:
            return [scan(self._entries)]

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = {
                executor.submit(scan, batch): start
                for start, batch in _batches(self._entries, self.batch_size)
            }
            results = {futures[future]: future.result() for future in as_completed(futures)}
        return [results[start] for start in sorted(results)]
