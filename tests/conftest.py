"""Pytest configuration and shared fixtures."""

import bz2
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from xml.sax.saxutils import escape

import pytest

from wikireader.archive.index import Index
from wikireader.archive.reader import ArchiveReader


def page_xml(
    page_id: int,
    title: str,
    text: str = "Body text.",
    timestamp: str = "2023-05-01T12:34:56Z",
    username: str = "Editor",
) -> str:
    """Build one ``<page>`` fragment shaped like a multistream dump record."""
    return (
        "  <page>\n"
        f"    <title>{escape(title)}</title>\n"
        "    <ns>0</ns>\n"
        f"    <id>{page_id}</id>\n"
        "    <revision>\n"
        f"      <id>{page_id * 1000}</id>\n"
        f"      <timestamp>{timestamp}</timestamp>\n"
        "      <contributor>\n"
        f"        <username>{username}</username>\n"
        f"        <id>{page_id + 7}</id>\n"
        "      </contributor>\n"
        '      <model>wikitext</model>\n'
        f'      <text bytes="{len(text)}" xml:space="preserve">{escape(text)}</text>\n'
        "    </revision>\n"
        "  </page>\n"
    )


@dataclass
class BuiltArchive:
    """Archive written to disk with the offset of each block."""

    path: Path
    offsets: list[int]


ArchiveFactory = Callable[[list[list[str]]], BuiltArchive]


@pytest.fixture
def archive_factory(tmp_path: Path) -> ArchiveFactory:
    """Return a factory writing one bzip2 stream per block of fragments."""

    def build(blocks: list[list[str]], name: str = "archive.xml.bz2") -> BuiltArchive:
        data = b""
        offsets = []
        for fragments in blocks:
            offsets.append(len(data))
            data += bz2.compress("".join(fragments).encode("utf-8"))
        path = tmp_path / name
        path.write_bytes(data)
        return BuiltArchive(path=path, offsets=offsets)

    return build


@pytest.fixture
def sample_archive(archive_factory: ArchiveFactory) -> BuiltArchive:
    """Two-block archive: pages 1 and 2 in the first block, page 3 in the second."""
    return archive_factory(
        [
            [
                page_xml(1, "Alpha", "'''Alpha''' is the first letter.", username="Ann"),
                page_xml(2, "Beta", "'''Beta''' follows [[Alpha]].", username="Bob"),
            ],
            [
                page_xml(3, "Gamma", "== History ==\nGamma & more.", username="Cy"),
            ],
        ]
    )


@pytest.fixture
def sample_index_text(sample_archive: BuiltArchive) -> str:
    """Index lines matching ``sample_archive``."""
    first, second = sample_archive.offsets
    return f"{first}:1:Alpha\n{first}:2:Beta\n{second}:3:Gamma\n"


@pytest.fixture
def sample_index_path(tmp_path: Path, sample_index_text: str) -> Path:
    path = tmp_path / "index.txt"
    path.write_text(sample_index_text, encoding="utf-8")
    return path


@pytest.fixture
def sample_index(sample_index_text: str) -> Index:
    return Index.load(sample_index_text)


@pytest.fixture
def sample_reader(sample_archive: BuiltArchive):
    """Open reader over ``sample_archive``; closed after the test."""
    reader = ArchiveReader.open(sample_archive.path)
    yield reader
    reader.close()


@pytest.fixture
def make_page() -> Callable[..., str]:
    """Return the ``<page>`` fragment builder."""
    return page_xml
