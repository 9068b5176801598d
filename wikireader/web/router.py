"""Routing of viewer URLs to index lookups, archive reads and page renders.

Three namespaces are served:

* ``/article/<title>`` renders an article (``_`` stands for a space)
* ``/search?q=<query>`` lists titles starting with the query
* ``/res/<name>`` serves a bundled resource
"""

import time
from dataclasses import dataclass
from enum import Enum
from urllib.parse import parse_qsl, unquote, urlsplit

import structlog

from wikireader.archive.index import Index
from wikireader.archive.reader import ArchiveReader
from wikireader.utils.exceptions import (
    ArticleNotFoundError,
    IncompletePathError,
    MissingParameterError,
    UnknownNamespaceError,
    WikiReaderError,
)
from wikireader.web.pages import render_article_page, render_results_page
from wikireader.web.resources import ResourceManager

logger = structlog.get_logger(__name__)

NOT_FOUND_BODY = b"not found"
SEARCH_PARAMETER = "q"


class UrlKind(Enum):
    RESOURCE = "res"
    ARTICLE = "article"
    SEARCH = "search"


@dataclass(frozen=True)
class ParsedUrl:
    kind: UrlKind
    value: str


@dataclass
class Response:
    """Response handed back to the viewer surface."""

    status: int
    mime_type: str
    body: bytes

    @classmethod
    def not_found(cls) -> "Response":
        return cls(status=404, mime_type="text/plain", body=NOT_FOUND_BODY)

    @classmethod
    def html(cls, page: str) -> "Response":
        return cls(status=200, mime_type="text/html", body=page.encode("utf-8"))


@dataclass
class StepTimings:
    """Per-step latencies of one article request in milliseconds."""

    locate_ms: int = 0
    extract_ms: int = 0
    render_ms: int = 0


def parse_url(url: str) -> ParsedUrl:
    """Parse a viewer URL or path.

    Args:
        url: Absolute URL (``local://wikireader/article/Foo``) or path
            (``/article/Foo``)

    Returns:
        Parsed namespace and percent-decoded value

    Raises:
        IncompletePathError: If the path lacks a namespace or its argument
        UnknownNamespaceError: If the namespace is not served
        MissingParameterError: If a search has no query parameter
    """
    parts = urlsplit(url)
    segments = parts.path.lstrip("/").split("/", 1)
    if not segments[0]:
        raise IncompletePathError(f"URL path is incomplete: {url}")

    namespace = unquote(segments[0])
    try:
        kind = UrlKind(namespace)
    except ValueError as e:
        raise UnknownNamespaceError(f"URL namespace not found: {namespace}") from e

    if kind is UrlKind.SEARCH:
        query = parse_qsl(parts.query, keep_blank_values=True)
        for name, value in query:
            if name == SEARCH_PARAMETER:
                return ParsedUrl(kind, value)
        if query:
            return ParsedUrl(kind, query[0][1])
        raise MissingParameterError(f"Missing query parameter: {SEARCH_PARAMETER}")

    if len(segments) < 2 or not segments[1]:
        raise IncompletePathError(f"URL path is incomplete: {url}")
    return ParsedUrl(kind, unquote(segments[1]))


class Router:
    """Dispatches viewer URLs against a loaded index and archive."""

    def __init__(self, index: Index, reader: ArchiveReader, resources: ResourceManager) -> None:
        self.index = index
        self.reader = reader
        self.resources = resources
        self.logger = logger.bind(component="router")

    def handle(self, url: str) -> Response:
        """Serve one request; every failure becomes a not-found response."""
        self.logger.info("handling_request", url=url)
        try:
            parsed = parse_url(url)
            if parsed.kind is UrlKind.ARTICLE:
                return self.article(parsed.value)
            if parsed.kind is UrlKind.SEARCH:
                return self.search(parsed.value)
            return self.resource(parsed.value)
        except WikiReaderError as e:
            self.logger.warning(
                "request_failed", url=url, error=e.message, error_type=type(e).__name__
            )
            return Response.not_found()

    def article(self, name: str) -> Response:
        """Render the article titled ``name``.

        Raises:
            ArticleNotFoundError: If no index entry has that title
        """
        start_time = time.perf_counter()
        timings = StepTimings()
        title = name.replace("_", " ")

        step_start = time.perf_counter()
        entry = self.index.find_exact(title)
        timings.locate_ms = int((time.perf_counter() - step_start) * 1000)
        if entry is None:
            raise ArticleNotFoundError(f"No article titled {title!r}")

        step_start = time.perf_counter()
        article = self.reader.get_article(entry)
        timings.extract_ms = int((time.perf_counter() - step_start) * 1000)

        step_start = time.perf_counter()
        page = render_article_page(self.resources, article)
        timings.render_ms = int((time.perf_counter() - step_start) * 1000)

        self.logger.info(
            "article_served",
            title=article.title,
            record_id=article.id,
            locate_ms=timings.locate_ms,
            extract_ms=timings.extract_ms,
            render_ms=timings.render_ms,
            latency_ms=int((time.perf_counter() - start_time) * 1000),
        )
        return Response.html(page)

    def search(self, query: str) -> Response:
        results = self.index.find_prefix(query)
        self.logger.info("search_served", query=query, results=len(results))
        return Response.html(render_results_page(self.resources, query, results))

    def resource(self, name: str) -> Response:
        resource = self.resources.find_resource(name)
        if resource is None:
            return Response.not_found()
        return Response(status=200, mime_type=resource.mime_type, body=resource.data)
