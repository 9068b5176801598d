"""Full-page HTML assembly for articles and search results."""

import html
from collections.abc import Sequence

from wikireader.archive.models import Article, IndexEntry
from wikireader.markup.renderer import article_href, render_article_body
from wikireader.utils.exceptions import ConfigurationError
from wikireader.web.resources import ResourceManager
from wikireader.web.template import render_template

ARTICLE_TEMPLATE = "article.html"
SEARCH_TEMPLATE = "search.html"


def _template(resources: ResourceManager, name: str) -> str:
    template = resources.find_template(name)
    if template is None:
        raise ConfigurationError(f"Page template not registered: {name}")
    return template


def render_article_page(resources: ResourceManager, article: Article) -> str:
    """Render an article into the article page shell.

    Raises:
        ConfigurationError: If the article template is not registered
    """
    return render_template(
        _template(resources, ARTICLE_TEMPLATE),
        {
            "title": html.escape(article.title),
            "body": render_article_body(article),
            "last_changed_at": article.last_changed_at.isoformat(),
            "last_changed_by": html.escape(article.last_changed_by),
        },
    )


def render_results_list(entries: Sequence[IndexEntry]) -> str:
    """Render search hits as an HTML list of article links."""
    items = "".join(
        f'<li><a href="{html.escape(article_href(entry.title))}">{html.escape(entry.title)}</a></li>'
        for entry in entries
    )
    return f'<ul class="results">{items}</ul>'


def render_results_page(
    resources: ResourceManager, query: str, entries: Sequence[IndexEntry]
) -> str:
    """Render prefix-search results into the search page shell.

    Raises:
        ConfigurationError: If the search template is not registered
    """
    return render_template(
        _template(resources, SEARCH_TEMPLATE),
        {
            "query": html.escape(query),
            "count": str(len(entries)),
            "results": render_results_list(entries),
        },
    )
