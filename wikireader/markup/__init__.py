"""Wikitext parsing and HTML rendering."""

from wikireader.markup.parser import parse
from wikireader.markup.renderer import HtmlRenderer, render_article_body, render_markup

__all__ = ["HtmlRenderer", "parse", "render_article_body", "render_markup"]
