"""HTML rendering of the markup AST.

Bold, italic, bold-italic and comment markers carry no open/close identity.
The renderer keeps one boolean per marker kind and flips it on every
occurrence, emitting the opening sequence on false→true and the closing
sequence on true→false. The four flags are independent, so irregular
interleaving such as ``'''a''b'''c''`` yields non-nested tags, exactly as
the markup itself reads.

Rendering never fails: template invocations, parameters and magic words
render to nothing, and so does any node kind without a handler.
"""

import html
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import quote

from wikireader.archive.models import Article
from wikireader.markup.nodes import (
    Bold,
    BoldItalic,
    Category,
    CharacterEntity,
    Comment,
    DefinitionList,
    EndTag,
    ExternalLink,
    Heading,
    HorizontalDivider,
    Image,
    Italic,
    Link,
    MagicWord,
    Node,
    OrderedList,
    Parameter,
    ParagraphBreak,
    Preformatted,
    Redirect,
    StartTag,
    Table,
    Tag,
    Template,
    Text,
    UnorderedList,
)
from wikireader.markup.parser import parse

ARTICLE_PATH = "/article/"
EXTERNAL_LINK_HREF = "#"


def article_href(target: str) -> str:
    """Return the viewer path of an article title."""
    return ARTICLE_PATH + quote(target.strip().replace(" ", "_"), safe=":/()',")


@dataclass
class FormattingState:
    """Open/closed state of the toggle markers during one render."""

    bold: bool = False
    italic: bool = False
    bold_italic: bool = False
    comment: bool = False


class HtmlRenderer:
    """Depth-first AST to HTML walker.

    One instance renders one document; create a new renderer per call.
    """

    def __init__(self) -> None:
        self.state = FormattingState()
        self._parts: list[str] = []
        self._handlers: dict[type, Callable] = {
            Text: self._text,
            Bold: self._bold,
            Italic: self._italic,
            BoldItalic: self._bold_italic,
            Comment: self._comment,
            Heading: self._heading,
            OrderedList: self._ordered_list,
            UnorderedList: self._unordered_list,
            DefinitionList: self._definition_list,
            Preformatted: self._preformatted,
            Table: self._table,
            StartTag: self._start_tag,
            EndTag: self._end_tag,
            Tag: self._tag,
            Link: self._link,
            ExternalLink: self._external_link,
            Image: self._image,
            Category: self._category,
            Redirect: self._redirect,
            CharacterEntity: self._character_entity,
            HorizontalDivider: self._horizontal_divider,
            ParagraphBreak: self._paragraph_break,
            Template: self._unsupported,
            Parameter: self._unsupported,
            MagicWord: self._unsupported,
        }

    @property
    def html(self) -> str:
        return "".join(self._parts)

    def render(self, nodes: list[Node]) -> str:
        """Render a node forest and return the accumulated HTML."""
        self.render_nodes(nodes)
        return self.html

    def render_nodes(self, nodes: list[Node]) -> None:
        for node in nodes:
            handler = self._handlers.get(type(node))
            if handler is not None:
                handler(node)

    def _emit(self, fragment: str) -> None:
        self._parts.append(fragment)

    def _text(self, node: Text) -> None:
        self._emit(node.value)

    def _bold(self, node: Bold) -> None:
        self._emit("</strong>" if self.state.bold else "<strong>")
        self.state.bold = not self.state.bold

    def _italic(self, node: Italic) -> None:
        self._emit("</em>" if self.state.italic else "<em>")
        self.state.italic = not self.state.italic

    def _bold_italic(self, node: BoldItalic) -> None:
        self._emit("</em></strong>" if self.state.bold_italic else "<strong><em>")
        self.state.bold_italic = not self.state.bold_italic

    def _comment(self, node: Comment) -> None:
        self._emit("-->" if self.state.comment else "<!--")
        self.state.comment = not self.state.comment

    def _heading(self, node: Heading) -> None:
        self._emit(f"<h{node.level}>")
        self.render_nodes(node.nodes)
        self._emit(f"</h{node.level}>")

    def _list_items(self, tag: str, items: list) -> None:
        self._emit(f"<{tag}>")
        for item in items:
            self._emit("<li>")
            self.render_nodes(item.nodes)
            self._emit("</li>")
        self._emit(f"</{tag}>")

    def _ordered_list(self, node: OrderedList) -> None:
        self._list_items("ol", node.items)

    def _unordered_list(self, node: UnorderedList) -> None:
        self._list_items("ul", node.items)

    def _definition_list(self, node: DefinitionList) -> None:
        self._emit("<dl>")
        for item in node.items:
            self.render_nodes(item.nodes)
        self._emit("</dl>")

    def _preformatted(self, node: Preformatted) -> None:
        self._emit("<pre>")
        self.render_nodes(node.nodes)
        self._emit("</pre>")

    def _open_with_attributes(self, tag: str, attributes: list[Node] | None) -> None:
        self._emit(f"<{tag}")
        if attributes:
            self._emit(" ")
            self.render_nodes(attributes)
        self._emit(">")

    def _table(self, node: Table) -> None:
        self._open_with_attributes("table", node.attributes)

        self._emit("<thead><tr>")
        for caption in node.captions:
            self._open_with_attributes("th", caption.attributes)
            self.render_nodes(caption.content)
            self._emit("</th>")
        self._emit("</tr></thead>")

        self._emit("<tbody>")
        for row in node.rows:
            self._open_with_attributes("tr", row.attributes)
            for cell in row.cells:
                self._open_with_attributes("td", cell.attributes)
                self.render_nodes(cell.content)
                self._emit("</td>")
            self._emit("</tr>")
        self._emit("</tbody></table>")

    def _start_tag(self, node: StartTag) -> None:
        self._emit(f"<{node.name}>")

    def _end_tag(self, node: EndTag) -> None:
        self._emit(f"</{node.name}>")

    def _tag(self, node: Tag) -> None:
        self._emit(f"<{node.name}>")
        self.render_nodes(node.nodes)
        self._emit(f"</{node.name}>")

    def _link(self, node: Link) -> None:
        self._emit(f'<a href="{html.escape(article_href(node.target))}">')
        self.render_nodes(node.text)
        self._emit("</a>")

    def _external_link(self, node: ExternalLink) -> None:
        self._emit(f'<a href="{EXTERNAL_LINK_HREF}">')
        self.render_nodes(node.nodes)
        self._emit("</a>")

    def _image(self, node: Image) -> None:
        self._emit(f'<figure><img src="{html.escape(node.target)}"/><figcaption>')
        self.render_nodes(node.text)
        self._emit("</figcaption></figure>")

    def _category(self, node: Category) -> None:
        href = html.escape(article_href(node.target))
        self._emit(f'<a class="category" href="{href}">{node.target}</a>')

    def _redirect(self, node: Redirect) -> None:
        self._emit(f'<a href="{html.escape(article_href(node.target))}">Redirect</a>')

    def _character_entity(self, node: CharacterEntity) -> None:
        self._emit(node.character)

    def _horizontal_divider(self, node: HorizontalDivider) -> None:
        self._emit("<hr/>")

    def _paragraph_break(self, node: ParagraphBreak) -> None:
        self._emit("<p/>")

    def _unsupported(self, node: Node) -> None:
        # Templates, parameters and magic words are not expanded
        pass


def render_markup(text: str) -> str:
    """Parse wikitext and render it to HTML."""
    return HtmlRenderer().render(parse(text))


def render_article_body(article: Article) -> str:
    """Render an article's body to HTML."""
    return render_markup(article.body)
