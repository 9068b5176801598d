"""Wikitext to markup AST.

The grammar is mwparserfromhell's. Its tree is flat at the top level: list
markers, dividers and tables arrive as tags at the start of a line, while
paragraph breaks and indented lines are plain text. The mapping below walks
that tree line by line to rebuild block structure, and splits apostrophe
runs inside text into bold/italic toggle markers (style tags are skipped
when parsing so that unbalanced quotes never reshape the tree).

Nothing here raises: markup the grammar rejects comes back as text.
"""

import re
from collections.abc import Sequence

import mwparserfromhell  # type: ignore[import-untyped]
from mwparserfromhell import nodes as wiki  # type: ignore[import-untyped]
from mwparserfromhell.wikicode import Wikicode  # type: ignore[import-untyped]

from wikireader.markup.nodes import (
    Bold,
    BoldItalic,
    Category,
    CharacterEntity,
    Comment,
    DefinitionList,
    DefinitionListItem,
    EndTag,
    ExternalLink,
    Heading,
    HorizontalDivider,
    Image,
    Italic,
    Link,
    ListItem,
    MagicWord,
    Node,
    OrderedList,
    Parameter,
    ParagraphBreak,
    Preformatted,
    Redirect,
    StartTag,
    Table,
    TableCaption,
    TableCell,
    TableRow,
    Tag,
    Template,
    Text,
    UnorderedList,
)

# Tags whose body is kept verbatim
RAW_TAGS = frozenset(
    {
        "chem",
        "ce",
        "gallery",
        "graph",
        "hiero",
        "imagemap",
        "inputbox",
        "mapframe",
        "maplink",
        "math",
        "nowiki",
        "pre",
        "score",
        "source",
        "syntaxhighlight",
        "templatedata",
        "timeline",
    }
)

# Tags that never have a body
VOID_TAGS = frozenset({"br", "hr", "img", "wbr"})

MAGIC_WORDS = frozenset(
    {
        "DISAMBIG",
        "EXPECTUNUSEDCATEGORY",
        "FORCETOC",
        "HIDDENCAT",
        "INDEX",
        "NEWSECTIONLINK",
        "NOCC",
        "NOCONTENTCONVERT",
        "NOEDITSECTION",
        "NOGALLERY",
        "NOINDEX",
        "NONEWSECTIONLINK",
        "NOTC",
        "NOTITLECONVERT",
        "NOTOC",
        "STATICREDIRECT",
        "TOC",
    }
)

IMAGE_NAMESPACES = ("file", "image")
CATEGORY_NAMESPACE = "category"

# Image options that are never a caption
IMAGE_OPTIONS = frozenset(
    {
        "baseline",
        "border",
        "bottom",
        "center",
        "frame",
        "frameless",
        "framed",
        "left",
        "middle",
        "none",
        "right",
        "sub",
        "super",
        "text-bottom",
        "text-top",
        "thumb",
        "thumbnail",
        "top",
        "upright",
    }
)
IMAGE_OPTION_RE = re.compile(
    r"^(?:\d*x?\d+px|upright\s*=?\s*[\d.]*|(?:alt|link|lang|page|class|thumb|thumbnail)\s*=.*)$",
    re.IGNORECASE | re.DOTALL,
)

LIST_MARKERS = ("*", "#", ":", ";")
LIST_KIND = {"*": UnorderedList, "#": OrderedList, ":": DefinitionList, ";": DefinitionList}

TEXT_MARKUP_RE = re.compile(r"'{2,}|__([A-Z]+)__")
LINK_TRAIL_RE = re.compile(r"[a-z]+")
REDIRECT_RE = re.compile(
    r"[ \t\n]*#redirect[ \t]*:?[ \t]*\[\[([^\[\]|\n]+)(?:\|[^\[\]\n]*)?\]\]", re.IGNORECASE
)


def parse(text: str) -> list[Node]:
    """Parse wikitext into a list of AST nodes in document order."""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    nodes: list[Node] = []

    redirect = REDIRECT_RE.match(text)
    if redirect is not None:
        nodes.append(Redirect(redirect.group(1).strip()))
        text = text[redirect.end() :]

    wikicode = mwparserfromhell.parse(text, skip_style_tags=True)
    nodes.extend(_blocks(wikicode.nodes))
    return _merge_text(nodes)


def _merge_text(nodes: list[Node]) -> list[Node]:
    merged: list[Node] = []
    for node in nodes:
        if isinstance(node, Text):
            if not node.value:
                continue
            if merged and isinstance(merged[-1], Text):
                merged[-1] = Text(merged[-1].value + node.value)
                continue
        merged.append(node)
    return merged


def _strip_edges(nodes: list[Node]) -> list[Node]:
    if nodes and isinstance(nodes[0], Text):
        stripped = nodes[0].value.lstrip()
        nodes = ([Text(stripped)] if stripped else []) + nodes[1:]
    if nodes and isinstance(nodes[-1], Text):
        stripped = nodes[-1].value.rstrip()
        nodes = nodes[:-1] + ([Text(stripped)] if stripped else [])
    return nodes


def _trimmed(nodes: Sequence[wiki.Node]) -> list[wiki.Node]:
    """Drop whitespace around a run of grammar nodes."""
    trimmed = list(nodes)
    while trimmed and isinstance(trimmed[0], wiki.Text) and not trimmed[0].value.strip():
        trimmed.pop(0)
    while trimmed and isinstance(trimmed[-1], wiki.Text) and not trimmed[-1].value.strip():
        trimmed.pop()
    if trimmed and isinstance(trimmed[0], wiki.Text):
        trimmed[0] = wiki.Text(trimmed[0].value.lstrip())
    if trimmed and isinstance(trimmed[-1], wiki.Text):
        trimmed[-1] = wiki.Text(trimmed[-1].value.rstrip())
    return trimmed


def _tag_name(node: wiki.Tag) -> str:
    return str(node.tag).strip().lower()


def _is_blank(node: wiki.Node) -> bool:
    return isinstance(node, wiki.Text) and not node.value.strip()


def _is_list_marker(node: wiki.Node) -> bool:
    return isinstance(node, wiki.Tag) and node.wiki_markup in LIST_MARKERS


def _is_block_tag(node: wiki.Node) -> bool:
    return (
        isinstance(node, wiki.Tag)
        and node.wiki_markup is not None
        and _tag_name(node) in ("hr", "table")
    )


# Inline content


def _apostrophes(count: int) -> list[Node]:
    if count == 2:
        return [Italic()]
    if count == 3:
        return [Bold()]
    if count == 4:
        # The first apostrophe is literal
        return [Text("'"), Bold()]
    if count == 5:
        return [BoldItalic()]
    return [Text("'" * (count - 5)), BoldItalic()]


def _text(value: str) -> list[Node]:
    """Split plain text into runs, toggle markers and magic words."""
    nodes: list[Node] = []
    last = 0
    for match in TEXT_MARKUP_RE.finditer(value):
        word = match.group(1)
        if word is not None and word not in MAGIC_WORDS:
            continue
        nodes.append(Text(value[last : match.start()]))
        if word is not None:
            nodes.append(MagicWord(word))
        else:
            nodes.extend(_apostrophes(len(match.group())))
        last = match.end()
    nodes.append(Text(value[last:]))
    return _merge_text(nodes)


def _inline(nodes: Sequence[wiki.Node]) -> list[Node]:
    """Map a run of grammar nodes that carries no block structure."""
    result: list[Node] = []
    i = 0
    while i < len(nodes):
        node = nodes[i]
        i += 1
        if not isinstance(node, wiki.Wikilink):
            result.extend(_inline_node(node))
            continue

        link = _wikilink(node)
        following = nodes[i] if i < len(nodes) else None
        trail = (
            LINK_TRAIL_RE.match(following.value)
            if isinstance(link, Link) and isinstance(following, wiki.Text)
            else None
        )
        if trail is None:
            result.append(link)
            continue
        link.text = _merge_text([*link.text, Text(trail.group())])
        result.append(link)
        result.extend(_text(following.value[trail.end() :]))
        i += 1
    return _merge_text(result)


def _inline_node(node: wiki.Node) -> list[Node]:
    if isinstance(node, wiki.Text):
        return _text(node.value)
    if isinstance(node, wiki.Comment):
        return [Comment(), Text(node.contents), Comment()]
    if isinstance(node, wiki.HTMLEntity):
        return [CharacterEntity(node.normalize())]
    if isinstance(node, wiki.Template):
        return [Template(str(node.name).strip(), [str(param) for param in node.params])]
    if isinstance(node, wiki.Argument):
        default = str(node.default) if node.default is not None else None
        return [Parameter(str(node.name).strip(), default)]
    if isinstance(node, wiki.Wikilink):
        return [_wikilink(node)]
    if isinstance(node, wiki.ExternalLink):
        return _external_link(node)
    if isinstance(node, wiki.Heading):
        return [_heading(node)]
    if isinstance(node, wiki.Tag):
        return _tag(node)
    return [Text(str(node))]


def _is_image_option(part: str) -> bool:
    stripped = part.strip()
    return stripped.lower() in IMAGE_OPTIONS or IMAGE_OPTION_RE.match(stripped) is not None


def _wikilink(node: wiki.Wikilink) -> Link | Image | Category:
    target = str(node.title).strip()
    if target.startswith(":"):
        target = target[1:].strip()
        namespace = ""
    else:
        namespace = target.split(":", 1)[0].strip().lower() if ":" in target else ""

    if namespace in IMAGE_NAMESPACES:
        return Image(target, _image_caption(node.text))
    if namespace == CATEGORY_NAMESPACE:
        return Category(target)

    text = _strip_edges(_inline(node.text.nodes)) if node.text is not None else []
    return Link(target, text or [Text(target)])


def _image_caption(text: Wikicode | None) -> list[Node]:
    """Return the last pipe-separated part of an image link unless it is an option."""
    if text is None:
        return []

    parts: list[list[wiki.Node]] = [[]]
    for node in text.nodes:
        if isinstance(node, wiki.Text) and "|" in node.value:
            first, *rest = node.value.split("|")
            parts[-1].append(wiki.Text(first))
            parts.extend([wiki.Text(value)] for value in rest)
        else:
            parts[-1].append(node)

    caption = parts[-1]
    if _is_image_option("".join(str(node) for node in caption)):
        return []
    return _strip_edges(_inline(caption))


def _external_link(node: wiki.ExternalLink) -> list[Node]:
    url = str(node.url)
    if not node.brackets:
        return [Text(url)]
    label = _strip_edges(_inline(node.title.nodes)) if node.title is not None else []
    return [ExternalLink(url, label or [Text(url)])]


def _heading(node: wiki.Heading) -> Heading:
    return Heading(node.level, _strip_edges(_inline(node.title.nodes)))


def _tag(node: wiki.Tag) -> list[Node]:
    name = _tag_name(node)
    if _is_block_tag(node):
        return [_block_node(node)]
    if node.wiki_markup is not None:
        # List or table markup away from its usual place keeps only its content
        return _inline(node.contents.nodes)
    if name in VOID_TAGS:
        # </br> is kept as a stray closing tag
        return [EndTag(name)] if node.invalid else [StartTag(name)]
    if name in RAW_TAGS:
        body = str(node.contents)
        return [Tag(name, [Text(body)] if body else [])]
    if node.self_closing:
        return [Tag(name)]

    contents = node.contents.nodes
    if "\n" in str(node.contents):
        return [Tag(name, _blocks(_trimmed(contents)))]
    return [Tag(name, _inline(contents))]


# Block structure


def _lines(nodes: Sequence[wiki.Node]) -> list[list[wiki.Node]]:
    """Group nodes into source lines; nodes spanning lines stay whole."""
    lines: list[list[wiki.Node]] = [[]]
    for node in nodes:
        if not (isinstance(node, wiki.Text) and "\n" in node.value):
            lines[-1].append(node)
            continue
        first, *rest = node.value.split("\n")
        if first:
            lines[-1].append(wiki.Text(first))
        for value in rest:
            lines.append([wiki.Text(value)] if value else [])
    return lines


def _line_kind(line: list[wiki.Node]) -> str:
    if all(_is_blank(node) for node in line):
        return "blank"
    first = line[0]
    if _is_list_marker(first):
        return "list"
    if isinstance(first, wiki.Heading) or _is_block_tag(first):
        return "block"
    if _is_blank(first) and _is_block_tag(line[1]):
        return "block"
    if isinstance(first, wiki.Text) and first.value.startswith(" "):
        return "preformatted"
    return "paragraph"


def _blocks(nodes: Sequence[wiki.Node]) -> list[Node]:
    """Map grammar nodes spanning several lines, grouping lines into blocks."""
    lines = _lines(nodes)
    kinds = [_line_kind(line) for line in lines]
    result: list[Node] = []
    in_paragraph = False
    i = 0

    while i < len(lines):
        kind = kinds[i]

        if kind == "blank":
            while i < len(lines) and kinds[i] == "blank":
                i += 1
            if in_paragraph and i < len(lines):
                result.append(ParagraphBreak())
            in_paragraph = False
            continue

        if kind == "list":
            entries: list[tuple[str, list[Node]]] = []
            while i < len(lines) and kinds[i] == "list":
                entries.extend(_list_entries(lines[i]))
                i += 1
            result.extend(_build_lists(entries, 0))
            in_paragraph = False
            continue

        if kind == "preformatted":
            content: list[Node] = []
            while i < len(lines) and kinds[i] == "preformatted":
                if content:
                    content.append(Text("\n"))
                first, *rest = lines[i]
                content.extend(_inline([wiki.Text(first.value[1:]), *rest]))
                i += 1
            result.append(Preformatted(_merge_text(content)))
            in_paragraph = False
            continue

        line = lines[i]
        i += 1
        if kind == "block":
            start = 1 if _is_blank(line[0]) else 0
            result.append(_block_node(line[start]))
            result.extend(_strip_edges(_inline(line[start + 1 :])))
            in_paragraph = False
            continue

        inline = _inline(line)
        if in_paragraph:
            result.append(Text("\n"))
        result.extend(inline)
        in_paragraph = in_paragraph or bool(inline)

    return _merge_text(result)


def _block_node(node: wiki.Node) -> Node:
    if isinstance(node, wiki.Heading):
        return _heading(node)
    if _tag_name(node) == "hr":
        return HorizontalDivider()
    return _table(node)


# Lists


def _split_definition_term(nodes: list[Node]) -> tuple[list[Node], list[Node]] | None:
    """Split ``;term : details`` at the first top-level colon."""
    for index, node in enumerate(nodes):
        if isinstance(node, Text) and ":" in node.value:
            before, after = node.value.split(":", 1)
            term = [*nodes[:index], Text(before)]
            details = [Text(after), *nodes[index + 1 :]]
            return _strip_edges(_merge_text(term)), _strip_edges(_merge_text(details))
    return None


def _list_entries(line: list[wiki.Node]) -> list[tuple[str, list[Node]]]:
    """Return (prefix, nodes) for a list line; ``;term:details`` yields two entries."""
    prefix = ""
    i = 0
    while i < len(line) and _is_list_marker(line[i]):
        prefix += line[i].wiki_markup
        i += 1
    content = line[i:]

    if prefix.endswith(";"):
        for j, node in enumerate(content):
            if _is_list_marker(node) and node.wiki_markup == ":":
                return [
                    (prefix, _strip_edges(_inline(content[:j]))),
                    (prefix[:-1] + ":", _strip_edges(_inline(content[j + 1 :]))),
                ]
        split = _split_definition_term(_inline(content))
        if split is not None:
            term, details = split
            return [(prefix, term), (prefix[:-1] + ":", details)]

    return [(prefix, _strip_edges(_inline(content)))]


def _list_item(list_char: str, nodes: list[Node]) -> ListItem | DefinitionListItem:
    if list_char == ";":
        return DefinitionListItem("term", nodes)
    if list_char == ":":
        return DefinitionListItem("details", nodes)
    return ListItem(nodes)


def _build_lists(entries: list[tuple[str, list[Node]]], depth: int) -> list[Node]:
    """Nest list lines by their prefix characters.

    Args:
        entries: (prefix, nodes) per list line; every prefix is longer
            than ``depth``
        depth: Prefix position deciding the list kind at this level
    """
    lists: list[Node] = []
    i = 0
    while i < len(entries):
        kind = LIST_KIND[entries[i][0][depth]]
        group = []
        while i < len(entries) and LIST_KIND[entries[i][0][depth]] is kind:
            group.append(entries[i])
            i += 1

        items: list = []
        j = 0
        while j < len(group):
            prefix, nodes = group[j]
            if len(prefix) == depth + 1:
                items.append(_list_item(prefix[depth], list(nodes)))
                j += 1
                continue

            nested = []
            while j < len(group) and len(group[j][0]) > depth + 1:
                nested.append(group[j])
                j += 1
            if not items:
                items.append(_list_item(prefix[depth], []))
            items[-1].nodes.extend(_build_lists(nested, depth + 1))

        lists.append(kind(items))
    return lists


# Tables


def _attributes(node: wiki.Tag) -> list[Node] | None:
    text = "".join(str(attribute) for attribute in node.attributes).strip()
    return [Text(text)] if text else None


def _cell_content(node: wiki.Tag) -> list[Node]:
    return _strip_edges(_blocks(_trimmed(node.contents.nodes)))


def _table(node: wiki.Tag) -> Table:
    """Map a ``{| ... |}`` tag; cells before the first ``|-`` form an implicit row."""
    table = Table(attributes=_attributes(node) or [])
    stray: list[wiki.Node] = []

    def current_row() -> TableRow:
        if not table.rows:
            table.rows.append(TableRow([], []))
        return table.rows[-1]

    def flush_stray() -> None:
        content = _strip_edges(_inline(stray))
        stray.clear()
        if content:
            current_row().cells.append(TableCell(None, content))

    for child in node.contents.nodes:
        name = _tag_name(child) if isinstance(child, wiki.Tag) else None
        if name not in ("caption", "tr", "td", "th"):
            if not _is_blank(child):
                stray.append(child)
            continue

        flush_stray()
        if name == "caption":
            table.captions.append(TableCaption(_attributes(child), _cell_content(child)))
        elif name == "tr":
            row = TableRow(_attributes(child) or [], [])
            table.rows.append(row)
            for cell in child.contents.nodes:
                if isinstance(cell, wiki.Tag) and _tag_name(cell) in ("td", "th"):
                    flush_stray()
                    row.cells.append(TableCell(_attributes(cell), _cell_content(cell)))
                elif not _is_blank(cell):
                    stray.append(cell)
            flush_stray()
        else:
            current_row().cells.append(TableCell(_attributes(child), _cell_content(child)))

    flush_stray()
    return table
