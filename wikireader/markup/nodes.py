"""Markup AST node types.

An article body parses into a forest of these nodes in document order.
Inline formatting (bold, italic, bold-italic) and comments are represented
by marker nodes, not by open/close pairs: whether a marker opens or closes
is decided by the renderer from the parity of its occurrences.
"""

from dataclasses import dataclass, field
from typing import Literal, Union


@dataclass
class Text:
    value: str


@dataclass
class Bold:
    pass


@dataclass
class Italic:
    pass


@dataclass
class BoldItalic:
    pass


@dataclass
class Comment:
    """Start or end of an HTML comment; the comment body follows as text."""


@dataclass
class Heading:
    level: int
    nodes: list["Node"] = field(default_factory=list)


@dataclass
class ListItem:
    nodes: list["Node"] = field(default_factory=list)


@dataclass
class OrderedList:
    items: list[ListItem] = field(default_factory=list)


@dataclass
class UnorderedList:
    items: list[ListItem] = field(default_factory=list)


@dataclass
class DefinitionListItem:
    kind: Literal["term", "details"]
    nodes: list["Node"] = field(default_factory=list)


@dataclass
class DefinitionList:
    items: list[DefinitionListItem] = field(default_factory=list)


@dataclass
class Preformatted:
    nodes: list["Node"] = field(default_factory=list)


@dataclass
class TableCaption:
    attributes: list["Node"] | None
    content: list["Node"] = field(default_factory=list)


@dataclass
class TableCell:
    attributes: list["Node"] | None
    content: list["Node"] = field(default_factory=list)


@dataclass
class TableRow:
    attributes: list["Node"] = field(default_factory=list)
    cells: list[TableCell] = field(default_factory=list)


@dataclass
class Table:
    attributes: list["Node"] = field(default_factory=list)
    captions: list[TableCaption] = field(default_factory=list)
    rows: list[TableRow] = field(default_factory=list)


@dataclass
class StartTag:
    name: str


@dataclass
class EndTag:
    name: str


@dataclass
class Tag:
    """Paired tag (``<ref>``, ``<span>``, ...) with its body."""

    name: str
    nodes: list["Node"] = field(default_factory=list)


@dataclass
class Link:
    target: str
    text: list["Node"] = field(default_factory=list)


@dataclass
class ExternalLink:
    url: str
    nodes: list["Node"] = field(default_factory=list)


@dataclass
class Image:
    target: str
    text: list["Node"] = field(default_factory=list)


@dataclass
class Category:
    target: str


@dataclass
class Redirect:
    target: str


@dataclass
class CharacterEntity:
    character: str


@dataclass
class HorizontalDivider:
    pass


@dataclass
class ParagraphBreak:
    pass


@dataclass
class Template:
    """Template invocation, kept unexpanded."""

    name: str
    parameters: list[str] = field(default_factory=list)


@dataclass
class Parameter:
    """Template parameter reference (``{{{name|default}}}``), kept unexpanded."""

    name: str
    default: str | None = None


@dataclass
class MagicWord:
    """Behavior switch such as ``__NOTOC__``."""

    name: str


Node = Union[
    Text,
    Bold,
    Italic,
    BoldItalic,
    Comment,
    Heading,
    OrderedList,
    UnorderedList,
    DefinitionList,
    Preformatted,
    Table,
    StartTag,
    EndTag,
    Tag,
    Link,
    ExternalLink,
    Image,
    Category,
    Redirect,
    CharacterEntity,
    HorizontalDivider,
    ParagraphBreak,
    Template,
    Parameter,
    MagicWord,
]
