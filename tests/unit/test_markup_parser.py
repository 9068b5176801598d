"""Unit tests for the wikitext parser."""

import pytest

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
from wikireader.markup.parser import parse


class TestInlineFormatting:
    """Test apostrophe markers."""

    def test_bold_markers(self) -> None:
        """Test that bold is a pair of markers around text."""
        assert parse("'''bold''' normal") == [Bold(), Text("bold"), Bold(), Text(" normal")]

    def test_italic_markers(self) -> None:
        assert parse("''it''") == [Italic(), Text("it"), Italic()]

    def test_bold_italic_markers(self) -> None:
        assert parse("'''''both'''''") == [BoldItalic(), Text("both"), BoldItalic()]

    def test_four_apostrophes(self) -> None:
        """Test that the first of four apostrophes is literal."""
        assert parse("''''x'''") == [Text("'"), Bold(), Text("x"), Bold()]

    def test_more_than_five_apostrophes(self) -> None:
        """Test that apostrophes beyond five are literal."""
        assert parse("'''''''x") == [Text("''"), BoldItalic(), Text("x")]

    def test_single_apostrophe_is_text(self) -> None:
        assert parse("don't") == [Text("don't")]

    def test_irregular_interleaving_is_kept_flat(self) -> None:
        """Test that overlapping markers are emitted in document order."""
        assert parse("'''a''b'''c''") == [
            Bold(),
            Text("a"),
            Italic(),
            Text("b"),
            Bold(),
            Text("c"),
            Italic(),
        ]


class TestComments:
    """Test HTML comment markers."""

    def test_comment_markers_wrap_body(self) -> None:
        assert parse("a<!-- hidden -->b") == [
            Text("a"),
            Comment(),
            Text(" hidden "),
            Comment(),
            Text("b"),
        ]

    def test_unterminated_comment_is_text(self) -> None:
        assert parse("a<!-- open") == [Text("a<!-- open")]

    def test_comment_spanning_lines(self) -> None:
        """Test that a comment is consumed across line breaks."""
        nodes = parse("<!-- one\n\ntwo -->after")
        assert nodes == [Comment(), Text(" one\n\ntwo "), Comment(), Text("after")]


class TestTemplatesAndParameters:
    """Test brace constructs."""

    def test_template_with_arguments(self) -> None:
        assert parse("{{cite web|url=x|title=y}}") == [
            Template("cite web", ["url=x", "title=y"])
        ]

    def test_template_argument_with_piped_link(self) -> None:
        """Test that pipes inside links do not split arguments."""
        assert parse("{{a|[[b|c]]}}") == [Template("a", ["[[b|c]]"])]

    def test_nested_templates(self) -> None:
        assert parse("{{outer|{{inner|x}}}}") == [Template("outer", ["{{inner|x}}"])]

    def test_parameter_with_default(self) -> None:
        assert parse("{{{1|fallback}}}") == [Parameter("1", "fallback")]

    def test_parameter_without_default(self) -> None:
        assert parse("{{{name}}}") == [Parameter("name", None)]

    def test_parameter_inside_template(self) -> None:
        """Test that three closing braces close the parameter first."""
        assert parse("{{a|{{{1}}}}}") == [Template("a", ["{{{1}}}"])]

    def test_multiline_template(self) -> None:
        nodes = parse("{{Infobox\n| name = X\n}}\nText")
        assert nodes[0] == Template("Infobox", [" name = X\n"])
        assert nodes[-1] == Text("\nText")

    def test_unclosed_braces_are_text(self) -> None:
        assert parse("{{abc") == [Text("{{abc")]

    def test_magic_word(self) -> None:
        assert parse("__NOTOC__") == [MagicWord("NOTOC")]

    def test_unknown_magic_word_is_text(self) -> None:
        assert parse("__FOO__") == [Text("__FOO__")]


class TestLinks:
    """Test internal, external, image and category links."""

    def test_plain_link(self) -> None:
        assert parse("[[Alpha]]") == [Link("Alpha", [Text("Alpha")])]

    def test_piped_link(self) -> None:
        assert parse("[[Alpha|the letter]]") == [Link("Alpha", [Text("the letter")])]

    def test_link_trail(self) -> None:
        """Test that trailing letters join the link text."""
        assert parse("[[Alpha]]bet.") == [Link("Alpha", [Text("Alphabet")]), Text(".")]

    def test_link_with_formatted_text(self) -> None:
        assert parse("[[A|''x'']]") == [Link("A", [Italic(), Text("x"), Italic()])]

    def test_category(self) -> None:
        assert parse("[[Category:Greek letters]]") == [Category("Category:Greek letters")]

    def test_leading_colon_forces_plain_link(self) -> None:
        assert parse("[[:Category:Greek letters]]") == [
            Link("Category:Greek letters", [Text("Category:Greek letters")])
        ]

    def test_image_caption_skips_options(self) -> None:
        nodes = parse("[[File:Example.jpg|thumb|200px|A ''nice'' picture]]")
        assert nodes == [
            Image(
                "File:Example.jpg",
                [Text("A "), Italic(), Text("nice"), Italic(), Text(" picture")],
            )
        ]

    def test_image_without_caption(self) -> None:
        assert parse("[[Image:X.png|thumb|left]]") == [Image("Image:X.png", [])]

    def test_external_link_with_label(self) -> None:
        assert parse("[https://example.org Example site]") == [
            ExternalLink("https://example.org", [Text("Example site")])
        ]

    def test_external_link_without_label(self) -> None:
        assert parse("[https://example.org]") == [
            ExternalLink("https://example.org", [Text("https://example.org")])
        ]

    def test_single_bracket_without_url_is_text(self) -> None:
        assert parse("[not a link]") == [Text("[not a link]")]

    def test_unclosed_link_is_text(self) -> None:
        assert parse("[[Alpha") == [Text("[[Alpha")]

    def test_bare_url_is_text(self) -> None:
        assert parse("see https://example.org now") == [Text("see https://example.org now")]


class TestEntitiesAndTags:
    """Test character entities, HTML tags and extension tags."""

    @pytest.mark.parametrize(
        ("source", "character"),
        [("&amp;", "&"), ("&nbsp;", "\xa0"), ("&#65;", "A"), ("&#x263A;", "☺")],
    )
    def test_character_entities(self, source: str, character: str) -> None:
        assert parse(source) == [CharacterEntity(character)]

    def test_unknown_entity_is_text(self) -> None:
        assert parse("&bogus;") == [Text("&bogus;")]

    def test_html_tags(self) -> None:
        """Test that a paired tag becomes a container node."""
        assert parse("<span>x</span>") == [Tag("span", [Text("x")])]

    def test_unpaired_html_tag_is_text(self) -> None:
        assert parse("<span>x") == [Text("<span>x")]

    def test_self_closing_html_tag(self) -> None:
        assert parse("a<br />b") == [Text("a"), StartTag("br"), Text("b")]

    def test_stray_closing_break(self) -> None:
        assert parse("a</br>b") == [Text("a"), EndTag("br"), Text("b")]

    def test_unknown_tag_is_text(self) -> None:
        assert parse("<foo>") == [Text("<foo>")]

    def test_ref_body_is_parsed(self) -> None:
        assert parse('a<ref name="x">See [[B]]</ref>') == [
            Text("a"),
            Tag("ref", [Text("See "), Link("B", [Text("B")])]),
        ]

    def test_nowiki_body_is_raw(self) -> None:
        assert parse("<nowiki>[[not a link]]</nowiki>") == [
            Tag("nowiki", [Text("[[not a link]]")])
        ]

    def test_self_closing_extension_tag(self) -> None:
        assert parse('<ref name="x" />') == [Tag("ref", [])]


class TestBlocks:
    """Test line-level structure."""

    def test_heading(self) -> None:
        assert parse("== History ==") == [Heading(2, [Text("History")])]

    def test_heading_with_formatting(self) -> None:
        assert parse("=== ''Sub'' ===") == [Heading(3, [Italic(), Text("Sub"), Italic()])]

    def test_unbalanced_heading_uses_smaller_level(self) -> None:
        assert parse("=== Title ==")[0] == Heading(2, [Text("= Title")])

    def test_heading_followed_by_comment(self) -> None:
        """Test that a comment after the closing equals signs keeps the heading."""
        nodes = parse("== History == <!-- note -->\ntext")

        assert nodes[0] == Heading(2, [Text("History")])
        assert nodes[1:] == [Comment(), Text(" note "), Comment(), Text("text")]

    def test_paragraphs(self) -> None:
        """Test that blank lines separate paragraphs and single newlines do not."""
        assert parse("First line\nsecond line\n\nNew paragraph") == [
            Text("First line\nsecond line"),
            ParagraphBreak(),
            Text("New paragraph"),
        ]

    def test_no_break_at_document_edges(self) -> None:
        assert parse("\n\nText\n\n") == [Text("Text")]

    def test_horizontal_divider(self) -> None:
        assert parse("a\n----\nb") == [Text("a"), HorizontalDivider(), Text("b")]

    def test_nested_lists(self) -> None:
        assert parse("* one\n* two\n** nested\n# first") == [
            UnorderedList(
                [
                    ListItem([Text("one")]),
                    ListItem([Text("two"), UnorderedList([ListItem([Text("nested")])])]),
                ]
            ),
            OrderedList([ListItem([Text("first")])]),
        ]

    def test_definition_list(self) -> None:
        assert parse("; term : details") == [
            DefinitionList(
                [
                    DefinitionListItem("term", [Text("term")]),
                    DefinitionListItem("details", [Text("details")]),
                ]
            )
        ]

    def test_preformatted(self) -> None:
        assert parse(" code line\n more\nafter") == [
            Preformatted([Text("code line\nmore")]),
            Text("after"),
        ]

    def test_redirect(self) -> None:
        assert parse("#REDIRECT [[Target page]]\n[[Category:Redirects]]") == [
            Redirect("Target page"),
            Category("Category:Redirects"),
        ]

    def test_windows_line_endings(self) -> None:
        assert parse("a\r\nb") == [Text("a\nb")]

    def test_empty_document(self) -> None:
        assert parse("") == []


class TestTables:
    """Test table structure."""

    def test_minimal_table(self) -> None:
        assert parse("{|\n|+ H\n|-\n| V\n|}") == [
            Table(
                attributes=[],
                captions=[TableCaption(None, [Text("H")])],
                rows=[TableRow([], [TableCell(None, [Text("V")])])],
            )
        ]

    def test_attributes_and_header_cells(self) -> None:
        source = '{| class="wikitable"\n|-\n! A !! B\n|- id="r"\n| style="x" | 1 || 2\n|}'

        (table,) = parse(source)

        assert table.attributes == [Text('class="wikitable"')]
        assert table.rows[0].cells == [
            TableCell(None, [Text("A")]),
            TableCell(None, [Text("B")]),
        ]
        assert table.rows[1].attributes == [Text('id="r"')]
        assert table.rows[1].cells == [
            TableCell([Text('style="x"')], [Text("1")]),
            TableCell(None, [Text("2")]),
        ]

    def test_cell_content_continues_on_next_line(self) -> None:
        (table,) = parse("{|\n| first\nmore text\n|}")
        assert table.rows[0].cells == [TableCell(None, [Text("first\nmore text")])]

    def test_piped_link_in_cell(self) -> None:
        (table,) = parse("{|\n| [[A|b]] || c\n|}")
        assert table.rows[0].cells[0].content == [Link("A", [Text("b")])]
        assert table.rows[0].cells[1].content == [Text("c")]

    def test_nested_table(self) -> None:
        (table,) = parse("{|\n|\n{|\n| inner\n|}\n|}\nafter")
        inner = table.rows[0].cells[0].content
        assert isinstance(inner[0], Table)
        assert inner[0].rows[0].cells[0].content == [Text("inner")]

    def test_text_after_table(self) -> None:
        nodes = parse("{|\n| x\n|}\nafter")
        assert isinstance(nodes[0], Table)
        assert nodes[1] == Text("after")


class TestRobustness:
    """Test inputs the grammar rejects."""

    @pytest.mark.parametrize(
        "source",
        ["{{{{", "]]]][[", "'''''''''", "<ref>", "{|\n|", "= =", "&#0;", "*\n#\n;:", "<!--"],
    )
    def test_garbage_never_raises(self, source: str) -> None:
        """Test that arbitrary input parses without errors."""
        assert isinstance(parse(source), list)
