"""Tests for the order-preserving lxml producer."""

import pytest

from xml_tree_viewer.parsing import OrderedXMLParser, detect_encoding, parse_ordered
from xml_tree_viewer.shared import ParseError, ParserConfig


class TestOrderedXMLParser:
    """Test suite for OrderedXMLParser."""

    def test_element_with_attribute_and_text(self):
        """Test the basic item shape."""
        items = parse_ordered('<root id="1"><child>hello</child></root>')

        assert items == [
            {"root": [{"child": [{"#text": "hello"}]}], ":@": {"@_id": "1"}},
        ]

    def test_declaration_comes_first(self):
        """Test that the XML declaration becomes the first item."""
        items = parse_ordered('<?xml version="1.0" encoding="UTF-8"?>\n<root/>')

        assert items[0] == {"?xml": [], ":@": {"@_version": "1.0", "@_encoding": "UTF-8"}}
        assert items[1] == {"root": []}

    def test_whitespace_only_text_dropped(self):
        """Test that indentation does not produce text items."""
        items = parse_ordered("<a>\n  <b/>\n  <c/>\n</a>")

        assert items == [{"a": [{"b": []}, {"c": []}]}]

    def test_text_runs_keep_document_order(self):
        """Test that tails are emitted after the element they follow."""
        items = parse_ordered("<p>one<b>two</b>three</p>")

        assert items == [
            {"p": [{"#text": "one"}, {"b": [{"#text": "two"}]}, {"#text": "three"}]},
        ]

    def test_multiple_top_level_elements(self):
        """Test that sibling roots are all emitted."""
        items = parse_ordered("<a/><b/>")

        assert items == [{"a": []}, {"b": []}]

    def test_comments_dropped_tail_kept(self):
        """Test that comments vanish but the text after them stays."""
        items = parse_ordered("<a><!-- note -->after</a>")

        assert items == [{"a": [{"#text": "after"}]}]

    def test_cdata_becomes_text(self):
        """Test CDATA sections are reported as plain text."""
        items = parse_ordered("<a><![CDATA[<b>&]]></a>")

        assert items == [{"a": [{"#text": "<b>&"}]}]

    def test_predefined_entities_resolved(self):
        """Test character entity resolution."""
        items = parse_ordered("<a>&lt;&amp;&gt;</a>")

        assert items == [{"a": [{"#text": "<&>"}]}]

    def test_internal_entities_resolved(self):
        """Test entities declared in an internal DTD subset."""
        items = parse_ordered('<!DOCTYPE r [<!ENTITY who "world">]>\n<r>hello &who;</r>')

        assert items == [{"r": [{"#text": "hello world"}]}]

    def test_namespaces_keep_prefixes(self):
        """Test that prefixed names and xmlns declarations are preserved."""
        items = parse_ordered('<r xmlns:x="urn:x"><x:c x:a="1"/></r>')

        assert items == [
            {
                "r": [{"x:c": [], ":@": {"@_x:a": "1"}}],
                ":@": {"@_xmlns:x": "urn:x"},
            },
        ]

    def test_processing_instruction_item(self):
        """Test processing instructions become declaration-style items."""
        items = parse_ordered('<?xml-stylesheet href="a.xsl"?><r/>')

        assert items == [
            {"?xml-stylesheet": [{"#text": 'href="a.xsl"'}]},
            {"r": []},
        ]

    def test_processing_instructions_can_be_removed(self):
        """Test the keep_processing_instructions switch."""
        config = ParserConfig(keep_processing_instructions=False)
        items = parse_ordered('<?xml-stylesheet href="a.xsl"?><r/>', config)

        assert items == [{"r": []}]

    def test_untrimmed_values(self):
        """Test that trimming can be disabled."""
        items = parse_ordered("<a> x </a>", ParserConfig(trim_values=False))

        assert items == [{"a": [{"#text": " x "}]}]

    def test_bytes_with_bom(self):
        """Test UTF-8 byte input with a byte order mark."""
        items = parse_ordered(b"\xef\xbb\xbf<r>\xc3\xa9</r>")

        assert items == [{"r": [{"#text": "é"}]}]

    def test_bytes_in_declared_encoding(self):
        """Test that bytes are decoded with the encoding the declaration names."""
        content = '<?xml version="1.0" encoding="ISO-8859-1"?><r>\xe9</r>'.encode("latin-1")

        items = parse_ordered(content)

        assert items[0] == {"?xml": [], ":@": {"@_version": "1.0", "@_encoding": "ISO-8859-1"}}
        assert items[1] == {"r": [{"#text": "é"}]}

    def test_utf16_bytes_with_bom(self):
        """Test UTF-16 input detected from its byte order mark."""
        content = '<?xml version="1.0" encoding="UTF-16"?><r>é</r>'.encode("utf-16")

        items = parse_ordered(content)

        assert items[1] == {"r": [{"#text": "é"}]}

    def test_undeclared_prefixes_accepted(self):
        """Test that prefixed names parse without namespace declarations."""
        items = parse_ordered('<a:root p:id="1"><a:b>x</a:b></a:root>')

        assert items == [
            {"a:root": [{"a:b": [{"#text": "x"}]}], ":@": {"@_p:id": "1"}},
        ]

    def test_declared_and_undeclared_prefixes_mixed(self):
        """Test that only declarations written in the document are emitted."""
        items = parse_ordered('<r xmlns:x="urn:x"><x:c/><y:d/></r>')

        assert items == [
            {"r": [{"x:c": []}, {"y:d": []}], ":@": {"@_xmlns:x": "urn:x"}},
        ]


class TestOrderedXMLParserErrors:
    """Test suite for producer failures."""

    def test_malformed_document(self):
        """Test mismatched tags raise ParseError with a position."""
        with pytest.raises(ParseError, match="XML parse error") as exc_info:
            parse_ordered("<root>\n<child>\n</root>")

        assert exc_info.value.line is not None

    def test_empty_document(self):
        """Test blank input."""
        with pytest.raises(ParseError, match="Document is empty"):
            parse_ordered("  \n ")

    def test_text_without_element(self):
        """Test input that has text but no element."""
        with pytest.raises(ParseError, match="Document has no root element"):
            parse_ordered("just text")

    def test_invalid_utf8(self):
        """Test undecodable bytes."""
        with pytest.raises(ParseError, match="not valid UTF-8"):
            parse_ordered(b"<r>\xff</r>")

    def test_unknown_declared_encoding(self):
        """Test an encoding name Python has no codec for."""
        with pytest.raises(ParseError, match="Unknown document encoding: x-nope"):
            parse_ordered(b'<?xml version="1.0" encoding="x-nope"?><r/>')

    def test_size_limit(self):
        """Test the maximum input size."""
        parser = OrderedXMLParser(max_input_size_bytes=10)

        with pytest.raises(ParseError, match="10 byte limit"):
            parser.parse("<root>too long</root>")


class TestDetectEncoding:
    """Test suite for byte encoding detection."""

    def test_byte_order_marks(self):
        """Test each supported byte order mark."""
        assert detect_encoding(b"\xef\xbb\xbf<r/>") == "utf-8"
        assert detect_encoding(b"\xff\xfe<\x00") == "utf-16-le"
        assert detect_encoding(b"\xfe\xff\x00<") == "utf-16-be"
        assert detect_encoding(b"\xff\xfe\x00\x00<\x00\x00\x00") == "utf-32-le"

    def test_declared_encoding(self):
        """Test the encoding pseudo-attribute with either quote style."""
        assert detect_encoding(b'<?xml version="1.0" encoding="ISO-8859-1"?><r/>') == "ISO-8859-1"
        assert detect_encoding(b"<?xml version='1.0' encoding='cp1252'?><r/>") == "cp1252"

    def test_default(self):
        """Test input with neither a mark nor a declared encoding."""
        assert detect_encoding(b'<?xml version="1.0"?><r/>') == "UTF-8"
        assert detect_encoding(b"<r/>") == "UTF-8"
