"""Tests for DTD skeleton generation."""

import pytest

from xml_tree_viewer.dtd import (
    NO_ELEMENTS_MESSAGE,
    SkeletonBuilder,
    build_skeleton,
    escape_attribute,
    infer_root_element,
    normalize_dtd_source,
    parse_grammar,
)
from xml_tree_viewer.shared import GrammarError, ParseError, SkeletonConfig


class TestNormalizeDtdSource:
    """Test suite for normalize_dtd_source."""

    def test_plain_declarations_unchanged(self):
        """Test that bare declarations pass through trimmed."""
        assert normalize_dtd_source("  <!ELEMENT a EMPTY>\n") == "<!ELEMENT a EMPTY>"

    def test_xml_declaration_removed(self):
        """Test XML declarations are stripped regardless of case."""
        source = '<?XML version="1.0"?>\n<!ELEMENT a EMPTY>'

        assert normalize_dtd_source(source) == "<!ELEMENT a EMPTY>"

    def test_internal_subset_extracted(self):
        """Test that only the internal subset of a DOCTYPE is kept."""
        source = (
            '<?xml version="1.0"?>\n'
            "<!DOCTYPE r [\n"
            "  <!ELEMENT r (c)>\n"
            "  <!ELEMENT c (#PCDATA)>\n"
            "]>\n"
        )

        assert normalize_dtd_source(source) == "<!ELEMENT r (c)>\n  <!ELEMENT c (#PCDATA)>"


class TestInferRootElement:
    """Test suite for root inference."""

    def test_first_unreferenced_element(self):
        """Test that referenced children are not chosen as root."""
        grammar = parse_grammar("<!ELEMENT item EMPTY> <!ELEMENT root (item)>")

        assert infer_root_element(grammar) == "root"

    def test_cycle_falls_back_to_first(self):
        """Test the fallback when every element is referenced."""
        grammar = parse_grammar("<!ELEMENT a (b)> <!ELEMENT b (a)>")

        assert infer_root_element(grammar) == "a"

    def test_undeclared_children_ignored(self):
        """Test that references to undeclared elements do not count."""
        grammar = parse_grammar("<!ELEMENT a (ghost)> <!ELEMENT b (a)>")

        assert infer_root_element(grammar) == "b"

    def test_prefixed_names(self):
        """Test that a prefixed child is not mistaken for a root."""
        grammar = parse_grammar("<!ELEMENT x:item EMPTY> <!ELEMENT x:root (x:item)>")

        assert infer_root_element(grammar) == "x:root"


class TestBuildSkeleton:
    """Test suite for build_skeleton."""

    def test_root_with_empty_child(self):
        """Test the basic nested skeleton."""
        skeleton = build_skeleton("<!ELEMENT root (item)> <!ELEMENT item EMPTY>")

        assert skeleton == "<root>\n  <item/>\n</root>"

    def test_prefixed_element_names(self):
        """Test that prefixed declarations nest like unprefixed ones."""
        skeleton = build_skeleton("<!ELEMENT x:root (x:item)> <!ELEMENT x:item EMPTY>")

        assert skeleton == "<x:root>\n  <x:item/>\n</x:root>"

    def test_cycle_guard(self):
        """Test that a recursive content model terminates with a self-closing tag."""
        skeleton = build_skeleton("<!ELEMENT a (b)> <!ELEMENT b (a)>")

        assert skeleton == "<a>\n  <b>\n    <a/>\n  </b>\n</a>"

    def test_pcdata_placeholder(self):
        """Test text-only elements."""
        assert build_skeleton("<!ELEMENT note (#PCDATA)>") == "<note>text</note>"

    def test_any_placeholder(self):
        """Test ANY content without declared children."""
        assert build_skeleton("<!ELEMENT box ANY>") == "<box>text</box>"

    def test_mixed_with_children(self):
        """Test mixed content lists its element children."""
        skeleton = build_skeleton("<!ELEMENT p (#PCDATA | b)*> <!ELEMENT b (#PCDATA)>")

        assert skeleton == "<p>\n  <b>text</b>\n</p>"

    def test_undeclared_children_make_self_closing(self):
        """Test an element whose children are all undeclared."""
        assert build_skeleton("<!ELEMENT r (x, y)>") == "<r/>"

    def test_duplicate_children_emitted_once(self):
        """Test repeated child references in a content model."""
        skeleton = build_skeleton(
            "<!ELEMENT r (a, b, a)> <!ELEMENT a EMPTY> <!ELEMENT b EMPTY>"
        )

        assert skeleton == "<r>\n  <a/>\n  <b/>\n</r>"

    def test_required_attribute(self):
        """Test REQUIRED attributes get an empty placeholder."""
        skeleton = build_skeleton("<!ELEMENT r EMPTY> <!ATTLIST r id ID #REQUIRED>")

        assert skeleton == '<r id=""/>'

    def test_implied_attribute_skipped(self):
        """Test IMPLIED attributes are omitted."""
        skeleton = build_skeleton("<!ELEMENT r EMPTY> <!ATTLIST r note CDATA #IMPLIED>")

        assert skeleton == "<r/>"

    def test_fixed_attribute(self):
        """Test FIXED attributes show their value."""
        skeleton = build_skeleton('<!ELEMENT r EMPTY> <!ATTLIST r version CDATA #FIXED "1.0">')

        assert skeleton == '<r version="1.0"/>'

    def test_default_attribute_escaped(self):
        """Test default values are escaped."""
        skeleton = build_skeleton("""<!ELEMENT r EMPTY> <!ATTLIST r t CDATA 'say "hi"'>""")

        assert skeleton == '<r t="say &quot;hi&quot;"/>'

    def test_several_attributes(self):
        """Test all non-implied attributes are rendered."""
        skeleton = build_skeleton(
            "<!ELEMENT r (#PCDATA)>"
            "<!ATTLIST r a CDATA #REQUIRED b CDATA #IMPLIED c CDATA 'x'>"
        )

        assert skeleton.startswith("<r ")
        assert skeleton.endswith(">text</r>")
        assert 'a=""' in skeleton
        assert 'c="x"' in skeleton
        assert "b=" not in skeleton

    def test_doctype_input(self):
        """Test a document with an internal subset."""
        source = (
            '<?xml version="1.0"?>\n'
            "<!DOCTYPE r [\n"
            "  <!ELEMENT r (c)>\n"
            "  <!ELEMENT c (#PCDATA)>\n"
            "]>\n"
        )

        assert build_skeleton(source) == "<r>\n  <c>text</c>\n</r>"

    def test_configurable_indent_and_placeholder(self):
        """Test SkeletonConfig options."""
        config = SkeletonConfig(indent="\t", placeholder_text="...")

        skeleton = build_skeleton("<!ELEMENT r (c)> <!ELEMENT c (#PCDATA)>", config)

        assert skeleton == "<r>\n\t<c>...</c>\n</r>"

    def test_no_element_declarations(self):
        """Test GrammarError when nothing is declared."""
        with pytest.raises(GrammarError) as exc_info:
            build_skeleton("<!ENTITY x 'y'>")

        assert str(exc_info.value) == "No <!ELEMENT ...> declarations found in DTD."
        assert str(exc_info.value) == NO_ELEMENTS_MESSAGE

    def test_unparseable_dtd(self):
        """Test ParseError for broken declarations."""
        with pytest.raises(ParseError):
            build_skeleton("<!ELEMENT r (a,>")


class TestSkeletonBuilder:
    """Test suite for SkeletonBuilder."""

    def test_explicit_root(self):
        """Test building from a chosen element."""
        grammar = parse_grammar("<!ELEMENT root (item)> <!ELEMENT item (#PCDATA)>")

        assert SkeletonBuilder(grammar).build("item") == "<item>text</item>"

    def test_empty_grammar(self):
        """Test that an empty grammar raises GrammarError."""
        grammar = parse_grammar("<!ENTITY x 'y'>")

        with pytest.raises(GrammarError, match="No <!ELEMENT"):
            SkeletonBuilder(grammar).build()


class TestEscapeAttribute:
    """Test suite for escape_attribute."""

    def test_five_entities(self):
        """Test all five XML special characters."""
        assert escape_attribute("&\"<>'") == "&amp;&quot;&lt;&gt;&apos;"

    def test_ampersand_first(self):
        """Test that produced entities are not escaped twice."""
        assert escape_attribute("<&") == "&lt;&amp;"
