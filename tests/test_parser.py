"""
Unit tests for document parsing.

Tests block splitting, anchor collection and link extraction.
"""

import pytest

from docexpand.models import CodeBlock, CodeTabGroup, ProseBlock
from docexpand.processing.parser import DocumentParser, parse_document, slugify


SAMPLE = "\n".join([
    "# Setup",
    "See [guide](#create-a-table) now.",
    "",
    "```bash",
    "echo [x](missing.md)",
    "```",
    "## Create a table",
    "<CodeTabs>",
    "```python",
    "x = 1",
    "```",
    "</CodeTabs>",
    "Done",
])


# ============================================================================
# Slug Tests
# ============================================================================

class TestSlugify:
    """Test GitHub-style heading slugs."""
    
    @pytest.mark.parametrize("title,expected", [
        ("Create a table (DDL)", "create-a-table-ddl"),
        ("Set up Apache Spark with Delta Lake", "set-up-apache-spark-with-delta-lake"),
        ("What's new?", "whats-new"),
        ("C++ & Java", "c--java"),
        ("Read [batch](delta-batch.md) data", "read-batch-data"),
        ("snake_case stays", "snake_case-stays"),
    ])
    def test_slugs(self, title, expected):
        assert slugify(title) == expected


# ============================================================================
# Block Tests
# ============================================================================

class TestBlocks:
    """Test splitting a document into blocks."""
    
    def test_block_order(self):
        """Test prose, code and tab groups in source order."""
        document = parse_document("guide.md", SAMPLE).document
        
        assert [type(block) for block in document.blocks] == [
            ProseBlock, CodeBlock, ProseBlock, CodeTabGroup, ProseBlock,
        ]
        assert [block.line for block in document.blocks] == [1, 4, 7, 8, 13]
    
    def test_code_block_contents(self):
        """Test code blocks outside containers."""
        document = parse_document("guide.md", SAMPLE).document
        
        code = document.code_blocks[0]
        assert code.language == "bash"
        assert code.body == "echo [x](missing.md)"
    
    def test_document_text_is_unchanged(self):
        """Test the parsed document keeps its text verbatim."""
        document = parse_document("guide.md", SAMPLE).document
        
        assert document.text == SAMPLE
        assert document.key == "guide.md"
    
    def test_malformed_group_is_dropped_from_blocks(self):
        """Test a malformed container yields issues and no tab group."""
        text = "<CodeTabs>\n```python\na\n```\n```python\nb\n```\n</CodeTabs>\n# After"
        result = parse_document("a.md", text)
        
        assert result.document.tab_groups == ()
        assert len(result.errors) == 1
        assert "after" in result.document.anchors
    
    def test_statistics(self):
        """Test document statistics."""
        stats = parse_document("guide.md", SAMPLE).document.statistics()
        
        assert stats == {
            "blocks": 5,
            "prose_blocks": 3,
            "code_blocks": 1,
            "tab_groups": 1,
            "anchors": 2,
            "references": 1,
        }


# ============================================================================
# Anchor Tests
# ============================================================================

class TestAnchors:
    """Test anchor collection."""
    
    def test_heading_slugs(self):
        """Test headings become anchors."""
        document = parse_document("guide.md", SAMPLE).document
        
        assert document.anchors == frozenset({"setup", "create-a-table"})
    
    def test_duplicate_headings_get_suffixes(self):
        """Test repeated headings get -1, -2 suffixes."""
        document = parse_document("a.md", "# Intro\n## Intro\n### Intro").document
        
        assert document.anchors == frozenset({"intro", "intro-1", "intro-2"})
    
    def test_explicit_heading_id(self):
        """Test {#id} replaces the generated slug."""
        text = "## Read older versions of data using time travel {#time-travel}"
        document = parse_document("a.md", text).document
        
        assert document.anchors == frozenset({"time-travel"})
    
    def test_html_anchors(self):
        """Test id and name attributes define anchors."""
        text = '<a id="ddlcreatetable"></a>\n<a name="legacy"></a>\n<div id="notes">x</div>'
        document = parse_document("a.md", text).document
        
        assert document.anchors == frozenset({"ddlcreatetable", "legacy", "notes"})
    
    def test_attributes_ending_in_id_or_name_are_not_anchors(self):
        """Test data-id and non-link name attributes don't define anchors."""
        text = '<div data-id="ghost">x</div>\n<meta name="description" content="x">\n<A NAME="top"></A>'
        document = parse_document("a.md", text).document
        
        assert document.anchors == frozenset({"top"})
    
    def test_headings_in_code_are_ignored(self):
        """Test comment lines in fenced code are not headings."""
        document = parse_document("a.md", "```bash\n# not a heading\n```").document
        
        assert document.anchors == frozenset()
    
    def test_hash_without_space_is_not_heading(self):
        document = parse_document("a.md", "#hashtag").document
        
        assert document.anchors == frozenset()


# ============================================================================
# Reference Tests
# ============================================================================

class TestReferences:
    """Test link extraction."""
    
    def test_self_reference_position(self):
        """Test line and column of an inline link."""
        references = parse_document("guide.md", SAMPLE).document.references
        
        assert len(references) == 1
        reference = references[0]
        assert reference.is_self_reference
        assert reference.anchor == "create-a-table"
        assert reference.line == 2
        assert reference.column == 5
        assert reference.raw == "#create-a-table"
    
    def test_links_in_code_are_ignored(self):
        """Test links in fenced code and code spans are not extracted."""
        text = "Use `[x](missing.md)` literally.\n```\n[y](missing.md)\n```"
        document = parse_document("a.md", text).document
        
        assert document.references == ()
    
    def test_reference_definition(self):
        """Test [label]: target definitions."""
        text = "[guide]: guide/delta-streaming.md#stream-reads"
        reference = parse_document("a.md", text).document.references[0]
        
        assert reference.target == "guide/delta-streaming.md"
        assert reference.anchor == "stream-reads"
        assert reference.column == 10
    
    def test_relative_target(self):
        """Test targets resolve against the source document's directory."""
        text = "See [batch](../delta-batch.md#create-a-table)."
        reference = parse_document("guide/delta-streaming.md", text).document.references[0]
        
        assert reference.target == "delta-batch.md"
        assert reference.anchor == "create-a-table"
    
    def test_root_relative_target(self):
        """Test a leading slash resolves from the corpus root."""
        reference = parse_document("a/b.md", "[x](/guide/x.md)").document.references[0]
        
        assert reference.target == "guide/x.md"
        assert reference.anchor is None
    
    def test_external_and_asset_links_are_ignored(self):
        """Test URLs, mail links and images are not references."""
        text = (
            "[site](https://delta.io) [mail](mailto:a@b.c) [cdn](//cdn.example.com/x.md)\n"
            "![diagram](images/arch.png)"
        )
        document = parse_document("a.md", text).document
        
        assert document.references == ()
    
    def test_href_links(self):
        """Test href attributes are references."""
        text = '<a href="delta-batch.md#ddlcreatetable">create</a>'
        reference = parse_document("a.md", text).document.references[0]
        
        assert reference.target == "delta-batch.md"
        assert reference.anchor == "ddlcreatetable"
    
    def test_ignore_patterns(self):
        """Test configured ignore patterns skip targets."""
        parser = DocumentParser(ignore_patterns=["api/*"])
        document = parser.parse("a.md", "[api](api/index.md) [b](b.md)").document
        
        assert [reference.target for reference in document.references] == ["b.md"]
    
    def test_front_matter_is_not_scanned(self):
        """Test front matter is kept as prose but never scanned."""
        text = "---\ntitle: \"[x](nope.md)\"\n---\n# Title"
        document = parse_document("a.md", text).document
        
        assert document.references == ()
        assert document.anchors == frozenset({"title"})
        assert isinstance(document.blocks[0], ProseBlock)
        assert document.blocks[0].line == 1
    
    def test_thematic_breaks_are_not_front_matter(self):
        """Test a leading --- pair without keys is scanned as prose."""
        text = "---\n# Intro\nSee [x](#nope)\n---\n"
        document = parse_document("a.md", text).document
        
        assert document.anchors == frozenset({"intro"})
        assert [(ref.anchor, ref.line) for ref in document.references] == [("nope", 3)]
    
    def test_linked_image_target(self):
        """Test the outer target of a linked badge image is extracted."""
        text = "[![badge](img.png)](missing.md)"
        references = parse_document("a.md", text).document.references
        
        assert [(ref.target, ref.column) for ref in references] == [("missing.md", 1)]
    
    def test_link_nested_in_link_text(self):
        """Test links in link text are extracted alongside the outer link."""
        text = "See [![docs](badge.md)](delta-batch.md#ddlcreatetable) now"
        references = parse_document("a.md", text).document.references
        
        assert [(ref.target, ref.column) for ref in references] == [
            ("delta-batch.md", 5),
            ("badge.md", 6),
        ]
    
    def test_bracketed_text_with_adjacent_links(self):
        """Test adjacent links on one line stay separate."""
        text = "[see [1]](a.md) and [b](b.md)"
        references = parse_document("x.md", text).document.references
        
        assert [ref.target for ref in references] == ["a.md", "b.md"]
