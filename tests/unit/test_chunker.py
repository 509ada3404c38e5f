"""
Unit tests for SemanticChunker.

Tests boundary detection, size bounds, fenced code handling, byte offsets
and snippet generation.

System role: Verification of the first sync pipeline stage
"""

import pytest

from docindex.configs.chunking import ChunkingSettings
from docindex.core.chunker import SemanticChunker, make_snippet
from docindex.core.exceptions import ConfigurationError


def _assert_offsets_exact(document: str, chunks) -> None:
    encoded = document.encode("utf-8")
    for chunk in chunks:
        assert encoded[chunk.start_byte:chunk.end_byte].decode("utf-8") == chunk.text


class TestChunkerConfiguration:
    """Test suite for chunker construction."""

    def test_max_smaller_than_min_should_raise(self) -> None:
        """Test max_size < min_size is rejected."""
        with pytest.raises(ConfigurationError):
            SemanticChunker(max_size=10, min_size=20)

    def test_non_positive_sizes_should_raise(self) -> None:
        """Test zero sizes are rejected."""
        with pytest.raises(ConfigurationError):
            SemanticChunker(max_size=0, min_size=0)

    def test_from_settings_should_copy_bounds(self) -> None:
        """Test settings are applied to the chunker."""
        settings = ChunkingSettings(max_size=500, min_size=40, snippet_length=60)

        chunker = SemanticChunker.from_settings(settings)

        assert (chunker.max_size, chunker.min_size, chunker.snippet_length) == (500, 40, 60)


class TestChunkerBoundaries:
    """Test suite for chunk boundaries."""

    @pytest.mark.parametrize("document", ["", "   \n\n\t  \n"])
    def test_empty_document_should_produce_no_chunks(self, chunker, document: str) -> None:
        """Test empty and whitespace-only documents yield nothing."""
        assert chunker.chunk(document, "guides/empty.md", "hexdocs") == []

    def test_headings_should_start_new_chunks(self, chunker, sample_document: str) -> None:
        """Test each heading section becomes its own chunk."""
        chunks = chunker.chunk(sample_document, "guides/intro.md", "hexdocs")

        assert [chunk.text.splitlines()[0] for chunk in chunks] == ["# Alpha", "# Beta", "# Gamma"]
        assert all(chunk.source_file == "guides/intro.md" for chunk in chunks)
        assert all(chunk.source_type == "hexdocs" for chunk in chunks)

    def test_chunking_should_be_deterministic(self, chunker, sample_document: str) -> None:
        """Test identical input gives identical chunks."""
        first = chunker.chunk(sample_document, "guides/intro.md", "hexdocs")
        second = chunker.chunk(sample_document, "guides/intro.md", "hexdocs")

        assert first == second

    def test_small_paragraphs_should_be_merged(self) -> None:
        """Test blocks below min_size are combined when they fit."""
        chunker = SemanticChunker(max_size=200, min_size=50)
        document = "Short one.\n\nAnother short.\n\nThird bit."

        chunks = chunker.chunk(document, "a.md", "hexdocs")

        assert len(chunks) == 1
        assert chunks[0].text == document

    def test_chunks_should_be_ordered_and_disjoint(self, chunker, sample_document: str) -> None:
        """Test chunks follow document order without overlap."""
        chunks = chunker.chunk(sample_document, "guides/intro.md", "hexdocs")

        for previous, current in zip(chunks, chunks[1:]):
            assert previous.end_byte <= current.start_byte


class TestChunkerSizeBounds:
    """Test suite for size limits and code blocks."""

    def test_oversized_prose_should_be_split_within_max(self) -> None:
        """Test a long paragraph is split into pieces no larger than max_size."""
        chunker = SemanticChunker(max_size=100, min_size=10)
        paragraph = " ".join(f"word{i}" for i in range(200))

        chunks = chunker.chunk(paragraph, "long.md", "hexdocs")

        assert len(chunks) > 1
        assert all(len(chunk.text) <= 100 for chunk in chunks)
        assert " ".join(chunk.text for chunk in chunks) == paragraph
        _assert_offsets_exact(paragraph, chunks)

    def test_fenced_code_should_never_be_split(self) -> None:
        """Test a code block longer than max_size stays whole, blank lines included."""
        chunker = SemanticChunker(max_size=100, min_size=10)
        code = "```python\n" + "\n\n".join(f"x_{i} = {i}" for i in range(40)) + "\n```"
        document = f"Intro paragraph here.\n\n{code}\n\nOutro paragraph here."

        chunks = chunker.chunk(document, "code.md", "hexdocs")

        assert code in [chunk.text for chunk in chunks]
        assert sum("x_20 = 20" in chunk.text for chunk in chunks) == 1

    def test_unterminated_fence_should_run_to_end(self) -> None:
        """Test an unclosed fence is treated as code until the end of the document."""
        chunker = SemanticChunker(max_size=50, min_size=10)
        document = "Some intro text here.\n\n~~~\nline one\n\nline two\n\nline three is long enough"

        chunks = chunker.chunk(document, "code.md", "hexdocs")

        assert chunks[-1].text.startswith("~~~")
        assert chunks[-1].text.endswith("line three is long enough")


class TestChunkerOffsets:
    """Test suite for byte offsets and snippets."""

    def test_offsets_should_address_multibyte_text(self) -> None:
        """Test byte offsets slice the UTF-8 document back to each chunk."""
        chunker = SemanticChunker(max_size=80, min_size=10)
        document = (
            "# Café\n\n"
            "Naïve résumé text → arrows and emoji 🎉 go here for testing.\n\n"
            "```elixir\nIO.puts(\"héllo\")\n```\n\n"
            "Trailing paragraph with ünïcödé characters in it."
        )

        chunks = chunker.chunk(document, "unicode.md", "hexdocs")

        assert chunks
        _assert_offsets_exact(document, chunks)

    def test_snippet_should_truncate_long_text(self) -> None:
        """Test snippets are prefix plus ellipsis when text is longer than the limit."""
        assert make_snippet("a" * 150, 100) == "a" * 100 + "..."
        assert make_snippet("short", 100) == "short"

    def test_chunk_snippet_should_use_configured_length(self, chunker, sample_document: str) -> None:
        """Test chunk snippets respect snippet_length."""
        chunks = chunker.chunk(sample_document, "guides/intro.md", "hexdocs")

        assert chunks[0].text_snippet == chunks[0].text[:20] + "..."
        assert len({chunk.text_snippet for chunk in chunks}) == len(chunks)
