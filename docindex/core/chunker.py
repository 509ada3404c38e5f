"""
Semantic chunker for converted documentation text.

Splits Markdown-like text into ordered, bounded chunks aligned to natural
boundaries (paragraphs, headings, fenced code blocks). Fenced code blocks
are never split. Prose blocks longer than the maximum size are split with
RecursiveCharacterTextSplitter. Every chunk is an exact slice of the
document, and its offsets are UTF-8 byte offsets into the document.

Dependencies: langchain_text_splitters, docindex.models, docindex.configs
System role: First stage of the sync pipeline
"""

import logging
import re
from dataclasses import dataclass

from langchain_text_splitters import RecursiveCharacterTextSplitter

from docindex.configs.chunking import ChunkingSettings
from docindex.core.exceptions import ConfigurationError
from docindex.models.chunk import Chunk

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^ {0,3}#{1,6}(\s|$)")
_FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")

SNIPPET_SUFFIX = "..."


@dataclass
class _Block:
    """Character span of one structural block."""

    start: int
    end: int
    kind: str  # "text", "heading" or "code"

    @property
    def length(self) -> int:
        return self.end - self.start


class _ByteOffsets:
    """Monotonic character-to-byte offset conversion."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._char = 0
        self._byte = 0

    def at(self, char_index: int) -> int:
        if char_index < self._char:
            # Offsets are requested in document order; restart if not.
            self._char, self._byte = 0, 0
        self._byte += len(self._text[self._char:char_index].encode("utf-8"))
        self._char = char_index
        return self._byte


def make_snippet(text: str, length: int) -> str:
    """Return the display preview for a chunk body."""
    if len(text) > length:
        return text[:length] + SNIPPET_SUFFIX
    return text


class SemanticChunker:
    """Deterministic, boundary-aware chunker."""

    def __init__(
        self,
        max_size: int = 2000,
        min_size: int = 50,
        snippet_length: int = 100,
    ) -> None:
        """
        Initialize chunker with size bounds.

        Args:
            max_size: Maximum chunk size in characters (code blocks excepted)
            min_size: Preferred minimum chunk size in characters
            snippet_length: Length of the text preview

        Raises:
            ConfigurationError: When the bounds are not positive or
                max_size < min_size
        """
        if min_size <= 0 or max_size <= 0 or snippet_length <= 0:
            raise ConfigurationError(
                "Chunk sizes must be positive",
                details={"max_size": max_size, "min_size": min_size, "snippet_length": snippet_length},
            )
        if max_size < min_size:
            raise ConfigurationError(
                "max_size must be greater than or equal to min_size",
                details={"max_size": max_size, "min_size": min_size},
            )

        self.max_size = max_size
        self.min_size = min_size
        self.snippet_length = snippet_length
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=max_size,
            chunk_overlap=0,
            add_start_index=True,
            length_function=len,
        )

    @classmethod
    def from_settings(cls, settings: ChunkingSettings) -> "SemanticChunker":
        """Build a chunker from chunking settings."""
        return cls(
            max_size=settings.max_size,
            min_size=settings.min_size,
            snippet_length=settings.snippet_length,
        )

    def chunk(self, document_text: str, source_file: str, source_type: str) -> list[Chunk]:
        """
        Chunk a document.

        Args:
            document_text: Converted document text
            source_file: Path of the document
            source_type: Source tag stored with every chunk

        Returns:
            list[Chunk]: Ordered chunks; empty for an empty document
        """
        if not document_text.strip():
            return []

        blocks = self._split_blocks(document_text)
        units = self._expand_oversized(document_text, blocks)
        spans = self._merge_small(self._pack(units))

        offsets = _ByteOffsets(document_text)
        chunks = []
        for start, end in spans:
            text = document_text[start:end]
            chunks.append(
                Chunk(
                    source_file=source_file,
                    source_type=source_type,
                    start_byte=offsets.at(start),
                    end_byte=offsets.at(end),
                    text=text,
                    text_snippet=make_snippet(text, self.snippet_length),
                )
            )

        logger.debug(
            f"{__name__}:chunk - {source_file}: {len(blocks)} blocks -> {len(chunks)} chunks"
        )
        return chunks

    def _split_blocks(self, text: str) -> list[_Block]:
        """Segment text into paragraph, heading and fenced code blocks."""
        blocks: list[_Block] = []
        current: list[int] | None = None
        fence: str | None = None
        fence_start = 0
        pos = 0

        def close_text() -> None:
            nonlocal current
            if current is not None:
                blocks.append(_trimmed(text, current[0], current[1], "text"))
                current = None

        for line in text.splitlines(keepends=True):
            line_start, pos = pos, pos + len(line)
            stripped = line.strip()

            if fence is not None:
                if stripped.startswith(fence) and not stripped.lstrip(fence[0]):
                    blocks.append(_trimmed(text, fence_start, pos, "code"))
                    fence = None
                continue

            fence_match = _FENCE_RE.match(line)
            if fence_match:
                close_text()
                fence = fence_match.group(1)
                fence_start = line_start
            elif not stripped:
                close_text()
            elif _HEADING_RE.match(line):
                close_text()
                blocks.append(_trimmed(text, line_start, pos, "heading"))
            elif current is None:
                current = [line_start, pos]
            else:
                current[1] = pos

        if fence is not None:
            # Unterminated fence: the rest of the document is code.
            blocks.append(_trimmed(text, fence_start, pos, "code"))
        close_text()
        return [block for block in blocks if block.length > 0]

    def _expand_oversized(self, text: str, blocks: list[_Block]) -> list[_Block]:
        """Split prose blocks longer than max_size; code blocks stay whole."""
        units: list[_Block] = []
        for block in blocks:
            if block.kind == "code" or block.length <= self.max_size:
                units.append(block)
                continue

            block_text = text[block.start:block.end]
            search_from = 0
            for doc in self._splitter.create_documents([block_text]):
                piece = doc.page_content
                index = doc.metadata.get("start_index", -1)
                if index < 0:
                    index = block_text.find(piece, search_from)
                search_from = index + len(piece)
                units.append(_Block(block.start + index, block.start + search_from, "text"))
        return units

    def _pack(self, units: list[_Block]) -> list[tuple[int, int]]:
        """Greedily pack consecutive units into windows of at most max_size."""
        spans: list[tuple[int, int]] = []
        start: int | None = None
        end = 0

        for unit in units:
            if start is None:
                start, end = unit.start, unit.end
                continue

            starts_section = unit.kind == "heading" and end - start >= self.min_size
            if not starts_section and unit.end - start <= self.max_size:
                end = unit.end
            else:
                spans.append((start, end))
                start, end = unit.start, unit.end

        if start is not None:
            spans.append((start, end))
        return spans

    def _merge_small(self, spans: list[tuple[int, int]]) -> list[tuple[int, int]]:
        """Fold spans shorter than min_size into a neighbour when the result fits."""
        merged: list[tuple[int, int]] = []
        for start, end in spans:
            if merged:
                prev_start, prev_end = merged[-1]
                too_small = end - start < self.min_size or prev_end - prev_start < self.min_size
                if too_small and end - prev_start <= self.max_size:
                    merged[-1] = (prev_start, end)
                    continue
            merged.append((start, end))
        return merged


def _trimmed(text: str, start: int, end: int, kind: str) -> _Block:
    """Shrink a span so it starts and ends on non-whitespace characters."""
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return _Block(start, end, kind)
