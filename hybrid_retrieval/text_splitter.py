"""
Recursive character text splitter for preparing text before embedding.

Splits text recursively by trying separators in order of preference:
1. Double newlines (paragraphs)
2. Single newlines
3. Sentence endings (". ", "! ", "? ")
4. Spaces
5. Characters (fallback)

Adjacent pieces are merged back up to chunk_size, and up to chunk_overlap
trailing characters of each chunk are carried into the next one for
continuity, trimmed so the next chunk still fits in chunk_size.
"""

import logging
from typing import List

logger = logging.getLogger(__name__)

DEFAULT_SEPARATORS = ["\n\n", "\n", ". ", "! ", "? ", " ", ""]


class RecursiveCharacterTextSplitter:
    """Split text into overlapping chunks at the largest available boundary"""

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if chunk_overlap < 0:
            raise ValueError(f"chunk_overlap must be non-negative, got {chunk_overlap}")
        if chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})"
            )

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = list(DEFAULT_SEPARATORS)

    def split_text(self, text: str) -> List[str]:
        """
        Split text into chunks.

        Returns:
            Non-empty, stripped chunks in document order
        """
        chunks: List[str] = []
        self._split_recursive(text, self.separators, chunks)
        chunks = [chunk for chunk in chunks if chunk.strip()]
        logger.debug(
            f"Split {len(text)} chars into {len(chunks)} chunks "
            f"(chunk_size={self.chunk_size}, overlap={self.chunk_overlap})"
        )
        return chunks

    def _split_recursive(self, text: str, separators: List[str], chunks: List[str]):
        if len(text) <= self.chunk_size:
            if text.strip():
                chunks.append(text.strip())
            return

        for i, separator in enumerate(separators):
            if separator == "":
                self._split_by_character(text, chunks)
                return

            splits = text.split(separator)
            if len(splits) < 2:
                continue

            pieces: List[str] = []
            for split in splits:
                if len(split) <= self.chunk_size:
                    if split.strip():
                        pieces.append(split.strip())
                else:
                    # Too large, recurse with the finer separators only
                    sub_chunks: List[str] = []
                    self._split_recursive(split, separators[i + 1:], sub_chunks)
                    pieces.extend(sub_chunks)

            if pieces:
                self._merge_with_overlap(pieces, separator, chunks)
            return

        self._split_by_character(text, chunks)

    def _merge_with_overlap(self, pieces: List[str], separator: str, chunks: List[str]):
        current = ""

        for piece in pieces:
            size_if_added = len(current) + (len(separator) if current else 0) + len(piece)

            if size_if_added > self.chunk_size and current:
                chunks.append(current.strip())

                # Carry as much overlap as still fits next to the new piece
                overlap = 0
                if len(current) > self.chunk_overlap:
                    overlap = min(self.chunk_overlap, self.chunk_size - len(separator) - len(piece))
                if overlap > 0:
                    current = current[-overlap:] + separator + piece
                else:
                    current = piece
            else:
                current = current + separator + piece if current else piece

        if current.strip():
            chunks.append(current.strip())

    def _split_by_character(self, text: str, chunks: List[str]):
        start = 0
        while start < len(text):
            end = min(start + self.chunk_size, len(text))
            chunk = text[start:end]
            if chunk.strip():
                chunks.append(chunk.strip())
            if end == len(text):
                break
            # Move start position with overlap
            start = end - self.chunk_overlap
