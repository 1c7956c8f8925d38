"""
In-memory document store used as retrieval context for model calls
Documents are chunked and embedded as bag-of-words vectors; nothing is persisted between runs
"""

import logging
import math
import re
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List

logger = logging.getLogger(__name__)

_WORD_PATTERN = re.compile(r"[A-Za-z0-9_]+")


@dataclass
class DocumentChunk:
    text: str
    vector: Dict[str, float]


class DocumentStore:
    """Named indexes of document chunks, queried by cosine similarity"""

    def __init__(self, chunk_size: int = 350, overlap: int = 60):
        self.chunk_size = max(50, chunk_size)
        self.overlap = min(overlap, self.chunk_size // 2)
        self._indexes: Dict[str, List[DocumentChunk]] = {}

    def add_document(self, index_name: str, text: str) -> int:
        """
        Chunk and index a document

        Args:
            index_name: Index to append to
            text: Document text

        Returns:
            int: Number of chunks added
        """
        chunks = [DocumentChunk(text=chunk, vector=self.embed(chunk)) for chunk in self.chunk(text)]
        self._indexes.setdefault(index_name, []).extend(chunks)
        logger.info(f"Indexed {len(chunks)} chunks into '{index_name}'")
        return len(chunks)

    def query(self, index_name: str, query_text: str, top_k: int = 5) -> List[str]:
        """Return the text of the top_k chunks most similar to query_text"""
        entries = self._indexes.get(index_name, [])
        if not entries:
            return []
        query_vector = self.embed(query_text)
        scored = [
            (self._similarity(query_vector, entry.vector), position, entry.text)
            for position, entry in enumerate(entries)
        ]
        # Ties keep document order
        scored.sort(key=lambda item: (-item[0], item[1]))
        return [text for _, _, text in scored[:top_k]]

    def chunk(self, text: str) -> List[str]:
        words = text.split()
        if not words:
            return []
        chunks: List[str] = []
        start = 0
        while start < len(words):
            end = min(len(words), start + self.chunk_size)
            chunks.append(" ".join(words[start:end]))
            if end == len(words):
                break
            start = max(0, end - self.overlap)
        return chunks

    @staticmethod
    def embed(text: str) -> Dict[str, float]:
        tokens = [token.lower() for token in _WORD_PATTERN.findall(text)]
        if not tokens:
            return {}
        counts = Counter(tokens)
        norm = math.sqrt(sum(value * value for value in counts.values())) or 1.0
        return {token: value / norm for token, value in counts.items()}

    @staticmethod
    def _similarity(left: Dict[str, float], right: Dict[str, float]) -> float:
        if len(left) > len(right):
            left, right = right, left
        return sum(value * right.get(token, 0.0) for token, value in left.items())


__all__ = ["DocumentChunk", "DocumentStore"]
