# -*- coding: utf-8 -*-
"""Split ordered texts into engine-sized chunks and stitch results back."""

from dataclasses import dataclass, field
from typing import List, Sequence

from .constants import DEEPL_API_MAX_TEXTS, DEEPL_API_ROUGH_MAX_REQUEST_SIZE


def byte_size(text: str) -> int:
    return len((text or "").encode("utf-8"))


@dataclass
class ChunkPlan:
    """Ordered chunks covering the input exactly once."""
    chunks: List[List[str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(len(c) for c in self.chunks)

    def reassemble(self, results: Sequence[Sequence[str]]) -> List[str]:
        """Concatenate per-chunk results in chunk order."""
        if len(results) != len(self.chunks):
            raise ValueError(
                f"Expected results for {len(self.chunks)} chunks, got {len(results)}"
            )
        output: List[str] = []
        for chunk, result in zip(self.chunks, results):
            if len(result) != len(chunk):
                raise ValueError(
                    f"Chunk of {len(chunk)} texts returned {len(result)} results"
                )
            output.extend(result)
        return output


def split_chunks(texts: Sequence[str],
                 max_texts: int = DEEPL_API_MAX_TEXTS,
                 max_byte_size: int = DEEPL_API_ROUGH_MAX_REQUEST_SIZE) -> ChunkPlan:
    """
    Greedily pack texts into chunks bounded by count and byte size.

    A text larger than ``max_byte_size`` on its own still gets a chunk of its
    own; texts are never split.
    """
    if max_texts < 1:
        raise ValueError("max_texts must be at least 1")

    plan = ChunkPlan()
    current: List[str] = []
    current_size = 0

    for text in texts:
        size = byte_size(text)
        if current and (len(current) >= max_texts or current_size + size > max_byte_size):
            plan.chunks.append(current)
            current = []
            current_size = 0
        current.append(text)
        current_size += size

    if current:
        plan.chunks.append(current)
    return plan
