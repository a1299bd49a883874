"""In-process keyword index over course content chunks."""

from typing import Dict, Iterable, List

from ..models.course import CourseContentChunk


def keyword_score(query: str, text: str) -> int:
    """Number of distinct query tokens found anywhere in ``text``."""
    haystack = text.casefold()
    tokens = set(query.casefold().split())
    return sum(1 for token in tokens if token in haystack)


class InMemoryRetrievalIndex:
    def __init__(self):
        self._chunks: Dict[str, CourseContentChunk] = {}

    def __len__(self) -> int:
        return len(self._chunks)

    async def upsert(self, chunks: Iterable[CourseContentChunk]) -> None:
        for chunk in chunks:
            self._chunks[chunk.chunk_id] = chunk

    async def search(
        self, query: str, allowed_course_ids: Iterable[str], top: int
    ) -> List[CourseContentChunk]:
        allowed = set(allowed_course_ids)
        scored = [
            chunk.model_copy(
                update={"score": float(keyword_score(query, chunk.text)), "embedding": None}
            )
            for chunk in self._chunks.values()
            if chunk.course_id in allowed
        ]
        scored.sort(key=lambda c: c.score, reverse=True)
        return scored[:max(top, 0)]
