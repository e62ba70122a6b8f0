"""Incremental reveal of filtered results."""

from dataclasses import dataclass

PAGE_CHUNK = 21


@dataclass
class ViewPagination:
    """Number of results revealed so far, grown one chunk at a time."""
    chunk_size: int = PAGE_CHUNK
    visible_count: int = PAGE_CHUNK

    def __post_init__(self):
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")

    def reset(self) -> None:
        """Back to a single chunk (filter predicate changed)."""
        self.visible_count = self.chunk_size

    def preserve(self, total: int) -> None:
        """Keep the revealed count across a reorder, clamped to the new result length."""
        self.visible_count = min(total, max(self.visible_count, self.chunk_size))

    def has_more(self, total: int) -> bool:
        return self.visible_count < total

    def reveal_more(self, total: int) -> bool:
        """
        Reveal one more chunk.

        Returns:
            False (and changes nothing) when every result is already visible
        """
        if not total or not self.has_more(total):
            return False
        self.visible_count = min(total, self.visible_count + self.chunk_size)
        return True
