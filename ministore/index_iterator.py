"""Forward iteration over the leaf level of a B+ tree."""

from __future__ import annotations

from typing import Any

from ministore.b_plus_tree_page import KeyCodec
from ministore.buffer_pool import INVALID_PAGE_ID, BufferPoolManager
from ministore.leaf_page import LeafPage


class IndexIterator:
    """Yields (key, row id) pairs from a leaf position through the leaf chain."""

    def __init__(self, buffer_pool_manager: BufferPoolManager, codec: KeyCodec,
                 page_id: int = INVALID_PAGE_ID, index: int = 0) -> None:
        self._bpm = buffer_pool_manager
        self._codec = codec
        self.page_id = page_id
        self.item_index = index
        self._leaf = None if page_id == INVALID_PAGE_ID else self._load(page_id)

    def _load(self, page_id: int) -> LeafPage:
        page = self._bpm.fetch_page(page_id)
        if page is None:
            raise RuntimeError(f"cannot fetch page {page_id}")
        try:
            return LeafPage.from_bytes(page.data, self._codec)
        finally:
            self._bpm.unpin_page(page_id, False)

    def __iter__(self) -> IndexIterator:
        return self

    def __next__(self) -> tuple[Any, int]:
        while self._leaf is not None and self.item_index >= self._leaf.size:
            next_id = self._leaf.next_page_id
            self.page_id = next_id
            self.item_index = 0
            self._leaf = None if next_id == INVALID_PAGE_ID else self._load(next_id)
        if self._leaf is None:
            self.page_id = INVALID_PAGE_ID
            self.item_index = 0
            raise StopIteration
        item = self._leaf.item(self.item_index)
        self.item_index += 1
        return item