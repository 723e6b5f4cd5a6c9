"""Buffer pool caching fixed-size pages from a page store."""

from __future__ import annotations

import heapq
import logging
import threading
from dataclasses import dataclass, field

from ministore.lru_replacer import LRUReplacer

PAGE_SIZE = 4096
INVALID_PAGE_ID = -1

log = logging.getLogger(__name__)


@dataclass(eq=False)
class Page:
    """One frame of the buffer pool."""

    data: bytearray = field(default_factory=lambda: bytearray(PAGE_SIZE))
    page_id: int = INVALID_PAGE_ID
    pin_count: int = 0
    is_dirty: bool = False

    def reset_memory(self) -> None:
        self.data[:] = bytes(PAGE_SIZE)


class PageStore:
    """In-memory page storage with lowest-id-first page allocation."""

    def __init__(self) -> None:
        self._pages: dict[int, bytes] = {}
        self._allocated: set[int] = set()
        self._free: list[int] = []
        self._next = 0

    def read_page(self, page_id: int) -> bytes:
        if page_id < 0:
            raise ValueError(f"invalid page id {page_id}")
        return self._pages.get(page_id, bytes(PAGE_SIZE))

    def write_page(self, page_id: int, data: bytes) -> None:
        if page_id < 0:
            raise ValueError(f"invalid page id {page_id}")
        self._pages[page_id] = bytes(data[:PAGE_SIZE]).ljust(PAGE_SIZE, b"\0")

    def allocate_page(self) -> int:
        if self._free:
            page_id = heapq.heappop(self._free)
        else:
            page_id = self._next
            self._next += 1
        self._allocated.add(page_id)
        return page_id

    def deallocate_page(self, page_id: int) -> None:
        if page_id in self._allocated:
            self._allocated.remove(page_id)
            self._pages.pop(page_id, None)
            heapq.heappush(self._free, page_id)

    def is_page_free(self, page_id: int) -> bool:
        return page_id not in self._allocated


class BufferPoolManager:
    """Fixed-size pool of page frames backed by a page store."""

    def __init__(self, pool_size: int, disk_manager: PageStore) -> None:
        self.pool_size = pool_size
        self.disk_manager = disk_manager
        self._pages = [Page() for _ in range(pool_size)]
        self._replacer = LRUReplacer(pool_size)
        self._free_list = list(range(pool_size))
        self._page_table: dict[int, int] = {}
        self._latch = threading.Lock()

    def _take_frame(self) -> int | None:
        if self._free_list:
            return self._free_list.pop(0)
        frame = self._replacer.victim()
        if frame is None:
            return None
        page = self._pages[frame]
        if page.is_dirty:
            self.disk_manager.write_page(page.page_id, page.data)
            page.is_dirty = False
        self._page_table.pop(page.page_id, None)
        return frame

    def fetch_page(self, page_id: int) -> Page | None:
        """Pin and return the page, reading it in if needed; None if impossible."""
        if page_id <= INVALID_PAGE_ID:
            return None
        frame = self._page_table.get(page_id)
        if frame is not None:
            self._replacer.pin(frame)
            self._pages[frame].pin_count += 1
            return self._pages[frame]
        frame = self._take_frame()
        if frame is None:
            return None
        page = self._pages[frame]
        page.data[:] = self.disk_manager.read_page(page_id)
        page.page_id = page_id
        page.pin_count = 1
        page.is_dirty = False
        self._page_table[page_id] = frame
        return page

    def new_page(self) -> Page | None:
        """Allocate a fresh zeroed page, pinned; None if every frame is pinned."""
        frame = self._take_frame()
        if frame is None:
            return None
        page_id = self.allocate_page()
        page = self._pages[frame]
        page.reset_memory()
        page.page_id = page_id
        page.pin_count = 1
        page.is_dirty = False
        self._page_table[page_id] = frame
        return page

    def delete_page(self, page_id: int) -> bool:
        """Drop a page from the pool and free it; False if it is still pinned."""
        frame = self._page_table.get(page_id)
        if frame is None:
            return True
        page = self._pages[frame]
        if page.pin_count > 0:
            return False
        del self._page_table[page_id]
        self._replacer.pin(frame)
        page.reset_memory()
        page.page_id = INVALID_PAGE_ID
        page.is_dirty = False
        self._free_list.append(frame)
        self.disk_manager.deallocate_page(page_id)
        return True

    def unpin_page(self, page_id: int, is_dirty: bool) -> bool:
        frame = self._page_table.get(page_id)
        if frame is None:
            return False
        page = self._pages[frame]
        if page.pin_count == 0:
            return True
        page.pin_count -= 1
        if page.pin_count == 0:
            self._replacer.unpin(frame)
        if is_dirty:
            page.is_dirty = True
        return True

    def flush_page(self, page_id: int) -> bool:
        with self._latch:
            frame = self._page_table.get(page_id)
            if frame is None:
                return False
            page = self._pages[frame]
            self.disk_manager.write_page(page_id, page.data)
            page.is_dirty = False
            return True

    def allocate_page(self) -> int:
        return self.disk_manager.allocate_page()

    def deallocate_page(self, page_id: int) -> None:
        self.disk_manager.deallocate_page(page_id)

    def is_page_free(self, page_id: int) -> bool:
        return self.disk_manager.is_page_free(page_id)

    def check_all_unpinned(self) -> bool:
        result = True
        for page in self._pages:
            if page.pin_count != 0:
                result = False
                log.error("page %d pin count: %d", page.page_id, page.pin_count)
        return result

    def close(self) -> None:
        """Write every cached page back to the store."""
        for page_id in list(self._page_table):
            self.flush_page(page_id)