"""Internal page of a B+ tree: separator keys and child page ids."""

from __future__ import annotations

import struct
from typing import Any, Iterable

from ministore.b_plus_tree_page import (
    HEADER_SIZE,
    BPlusTreePage,
    IndexPageType,
    KeyCodec,
    read_page_type,
    write_parent_page_id,
)
from ministore.buffer_pool import INVALID_PAGE_ID, PAGE_SIZE, BufferPoolManager

_CHILD = struct.Struct("<i")
INTERNAL_PAGE_HEADER_SIZE = HEADER_SIZE
INTERNAL_VALUE_SIZE = _CHILD.size


def _fetch(buffer_pool_manager: BufferPoolManager, page_id: int):
    page = buffer_pool_manager.fetch_page(page_id)
    if page is None:
        raise RuntimeError(f"cannot fetch page {page_id}")
    return page


class InternalPage(BPlusTreePage):
    """(key, child page id) pairs; the key in slot 0 carries no meaning."""

    def __init__(self, page_id: int, parent_id: int = INVALID_PAGE_ID, max_size: int = 0) -> None:
        super().__init__(IndexPageType.INTERNAL_PAGE, page_id, parent_id, max_size)
        self._items: list[tuple[Any, int]] = []

    def _sync(self) -> None:
        self.size = len(self._items)

    def key_at(self, index: int) -> Any:
        return self._items[index][0]

    def set_key_at(self, index: int, key: Any) -> None:
        self._items[index] = (key, self._items[index][1])

    def value_at(self, index: int) -> int:
        return self._items[index][1]

    def set_value_at(self, index: int, value: int) -> None:
        self._items[index] = (self._items[index][0], value)

    def value_index(self, value: int) -> int | None:
        """Slot holding child ``value``, or None."""
        return next((i for i, (_, child) in enumerate(self._items) if child == value), None)

    def lookup(self, key: Any, codec: KeyCodec) -> int:
        """Child page id whose subtree may contain ``key``."""
        size = len(self._items)
        if size == 0:
            return INVALID_PAGE_ID
        if size == 1 or codec.compare(key, self.key_at(1)) < 0:
            return self.value_at(0)
        begin, end = 1, size
        while end > begin + 1:
            mid = (begin + end) // 2
            result = codec.compare(key, self.key_at(mid))
            if result > 0:
                begin = mid
            elif result < 0:
                end = mid
            else:
                return self.value_at(mid)
        return self.value_at(begin)

    def populate_new_root(self, old_value: int, new_key: Any, new_value: int) -> None:
        self._items = [(None, old_value), (new_key, new_value)]
        self._sync()

    def insert_node_after(self, old_value: int, new_key: Any, new_value: int) -> int:
        """Insert a pair right after the child ``old_value``; return the new size."""
        index = self.value_index(old_value)
        if index is None:
            raise ValueError(f"child page {old_value} not in page {self.page_id}")
        self._items.insert(index + 1, (new_key, new_value))
        self._sync()
        return self.size

    def move_half_to(self, recipient: InternalPage, buffer_pool_manager: BufferPoolManager) -> None:
        size = len(self._items)
        keep = size - size // 2
        recipient.copy_n_from(self._items[keep:], buffer_pool_manager)
        del self._items[keep:]
        self._sync()

    def copy_n_from(self, items: Iterable[tuple[Any, int]], buffer_pool_manager: BufferPoolManager) -> None:
        """Append pairs and adopt their children."""
        for key, value in list(items):
            self.copy_last_from(key, value, buffer_pool_manager)

    def remove(self, index: int) -> None:
        del self._items[index]
        self._sync()

    def remove_and_return_only_child(self) -> int:
        if len(self._items) != 1:
            return INVALID_PAGE_ID
        child = self.value_at(0)
        self.remove(0)
        return child

    def move_all_to(self, recipient: InternalPage, middle_key: Any,
                    buffer_pool_manager: BufferPoolManager) -> None:
        """Append every pair to ``recipient``, using ``middle_key`` for slot 0."""
        recipient.copy_last_from(middle_key, self.value_at(0), buffer_pool_manager)
        recipient.copy_n_from(self._items[1:], buffer_pool_manager)
        buffer_pool_manager.delete_page(self.page_id)

    def move_first_to_end_of(self, recipient: InternalPage, middle_key: Any,
                             buffer_pool_manager: BufferPoolManager) -> None:
        recipient.copy_last_from(middle_key, self.value_at(0), buffer_pool_manager)
        self.remove(0)

    def _adopt(self, child_id: int, buffer_pool_manager: BufferPoolManager) -> None:
        page = _fetch(buffer_pool_manager, child_id)
        write_parent_page_id(page.data, self.page_id)
        buffer_pool_manager.unpin_page(child_id, True)

    def copy_last_from(self, key: Any, value: int, buffer_pool_manager: BufferPoolManager) -> None:
        self._items.append((key, value))
        self._sync()
        self._adopt(value, buffer_pool_manager)

    def move_last_to_front_of(self, recipient: InternalPage, middle_key: Any,
                              buffer_pool_manager: BufferPoolManager) -> None:
        recipient.copy_first_from(self.value_at(len(self._items) - 1), buffer_pool_manager)
        recipient.set_key_at(1, middle_key)
        self.remove(len(self._items) - 1)

    def copy_first_from(self, value: int, buffer_pool_manager: BufferPoolManager) -> None:
        """Put ``value`` in slot 0; the caller must set the key of slot 1."""
        first_key = self._items[0][0] if self._items else None
        self._items.insert(0, (first_key, value))
        self._sync()
        self._adopt(value, buffer_pool_manager)

    def leftmost_leaf_id(self, buffer_pool_manager: BufferPoolManager, codec: KeyCodec) -> int:
        """Page id of the leftmost leaf below this page."""
        child = self.value_at(0)
        while True:
            page = _fetch(buffer_pool_manager, child)
            try:
                if read_page_type(page.data) == IndexPageType.LEAF_PAGE:
                    return child
                node = InternalPage.from_bytes(page.data, codec)
            finally:
                buffer_pool_manager.unpin_page(child, False)
            child = node.value_at(0)

    def to_bytes(self, codec: KeyCodec) -> bytes:
        """Encode the page into exactly ``PAGE_SIZE`` bytes."""
        body = bytearray(self._pack_header(codec.key_size))
        for key, value in self._items:
            body += bytes(codec.key_size) if key is None else codec.encode(key)
            body += _CHILD.pack(value)
        if len(body) > PAGE_SIZE:
            raise ValueError("internal page entries do not fit in one page")
        return bytes(body.ljust(PAGE_SIZE, b"\0"))

    @classmethod
    def from_bytes(cls, data: bytes, codec: KeyCodec) -> InternalPage:
        page_type, key_size, lsn, size, max_size, parent, page_id = cls._unpack_header(data)
        if page_type != IndexPageType.INTERNAL_PAGE:
            raise ValueError(f"not an internal page: {page_type.name}")
        if key_size != codec.key_size:
            raise ValueError(f"key size {key_size} does not match codec size {codec.key_size}")
        page = cls(page_id, parent, max_size)
        page.lsn = lsn
        pair = key_size + _CHILD.size
        end = INTERNAL_PAGE_HEADER_SIZE + size * pair
        for start in range(INTERNAL_PAGE_HEADER_SIZE, end, pair):
            key = codec.decode(data[start:start + key_size])
            (value,) = _CHILD.unpack_from(data, start + key_size)
            page._items.append((key, value))
        page._sync()
        return page