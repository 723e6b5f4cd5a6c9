"""Leaf page of a B+ tree: sorted keys paired with row ids."""

from __future__ import annotations

import struct
from typing import Any

from ministore.b_plus_tree_page import HEADER_SIZE, BPlusTreePage, IndexPageType, KeyCodec
from ministore.buffer_pool import INVALID_PAGE_ID, PAGE_SIZE

_NEXT = struct.Struct("<i")
_VALUE = struct.Struct("<q")
LEAF_PAGE_HEADER_SIZE = HEADER_SIZE + _NEXT.size
LEAF_VALUE_SIZE = _VALUE.size


class LeafPage(BPlusTreePage):
    """Sorted (key, row id) pairs plus a link to the next leaf."""

    def __init__(self, page_id: int, parent_id: int = INVALID_PAGE_ID, max_size: int = 0) -> None:
        super().__init__(IndexPageType.LEAF_PAGE, page_id, parent_id, max_size)
        self.next_page_id = INVALID_PAGE_ID
        self._items: list[tuple[Any, int]] = []

    def _sync(self) -> None:
        self.size = len(self._items)

    def key_index(self, key: Any, codec: KeyCodec) -> int:
        """Position of ``key`` if present, otherwise of the first larger key."""
        lo, hi = 0, len(self._items)
        while lo < hi:
            mid = (lo + hi) // 2
            result = codec.compare(key, self._items[mid][0])
            if result == 0:
                return mid
            if result < 0:
                hi = mid
            else:
                lo = mid + 1
        return lo

    def key_at(self, index: int) -> Any:
        return self._items[index][0]

    def value_at(self, index: int) -> int:
        return self._items[index][1]

    def item(self, index: int) -> tuple[Any, int]:
        return self._items[index]

    def insert(self, key: Any, value: int, codec: KeyCodec) -> int:
        """Insert in key order and return the new size."""
        self._items.insert(self.key_index(key, codec), (key, value))
        self._sync()
        return self.size

    def move_half_to(self, recipient: LeafPage) -> None:
        """Move the upper half of the pairs to the end of ``recipient``."""
        count = len(self._items) // 2
        keep = len(self._items) - count
        recipient._items.extend(self._items[keep:])
        del self._items[keep:]
        recipient._sync()
        self._sync()

    def lookup(self, key: Any, codec: KeyCodec) -> int | None:
        """Return the row id stored for ``key``, or None."""
        index = self.key_index(key, codec)
        if index >= len(self._items) or codec.compare(key, self._items[index][0]) != 0:
            return None
        return self._items[index][1]

    def remove_and_delete_record(self, key: Any, codec: KeyCodec) -> int:
        """Delete ``key`` if present and return the size afterwards."""
        index = self.key_index(key, codec)
        if index < len(self._items) and codec.compare(key, self._items[index][0]) == 0:
            del self._items[index]
            self._sync()
        return self.size

    def move_all_to(self, recipient: LeafPage) -> None:
        recipient._items.extend(self._items)
        recipient.next_page_id = self.next_page_id
        self._items.clear()
        recipient._sync()
        self._sync()

    def move_first_to_end_of(self, recipient: LeafPage) -> None:
        key, value = self._items.pop(0)
        recipient.copy_last_from(key, value)
        self._sync()

    def copy_last_from(self, key: Any, value: int) -> None:
        self._items.append((key, value))
        self._sync()

    def move_last_to_front_of(self, recipient: LeafPage) -> None:
        key, value = self._items.pop()
        recipient.copy_first_from(key, value)
        self._sync()

    def copy_first_from(self, key: Any, value: int) -> None:
        self._items.insert(0, (key, value))
        self._sync()

    def to_bytes(self, codec: KeyCodec) -> bytes:
        """Encode the page into exactly ``PAGE_SIZE`` bytes."""
        body = bytearray(self._pack_header(codec.key_size))
        body += _NEXT.pack(self.next_page_id)
        for key, value in self._items:
            body += codec.encode(key)
            body += _VALUE.pack(value)
        if len(body) > PAGE_SIZE:
            raise ValueError("leaf page entries do not fit in one page")
        return bytes(body.ljust(PAGE_SIZE, b"\0"))

    @classmethod
    def from_bytes(cls, data: bytes, codec: KeyCodec) -> LeafPage:
        page_type, key_size, lsn, size, max_size, parent, page_id = cls._unpack_header(data)
        if page_type != IndexPageType.LEAF_PAGE:
            raise ValueError(f"not a leaf page: {page_type.name}")
        if key_size != codec.key_size:
            raise ValueError(f"key size {key_size} does not match codec size {codec.key_size}")
        page = cls(page_id, parent, max_size)
        page.lsn = lsn
        (page.next_page_id,) = _NEXT.unpack_from(data, HEADER_SIZE)
        pair = key_size + _VALUE.size
        end = LEAF_PAGE_HEADER_SIZE + size * pair
        for start in range(LEAF_PAGE_HEADER_SIZE, end, pair):
            key = codec.decode(data[start:start + key_size])
            (value,) = _VALUE.unpack_from(data, start + key_size)
            page._items.append((key, value))
        page._sync()
        return page