"""Common header and key encoding shared by B+ tree pages."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Any

from ministore.buffer_pool import INVALID_PAGE_ID

# page_type, key_size, lsn, size, max_size, parent_page_id, page_id
_HEADER = struct.Struct("<7i")
HEADER_SIZE = _HEADER.size
_PARENT_OFFSET = 20


class IndexPageType(enum.IntEnum):
    INVALID_INDEX_PAGE = 0
    LEAF_PAGE = 1
    INTERNAL_PAGE = 2


class KeyCodec:
    """Fixed-size binary encoding and ordering of index keys."""

    def __init__(self, fmt: str) -> None:
        self._struct = struct.Struct(fmt if fmt[:1] in "<>!=@" else "<" + fmt)
        self._single = len(self._struct.unpack(bytes(self._struct.size))) == 1

    @property
    def key_size(self) -> int:
        return self._struct.size

    def encode(self, key: Any) -> bytes:
        values = (key,) if self._single and not isinstance(key, tuple) else tuple(key)
        return self._struct.pack(*values)

    def decode(self, data: bytes) -> Any:
        values = self._struct.unpack(bytes(data[: self._struct.size]))
        return values[0] if self._single else values

    def compare(self, a: Any, b: Any) -> int:
        """Return -1, 0 or 1 as a is less than, equal to or greater than b."""
        return (a > b) - (a < b)


@dataclass
class BPlusTreePage:
    """Header fields common to leaf and internal pages."""

    page_type: IndexPageType
    page_id: int
    parent_page_id: int = INVALID_PAGE_ID
    max_size: int = 0
    size: int = 0
    lsn: int = 0

    @property
    def min_size(self) -> int:
        return self.max_size // 2

    def is_leaf_page(self) -> bool:
        return self.page_type == IndexPageType.LEAF_PAGE

    def is_root_page(self) -> bool:
        return self.parent_page_id == INVALID_PAGE_ID

    def _pack_header(self, key_size: int) -> bytes:
        return _HEADER.pack(int(self.page_type), key_size, self.lsn, self.size,
                            self.max_size, self.parent_page_id, self.page_id)

    @staticmethod
    def _unpack_header(data: bytes) -> tuple[IndexPageType, int, int, int, int, int, int]:
        page_type, key_size, lsn, size, max_size, parent, page_id = _HEADER.unpack_from(data, 0)
        return IndexPageType(page_type), key_size, lsn, size, max_size, parent, page_id


def read_page_type(data: bytes) -> IndexPageType:
    return IndexPageType(_HEADER.unpack_from(data, 0)[0])


def write_parent_page_id(data: bytearray, parent_page_id: int) -> None:
    struct.pack_into("<i", data, _PARENT_OFFSET, parent_page_id)