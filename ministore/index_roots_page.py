"""Page mapping index ids to the root page of their B+ tree."""

from __future__ import annotations

import struct

from ministore.buffer_pool import PAGE_SIZE

_COUNT = struct.Struct("<i")
_PAIR = struct.Struct("<ii")


class IndexRootsPage:
    """Ordered table of (index_id, root_page_id) records."""

    def __init__(self) -> None:
        self._roots: dict[int, int] = {}

    def insert(self, index_id: int, root_id: int) -> bool:
        if index_id in self._roots:
            return False
        self._roots[index_id] = root_id
        return True

    def delete(self, index_id: int) -> bool:
        return self._roots.pop(index_id, None) is not None

    def update(self, index_id: int, root_id: int) -> bool:
        if index_id not in self._roots:
            return False
        self._roots[index_id] = root_id
        return True

    def get_root_id(self, index_id: int) -> int | None:
        return self._roots.get(index_id)

    def to_bytes(self) -> bytes:
        body = _COUNT.pack(len(self._roots)) + b"".join(
            _PAIR.pack(i, r) for i, r in self._roots.items()
        )
        if len(body) > PAGE_SIZE:
            raise ValueError("index roots do not fit in one page")
        return body.ljust(PAGE_SIZE, b"\0")

    @classmethod
    def from_bytes(cls, data: bytes) -> IndexRootsPage:
        page = cls()
        (count,) = _COUNT.unpack_from(data, 0)
        for index_id, root_id in _PAIR.iter_unpack(data[_COUNT.size:_COUNT.size + count * _PAIR.size]):
            page._roots[index_id] = root_id
        return page