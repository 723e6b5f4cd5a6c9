"""Header page holding named root-page records in a raw byte buffer."""

from __future__ import annotations

import struct

from ministore.buffer_pool import INVALID_PAGE_ID, PAGE_SIZE

_RECORD_SIZE = 36
_NAME_SIZE = 32
_INT = struct.Struct("<i")


class HeaderPage:
    """View over a page buffer storing (name, root_id) records."""

    def __init__(self, data: bytearray | None = None) -> None:
        self.data = data if data is not None else bytearray(PAGE_SIZE)

    @property
    def record_count(self) -> int:
        return _INT.unpack_from(self.data, 0)[0]

    @record_count.setter
    def record_count(self, value: int) -> None:
        _INT.pack_into(self.data, 0, value)

    @staticmethod
    def _check_name(name: str) -> bytes:
        raw = name.encode()
        if len(raw) >= _NAME_SIZE:
            raise ValueError(f"record name must be shorter than {_NAME_SIZE} bytes")
        return raw

    def _offset(self, index: int) -> int:
        return 4 + index * _RECORD_SIZE

    def find_record(self, name: str) -> int | None:
        """Return the index of the named record, or None."""
        raw = name.encode()
        for i in range(self.record_count):
            off = self._offset(i)
            stored = bytes(self.data[off:off + _NAME_SIZE]).split(b"\0", 1)[0]
            if stored == raw:
                return i
        return None

    def insert_record(self, name: str, root_id: int) -> bool:
        raw = self._check_name(name)
        if root_id <= INVALID_PAGE_ID:
            raise ValueError("root id must be a valid page id")
        if self.find_record(name) is not None:
            return False
        count = self.record_count
        off = self._offset(count)
        self.data[off:off + _NAME_SIZE] = raw.ljust(_NAME_SIZE, b"\0")
        _INT.pack_into(self.data, off + _NAME_SIZE, root_id)
        self.record_count = count + 1
        return True

    def delete_record(self, name: str) -> bool:
        count = self.record_count
        if count <= 0:
            raise ValueError("header page has no records")
        index = self.find_record(name)
        if index is None:
            return False
        start = self._offset(index)
        end = self._offset(count)
        self.data[start:end] = self.data[start + _RECORD_SIZE:end] + bytes(_RECORD_SIZE)
        self.record_count = count - 1
        return True

    def update_record(self, name: str, root_id: int) -> bool:
        self._check_name(name)
        index = self.find_record(name)
        if index is None:
            return False
        _INT.pack_into(self.data, self._offset(index) + _NAME_SIZE, root_id)
        return True

    def get_root_id(self, name: str) -> int | None:
        self._check_name(name)
        index = self.find_record(name)
        if index is None:
            return None
        return _INT.unpack_from(self.data, self._offset(index) + _NAME_SIZE)[0]