"""On-page layouts of the catalog metadata and of index metadata records."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from ministore.buffer_pool import PAGE_SIZE

CATALOG_METADATA_MAGIC_NUM = 89849
INDEX_METADATA_MAGIC_NUM = 344528

_U32 = struct.Struct("<I")
_PAIR = struct.Struct("<Ii")  # (table or index id, page id); page ids may be -1


@dataclass
class CatalogMeta:
    """Maps table ids and index ids to the pages holding their metadata."""

    table_meta_pages: dict[int, int] = field(default_factory=dict)
    index_meta_pages: dict[int, int] = field(default_factory=dict)

    def serialized_size(self) -> int:
        """Bytes needed by the magic number, both counts and every pair."""
        return 3 * _U32.size + (len(self.table_meta_pages) + len(self.index_meta_pages)) * _PAIR.size

    def serialize_to(self) -> bytes:
        """Encode the metadata; raises ValueError if it does not fit in one page."""
        if self.serialized_size() > PAGE_SIZE:
            raise ValueError("failed to serialize catalog metadata: larger than one page")
        out = bytearray()
        out += _U32.pack(CATALOG_METADATA_MAGIC_NUM)
        out += _U32.pack(len(self.table_meta_pages))
        out += _U32.pack(len(self.index_meta_pages))
        for table_id, page_id in sorted(self.table_meta_pages.items()):
            out += _PAIR.pack(table_id, page_id)
        for index_id, page_id in sorted(self.index_meta_pages.items()):
            out += _PAIR.pack(index_id, page_id)
        return bytes(out)

    @classmethod
    def deserialize_from(cls, buf: bytes) -> CatalogMeta:
        """Decode metadata written by ``serialize_to``; ValueError on a bad magic number."""
        (magic,) = _U32.unpack_from(buf, 0)
        if magic != CATALOG_METADATA_MAGIC_NUM:
            raise ValueError("failed to deserialize catalog metadata: bad magic number")
        (table_count,) = _U32.unpack_from(buf, 4)
        (index_count,) = _U32.unpack_from(buf, 8)
        offset = 12
        tables_end = offset + table_count * _PAIR.size
        indexes_end = tables_end + index_count * _PAIR.size
        if len(buf) < indexes_end:
            raise ValueError("failed to deserialize catalog metadata: buffer too short")
        meta = cls()
        meta.table_meta_pages = dict(_PAIR.iter_unpack(bytes(buf[offset:tables_end])))
        meta.index_meta_pages = dict(_PAIR.iter_unpack(bytes(buf[tables_end:indexes_end])))
        return meta


@dataclass
class IndexMetadata:
    """Name, owning table and key column mapping of one index."""

    index_id: int
    index_name: str
    table_id: int
    key_map: list[int] = field(default_factory=list)

    def serialized_size(self) -> int:
        return len(self.index_name.encode()) + 4 * len(self.key_map) + 4 * 5

    def serialize_to(self) -> bytes:
        """Encode as magic | index id | name length | name | table id | key count | keys."""
        name = self.index_name.encode()
        out = bytearray()
        out += _U32.pack(INDEX_METADATA_MAGIC_NUM)
        out += _U32.pack(self.index_id)
        out += _U32.pack(len(name))
        out += name
        out += _U32.pack(self.table_id)
        out += _U32.pack(len(self.key_map))
        for column in self.key_map:
            out += _U32.pack(column)
        return bytes(out)

    @classmethod
    def deserialize_from(cls, buf: bytes) -> IndexMetadata:
        """Decode a record written by ``serialize_to``; ValueError on a bad magic number."""
        (magic,) = _U32.unpack_from(buf, 0)
        if magic != INDEX_METADATA_MAGIC_NUM:
            raise ValueError("failed to deserialize index metadata: bad magic number")
        (index_id,) = _U32.unpack_from(buf, 4)
        (name_len,) = _U32.unpack_from(buf, 8)
        offset = 12
        name = bytes(buf[offset:offset + name_len]).decode()
        offset += name_len
        (table_id,) = _U32.unpack_from(buf, offset)
        (key_count,) = _U32.unpack_from(buf, offset + 4)
        offset += 8
        key_map = [_U32.unpack_from(buf, offset + 4 * i)[0] for i in range(key_count)]
        return cls(index_id, name, table_id, key_map)