# ministore

Building blocks for a small page-based database engine, in plain Python with
no third-party dependencies.

## What is in it

- `ministore.lru_replacer.LRUReplacer`: tracks unpinned buffer frames.
  `unpin(frame_id)` starts tracking a frame, `pin(frame_id)` stops,
  `victim()` removes and returns the least recently unpinned frame (or
  `None`), and `len()` gives the number of tracked frames.
- `ministore.buffer_pool`:
  - `PAGE_SIZE` (4096) and `INVALID_PAGE_ID` (-1).
  - `Page`: one frame, with `data`, `page_id`, `pin_count` and `is_dirty`.
  - `PageStore`: an in-memory page store. It hands out the lowest free page
    id first and returns zeroed bytes for pages never written.
  - `BufferPoolManager(pool_size, store)`: `fetch_page`, `new_page`,
    `unpin_page`, `flush_page`, `delete_page`, `check_all_unpinned` and
    `close`. `fetch_page` and `new_page` return a pinned `Page`, or `None`
    when every frame is pinned. Dirty pages are written back to the store
    when their frame is reused or flushed.
- `ministore.index_roots_page.IndexRootsPage`: maps index ids to root page
  ids. It has `insert`, `update`, `delete` and `get_root_id`, and
  `to_bytes()` / `from_bytes()` to store it in one page.
- `ministore.header_page.HeaderPage`: a view over a page buffer that holds
  `(name, root_id)` records. Names must be shorter than 32 bytes.
- `ministore.b_plus_tree_page`: `KeyCodec(fmt)` encodes keys with a
  `struct` format such as `"i"` or `"ii"` and orders them. `IndexPageType`
  and `BPlusTreePage` hold the header fields shared by tree pages.
- `ministore.leaf_page.LeafPage` and `ministore.internal_page.InternalPage`:
  tree nodes that convert to and from page bytes.
- `ministore.b_plus_tree.BPlusTree(index_id, bpm, codec, leaf_max_size=None, internal_max_size=None)`:
  a unique-key B+ tree.
  - `insert(key, row_id)` returns `False` for a duplicate key.
  - `get_value(key)` returns the row id, or `None`.
  - `remove(key)` rebalances by redistribution or merging.
  - `begin(key=None)` and iteration yield `(key, row_id)` pairs in key order
    through `ministore.index_iterator.IndexIterator`.
  - `destroy()` frees every page of the tree.
  - `check()` reports whether any buffer page is still pinned.

  The tree records its root in an `IndexRootsPage` at page 1. Page 0 is kept
  for catalog metadata. On a fresh store the tree reserves both pages itself.
- `ministore.tree_printer`: `to_graph(tree)` returns a Graphviz description
  of the tree, and `to_string(tree)` returns a plain-text listing of its
  pages.
- `ministore.catalog_meta`:
  - `CatalogMeta` maps table ids and index ids to metadata page ids.
  - `IndexMetadata` holds an index's name, table id and key columns.

  Both have `serialize_to()`, `deserialize_from()` and `serialized_size()`.
  `deserialize_from()` raises `ValueError` on a wrong magic number.

## Installation

```
pip install .
```

With test dependencies:

```
pip install ".[test]"
```

## Example

```python
from ministore.buffer_pool import BufferPoolManager, PageStore
from ministore.b_plus_tree_page import KeyCodec
from ministore.b_plus_tree import BPlusTree
from ministore import tree_printer

bpm = BufferPoolManager(64, PageStore())
tree = BPlusTree(0, bpm, KeyCodec("i"), 4, 4)

for n in range(1, 11):
    tree.insert(n, n * 100)

assert tree.get_value(3) == 300
tree.remove(3)
assert tree.get_value(3) is None

print([row_id for _, row_id in tree])
print([key for key, _ in tree.begin(6)])   # keys from 6 upward
print(tree_printer.to_string(tree))
```

## What it does not do

- Pages are never written to a file. `PageStore` keeps them in memory, so
  nothing persists past the process.
- There is no SQL parser, query planner or executor.
- There is no table storage or row format, and no catalog manager that
  creates tables and indexes. `CatalogMeta` and `IndexMetadata` only
  encode and decode their records.
- There are no transactions, locking or logging.

## Running the tests

```
pytest
```