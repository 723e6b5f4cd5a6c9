"""Disk-resident B+ tree mapping unique keys to row ids."""

from __future__ import annotations

from typing import Any, Iterator

from ministore.b_plus_tree_page import (
    IndexPageType,
    KeyCodec,
    read_page_type,
    write_parent_page_id,
)
from ministore.buffer_pool import INVALID_PAGE_ID, PAGE_SIZE, BufferPoolManager, Page
from ministore.index_iterator import IndexIterator
from ministore.index_roots_page import IndexRootsPage
from ministore.internal_page import INTERNAL_PAGE_HEADER_SIZE, INTERNAL_VALUE_SIZE, InternalPage
from ministore.leaf_page import LEAF_PAGE_HEADER_SIZE, LEAF_VALUE_SIZE, LeafPage

CATALOG_META_PAGE_ID = 0
INDEX_ROOTS_PAGE_ID = 1

Node = LeafPage | InternalPage


class BPlusTree:
    """Unique-key B+ tree whose nodes live in buffer pool pages."""

    def __init__(self, index_id: int, buffer_pool_manager: BufferPoolManager, codec: KeyCodec,
                 leaf_max_size: int | None = None, internal_max_size: int | None = None) -> None:
        self.index_id = index_id
        self.buffer_pool_manager = buffer_pool_manager
        self.codec = codec
        if leaf_max_size is None:
            leaf_max_size = (PAGE_SIZE - LEAF_PAGE_HEADER_SIZE) // (codec.key_size + LEAF_VALUE_SIZE)
        if internal_max_size is None:
            internal_max_size = (PAGE_SIZE - INTERNAL_PAGE_HEADER_SIZE) // (
                codec.key_size + INTERNAL_VALUE_SIZE)
        if leaf_max_size < 2:
            raise ValueError("leaf pages must hold at least 2 entries")
        if internal_max_size < 3:
            raise ValueError("internal pages must hold at least 3 entries")
        self.leaf_max_size = leaf_max_size
        self.internal_max_size = internal_max_size
        # The roots page sits at a fixed page id; reserve it when the store is fresh.
        while buffer_pool_manager.is_page_free(INDEX_ROOTS_PAGE_ID):
            buffer_pool_manager.allocate_page()
        page = self._fetch(INDEX_ROOTS_PAGE_ID)
        try:
            root = IndexRootsPage.from_bytes(page.data).get_root_id(index_id)
        finally:
            buffer_pool_manager.unpin_page(INDEX_ROOTS_PAGE_ID, False)
        self.root_page_id = INVALID_PAGE_ID if root is None else root

    # ----------------------------------------------------------------- pages

    def _fetch(self, page_id: int) -> Page:
        page = self.buffer_pool_manager.fetch_page(page_id)
        if page is None:
            raise RuntimeError(f"out of memory: cannot fetch page {page_id}")
        return page

    def _allocate(self) -> int:
        page = self.buffer_pool_manager.new_page()
        if page is None:
            raise RuntimeError("out of memory: no free frame for a new page")
        page_id = page.page_id
        self.buffer_pool_manager.unpin_page(page_id, False)
        return page_id

    def _load(self, page_id: int) -> Node:
        page = self._fetch(page_id)
        try:
            if read_page_type(page.data) == IndexPageType.LEAF_PAGE:
                return LeafPage.from_bytes(page.data, self.codec)
            return InternalPage.from_bytes(page.data, self.codec)
        finally:
            self.buffer_pool_manager.unpin_page(page_id, False)

    def _store(self, node: Node) -> None:
        page = self._fetch(node.page_id)
        page.data[:] = node.to_bytes(self.codec)
        self.buffer_pool_manager.unpin_page(node.page_id, True)

    def _update_root_page_id(self) -> None:
        page = self._fetch(INDEX_ROOTS_PAGE_ID)
        roots = IndexRootsPage.from_bytes(page.data)
        if not roots.insert(self.index_id, self.root_page_id):
            roots.update(self.index_id, self.root_page_id)
        page.data[:] = roots.to_bytes()
        self.buffer_pool_manager.unpin_page(INDEX_ROOTS_PAGE_ID, True)

    # ---------------------------------------------------------------- search

    def is_empty(self) -> bool:
        return self.root_page_id == INVALID_PAGE_ID

    def find_leaf_page(self, key: Any = None, left_most: bool = False) -> LeafPage | None:
        """Leaf that may hold ``key`` (or the leftmost leaf); None for an empty tree."""
        if self.is_empty():
            return None
        node = self._load(self.root_page_id)
        while not node.is_leaf_page():
            child = node.value_at(0) if left_most else node.lookup(key, self.codec)
            node = self._load(child)
        return node

    def get_value(self, key: Any) -> int | None:
        """Row id stored under ``key``, or None."""
        leaf = self.find_leaf_page(key)
        if leaf is None:
            return None
        return leaf.lookup(key, self.codec)

    # ------------------------------------------------------------- insertion

    def insert(self, key: Any, value: int) -> bool:
        """Insert a pair; False if the key is already present."""
        if self.is_empty():
            self._start_new_tree(key, value)
            return True
        leaf = self.find_leaf_page(key)
        if leaf.lookup(key, self.codec) is not None:
            return False
        leaf.insert(key, value, self.codec)
        if leaf.size >= self.leaf_max_size:
            recipient = self._split_leaf(leaf)
            self._insert_into_parent(leaf, recipient.key_at(0), recipient)
        else:
            self._store(leaf)
        return True

    def _start_new_tree(self, key: Any, value: int) -> None:
        page_id = self._allocate()
        root = LeafPage(page_id, INVALID_PAGE_ID, self.leaf_max_size)
        root.insert(key, value, self.codec)
        self._store(root)
        self.root_page_id = page_id
        self._update_root_page_id()

    def _split_leaf(self, node: LeafPage) -> LeafPage:
        recipient = LeafPage(self._allocate(), node.parent_page_id, self.leaf_max_size)
        node.move_half_to(recipient)
        recipient.next_page_id = node.next_page_id
        node.next_page_id = recipient.page_id
        return recipient

    def _split_internal(self, node: InternalPage) -> InternalPage:
        recipient = InternalPage(self._allocate(), node.parent_page_id, self.internal_max_size)
        node.move_half_to(recipient, self.buffer_pool_manager)
        return recipient

    def _insert_into_parent(self, old_node: Node, key: Any, new_node: Node) -> None:
        if old_node.is_root_page():
            root_id = self._allocate()
            root = InternalPage(root_id, INVALID_PAGE_ID, self.internal_max_size)
            root.populate_new_root(old_node.page_id, key, new_node.page_id)
            old_node.parent_page_id = root_id
            new_node.parent_page_id = root_id
            self._store(old_node)
            self._store(new_node)
            self._store(root)
            self.root_page_id = root_id
            self._update_root_page_id()
            return
        # Children are written before the parent may split and adopt them.
        self._store(old_node)
        self._store(new_node)
        parent = self._load(old_node.parent_page_id)
        parent.insert_node_after(old_node.page_id, key, new_node.page_id)
        if parent.size >= self.internal_max_size:
            sibling = self._split_internal(parent)
            self._insert_into_parent(parent, sibling.key_at(0), sibling)
        else:
            self._store(parent)

    # --------------------------------------------------------------- removal

    def remove(self, key: Any) -> None:
        """Delete ``key`` if present, rebalancing the tree as needed."""
        if self.is_empty():
            return
        leaf = self.find_leaf_page(key)
        position = leaf.key_index(key, self.codec)
        before = leaf.size
        if leaf.remove_and_delete_record(key, self.codec) == before:
            return
        if leaf.size < leaf.min_size:
            self._coalesce_or_redistribute(leaf)
            return
        self._store(leaf)
        if position == 0 and leaf.size > 0:
            self._refresh_separator(leaf)

    def _refresh_separator(self, leaf: LeafPage) -> None:
        first = leaf.key_at(0)
        child_id = leaf.page_id
        parent_id = leaf.parent_page_id
        while parent_id != INVALID_PAGE_ID:
            parent = self._load(parent_id)
            index = parent.value_index(child_id)
            if index is None:
                return
            if index > 0:
                if self.codec.compare(parent.key_at(index), first) != 0:
                    parent.set_key_at(index, first)
                    self._store(parent)
                return
            child_id = parent.page_id
            parent_id = parent.parent_page_id

    def _coalesce_or_redistribute(self, node: Node) -> None:
        if node.is_root_page():
            self._adjust_root(node)
            return
        parent = self._load(node.parent_page_id)
        index = parent.value_index(node.page_id)
        if index is None:
            raise RuntimeError(f"page {node.page_id} missing from parent {parent.page_id}")
        left = right = None
        if index > 0:
            left = self._load(parent.value_at(index - 1))
            if left.size > left.min_size:
                self._redistribute(left, node, parent, from_left=True)
                return
        if index < parent.size - 1:
            right = self._load(parent.value_at(index + 1))
            if right.size > right.min_size:
                self._redistribute(right, node, parent, from_left=False)
                return
        if left is not None:
            self._coalesce(left, node, parent, index)
        elif right is not None:
            self._coalesce(node, right, parent, index + 1)
        else:
            self._store(node)

    def _redistribute(self, neighbor: Node, node: Node, parent: InternalPage, from_left: bool) -> None:
        bpm = self.buffer_pool_manager
        if node.is_leaf_page():
            if from_left:
                neighbor.move_last_to_front_of(node)
                parent.set_key_at(parent.value_index(node.page_id), node.key_at(0))
            else:
                neighbor.move_first_to_end_of(node)
                parent.set_key_at(parent.value_index(neighbor.page_id), neighbor.key_at(0))
        elif from_left:
            slot = parent.value_index(node.page_id)
            new_key = neighbor.key_at(neighbor.size - 1)
            neighbor.move_last_to_front_of(node, parent.key_at(slot), bpm)
            parent.set_key_at(slot, new_key)
        else:
            slot = parent.value_index(neighbor.page_id)
            new_key = neighbor.key_at(1)
            neighbor.move_first_to_end_of(node, parent.key_at(slot), bpm)
            parent.set_key_at(slot, new_key)
        self._store(neighbor)
        self._store(node)
        self._store(parent)

    def _coalesce(self, recipient: Node, donor: Node, parent: InternalPage, index: int) -> None:
        if donor.is_leaf_page():
            donor.move_all_to(recipient)
            self._store(recipient)
            self.buffer_pool_manager.delete_page(donor.page_id)
        else:
            donor.move_all_to(recipient, parent.key_at(index), self.buffer_pool_manager)
            self._store(recipient)
        parent.remove(index)
        if parent.size < parent.min_size or (parent.is_root_page() and parent.size == 1):
            self._coalesce_or_redistribute(parent)
        else:
            self._store(parent)

    def _adjust_root(self, root: Node) -> None:
        if root.is_leaf_page():
            if root.size > 0:
                self._store(root)
                return
            self.root_page_id = INVALID_PAGE_ID
            self._update_root_page_id()
            self.buffer_pool_manager.delete_page(root.page_id)
            return
        if root.size > 1:
            self._store(root)
            return
        child = root.remove_and_return_only_child()
        page = self._fetch(child)
        write_parent_page_id(page.data, INVALID_PAGE_ID)
        self.buffer_pool_manager.unpin_page(child, True)
        self.root_page_id = child
        self._update_root_page_id()
        self.buffer_pool_manager.delete_page(root.page_id)

    # ------------------------------------------------------------- iteration

    def begin(self, key: Any = None) -> IndexIterator:
        """Iterator from the smallest key, or from the first key not below ``key``."""
        if key is None:
            leaf = self.find_leaf_page(left_most=True)
            index = 0
        else:
            leaf = self.find_leaf_page(key)
            index = 0 if leaf is None else leaf.key_index(key, self.codec)
        if leaf is None:
            return IndexIterator(self.buffer_pool_manager, self.codec)
        return IndexIterator(self.buffer_pool_manager, self.codec, leaf.page_id, index)

    def __iter__(self) -> Iterator[tuple[Any, int]]:
        return self.begin()

    # --------------------------------------------------------------- upkeep

    def destroy(self, page_id: int | None = None) -> None:
        """Delete one page, or every page of the tree when no page id is given."""
        if page_id is not None:
            self.buffer_pool_manager.delete_page(page_id)
            return
        if self.is_empty():
            return
        pending = [self.root_page_id]
        while pending:
            current = pending.pop()
            node = self._load(current)
            if not node.is_leaf_page():
                pending.extend(node.value_at(i) for i in range(node.size))
            self.buffer_pool_manager.delete_page(current)
        self.root_page_id = INVALID_PAGE_ID
        self._update_root_page_id()

    def check(self) -> bool:
        """True when no buffer pool page is left pinned."""
        return self.buffer_pool_manager.check_all_unpinned()