import pytest

from ministore.b_plus_tree_page import KeyCodec
from ministore.buffer_pool import INVALID_PAGE_ID, BufferPoolManager, PageStore
from ministore.index_iterator import IndexIterator
from ministore.leaf_page import LeafPage


@pytest.fixture
def codec():
    return KeyCodec("i")


@pytest.fixture
def bpm():
    return BufferPoolManager(16, PageStore())


def build_chain(bpm, codec, pairs, per_leaf, removed=()):
    """Write leaves holding ``pairs`` in order, linked left to right."""
    chunks = [pairs[start:start + per_leaf] for start in range(0, len(pairs), per_leaf)]
    pages = [bpm.new_page() for _ in chunks]
    for position, (page, chunk) in enumerate(zip(pages, chunks)):
        leaf = LeafPage(page.page_id, INVALID_PAGE_ID, per_leaf + 1)
        for key, value in chunk:
            leaf.insert(key, value, codec)
        for key in removed:
            leaf.remove_and_delete_record(key, codec)
        if position + 1 < len(pages):
            leaf.next_page_id = pages[position + 1].page_id
        page.data[:] = leaf.to_bytes(codec)
        bpm.unpin_page(page.page_id, True)
    return [page.page_id for page in pages]


def test_iterates_remaining_keys_after_deletes(bpm, codec):
    pairs = [(i, i * 100) for i in range(1, 51)]
    ids = build_chain(bpm, codec, pairs, per_leaf=7, removed=range(2, 51, 2))
    result = list(IndexIterator(bpm, codec, ids[0], 0))
    assert [key for key, _ in result] == list(range(1, 50, 2))
    for position, (_, value) in enumerate(result, start=1):
        assert value == (2 * position - 1) * 100


def test_starts_mid_leaf(bpm, codec):
    ids = build_chain(bpm, codec, [(i, i) for i in range(10)], per_leaf=4)
    assert [k for k, _ in IndexIterator(bpm, codec, ids[1], 2)] == [6, 7, 8, 9]


def test_index_past_leaf_end_moves_to_next_leaf(bpm, codec):
    ids = build_chain(bpm, codec, [(i, i) for i in range(8)], per_leaf=4)
    assert [k for k, _ in IndexIterator(bpm, codec, ids[0], 4)] == [4, 5, 6, 7]


def test_skips_empty_leaves(bpm, codec):
    ids = build_chain(bpm, codec, [(i, i) for i in range(6)], per_leaf=2, removed=(2, 3))
    assert [k for k, _ in IndexIterator(bpm, codec, ids[0], 0)] == [0, 1, 4, 5]


def test_end_iterator_is_empty(bpm, codec):
    iterator = IndexIterator(bpm, codec)
    assert list(iterator) == []
    assert iterator.page_id == INVALID_PAGE_ID


def test_exhausted_iterator_state_and_pins(bpm, codec):
    ids = build_chain(bpm, codec, [(i, i) for i in range(5)], per_leaf=3)
    iterator = IndexIterator(bpm, codec, ids[0], 0)
    assert next(iterator) == (0, 0)
    assert len(list(iterator)) == 4
    with pytest.raises(StopIteration):
        next(iterator)
    assert iterator.page_id == INVALID_PAGE_ID
    assert bpm.check_all_unpinned()