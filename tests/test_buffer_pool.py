import os

from ministore.buffer_pool import PAGE_SIZE, BufferPoolManager, PageStore


def test_binary_data():
    pool_size = 10
    store = PageStore()
    bpm = BufferPoolManager(pool_size, store)

    page0 = bpm.new_page()
    assert page0 is not None
    assert page0.page_id == 0

    data = bytearray(os.urandom(PAGE_SIZE))
    data[PAGE_SIZE // 2] = 0
    data[PAGE_SIZE - 1] = 0
    page0.data[:] = data
    assert bytes(page0.data) == bytes(data)

    for i in range(1, pool_size):
        page = bpm.new_page()
        assert page is not None
        assert page.page_id == i

    for _ in range(pool_size, pool_size * 2):
        assert bpm.new_page() is None

    for i in range(5):
        assert bpm.unpin_page(i, True)
        assert bpm.flush_page(i)
    for i in range(5):
        page = bpm.new_page()
        assert page is not None
        assert page.page_id == pool_size + i
        bpm.unpin_page(page.page_id, False)

    page0 = bpm.fetch_page(0)
    assert bytes(page0.data) == bytes(data)
    assert bpm.unpin_page(0, True)


def test_delete_and_unpin():
    bpm = BufferPoolManager(2, PageStore())
    page = bpm.new_page()
    assert not bpm.delete_page(page.page_id)
    assert bpm.unpin_page(page.page_id, False)
    assert bpm.check_all_unpinned()
    assert bpm.delete_page(page.page_id)
    assert bpm.is_page_free(page.page_id)
    assert not bpm.unpin_page(99, False)
    assert not bpm.flush_page(99)
    assert bpm.fetch_page(-1) is None


def test_dirty_page_written_on_eviction():
    store = PageStore()
    bpm = BufferPoolManager(1, store)
    page = bpm.new_page()
    page.data[0] = 42
    bpm.unpin_page(page.page_id, True)
    second = bpm.new_page()
    assert second.page_id == 1
    assert store.read_page(0)[0] == 42
    assert not bpm.check_all_unpinned()