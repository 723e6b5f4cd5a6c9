from ministore.buffer_pool import PAGE_SIZE
from ministore.index_roots_page import IndexRootsPage


def test_index_roots_page():
    page = IndexRootsPage()
    for i in range(25):
        assert not page.delete(i)
        assert page.insert(i, i * 100)
    for i in range(25):
        assert not page.insert(i, 0)
        assert page.get_root_id(i) == i * 100
    for i in range(25):
        assert page.update(i, i + 100)
        assert page.get_root_id(i) == i + 100
    deleted = {0, 4, 5, 13, 12, 7, 22, 24}
    for v in deleted:
        assert page.delete(v)
    for i in range(25):
        if i in deleted:
            assert page.get_root_id(i) is None
        else:
            assert page.get_root_id(i) == i + 100


def test_round_trip():
    page = IndexRootsPage()
    page.insert(3, 30)
    page.insert(1, 10)
    data = page.to_bytes()
    assert len(data) == PAGE_SIZE
    other = IndexRootsPage.from_bytes(data)
    assert other.get_root_id(3) == 30
    assert other.get_root_id(1) == 10
    assert other.get_root_id(2) is None


def test_update_missing():
    assert not IndexRootsPage().update(5, 1)