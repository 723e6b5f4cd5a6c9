import pytest

from ministore.header_page import HeaderPage


def test_insert_and_get():
    page = HeaderPage()
    assert page.insert_record("alpha", 7)
    assert page.insert_record("beta", 9)
    assert page.get_root_id("alpha") == 7
    assert page.get_root_id("beta") == 9
    assert page.find_record("beta") == 1
    assert page.record_count == 2


def test_count_stored_in_first_bytes():
    page = HeaderPage()
    page.insert_record("alpha", 7)
    assert bytes(page.data[:4]) == b"\x01\x00\x00\x00"
    assert bytes(page.data[4:9]) == b"alpha"


def test_duplicate_rejected():
    page = HeaderPage()
    assert page.insert_record("alpha", 1)
    assert not page.insert_record("alpha", 2)
    assert page.get_root_id("alpha") == 1


def test_update_and_delete():
    page = HeaderPage()
    page.insert_record("a", 1)
    page.insert_record("b", 2)
    page.insert_record("c", 3)
    assert page.update_record("b", 20)
    assert not page.update_record("zz", 5)
    assert page.delete_record("a")
    assert not page.delete_record("a")
    assert page.get_root_id("a") is None
    assert page.get_root_id("b") == 20
    assert page.get_root_id("c") == 3
    assert page.record_count == 2


def test_shared_buffer_round_trip():
    page = HeaderPage()
    page.insert_record("x", 4)
    other = HeaderPage(bytearray(page.data))
    assert other.get_root_id("x") == 4


def test_errors():
    page = HeaderPage()
    with pytest.raises(ValueError):
        page.delete_record("a")
    with pytest.raises(ValueError):
        page.insert_record("n" * 32, 1)
    with pytest.raises(ValueError):
        page.insert_record("a", -1)