import io
import struct

import pytest

from jetdb.pages import (
    PageError,
    add_row_to_page,
    add_row_to_temp_table,
    encrypt_page,
    new_data_page,
    new_leaf_page,
    page_free_space,
    replace_row,
    row_bounds,
    write_page,
)
from jetdb.rc4 import rc4
from jetdb.schema import CatalogEntry, Format, TableDef, create_temp_table


def _u16(buf, offset):
    return struct.unpack_from("<H", buf, offset)[0]


def _u32(buf, offset):
    return struct.unpack_from("<I", buf, offset)[0]


def _table(fmt=Format.JET4):
    return TableDef(entry=CatalogEntry(object_name="T", table_pg=7), fmt=fmt)


def _rows(fmt, page):
    count = _u16(page, fmt.row_count_offset)
    result = []
    for index in range(count):
        start, size = row_bounds(fmt, page, index)
        result.append(bytes(page[start:start + size]))
    return result


@pytest.mark.parametrize("fmt", [Format.JET3, Format.JET4])
def test_new_data_page_header(fmt):
    page = new_data_page(fmt, 42)
    assert len(page) == fmt.pg_size
    assert page[0:2] == b"\x01\x01"
    assert _u16(page, 2) == fmt.pg_size - fmt.row_count_offset - 2
    assert _u32(page, 4) == 42
    assert page_free_space(fmt, page) == _u16(page, 2)


def test_new_leaf_page_header():
    page = new_leaf_page(Format.JET4, 9)
    assert page[0:2] == b"\x04\x01"
    assert _u32(page, 4) == 9
    assert not any(page[8:])


@pytest.mark.parametrize("fmt", [Format.JET3, Format.JET4])
def test_add_rows_round_trip(fmt):
    table = _table(fmt)
    page = new_data_page(fmt, 7)
    rows = [b"first", b"second row", b"3"]
    for count, row in enumerate(rows, start=1):
        assert add_row_to_page(table, page, row) == count
    assert _rows(fmt, page) == rows
    assert page_free_space(fmt, page) == _u16(page, 2)


def test_add_row_reduces_free_space():
    fmt = Format.JET4
    table = _table(fmt)
    page = new_data_page(fmt, 7)
    before = page_free_space(fmt, page)
    add_row_to_page(table, page, b"abcdef")
    assert page_free_space(fmt, page) == before - len(b"abcdef") - 2


def test_add_row_too_large_raises():
    fmt = Format.JET3
    table = _table(fmt)
    page = new_data_page(fmt, 7)
    with pytest.raises(PageError):
        add_row_to_page(table, page, bytes(fmt.pg_size))
    assert _u16(page, fmt.row_count_offset) == 0


def test_row_bounds_out_of_range():
    fmt = Format.JET4
    page = new_data_page(fmt, 1)
    with pytest.raises(IndexError):
        row_bounds(fmt, page, 0)


def test_replace_row_keeps_others():
    fmt = Format.JET4
    table = _table(fmt)
    page = new_data_page(fmt, 7)
    for row in (b"aaa", b"bbbb", b"cc"):
        add_row_to_page(table, page, row)
    replace_row(table, page, 1, b"replacement")
    assert _rows(fmt, page) == [b"aaa", b"replacement", b"cc"]
    assert _u16(page, 2) == page_free_space(fmt, page)


def test_replace_row_bad_index():
    fmt = Format.JET4
    table = _table(fmt)
    page = new_data_page(fmt, 7)
    add_row_to_page(table, page, b"x")
    with pytest.raises(IndexError):
        replace_row(table, page, 3, b"y")


def test_replace_row_without_space():
    fmt = Format.JET3
    table = _table(fmt)
    page = new_data_page(fmt, 7)
    add_row_to_page(table, page, b"x")
    with pytest.raises(PageError):
        replace_row(table, page, 0, bytes(fmt.pg_size))


def test_temp_table_spills_to_new_page():
    fmt = Format.JET3
    table = create_temp_table("#t", fmt)
    rows = [bytes([n]) * 100 for n in range(30)]
    for row in rows:
        add_row_to_temp_table(table, row)
    assert len(table.temp_table_pages) > 1
    stored = [row for page in table.temp_table_pages for row in _rows(fmt, page)]
    assert stored == rows


def test_temp_table_requires_work_table():
    with pytest.raises(ValueError):
        add_row_to_temp_table(_table(), b"row")


def test_encrypt_page_is_involution():
    page = bytes(new_data_page(Format.JET4, 3))
    once = encrypt_page(page, 5, 0x1234ABCD)
    assert once != page
    assert encrypt_page(once, 5, 0x1234ABCD) == page
    assert once == rc4((0x1234ABCD ^ 5).to_bytes(4, "little"), page)


def test_encrypt_page_skips_page_zero_and_no_key():
    page = bytes(new_data_page(Format.JET4, 3))
    assert encrypt_page(page, 0, 0x55) == page
    assert encrypt_page(page, 4, 0) == page


def test_write_page_plain():
    fmt = Format.JET3
    stream = io.BytesIO(bytes(2 * fmt.pg_size))
    page = new_data_page(fmt, 11)
    assert write_page(stream, fmt, page, 1) == fmt.pg_size
    data = stream.getvalue()
    assert data[fmt.pg_size:] == page
    assert data[:fmt.pg_size] == bytes(fmt.pg_size)


def test_write_page_encrypted():
    fmt = Format.JET3
    stream = io.BytesIO(bytes(2 * fmt.pg_size))
    page = new_data_page(fmt, 11)
    write_page(stream, fmt, page, 1, db_key=0x0BADF00D)
    stored = stream.getvalue()[fmt.pg_size:]
    assert stored != bytes(page)
    assert encrypt_page(stored, 1, 0x0BADF00D) == bytes(page)


def test_write_page_beyond_eof():
    fmt = Format.JET3
    stream = io.BytesIO(bytes(fmt.pg_size))
    with pytest.raises(PageError):
        write_page(stream, fmt, new_data_page(fmt, 1), 1)


def test_write_page_wrong_size():
    fmt = Format.JET3
    stream = io.BytesIO(bytes(2 * fmt.pg_size))
    with pytest.raises(ValueError):
        write_page(stream, fmt, b"short", 1)