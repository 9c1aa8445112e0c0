"""Data and index page layout: building pages, placing rows and writing pages."""

from __future__ import annotations

import struct
from typing import BinaryIO

from .options import DebugOption, debug
from .rc4 import rc4
from .rowformat import put_int16, put_int32
from .schema import Format, TableDef

DATA_PAGE_TYPE = 0x0101
LEAF_PAGE_TYPE = 0x0104
# Row offsets carry flags (lookup, deleted) in their top bits.
_OFFSET_MASK = 0x1FFF


class PageError(Exception):
    """A page that cannot hold a row, or that cannot be written."""


def _get_int16(page: bytes, offset: int) -> int:
    return struct.unpack_from("<H", page, offset)[0]


def _row_count(fmt: Format, page: bytes) -> int:
    return _get_int16(page, fmt.row_count_offset)


def new_data_page(fmt: Format, table_pg: int) -> bytearray:
    """An empty data page owned by the table defined on page ``table_pg``."""
    page = bytearray(fmt.pg_size)
    put_int16(page, 0, DATA_PAGE_TYPE)
    put_int16(page, 2, fmt.pg_size - fmt.row_count_offset - 2)
    put_int32(page, 4, table_pg)
    return page


def new_leaf_page(fmt: Format, table_pg: int) -> bytearray:
    """An empty index leaf page owned by the table on page ``table_pg``."""
    page = bytearray(fmt.pg_size)
    put_int16(page, 0, LEAF_PAGE_TYPE)
    put_int32(page, 4, table_pg)
    return page


def row_bounds(fmt: Format, page: bytes, row: int) -> tuple[int, int]:
    """Start offset and size of row number ``row`` on a data page."""
    count = _row_count(fmt, page)
    if not 0 <= row < count:
        raise IndexError(f"row {row} out of range for a page of {count} rows")
    start = _get_int16(page, fmt.row_count_offset + 2 + row * 2) & _OFFSET_MASK
    if row == 0:
        next_start = fmt.pg_size
    else:
        next_start = _get_int16(page, fmt.row_count_offset + row * 2) & _OFFSET_MASK
    return start, next_start - start


def page_free_space(fmt: Format, page: bytes) -> int:
    """Bytes between the row offset table and the lowest row on the page."""
    rows = _row_count(fmt, page)
    free_start = fmt.row_count_offset + 2 + rows * 2
    if rows == 0:
        free_end = fmt.pg_size
    else:
        free_end = _get_int16(page, fmt.row_count_offset + rows * 2)
    debug(DebugOption.WRITE, "free space left on page = %d", free_end - free_start)
    return free_end - free_start


def _place_row(fmt: Format, page: bytearray, num_rows: int, pos: int, row: bytes) -> int:
    """Put ``row`` below ``pos`` as row ``num_rows``; returns the new row count."""
    pos -= len(row)
    if pos < fmt.row_count_offset + 2 + (num_rows + 1) * 2:
        raise PageError("no space left on page for the row")
    page[pos:pos + len(row)] = row
    put_int16(page, fmt.row_count_offset + 2 + num_rows * 2, pos)
    num_rows += 1
    put_int16(page, fmt.row_count_offset, num_rows)
    put_int16(page, 2, pos - fmt.row_count_offset - 2 - num_rows * 2)
    return num_rows


def add_row_to_page(table: TableDef, page: bytearray, row: bytes) -> int:
    """Rebuild data page ``page`` in place with ``row`` appended.

    Returns the number of rows now on the page.
    """
    fmt = table.fmt
    row = bytes(row)
    new_pg = new_data_page(fmt, table.entry.table_pg)
    num_rows = _row_count(fmt, page)
    pos = fmt.pg_size
    for index in range(num_rows):
        start, size = row_bounds(fmt, page, index)
        pos -= size
        new_pg[pos:pos + size] = page[start:start + size]
        put_int16(new_pg, fmt.row_count_offset + 2 + index * 2, pos)
    num_rows = _place_row(fmt, new_pg, num_rows, pos, row)
    page[:fmt.pg_size] = new_pg
    return num_rows


def add_row_to_temp_table(table: TableDef, row: bytes) -> int:
    """Store ``row`` in a work table's in-memory pages.

    A new page is started when the last one is too full. Returns the number
    of rows on the page that received the row.
    """
    if not table.is_temp_table:
        raise ValueError(f"table {table.name!r} is not a work table")
    fmt = table.fmt
    row = bytes(row)
    pages = table.temp_table_pages
    if not pages or _get_int16(pages[-1], 2) < len(row) + 2:
        pages.append(new_data_page(fmt, table.entry.table_pg))
    page = pages[-1]
    num_rows = _row_count(fmt, page)
    if num_rows == 0:
        pos = fmt.pg_size
    else:
        pos = _get_int16(page, fmt.row_count_offset + num_rows * 2)
    return _place_row(fmt, page, num_rows, pos, row)


def replace_row(table: TableDef, page: bytearray, row_index: int, new_row: bytes) -> None:
    """Rebuild data page ``page`` in place with row ``row_index`` replaced."""
    fmt = table.fmt
    rco = fmt.row_count_offset
    new_row = bytes(new_row)
    num_rows = _row_count(fmt, page)
    if not 0 <= row_index < num_rows:
        raise IndexError(f"row {row_index} out of range for a page of {num_rows} rows")
    debug(DebugOption.WRITE, "updating row %d on page %d", row_index, table.cur_phys_pg)
    new_pg = new_data_page(fmt, table.entry.table_pg)
    put_int16(new_pg, rco, num_rows)
    pos = fmt.pg_size
    for index in range(num_rows):
        if index == row_index:
            data = new_row
        else:
            start, size = row_bounds(fmt, page, index)
            data = bytes(page[start:start + size])
        pos -= len(data)
        if pos < rco + 2 + num_rows * 2:
            raise PageError("no space left on this page, update will not occur")
        new_pg[pos:pos + len(data)] = data
        put_int16(new_pg, rco + 2 + index * 2, pos)
    page[:fmt.pg_size] = new_pg
    put_int16(page, 2, page_free_space(fmt, page))


def encrypt_page(page: bytes, pgnum: int, db_key: int) -> bytes:
    """Obscure ``page`` with the database key; page 0 and key 0 pass unchanged.

    The operation is its own inverse.
    """
    if pgnum == 0 or db_key == 0:
        return bytes(page)
    key = ((db_key ^ pgnum) & 0xFFFFFFFF).to_bytes(4, "little")
    return rc4(key, page)


def write_page(
    stream: BinaryIO, fmt: Format, page: bytes, pgnum: int, db_key: int = 0
) -> int:
    """Write ``page`` over page ``pgnum`` of ``stream``; returns bytes written.

    The page must already exist in the file.
    """
    if len(page) != fmt.pg_size:
        raise ValueError(f"page is {len(page)} bytes, expected {fmt.pg_size}")
    offset = pgnum * fmt.pg_size
    stream.seek(0, 2)
    if stream.tell() < offset + fmt.pg_size:
        raise PageError(f"offset {offset} is beyond EOF")
    stream.seek(offset)
    written = stream.write(encrypt_page(page, pgnum, db_key))
    if written is None or written < fmt.pg_size:
        raise PageError(f"short write of page {pgnum}")
    return written