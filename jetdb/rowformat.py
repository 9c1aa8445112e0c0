"""Packing rows into and cracking rows out of the on-page row format."""

from __future__ import annotations

import struct
from typing import Sequence

from .options import DebugOption, debug
from .schema import ColumnType, Field, TableDef


class InvalidRowError(ValueError):
    """A row buffer whose layout does not hold together."""


def put_int16(buf: bytearray, offset: int, value: int) -> None:
    """Store the low 16 bits of ``value`` little-endian at ``offset``."""
    struct.pack_into("<H", buf, offset, value & 0xFFFF)


def put_int32(buf: bytearray, offset: int, value: int) -> None:
    """Store the low 32 bits of ``value`` little-endian at ``offset``."""
    struct.pack_into("<I", buf, offset, value & 0xFFFFFFFF)


def put_int32_msb(buf: bytearray, offset: int, value: int) -> None:
    """Store the low 32 bits of ``value`` big-endian at ``offset``."""
    struct.pack_into(">I", buf, offset, value & 0xFFFFFFFF)


def pack_null_mask(fields: Sequence[Field]) -> bytes:
    """The 'not null' bitmap: bit set for each field that holds a value."""
    mask = bytearray((len(fields) + 7) // 8)
    for index, fld in enumerate(fields):
        if not fld.is_null:
            mask[index // 8] |= 1 << (index % 8)
    return bytes(mask)


def _value_bytes(fld: Field) -> bytes:
    size = max(fld.siz, 0)
    return bytes(fld.value or b"")[:size].ljust(size, b"\x00")


def _pack_fixed(row: bytearray, fields: Sequence[Field]) -> None:
    for fld in fields:
        if fld.is_fixed:
            fld.offset = len(row)
            if fld.is_null:
                row += bytes(max(fld.siz, 0))
            else:
                row += _value_bytes(fld)


def _pack_var(row: bytearray, fields: Sequence[Field]) -> list[Field]:
    var = [fld for fld in fields if not fld.is_fixed]
    for fld in var:
        fld.offset = len(row)
        if not fld.is_null:
            row += _value_bytes(fld)
    return var


def _pack_row4(table: TableDef, fields: Sequence[Field]) -> bytes:
    row = bytearray(struct.pack("<H", len(fields) & 0xFFFF))
    _pack_fixed(row, fields)
    if table.num_var_cols == 0:
        return bytes(row + pack_null_mask(fields))
    var = _pack_var(row, fields)
    row += struct.pack("<H", len(row) & 0xFFFF)
    for fld in reversed(var):
        row += struct.pack("<H", fld.offset & 0xFFFF)
    row += struct.pack("<H", len(var) & 0xFFFF)
    row += pack_null_mask(fields)
    return bytes(row)


def _pack_row3(table: TableDef, fields: Sequence[Field]) -> bytes:
    num_fields = len(fields)
    row = bytearray([num_fields & 0xFF])
    _pack_fixed(row, fields)
    if table.num_var_cols == 0:
        return bytes(row + pack_null_mask(fields))
    var = _pack_var(row, fields)
    eod = len(row)
    offset_high = [(eod >> 8) & 0xFF]
    row.append(eod & 0xFF)
    for fld in reversed(var):
        row.append(fld.offset & 0xFF)
        offset_high.append((fld.offset >> 8) & 0xFF)
    # A dummy jump entry when the row spans more 256-byte blocks than the data.
    if offset_high[0] < (len(row) + (num_fields + 7) // 8 - 1) // 255:
        row.append(0xFF)
    for index in range(len(var)):
        if offset_high[index] > offset_high[index + 1]:
            row.append((len(var) - index) & 0xFF)
    row.append(len(var) & 0xFF)
    row += pack_null_mask(fields)
    return bytes(row)


def pack_row(table: TableDef, fields: Sequence[Field]) -> bytes:
    """Lay ``fields`` out as a row of ``table``; returns the row bytes.

    Fields are set in column order. For work tables the null flags, column
    numbers, fixed flags and (except for text and memo) sizes are taken from
    the table's columns. Each field's ``offset`` is updated in place.
    """
    fields = list(fields)
    if table.is_temp_table:
        if len(fields) > table.num_cols:
            raise ValueError(
                f"{len(fields)} fields given for a table of {table.num_cols} columns"
            )
        for index, (fld, col) in enumerate(zip(fields, table.columns)):
            fld.is_null = fld.value is None
            fld.colnum = index
            fld.is_fixed = col.is_fixed
            if col.col_type not in (ColumnType.TEXT, ColumnType.MEMO):
                fld.siz = col.col_size
    if table.fmt.jet3:
        return _pack_row3(table, fields)
    return _pack_row4(table, fields)


def _byte(page: bytes, offset: int) -> int:
    if not 0 <= offset < len(page):
        raise InvalidRowError("Invalid page buffer detected in row")
    return page[offset]


def _int16(page: bytes, offset: int) -> int:
    if not 0 <= offset <= len(page) - 2:
        raise InvalidRowError("Invalid page buffer detected in row")
    return struct.unpack_from("<H", page, offset)[0]


def _var_offsets4(page, row_end, bitmask_sz, row_var_cols) -> list[int]:
    if bitmask_sz + 3 + row_var_cols * 2 + 2 > row_end:
        raise InvalidRowError("Invalid page buffer detected in row")
    return [
        _int16(page, row_end - bitmask_sz - 3 - index * 2)
        for index in range(row_var_cols + 1)
    ]


def _var_offsets3(page, pg_size, row_start, row_end, bitmask_sz, row_var_cols) -> list[int]:
    row_len = row_end - row_start + 1
    num_jumps = (row_len - 1) // 256
    col_ptr = row_end - bitmask_sz - num_jumps - 1
    # If the last jump is a dummy value, ignore it.
    spread = col_ptr - row_start - row_var_cols
    if spread >= 0 and spread // 256 < num_jumps:
        num_jumps -= 1
    if bitmask_sz + num_jumps + 1 > row_end:
        raise InvalidRowError("Invalid page buffer detected in row")
    if col_ptr >= pg_size or col_ptr < row_var_cols:
        raise InvalidRowError("Invalid page buffer detected in row")
    offsets = []
    jumps_used = 0
    for index in range(row_var_cols + 1):
        while jumps_used < num_jumps and index == _byte(
            page, row_end - bitmask_sz - jumps_used - 1
        ):
            jumps_used += 1
        offsets.append(_byte(page, col_ptr - index) + jumps_used * 256)
    return offsets


def crack_row(table: TableDef, page: bytes, row_start: int, row_size: int) -> list[Field]:
    """Split the row at ``row_start`` of ``page`` into one field per column.

    Field values are copies of the bytes in the page. Raises
    ``InvalidRowError`` when the row layout is inconsistent.
    """
    page = bytes(page)
    jet3 = table.fmt.jet3
    row_end = row_start + row_size - 1

    if jet3:
        row_cols = _byte(page, row_start)
        col_count_size = 1
    else:
        row_cols = _int16(page, row_start)
        col_count_size = 2

    bitmask_sz = (row_cols + 7) // 8
    if bitmask_sz + (0 if jet3 else 1) >= row_end:
        raise InvalidRowError("Invalid page buffer detected in row")
    nullmask_start = row_end - bitmask_sz + 1

    row_var_cols = 0
    var_offsets: list[int] = []
    if table.num_var_cols > 0:
        if jet3:
            row_var_cols = _byte(page, row_end - bitmask_sz)
            var_offsets = _var_offsets3(
                page, table.fmt.pg_size, row_start, row_end, bitmask_sz, row_var_cols
            )
        else:
            row_var_cols = _int16(page, row_end - bitmask_sz - 1)
            var_offsets = _var_offsets4(page, row_end, bitmask_sz, row_var_cols)

    row_fixed_cols = row_cols - row_var_cols
    if row_fixed_cols < 0:
        row_fixed_cols += 1 << 32

    debug(DebugOption.ROW, "bitmask_sz %d", bitmask_sz)
    debug(DebugOption.ROW, "row_var_cols %d", row_var_cols)
    debug(DebugOption.ROW, "row_fixed_cols %d", row_fixed_cols)

    fields = []
    fixed_cols_found = 0
    for index, col in enumerate(table.columns):
        mask_byte = _byte(page, nullmask_start + col.col_num // 8)
        fld = Field(
            colnum=index,
            is_fixed=col.is_fixed,
            is_null=not mask_byte & (1 << (col.col_num % 8)),
        )
        if fld.is_fixed and fixed_cols_found < row_fixed_cols:
            fld.start = row_start + col.fixed_offset + col_count_size
            fld.siz = col.col_size
            fixed_cols_found += 1
        elif not fld.is_fixed and col.var_col_num < row_var_cols:
            # Deleted columns keep their slot in the offset table.
            col_start = var_offsets[col.var_col_num]
            fld.start = row_start + col_start
            fld.siz = var_offsets[col.var_col_num + 1] - col_start
        else:
            fld.start = 0
            fld.siz = 0
            fld.is_null = True
        if fld.start + fld.siz > row_start + row_size:
            raise InvalidRowError(
                f"Invalid data location detected in row. Table:{table.name} Column:{index}"
            )
        if fld.start or fld.siz:
            fld.value = page[fld.start:fld.start + max(fld.siz, 0)]
        fields.append(fld)
    return fields