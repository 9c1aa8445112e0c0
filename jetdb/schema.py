"""Table, column and catalog definitions, work tables and read statistics."""

from __future__ import annotations

import dataclasses
import enum
import sys
from dataclasses import dataclass, field
from typing import Any, ClassVar, TextIO

SYSTEM_TABLE_FLAGS = 0x80000002


class ColumnType(enum.IntEnum):
    """Column data types as stored in a table definition."""

    BOOL = 0x01
    BYTE = 0x02
    INT = 0x03
    LONGINT = 0x04
    MONEY = 0x05
    FLOAT = 0x06
    DOUBLE = 0x07
    DATETIME = 0x08
    BINARY = 0x09
    TEXT = 0x0A
    OLE = 0x0B
    MEMO = 0x0C
    REPID = 0x0F
    NUMERIC = 0x10
    COMPLEX = 0x12


class ObjectType(enum.IntEnum):
    """Kinds of object listed in the database catalog."""

    ANY = -1
    FORM = 0
    TABLE = 1
    MACRO = 2
    SYSTEM_TABLE = 3
    REPORT = 4
    QUERY = 5
    LINKED_TABLE = 6
    MODULE = 7
    RELATIONSHIP = 8
    DATABASE_PROPERTY = 11


@dataclass(frozen=True)
class Format:
    """Page layout constants of a database file version."""

    pg_size: int
    row_count_offset: int
    jet3: bool

    JET3: ClassVar["Format"]
    JET4: ClassVar["Format"]


Format.JET3 = Format(pg_size=2048, row_count_offset=0x08, jet3=True)
Format.JET4 = Format(pg_size=4096, row_count_offset=0x0C, jet3=False)


@dataclass
class Properties:
    """A named block of properties, mapping property names to text values."""

    name: str | None = None
    hash: dict[str, str] = field(default_factory=dict)


_FIXED_SIZES = {
    ColumnType.BOOL: 1,
    ColumnType.BYTE: 1,
    ColumnType.INT: 2,
    ColumnType.LONGINT: 4,
    ColumnType.MONEY: 8,
    ColumnType.FLOAT: 4,
    ColumnType.DOUBLE: 8,
    ColumnType.DATETIME: 8,
    ColumnType.TEXT: 255,
    ColumnType.BINARY: 255,
    ColumnType.REPID: 16,
    ColumnType.NUMERIC: 17,
}


def col_fixed_size(col_type: int) -> int:
    """Storage size in bytes of a value of ``col_type``; 0 when it varies."""
    return _FIXED_SIZES.get(col_type, 0)


@dataclass
class Column:
    """One column of a table definition."""

    name: str = ""
    col_type: int = 0
    col_size: int = 0
    col_num: int = 0
    var_col_num: int = 0
    row_col_num: int = 0
    fixed_offset: int = 0
    is_fixed: bool = False
    is_long_auto: bool = False
    is_uuid_auto: bool = False
    col_scale: int = 0
    col_prec: int = 0
    props: Properties | None = None
    sargs: list[Any] = field(default_factory=list)
    bind_value: bytes | None = None
    table: "TableDef | None" = field(default=None, repr=False, compare=False)

    def get_prop(self, key: str) -> str | None:
        """The value of property ``key``, or ``None`` when it is not set."""
        if self.props is None:
            return None
        return self.props.hash.get(key)

    def is_shortdate(self) -> bool:
        """True when the column's ``Format`` property is ``Short Date``."""
        return self.get_prop("Format") == "Short Date"


@dataclass
class Field:
    """The location and value of one column within a row."""

    value: bytes | None = None
    siz: int = 0
    is_fixed: bool = False
    is_null: bool = False
    start: int = 0
    colnum: int = 0
    offset: int = 0


@dataclass
class CatalogEntry:
    """An object listed in the database catalog."""

    object_name: str = ""
    object_type: int = ObjectType.TABLE
    table_pg: int = 0
    flags: int = 0
    props: list[Properties] = field(default_factory=list)


@dataclass
class TableDef:
    """A table definition: its columns, counters and (for work tables) pages."""

    entry: CatalogEntry
    fmt: Format = Format.JET4
    name: str = ""
    columns: list[Column] = field(default_factory=list)
    num_rows: int = 0
    num_var_cols: int = 0
    num_real_idxs: int = 0
    indices: list[Any] = field(default_factory=list)
    is_temp_table: bool = False
    temp_table_pages: list[bytearray] = field(default_factory=list)
    props: Properties | None = None
    sarg_tree: Any = None
    cur_row: int = 0
    cur_phys_pg: int = 0

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.entry.object_name
        if self.props is None:
            for props in self.entry.props:
                if props.name is None:
                    self.props = props

    @property
    def num_cols(self) -> int:
        """Number of columns in the definition."""
        return len(self.columns)

    def get_prop(self, key: str) -> str | None:
        """The value of table property ``key``, or ``None`` when it is not set."""
        if self.props is None:
            return None
        return self.props.hash.get(key)

    def add_temp_column(self, column: Column) -> Column:
        """Append a copy of ``column``, numbering it after the existing ones."""
        column.table = self
        column.col_num = self.num_cols
        if not column.is_fixed:
            column.var_col_num = self.num_var_cols
            self.num_var_cols += 1
        added = dataclasses.replace(column, sargs=list(column.sargs))
        added.table = self
        self.columns.append(added)
        return added

    def end_temp_columns(self) -> None:
        """Lay out the fixed columns one after another; call once all are added."""
        start = 0
        for column in self.columns:
            if column.is_fixed:
                column.fixed_offset = start
                start += column.col_size

    def sort_columns(self) -> None:
        """Order the columns by number and attach each one's named properties."""
        self.columns.sort(key=lambda column: column.col_num)
        for column in self.columns:
            column.table = self
            for props in self.entry.props:
                if props.name is not None and props.name == column.name:
                    column.props = props
                    break


@dataclass
class Statistics:
    """Counts of physical page reads, collected while switched on."""

    collect: bool = False
    pg_reads: int = 0

    def on(self) -> None:
        """Start collecting."""
        self.collect = True

    def off(self) -> None:
        """Stop collecting; counts gathered so far are kept."""
        self.collect = False

    def record_read(self) -> None:
        """Count one page read if collection is on."""
        if self.collect:
            self.pg_reads += 1

    def dump(self, output: TextIO | None = None) -> None:
        """Write the counters to ``output`` (stdout by default)."""
        out = output if output is not None else sys.stdout
        out.write(f"Physical Page Reads: {self.pg_reads}\n")


def fill_temp_column(name: str, col_size: int, col_type: int, is_fixed: bool) -> Column:
    """A work-table column; only text and memo columns keep ``col_size``."""
    if col_type in (ColumnType.TEXT, ColumnType.MEMO):
        size = col_size
    else:
        size = col_fixed_size(col_type)
    return Column(name=name, col_type=col_type, col_size=size, is_fixed=bool(is_fixed))


def create_temp_table(name: str, fmt: Format = Format.JET4) -> TableDef:
    """An empty in-memory work table with a stand-in catalog entry."""
    entry = CatalogEntry(object_name=name, object_type=ObjectType.TABLE, table_pg=0)
    return TableDef(entry=entry, fmt=fmt, is_temp_table=True)


def is_user_table(entry: CatalogEntry) -> bool:
    """True for a table that is not flagged as a system table."""
    return entry.object_type == ObjectType.TABLE and not entry.flags & SYSTEM_TABLE_FLAGS


def is_system_table(entry: CatalogEntry) -> bool:
    """True for a table flagged as a system table."""
    return entry.object_type == ObjectType.TABLE and bool(entry.flags & SYSTEM_TABLE_FLAGS)