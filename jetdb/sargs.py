"""Search arguments: the trees of conditions that filter rows in a query."""

from __future__ import annotations

import copy
import enum
import locale
import re
import struct
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from .schema import Column, ColumnType, Field, TableDef


class Operator(enum.IntEnum):
    """Logical and relational operators of a search-argument tree."""

    OR = 1
    AND = 2
    NOT = 3
    EQUAL = 4
    GT = 5
    LT = 6
    GTEQ = 7
    LTEQ = 8
    LIKE = 9
    ISNULL = 10
    NOTNULL = 11
    ILIKE = 12
    NEQ = 13


_RELATIONAL = frozenset(
    {
        Operator.EQUAL,
        Operator.GT,
        Operator.LT,
        Operator.GTEQ,
        Operator.LTEQ,
        Operator.NEQ,
        Operator.LIKE,
        Operator.ILIKE,
        Operator.ISNULL,
        Operator.NOTNULL,
    }
)


def is_relational_op(op: int) -> bool:
    """True for operators that compare a column with a value."""
    return op in _RELATIONAL


@dataclass
class Sarg:
    """A single condition attached to a column, usable for index scans."""

    op: Operator
    value: Any = None


@dataclass
class SargNode:
    """A node of a condition tree.

    Relational nodes hold a column and a value; NOT uses ``left`` only;
    AND and OR use both children.
    """

    op: Operator
    col: Column | None = None
    value: Any = None
    left: "SargNode | None" = None
    right: "SargNode | None" = None


def walk_tree(node: SargNode, func: Callable[[SargNode], Any]) -> None:
    """Visit ``node`` and its children depth first.

    A truthy result from ``func`` stops the descent below that node.
    """
    if func(node):
        return
    if node.left is not None:
        walk_tree(node.left, func)
    if node.right is not None:
        walk_tree(node.right, func)


def _like_pattern(pattern: str, ignore_case: bool) -> re.Pattern[str]:
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    flags = re.DOTALL | (re.IGNORECASE if ignore_case else 0)
    return re.compile("".join(parts), flags)


def _compare(op: int, diff_sign: int) -> bool:
    """Decide ``op`` from the sign of (node value - field value)."""
    if op == Operator.EQUAL:
        return diff_sign == 0
    if op == Operator.GT:
        return diff_sign < 0
    if op == Operator.LT:
        return diff_sign > 0
    if op == Operator.GTEQ:
        return diff_sign <= 0
    if op == Operator.LTEQ:
        return diff_sign >= 0
    if op == Operator.NEQ:
        return diff_sign != 0
    raise ValueError(f"unsupported operator {op!r} for this comparison")


def _sign(a: float, b: float) -> int:
    return (a > b) - (a < b)


def test_string(node: SargNode, s: str) -> bool:
    """Compare the field text ``s`` with the node's value."""
    if node.op == Operator.LIKE:
        return _like_pattern(node.value, False).fullmatch(s) is not None
    if node.op == Operator.ILIKE:
        return _like_pattern(node.value, True).fullmatch(s) is not None
    rc = locale.strcoll(node.value, s)
    return _compare(node.op, _sign(rc, 0))


def test_int(node: SargNode, i: int) -> bool:
    """Compare the integer ``i`` with the node's value, truncated to an integer."""
    return _compare(node.op, _sign(int(node.value), i))


def test_double(op: int, vd: float, d: float) -> bool:
    """Compare the field value ``d`` with the node value ``vd``."""
    return _compare(op, _sign(vd, d))


def _poor_mans_trunc(x: float) -> float:
    # Six decimals, at most fifteen characters, as the date comparison expects.
    return float(f"{x:.6f}"[:15])


def find_indexable_sargs(node: SargNode, data: Any = None) -> bool:
    """Attach relational conditions ANDed from the root to their columns.

    Meant for ``walk_tree``; returns True to stop at OR and NOT nodes.
    """
    if node.op in (Operator.OR, Operator.NOT):
        return True
    if is_relational_op(node.op) and node.col is not None:
        add_sarg(node.col, Sarg(op=node.op, value=node.value))
    return False


def _unpack(fmt: str, data: bytes | None) -> Any:
    raw = bytes(data or b"")
    try:
        return struct.unpack_from(fmt, raw)[0]
    except struct.error as exc:
        raise ValueError(f"field value too short for {fmt!r}") from exc


def _decode_text(col: Column, data: bytes | None) -> str:
    raw = bytes(data or b"")
    table = col.table
    if table is not None and table.fmt.jet3:
        return raw.decode("latin-1")
    return raw.decode("utf-16-le", errors="replace")


def _repid_text(data: bytes | None) -> str:
    raw = bytes(data or b"")
    if len(raw) < 16:
        raise ValueError("replication id needs 16 bytes")
    return "{" + str(uuid.UUID(bytes_le=raw[:16])).upper() + "}"


def test_sarg(col: Column, node: SargNode, field: Field) -> bool:
    """Test one relational node against the field of column ``col``.

    Memo values are compared as the text held inline in the field.
    """
    if node.op == Operator.ISNULL:
        return bool(field.is_null)
    if node.op == Operator.NOTNULL:
        return not field.is_null
    col_type = col.col_type
    if col_type == ColumnType.BOOL:
        return test_int(node, int(not field.is_null))
    if col_type == ColumnType.BYTE:
        return test_int(node, _unpack("<b", field.value))
    if col_type == ColumnType.INT:
        return test_int(node, _unpack("<h", field.value))
    if col_type == ColumnType.LONGINT:
        return test_int(node, _unpack("<i", field.value))
    if col_type == ColumnType.FLOAT:
        return test_double(node.op, float(node.value), _unpack("<f", field.value))
    if col_type == ColumnType.DOUBLE:
        return test_double(node.op, float(node.value), _unpack("<d", field.value))
    if col_type in (ColumnType.TEXT, ColumnType.MEMO):
        return test_string(node, _decode_text(col, field.value))
    if col_type == ColumnType.REPID:
        return test_string(node, _repid_text(field.value))
    if col_type == ColumnType.DATETIME:
        return test_double(
            node.op,
            _poor_mans_trunc(float(node.value)),
            _poor_mans_trunc(_unpack("<d", field.value)),
        )
    raise ValueError(f"conditions on column type {col_type} are not supported")


def find_field(col_num: int, fields: Sequence[Field]) -> int | None:
    """Index of the field for column ``col_num``, or ``None``."""
    for index, fld in enumerate(fields):
        if fld.colnum == col_num:
            return index
    return None


def test_sarg_node(node: SargNode, fields: Sequence[Field]) -> bool:
    """Evaluate the condition tree under ``node`` for one row's fields."""
    if is_relational_op(node.op):
        col = node.col
        if col is None:
            return bool(node.value)
        index = find_field(col.col_num, fields)
        if index is None:
            raise LookupError(f"no field for column {col.name!r}")
        return test_sarg(col, node, fields[index])
    if node.op == Operator.NOT:
        return not test_sarg_node(node.left, fields)
    if node.op == Operator.AND:
        return test_sarg_node(node.left, fields) and test_sarg_node(node.right, fields)
    if node.op == Operator.OR:
        return test_sarg_node(node.left, fields) or test_sarg_node(node.right, fields)
    return True


def test_sargs(table: TableDef, fields: Sequence[Field]) -> bool:
    """True when the row passes the table's condition tree, or there is none."""
    if table.sarg_tree is None:
        return True
    return test_sarg_node(table.sarg_tree, fields)


def add_sarg(column: Column, sarg: Sarg) -> bool:
    """Attach a copy of ``sarg`` to ``column``."""
    column.sargs.append(copy.copy(sarg))
    return True


def add_sarg_by_name(table: TableDef, colname: str, sarg: Sarg) -> bool:
    """Attach ``sarg`` to the column named ``colname``, ignoring ASCII case."""
    wanted = colname.encode().lower()
    for column in table.columns:
        if column.name.encode().lower() == wanted:
            return add_sarg(column, sarg)
    return False