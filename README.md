# jetdb

`jetdb` is a pure-Python toolkit for the on-disk structures of Jet
(Microsoft Access) database files. It provides the pieces a reader or writer
of such files is built from:

- `jetdb.money`: `money_to_string` and `numeric_to_string` turn the raw bytes
  of MONEY (8 bytes, four decimals) and NUMERIC (17 bytes) values into exact
  decimal strings.
- `jetdb.rc4`: the `RC4` stream cipher class and the one-shot `rc4` function.
- `jetdb.options`: the `DebugOption` flags and the `Options` class, read from
  the `MDBOPTS` environment variable, plus the process-wide helpers
  `load_options`, `get_option` and `debug`.
- `jetdb.connectparams`: `ConnectParams`, which parses `name=value;...`
  connection strings, pulls out `DSN` and `DBQ` values, and looks up settings
  for a DSN in `odbc.ini` files.
- `jetdb.schema`: `ColumnType`, `ObjectType`, `Format` (`Format.JET3`,
  `Format.JET4`), `Column`, `Field`, `CatalogEntry`, `TableDef`, `Properties`,
  `Statistics`, and helpers for in-memory work tables
  (`create_temp_table`, `fill_temp_column`) and for telling user tables from
  system tables (`is_user_table`, `is_system_table`).
- `jetdb.sargs`: search-argument trees (`SargNode`, `Sarg`, `Operator`) and
  their evaluation against a row's fields (`test_sarg_node`, `test_sargs`),
  including `LIKE`/`ILIKE` patterns with `%` and `_`.
- `jetdb.rowformat`: `pack_row` lays fields out in the Jet 3 or Jet 4 row
  format, `crack_row` splits a row on a page back into fields and raises
  `InvalidRowError` when the layout is inconsistent; `put_int16`,
  `put_int32` and `put_int32_msb` store integers in a buffer.
- `jetdb.pages`: builds empty data and index leaf pages, finds rows on a
  page (`row_bounds`), measures free space, appends or replaces rows
  (`add_row_to_page`, `add_row_to_temp_table`, `replace_row`), and encrypts
  and writes pages to a file (`encrypt_page`, `write_page`). Problems raise
  `PageError`.

## Installation

```
pip install .
```

The package has no dependencies outside the standard library.

## Examples

Decode a MONEY value:

```python
from jetdb.money import money_to_string

money_to_string((12345).to_bytes(8, "little", signed=True))   # '1.2345'
```

Encrypt or decrypt a buffer with RC4 (the same call does both):

```python
from jetdb.rc4 import rc4

ciphertext = rc4(b"secret", b"Plaintext")
assert rc4(b"secret", ciphertext) == b"Plaintext"
```

Parse a connection string:

```python
from jetdb.connectparams import ConnectParams

params = ConnectParams()
params.extract_dbq("DBQ=/data/nwind.mdb;ReadOnly=1")   # '/data/nwind.mdb'
params.set_connect_string("DBQ=/data/nwind.mdb;ReadOnly=1")
params.table["ReadOnly"]                                # '1'
```

`get_connect_param(name)` reads `/etc/odbc.ini` and then `~/.odbc.ini`
(later files win) and looks `name` up in the section named by `dsn_name`;
pass `ini_paths` to read other files instead.

Build a work table, store a row in it and read the row back:

```python
from jetdb.schema import ColumnType, Field, Format, create_temp_table, fill_temp_column
from jetdb.rowformat import crack_row, pack_row
from jetdb.pages import add_row_to_temp_table, row_bounds

table = create_temp_table("#tables", Format.JET4)
table.add_temp_column(fill_temp_column("TABLE_NAME", 128, ColumnType.TEXT, False))
table.add_temp_column(fill_temp_column("ROWS", 0, ColumnType.LONGINT, True))
table.end_temp_columns()

name = "AB".encode("utf-16-le")
row = pack_row(table, [Field(value=name, siz=len(name)),
                       Field(value=(3).to_bytes(4, "little"))])
add_row_to_temp_table(table, row)                       # 1 row on the page

page = table.temp_table_pages[0]
start, size = row_bounds(table.fmt, page, 0)
fields = crack_row(table, page, start, size)
fields[0].value                                         # b'A\x00B\x00'
```

Filter a row with a condition:

```python
from jetdb.sargs import Operator, SargNode, test_sarg_node

node = SargNode(op=Operator.EQUAL, col=table.columns[1], value=3)
test_sarg_node(node, fields)                            # True
```

## Debug output

Set `MDBOPTS` to a colon-separated list of `debug_like`, `debug_write`,
`debug_usage`, `debug_ole`, `debug_row`, `debug_props` or `debug_all`, or call
`jetdb.options.load_options("debug_row")`. Messages go to standard error.
`use_index` and `no_memo` are accepted but only print a warning.

## What it does not do

`jetdb` does not open a database file as a whole: it has no reader for the
file header, the catalog, table definition pages, usage maps, indexes or
memo/OLE data, no SQL parser and no ODBC driver, and it installs no command.
Rows, pages and conditions are handled once you have the page bytes and the
table definition in hand.

## Running the tests

```
pip install .[test]
pytest
```