"""Connection-string parsing and DSN lookup for the database driver."""

from __future__ import annotations

import configparser
import os
import sys
from dataclasses import dataclass, field
from typing import Iterable, TextIO

SYS_ODBC_INI = "/etc/odbc.ini"
_C_SPACE = " \t\n\v\f\r"


def _default_ini_paths() -> list[str]:
    # Later files win, so the user's file overrides the system one.
    return [SYS_ODBC_INI, os.path.expanduser("~/.odbc.ini")]


@dataclass
class ConnectParams:
    """DSN name, ini file and the name/value pairs of a connection string."""

    dsn_name: str = ""
    ini_file_name: str | None = None
    table: dict[str, str] = field(default_factory=dict)

    def set_connect_string(self, connect_string: str) -> None:
        """Store every ``name=value`` pair of a ``;``-separated string."""
        rest = connect_string
        while "=" in rest:
            name, rest = rest.split("=", 1)
            if ";" in rest:
                value, rest = rest.split(";", 1)
            else:
                value = rest
            name = name[:1] + name[1:].rstrip(_C_SPACE)
            value = value.lstrip(_C_SPACE)
            self.table[name] = value

    def get_connect_param(
        self, name: str, ini_paths: Iterable[str | os.PathLike] | None = None
    ) -> str | None:
        """Look up ``name`` in the DSN's section of the odbc.ini files."""
        paths = list(ini_paths) if ini_paths is not None else _default_ini_paths()
        parser = configparser.ConfigParser(interpolation=None, strict=False)
        for path in paths:
            try:
                parser.read(path)
            except configparser.Error:
                continue
        if not parser.has_section(self.dsn_name):
            return None
        value = parser.get(self.dsn_name, name, fallback="")
        return value or None

    def dump_params(self, output: TextIO | None = None) -> None:
        """Write every stored parameter to ``output`` (stdout by default)."""
        out = output if output is not None else sys.stdout
        sys.stderr.write(f"Parameter values for DSN: {self.dsn_name}\n")
        if self.ini_file_name is not None:
            sys.stderr.write(f"Ini File is {self.ini_file_name}\n")
        for key, value in self.table.items():
            out.write(f"Parameter: {key}, Value: {value}\n")

    def _extract(self, marker: str, connect_string: str) -> str | None:
        found = connect_string.find(marker)
        if found < 0:
            return None
        equals = connect_string.find("=", found)
        if equals < 0:
            return None
        value = connect_string[equals + 1:].lstrip(_C_SPACE)
        self.dsn_name = value.split(";", 1)[0]
        return self.dsn_name

    def extract_dsn(self, connect_string: str) -> str | None:
        """Take the DSN from a connection string and store it as ``dsn_name``."""
        return self._extract("DSN", connect_string)

    def extract_dbq(self, connect_string: str) -> str | None:
        """Take the DBQ database path from a connection string.

        The value is kept in ``dsn_name`` as well as returned.
        """
        return self._extract("DBQ", connect_string)