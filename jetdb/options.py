"""Debug options read from the ``MDBOPTS`` environment variable."""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass, field
from typing import TextIO

ENV_VAR = "MDBOPTS"


class DebugOption(enum.IntFlag):
    """Flags that may be switched on through ``MDBOPTS``."""

    LIKE = 0x0001
    WRITE = 0x0002
    USAGE = 0x0004
    OLE = 0x0008
    ROW = 0x0010
    PROPS = 0x0020
    USE_INDEX = 0x0040


_DEBUG_ALL = (
    DebugOption.LIKE
    | DebugOption.WRITE
    | DebugOption.USAGE
    | DebugOption.OLE
    | DebugOption.ROW
    | DebugOption.PROPS
)

_NAMED = {
    "debug_like": DebugOption.LIKE,
    "debug_write": DebugOption.WRITE,
    "debug_usage": DebugOption.USAGE,
    "debug_ole": DebugOption.OLE,
    "debug_row": DebugOption.ROW,
    "debug_props": DebugOption.PROPS,
    "debug_all": _DEBUG_ALL,
}

_USE_INDEX_WARNING = (
    "The 'use_index' argument was supplied to MDBOPTS environment variable. "
    "However, this feature requires an index collation library that is not "
    "available. As a result, the 'use_index' argument will be ignored.\n\n"
    "To suppress this warning, run the program again after removing the "
    "'use_index' argument from the MDBOPTS environment variable.\n"
)

_NO_MEMO_WARNING = (
    "The 'no_memo' argument was supplied to MDBOPTS environment variable. "
    "This argument is deprecated, and has no effect.\n\n"
    "To suppress this warning, run the program again after removing the "
    "'no_memo' argument from the MDBOPTS environment variable.\n"
)


@dataclass
class Options:
    """A set of debug flags, loaded lazily from the environment."""

    stream: TextIO | None = None
    flags: DebugOption = DebugOption(0)
    loaded: bool = field(default=False)

    def _out(self) -> TextIO:
        return self.stream if self.stream is not None else sys.stderr

    def load(self, value: str | None = None) -> DebugOption:
        """Parse a colon-separated option list; ``None`` reads ``MDBOPTS``."""
        if value is None:
            value = os.environ.get(ENV_VAR, "")
        flags = DebugOption(0)
        for opt in filter(None, value.split(":")):
            if opt == "use_index":
                self._out().write(_USE_INDEX_WARNING)
            elif opt == "no_memo":
                self._out().write(_NO_MEMO_WARNING)
            flags |= _NAMED.get(opt, DebugOption(0))
        self.flags = flags
        self.loaded = True
        return flags

    def is_set(self, flag: DebugOption) -> bool:
        """True if any bit of ``flag`` is switched on."""
        if not self.loaded:
            self.load()
        return bool(self.flags & flag)

    def debug(self, flag: DebugOption, message: str, *args: object) -> None:
        """Write a formatted message to the stream when ``flag`` is on."""
        if self.is_set(flag):
            text = message % args if args else message
            self._out().write(text + "\n")


_default = Options()


def load_options(value: str | None = None) -> DebugOption:
    """Load the process-wide options from ``value`` or from ``MDBOPTS``."""
    return _default.load(value)


def get_option(flag: DebugOption) -> bool:
    """True if ``flag`` is on in the process-wide options."""
    return _default.is_set(flag)


def debug(flag: DebugOption, message: str, *args: object) -> None:
    """Emit a debug message through the process-wide options."""
    _default.debug(flag, message, *args)