"""Scoped symbol table with levels: level 0 is global, higher levels are local."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import IntEnum

from minicmips.syntax_tree import ASTNode, DataType

_HEADER = "\n\tLABEL\t\tOffset \t LEVEL"


class SymbolSubtype(IntEnum):
    """What kind of entity a symbol names."""

    SCALAR = 0
    ARRAY = 1
    FUNCTION = 2


@dataclass(eq=False)
class Symbol:
    """One symbol table entry."""

    name: str
    offset: int
    size: int
    level: int
    data_type: DataType
    subtype: SymbolSubtype
    fparms: ASTNode | None = field(default=None, repr=False)


class DuplicateSymbolError(Exception):
    """Raised when a name is already declared at the same level."""

    def __init__(self, name: str, level: int) -> None:
        super().__init__(
            f"The name {name} exists at level {level} already in the symbol table"
        )
        self.name = name
        self.level = level


def format_symbol(symbol: Symbol) -> str:
    """Return one table row for ``symbol``."""
    return f"\t{symbol.name}\t\t{symbol.offset}\t\t{symbol.level}"


class SymbolTable:
    """Symbols, most recently inserted first, searched by name and level."""

    def __init__(self) -> None:
        self._entries: list[Symbol] = []
        self._temp_count = 0

    def __iter__(self) -> Iterator[Symbol]:
        return reversed(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def create_temp(self) -> str:
        """Return a fresh temporary name of the form ``_tN``."""
        name = f"_t{self._temp_count}"
        self._temp_count += 1
        return name

    def insert(self, name: str, data_type: DataType, subtype: SymbolSubtype,
               level: int, size: int, offset: int) -> Symbol:
        """Add a symbol; raise DuplicateSymbolError if the name exists at ``level``."""
        if self.search(name, level, False) is not None:
            raise DuplicateSymbolError(name, level)
        symbol = Symbol(name=name, offset=offset, size=size, level=level,
                        data_type=data_type, subtype=subtype)
        self._entries.append(symbol)
        return symbol

    def search(self, name: str, level: int, recursive: bool = False) -> Symbol | None:
        """Find ``name`` at ``level``, then at outer levels if ``recursive``."""
        while level >= 0:
            found = next(
                (s for s in self if s.name == name and s.level == level), None
            )
            if found is not None:
                return found
            if not recursive:
                return None
            level -= 1
        return None

    def delete(self, level: int) -> int:
        """Remove symbols at ``level`` and deeper; return their total size."""
        removed = sum(s.size for s in self._entries if s.level >= level)
        self._entries = [s for s in self._entries if s.level < level]
        return removed

    def __str__(self) -> str:
        rows = "".join(f"{format_symbol(s)}\n" for s in self)
        return f"{_HEADER}\n{rows}"

    def display(self) -> None:
        """Print the header and one row per symbol to standard output."""
        print(_HEADER)
        for symbol in self:
            print(format_symbol(symbol))