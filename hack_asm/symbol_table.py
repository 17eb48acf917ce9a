"""
Symbol table for the Hack two-pass assembler.

Maps symbol names to non-negative addresses. Labels are bound in pass 1,
variables are allocated in pass 2. The table does not police rebinding;
that is the assembler's job.
"""

from __future__ import annotations
from typing import Dict, ItemsView

from .codegen import WORD_BITS

__all__ = ['SymbolTable', 'PREDEFINED_SYMBOLS']


# Architecture-reserved names: virtual registers, I/O maps, VM pointers.
PREDEFINED_SYMBOLS: Dict[str, int] = {
    'SP': 0,
    'LCL': 1,
    'ARG': 2,
    'THIS': 3,
    'THAT': 4,
    **{f'R{n}': n for n in range(16)},
    'SCREEN': 0x4000,
    'KBD': 0x6000,
}


class SymbolTable:
    """Symbol name -> address."""

    def __init__(self):
        self._tab: Dict[str, int] = {}

    @classmethod
    def with_predefined(cls) -> SymbolTable:
        table = cls()
        for name, address in PREDEFINED_SYMBOLS.items():
            table.add_entry(name, address)
        return table

    def add_entry(self, name: str, address: int):
        self._tab[name] = address

    def contains(self, name: str) -> bool:
        return name in self._tab

    def get_address(self, name: str) -> str:
        """Return the bound address as a decimal string.

        Raises KeyError for unknown names; check contains() first.
        """
        try:
            return str(self._tab[name])
        except KeyError:
            raise KeyError(f"Undefined symbol: '{name}'") from None

    @staticmethod
    def format_as_bin(address: int) -> str:
        """Render address as a zero-padded 16-character binary string."""
        if not 0 <= address < (1 << WORD_BITS):
            raise ValueError(f"Address does not fit in {WORD_BITS} bits: {address}")
        return format(address, f'0{WORD_BITS}b')

    def items(self) -> ItemsView[str, int]:
        return self._tab.items()

    def __contains__(self, name: str) -> bool:
        return self.contains(name)

    def __len__(self) -> int:
        return len(self._tab)
