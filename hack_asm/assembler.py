"""
Two-pass Hack assembler.

Input:  Hack assembly text (or any iterable of lines)
Output: one 16-character binary string per machine word (.hack format)

How the two passes work:
  Pass 1: Run the parser over every line. Address and compute
          instructions each take one ROM word; a label binds to the
          address of the next such instruction. Nothing is emitted.
  Pass 2: Run the parser again. @symbol resolves through the symbol
          table; a symbol still unknown at this point is a variable and
          gets the next free RAM address, starting at 16. Compute fields
          are encoded through the mnemonic tables.

A syntax error anywhere aborts the run (AsmSyntaxError propagates).
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, List, Union

from .codegen import HACK_MNEMONICS, MAX_CONSTANT, MnemonicSet, encode_compute
from .instructions import AddressInstruction, Instruction, InstructionKind
from .parser import Parser
from .symbol_table import PREDEFINED_SYMBOLS, SymbolTable

__all__ = ['Assembler', 'AssemblerError', 'AsmWord', 'assemble', 'assemble_to_hack']

logger = logging.getLogger(__name__)

ROM_SIZE = MAX_CONSTANT + 1


class AssemblerError(Exception):
    """Raised on assembly errors that are not line syntax errors."""
    def __init__(self, message: str, line_num: int = 0, line_text: str = ""):
        self.line_num = line_num
        self.line_text = line_text
        super().__init__(f"Line {line_num}: {message}" if line_num else message)


@dataclass
class AsmWord:
    """One emitted machine word and the instruction it came from."""
    address: int
    word: str
    instruction: Instruction


class Assembler:
    """Two-pass Hack assembler.

    Usage:
        asm = Assembler()
        words = asm.assemble(source_text)
        hack = asm.to_hack()
    """

    def __init__(self, mnemonics: MnemonicSet = HACK_MNEMONICS, variable_base: int = 16):
        self.mnemonics = mnemonics
        self.variable_base = variable_base
        self.symbols = SymbolTable.with_predefined()
        self.words: List[AsmWord] = []
        self._lines: List[str] = []
        self._next_variable = variable_base

    def assemble(self, source: Union[str, Iterable[str]]) -> List[str]:
        """Assemble source into a list of 16-bit binary strings."""
        self._lines = source.split('\n') if isinstance(source, str) else list(source)
        self.symbols = SymbolTable.with_predefined()
        self.words = []
        self._next_variable = self.variable_base

        self._pass1()
        self._pass2()

        logger.info("Assembled %d words, %d symbols (%d variables)",
                    len(self.words), len(self.symbols),
                    self._next_variable - self.variable_base)
        return [w.word for w in self.words]

    def _pass1(self):
        """Bind every label to the ROM address of the instruction after it."""
        logger.debug("Pass 1: %d source lines", len(self._lines))
        parser = Parser(self._lines, self.mnemonics)
        for inst in parser:
            if inst.kind is not InstructionKind.LABEL:
                continue
            if self.symbols.contains(inst.symbol):
                raise AssemblerError(f"Symbol '{inst.symbol}' is already defined",
                                     inst.position.line_num, inst.position.line_text)
            self.symbols.add_entry(inst.symbol, parser.next_address)
            logger.debug("Label %s = %d", inst.symbol, parser.next_address)

    def _pass2(self):
        """Resolve symbols, allocate variables and encode every instruction."""
        logger.debug("Pass 2")
        parser = Parser(self._lines, self.mnemonics)
        for inst in parser:
            if inst.kind is InstructionKind.LABEL:
                continue
            address = parser.next_address - 1
            if address >= ROM_SIZE:
                raise AssemblerError(f"Program exceeds ROM size ({ROM_SIZE} words)",
                                     inst.position.line_num, inst.position.line_text)
            if inst.kind is InstructionKind.ADDRESS:
                word = self.symbols.format_as_bin(self._resolve(inst))
            else:
                word = encode_compute(inst.dest, inst.comp, inst.jump, self.mnemonics)
            self.words.append(AsmWord(address, word, inst))

    def _resolve(self, inst: AddressInstruction) -> int:
        if inst.is_constant:
            value = int(inst.symbol)
            if value > MAX_CONSTANT:
                raise AssemblerError(f"Constant out of range (0-{MAX_CONSTANT}): {inst.symbol}",
                                     inst.position.line_num, inst.position.line_text)
            return value
        if not self.symbols.contains(inst.symbol):
            return self._allocate_variable(inst)

        value = int(self.symbols.get_address(inst.symbol))
        if value > MAX_CONSTANT:
            raise AssemblerError(f"Address of '{inst.symbol}' out of range: {value}",
                                 inst.position.line_num, inst.position.line_text)
        return value

    def _allocate_variable(self, inst: AddressInstruction) -> int:
        name = inst.symbol
        address = self._next_variable
        if address > MAX_CONSTANT:
            raise AssemblerError(f"Out of variable space for '{name}' (address {address})",
                                 inst.position.line_num, inst.position.line_text)
        if address == PREDEFINED_SYMBOLS['SCREEN']:
            logger.warning("Variable '%s' allocated in screen memory at %d", name, address)
        self.symbols.add_entry(name, address)
        self._next_variable += 1
        logger.debug("Variable %s = %d", name, address)
        return address

    def to_hack(self) -> str:
        """Return the assembled program in .hack text format."""
        return ''.join(w.word + '\n' for w in self.words)

    def get_listing(self) -> str:
        """Return a listing showing ROM address, word and source."""
        lines = [f"{'ADDR':>5}  {'WORD':<16}  SOURCE", "-" * 60]
        for w in self.words:
            lines.append(f"{w.address:5d}  {w.word}  {w.instruction.position.line_text.strip()}")

        user_symbols = [(name, addr) for name, addr in self.symbols.items()
                        if name not in PREDEFINED_SYMBOLS]
        if user_symbols:
            lines.append("")
            lines.append("SYMBOLS")
            for name, addr in sorted(user_symbols, key=lambda item: item[1]):
                lines.append(f"{addr:5d}  {name}")
        return '\n'.join(lines) + '\n'


# ──────────────────────────────────────────────
# Convenience functions
# ──────────────────────────────────────────────

def assemble(source: Union[str, Iterable[str]]) -> List[str]:
    """Assemble source, return the list of binary word strings."""
    return Assembler().assemble(source)


def assemble_to_hack(source: Union[str, Iterable[str]]) -> str:
    """Assemble source, return .hack file text."""
    asm = Assembler()
    asm.assemble(source)
    return asm.to_hack()
