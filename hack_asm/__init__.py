"""
hack_asm - Two-pass assembler for the Hack 16-bit computer
==========================================================
Translates Hack assembly (.asm) into Hack machine code (.hack).

Architecture:
    ┌──────────┐    ┌──────────┐    ┌──────────────┐    ┌──────────┐    ┌──────────┐
    │ .asm     │───>│  Parser  │───>│ Instructions │───>│ Pass 1/2 │───>│ .hack    │
    │ (lines)  │    │ (scanner)│    │ (A / C / L)  │    │ + symbols│    │ (words)  │
    └──────────┘    └──────────┘    └──────────────┘    └──────────┘    └──────────┘

    - parser.py:       line scanner + compute-field state machine
    - instructions.py: dataclass records for the three instruction kinds
    - symbol_table.py: name -> address map, predefined Hack symbols
    - codegen.py:      dest/comp/jump vocabularies and bit patterns
    - assembler.py:    two-pass driver (labels, variables, encoding)
"""

__version__ = "0.3.0"

from .instructions import (
    InstructionKind, SourcePosition,
    AddressInstruction, ComputeInstruction, LabelInstruction, Instruction,
)
from .codegen import Vocabulary, MnemonicSet, HACK_MNEMONICS, encode_compute
from .symbol_table import SymbolTable, PREDEFINED_SYMBOLS
from .parser import Parser, ScanState, AsmSyntaxError, IllegalCallError, scan_instruction
from .assembler import Assembler, AssemblerError, assemble, assemble_to_hack


def assemble_source(source, *, variable_base: int = 16, output: str = "hack"):
    """Assemble Hack source text.

    Args:
        source: assembly text, or any iterable of lines.
        variable_base: first RAM address handed to variables (default 16).
        output: 'hack' (default), 'listing', or 'words'.

    Returns:
        .hack text (str), listing text (str), or the list of word strings.
    """
    asm = Assembler(variable_base=variable_base)
    words = asm.assemble(source)

    if output == 'hack':
        return asm.to_hack()
    elif output == 'listing':
        return asm.get_listing()
    elif output == 'words':
        return words
    raise ValueError(f"Unknown output format: {output!r}")
