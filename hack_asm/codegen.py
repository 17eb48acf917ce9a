"""
Hack mnemonic tables and machine-word encoders.

A compute instruction is encoded as

    1 1 1 a c1 c2 c3 c4 c5 c6 d1 d2 d3 j1 j2 j3
          └── comp (7) ──────┘ └ dest ┘ └ jump ┘

and an address instruction as a 0 followed by a 15-bit value (see
SymbolTable.format_as_bin).

The parser only needs to know whether a field is legal; it asks a
Vocabulary through is_mnemonic_valid(). The same Vocabulary later maps
the field to its bit pattern. To target a different instruction set,
build new Vocabulary objects and pass a MnemonicSet to the parser and
the assembler.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict

__all__ = [
    'Vocabulary', 'MnemonicSet', 'HACK_MNEMONICS',
    'DEST_CODES', 'COMP_CODES', 'JUMP_CODES',
    'encode_compute', 'WORD_BITS', 'MAX_CONSTANT',
]

WORD_BITS = 16
MAX_CONSTANT = (1 << (WORD_BITS - 1)) - 1   # 32767, MSB selects A vs C


# ──────────────────────────────────────────────
# Hack field tables
# ──────────────────────────────────────────────
# Format: { 'MNEMONIC': 'bits' }

DEST_CODES: Dict[str, str] = {}
COMP_CODES: Dict[str, str] = {}
JUMP_CODES: Dict[str, str] = {}


def _dest(mnemonic: str, bits: str):
    DEST_CODES[mnemonic] = bits


def _comp(mnemonic: str, bits: str, m_form: str = ""):
    """Register a computation. m_form is the same ALU op reading M instead of A."""
    COMP_CODES[mnemonic] = '0' + bits
    if m_form:
        COMP_CODES[m_form] = '1' + bits


def _jump(mnemonic: str, bits: str):
    JUMP_CODES[mnemonic] = bits


# ── Destinations ──
_dest('null', '000')
_dest('M',    '001')
_dest('D',    '010')
_dest('MD',   '011')
_dest('A',    '100')
_dest('AM',   '101')
_dest('AD',   '110')
_dest('AMD',  '111')

# ── Computations (c1..c6, a bit prepended) ──
_comp('0',   '101010')
_comp('1',   '111111')
_comp('-1',  '111010')
_comp('D',   '001100')
_comp('A',   '110000', 'M')
_comp('!D',  '001101')
_comp('!A',  '110001', '!M')
_comp('-D',  '001111')
_comp('-A',  '110011', '-M')
_comp('D+1', '011111')
_comp('A+1', '110111', 'M+1')
_comp('D-1', '001110')
_comp('A-1', '110010', 'M-1')
_comp('D+A', '000010', 'D+M')
_comp('D-A', '010011', 'D-M')
_comp('A-D', '000111', 'M-D')
_comp('D&A', '000000', 'D&M')
_comp('D|A', '010101', 'D|M')

# ── Jumps ──
_jump('null', '000')
_jump('JGT',  '001')
_jump('JEQ',  '010')
_jump('JGE',  '011')
_jump('JLT',  '100')
_jump('JNE',  '101')
_jump('JLE',  '110')
_jump('JMP',  '111')


# ──────────────────────────────────────────────
# Vocabularies
# ──────────────────────────────────────────────

class Vocabulary:
    """A finite set of legal mnemonics for one instruction field."""

    def __init__(self, name: str, codes: Dict[str, str]):
        self.name = name
        self._codes = dict(codes)

    def is_mnemonic_valid(self, text: str) -> bool:
        return text in self._codes

    def encode(self, text: str) -> str:
        try:
            return self._codes[text]
        except KeyError:
            raise ValueError(f"Unknown {self.name} mnemonic: '{text}'") from None

    def __len__(self) -> int:
        return len(self._codes)

    def __repr__(self) -> str:
        return f"Vocabulary({self.name!r}, {len(self._codes)} mnemonics)"


@dataclass(frozen=True)
class MnemonicSet:
    """The three field vocabularies the parser validates against.

    Any object exposing is_mnemonic_valid(text) -> bool can be used for a
    field; encode() is only needed when the set is also used for code
    generation.
    """
    dest: Vocabulary
    comp: Vocabulary
    jump: Vocabulary


HACK_MNEMONICS = MnemonicSet(
    dest=Vocabulary('destination', DEST_CODES),
    comp=Vocabulary('comp', COMP_CODES),
    jump=Vocabulary('jump', JUMP_CODES),
)


# ──────────────────────────────────────────────
# Word encoder
# ──────────────────────────────────────────────

def encode_compute(dest: str, comp: str, jump: str,
                   mnemonics: MnemonicSet = HACK_MNEMONICS) -> str:
    """Encode a C-instruction as '111' + comp + dest + jump."""
    return ('111' + mnemonics.comp.encode(comp)
            + mnemonics.dest.encode(dest)
            + mnemonics.jump.encode(jump))

