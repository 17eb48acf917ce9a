"""
Instruction records produced by the Hack assembly parser.

Each parsed source line yields at most one instruction. The three kinds
are mutually exclusive:

    @value          AddressInstruction   (decimal constant or symbol)
    dest=comp;jump  ComputeInstruction   (ALU operation, optional dest/jump)
    (LABEL)         LabelInstruction     (binds LABEL to the next ROM address)

Every record carries the SourcePosition it was scanned from so later
stages can point diagnostics at the exact line and column.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import ClassVar, Union


class InstructionKind(enum.Enum):
    ADDRESS = "A"
    COMPUTE = "C"
    LABEL = "L"


@dataclass(frozen=True)
class SourcePosition:
    """Where an instruction starts in the source."""
    line_num: int               # 1-based physical line
    col: int                    # 0-based column of the first character
    line_text: str = ""

    def __str__(self) -> str:
        return f"L{self.line_num}:{self.col}"


@dataclass(frozen=True)
class AddressInstruction:
    symbol: str
    position: SourcePosition
    kind: ClassVar[InstructionKind] = InstructionKind.ADDRESS

    @property
    def is_constant(self) -> bool:
        """True for @123, False for @name."""
        return self.symbol[:1].isdigit()

    def __str__(self) -> str:
        return f"@{self.symbol}"


@dataclass(frozen=True)
class ComputeInstruction:
    dest: str
    comp: str
    jump: str
    position: SourcePosition
    kind: ClassVar[InstructionKind] = InstructionKind.COMPUTE

    def __str__(self) -> str:
        text = self.comp
        if self.dest != "null":
            text = f"{self.dest}={text}"
        if self.jump != "null":
            text = f"{text};{self.jump}"
        return text


@dataclass(frozen=True)
class LabelInstruction:
    symbol: str
    position: SourcePosition
    kind: ClassVar[InstructionKind] = InstructionKind.LABEL

    def __str__(self) -> str:
        return f"({self.symbol})"


Instruction = Union[AddressInstruction, ComputeInstruction, LabelInstruction]
