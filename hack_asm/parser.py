"""
Line-oriented parser for Hack assembly.

Reads the source one line at a time and reveals one instruction per
advance(). Blank lines and comments are skipped; each instruction is
classified by its leading character:

    (   label declaration   (LOOP)
    @   address             @42, @counter
    *   compute             [dest=]comp[;jump]

The scanning itself is done by pure functions over an immutable ScanState
(line text, cursor, line number). Each returns (result, new_state) where
result is either an instruction or an AsmSyntaxError value, so the state
machine can be driven and tested without any input stream. The Parser
class owns the stream, threads the state and raises the error values.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Iterator, Optional, Tuple, Union

from .codegen import HACK_MNEMONICS, MnemonicSet
from .instructions import (
    AddressInstruction, ComputeInstruction, Instruction, InstructionKind,
    LabelInstruction, SourcePosition,
)

__all__ = [
    'Parser', 'ScanState', 'AsmSyntaxError', 'IllegalCallError',
    'scan_instruction', 'scan_address', 'scan_label', 'scan_compute',
    'skip_comment',
]

COMMENT_CHAR = '/'
SYMBOL_PUNCTUATION = '_.$:'


class AsmSyntaxError(Exception):
    """Malformed source line, positioned at the offending character."""

    def __init__(self, message: str, line_num: int, col: int, line_text: str = ""):
        self.message = message
        self.line_num = line_num
        self.col = col
        self.line_text = line_text
        super().__init__(f"Syntax error at L{line_num}:{col}: {message}")

    def context(self) -> str:
        """The offending line with a caret under the error column."""
        pad = ''.join('\t' if c == '\t' else ' ' for c in self.line_text[:self.col])
        return f"{self.line_text}\n{pad}^"


class IllegalCallError(Exception):
    """Parser used out of order, e.g. advance() with nothing left to parse."""


# ──────────────────────────────────────────────
# Scan state
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class ScanState:
    text: str = ""
    pos: int = 0
    line_num: int = 0

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        """Character at the cursor, '' at end of line."""
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def advanced(self, count: int = 1) -> ScanState:
        return replace(self, pos=self.pos + count)

    def at(self, pos: int) -> ScanState:
        return replace(self, pos=pos)

    def exhausted(self) -> ScanState:
        return replace(self, pos=len(self.text))

    def skip_whitespace(self) -> ScanState:
        pos = self.pos
        while pos < len(self.text) and self.text[pos].isspace():
            pos += 1
        return self.at(pos)

    def position(self) -> SourcePosition:
        return SourcePosition(self.line_num, self.pos, self.text)

    def error(self, message: str, col: Optional[int] = None) -> AsmSyntaxError:
        return AsmSyntaxError(message, self.line_num,
                              self.pos if col is None else col, self.text)

    def unexpected(self) -> AsmSyntaxError:
        if self.at_end:
            return self.error("Unexpected end of line")
        return self.error(f"Unexpected '{self.peek()}'")


ScanResult = Union[Instruction, AsmSyntaxError]


# ──────────────────────────────────────────────
# Character classes
# ──────────────────────────────────────────────

def _is_digit(ch: str) -> bool:
    return ch.isascii() and ch.isdigit()


def _is_symbol_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch in SYMBOL_PUNCTUATION)


def _read_while(state: ScanState, accept: Callable[[str], bool]) -> Tuple[str, ScanState]:
    """Collect characters from the cursor while accept() holds."""
    end = state.pos
    while end < len(state.text) and accept(state.text[end]):
        end += 1
    return state.text[state.pos:end], state.at(end)


# ──────────────────────────────────────────────
# Scanners
# ──────────────────────────────────────────────

def skip_comment(state: ScanState) -> Tuple[Optional[AsmSyntaxError], ScanState]:
    """Consume a '//' comment; the cursor must sit on the first '/'."""
    state = state.advanced()
    if state.peek() != COMMENT_CHAR:
        return state.unexpected(), state
    return None, state.exhausted()


def _end_of_instruction(state: ScanState) -> Tuple[Optional[AsmSyntaxError], ScanState]:
    """Only whitespace and an optional comment may follow an instruction."""
    state = state.skip_whitespace()
    if state.at_end:
        return None, state
    if state.peek() == COMMENT_CHAR:
        return skip_comment(state)
    return state.unexpected(), state


def scan_address(state: ScanState) -> Tuple[ScanResult, ScanState]:
    """@<decimal> or @<symbol>; the cursor must sit on '@'."""
    position = state.position()
    state = state.advanced().skip_whitespace()
    if _is_digit(state.peek()):
        symbol, state = _read_while(state, _is_digit)
    else:
        symbol, state = _read_while(state, _is_symbol_char)
        if not symbol:
            if state.at_end:
                return state.error("Symbol expected"), state
            return state.unexpected(), state

    error, state = _end_of_instruction(state)
    if error is not None:
        return error, state
    return AddressInstruction(symbol, position), state


def scan_label(state: ScanState) -> Tuple[ScanResult, ScanState]:
    """(<symbol>); the cursor must sit on '('."""
    position = state.position()
    state = state.advanced().skip_whitespace()
    if _is_digit(state.peek()):
        return state.error("Symbol cannot start with a digit"), state
    symbol, state = _read_while(state, _is_symbol_char)
    if not symbol:
        return state.error("Symbol expected"), state
    if state.peek() != ')':
        return state.error("')' expected"), state

    error, state = _end_of_instruction(state.advanced())
    if error is not None:
        return error, state
    return LabelInstruction(symbol, position), state


class _Phase(enum.IntEnum):
    UNDETERMINED = 0
    HAVE_DEST = 1
    HAVE_COMP = 2
    DONE = 3


def scan_compute(state: ScanState,
                 mnemonics: MnemonicSet = HACK_MNEMONICS) -> Tuple[ScanResult, ScanState]:
    """[dest=]comp[;jump], whitespace ignored anywhere.

    A bad destination is reported at the start of the instruction, a bad
    comp at the '=' that opened it (or the start when there is none) and a
    bad jump at the character that ended the comp.
    """
    state = state.skip_whitespace()
    position = state.position()
    text = state.text
    pos = state.pos

    phase = _Phase.UNDETERMINED
    dest = comp = jump = 'null'
    dest_col = comp_col = jump_col = pos
    chars = []

    while phase is not _Phase.DONE:
        ch = text[pos] if pos < len(text) else ''
        if ch.isspace():
            pos += 1
            continue

        ends_line = ch == '' or ch == COMMENT_CHAR
        if ch == COMMENT_CHAR:
            error, after = skip_comment(state.at(pos))
            if error is not None:
                return error, after

        if phase is _Phase.UNDETERMINED and ch == '=':
            dest = ''.join(chars)
            comp_col = jump_col = pos
            phase = _Phase.HAVE_DEST
        elif phase < _Phase.HAVE_COMP and (ch == ';' or ends_line):
            comp = ''.join(chars)
            jump_col = pos
            phase = _Phase.HAVE_COMP
        elif phase is _Phase.HAVE_COMP and ends_line:
            jump = ''.join(chars) or 'null'
            phase = _Phase.DONE
            continue
        else:
            chars.append(ch)
            pos += 1
            continue

        chars = []
        pos = len(text) if ends_line else pos + 1

    checks = (
        (mnemonics.dest, dest, dest_col, 'destination'),
        (mnemonics.comp, comp, comp_col, 'comp'),
        (mnemonics.jump, jump, jump_col, 'jump'),
    )
    for vocabulary, value, col, field_name in checks:
        if not vocabulary.is_mnemonic_valid(value):
            return state.error(f"Bad {field_name}: '{value}' given", col), state.at(pos)

    return ComputeInstruction(dest, comp, jump, position), state.exhausted()


def scan_instruction(state: ScanState,
                     mnemonics: MnemonicSet = HACK_MNEMONICS) -> Tuple[ScanResult, ScanState]:
    """Classify the instruction at the cursor and scan it."""
    state = state.skip_whitespace()
    lead = state.peek()
    if lead == '(':
        return scan_label(state)
    if lead == '@':
        return scan_address(state)
    return scan_compute(state, mnemonics)


# ──────────────────────────────────────────────
# Parser
# ──────────────────────────────────────────────

class Parser:
    """Pulls instructions out of a line-oriented source.

    Usage:
        p = Parser(open('Prog.asm'))
        while p.has_more_commands():
            p.advance()
            if p.kind is InstructionKind.COMPUTE:
                ... p.dest, p.comp, p.jump

    or simply ``for inst in Parser(source): ...``.

    instruction_num is 1-based and counts address and compute
    instructions only; next_address is the ROM address the next one
    will occupy, which is where a label just seen binds.
    """

    def __init__(self, source: Union[str, Iterable[str]],
                 mnemonics: MnemonicSet = HACK_MNEMONICS):
        if isinstance(source, str):
            source = source.split('\n')
        self._lines: Iterator[str] = iter(source)
        self.mnemonics = mnemonics
        self.instruction_num = 1
        self._state = ScanState()
        self._instruction: Optional[Instruction] = None

    @property
    def line_num(self) -> int:
        return self._state.line_num

    @property
    def next_address(self) -> int:
        return self.instruction_num - 1

    def has_more_commands(self) -> bool:
        state = self._state.skip_whitespace()
        while state.at_end:
            raw = next(self._lines, None)
            if raw is None:
                self._state = state
                return False
            state = ScanState(raw.rstrip('\r\n'), 0, state.line_num + 1).skip_whitespace()
            if state.peek() == COMMENT_CHAR:
                error, state = skip_comment(state)
                if error is not None:
                    self._state = state
                    raise error
        self._state = state
        return True

    def advance(self) -> Instruction:
        if not self.has_more_commands():
            raise IllegalCallError("advance() called with no more commands")
        result, self._state = scan_instruction(self._state, self.mnemonics)
        if isinstance(result, AsmSyntaxError):
            raise result
        self._instruction = result
        if result.kind is not InstructionKind.LABEL:
            self.instruction_num += 1
        return result

    def __iter__(self) -> Iterator[Instruction]:
        while self.has_more_commands():
            yield self.advance()

    # ── Accessors ─────────────────────────────

    @property
    def instruction(self) -> Instruction:
        if self._instruction is None:
            raise IllegalCallError("No instruction has been parsed yet")
        return self._instruction

    @property
    def kind(self) -> InstructionKind:
        return self.instruction.kind

    @property
    def symbol(self) -> str:
        return self._field('symbol', InstructionKind.ADDRESS, InstructionKind.LABEL)

    @property
    def dest(self) -> str:
        return self._field('dest', InstructionKind.COMPUTE)

    @property
    def comp(self) -> str:
        return self._field('comp', InstructionKind.COMPUTE)

    @property
    def jump(self) -> str:
        return self._field('jump', InstructionKind.COMPUTE)

    def _field(self, name: str, *kinds: InstructionKind) -> str:
        inst = self.instruction
        if inst.kind not in kinds:
            raise IllegalCallError(f"'{name}' is not defined for {inst.kind.name} instructions")
        return getattr(inst, name)
