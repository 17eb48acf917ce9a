"""
Assembler Tests for the Hack two-pass assembler.

Checks compute-field encodings against the Hack machine language
reference, label and variable resolution, and whole programs against
their known .hack output.
"""
import logging
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from hack_asm import assemble_source
from hack_asm.assembler import Assembler, AssemblerError, assemble, assemble_to_hack
from hack_asm.codegen import HACK_MNEMONICS, encode_compute
from hack_asm.parser import AsmSyntaxError


ADD_ASM = """\
// Computes R0 = 2 + 3
@2
D=A
@3
D=D+A
@0
M=D
"""

ADD_HACK = [
    "0000000000000010",
    "1110110000010000",
    "0000000000000011",
    "1110000010010000",
    "0000000000000000",
    "1110001100001000",
]

MAX_ASM = """\
// Computes R2 = max(R0, R1)
   @R0
   D=M              // D = first number
   @R1
   D=D-M            // D = first number - second number
   @OUTPUT_FIRST
   D;JGT            // if D>0 (first is greater) goto output_first
   @R1
   D=M              // D = second number
   @OUTPUT_D
   0;JMP            // goto output_d
(OUTPUT_FIRST)
   @R0
   D=M              // D = first number
(OUTPUT_D)
   @R2
   M=D              // M[2] = D (greatest number)
(INFINITE_LOOP)
   @INFINITE_LOOP
   0;JMP            // infinite loop
"""

MAX_HACK = [
    "0000000000000000",
    "1111110000010000",
    "0000000000000001",
    "1111010011010000",
    "0000000000001010",
    "1110001100000001",
    "0000000000000001",
    "1111110000010000",
    "0000000000001100",
    "1110101010000111",
    "0000000000000000",
    "1111110000010000",
    "0000000000000010",
    "1110001100001000",
    "0000000000001110",
    "1110101010000111",
]


class TestComputeEncoding:
    """Verify C-instruction encodings against the Hack reference."""

    def test_vocabulary_sizes(self):
        assert len(HACK_MNEMONICS.dest) == 8
        assert len(HACK_MNEMONICS.comp) == 28
        assert len(HACK_MNEMONICS.jump) == 8

    def test_common_words(self):
        cases = [
            (("D", "M+1", "JGT"), "1111110111010001"),
            (("null", "0", "JMP"), "1110101010000111"),
            (("D", "A", "null"), "1110110000010000"),
            (("M", "D", "null"), "1110001100001000"),
            (("AMD", "D|M", "JLE"), "1111010101111110"),
            (("null", "D", "JNE"), "1110001100000101"),
        ]
        for (dest, comp, jump), expected in cases:
            assert encode_compute(dest, comp, jump) == expected, f"{dest}={comp};{jump}"

    def test_a_bit_selects_memory(self):
        a_form = HACK_MNEMONICS.comp.encode("D+A")
        m_form = HACK_MNEMONICS.comp.encode("D+M")
        assert a_form[0] == "0"
        assert m_form[0] == "1"
        assert a_form[1:] == m_form[1:]

    def test_unknown_mnemonic(self):
        with pytest.raises(ValueError, match="comp"):
            HACK_MNEMONICS.comp.encode("D*M")


class TestPrograms:

    def test_add(self):
        assert assemble(ADD_ASM) == ADD_HACK

    def test_max(self):
        assert assemble(MAX_ASM) == MAX_HACK

    def test_to_hack_text(self):
        text = assemble_to_hack(ADD_ASM)
        assert text == "\n".join(ADD_HACK) + "\n"

    def test_accepts_line_iterables(self):
        assert assemble(ADD_ASM.splitlines(keepends=True)) == ADD_HACK

    def test_form_feed_inside_comment(self):
        assert assemble("@2\n// page\x0c D=A\nD=A\n") == ADD_HACK[:2]
        with pytest.raises(AsmSyntaxError) as exc:
            assemble("// page\x0c break\n@1\nX=1\n")
        assert exc.value.line_num == 3

    def test_empty_program(self):
        assert assemble("// nothing here\n\n") == []


class TestSymbols:

    def test_labels_take_no_rom(self):
        a = Assembler()
        a.assemble("(START)\n@START\n(MID)\n0;JMP\n(END)")
        assert a.symbols.get_address("START") == "0"
        assert a.symbols.get_address("MID") == "1"
        assert a.symbols.get_address("END") == "2"
        assert len(a.words) == 2

    def test_forward_reference(self):
        words = assemble("@END\n0;JMP\n(END)\n@END\n0;JMP")
        assert words[0] == "0000000000000010"
        assert words[2] == "0000000000000010"

    def test_variables_from_16(self):
        words = assemble("@i\nM=1\n@sum\nM=0\n@i\nD=M")
        assert words[0] == "0000000000010000"
        assert words[2] == "0000000000010001"
        assert words[4] == "0000000000010000"

    def test_variable_base(self):
        a = Assembler(variable_base=32)
        words = a.assemble("@x\n@y")
        assert words == ["0000000000100000", "0000000000100001"]

    def test_predefined_symbols(self):
        words = assemble("@SCREEN\n@KBD\n@R13\n@THAT")
        assert [int(w, 2) for w in words] == [16384, 24576, 13, 4]

    def test_duplicate_label(self):
        with pytest.raises(AssemblerError, match="already defined") as exc:
            assemble("(LOOP)\n@1\n(LOOP)\n@2")
        assert exc.value.line_num == 3

    def test_label_shadowing_predefined(self):
        with pytest.raises(AssemblerError, match="'R0'"):
            assemble("(R0)\n@1")


class TestConstants:

    def test_largest_constant(self):
        assert assemble("@32767") == ["0111111111111111"]

    def test_constant_out_of_range(self):
        with pytest.raises(AssemblerError, match="out of range") as exc:
            assemble("@1\n@32768")
        assert exc.value.line_num == 2

    def test_out_of_variable_space(self):
        a = Assembler(variable_base=32767)
        with pytest.raises(AssemblerError, match="Out of variable space for 'b'") as exc:
            a.assemble("@a\n@b")
        assert exc.value.line_num == 2
        assert a.symbols.get_address("a") == "32767"


class TestErrors:

    def test_syntax_error_aborts(self):
        with pytest.raises(AsmSyntaxError) as exc:
            assemble("@1\nD=M+1;JGT\nX=D+1\n@2")
        assert exc.value.line_num == 3
        assert exc.value.col == 0

    def test_syntax_error_in_pass_one(self):
        a = Assembler()
        with pytest.raises(AsmSyntaxError, match="Unexpected 'j'"):
            a.assemble("@5 junk")
        assert a.words == []


class TestOutputs:

    def test_listing(self):
        a = Assembler()
        a.assemble(MAX_ASM)
        listing = a.get_listing()
        assert "SOURCE" in listing
        assert "    4  0000000000001010  @OUTPUT_FIRST" in listing
        assert "SYMBOLS" in listing
        assert "   14  INFINITE_LOOP" in listing

    def test_assemble_source_formats(self):
        assert assemble_source(ADD_ASM) == assemble_to_hack(ADD_ASM)
        assert assemble_source(ADD_ASM, output="words") == ADD_HACK
        assert "SOURCE" in assemble_source(ADD_ASM, output="listing")

    def test_assemble_source_bad_format(self):
        with pytest.raises(ValueError, match="Unknown output format"):
            assemble_source(ADD_ASM, output="s19")

    def test_debug_logging(self, caplog):
        caplog.set_level(logging.DEBUG, logger="hack_asm.assembler")
        assemble("(LOOP)\n@i\n@LOOP\n0;JMP")
        messages = [r.getMessage() for r in caplog.records]
        assert "Label LOOP = 0" in messages
        assert "Variable i = 16" in messages
        assert any(m.startswith("Assembled 3 words") for m in messages)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
