import pytest

from z80.decoding import decode_map
from z80.decoding.bind import Imm8, Indexed, Literal, Operand, Operation, Reg, RegIndirect
from z80.decoding.render import format_instr


def _decode(*data: int):
    return decode_map.decode(bytes(data))


# --- CB page -----------------------------------------------------------------


@pytest.mark.parametrize(
    "opcode, text",
    [
        (0x00, "RLC B"),
        (0x09, "RRC C"),
        (0x12, "RL D"),
        (0x1B, "RR E"),
        (0x24, "SLA H"),
        (0x2D, "SRA L"),
        (0x3F, "SRL A"),
        (0x3E, "SRL (HL)"),
    ],
)
def test_cb_shift_family(opcode: int, text: str) -> None:
    di = _decode(0xCB, opcode)
    assert format_instr(di) == text
    assert di.length == 2


@pytest.mark.parametrize("operand", range(8))
def test_cb_sll_slot_is_undefined(operand: int) -> None:
    assert _decode(0xCB, 0x30 | operand) is None


def test_cb_bit_res_set() -> None:
    assert format_instr(_decode(0xCB, 0x47)) == "BIT 0,A"
    assert format_instr(_decode(0xCB, 0x86)) == "RES 0,(HL)"
    assert format_instr(_decode(0xCB, 0xFF)) == "SET 7,A"
    res = _decode(0xCB, 0x9A)
    assert res.operation is Operation.RES
    assert res.args == (Literal(3), Reg(Operand.D))


def test_cb_indexed_rotate_and_set() -> None:
    rlc = _decode(0xFD, 0xCB, 0xFE, 0x06)
    assert rlc.operation is Operation.RLC
    assert rlc.args == (Indexed(Operand.IY, 0xFE),)
    assert rlc.length == 4
    assert format_instr(rlc) == "RLC (IY-2)"
    assert format_instr(_decode(0xDD, 0xCB, 0x7F, 0xFE)) == "SET 7,(IX+127)"
    assert format_instr(_decode(0xDD, 0xCB, 0x80, 0x8E)) == "RES 1,(IX-128)"


def test_cb_indexed_register_forms_are_undefined() -> None:
    assert _decode(0xDD, 0xCB, 0x05, 0x00) is None
    assert _decode(0xFD, 0xCB, 0x05, 0x47) is None


def test_cb_indexed_sll_is_undefined() -> None:
    assert _decode(0xDD, 0xCB, 0x01, 0x36) is None


# --- index page --------------------------------------------------------------


def test_index_substitutes_context_pair() -> None:
    assert format_instr(_decode(0xDD, 0x09)) == "ADD IX,BC"
    assert format_instr(_decode(0xFD, 0x29)) == "ADD IY,IY"
    assert format_instr(_decode(0xDD, 0x23)) == "INC IX"
    assert format_instr(_decode(0xFD, 0xE1)) == "POP IY"
    assert format_instr(_decode(0xDD, 0xE5)) == "PUSH IX"
    assert format_instr(_decode(0xDD, 0xE3)) == "EX (SP),IX"
    assert format_instr(_decode(0xFD, 0xF9)) == "LD SP,IY"
    assert _decode(0xFD, 0xF9).length == 2


def test_index_jp_is_plain_indirect() -> None:
    di = _decode(0xDD, 0xE9)
    assert di.args == (RegIndirect(Operand.IX),)
    assert di.length == 2
    assert format_instr(di) == "JP (IX)"


def test_index_absolute_loads() -> None:
    store = _decode(0xDD, 0x22, 0x00, 0x50)
    assert store.length == 4
    assert format_instr(store) == "LD 0x5000,IX"
    assert format_instr(_decode(0xFD, 0x2A, 0x02, 0x50)) == "LD IY,0x5002"


def test_index_memory_operands_carry_displacement() -> None:
    ld = _decode(0xDD, 0x7E, 0x05)
    assert ld.args == (Reg(Operand.A), Indexed(Operand.IX, 0x05))
    assert ld.length == 3
    assert format_instr(ld) == "LD A,(IX+5)"
    assert format_instr(_decode(0xFD, 0x70, 0xF0)) == "LD (IY-16),B"
    assert format_instr(_decode(0xDD, 0x86, 0x00)) == "ADD A,(IX+0)"
    assert format_instr(_decode(0xFD, 0xBE, 0x01)) == "CP (IY+1)"
    assert format_instr(_decode(0xDD, 0x35, 0x02)) == "DEC (IX+2)"


def test_index_ld_memory_immediate_reads_after_displacement() -> None:
    di = _decode(0xDD, 0x36, 0x04, 0x99)
    assert di.args == (Indexed(Operand.IX, 0x04), Imm8(0x99))
    assert di.length == 4
    assert format_instr(di) == "LD (IX+4),0x99"


def test_index_leaves_non_memory_registers_alone() -> None:
    di = _decode(0xDD, 0x44)
    assert di.args == (Reg(Operand.B), Reg(Operand.H))
    assert di.length == 2
    assert format_instr(_decode(0xDD, 0xEB)) == "EX DE,HL"


def test_index_halt_and_nop_count_prefix() -> None:
    assert _decode(0xDD, 0x76).operation is Operation.HALT
    assert _decode(0xDD, 0x76).length == 2
    assert _decode(0xFD, 0x00).length == 2


@pytest.mark.parametrize("prefix", [0xDD, 0xFD])
@pytest.mark.parametrize("follower", [0xDD, 0xFD])
def test_index_followed_by_index_prefix_is_undefined(prefix: int, follower: int) -> None:
    assert _decode(prefix, follower, 0x21, 0x00) is None


def test_index_then_ed_counts_both_prefixes() -> None:
    neg = _decode(0xDD, 0xED, 0x44, 0x00)
    assert neg.operation is Operation.NEG
    assert neg.length == 3
    assert format_instr(neg) == "NEG "

    ldir = _decode(0xFD, 0xED, 0xB0, 0x00)
    assert ldir.operation is Operation.LDIR
    assert ldir.length == 3


def test_index_then_ed_uses_index_register_for_pairs() -> None:
    adc = _decode(0xDD, 0xED, 0x6A)
    assert adc.args == (Reg(Operand.HL), Reg(Operand.IX))
    assert adc.length == 3
    assert format_instr(_decode(0xFD, 0xED, 0x62)) == "SBC HL,IY"


@pytest.mark.parametrize("prefix", [0xDD, 0xFD])
@pytest.mark.parametrize("opcode", [0x43, 0x4B, 0x53, 0x5B, 0x63, 0x6B, 0x73, 0x7B])
def test_index_then_ed_absolute_loads_are_undefined(prefix: int, opcode: int) -> None:
    assert _decode(prefix, 0xED, opcode, 0x00, 0x60, 0x00) is None


def test_index_then_ed_undefined_slots_stay_undefined() -> None:
    assert _decode(0xDD, 0xED, 0x00) is None
    assert _decode(0xFD, 0xED, 0x4C) is None


# --- ED page -----------------------------------------------------------------


@pytest.mark.parametrize("opcode", [0x00, 0x3F, 0xC0, 0xFF])
def test_ed_outer_groups_undefined(opcode: int) -> None:
    assert _decode(0xED, opcode) is None


def test_ed_port_io() -> None:
    assert format_instr(_decode(0xED, 0x78)) == "IN A,(C)"
    assert format_instr(_decode(0xED, 0x40)) == "IN B,(C)"
    assert format_instr(_decode(0xED, 0x79)) == "OUT (C),A"
    assert format_instr(_decode(0xED, 0x49)) == "OUT (C),C"
    assert _decode(0xED, 0x70) is None
    assert _decode(0xED, 0x71) is None


def test_ed_16bit_arithmetic() -> None:
    assert format_instr(_decode(0xED, 0x42)) == "SBC HL,BC"
    assert format_instr(_decode(0xED, 0x4A)) == "ADC HL,BC"
    assert format_instr(_decode(0xED, 0x6A)) == "ADC HL,HL"
    assert format_instr(_decode(0xED, 0x72)) == "SBC HL,SP"


def test_ed_16bit_absolute_loads() -> None:
    store = _decode(0xED, 0x43, 0x00, 0x60)
    assert store.length == 4
    assert format_instr(store) == "LD 0x6000,BC"
    assert format_instr(_decode(0xED, 0x7B, 0xFE, 0xFF)) == "LD SP,0xFFFE"


def test_ed_single_operations() -> None:
    assert format_instr(_decode(0xED, 0x44)) == "NEG "
    assert _decode(0xED, 0x44).length == 2
    assert _decode(0xED, 0x4C) is None
    assert format_instr(_decode(0xED, 0x45)) == "RETN "
    assert format_instr(_decode(0xED, 0x4D)) == "RETI "
    assert _decode(0xED, 0x55) is None


def test_ed_interrupt_modes() -> None:
    assert format_instr(_decode(0xED, 0x46)) == "IM 0"
    assert format_instr(_decode(0xED, 0x56)) == "IM 1"
    assert format_instr(_decode(0xED, 0x5E)) == "IM 2"
    for opcode in (0x4E, 0x66, 0x6E, 0x76, 0x7E):
        assert _decode(0xED, opcode) is None


def test_ed_special_registers_and_decimal_rotates() -> None:
    assert format_instr(_decode(0xED, 0x47)) == "LD I,A"
    assert format_instr(_decode(0xED, 0x4F)) == "LD R,A"
    assert format_instr(_decode(0xED, 0x57)) == "LD A,I"
    assert format_instr(_decode(0xED, 0x5F)) == "LD A,R"
    assert format_instr(_decode(0xED, 0x67)) == "RRD "
    assert format_instr(_decode(0xED, 0x6F)) == "RLD "
    assert _decode(0xED, 0x77) is None
    assert _decode(0xED, 0x7F) is None


@pytest.mark.parametrize(
    "opcode, operation",
    [
        (0xA0, Operation.LDI),
        (0xA8, Operation.LDD),
        (0xB0, Operation.LDIR),
        (0xB8, Operation.LDDR),
        (0xA1, Operation.CPI),
        (0xA9, Operation.CPD),
        (0xB1, Operation.CPIR),
        (0xB9, Operation.CPDR),
        (0xA2, Operation.INI),
        (0xAA, Operation.IND),
        (0xB2, Operation.INIR),
        (0xBA, Operation.INDR),
        (0xA3, Operation.OUTI),
        (0xAB, Operation.OUTD),
        (0xB3, Operation.OTIR),
        (0xBB, Operation.OTDR),
    ],
)
def test_ed_block_operations(opcode: int, operation: Operation) -> None:
    di = _decode(0xED, opcode)
    assert di.operation is operation
    assert di.args == ()
    assert di.length == 2


def test_ed_block_reserved_slots() -> None:
    for opcode in range(0x80, 0xC0):
        y, z = (opcode >> 3) & 0x7, opcode & 0x7
        if y >= 4 and z <= 3:
            continue
        assert _decode(0xED, opcode) is None, hex(opcode)
