from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Tuple, Union


class Operation(Enum):
    """Mnemonics of the documented Z80 instruction set."""

    ADC = "ADC"
    ADD = "ADD"
    AND = "AND"
    BIT = "BIT"
    CALL = "CALL"
    CCF = "CCF"
    CP = "CP"
    CPD = "CPD"
    CPDR = "CPDR"
    CPI = "CPI"
    CPIR = "CPIR"
    CPL = "CPL"
    DAA = "DAA"
    DEC = "DEC"
    DI = "DI"
    DJNZ = "DJNZ"
    EI = "EI"
    EX = "EX"
    EXX = "EXX"
    HALT = "HALT"
    IM = "IM"
    IN = "IN"
    INC = "INC"
    IND = "IND"
    INDR = "INDR"
    INI = "INI"
    INIR = "INIR"
    JP = "JP"
    JR = "JR"
    LD = "LD"
    LDD = "LDD"
    LDDR = "LDDR"
    LDI = "LDI"
    LDIR = "LDIR"
    NEG = "NEG"
    NOP = "NOP"
    OR = "OR"
    OUT = "OUT"
    OUTD = "OUTD"
    OTDR = "OTDR"
    OUTI = "OUTI"
    OTIR = "OTIR"
    POP = "POP"
    PUSH = "PUSH"
    RES = "RES"
    RET = "RET"
    RETI = "RETI"
    RETN = "RETN"
    RL = "RL"
    RLA = "RLA"
    RLC = "RLC"
    RLD = "RLD"
    RLCA = "RLCA"
    RST = "RST"
    RR = "RR"
    RRA = "RRA"
    RRC = "RRC"
    RRD = "RRD"
    RRCA = "RRCA"
    SBC = "SBC"
    SCF = "SCF"
    SET = "SET"
    SLA = "SLA"
    SRA = "SRA"
    SRL = "SRL"
    SUB = "SUB"
    XOR = "XOR"


class Operand(Enum):
    """Registers, register pairs and condition codes.

    Values are display names. The carry condition renders as ``C`` like the
    register, so it gets its own member name.
    """

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    H = "H"
    L = "L"
    AF = "AF"
    BC = "BC"
    DE = "DE"
    HL = "HL"
    SP = "SP"
    IX = "IX"
    IY = "IY"
    AF_ALT = "AF'"
    I = "I"  # noqa: E741
    R = "R"
    NZ = "NZ"
    Z = "Z"
    NC = "NC"
    FLAG_C = "flag:C"
    PO = "PO"
    PE = "PE"
    P = "P"
    M = "M"

    @property
    def display(self) -> str:
        if self is Operand.FLAG_C:
            return "C"
        return self.value

    @property
    def is_condition(self) -> bool:
        return self in CONDITIONS


CONDITIONS: Tuple[Operand, ...] = (
    Operand.NZ,
    Operand.Z,
    Operand.NC,
    Operand.FLAG_C,
    Operand.PO,
    Operand.PE,
    Operand.P,
    Operand.M,
)

INDEX_REGISTERS = (Operand.IX, Operand.IY)


class AddressingMode(IntFlag):
    """How the value carried by an argument slot is interpreted."""

    REGISTER = 0x01
    IMMEDIATE = 0x02
    EXTENDED = 0x04
    INDIRECT = 0x08
    INDEXED = 0x10
    FLAG = 0x20
    IMPLICIT = 0x40
    DISPLACEMENT = 0x80


def _check_u8(label: str, value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{label} out of range: {value:#x}")


def _check_u16(label: str, value: int) -> None:
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"{label} out of range: {value:#x}")


def _signed8(raw: int) -> int:
    return raw - 0x100 if raw & 0x80 else raw


@dataclass(frozen=True, slots=True)
class Reg:
    reg: Operand

    flags = AddressingMode.REGISTER
    length = 0

    def __post_init__(self) -> None:
        if self.reg.is_condition:
            raise ValueError(f"Reg expects a register, got {self.reg}")

    @property
    def value(self) -> Operand:
        return self.reg


@dataclass(frozen=True, slots=True)
class RegIndirect:
    reg: Operand

    flags = AddressingMode.REGISTER | AddressingMode.INDIRECT
    length = 0

    def __post_init__(self) -> None:
        if self.reg.is_condition:
            raise ValueError(f"RegIndirect expects a register, got {self.reg}")

    @property
    def value(self) -> Operand:
        return self.reg


@dataclass(frozen=True, slots=True)
class Indexed:
    reg: Operand
    disp: int  # raw byte

    flags = AddressingMode.REGISTER | AddressingMode.INDIRECT | AddressingMode.INDEXED
    length = 1

    def __post_init__(self) -> None:
        if self.reg not in INDEX_REGISTERS:
            raise ValueError(f"Indexed expects IX or IY, got {self.reg}")
        _check_u8("Indexed displacement", self.disp)

    @property
    def value(self) -> Operand:
        return self.reg

    @property
    def signed(self) -> int:
        return _signed8(self.disp)


@dataclass(frozen=True, slots=True)
class Imm8:
    value: int

    flags = AddressingMode.IMMEDIATE
    length = 1

    def __post_init__(self) -> None:
        _check_u8("Imm8", self.value)


@dataclass(frozen=True, slots=True)
class Addr16:
    value: int

    flags = AddressingMode.IMMEDIATE | AddressingMode.EXTENDED
    length = 2

    def __post_init__(self) -> None:
        _check_u16("Addr16", self.value)


@dataclass(frozen=True, slots=True)
class AddrIndirect:
    value: int

    flags = AddressingMode.IMMEDIATE | AddressingMode.EXTENDED | AddressingMode.INDIRECT
    length = 2

    def __post_init__(self) -> None:
        _check_u16("AddrIndirect", self.value)


@dataclass(frozen=True, slots=True)
class Rel8:
    disp: int  # raw byte

    flags = AddressingMode.IMMEDIATE | AddressingMode.DISPLACEMENT
    length = 1

    def __post_init__(self) -> None:
        _check_u8("Rel8", self.disp)

    @property
    def value(self) -> int:
        return self.disp

    @property
    def signed(self) -> int:
        return _signed8(self.disp)


@dataclass(frozen=True, slots=True)
class Cond:
    flag: Operand

    flags = AddressingMode.FLAG
    length = 0

    def __post_init__(self) -> None:
        if not self.flag.is_condition:
            raise ValueError(f"Cond expects a condition code, got {self.flag}")

    @property
    def value(self) -> Operand:
        return self.flag


@dataclass(frozen=True, slots=True)
class RstTarget:
    value: int

    flags = AddressingMode.IMPLICIT | AddressingMode.FLAG
    length = 0

    def __post_init__(self) -> None:
        if self.value & ~0x38:
            raise ValueError(f"RST target must be a multiple of 8 below 0x40: {self.value:#x}")


@dataclass(frozen=True, slots=True)
class Literal:
    value: int

    flags = AddressingMode.IMPLICIT
    length = 0

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 7:
            raise ValueError(f"Literal out of range: {self.value}")


Arg = Union[Reg, RegIndirect, Indexed, Imm8, Addr16, AddrIndirect, Rel8, Cond, RstTarget, Literal]


@dataclass(frozen=True, slots=True)
class DecodedInstr:
    operation: Operation
    args: Tuple[Arg, ...]
    length: int

    def __post_init__(self) -> None:
        if len(self.args) > 2:
            raise ValueError(f"At most two arguments, got {len(self.args)}")
        if not 1 <= self.length <= 4:
            raise ValueError(f"Instruction length out of range: {self.length}")

    @property
    def mnemonic(self) -> str:
        return self.operation.value

    @property
    def argc(self) -> int:
        return len(self.args)
