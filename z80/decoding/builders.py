"""Argument and opcode constructors used by the page decoders.

Argument builders translate bit-fields and raw bytes into the typed argument
variants of :mod:`z80.decoding.bind`. Opcode builders assemble a
:class:`DecodedInstr` and total up its encoded length: one opcode byte, the
prefix bytes consumed by outer pages, and whatever each argument contributes.
"""

from __future__ import annotations

from typing import Dict, Tuple

from .bind import (
    CONDITIONS,
    AddrIndirect,
    Addr16,
    Arg,
    Cond,
    DecodedInstr,
    Imm8,
    Indexed,
    Literal,
    Operand,
    Operation,
    Reg,
    RegIndirect,
    Rel8,
    RstTarget,
)
from .reader import StreamCtx

# 3-bit register codes. Code 6 is absent: it is memory through the context
# register, see register_r.
REG_R: Dict[int, Operand] = {
    0: Operand.B,
    1: Operand.C,
    2: Operand.D,
    3: Operand.E,
    4: Operand.H,
    5: Operand.L,
    7: Operand.A,
}

# 2-bit pair codes; slot 2 is replaced by the context register.
REG_SS: Tuple[Operand, ...] = (Operand.BC, Operand.DE, Operand.HL, Operand.SP)
REG_QQ: Tuple[Operand, ...] = (Operand.BC, Operand.DE, Operand.HL, Operand.AF)

MEM_CODE = 6


def register_explicit(reg: Operand) -> Reg:
    return Reg(reg)


def register_indirect(reg: Operand) -> RegIndirect:
    return RegIndirect(reg)


def register_indexed(reg: Operand, displacement: int) -> Indexed:
    return Indexed(reg, displacement)


def register_r(ctx: StreamCtx, code: int, disp_offset: int = 1) -> Arg:
    """Resolve an 8-bit register code against the active context register.

    Code 6 addresses memory: ``(HL)`` on the base page, ``(IX+d)``/``(IY+d)``
    under an index prefix, with ``d`` read at `disp_offset`. The displacement
    is only fetched when it is needed.
    """
    code &= 0x7
    if code != MEM_CODE:
        return register_explicit(REG_R[code])
    if ctx.indexed:
        return register_indexed(ctx.ireg, ctx.byte(disp_offset))
    return register_indirect(ctx.ireg)


def register_ss(ireg: Operand, ss: int) -> Reg:
    ss &= 0x3
    return register_explicit(ireg if ss == 2 else REG_SS[ss])


def register_qq(ireg: Operand, qq: int) -> Reg:
    qq &= 0x3
    return register_explicit(ireg if qq == 2 else REG_QQ[qq])


def flag_f(code: int) -> Cond:
    return Cond(CONDITIONS[code & 0x7])


def relative_address(rel: int) -> Rel8:
    return Rel8(rel)


def absolute_address(lsb: int, msb: int) -> Addr16:
    return Addr16((msb << 8) | lsb)


def indirect_address(lsb: int, msb: int) -> AddrIndirect:
    return AddrIndirect((msb << 8) | lsb)


def immediate(value: int) -> Imm8:
    return Imm8(value)


def zero_page_address(field: int) -> RstTarget:
    return RstTarget(8 * (field & 0x7))


def literal(value: int) -> Literal:
    return Literal(value)


def op0(level: int, operation: Operation) -> DecodedInstr:
    return DecodedInstr(operation=operation, args=(), length=level + 1)


def op1(level: int, operation: Operation, arg: Arg) -> DecodedInstr:
    return DecodedInstr(operation=operation, args=(arg,), length=level + 1 + arg.length)


def op2(level: int, operation: Operation, arg_a: Arg, arg_b: Arg) -> DecodedInstr:
    return DecodedInstr(
        operation=operation,
        args=(arg_a, arg_b),
        length=level + 1 + arg_a.length + arg_b.length,
    )
