from __future__ import annotations

import logging
from functools import lru_cache
from typing import Callable, Optional, Tuple, Union

from ..coding import Decoder
from ..config import DasmConfig, load_dasm_config
from .bind import Arg, DecodedInstr, Operand, Operation
from .builders import (
    MEM_CODE,
    absolute_address,
    flag_f,
    immediate,
    indirect_address,
    literal,
    op0,
    op1,
    op2,
    register_explicit,
    register_indirect,
    register_qq,
    register_r,
    register_ss,
    relative_address,
    zero_page_address,
)
from .reader import StreamCtx

logger = logging.getLogger(__name__)

ByteSource = Union[bytes, bytearray, memoryview, Decoder]
PageDecoder = Callable[[StreamCtx], Optional[DecodedInstr]]

# Section A, low code 7: accumulator and flag operations by middle field.
_ACC_OPS: Tuple[Operation, ...] = (
    Operation.RLCA,
    Operation.RRCA,
    Operation.RLA,
    Operation.RRA,
    Operation.DAA,
    Operation.CPL,
    Operation.SCF,
    Operation.CCF,
)

# ALU operations by middle field, and whether they name A explicitly.
_ALU_OPS: Tuple[Tuple[Operation, bool], ...] = (
    (Operation.ADD, True),
    (Operation.ADC, True),
    (Operation.SUB, False),
    (Operation.SBC, True),
    (Operation.AND, False),
    (Operation.XOR, False),
    (Operation.OR, False),
    (Operation.CP, False),
)

# CB page rotate/shift family; slot 6 (SLL) is undocumented.
_SHIFT_OPS: Tuple[Optional[Operation], ...] = (
    Operation.RLC,
    Operation.RRC,
    Operation.RL,
    Operation.RR,
    Operation.SLA,
    Operation.SRA,
    None,
    Operation.SRL,
)

_BIT_OPS: Tuple[Operation, ...] = (Operation.BIT, Operation.RES, Operation.SET)

# ED page block operations, by low code then middle field 4..7.
_BLOCK_OPS: Tuple[Tuple[Operation, ...], ...] = (
    (Operation.LDI, Operation.LDD, Operation.LDIR, Operation.LDDR),
    (Operation.CPI, Operation.CPD, Operation.CPIR, Operation.CPDR),
    (Operation.INI, Operation.IND, Operation.INIR, Operation.INDR),
    (Operation.OUTI, Operation.OUTD, Operation.OTIR, Operation.OTDR),
)

# Longest encoding: two prefix bytes, opcode and one operand byte.
MAX_LENGTH = 4

# ED page interrupt mode by middle field.
_IM_MODES = {0: 0, 2: 1, 3: 2}


def _undefined(ctx: StreamCtx, page: str, op: Optional[int] = None) -> None:
    if not ctx.config.log_undefined:
        return None
    logger.debug(
        "undefined %s opcode %02X at prefix depth %d (%s)",
        page,
        ctx.opcode() if op is None else op,
        ctx.level,
        ctx.ireg.value,
    )
    return None


def _fields(op: int) -> Tuple[int, int, int]:
    """Split an opcode into its top 2, middle 3 and low 3 bits."""
    return (op >> 6) & 0x3, (op >> 3) & 0x7, op & 0x7


def _alu(ctx: StreamCtx, operation: Operation, with_a: bool, operand: Arg) -> DecodedInstr:
    if with_a:
        return op2(ctx.level, operation, register_explicit(Operand.A), operand)
    return op1(ctx.level, operation, operand)


def _section0(ctx: StreamCtx) -> Optional[DecodedInstr]:
    op = ctx.opcode()
    level, ireg = ctx.level, ctx.ireg
    _, y, z = _fields(op)
    p, q = y >> 1, y & 0x1

    if z == 0:
        if y == 0:
            return op0(level, Operation.NOP)
        if y == 1:
            return op2(
                level,
                Operation.EX,
                register_explicit(Operand.AF),
                register_explicit(Operand.AF_ALT),
            )
        if y == 2:
            return op1(level, Operation.DJNZ, relative_address(ctx.byte(1)))
        if y == 3:
            return op1(level, Operation.JR, relative_address(ctx.byte(1)))
        return op2(level, Operation.JR, flag_f(y & 0x3), relative_address(ctx.byte(1)))

    if z == 1:
        if q == 0:
            return op2(
                level,
                Operation.LD,
                register_ss(ireg, p),
                absolute_address(ctx.byte(1), ctx.byte(2)),
            )
        return op2(level, Operation.ADD, register_explicit(ireg), register_ss(ireg, p))

    if z == 2:
        if y == 0:
            return op2(level, Operation.LD, register_indirect(Operand.BC), register_explicit(Operand.A))
        if y == 1:
            return op2(level, Operation.LD, register_explicit(Operand.A), register_indirect(Operand.BC))
        if y == 2:
            return op2(level, Operation.LD, register_indirect(Operand.DE), register_explicit(Operand.A))
        if y == 3:
            return op2(level, Operation.LD, register_explicit(Operand.A), register_indirect(Operand.DE))
        addr = indirect_address(ctx.byte(1), ctx.byte(2))
        reg = register_explicit(ireg if y in (4, 5) else Operand.A)
        if q == 0:
            return op2(level, Operation.LD, addr, reg)
        return op2(level, Operation.LD, reg, addr)

    if z == 3:
        return op1(level, Operation.DEC if q else Operation.INC, register_ss(ireg, p))

    if z == 4:
        return op1(level, Operation.INC, register_r(ctx, y))

    if z == 5:
        return op1(level, Operation.DEC, register_r(ctx, y))

    if z == 6:
        target = register_r(ctx, y)
        # (IX+d),n carries the immediate after the displacement.
        return op2(level, Operation.LD, target, immediate(ctx.byte(1 + target.length)))

    return op0(level, _ACC_OPS[y])


def _section1(ctx: StreamCtx) -> DecodedInstr:
    op = ctx.opcode()
    if op == 0x76:
        return op0(ctx.level, Operation.HALT)
    _, y, z = _fields(op)
    return op2(ctx.level, Operation.LD, register_r(ctx, y), register_r(ctx, z))


def _section2(ctx: StreamCtx) -> DecodedInstr:
    _, y, z = _fields(ctx.opcode())
    operation, with_a = _ALU_OPS[y]
    return _alu(ctx, operation, with_a, register_r(ctx, z))


def _section3(ctx: StreamCtx) -> Optional[DecodedInstr]:
    op = ctx.opcode()
    level, ireg = ctx.level, ctx.ireg
    _, y, z = _fields(op)
    p, q = y >> 1, y & 0x1

    if z == 0:
        return op1(level, Operation.RET, flag_f(y))

    if z == 1:
        if q == 0:
            return op1(level, Operation.POP, register_qq(ireg, p))
        if p == 0:
            return op0(level, Operation.RET)
        if p == 1:
            return op0(level, Operation.EXX)
        if p == 2:
            return op1(level, Operation.JP, register_indirect(ireg))
        return op2(level, Operation.LD, register_explicit(Operand.SP), register_explicit(ireg))

    if z == 2:
        return op2(level, Operation.JP, flag_f(y), absolute_address(ctx.byte(1), ctx.byte(2)))

    if z == 3:
        if y == 0:
            return op1(level, Operation.JP, absolute_address(ctx.byte(1), ctx.byte(2)))
        if y == 1:
            return decode_page_cb(ctx.enter())
        if y == 2:
            return op2(level, Operation.OUT, immediate(ctx.byte(1)), register_explicit(Operand.A))
        if y == 3:
            return op2(level, Operation.IN, register_explicit(Operand.A), immediate(ctx.byte(1)))
        if y == 4:
            return op2(level, Operation.EX, register_indirect(Operand.SP), register_explicit(ireg))
        if y == 5:
            return op2(level, Operation.EX, register_explicit(Operand.DE), register_explicit(Operand.HL))
        return op0(level, Operation.DI if y == 6 else Operation.EI)

    if z == 4:
        return op2(level, Operation.CALL, flag_f(y), absolute_address(ctx.byte(1), ctx.byte(2)))

    if z == 5:
        if q == 0:
            return op1(level, Operation.PUSH, register_qq(ireg, p))
        if p == 0:
            return op1(level, Operation.CALL, absolute_address(ctx.byte(1), ctx.byte(2)))
        if p == 2:
            return decode_page_ed(ctx.enter())
        if ctx.indexed:
            # Prefix depth is capped at two.
            return _undefined(ctx, "index")
        return decode_page_xx(ctx.enter(Operand.IX if p == 1 else Operand.IY))

    if z == 6:
        operation, with_a = _ALU_OPS[y]
        return _alu(ctx, operation, with_a, immediate(ctx.byte(1)))

    return op1(level, Operation.RST, zero_page_address(y))


_SECTIONS: Tuple[PageDecoder, ...] = (_section0, _section1, _section2, _section3)


def decode_page_xx(ctx: StreamCtx) -> Optional[DecodedInstr]:
    """Base page, or the index page when `ctx.ireg` is IX/IY."""
    x = (ctx.opcode() >> 6) & 0x3
    return _SECTIONS[x](ctx)


def decode_page_cb(ctx: StreamCtx) -> Optional[DecodedInstr]:
    """Bit operations page.

    Under an index prefix the displacement sits between CB and the final
    opcode byte, so the opcode is read at offset 1 and the displacement at 0.
    """
    if ctx.indexed:
        op = ctx.byte(1)
        if op & 0x7 != MEM_CODE:
            return _undefined(ctx, "indexed CB", op)
        disp_offset = 0
    else:
        op = ctx.opcode()
        disp_offset = 1

    x, y, z = _fields(op)
    operand = register_r(ctx, z, disp_offset)

    if x == 0:
        operation = _SHIFT_OPS[y]
        if operation is None:
            return _undefined(ctx, "CB", op)
        return op1(ctx.level, operation, operand)

    return op2(ctx.level, _BIT_OPS[x - 1], literal(y), operand)


def _ed_group1(ctx: StreamCtx) -> Optional[DecodedInstr]:
    level, ireg = ctx.level, ctx.ireg
    _, y, z = _fields(ctx.opcode())
    p, q = y >> 1, y & 0x1

    if z == 0:
        if y == MEM_CODE:
            return _undefined(ctx, "ED")
        return op2(level, Operation.IN, register_r(ctx, y), register_indirect(Operand.C))

    if z == 1:
        if y == MEM_CODE:
            return _undefined(ctx, "ED")
        return op2(level, Operation.OUT, register_indirect(Operand.C), register_r(ctx, y))

    if z == 2:
        operation = Operation.ADC if q else Operation.SBC
        return op2(level, operation, register_explicit(Operand.HL), register_ss(ireg, p))

    if z == 3:
        if ctx.level + 3 > MAX_LENGTH:
            return _undefined(ctx, "ED")
        addr = indirect_address(ctx.byte(1), ctx.byte(2))
        if q == 0:
            return op2(level, Operation.LD, addr, register_ss(ireg, p))
        return op2(level, Operation.LD, register_ss(ireg, p), addr)

    if z == 4:
        if y != 0:
            return _undefined(ctx, "ED")
        return op0(level, Operation.NEG)

    if z == 5:
        if y > 1:
            return _undefined(ctx, "ED")
        return op0(level, Operation.RETI if y else Operation.RETN)

    if z == 6:
        mode = _IM_MODES.get(y)
        if mode is None:
            return _undefined(ctx, "ED")
        return op1(level, Operation.IM, literal(mode))

    if y == 0:
        return op2(level, Operation.LD, register_explicit(Operand.I), register_explicit(Operand.A))
    if y == 1:
        return op2(level, Operation.LD, register_explicit(Operand.R), register_explicit(Operand.A))
    if y == 2:
        return op2(level, Operation.LD, register_explicit(Operand.A), register_explicit(Operand.I))
    if y == 3:
        return op2(level, Operation.LD, register_explicit(Operand.A), register_explicit(Operand.R))
    if y == 4:
        return op0(level, Operation.RRD)
    if y == 5:
        return op0(level, Operation.RLD)
    return _undefined(ctx, "ED")


def _ed_group2(ctx: StreamCtx) -> Optional[DecodedInstr]:
    _, y, z = _fields(ctx.opcode())
    if z > 3 or y < 4:
        return _undefined(ctx, "ED")
    return op0(ctx.level, _BLOCK_OPS[z][y - 4])


def decode_page_ed(ctx: StreamCtx) -> Optional[DecodedInstr]:
    """Extended operations page; only the 01 and 10 groups are defined."""
    x = (ctx.opcode() >> 6) & 0x3
    if x == 1:
        return _ed_group1(ctx)
    if x == 2:
        return _ed_group2(ctx)
    return _undefined(ctx, "ED")


def _as_decoder(data: ByteSource) -> Decoder:
    if isinstance(data, Decoder):
        return data
    return Decoder(data)


@lru_cache(maxsize=1)
def _default_config() -> DasmConfig:
    return load_dasm_config()


def decode_page(
    level: int,
    ireg: Operand,
    data: ByteSource,
    *,
    config: Optional[DasmConfig] = None,
) -> Optional[DecodedInstr]:
    """Decode `data` as a base or index page opcode behind `level` prefixes."""
    ctx = StreamCtx(
        window=_as_decoder(data),
        level=level,
        ireg=ireg,
        config=config if config is not None else _default_config(),
    )
    return decode_page_xx(ctx)


def decode(data: ByteSource, *, config: Optional[DasmConfig] = None) -> Optional[DecodedInstr]:
    """Decode one instruction from the start of `data`.

    Returns ``None`` for an undefined encoding. Only the bytes the instruction
    needs are read; running out of bytes raises
    :class:`~z80.coding.BufferTooShort`.
    """
    cfg = config if config is not None else _default_config()
    decoded = decode_page(0, Operand.HL, data, config=cfg)
    if cfg.trace:
        logger.debug("decoded %r", decoded)
    return decoded


def release(instr: Optional[DecodedInstr]) -> None:
    """Counterpart of decode() for callers that pair decode and release.

    Decoded instructions are immutable and garbage collected, so there is
    nothing to free.
    """
    del instr
