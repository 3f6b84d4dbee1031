from __future__ import annotations

from typing import List, Optional

from .bind import (
    AddrIndirect,
    Addr16,
    Arg,
    Cond,
    DecodedInstr,
    Imm8,
    Indexed,
    Literal,
    Reg,
    RegIndirect,
    Rel8,
    RstTarget,
)
from .tokens import (
    TAddr,
    TBegMem,
    TEndMem,
    THex,
    TInstr,
    TInt,
    TReg,
    TSep,
    TSigned,
    TText,
    Token,
    asm_str,
)


def arg_tokens(arg: Arg) -> List[Token]:
    if isinstance(arg, Reg):
        return [TReg(arg.reg.display)]
    if isinstance(arg, RegIndirect):
        return [TBegMem(), TReg(arg.reg.display), TEndMem()]
    if isinstance(arg, Indexed):
        return [TBegMem(), TReg(arg.reg.display), TSigned(arg.signed), TEndMem()]
    # Absolute memory operands print as the bare address.
    if isinstance(arg, (Addr16, AddrIndirect)):
        return [TAddr(arg.value)]
    if isinstance(arg, Rel8):
        return [TSigned(arg.signed)]
    if isinstance(arg, Imm8):
        return [THex(arg.value)]
    if isinstance(arg, Cond):
        return [TText(arg.flag.display)]
    if isinstance(arg, RstTarget):
        return [THex(arg.value)]
    if isinstance(arg, Literal):
        return [TInt(arg.value)]
    raise TypeError(f"Unsupported argument {arg!r}")


def tokens(instr: DecodedInstr) -> List[Token]:
    """Token stream for `instr`: mnemonic, a space, comma-separated args."""
    parts: List[Token] = [TInstr(instr.mnemonic), TSep(" ")]
    for i, arg in enumerate(instr.args):
        if i:
            parts.append(TSep(","))
        parts.extend(arg_tokens(arg))
    return parts


def format_instr(instr: Optional[DecodedInstr]) -> str:
    """Render `instr` as assembly text; an undefined encoding renders as ""."""
    if instr is None:
        return ""
    return asm_str(tokens(instr))


to_string = format_instr

