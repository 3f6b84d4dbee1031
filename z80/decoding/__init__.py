"""
Typed Z80 instruction decoding.

`decode_map` holds the page decoders, `bind` the decoded value types, and
`render` turns a decoded instruction into assembly text or a token stream.
"""

from .bind import (  # noqa: F401
    AddrIndirect,
    Addr16,
    AddressingMode,
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
from .decode_map import decode, decode_page, release  # noqa: F401
from .reader import StreamCtx  # noqa: F401
from .render import format_instr, to_string, tokens  # noqa: F401
from . import decode_map  # noqa: F401

__all__ = [
    "AddrIndirect",
    "Addr16",
    "AddressingMode",
    "Arg",
    "Cond",
    "DecodedInstr",
    "Imm8",
    "Indexed",
    "Literal",
    "Operand",
    "Operation",
    "Reg",
    "RegIndirect",
    "Rel8",
    "RstTarget",
    "StreamCtx",
    "decode",
    "decode_map",
    "decode_page",
    "format_instr",
    "release",
    "to_string",
    "tokens",
]
