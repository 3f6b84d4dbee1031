"""Z80 instruction decoder and formatter."""

from .coding import BufferTooShort, Decoder, FetchDecoder
from .config import DasmConfig, load_dasm_config
from .decoding import (
    AddressingMode,
    DecodedInstr,
    Operand,
    Operation,
    decode,
    format_instr,
    release,
    to_string,
)

__all__ = [
    "AddressingMode",
    "BufferTooShort",
    "DasmConfig",
    "DecodedInstr",
    "Decoder",
    "FetchDecoder",
    "Operand",
    "Operation",
    "decode",
    "format_instr",
    "load_dasm_config",
    "release",
    "to_string",
]
