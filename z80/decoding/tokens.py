"""Typed pieces of rendered assembly text.

Numeric tokens keep the integer and decide their own notation, so a caller
walking the stream can tell a displacement from an immediate or an address.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


class Token:
    __slots__ = ()


def asm_str(parts: Iterable[Token]) -> str:
    return "".join(map(str, parts))


@dataclass(frozen=True, slots=True)
class TInstr(Token):
    mnemonic: str

    def __str__(self) -> str:
        return self.mnemonic


@dataclass(frozen=True, slots=True)
class TSep(Token):
    sep: str

    def __str__(self) -> str:
        return self.sep


@dataclass(frozen=True, slots=True)
class TText(Token):
    """Condition codes."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class TReg(Token):
    reg: str

    def __str__(self) -> str:
        return self.reg


@dataclass(frozen=True, slots=True)
class TInt(Token):
    """Small decimal operand: bit numbers and interrupt modes."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True, slots=True)
class TSigned(Token):
    """Signed offset, always with its sign: ``+5``, ``-128``."""

    value: int

    def __str__(self) -> str:
        return f"{self.value:+d}"


@dataclass(frozen=True, slots=True)
class THex(Token):
    """8-bit data and restart vectors."""

    value: int

    def __str__(self) -> str:
        return f"0x{self.value:X}"


@dataclass(frozen=True, slots=True)
class TAddr(Token):
    value: int

    def __str__(self) -> str:
        return f"0x{self.value:X}"


@dataclass(frozen=True, slots=True)
class TBegMem(Token):
    def __str__(self) -> str:
        return "("


@dataclass(frozen=True, slots=True)
class TEndMem(Token):
    def __str__(self) -> str:
        return ")"
