from __future__ import annotations

from dataclasses import dataclass

from ..coding import Decoder
from ..config import DasmConfig
from .bind import INDEX_REGISTERS, Operand


@dataclass(frozen=True)
class StreamCtx:
    """
    Decoding context for one opcode page.

    `level` counts the prefix bytes consumed by outer pages and seeds the
    instruction length. `ireg` is HL on the base page and IX/IY after an
    index prefix. `window` is positioned on the byte this page dispatches on;
    operand bytes are read at fixed offsets from it. `config` carries the
    logging switches down into nested pages.
    """

    window: Decoder
    level: int = 0
    ireg: Operand = Operand.HL
    config: DasmConfig = DasmConfig()

    @property
    def indexed(self) -> bool:
        return self.ireg in INDEX_REGISTERS

    def byte(self, offset: int) -> int:
        return self.window.peek(offset)

    def opcode(self) -> int:
        return self.byte(0)

    def enter(self, ireg: Operand | None = None) -> "StreamCtx":
        """Context for the page selected by the prefix byte at offset 0."""
        return StreamCtx(
            window=self.window.window(1),
            level=self.level + 1,
            ireg=self.ireg if ireg is None else ireg,
            config=self.config,
        )
