"""Byte windows shared by the page decoders.

A page decoder only ever asks for "the byte `offset` places after the one I
dispatch on", so both sources expose ``peek`` plus ``window`` to step past a
prefix byte.
"""

from typing import Callable, Union

# A Z80 has a flat 16-bit address space.
ADDRESS_SPACE_SIZE = 0x10000


class BufferTooShort(Exception):
    """Raised when attempting to read past the end of the buffer."""


class Decoder:
    def __init__(self, buf: Union[bytes, bytearray, memoryview], pos: int = 0) -> None:
        self.buf, self.pos = buf, pos

    def peek(self, offset: int) -> int:
        if offset < 0 or len(self.buf) - self.pos <= offset:
            raise BufferTooShort
        return self.buf[self.pos + offset]

    def window(self, offset: int) -> "Decoder":
        """Return a decoder whose position is `offset` bytes further along."""
        return Decoder(self.buf, self.pos + offset)


class FetchDecoder(Decoder):
    """Decoder that fetches bytes using a callable instead of a buffer."""

    def __init__(
        self,
        read_mem: Callable[[int], int],
        pos: int = 0,
        address_space_size: int = ADDRESS_SPACE_SIZE,
    ) -> None:
        self.read_mem = read_mem
        self.pos = pos
        self.address_space_size = address_space_size

    def peek(self, offset: int) -> int:
        if offset < 0 or self.pos + offset >= self.address_space_size:
            raise BufferTooShort
        return self.read_mem(self.pos + offset) & 0xFF

    def window(self, offset: int) -> "FetchDecoder":
        return FetchDecoder(self.read_mem, self.pos + offset, self.address_space_size)
