"""DSP shared memory addressed in 16-bit little-endian words."""

from __future__ import annotations

MEMORY_SIZE = 0x80000


class SharedMemory:
    """Byte-backed memory read and written as 16-bit words."""

    def __init__(self) -> None:
        self.raw = bytearray(MEMORY_SIZE)

    def _byte_address(self, word_address: int) -> int:
        byte_address = word_address * 2
        if not 0 <= byte_address <= len(self.raw) - 2:
            raise IndexError(f"word address {word_address:#x} out of range")
        return byte_address

    def read_word(self, word_address: int) -> int:
        start = self._byte_address(word_address)
        return int.from_bytes(self.raw[start:start + 2], "little")

    def write_word(self, word_address: int, value: int) -> None:
        start = self._byte_address(word_address)
        self.raw[start:start + 2] = (value & 0xFFFF).to_bytes(2, "little")