"""AHB master: burst transfers between DSP channels and external memory."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable

log = logging.getLogger(__name__)

_U32_MASK = 0xFFFFFFFF
CHANNEL_COUNT = 3


class UnitSize(IntEnum):
    U8 = 0
    U16 = 1
    U32 = 2


class BurstSize(IntEnum):
    X1 = 0
    X4 = 1
    X8 = 2


class Direction(IntEnum):
    READ = 0
    WRITE = 1


_BURST_LENGTHS = {BurstSize.X1: 1, BurstSize.X4: 4, BurstSize.X8: 8}


@dataclass
class Channel:
    """Configuration and pending burst data of one AHBM channel."""

    unit_size: int = UnitSize.U8
    burst_size: int = BurstSize.X1
    direction: int = Direction.READ
    dma_channel: int = 0
    burst_queue: deque = field(default_factory=deque)
    write_burst_start: int = 0

    def burst_length(self) -> int:
        """Number of units transferred per burst."""
        try:
            return _BURST_LENGTHS[self.burst_size]
        except KeyError:
            log.warning("Unknown burst size %04X", self.burst_size)
            return 1


@dataclass(frozen=True)
class _ExternalMemory:
    read8: Callable[[int], int]
    write8: Callable[[int, int], None]
    read16: Callable[[int], int]
    write16: Callable[[int, int], None]
    read32: Callable[[int], int]
    write32: Callable[[int, int], None]


class Ahbm:
    """Bus master that moves data between DSP channels and external memory."""

    def __init__(self) -> None:
        self._busy_flag = 0
        self.channels = [Channel() for _ in range(CHANNEL_COUNT)]
        self._memory: _ExternalMemory | None = None

    def reset(self) -> None:
        self._busy_flag = 0
        self.channels = [Channel() for _ in range(CHANNEL_COUNT)]

    @property
    def busy_flag(self) -> int:
        return self._busy_flag

    def set_external_memory_callback(
        self, read8, write8, read16, write16, read32, write32
    ) -> None:
        self._memory = _ExternalMemory(read8, write8, read16, write16, read32, write32)

    @property
    def _bus(self) -> _ExternalMemory:
        if self._memory is None:
            raise RuntimeError("external memory callbacks are not set")
        return self._memory

    def read16(self, channel: int, address: int) -> int:
        value32 = self.read32(channel, address)
        if address & 1 == 0:
            return value32 & 0xFFFF
        return (value32 >> 16) & 0xFFFF

    def read32(self, channel: int, address: int) -> int:
        ch = self.channels[channel]
        if ch.direction != Direction.READ:
            log.warning("Wrong direction!")

        if not ch.burst_queue:
            current = address & _U32_MASK
            for _ in range(ch.burst_length()):
                value = 0
                step = 0
                if ch.unit_size == UnitSize.U8:
                    value = self._bus.read8(current) & 0xFF
                    if current & 1:
                        value <<= 8  # hardware-tested behaviour
                    step = 1
                elif ch.unit_size == UnitSize.U16:
                    value = self._bus.read16(current & 0xFFFFFFFE) & 0xFFFF
                    step = 2
                elif ch.unit_size == UnitSize.U32:
                    value = self._bus.read32(current & 0xFFFFFFFC) & _U32_MASK
                    step = 4
                else:
                    log.warning("Unknown unit size %04X", ch.unit_size)
                ch.burst_queue.append(value)
                current = (current + step) & _U32_MASK

        return ch.burst_queue.popleft()

    def write16(self, channel: int, address: int, value: int) -> None:
        self._write_internal(channel, address, value & 0xFFFF)

    def write32(self, channel: int, address: int, value: int) -> None:
        value &= _U32_MASK
        if address & 1:
            value >>= 16  # hardware-tested behaviour
        self._write_internal(channel, address, value)

    def _write_internal(self, channel: int, address: int, value: int) -> None:
        ch = self.channels[channel]
        if ch.direction != Direction.WRITE:
            log.warning("Wrong direction!")

        if not ch.burst_queue:
            ch.write_burst_start = address & _U32_MASK

        ch.burst_queue.append(value)
        if len(ch.burst_queue) < ch.burst_length():
            return

        current = ch.write_burst_start
        while ch.burst_queue:
            value32 = ch.burst_queue.popleft()
            if ch.unit_size == UnitSize.U8:
                byte = (value32 >> 8) if current & 1 else value32
                self._bus.write8(current, byte & 0xFF)
                current += 1
            elif ch.unit_size == UnitSize.U16:
                c0 = current & 0xFFFFFFFE
                if c0 >= current:
                    self._bus.write16(c0, value32 & 0xFFFF)
                else:
                    self._bus.write8(c0 + 1, (value32 >> 8) & 0xFF)
                current += 2
            elif ch.unit_size == UnitSize.U32:
                c0 = current & 0xFFFFFFFC
                c1, c2, c3 = c0 + 1, c0 + 2, c0 + 3
                if c0 >= current and c1 >= current and c2 >= current:
                    self._bus.write32(c0, value32 & _U32_MASK)
                elif c2 >= current:
                    if c1 >= current:
                        self._bus.write8(c1, (value32 >> 8) & 0xFF)
                    self._bus.write16(c2, (value32 >> 16) & 0xFFFF)
                else:
                    self._bus.write8(c3, (value32 >> 24) & 0xFF)
                current += 4
            else:
                log.warning("Unknown unit size %04X", ch.unit_size)
            current &= _U32_MASK

    def get_channel_for_dma(self, dma_channel: int) -> int:
        """Return the first AHBM channel bound to the given DMA channel."""
        for index, ch in enumerate(self.channels):
            if (ch.dma_channel >> dma_channel) & 1:
                return index
        log.warning("Could not find AHBM channel for DMA channel %04X", dma_channel)
        return 0