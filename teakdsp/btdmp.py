"""BTDMP: audio output port feeding stereo samples from a transmit FIFO."""

from __future__ import annotations

import logging
import math
from collections import deque
from typing import Callable, Optional, Tuple

log = logging.getLogger(__name__)

INFINITY = math.inf
QUEUE_CAPACITY = 16
DEFAULT_PERIOD = 4096

Sample = Tuple[int, int]


def _to_s16(value: int) -> int:
    return value - 0x10000 if value & 0x8000 else value


class Btdmp:
    """Transmit-side audio port clocked by ticks."""

    def __init__(self) -> None:
        self._audio_callback: Optional[Callable[[Sample], None]] = None
        self._interrupt_handler: Optional[Callable[[], None]] = None
        self.reset()

    def reset(self) -> None:
        self.transmit_clock_config = 0
        # The relation between clock config and period is unknown; every
        # known program uses this period.
        self.transmit_period = DEFAULT_PERIOD
        self.transmit_enable = 0
        self._transmit_timer = 0
        self._transmit_empty = True
        self._transmit_full = False
        self._queue: deque[int] = deque()

    @property
    def transmit_empty(self) -> bool:
        return self._transmit_empty

    @property
    def transmit_full(self) -> bool:
        return self._transmit_full

    def send(self, value: int) -> None:
        if len(self._queue) == QUEUE_CAPACITY:
            log.warning("BTDMP: transmit buffer overrun")
            return
        self._queue.append(value & 0xFFFF)
        self._transmit_empty = False
        self._transmit_full = len(self._queue) == QUEUE_CAPACITY

    def flush(self) -> None:
        self._queue.clear()
        self._transmit_empty = True
        self._transmit_full = False

    def _raise_interrupt(self) -> None:
        if self._interrupt_handler is None:
            raise RuntimeError("BTDMP interrupt handler is not set")
        self._interrupt_handler()

    def tick(self) -> None:
        if not self.transmit_enable:
            return
        self._transmit_timer = (self._transmit_timer + 1) & 0xFFFF
        if self._transmit_timer < self.transmit_period:
            return
        self._transmit_timer = 0
        sample = []
        for _ in range(2):
            if not self._queue:
                log.warning("BTDMP: transmit buffer underrun")
                sample.append(0)
                continue
            sample.append(_to_s16(self._queue.popleft()))
            self._transmit_empty = not self._queue
            self._transmit_full = False
            if self._transmit_empty:
                self._raise_interrupt()
        if self._audio_callback is not None:
            self._audio_callback((sample[0], sample[1]))

    def get_max_skip(self):
        """Ticks that can be skipped before the transmit that empties the queue."""
        if not self.transmit_enable or not self._queue:
            return INFINITY
        ticks = 0
        if self._transmit_timer < self.transmit_period:
            ticks += self.transmit_period - self._transmit_timer - 1
        ticks += ((len(self._queue) + 1) // 2 - 1) * self.transmit_period
        return ticks

    def skip(self, ticks: int) -> None:
        if not self.transmit_enable:
            return
        if self._transmit_timer >= self.transmit_period:
            self._transmit_timer = 0
        cycles, self._transmit_timer = divmod(
            self._transmit_timer + ticks, self.transmit_period
        )
        for _ in range(cycles):
            sample = []
            for _ in range(2):
                if not self._queue:
                    sample.append(0)
                    continue
                sample.append(_to_s16(self._queue.popleft()))
                if not self._queue:
                    raise RuntimeError("BTDMP: transmit queue emptied during skip")
                self._transmit_full = False
            if self._audio_callback is not None:
                self._audio_callback((sample[0], sample[1]))

    def set_audio_callback(self, callback: Optional[Callable[[Sample], None]]) -> None:
        self._audio_callback = callback

    def set_interrupt_handler(self, handler: Optional[Callable[[], None]]) -> None:
        self._interrupt_handler = handler