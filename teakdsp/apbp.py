"""APBP: data channels and semaphore shared between the DSP and the host CPU."""

from __future__ import annotations

import threading
from typing import Callable, Optional

CHANNEL_COUNT = 3


class DataChannel:
    """A one-word mailbox with a ready flag and an optional receive handler."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ready = False
        self._data = 0
        self.disable_interrupt = 0
        self.handler: Optional[Callable[[], None]] = None

    def reset(self) -> None:
        with self._lock:
            self._ready = False
            self._data = 0

    def send(self, data: int) -> None:
        with self._lock:
            self._ready = True
            self._data = data & 0xFFFF
            if self.disable_interrupt:
                return
        if self.handler is not None:
            self.handler()

    def recv(self) -> int:
        with self._lock:
            self._ready = False
            return self._data

    def peek(self) -> int:
        with self._lock:
            return self._data

    def is_ready(self) -> bool:
        with self._lock:
            return self._ready


class Apbp:
    """Host/DSP communication port with three data channels and a semaphore."""

    def __init__(self) -> None:
        self._channels = [DataChannel() for _ in range(CHANNEL_COUNT)]
        self._semaphore = 0
        self._semaphore_mask = 0
        self._semaphore_master_signal = False
        self._semaphore_lock = threading.RLock()
        self._semaphore_handler: Optional[Callable[[], None]] = None

    def reset(self) -> None:
        for channel in self._channels:
            channel.reset()
        with self._semaphore_lock:
            self._semaphore = 0
            self._semaphore_mask = 0
            self._semaphore_master_signal = False

    def send_data(self, channel: int, data: int) -> None:
        self._channels[channel].send(data)

    def recv_data(self, channel: int) -> int:
        return self._channels[channel].recv()

    def peek_data(self, channel: int) -> int:
        return self._channels[channel].peek()

    def is_data_ready(self, channel: int) -> bool:
        return self._channels[channel].is_ready()

    def get_disable_interrupt(self, channel: int) -> int:
        return self._channels[channel].disable_interrupt

    def set_disable_interrupt(self, channel: int, value: int) -> None:
        self._channels[channel].disable_interrupt = value

    def set_data_handler(self, channel: int, handler: Optional[Callable[[], None]]) -> None:
        self._channels[channel].handler = handler

    def set_semaphore(self, bits: int) -> None:
        with self._semaphore_lock:
            self._semaphore |= bits & 0xFFFF
            new_signal = (self._semaphore & ~self._semaphore_mask & 0xFFFF) != 0
            if new_signal and self._semaphore_handler is not None:
                self._semaphore_handler()
            self._semaphore_master_signal = self._semaphore_master_signal or new_signal

    def clear_semaphore(self, bits: int) -> None:
        with self._semaphore_lock:
            self._semaphore &= ~bits & 0xFFFF
            self._semaphore_master_signal = (
                self._semaphore & ~self._semaphore_mask & 0xFFFF
            ) != 0

    @property
    def semaphore(self) -> int:
        with self._semaphore_lock:
            return self._semaphore

    def mask_semaphore(self, bits: int) -> None:
        with self._semaphore_lock:
            self._semaphore_mask = bits & 0xFFFF

    @property
    def semaphore_mask(self) -> int:
        with self._semaphore_lock:
            return self._semaphore_mask

    def set_semaphore_handler(self, handler: Optional[Callable[[], None]]) -> None:
        with self._semaphore_lock:
            self._semaphore_handler = handler

    def is_semaphore_signaled(self) -> bool:
        with self._semaphore_lock:
            return self._semaphore_master_signal