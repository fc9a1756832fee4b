"""Interrupt control unit."""

from __future__ import annotations

import threading
from typing import Callable

IRQ_COUNT = 16
INTERRUPT_COUNT = 3

_InterruptHandler = Callable[[int], None]
_VectoredHandler = Callable[[int, bool], None]


class Icu:
    """Latches interrupt requests and dispatches them to enabled interrupt lines."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._request = 0
        self._enabled = [0] * INTERRUPT_COUNT
        self._vectored_enabled = 0
        self._handlers: tuple[_InterruptHandler, _VectoredHandler] | None = None
        self.vector_low = [0] * IRQ_COUNT
        self.vector_high = [0] * IRQ_COUNT
        self.vector_context_switch = [0] * IRQ_COUNT

    @property
    def request(self) -> int:
        with self._lock:
            return self._request

    def acknowledge(self, irq_bits: int) -> None:
        with self._lock:
            self._request &= ~irq_bits & 0xFFFF

    def _require_handlers(self) -> tuple[_InterruptHandler, _VectoredHandler]:
        if self._handlers is None:
            raise RuntimeError("interrupt handler is not set")
        return self._handlers

    def trigger(self, irq_bits: int) -> None:
        with self._lock:
            bits = irq_bits & 0xFFFF
            self._request |= bits
            for irq in range(IRQ_COUNT):
                if not (bits >> irq) & 1:
                    continue
                for interrupt, enabled in enumerate(self._enabled):
                    if (enabled >> irq) & 1:
                        on_interrupt, _ = self._require_handlers()
                        on_interrupt(interrupt)
                if (self._vectored_enabled >> irq) & 1:
                    _, on_vectored = self._require_handlers()
                    on_vectored(self.get_vector(irq), self.vector_context_switch[irq] != 0)

    def trigger_single(self, irq: int) -> None:
        self.trigger(1 << irq)

    def set_enable(self, interrupt_index: int, irq_bits: int) -> None:
        with self._lock:
            self._enabled[interrupt_index] = irq_bits & 0xFFFF

    def get_enable(self, interrupt_index: int) -> int:
        with self._lock:
            return self._enabled[interrupt_index]

    def set_enable_vectored(self, irq_bits: int) -> None:
        with self._lock:
            self._vectored_enabled = irq_bits & 0xFFFF

    @property
    def enable_vectored(self) -> int:
        with self._lock:
            return self._vectored_enabled

    def get_vector(self, irq: int) -> int:
        return (self.vector_low[irq] & 0xFFFF) | ((self.vector_high[irq] & 0xFFFF) << 16)

    def set_interrupt_handler(
        self,
        interrupt: _InterruptHandler,
        vectored_interrupt: _VectoredHandler,
    ) -> None:
        self._handlers = (interrupt, vectored_interrupt)