import pytest

from teakdsp.apbp import Apbp, DataChannel


def test_data_channel_send_recv():
    ch = DataChannel()
    ch.send(0x1234)
    assert ch.is_ready() is True
    assert ch.peek() == 0x1234
    assert ch.is_ready() is True
    assert ch.recv() == 0x1234
    assert ch.is_ready() is False


def test_data_channel_reset():
    ch = DataChannel()
    ch.send(0x55)
    ch.reset()
    assert ch.is_ready() is False
    assert ch.peek() == 0


def test_send_calls_handler():
    apbp = Apbp()
    calls = []
    apbp.set_data_handler(1, lambda: calls.append(apbp.peek_data(1)))
    apbp.send_data(1, 0xABCD)
    assert calls == [0xABCD]
    assert apbp.is_data_ready(1)


def test_disabled_interrupt_skips_handler():
    apbp = Apbp()
    calls = []
    apbp.set_data_handler(0, lambda: calls.append(True))
    apbp.set_disable_interrupt(0, 1)
    apbp.send_data(0, 0x42)
    assert calls == []
    assert apbp.get_disable_interrupt(0) == 1
    assert apbp.recv_data(0) == 0x42


def test_channels_are_independent():
    apbp = Apbp()
    apbp.send_data(2, 0x77)
    assert apbp.is_data_ready(2)
    assert not apbp.is_data_ready(0)
    assert not apbp.is_data_ready(1)


def test_invalid_channel_raises():
    apbp = Apbp()
    with pytest.raises(IndexError):
        apbp.send_data(3, 1)


def test_set_semaphore_signals_and_calls_handler():
    apbp = Apbp()
    calls = []
    apbp.set_semaphore_handler(lambda: calls.append(True))
    apbp.set_semaphore(0x0003)
    assert apbp.semaphore == 0x0003
    assert apbp.is_semaphore_signaled()
    assert calls == [True]


def test_masked_semaphore_does_not_signal():
    apbp = Apbp()
    calls = []
    apbp.set_semaphore_handler(lambda: calls.append(True))
    apbp.mask_semaphore(0x0001)
    apbp.set_semaphore(0x0001)
    assert apbp.semaphore_mask == 0x0001
    assert apbp.semaphore == 0x0001
    assert not apbp.is_semaphore_signaled()
    assert calls == []


def test_clear_semaphore_recomputes_signal():
    apbp = Apbp()
    apbp.set_semaphore(0x0003)
    apbp.clear_semaphore(0x0002)
    assert apbp.semaphore == 0x0001
    assert apbp.is_semaphore_signaled()
    apbp.clear_semaphore(0x0001)
    assert apbp.semaphore == 0
    assert not apbp.is_semaphore_signaled()


def test_signal_sticks_until_clear():
    apbp = Apbp()
    apbp.set_semaphore(0x0004)
    apbp.mask_semaphore(0x0004)
    assert apbp.is_semaphore_signaled()
    apbp.clear_semaphore(0)
    assert not apbp.is_semaphore_signaled()


def test_reset_clears_everything():
    apbp = Apbp()
    apbp.send_data(0, 9)
    apbp.set_semaphore(0x00F0)
    apbp.mask_semaphore(0x000F)
    apbp.reset()
    assert not apbp.is_data_ready(0)
    assert apbp.peek_data(0) == 0
    assert apbp.semaphore == 0
    assert apbp.semaphore_mask == 0
    assert not apbp.is_semaphore_signaled()