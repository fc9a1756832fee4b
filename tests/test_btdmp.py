import pytest

from teakdsp.btdmp import INFINITY, Btdmp


@pytest.fixture
def port():
    btdmp = Btdmp()
    samples = []
    interrupts = []
    btdmp.set_audio_callback(samples.append)
    btdmp.set_interrupt_handler(lambda: interrupts.append(True))
    return btdmp, samples, interrupts


def test_defaults():
    btdmp = Btdmp()
    assert btdmp.transmit_period == 4096
    assert btdmp.transmit_empty is True
    assert btdmp.transmit_full is False


def test_send_until_full(port):
    btdmp, _, _ = port
    for i in range(15):
        btdmp.send(i)
    assert btdmp.transmit_full is False
    btdmp.send(15)
    assert btdmp.transmit_full is True
    assert btdmp.transmit_empty is False


def test_overrun_drops_value(port):
    btdmp, samples, _ = port
    for i in range(16):
        btdmp.send(i + 1)
    btdmp.send(999)
    btdmp.transmit_period = 1
    btdmp.transmit_enable = 1
    for _ in range(8):
        btdmp.tick()
    flat = [v for s in samples for v in s]
    assert flat == list(range(1, 17))
    assert 999 not in flat


def test_tick_emits_sample_and_interrupt(port):
    btdmp, samples, interrupts = port
    btdmp.transmit_period = 2
    btdmp.transmit_enable = 1
    btdmp.send(1)
    btdmp.send(0xFFFF)
    btdmp.tick()
    assert samples == []
    btdmp.tick()
    assert samples == [(1, -1)]
    assert interrupts == [True]
    assert btdmp.transmit_empty is True


def test_underrun_emits_zeros(port):
    btdmp, samples, interrupts = port
    btdmp.transmit_period = 1
    btdmp.transmit_enable = 1
    btdmp.tick()
    assert samples == [(0, 0)]
    assert interrupts == []


def test_disabled_tick_does_nothing(port):
    btdmp, samples, _ = port
    btdmp.transmit_period = 1
    btdmp.send(5)
    btdmp.send(6)
    btdmp.tick()
    assert samples == []
    assert btdmp.transmit_empty is False


def test_max_skip_infinite_when_idle(port):
    btdmp, _, _ = port
    assert btdmp.get_max_skip() == INFINITY
    btdmp.transmit_enable = 1
    assert btdmp.get_max_skip() == INFINITY


def test_max_skip_stops_before_emptying(port):
    btdmp, samples, interrupts = port
    btdmp.transmit_period = 4
    btdmp.transmit_enable = 1
    for v in (10, 20, 30, 40):
        btdmp.send(v)
    btdmp.skip(btdmp.get_max_skip())
    assert interrupts == []
    assert samples == [(10, 20)]
    btdmp.tick()
    assert interrupts == [True]
    assert samples == [(10, 20), (30, 40)]


def test_skip_emits_samples(port):
    btdmp, samples, _ = port
    btdmp.transmit_period = 3
    btdmp.transmit_enable = 1
    for v in (1, 2, 3, 4, 5, 6):
        btdmp.send(v)
    btdmp.skip(btdmp.transmit_period * 2)
    assert samples == [(1, 2), (3, 4)]


def test_skip_disabled_is_noop(port):
    btdmp, samples, _ = port
    btdmp.send(1)
    btdmp.skip(100000)
    assert samples == []
    assert btdmp.transmit_empty is False


def test_skip_emptying_queue_raises(port):
    btdmp, _, _ = port
    btdmp.transmit_period = 1
    btdmp.transmit_enable = 1
    btdmp.send(1)
    btdmp.send(2)
    with pytest.raises(RuntimeError):
        btdmp.skip(1)


def test_flush_empties_queue(port):
    btdmp, samples, _ = port
    btdmp.send(7)
    btdmp.send(8)
    btdmp.flush()
    assert btdmp.transmit_empty is True
    assert btdmp.transmit_full is False
    btdmp.transmit_period = 1
    btdmp.transmit_enable = 1
    btdmp.tick()
    assert samples == [(0, 0)]


def test_reset_restores_defaults(port):
    btdmp, _, _ = port
    btdmp.transmit_period = 10
    btdmp.transmit_enable = 1
    btdmp.send(3)
    btdmp.reset()
    assert btdmp.transmit_period == 4096
    assert btdmp.transmit_enable == 0
    assert btdmp.transmit_empty is True


def test_missing_interrupt_handler_raises():
    btdmp = Btdmp()
    btdmp.transmit_period = 1
    btdmp.transmit_enable = 1
    btdmp.send(1)
    btdmp.send(2)
    with pytest.raises(RuntimeError):
        btdmp.tick()