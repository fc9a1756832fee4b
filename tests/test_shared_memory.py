import pytest

from teakdsp.shared_memory import SharedMemory


def test_size():
    assert len(SharedMemory().raw) == 0x80000


def test_starts_zeroed():
    mem = SharedMemory()
    assert mem.read_word(0) == 0
    assert mem.read_word(0x3FFFF) == 0


@pytest.mark.parametrize("address,value", [(0, 0x1234), (1, 0xFFFF), (0x3FFFF, 0x8001)])
def test_round_trip(address, value):
    mem = SharedMemory()
    mem.write_word(address, value)
    assert mem.read_word(address) == value


def test_little_endian_layout():
    mem = SharedMemory()
    mem.write_word(1, 0x1234)
    assert bytes(mem.raw[2:4]) == b"\x34\x12"
    assert mem.raw[0] == 0 and mem.raw[1] == 0


def test_read_from_raw_bytes():
    mem = SharedMemory()
    mem.raw[10] = 0xCD
    mem.raw[11] = 0xAB
    assert mem.read_word(5) == 0xABCD


def test_neighbours_untouched():
    mem = SharedMemory()
    mem.write_word(100, 0xBEEF)
    assert mem.read_word(99) == 0
    assert mem.read_word(101) == 0


def test_out_of_range_raises():
    mem = SharedMemory()
    with pytest.raises(IndexError):
        mem.read_word(0x40000)
    with pytest.raises(IndexError):
        mem.write_word(-1, 1)