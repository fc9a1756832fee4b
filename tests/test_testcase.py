import io

import pytest

from teakdsp.testcase import (
    STATE_SIZE,
    TEST_CASE_SIZE,
    TEST_SPACE_SIZE,
    State,
    TestCase,
    read_test_cases,
    write_test_cases,
)


def _sample_state(seed: int) -> State:
    return State(
        a=[0xFF_FFFF_FFFF, seed],
        b=[seed * 3, 0x12_3456_789A],
        p=[0xFFFFFFFF, seed],
        r=[(seed + i) & 0xFFFF for i in range(8)],
        x=[1, 2],
        y=[3, 4],
        stepi0=5,
        stepj0=6,
        mixp=7,
        sv=8,
        repc=9,
        lc=10,
        cfgi=11,
        cfgj=12,
        stt0=13,
        stt1=14,
        stt2=15,
        mod0=16,
        mod1=17,
        mod2=18,
        ar=[19, 20],
        arp=[21, 22, 23, 24],
        test_space_x=[(i * 7 + seed) & 0xFFFF for i in range(TEST_SPACE_SIZE)],
        test_space_y=[(i * 13 + seed) & 0xFFFF for i in range(TEST_SPACE_SIZE)],
    )


def test_record_size_matches_format():
    assert TEST_CASE_SIZE == 4312
    assert len(TestCase().pack()) == TEST_CASE_SIZE
    assert len(State().pack()) == STATE_SIZE


def test_state_round_trip():
    state = _sample_state(42)
    assert State.unpack(state.pack()) == state


def test_test_case_round_trip():
    case = TestCase(before=_sample_state(1), after=_sample_state(2), opcode=0x86A0, expand=0x1800)
    assert TestCase.unpack(case.pack()) == case


def test_state_layout_is_little_endian_from_start():
    data = State(a=[1, 0]).pack()
    assert data[:8] == (1).to_bytes(8, "little")


def test_test_space_y_is_last_in_state():
    state = State()
    state.test_space_y[-1] = 0xBEEF
    assert state.pack()[-2:] == b"\xef\xbe"


def test_opcode_follows_both_states():
    data = TestCase(opcode=0x4180, expand=0x1800).pack()
    offset = 2 * STATE_SIZE
    assert data[offset:offset + 2] == (0x4180).to_bytes(2, "little")
    assert data[offset + 2:offset + 4] == (0x1800).to_bytes(2, "little")
    assert data[offset + 4:] == bytes(TEST_CASE_SIZE - offset - 4)


def test_unpack_wrong_size():
    with pytest.raises(ValueError):
        State.unpack(b"\x00" * (STATE_SIZE - 1))
    with pytest.raises(ValueError):
        TestCase.unpack(b"\x00" * (TEST_CASE_SIZE + 1))


def test_pack_wrong_list_length():
    with pytest.raises(ValueError):
        State(r=[0] * 7).pack()


def test_pack_value_out_of_range():
    with pytest.raises(ValueError):
        State(sv=0x10000).pack()
    with pytest.raises(ValueError):
        TestCase(opcode=-1).pack()


def test_stream_round_trip():
    cases = [
        TestCase(before=_sample_state(i), after=_sample_state(i + 10), opcode=i, expand=i * 2)
        for i in range(3)
    ]
    buffer = io.BytesIO()
    assert write_test_cases(buffer, cases) == 3
    assert len(buffer.getvalue()) == 3 * TEST_CASE_SIZE
    buffer.seek(0)
    assert list(read_test_cases(buffer)) == cases


def test_trailing_partial_record_ignored():
    case = TestCase(opcode=7)
    buffer = io.BytesIO(case.pack() + b"\x01\x02\x03")
    assert list(read_test_cases(buffer)) == [case]


def test_empty_stream_yields_nothing():
    assert list(read_test_cases(io.BytesIO())) == []