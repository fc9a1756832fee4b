"""Binary records of processor state before and after one instruction."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field, fields
from typing import BinaryIO, Iterable, Iterator, List

TEST_SPACE_X = 0x6400
TEST_SPACE_Y = 0xCC00
TEST_SPACE_SIZE = 0x0200

# (field name, struct code, element count; 1 means a scalar)
_STATE_LAYOUT = (
    ("a", "Q", 2),
    ("b", "Q", 2),
    ("p", "I", 2),
    ("r", "H", 8),
    ("x", "H", 2),
    ("y", "H", 2),
    ("stepi0", "H", 1),
    ("stepj0", "H", 1),
    ("mixp", "H", 1),
    ("sv", "H", 1),
    ("repc", "H", 1),
    ("lc", "H", 1),
    ("cfgi", "H", 1),
    ("cfgj", "H", 1),
    ("stt0", "H", 1),
    ("stt1", "H", 1),
    ("stt2", "H", 1),
    ("mod0", "H", 1),
    ("mod1", "H", 1),
    ("mod2", "H", 1),
    ("ar", "H", 2),
    ("arp", "H", 4),
    ("test_space_x", "H", TEST_SPACE_SIZE),
    ("test_space_y", "H", TEST_SPACE_SIZE),
)

_STATE_STRUCT = struct.Struct("<" + "".join(f"{n}{c}" for _, c, n in _STATE_LAYOUT))
STATE_SIZE = _STATE_STRUCT.size
_TAIL_STRUCT = struct.Struct("<HH4x")
TEST_CASE_SIZE = 2 * STATE_SIZE + _TAIL_STRUCT.size


def _zeros(count: int):
    return field(default_factory=lambda: [0] * count)


@dataclass
class State:
    """Register file and test memory windows of the processor."""

    a: List[int] = _zeros(2)
    b: List[int] = _zeros(2)
    p: List[int] = _zeros(2)
    r: List[int] = _zeros(8)
    x: List[int] = _zeros(2)
    y: List[int] = _zeros(2)
    stepi0: int = 0
    stepj0: int = 0
    mixp: int = 0
    sv: int = 0
    repc: int = 0
    lc: int = 0
    cfgi: int = 0
    cfgj: int = 0
    stt0: int = 0
    stt1: int = 0
    stt2: int = 0
    mod0: int = 0
    mod1: int = 0
    mod2: int = 0
    ar: List[int] = _zeros(2)
    arp: List[int] = _zeros(4)
    test_space_x: List[int] = _zeros(TEST_SPACE_SIZE)
    test_space_y: List[int] = _zeros(TEST_SPACE_SIZE)

    def pack(self) -> bytes:
        values: List[int] = []
        for name, _, count in _STATE_LAYOUT:
            value = getattr(self, name)
            if count == 1:
                values.append(value)
                continue
            if len(value) != count:
                raise ValueError(f"{name} needs {count} entries, got {len(value)}")
            values.extend(value)
        try:
            return _STATE_STRUCT.pack(*values)
        except struct.error as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def unpack(cls, data: bytes) -> "State":
        if len(data) != STATE_SIZE:
            raise ValueError(f"state record needs {STATE_SIZE} bytes, got {len(data)}")
        values = iter(_STATE_STRUCT.unpack(data))
        kwargs = {}
        for name, _, count in _STATE_LAYOUT:
            if count == 1:
                kwargs[name] = next(values)
            else:
                kwargs[name] = [next(values) for _ in range(count)]
        return cls(**kwargs)


@dataclass
class TestCase:
    """One instruction with the state before and after running it."""

    __test__ = False

    before: State = field(default_factory=State)
    after: State = field(default_factory=State)
    opcode: int = 0
    expand: int = 0

    def pack(self) -> bytes:
        try:
            tail = _TAIL_STRUCT.pack(self.opcode, self.expand)
        except struct.error as exc:
            raise ValueError(str(exc)) from exc
        return self.before.pack() + self.after.pack() + tail

    @classmethod
    def unpack(cls, data: bytes) -> "TestCase":
        if len(data) != TEST_CASE_SIZE:
            raise ValueError(
                f"test case record needs {TEST_CASE_SIZE} bytes, got {len(data)}"
            )
        opcode, expand = _TAIL_STRUCT.unpack(data[2 * STATE_SIZE:])
        return cls(
            before=State.unpack(data[:STATE_SIZE]),
            after=State.unpack(data[STATE_SIZE:2 * STATE_SIZE]),
            opcode=opcode,
            expand=expand,
        )


def read_test_cases(stream: BinaryIO) -> Iterator[TestCase]:
    """Yield records until the stream runs out; a trailing partial record is ignored."""
    while True:
        data = stream.read(TEST_CASE_SIZE)
        if len(data) < TEST_CASE_SIZE:
            return
        yield TestCase.unpack(data)


def write_test_cases(stream: BinaryIO, cases: Iterable[TestCase]) -> int:
    """Write records to the stream and return how many were written."""
    count = 0
    for case in cases:
        stream.write(case.pack())
        count += 1
    return count