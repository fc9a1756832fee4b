"""Instruction operand fields and the register and operation names they select."""

from __future__ import annotations

from enum import Enum, IntEnum, auto
from typing import ClassVar, Tuple


def sign_extend(value: int, bits: int, width: int) -> int:
    """Sign-extend the low ``bits`` of ``value`` and truncate to ``width`` bits."""
    value &= (1 << bits) - 1
    if value & (1 << (bits - 1)):
        value -= 1 << bits
    return value & ((1 << width) - 1)


class SumBase(Enum):
    ZERO = auto()
    ACC = auto()
    SV = auto()
    SV_RND = auto()


class RegName(Enum):
    a0 = auto()
    a0l = auto()
    a0h = auto()
    a0e = auto()
    a1 = auto()
    a1l = auto()
    a1h = auto()
    a1e = auto()
    b0 = auto()
    b0l = auto()
    b0h = auto()
    b0e = auto()
    b1 = auto()
    b1l = auto()
    b1h = auto()
    b1e = auto()
    r0 = auto()
    r1 = auto()
    r2 = auto()
    r3 = auto()
    r4 = auto()
    r5 = auto()
    r6 = auto()
    r7 = auto()
    y0 = auto()
    p = auto()
    pc = auto()
    sp = auto()
    sv = auto()
    lc = auto()
    ar0 = auto()
    ar1 = auto()
    arp0 = auto()
    arp1 = auto()
    arp2 = auto()
    arp3 = auto()
    ext0 = auto()
    ext1 = auto()
    ext2 = auto()
    ext3 = auto()
    stt0 = auto()
    stt1 = auto()
    stt2 = auto()
    st0 = auto()
    st1 = auto()
    st2 = auto()
    cfgi = auto()
    cfgj = auto()
    mod0 = auto()
    mod1 = auto()
    mod2 = auto()
    mod3 = auto()
    undefine = auto()


class SwapTypeValue(IntEnum):
    a0b0 = 0
    a0b1 = 1
    a1b0 = 2
    a1b1 = 3
    a0b0a1b1 = 4
    a0b1a1b0 = 5
    a0b0a1 = 6
    a0b1a1 = 7
    a1b0a0 = 8
    a1b1a0 = 9
    b0a0b1 = 10
    b0a1b1 = 11
    b1a0b0 = 12
    b1a1b0 = 13
    reserved0 = 14
    reserved1 = 15


class StepValue(Enum):
    ZERO = auto()
    INCREASE = auto()
    DECREASE = auto()
    PLUS_STEP = auto()
    INCREASE2_MODE1 = auto()
    DECREASE2_MODE1 = auto()
    INCREASE2_MODE2 = auto()
    DECREASE2_MODE2 = auto()


class AlmOp(Enum):
    OR = auto()
    AND = auto()
    XOR = auto()
    ADD = auto()
    TST0 = auto()
    TST1 = auto()
    CMP = auto()
    SUB = auto()
    MSU = auto()
    ADDH = auto()
    ADDL = auto()
    SUBH = auto()
    SUBL = auto()
    SQR = auto()
    SQRA = auto()
    CMPU = auto()
    RESERVED = auto()


class AlbOp(IntEnum):
    SET = 0
    RST = 1
    CHNG = 2
    ADDV = 3
    TST0 = 4
    TST1 = 5
    CMPV = 6
    SUBV = 7


class MulOp(Enum):
    MPY = auto()
    MPYSU = auto()
    MAC = auto()
    MACUS = auto()
    MAA = auto()
    MACUU = auto()
    MACSU = auto()
    MAASU = auto()


class ModaOp(Enum):
    SHR = auto()
    SHR4 = auto()
    SHL = auto()
    SHL4 = auto()
    ROR = auto()
    ROL = auto()
    CLR = auto()
    RESERVED = auto()
    NOT = auto()
    NEG = auto()
    RND = auto()
    PACR = auto()
    CLRR = auto()
    INC = auto()
    DEC = auto()
    COPY = auto()


class CondValue(IntEnum):
    TRUE = 0
    EQ = 1
    NEQ = 2
    GT = 3
    GE = 4
    LT = 5
    LE = 6
    NN = 7
    C = 8
    V = 9
    E = 10
    L = 11
    NR = 12
    NIU0 = 13
    IU0 = 14
    IU1 = 15


class CbsCondValue(IntEnum):
    GE = 0
    GT = 1


class Operand:
    """A raw bit field taken from an opcode or its expansion word."""

    BITS: ClassVar[int] = 16

    def __init__(self, storage: int = 0) -> None:
        if not 0 <= storage < (1 << self.BITS):
            raise ValueError(
                f"{storage:#x} does not fit in {self.BITS}-bit {type(self).__name__}"
            )
        self.storage = storage

    @classmethod
    def extract(cls, opcode: int, pos: int, expansion: int = 0) -> "Operand":
        """Take the field at bit ``pos`` of ``opcode``; position 16 means the expansion."""
        bits = cls.BITS
        if bits == 16 and pos == 16:
            return cls(expansion & 0xFFFF)
        if not (bits < 16 and 0 <= pos < 16 and bits + pos <= 16):
            raise ValueError(f"{bits}-bit field cannot sit at position {pos}")
        mask = ((1 << bits) - 1) << pos
        return cls((opcode & mask) >> pos)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.storage == other.storage

    def __hash__(self) -> int:
        return hash((type(self), self.storage))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.storage})"


class EnumOperand(Operand):
    """A field whose value indexes a table of names; width follows the table size."""

    VALUES: ClassVar[Tuple] = ()

    def __init_subclass__(cls, **kwargs) -> None:
        super().__init_subclass__(**kwargs)
        if "VALUES" in cls.__dict__:
            count = len(cls.VALUES)
            if count < 2 or count & (count - 1):
                raise TypeError(f"{cls.__name__} needs a power-of-two number of values")
            cls.BITS = count.bit_length() - 1

    @property
    def name(self):
        return self.VALUES[self.storage]


R = RegName


class Register(EnumOperand):
    VALUES = (
        R.r0, R.r1, R.r2, R.r3, R.r4, R.r5, R.r7, R.y0,
        R.st0, R.st1, R.st2, R.p, R.pc, R.sp, R.cfgi, R.cfgj,
        R.b0h, R.b1h, R.b0l, R.b1l, R.ext0, R.ext1, R.ext2, R.ext3,
        R.a0, R.a1, R.a0l, R.a1l, R.a0h, R.a1h, R.lc, R.sv,
    )

    @property
    def name_for_mov_from_p(self) -> RegName:
        """Accumulator selected when this field names the source of a move from p."""
        return RegName.a1 if self.storage & 1 else RegName.a0


class Ax(EnumOperand):
    VALUES = (R.a0, R.a1)


class Axl(EnumOperand):
    VALUES = (R.a0l, R.a1l)


class Axh(EnumOperand):
    VALUES = (R.a0h, R.a1h)


class Bx(EnumOperand):
    VALUES = (R.b0, R.b1)


class Bxl(EnumOperand):
    VALUES = (R.b0l, R.b1l)


class Bxh(EnumOperand):
    VALUES = (R.b0h, R.b1h)


class Px(Operand):
    BITS = 1

    @property
    def index(self) -> int:
        return self.storage


class Ab(EnumOperand):
    VALUES = (R.b0, R.b1, R.a0, R.a1)


class Abl(EnumOperand):
    VALUES = (R.b0l, R.b1l, R.a0l, R.a1l)


class Abh(EnumOperand):
    VALUES = (R.b0h, R.b1h, R.a0h, R.a1h)


class Abe(EnumOperand):
    VALUES = (R.b0e, R.b1e, R.a0e, R.a1e)


class Ablh(EnumOperand):
    VALUES = (R.b0l, R.b0h, R.b1l, R.b1h, R.a0l, R.a0h, R.a1l, R.a1h)


class RnOld(EnumOperand):
    VALUES = (R.r0, R.r1, R.r2, R.r3, R.r4, R.r5, R.r7, R.y0)


class Rn(EnumOperand):
    VALUES = (R.r0, R.r1, R.r2, R.r3, R.r4, R.r5, R.r6, R.r7)

    @property
    def index(self) -> int:
        return self.storage


class R45(EnumOperand):
    VALUES = (R.r4, R.r5)

    @property
    def index(self) -> int:
        return self.storage + 4


class R0123(EnumOperand):
    VALUES = (R.r0, R.r1, R.r2, R.r3)

    @property
    def index(self) -> int:
        return self.storage


class ArArpSttMod(EnumOperand):
    VALUES = (
        R.ar0, R.ar1, R.arp0, R.arp1, R.arp2, R.arp3, R.undefine, R.undefine,
        R.stt0, R.stt1, R.stt2, R.undefine, R.mod0, R.mod1, R.mod2, R.mod3,
    )


class ArArp(EnumOperand):
    VALUES = (R.ar0, R.ar1, R.arp0, R.arp1, R.arp2, R.arp3, R.undefine, R.undefine)


class SttMod(EnumOperand):
    VALUES = (R.stt0, R.stt1, R.stt2, R.undefine, R.mod0, R.mod1, R.mod2, R.mod3)


class Ar(EnumOperand):
    VALUES = (R.ar0, R.ar1)

    @property
    def index(self) -> int:
        return self.storage


class Arp(EnumOperand):
    VALUES = (R.arp0, R.arp1, R.arp2, R.arp3)

    @property
    def index(self) -> int:
        return self.storage


del R


class SwapType(EnumOperand):
    VALUES = tuple(SwapTypeValue)


class StepZIDS(EnumOperand):
    VALUES = (StepValue.ZERO, StepValue.INCREASE, StepValue.DECREASE, StepValue.PLUS_STEP)


class Alm(EnumOperand):
    VALUES = (
        AlmOp.OR, AlmOp.AND, AlmOp.XOR, AlmOp.ADD, AlmOp.TST0, AlmOp.TST1, AlmOp.CMP,
        AlmOp.SUB, AlmOp.MSU, AlmOp.ADDH, AlmOp.ADDL, AlmOp.SUBH, AlmOp.SUBL, AlmOp.SQR,
        AlmOp.SQRA, AlmOp.CMPU,
    )


class Alu(EnumOperand):
    VALUES = (
        AlmOp.OR, AlmOp.AND, AlmOp.XOR, AlmOp.ADD,
        AlmOp.RESERVED, AlmOp.RESERVED, AlmOp.CMP, AlmOp.SUB,
    )


class Alb(EnumOperand):
    VALUES = tuple(AlbOp)


class Mul3(EnumOperand):
    VALUES = tuple(MulOp)


class Mul2(EnumOperand):
    VALUES = (MulOp.MPY, MulOp.MAC, MulOp.MAA, MulOp.MACSU)


class Moda4(EnumOperand):
    VALUES = tuple(ModaOp)


class Moda3(EnumOperand):
    VALUES = (
        ModaOp.SHR, ModaOp.SHR4, ModaOp.SHL, ModaOp.SHL4,
        ModaOp.ROR, ModaOp.ROL, ModaOp.CLR, ModaOp.CLRR,
    )


class Cond(EnumOperand):
    VALUES = tuple(CondValue)


class CbsCond(EnumOperand):
    VALUES = tuple(CbsCondValue)


class ArIndex(Operand):
    """A field selecting an address-register slot, offset by ``OFFSET``."""

    BITS = 1
    OFFSET: ClassVar[int] = 0

    @property
    def index(self) -> int:
        return self.storage + self.OFFSET


class ArRn1(ArIndex):
    BITS = 1


class ArRn2(ArIndex):
    BITS = 2


class ArStep1(ArIndex):
    BITS = 1


class ArStep1Alt(ArIndex):
    BITS = 1
    OFFSET = 2


class ArStep2(ArIndex):
    BITS = 2


class ArpRn1(ArIndex):
    BITS = 1


class ArpRn2(ArIndex):
    BITS = 2


class ArpStep1(ArIndex):
    BITS = 1


class ArpStep2(ArIndex):
    BITS = 2


class Address18_2(Operand):
    BITS = 2

    @property
    def address32(self) -> int:
        return self.storage << 16


class Address18_16(Operand):
    BITS = 16

    @property
    def address32(self) -> int:
        return self.storage


def address32(low: Address18_16, high: Address18_2) -> int:
    """Combine the low 16 bits and high 2 bits of an 18-bit program address."""
    return low.address32 | high.address32


class Address16(Operand):
    BITS = 16

    @property
    def address32(self) -> int:
        return self.storage


class RelAddr7(Operand):
    BITS = 7

    @property
    def relative32(self) -> int:
        return sign_extend(self.storage, 7, 32)


class Imm(Operand):
    """Unsigned immediate."""

    @property
    def unsigned16(self) -> int:
        return self.storage


class Imms(Operand):
    """Signed immediate."""

    @property
    def signed16(self) -> int:
        return sign_extend(self.storage, self.BITS, 16)


class Imm2(Imm):
    BITS = 2


class Imm4(Imm):
    BITS = 4


class Imm5(Imm):
    BITS = 5


class Imm5s(Imms):
    BITS = 5


class Imm6s(Imms):
    BITS = 6


class Imm7s(Imms):
    BITS = 7


class Imm8(Imm):
    BITS = 8


class Imm8s(Imms):
    BITS = 8


class Imm9(Imm):
    BITS = 9


class Imm16(Imm):
    BITS = 16


class MemImm8(Imm8):
    pass


class MemImm16(Imm16):
    pass


class MemR7Imm7s(Imm7s):
    pass


class MemR7Imm16(Imm16):
    pass


class BankFlags(Operand):
    """Which register banks a bank-exchange instruction swaps."""

    BITS = 6

    @property
    def cfgi(self) -> bool:
        return bool(self.storage & 1)

    @property
    def r4(self) -> bool:
        return bool(self.storage & 2)

    @property
    def r1(self) -> bool:
        return bool(self.storage & 4)

    @property
    def r0(self) -> bool:
        return bool(self.storage & 8)

    @property
    def r7(self) -> bool:
        return bool(self.storage & 16)

    @property
    def cfgj(self) -> bool:
        return bool(self.storage & 32)