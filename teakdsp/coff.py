"""Reader for the COFF object files produced by the DSP toolchain."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import BinaryIO, Dict, List

log = logging.getLogger(__name__)

_U32_MASK = 0xFFFFFFFF

_HEADER = struct.Struct("<HHIIIHH")
_SECTION_HEADER = struct.Struct("<8sIIIIIIHHI")
_SYMBOL = struct.Struct("<8sIHHBB")
_LINE = struct.Struct("<IH")
_RELOCATION = struct.Struct("<III")

# Line entries carrying these addresses are accepted outside the section range.
_MAGIC_LINE_ADDRESSES = frozenset({0xFFFFFFFF, 0xFFFFFFFE, 0xFFFFFFFD})


class CoffError(Exception):
    """The file is not a COFF object this reader understands."""


class SFlag:
    """Section header flag bits."""

    EXEC = 0x0001
    UNK2 = 0x0002
    PROG = 0x0008
    DATA = 0x0010
    REGION_MASK = PROG | DATA
    MONI = 0x0020
    UN40 = 0x0040
    DUPL = 0x0080
    U200 = 0x0200


class Region(Enum):
    AUX = 0
    ABSOLUTE = 1
    PROG = 2
    DATA = 3


_STORAGE_NAMES = {
    0: "label", 1: "auto", 2: "external", 3: "static",
    4: "register", 8: "struct", 9: "arg", 10: "struct-tag",
    11: "union", 12: "union-tag", 13: "typedef", 15: "enum-tag",
    16: "enum", 18: "bitfield", 19: "auto-arg", 98: "start",
    99: "end", 100: "block", 101: "func", 102: "struct-size",
    103: "file", 107: "ar", 108: "ar", 109: "ar",
    110: "ar", 111: "ar", 112: "ar", 255: "physical-function-end",
}


def storage_name(storage: int) -> str:
    """Name of a symbol storage class; raises KeyError for unknown classes."""
    try:
        return _STORAGE_NAMES[storage]
    except KeyError:
        raise KeyError(f"unknown storage class {storage}") from None


@dataclass(frozen=True)
class Relocation:
    addr: int
    symbol: int
    type: int


@dataclass(frozen=True)
class LineNumber:
    symbol: int
    line: int


@dataclass
class Section:
    name: str
    prog_addr: int
    data_addr: int
    data: bytes
    num_rel: int
    flags: int
    line_numbers: Dict[int, List[LineNumber]] = field(default_factory=dict)
    relocations: Dict[int, List[Relocation]] = field(default_factory=dict)

    @property
    def region_flags(self) -> int:
        return self.flags & SFlag.REGION_MASK

    def copy(self) -> "Section":
        return replace(
            self,
            line_numbers={k: list(v) for k, v in self.line_numbers.items()},
            relocations={k: list(v) for k, v in self.relocations.items()},
        )


@dataclass
class SymbolEx:
    name: str
    region: Region
    value: int
    type: int
    storage: int


def _read_at(stream: BinaryIO, offset: int, size: int, what: str) -> bytes:
    stream.seek(offset)
    data = stream.read(size)
    if len(data) != size:
        raise CoffError(f"failed to read {what}")
    return data


def _read_string(stream: BinaryIO, offset: int) -> str:
    stream.seek(offset)
    chars = bytearray()
    while True:
        c = stream.read(1)
        if not c:
            raise CoffError("unexpected end")
        if c == b"\0":
            return chars.decode("latin-1")
        chars += c


def _resolve_name(raw: bytes, stream: BinaryIO, string_offset: int) -> str:
    first, second = struct.unpack("<II", raw)
    if first == 0:
        return _read_string(stream, string_offset + second)
    return raw.split(b"\0", 1)[0].decode("latin-1")


class Coff:
    """Sections, line numbers, relocations and symbols of a COFF object."""

    def __init__(self, stream: BinaryIO) -> None:
        self.sections: List[Section] = []
        self.symbols: List[SymbolEx] = []
        self.symbols_lut: Dict[int, List[int]] = {}

        header = _read_at(stream, 0, _HEADER.size, "header")
        (_magic, num_section, _time, offset_symbol, num_symbol,
         optheader_size, _flags) = _HEADER.unpack(header)
        string_offset = offset_symbol + num_symbol * _SYMBOL.size

        self._read_sections(stream, num_section, optheader_size, string_offset)
        self._read_symbols(stream, offset_symbol, num_symbol, string_offset)
        self._merge_duplicates()
        self._split_multi_region()
        self.sections.sort(key=_address_key)

    @classmethod
    def from_path(cls, path) -> "Coff":
        with open(path, "rb") as stream:
            return cls(stream)

    def _read_sections(
        self, stream: BinaryIO, count: int, optheader_size: int, string_offset: int
    ) -> None:
        expected = 0
        for i in range(count):
            offset = _HEADER.size + optheader_size + i * _SECTION_HEADER.size
            raw = _read_at(stream, offset, _SECTION_HEADER.size, "sheader")
            (name_raw, prog_addr, data_addr, size, offset_data, offset_rel,
             offset_line, num_rel, num_line, flags) = _SECTION_HEADER.unpack(raw)
            name = _resolve_name(name_raw, stream, string_offset)

            if expected == 0:
                expected = offset_data
            if expected != offset_data:
                raise CoffError("unexpected section data offset")

            data = bytes(size)
            if not flags & SFlag.DUPL:
                if size:
                    data = _read_at(stream, offset_data, size, "section")
                expected += size

            region = flags & SFlag.REGION_MASK
            if region == 0:
                raise CoffError("no region type")
            if region == SFlag.PROG and data_addr != 0:
                raise CoffError("prog section has data addr")
            if region == SFlag.DATA and prog_addr != 0:
                raise CoffError("data section has prog addr")

            section = Section(name, prog_addr, data_addr, data, num_rel, flags)

            stream.seek(offset_line)
            current_symbol = 0
            for _ in range(num_line):
                entry = stream.read(_LINE.size)
                if len(entry) != _LINE.size:
                    raise CoffError("failed to read line")
                value, line = _LINE.unpack(entry)
                if line == 0:
                    current_symbol = value
                    continue
                end = prog_addr + len(data) // 2
                if not prog_addr <= value < end and value not in _MAGIC_LINE_ADDRESSES:
                    raise CoffError("line out of range")
                section.line_numbers.setdefault(value, []).append(
                    LineNumber(current_symbol, line)
                )

            stream.seek(offset_rel)
            for _ in range(num_rel):
                entry = stream.read(_RELOCATION.size)
                if len(entry) != _RELOCATION.size:
                    raise CoffError("failed to read relocation")
                relocation = Relocation(*_RELOCATION.unpack(entry))
                section.relocations.setdefault(relocation.addr, []).append(relocation)

            self.sections.append(section)

    def _read_symbols(
        self, stream: BinaryIO, offset_symbol: int, count: int, string_offset: int
    ) -> None:
        i = 0
        while i < count:
            raw = _read_at(stream, offset_symbol + i * _SYMBOL.size, _SYMBOL.size, "symbol")
            name_raw, value, section_index, sym_type, storage, num_aux = _SYMBOL.unpack(raw)
            i += num_aux + 1
            name = _resolve_name(name_raw, stream, string_offset)
            log.debug(
                "%s: value = %08X, section = %04X, type = %04X, storage = %02X, aux = %02X",
                name, value, section_index, sym_type, storage, num_aux,
            )

            if 0 < section_index < 0x7FFF:
                if section_index > len(self.sections):
                    raise CoffError("symbol section out of range")
                section = self.sections[section_index - 1]
                if section.flags & SFlag.PROG:
                    region, base = Region.PROG, section.prog_addr
                else:
                    region, base = Region.DATA, section.data_addr
                value = (value + base) & _U32_MASK
            else:
                region = Region.ABSOLUTE

            self.symbols.append(SymbolEx(name, region, value, sym_type, storage))
            if region in (Region.PROG, Region.DATA):
                self.symbols_lut.setdefault(value, []).append(len(self.symbols) - 1)

            for _ in range(num_aux):
                self.symbols.append(SymbolEx(name, Region.AUX, value, sym_type, storage))

    def _merge_duplicates(self) -> None:
        self.sections.sort(key=lambda s: (s.flags & SFlag.DUPL, s.name))
        mid = len(self.sections) // 2
        for a, b in zip(self.sections[:mid], self.sections[mid:]):
            if (
                a.name != b.name
                or a.prog_addr != b.prog_addr
                or a.data_addr != b.data_addr
                or len(a.data) != len(b.data)
                or a.flags + SFlag.DUPL != b.flags
            ):
                raise CoffError("mismatch")
            if b.line_numbers:
                raise CoffError("dup has line numbers")
            if b.num_rel != 0:
                raise CoffError("dup has relocations")
        del self.sections[mid:]

    def _split_multi_region(self) -> None:
        single = [s for s in self.sections if s.region_flags != SFlag.REGION_MASK]
        both = [s for s in self.sections if s.region_flags == SFlag.REGION_MASK]
        as_prog = []
        for section in both:
            prog = section.copy()
            prog.flags &= ~SFlag.DATA
            prog.data_addr = 0
            as_prog.append(prog)
            section.flags &= ~SFlag.PROG
            section.prog_addr = 0
        self.sections = single + both + as_prog


def _address_key(section: Section):
    if section.region_flags == SFlag.PROG:
        return (0, section.prog_addr, len(section.data))
    return (1, section.data_addr, len(section.data))