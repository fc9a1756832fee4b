"""Peripheral models, operand fields, test-case records and a COFF reader for a TeakLite DSP emulator."""

__version__ = "0.1.0"
__all__ = [
    "ahbm",
    "apbp",
    "btdmp",
    "coff",
    "icu",
    "operand",
    "shared_memory",
    "testcase",
]