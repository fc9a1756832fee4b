# teakdsp

Building blocks for emulating a TeakLite DSP and the hardware around it. There are no
third-party dependencies.

## Modules

- `teakdsp.ahbm`: the AHB master bridge. `Ahbm` has three `Channel`s, each with a
  `UnitSize` (8, 16 or 32 bit), a `BurstSize` (1, 4 or 8 units), a `Direction` and a DMA
  channel mask. `read16`/`read32` fill a burst from external memory and hand it out one unit
  at a time. `write16`/`write32` collect a burst and flush it when it is full. Memory goes
  through the six callbacks given to `set_external_memory_callback`. A transfer made before
  they are set raises `RuntimeError`. `get_channel_for_dma` returns the first channel bound
  to a DMA channel, or 0 if none is.
- `teakdsp.apbp`: the host/DSP mailbox. `Apbp` has three `DataChannel`s, each holding one
  word with a ready flag. The channel's data handler runs on send unless its interrupt is
  disabled. There is also a 16-bit semaphore register with a mask. `set_semaphore` calls
  the semaphore handler when an unmasked bit is set. `is_semaphore_signaled` reports the
  latched signal.
- `teakdsp.icu`: the interrupt control unit. `Icu` latches requests (`trigger`,
  `trigger_single`, `acknowledge`, `request`) and keeps three enable masks and a
  vectored-enable mask. It dispatches to the handlers given to `set_interrupt_handler`.
  Vectors come from `vector_low`/`vector_high` and `vector_context_switch`. Triggering an
  enabled IRQ before handlers are set raises `RuntimeError`.
- `teakdsp.btdmp`: the audio output port. `Btdmp` keeps a 16-entry transmit queue (`send`,
  `flush`, `transmit_empty`, `transmit_full`). Each `transmit_period` ticks while
  `transmit_enable` is set, it pops a stereo pair of signed 16-bit samples and passes them to
  the audio callback. It raises the interrupt handler when the queue runs empty.
  `get_max_skip` and `skip` let a scheduler jump ahead. `get_max_skip` returns `math.inf`
  when nothing is pending.
- `teakdsp.shared_memory`: `SharedMemory`, a 512 KiB byte array read and written as
  little-endian 16-bit words. Out-of-range addresses raise `IndexError`.
- `teakdsp.operand`: instruction operand fields. `Operand.extract` takes a field from an
  opcode or from its expansion word. `EnumOperand` subclasses such as `Register`, `Ax`, `Ab`,
  `Rn`, `Cond`, `Alm` and `SwapType` map the field to `RegName` or to an operation enum.
  There are also immediates (`Imm8`, `Imm8s`, ...), addresses (`Address16`, `Address18_16`,
  `Address18_2`, `RelAddr7`), address-register indices (`ArIndex` subclasses) and
  `BankFlags`. The helpers `sign_extend` and `address32` are included.
- `teakdsp.testcase`: `State` and `TestCase`, which pack to and unpack from fixed-size
  binary records (a 4312-byte test case). `read_test_cases` yields records from a binary
  stream, and `write_test_cases` writes them and returns the count.
- `teakdsp.coff`: a reader for DSP COFF object files. `Coff(stream)` or
  `Coff.from_path(path)` gives `sections` (each `Section` with `line_numbers` and
  `relocations`), `symbols` (`SymbolEx` with a `Region`) and `symbols_lut` (address to
  symbol indices). Duplicated sections are merged, and sections spanning both program and
  data space are split. Sections are sorted by address. Malformed input raises `CoffError`.
  `storage_name` names a symbol storage class.

## Installing

```
pip install .
```

## Example

```python
from teakdsp.shared_memory import SharedMemory
from teakdsp.apbp import Apbp

mem = SharedMemory()
mem.write_word(0x10, 0xBEEF)
assert mem.read_word(0x10) == 0xBEEF

apbp = Apbp()
apbp.set_semaphore_handler(lambda: print("signal"))
apbp.set_semaphore(0x0001)
assert apbp.is_semaphore_signaled()
```

## What is not included

The package has no instruction decoder, interpreter or disassembler, and it does not
generate test cases. It has no command-line program. COFF files can be read as a library,
but nothing here prints or disassembles them.

## Running the tests

```
pip install .[test]
pytest
```