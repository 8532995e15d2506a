"""
Memory Subsystem for the CHIP-8 Emulator
========================================

Memory Map:
    $000-$04F  Built-in font glyphs (16 digits × 5 bytes)
    $050-$1FF  Reserved (interpreter area, zero)
    $200-$FFF  Program image and program data

The address space is 12 bits wide. Addresses wrap at $FFF, so an index
register pointing past the end reads from the start of memory.
"""

import logging
from pathlib import Path

from chip8_sdk.cpu.chip8 import (
    ADDRESS_MASK,
    FONT_ADDRESS,
    FONT_SPRITES,
    MEMORY_SIZE,
    PROGRAM_START,
)
from chip8_sdk.errors import RomSizeError

logger = logging.getLogger(__name__)


class Memory:
    """
    4 KiB of byte-addressable memory with the font pre-loaded.

    Example:
        >>> mem = Memory()
        >>> mem.load(bytes([0x00, 0xE0]))
        >>> hex(mem.read_word(0x200))
        '0xe0'
    """

    def __init__(self) -> None:
        self._data = bytearray(MEMORY_SIZE)
        self.reset()

    def reset(self) -> None:
        """Zero all memory and copy the font into the reserved area."""
        self._data[:] = bytes(MEMORY_SIZE)
        self._data[FONT_ADDRESS:FONT_ADDRESS + len(FONT_SPRITES)] = FONT_SPRITES

    def read(self, address: int) -> int:
        return self._data[address & ADDRESS_MASK]

    def write(self, address: int, value: int) -> None:
        self._data[address & ADDRESS_MASK] = value & 0xFF

    def read_word(self, address: int) -> int:
        """Read a big-endian 16-bit word."""
        return (self.read(address) << 8) | self.read(address + 1)

    def read_bytes(self, address: int, count: int) -> bytes:
        return bytes(self.read(address + i) for i in range(count))

    def write_bytes(self, address: int, data: bytes) -> None:
        for i, value in enumerate(data):
            self.write(address + i, value)

    def load(self, data: bytes, address: int = PROGRAM_START) -> None:
        """
        Copy a program image into memory verbatim.

        Args:
            data: Program bytes, no header
            address: Load address (default $200)

        Raises:
            RomSizeError: If the image does not fit below $1000
        """
        limit = MEMORY_SIZE - address
        if len(data) > limit:
            raise RomSizeError(len(data), limit)
        self._data[address:address + len(data)] = data
        logger.debug(f"Loaded {len(data)} bytes at ${address:03X}")

    def load_file(self, path: str | Path, address: int = PROGRAM_START) -> int:
        """
        Load a ROM file.

        Returns:
            Number of bytes loaded

        Raises:
            FileNotFoundError: If the file does not exist
            RomSizeError: If the image is too large
        """
        data = Path(path).read_bytes()
        self.load(data, address)
        return len(data)

    def dump(self) -> bytes:
        """Snapshot of the whole address space."""
        return bytes(self._data)

    def __len__(self) -> int:
        return MEMORY_SIZE
