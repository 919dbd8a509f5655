"""Bit-level reading and writing over binary file objects.

Bits are packed most-significant-bit first. The output side zero-pads the
last partial byte when it is closed.
"""
import io
from typing import BinaryIO, Optional

# flush packed bytes to the file in chunks of this size
_CHUNK = 4096


class BitInputStream:
    def __init__(self, fileobj: BinaryIO, owns: bool = False):
        self._file = fileobj
        self._owns = owns
        # remember where we started so reset() can come back here
        self._start: Optional[int] = fileobj.tell() if fileobj.seekable() else None
        self._buffer = 0
        self._bit_count = 0
        self.bits_read = 0

    def read_bits(self, n: int) -> int:
        """Return the next n bits as an unsigned int, or -1 if fewer remain."""
        while self._bit_count < n:
            byte = self._file.read(1)
            if not byte:
                return -1
            self._buffer = (self._buffer << 8) | byte[0]
            self._bit_count += 8
        self._bit_count -= n
        value = self._buffer >> self._bit_count
        self._buffer &= (1 << self._bit_count) - 1
        self.bits_read += n
        return value

    def reset(self) -> None:
        if self._start is None:
            raise io.UnsupportedOperation("input stream cannot be rewound")
        self._file.seek(self._start)
        self._buffer = 0
        self._bit_count = 0
        self.bits_read = 0

    def close(self) -> None:
        if self._owns and not self._file.closed:
            self._file.close()

    def __enter__(self) -> 'BitInputStream':
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class BitOutputStream:
    def __init__(self, fileobj: BinaryIO, owns: bool = False):
        self._file = fileobj
        self._owns = owns
        self._pending = bytearray()
        self._buffer = 0
        self._bit_count = 0
        self.bits_written = 0
        self.pad_count = 0
        self.closed = False

    def write_bits(self, n: int, value: int) -> None:
        """Write the low-order n bits of value."""
        if self.closed:
            raise ValueError("write to a closed bit stream")
        self._buffer = (self._buffer << n) | (value & ((1 << n) - 1))
        self._bit_count += n
        self.bits_written += n
        while self._bit_count >= 8:
            self._bit_count -= 8
            self._pending.append(self._buffer >> self._bit_count)
            self._buffer &= (1 << self._bit_count) - 1
        if len(self._pending) >= _CHUNK:
            self._drain()

    def _drain(self) -> None:
        if self._pending:
            self._file.write(bytes(self._pending))
            self._pending.clear()

    def close(self) -> None:
        """Pad the final byte with zeros, flush, and close an owned file.

        Safe to call more than once.
        """
        if self.closed:
            return
        if self._bit_count:
            self.pad_count = 8 - self._bit_count
            self._pending.append((self._buffer << self.pad_count) & 0xFF)
            self._buffer = 0
            self._bit_count = 0
        self._drain()
        self._file.flush()
        self.closed = True
        if self._owns:
            self._file.close()

    def __enter__(self) -> 'BitOutputStream':
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def open_input(path: str) -> BitInputStream:
    return BitInputStream(open(path, 'rb'), owns=True)


def open_output(path: str) -> BitOutputStream:
    return BitOutputStream(open(path, 'wb'), owns=True)
