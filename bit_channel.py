# filename: bit_channel.py

CHUNK_SIZE = 64 * 1024


class BitInputStream:
    """Reads a binary stream one bit at a time, most significant bit first.

    End of data is signalled by returning None rather than raising, so callers
    can treat exhaustion as an ordinary condition.
    """

    def __init__(self, stream, owns_stream=False):
        self.stream = stream
        self.owns_stream = owns_stream
        self._chunk = b""
        self._pos = 0
        self._rack = 0
        self._mask = 0

    @classmethod
    def open(cls, path):
        return cls(open(path, "rb"), owns_stream=True)

    def _next_byte(self):
        if self._pos >= len(self._chunk):
            self._chunk = self.stream.read(CHUNK_SIZE)
            self._pos = 0
            if not self._chunk:
                return None
        byte = self._chunk[self._pos]
        self._pos += 1
        return byte

    def read_bit(self):
        if self._mask == 0:
            byte = self._next_byte()
            if byte is None:
                return None
            self._rack = byte
            self._mask = 0x80
        bit = 1 if self._rack & self._mask else 0
        self._mask >>= 1
        return bit

    def read_bits(self, count):
        # Returns None if the stream ends before `count` bits; the partial bits are lost.
        value = 0
        for _ in range(count):
            bit = self.read_bit()
            if bit is None:
                return None
            value = (value << 1) | bit
        return value

    def close(self):
        if self.owns_stream:
            self.stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class BitOutputStream:
    """Writes bits to a binary stream, most significant bit first.

    Partial bytes are buffered until eight bits are collected. flush() and
    close() pad a trailing partial byte with zero bits.
    """

    def __init__(self, stream, owns_stream=False):
        self.stream = stream
        self.owns_stream = owns_stream
        self.bits_written = 0
        self._rack = 0
        self._mask = 0x80
        self._buffer = bytearray()
        self._closed = False

    @classmethod
    def open(cls, path):
        return cls(open(path, "wb"), owns_stream=True)

    def write_bit(self, bit):
        if bit:
            self._rack |= self._mask
        self._mask >>= 1
        self.bits_written += 1
        if self._mask == 0:
            self._buffer.append(self._rack)
            self._rack = 0
            self._mask = 0x80
            if len(self._buffer) >= CHUNK_SIZE:
                self.stream.write(self._buffer)
                self._buffer = bytearray()

    def write_bits(self, value, count):
        if count < 0:
            raise ValueError("bit count must be non-negative")
        mask = 1 << (count - 1) if count else 0
        while mask:
            self.write_bit(value & mask)
            mask >>= 1

    def flush(self):
        if self._mask != 0x80:
            self._buffer.append(self._rack)
            self._rack = 0
            self._mask = 0x80
        if self._buffer:
            self.stream.write(self._buffer)
            self._buffer = bytearray()
        self.stream.flush()

    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            self.flush()
        finally:
            if self.owns_stream:
                self.stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
