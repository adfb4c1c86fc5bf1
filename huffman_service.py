# filename: huffman_service.py

import io
import os
from dataclasses import dataclass

from bit_channel import BitInputStream, BitOutputStream
from grin_errors import FormatError
from huffman_core import HuffmanTree, build_frequency_table

MAGIC_NUMBER = 0x736
MAGIC_BITS = 32


@dataclass
class CompressionStats:
    original_size: int
    compressed_size: int
    payload_bits: int = 0
    complete: bool = True

    @property
    def ratio(self):
        if self.original_size == 0:
            return 0.0
        return self.compressed_size / self.original_size


class GrinService:
    """Reads and writes the GRIN format: magic number, serialized tree, payload."""

    def __init__(self):
        self.last_stats = None

    def compress(self, data):
        # the frequency pass and the payload pass each get their own reader
        tree = HuffmanTree.from_frequencies(build_frequency_table(BitInputStream(io.BytesIO(data))))
        buffer = io.BytesIO()
        out = BitOutputStream(buffer)
        payload_bits = self._write_stream(tree, BitInputStream(io.BytesIO(data)), out)
        out.flush()

        compressed = buffer.getvalue()
        self.last_stats = CompressionStats(len(data), len(compressed), payload_bits)
        return compressed

    def decompress(self, data):
        source = BitInputStream(io.BytesIO(data))
        tree = self._read_header(source)
        buffer = io.BytesIO()
        out = BitOutputStream(buffer)
        complete = tree.decode(source, out)
        out.flush()

        decoded = buffer.getvalue()
        self.last_stats = CompressionStats(len(decoded), len(data), complete=complete)
        return decoded

    def encode_file(self, infile, outfile):
        with BitInputStream.open(infile) as source:
            freqs = build_frequency_table(source)
        tree = HuffmanTree.from_frequencies(freqs)

        with BitInputStream.open(infile) as source, BitOutputStream.open(outfile) as out:
            payload_bits = self._write_stream(tree, source, out)

        self.last_stats = CompressionStats(
            original_size=os.path.getsize(infile),
            compressed_size=os.path.getsize(outfile),
            payload_bits=payload_bits,
        )
        return self.last_stats

    def decode_file(self, infile, outfile):
        with BitInputStream.open(infile) as source:
            # header problems must surface before the output file exists
            tree = self._read_header(source)
            with BitOutputStream.open(outfile) as out:
                complete = tree.decode(source, out)

        self.last_stats = CompressionStats(
            original_size=os.path.getsize(outfile),
            compressed_size=os.path.getsize(infile),
            complete=complete,
        )
        return self.last_stats

    def _write_stream(self, tree, source, out):
        out.write_bits(MAGIC_NUMBER, MAGIC_BITS)
        tree.serialize(out)
        return tree.encode(source, out)

    def _read_header(self, source):
        magic = source.read_bits(MAGIC_BITS)
        if magic != MAGIC_NUMBER:
            if magic is None:
                raise FormatError("stream is too short to hold a GRIN header")
            raise FormatError(f"bad magic number 0x{magic:x}, expected 0x{MAGIC_NUMBER:x}")
        return HuffmanTree.deserialize(source)
