# filename: huffman_core.py

import heapq
import itertools
from collections import Counter

from grin_errors import FormatError

EOF_SYMBOL = 256
SYMBOL_BITS = 9
BYTE_BITS = 8
# A tree over 257 symbols is at most 256 levels deep.
MAX_TREE_DEPTH = EOF_SYMBOL


class HuffmanNode:
    def __init__(self, symbol=None, freq=0, left=None, right=None):
        self.symbol = symbol
        self.freq = freq
        self.left = left
        self.right = right

    @property
    def is_leaf(self):
        return self.left is None and self.right is None

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode(symbol={self.symbol}, freq={self.freq})"
        return f"HuffmanNode(freq={self.freq})"


def build_frequency_table(source):
    """Count every byte of a BitInputStream, plus one end-of-stream entry."""
    freqs = Counter()
    while True:
        byte = source.read_bits(BYTE_BITS)
        if byte is None:
            break
        freqs[byte] += 1
    freqs[EOF_SYMBOL] = 1
    return freqs


class HuffmanTree:
    """A static Huffman code over byte values plus the end-of-stream symbol.

    Trees come from a frequency table (from_frequencies) or from the bit
    description written by serialize (deserialize). Both routes give the
    same codewords, which is how a decoder recovers the encoder's code.
    """

    def __init__(self, root):
        self.root = root
        self._codewords = None

    @classmethod
    def from_frequencies(cls, freqs):
        if not freqs:
            raise ValueError("cannot build a Huffman tree from an empty frequency table")

        # (freq, sequence, node); sequence breaks ties in insertion order
        order = itertools.count()
        priority_queue = []
        for symbol in sorted(freqs):
            count = freqs[symbol]
            if not 0 <= symbol <= EOF_SYMBOL:
                raise ValueError(f"symbol {symbol} is outside 0..{EOF_SYMBOL}")
            if count <= 0:
                raise ValueError(f"symbol {symbol} has non-positive count {count}")
            priority_queue.append((count, next(order), HuffmanNode(symbol, count)))
        heapq.heapify(priority_queue)

        while len(priority_queue) > 1:
            _, _, first = heapq.heappop(priority_queue)
            _, _, second = heapq.heappop(priority_queue)
            merged = HuffmanNode(freq=first.freq + second.freq, left=first, right=second)
            heapq.heappush(priority_queue, (merged.freq, next(order), merged))

        return cls(priority_queue[0][2])

    @classmethod
    def deserialize(cls, source):
        seen = set()

        def read_node(depth):
            if depth > MAX_TREE_DEPTH:
                raise FormatError(f"tree is deeper than {MAX_TREE_DEPTH} levels")
            tag = source.read_bit()
            if tag is None:
                raise FormatError("stream ended inside the Huffman tree")
            if tag == 0:
                symbol = source.read_bits(SYMBOL_BITS)
                if symbol is None:
                    raise FormatError("stream ended inside a leaf symbol")
                if symbol > EOF_SYMBOL:
                    raise FormatError(f"leaf symbol {symbol} is out of range")
                if symbol in seen:
                    raise FormatError(f"symbol {symbol} appears in more than one leaf")
                seen.add(symbol)
                return HuffmanNode(symbol)
            left = read_node(depth + 1)
            right = read_node(depth + 1)
            return HuffmanNode(left=left, right=right)

        root = read_node(0)
        if root.is_leaf and root.symbol != EOF_SYMBOL:
            raise FormatError("single-leaf tree has no end-of-stream symbol")
        return cls(root)

    def serialize(self, sink):
        def write_node(node):
            if node.is_leaf:
                sink.write_bit(0)
                sink.write_bits(node.symbol, SYMBOL_BITS)
            else:
                sink.write_bit(1)
                write_node(node.left)
                write_node(node.right)

        write_node(self.root)

    def codewords(self):
        """Map each symbol to its codeword, a string of '0' and '1' characters.

        A tree that is a single leaf gives that symbol the empty codeword.
        """
        if self._codewords is None:
            self._codewords = generate_codes(self.root)
        return self._codewords

    def encode(self, source, sink):
        """Write the codeword of every byte in source, then the EOF codeword.

        Returns the number of payload bits written.
        """
        codes = {symbol: (int(code, 2) if code else 0, len(code))
                 for symbol, code in self.codewords().items()}
        written = 0
        while True:
            byte = source.read_bits(BYTE_BITS)
            if byte is None:
                break
            if byte not in codes:
                raise ValueError(f"byte 0x{byte:02x} has no codeword in this tree")
            value, length = codes[byte]
            sink.write_bits(value, length)
            written += length

        if EOF_SYMBOL not in codes:
            raise ValueError("tree has no end-of-stream codeword")
        value, length = codes[EOF_SYMBOL]
        sink.write_bits(value, length)
        return written + length

    def decode(self, source, sink):
        """Translate codewords from source back into bytes written to sink.

        Returns True once the EOF leaf is reached. Returns False if source runs
        out first; the bytes decoded up to that point have already been written.
        """
        root = self.root
        if root.is_leaf:
            if root.symbol == EOF_SYMBOL:
                return True
            raise FormatError("a single data leaf has a zero-length codeword and cannot be decoded")

        node = root
        while True:
            bit = source.read_bit()
            if bit is None:
                return False
            node = node.right if bit else node.left
            if node.is_leaf:
                if node.symbol == EOF_SYMBOL:
                    return True
                sink.write_bits(node.symbol, BYTE_BITS)
                node = root


def generate_codes(node):
    codes = {}

    def walk(node, current_code):
        if node.is_leaf:
            codes[node.symbol] = current_code
            return
        walk(node.left, current_code + "0")
        walk(node.right, current_code + "1")

    walk(node, "")
    return codes
