#!/usr/bin/env python3
import heapq
import io
import itertools
import logging
import os
import time
from dataclasses import dataclass
from typing import Optional, Dict, List, Tuple

from huff_compressor.bitio import BitInputStream, BitOutputStream, open_input, open_output

logger = logging.getLogger(__name__)

BITS_PER_WORD = 8
BITS_PER_INT = 32
ALPH_SIZE = 1 << BITS_PER_WORD
PSEUDO_EOF = ALPH_SIZE           # end-of-stream symbol, never a real byte
HUFF_NUMBER = 0xFACE8200         # file signature
HUFF_TREE = HUFF_NUMBER | 1      # signature + "tree header follows"

DEBUG_LOW = 1
DEBUG_HIGH = 4


@dataclass(frozen=True)
class HuffConfig:
    magic: int = HUFF_TREE
    debug: int = 0


DEFAULT_CONFIG = HuffConfig()


# ---------------------------------
# Errors
# ---------------------------------
class HuffException(ValueError):
    """Base class for anything that stops a compress/decompress run."""


class BadMagicNumber(HuffException):
    pass


class MalformedHeader(HuffException):
    pass


class TruncatedPayload(HuffException):
    pass


class MissingCode(HuffException):
    pass


# ---------------------------------
# Basic tree node
# ---------------------------------
class Node:
    def __init__(self, sym: Optional[int], freq: int,
                 left: Optional['Node'] = None, right: Optional['Node'] = None,
                 order: int = 0):
        # sym: 0..255 for bytes, PSEUDO_EOF for the sentinel, None for internal nodes
        self.sym = sym
        self.freq = freq
        self.left = left
        self.right = right
        self.order = order

    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __lt__(self, other: 'Node'):
        # ties on freq go to the node created first
        return (self.freq, self.order) < (other.freq, other.order)


# --------------------------------
# Convert Tree to Graphviz format
# --------------------------------
def _dot_label(node: Node) -> str:
    if not node.is_leaf():
        return str(node.freq)
    if node.sym == PSEUDO_EOF:
        name = "EOF"
    elif 33 <= node.sym < 127 and chr(node.sym) not in '"\\':
        name = chr(node.sym)
    else:
        name = f"0x{node.sym:02x}"
    return f"{node.freq}\\n{name}"


def tree_to_dot(node: Optional[Node], max_depth=3) -> str:
    dot = "digraph G {\n"
    dot += "node [shape=circle, style=filled, color=lightblue];\n"
    ids = itertools.count()

    def traverse(n, depth=0):
        nonlocal dot
        name = f"n{next(ids)}"
        dot += f'{name} [label="{_dot_label(n)}"];\n'
        if not n.is_leaf() and depth < max_depth:
            for child in (n.left, n.right):
                child_name = traverse(child, depth + 1)
                dot += f"{name} -> {child_name};\n"
        return name

    if node is not None:
        traverse(node)
    dot += "}"
    return dot


# ------------------------------------
# 1) Read input and count bytes (freq)
# ------------------------------------
def read_file_bytes(path: str) -> bytes:
    with open(path, 'rb') as f:
        return f.read()


def read_for_counts(bit_in: BitInputStream) -> List[int]:
    # one slot per byte value plus the sentinel; leaves the stream at its end
    counts = [0] * (ALPH_SIZE + 1)
    while True:
        val = bit_in.read_bits(BITS_PER_WORD)
        if val == -1:
            break
        counts[val] += 1
    counts[PSEUDO_EOF] = 1
    return counts


# -------------------------------------
# 2) Make heap and build Huffman tree
# -------------------------------------
def heap_from_counts(counts: List[int]) -> list:
    """Seed a min-heap with one leaf per symbol that occurs.

    Leaves are numbered in ascending symbol order, so equal weights pop
    lowest symbol first.
    """
    h = []
    order = itertools.count()
    for sym, fr in enumerate(counts):
        if fr > 0:
            heapq.heappush(h, Node(sym, fr, order=next(order)))
    return h


def build_tree(h: list) -> Node:
    """Merge the two lightest nodes until one is left and return it.

    The first node popped becomes the left child. Merged nodes are numbered
    after every leaf, so on equal weight a leaf pops before a merged node
    and older merged nodes pop before newer ones. A heap holding one leaf
    gives back that leaf as the root.
    """
    if not h:
        raise ValueError("cannot build a tree from an empty heap")
    order = itertools.count(len(h))
    while len(h) > 1:
        a = heapq.heappop(h)
        b = heapq.heappop(h)
        heapq.heappush(h, Node(None, a.freq + b.freq, a, b, order=next(order)))
    return heapq.heappop(h)


# ---------------------------
# 3) Walk tree -> code map
# ---------------------------
def make_codes(root: Node) -> Dict[int, str]:
    codes: Dict[int, str] = {}

    def walk(node: Node, prefix: str):
        if node.is_leaf():
            # root-only tree: a zero-length code can't be read back
            codes[node.sym] = prefix if prefix != "" else "0"
            return
        walk(node.left, prefix + "0")
        walk(node.right, prefix + "1")

    walk(root, "")
    return codes


# ------------------------------------------------------------------------
# 4) Tree header (preorder): bit 0 = internal, bit 1 + 9-bit value = leaf
# ------------------------------------------------------------------------
def write_header(root: Node, bit_out: BitOutputStream) -> None:
    if root.is_leaf():
        bit_out.write_bits(1, 1)
        bit_out.write_bits(BITS_PER_WORD + 1, root.sym)
        return
    bit_out.write_bits(1, 0)
    write_header(root.left, bit_out)
    write_header(root.right, bit_out)


def read_header(bit_in: BitInputStream, depth: int = 0) -> Node:
    # no tree over ALPH_SIZE + 1 leaves nests deeper than ALPH_SIZE
    if depth > ALPH_SIZE:
        raise MalformedHeader(f"tree header nests deeper than {ALPH_SIZE} levels")
    bit = bit_in.read_bits(1)
    if bit == -1:
        raise MalformedHeader("tree header ended before a node marker")
    if bit == 0:
        left = read_header(bit_in, depth + 1)
        right = read_header(bit_in, depth + 1)
        return Node(None, 0, left, right)
    value = bit_in.read_bits(BITS_PER_WORD + 1)
    if value == -1:
        raise MalformedHeader("tree header ended inside a leaf value")
    if value > PSEUDO_EOF:
        raise MalformedHeader(f"bad leaf value {value} in tree header")
    return Node(value, 0)


# ----------------------------------------------
# 5) Encode symbols using codes -> bit stream
# ----------------------------------------------
def write_compressed_bits(codes: Dict[int, str], bit_in: BitInputStream,
                          bit_out: BitOutputStream) -> None:
    # (length, value) keeps leading zero bits of each code
    table = {sym: (len(code), int(code, 2)) for sym, code in codes.items()}

    def emit(sym: int):
        entry = table.get(sym)
        if entry is None:
            raise MissingCode(f"no code for symbol {sym}")
        bit_out.write_bits(*entry)

    while True:
        val = bit_in.read_bits(BITS_PER_WORD)
        if val == -1:
            break
        emit(val)
    emit(PSEUDO_EOF)


# ----------------------------------------------
# 6) Walk the tree bit by bit -> original bytes
# ----------------------------------------------
def read_compressed_bits(root: Node, bit_in: BitInputStream,
                         bit_out: BitOutputStream) -> int:
    """Decode symbols until the sentinel; return how many bytes were written."""
    written = 0
    current = root
    while True:
        bit = bit_in.read_bits(1)
        if bit == -1:
            raise TruncatedPayload("bad input, no PSEUDO_EOF")
        # a root-only tree spends one bit per symbol and stays on the root
        if not root.is_leaf():
            current = current.left if bit == 0 else current.right
        if current.is_leaf():
            if current.sym == PSEUDO_EOF:
                return written
            bit_out.write_bits(BITS_PER_WORD, current.sym)
            written += 1
            current = root


# -------------------------
# 7) Compressor
# -------------------------
def compress(bit_in: BitInputStream, bit_out: BitOutputStream,
             config: Optional[HuffConfig] = None) -> Tuple[Node, Dict[str, object]]:
    """Compress bit_in into bit_out and close bit_out.

    bit_in is read twice, so it has to support reset().
    Returns (root, stats).
    """
    config = config or DEFAULT_CONFIG
    t0 = time.perf_counter()

    counts = read_for_counts(bit_in)
    t_counts = time.perf_counter()

    root = build_tree(heap_from_counts(counts))
    t_tree = time.perf_counter()

    codes = make_codes(root)
    t_codes = time.perf_counter()

    bit_out.write_bits(BITS_PER_INT, config.magic)
    write_header(root, bit_out)
    header_bits = bit_out.bits_written - BITS_PER_INT
    t_header = time.perf_counter()

    bit_in.reset()
    write_compressed_bits(codes, bit_in, bit_out)
    payload_bits = bit_out.bits_written - BITS_PER_INT - header_bits
    bit_out.close()
    t_pack = time.perf_counter()

    original_bytes = sum(counts) - 1
    if config.debug >= DEBUG_LOW:
        logger.debug("read %d bytes, %d distinct symbols", original_bytes, len(codes) - 1)
        logger.debug("wrote %d header bits, %d payload bits", header_bits, payload_bits)
    if config.debug >= DEBUG_HIGH:
        for sym in sorted(codes):
            logger.debug("encoding %d (count %d) as %s", sym, counts[sym], codes[sym])

    stats = {
        "original_bytes": original_bytes,
        "unique_symbols": len(codes) - 1,
        "header_bits": header_bits,
        "payload_bits": payload_bits,
        "pad_count": bit_out.pad_count,
        "time_counts": t_counts - t0,
        "time_tree_build": t_tree - t_counts,
        "time_codes": t_codes - t_tree,
        "time_header": t_header - t_codes,
        "time_pack": t_pack - t_header,
    }
    return root, stats


def compress_bytes(data: bytes, config: Optional[HuffConfig] = None) -> bytes:
    out = io.BytesIO()
    compress(BitInputStream(io.BytesIO(data)), BitOutputStream(out), config)
    return out.getvalue()


def compress_file(src: str, dst: str,
                  config: Optional[HuffConfig] = None) -> Tuple[Node, Dict[str, object]]:
    """
    Compress src into dst. Returns (root, stats) where stats carries sizes,
    the compression ratio and per-step timings.
    """
    t0 = time.perf_counter()
    with open_input(src) as bit_in, open_output(dst) as bit_out:
        root, core = compress(bit_in, bit_out, config)
    t_done = time.perf_counter()

    original_bytes = core["original_bytes"]
    compressed_bytes = os.path.getsize(dst)
    if original_bytes > 0:
        compression_ratio = compressed_bytes / original_bytes
        space_saved_percent = ((original_bytes - compressed_bytes) / original_bytes) * 100.0
    else:
        compression_ratio = None
        space_saved_percent = None

    stats = {
        "input": src,
        "output": dst,
        "compressed_bytes": compressed_bytes,
        "compression_ratio": compression_ratio,
        "space_saved_percent": space_saved_percent,
        **core,
        "time_total": t_done - t0,
    }
    return root, stats


# -------------------------
# 8) Decompressor
# -------------------------
def decompress(bit_in: BitInputStream, bit_out: BitOutputStream,
               config: Optional[HuffConfig] = None) -> Dict[str, object]:
    """Decompress bit_in into bit_out and close bit_out.

    Nothing reaches bit_out unless the magic number matches.
    """
    config = config or DEFAULT_CONFIG
    t0 = time.perf_counter()

    bits = bit_in.read_bits(BITS_PER_INT)
    if bits == -1:
        raise BadMagicNumber("stream too short for a magic number")
    if bits != config.magic:
        raise BadMagicNumber(f"illegal header starts with {bits:#010x}")

    root = read_header(bit_in)
    header_bits = bit_in.bits_read - BITS_PER_INT
    t_tree = time.perf_counter()

    restored = read_compressed_bits(root, bit_in, bit_out)
    bit_out.close()
    t_decode = time.perf_counter()

    if config.debug >= DEBUG_LOW:
        logger.debug("read %d header bits, restored %d bytes", header_bits, restored)

    return {
        "header_bits": header_bits,
        "restored_size": restored,
        "time_tree": t_tree - t0,
        "time_decode": t_decode - t_tree,
    }


def decompress_bytes(blob: bytes, config: Optional[HuffConfig] = None) -> bytes:
    out = io.BytesIO()
    decompress(BitInputStream(io.BytesIO(blob)), BitOutputStream(out), config)
    return out.getvalue()


def decompress_file(src: str, dst: str,
                    config: Optional[HuffConfig] = None) -> Dict[str, object]:
    """
    Decompress src into dst. dst is only written once decoding has
    succeeded, so a corrupt input leaves no output file behind.
    """
    t0 = time.perf_counter()
    raw = read_file_bytes(src)
    t_read = time.perf_counter()

    restored = io.BytesIO()
    core = decompress(BitInputStream(io.BytesIO(raw)), BitOutputStream(restored), config)
    t_decode = time.perf_counter()

    with open(dst, 'wb') as f:
        f.write(restored.getvalue())
    t_write = time.perf_counter()

    return {
        "input_huff": src,
        "output": dst,
        "compressed_size": len(raw),
        **core,
        "time_read": t_read - t0,
        "time_write": t_write - t_decode,
        "time_total": t_write - t0,
    }
