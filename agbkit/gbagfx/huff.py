"""Huffman compression in the GBA BIOS format (type 0x2x)."""

from __future__ import annotations

import struct
from collections import Counter, deque
from dataclasses import dataclass
from typing import Optional

from .util import GfxError

_MASK32 = 0xFFFFFFFF
_MAX_BRANCH_SPAN = 128


@dataclass(eq=False)
class _Node:
    value: int
    key: int = 0
    left: Optional["_Node"] = None
    right: Optional["_Node"] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None


def _count_symbols(src: bytes, bit_depth: int) -> Counter:
    if bit_depth == 8:
        return Counter(src)
    counts: Counter = Counter()
    for byte in src:
        counts[byte >> 4] += 1
        counts[byte & 0xF] += 1
    return counts


def _build_tree(counts: Counter, nitems: int) -> _Node:
    nodes = sorted((_Node(counts[key], key) for key in range(nitems)), key=lambda n: n.value)
    nodes = [node for node in nodes if node.value != 0]
    if not nodes:
        raise GfxError("Fatal error while compressing Huff file.")

    while len(nodes) > 1:
        smallest, second = nodes[0], nodes[1]
        merged = _Node(smallest.value + second.value, left=second, right=smallest)
        nodes = nodes[2:] + [merged]
        nodes.sort(key=lambda n: n.value)
    return nodes[0]


def _layout_tree(root: _Node) -> tuple[list[_Node], dict[int, int], dict[int, tuple[int, int]]]:
    """Order the tree breadth-first and assign each leaf its code.

    Returns the node order, the index of each branch's right child and a
    ``key -> (bit count, bits)`` table.
    """
    order = [root]
    right_index: dict[int, int] = {}
    encoding: dict[int, tuple[int, int]] = {}
    queue = deque([(root, 0, 0, 0)])

    while queue:
        node, index, depth, code = queue.popleft()
        if node.is_leaf:
            if depth:
                encoding[node.key] = (depth, code)
            continue
        for bit, child in ((0, node.left), (1, node.right)):
            child_index = len(order)
            if child_index - index > _MAX_BRANCH_SPAN:
                raise GfxError(
                    "Fatal error while compressing Huff file: unable to encode binary tree."
                )
            order.append(child)
            queue.append((child, child_index, depth + 1, (code << 1) | bit))
        right_index[index] = len(order) - 1

    return order, right_index, encoding


def _encode_tree(order: list[_Node], right_index: dict[int, int]) -> bytes:
    num_leaves = (len(order) + 1) // 2
    out = bytearray([(num_leaves - 1) & 0xFF])
    for index, node in enumerate(order):
        if node.is_leaf:
            out.append(node.key & 0xFF)
            continue
        byte = ((right_index[index] - index) // 2 - 1) & 0xFF
        if node.left.is_leaf:
            byte |= 0x80
        if node.right.is_leaf:
            byte |= 0x40
        out.append(byte)
    return bytes(out)


class _BitWriter:
    """Packs codes most-significant bit first into little-endian words."""

    def __init__(self) -> None:
        self.out = bytearray()
        self.buffer = 0
        self.bits = 0

    def flush(self) -> None:
        self.out += self.buffer.to_bytes(4, "little")
        self.buffer = 0
        self.bits = 0

    def write(self, nbits: int, bitstring: int) -> None:
        bitstring &= _MASK32
        if self.bits + nbits >= 32:
            diff = self.bits + nbits - 32
            self.buffer = (self.buffer << (nbits - diff)) & _MASK32
            self.buffer |= bitstring >> diff
            bitstring &= ~(1 << diff) & _MASK32
            nbits = diff
            self.flush()
        if nbits:
            self.buffer = ((self.buffer << nbits) | bitstring) & _MASK32
            self.bits += nbits


def huff_compress(data: bytes, bit_depth: int = 4) -> bytes:
    """Huffman-compress ``data`` using 4- or 8-bit symbols."""
    src = bytes(data)
    if not src or bit_depth not in (4, 8):
        raise GfxError("Fatal error while compressing Huff file.")

    root = _build_tree(_count_symbols(src, bit_depth), 1 << bit_depth)
    order, right_index, encoding = _layout_tree(root)

    writer = _BitWriter()
    symbol_mask = 0xFF >> (8 - bit_depth)
    padded = src + bytes(-len(src) % 4)
    for (word,) in struct.iter_unpack("<I", padded):
        for _ in range(32 // bit_depth):
            writer.write(*encoding.get(word & symbol_mask, (0, 0)))
            word >>= bit_depth
    if writer.bits:
        writer.flush()

    size = len(src) & 0xFFFFFF
    out = bytearray([bit_depth | 0x20]) + size.to_bytes(3, "little")
    out += _encode_tree(order, right_index)
    out += writer.out
    out += bytes(-len(out) % 4)
    return bytes(out)


def _byte_at(src: bytes, pos: int) -> int:
    if pos >= len(src):
        raise GfxError("Fatal error while decompressing Huff file.")
    return src[pos]


def huff_decompress(data: bytes) -> bytes:
    """Decompress Huffman-coded data."""
    src = bytes(data)
    if len(src) < 5:
        raise GfxError("Fatal error while decompressing Huff file.")

    bit_depth = src[0] & 15
    if bit_depth not in (4, 8):
        raise GfxError("Fatal error while decompressing Huff file.")

    dest_size = int.from_bytes(src[1:4], "little")
    per_word = 32 // bit_depth
    pos = 4 + (src[4] + 1) * 2
    tree_pos = 5
    dest = bytearray()
    pending = 0
    count = 0

    while True:
        if pos >= len(src):
            raise GfxError("Fatal error while decompressing Huff file.")
        window = int.from_bytes(src[pos : pos + 4].ljust(4, b"\x00"), "little")
        pos += 4

        for _ in range(32):
            bit = (window >> 31) & 1
            view = _byte_at(src, tree_pos)
            is_leaf = ((view << bit) & 0x80) != 0
            tree_pos = (tree_pos & ~1) + ((view & 0x3F) + 1) * 2 + bit
            if is_leaf:
                symbol = _byte_at(src, tree_pos)
                pending = ((pending >> bit_depth) | (symbol << (32 - bit_depth))) & _MASK32
                count += 1
                if count == per_word:
                    dest += pending.to_bytes(4, "little")
                    pending = 0
                    count = 0
                    if len(dest) == dest_size:
                        return bytes(dest)
                tree_pos = 5
            window = (window << 1) & _MASK32