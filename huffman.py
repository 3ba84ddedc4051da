"""
Реализует побайтовое кодирование Хаффмана.

Частоты символов сортируются по возрастанию, два наименьших узла
объединяются в новый, который вставляется в начало последовательности,
после чего она пересортировывается. Так дерево (а значит, и коды)
получается одинаковым при сжатии и при распаковке.
"""

from typing import Dict, List, Optional, Tuple
from collections import Counter
from dataclasses import dataclass

from errors import MalformedArchiveError, UnsupportedInputError
from format import ArchiveFormat, ArchiveHeader, MAX_ORIGINAL_LENGTH
from symbol_list import Internal, Leaf, Node, SymbolList


BIT_SHIFTS = (7, 6, 5, 4, 3, 2, 1, 0)

@dataclass(frozen=True)
class HuffmanCode:
    symbol: int
    bits: str

    @property
    def length(self) -> int:
        return len(self.bits)

    @property
    def value(self) -> int:
        return int(self.bits, 2) if self.bits else 0


def count_frequencies(data: bytes) -> Tuple[SymbolList, int]:
    """
    Подсчитывает частоту каждого байта.

    Символы идут в порядке первого появления во входных данных,
    вторым значением возвращается общее число символов.
    """
    if len(data) > MAX_ORIGINAL_LENGTH:
        raise UnsupportedInputError(
            f"Input of {len(data)} bytes does not fit a 32-bit length field")

    symbols = SymbolList(Leaf(symbol, frequency)
                         for symbol, frequency in Counter(data).items())
    return symbols, len(data)


def build_tree(symbols: SymbolList) -> Node:
    """Превращает отсортированную последовательность в дерево, возвращает корень"""
    if not symbols:
        raise UnsupportedInputError("Cannot build a Huffman tree without symbols")

    while len(symbols) > 1:
        low = symbols.remove(0)
        high = symbols.remove(0)
        symbols.insert(Internal(low, high), 0)
        symbols.sort()

    return symbols.front()


def build_codes(root: Node) -> List[HuffmanCode]:
    codes = []
    stack = [(root, '')]

    while stack:
        node, path = stack.pop()

        if node.is_leaf:
            codes.append(HuffmanCode(node.symbol, path))
            continue

        # high кладём первым, чтобы low обошёлся раньше
        stack.append((node.high, path + '1'))
        stack.append((node.low, path + '0'))

    return codes


class BitWriter:
    def __init__(self):
        self.buffer = bytearray()
        self.accumulator = 0
        self.fill = 0

    def write(self, value: int, length: int):
        if length == 0:
            return

        self.accumulator = (self.accumulator << length) | value
        self.fill += length

        while self.fill >= 8:
            self.fill -= 8
            self.buffer.append((self.accumulator >> self.fill) & 0xFF)

        self.accumulator &= (1 << self.fill) - 1

    def write_bits(self, bits: str):
        self.write(int(bits, 2) if bits else 0, len(bits))

    def to_bytes(self) -> bytes:
        output = bytes(self.buffer)

        if self.fill:
            # Хвост дополняется нулями до целого байта
            output += bytes([(self.accumulator << (8 - self.fill)) & 0xFF])

        return output


class HuffmanEncoder:
    @staticmethod
    def encode(data: bytes, codes: List[HuffmanCode]) -> bytes:
        table: Dict[int, Tuple[int, int]] = {
            code.symbol: (code.value, code.length) for code in codes
        }

        writer = BitWriter()
        for byte in data:
            value, length = table[byte]
            writer.write(value, length)

        return writer.to_bytes()

    @staticmethod
    def decode(root: Node, bitstream: bytes, length: int) -> bytes:
        if root.is_leaf:
            # Вырожденное дерево: коды нулевой длины, биты не читаются
            return bytes([root.symbol]) * length

        if length == 0:
            return b''

        output = bytearray()
        node = root

        for byte in bitstream:
            for shift in BIT_SHIFTS:
                node = node.high if (byte >> shift) & 1 else node.low

                if node.is_leaf:
                    output.append(node.symbol)
                    # Остаток последнего байта - выравнивание, он не читается
                    if len(output) == length:
                        return bytes(output)
                    node = root

        raise MalformedArchiveError(
            "Bitstream ended before all symbols were decoded")


class HuffmanTree:
    def __init__(self, header: ArchiveHeader):
        self.header = header
        self.root: Optional[Node] = None
        self.codes: List[HuffmanCode] = []

        if header.frequencies:
            self.root = build_tree(header.to_symbols())
            self.codes = build_codes(self.root)

    @staticmethod
    def from_data(data: bytes) -> 'HuffmanTree':
        symbols, length = count_frequencies(data)
        symbols.sort()
        return HuffmanTree(ArchiveHeader.from_symbols(symbols, length))

    @property
    def original_length(self) -> int:
        return self.header.original_length

    def encode(self, data: bytes) -> bytes:
        if self.root is None:
            return b''
        return HuffmanEncoder.encode(data, self.codes)

    def decode(self, bitstream: bytes) -> bytes:
        if self.root is None:
            return b''
        return HuffmanEncoder.decode(self.root, bitstream, self.original_length)


def encode_archive(tree: HuffmanTree, data: bytes) -> bytes:
    return ArchiveFormat.create_archive(tree.header, tree.encode(data))


def read_archive(archive: bytes) -> Tuple[HuffmanTree, bytes]:
    header, bitstream = ArchiveFormat.read_archive(archive)
    return HuffmanTree(header), bitstream


def compress(data: bytes) -> bytes:
    return encode_archive(HuffmanTree.from_data(data), data)


def decompress(archive: bytes) -> bytes:
    tree, bitstream = read_archive(archive)
    return tree.decode(bitstream)
