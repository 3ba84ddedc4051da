"""
Определяет структуру файла .huf и методы чтения/записи.

Архив: таблица частот (символ: 1 байт, частота: 4 байта), терминатор
с нулевой частотой, длина исходного файла (4 байта), упакованный битовый поток.
Целые числа записываются в порядке little-endian.
"""

import struct
import io
from typing import List, Tuple
from dataclasses import dataclass, field

from errors import MalformedArchiveError
from symbol_list import Leaf, SymbolList


ENTRY_FORMAT = '<BI'
LENGTH_FORMAT = '<I'
ENTRY_SIZE = struct.calcsize(ENTRY_FORMAT)
LENGTH_SIZE = struct.calcsize(LENGTH_FORMAT)

MAX_SYMBOLS = 256
MAX_ORIGINAL_LENGTH = 0xFFFFFFFF
TERMINATOR = (0, 0)


@dataclass
class ArchiveHeader:
    original_length: int
    frequencies: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def size(self) -> int:
        return (len(self.frequencies) + 1) * ENTRY_SIZE + LENGTH_SIZE

    def serialize(self) -> bytes:
        output = io.BytesIO()

        for symbol, frequency in self.frequencies:
            output.write(struct.pack(ENTRY_FORMAT, symbol, frequency))

        output.write(struct.pack(ENTRY_FORMAT, *TERMINATOR))
        output.write(struct.pack(LENGTH_FORMAT, self.original_length))

        return output.getvalue()

    @staticmethod
    def deserialize(data: bytes) -> 'ArchiveHeader':
        pos = 0
        frequencies = []
        seen = set()

        while True:
            if pos + ENTRY_SIZE > len(data):
                raise MalformedArchiveError("Frequency table is not terminated")

            symbol, frequency = struct.unpack_from(ENTRY_FORMAT, data, pos)
            pos += ENTRY_SIZE

            if frequency == 0:
                break

            if len(frequencies) == MAX_SYMBOLS:
                raise MalformedArchiveError(
                    f"Frequency table has more than {MAX_SYMBOLS} entries")

            if symbol in seen:
                raise MalformedArchiveError(
                    f"Symbol {symbol:#04x} appears twice in frequency table")

            seen.add(symbol)
            frequencies.append((symbol, frequency))

        if pos + LENGTH_SIZE > len(data):
            raise MalformedArchiveError("Cannot read original length")

        original_length = struct.unpack_from(LENGTH_FORMAT, data, pos)[0]

        # Сумма может быть больше длины: лишние символы не декодируются
        total = sum(frequency for _, frequency in frequencies)
        if total < original_length:
            raise MalformedArchiveError(
                f"Frequencies sum to {total}, header claims {original_length} bytes")

        return ArchiveHeader(original_length=original_length,
                             frequencies=frequencies)

    @staticmethod
    def from_symbols(symbols: SymbolList, original_length: int) -> 'ArchiveHeader':
        return ArchiveHeader(original_length=original_length,
                             frequencies=symbols.frequencies())

    def to_symbols(self) -> SymbolList:
        symbols = SymbolList(Leaf(symbol, frequency)
                             for symbol, frequency in self.frequencies)
        symbols.sort()
        return symbols


class ArchiveFormat:
    @staticmethod
    def create_archive(header: ArchiveHeader, bitstream: bytes) -> bytes:
        output = io.BytesIO()
        output.write(header.serialize())
        output.write(bitstream)
        return output.getvalue()

    @staticmethod
    def read_archive(data: bytes) -> Tuple[ArchiveHeader, bytes]:
        header = ArchiveHeader.deserialize(data)
        return header, data[header.size:]
