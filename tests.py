import unittest
import random
import struct
import sys

from errors import MalformedArchiveError, UnsupportedInputError
from format import ArchiveFormat, ArchiveHeader, MAX_ORIGINAL_LENGTH
from huffman import (BitWriter, HuffmanCode, HuffmanEncoder, HuffmanTree,
                     build_codes, build_tree, compress, count_frequencies,
                     decompress, read_archive)
from symbol_list import Internal, Leaf, SymbolList, by_symbol


def codes_by_symbol(data: bytes):
    tree = HuffmanTree.from_data(data)
    return {code.symbol: code.bits for code in tree.codes}


def sorted_symbols(frequencies):
    symbols = SymbolList(Leaf(symbol, frequency) for symbol, frequency in frequencies)
    symbols.sort()
    return symbols


SCENARIO_ARCHIVE = (
    b'C\x02\x00\x00\x00'
    b'B\x03\x00\x00\x00'
    b'A\x05\x00\x00\x00'
    b'\x00\x00\x00\x00\x00'
    b'\x0a\x00\x00\x00'
    b'\xfa\xa0'
)


class TestSymbolList(unittest.TestCase):
    def test_find(self):
        symbols = SymbolList([Leaf(65, 3), Leaf(66, 1)])
        self.assertEqual(symbols.find(66), Leaf(66, 1))
        self.assertIsNone(symbols.find(67))

    def test_insert_at_tail_and_before_position(self):
        symbols = SymbolList()
        symbols.insert(Leaf(1, 1))
        symbols.insert(Leaf(3, 1))
        symbols.insert(Leaf(2, 1), 1)
        symbols.insert(Leaf(0, 1), 0)
        self.assertEqual([node.symbol for node in symbols], [0, 1, 2, 3])

    def test_remove(self):
        symbols = SymbolList([Leaf(1, 1), Leaf(2, 2)])
        self.assertEqual(symbols.remove(), Leaf(1, 1))
        self.assertEqual(symbols.remove(0), Leaf(2, 2))
        self.assertEqual(len(symbols), 0)
        self.assertIsNone(symbols.front())

        with self.assertRaises(IndexError):
            symbols.remove()

    def test_sort_ascending_with_symbol_tie_break(self):
        symbols = SymbolList([Leaf(66, 5), Leaf(65, 5), Leaf(67, 2), Leaf(10, 9), Leaf(1, 2)])
        symbols.sort()
        self.assertEqual(symbols.frequencies(), [(1, 2), (67, 2), (65, 5), (66, 5), (10, 9)])

    def test_sort_keeps_merged_node_in_front_on_tie(self):
        merged = Internal(Leaf(1, 2), Leaf(2, 3))
        symbols = SymbolList([merged, Leaf(0, 5)])
        symbols.sort()
        self.assertIs(symbols.front(), merged)

        symbols = SymbolList([Leaf(0, 5), merged])
        symbols.sort()
        self.assertEqual(symbols.front(), Leaf(0, 5))

    def test_merged_node_sorts_before_leaf_with_same_frequency(self):
        merged = Internal(Leaf(1, 2), Leaf(2, 3))
        symbols = SymbolList([Leaf(65, 5), merged])
        symbols.sort()
        self.assertIs(symbols.front(), merged)

    def test_nodes_compare_and_hash_by_value(self):
        self.assertEqual(len({Leaf(65, 3), Leaf(65, 3), Leaf(66, 3)}), 2)

        merged = Internal(Leaf(1, 2), Leaf(2, 3))
        self.assertEqual(merged, Internal(Leaf(1, 2), Leaf(2, 3)))
        self.assertNotEqual(merged, Internal(Leaf(2, 3), Leaf(1, 2)))
        self.assertEqual(hash(merged), hash(Internal(Leaf(1, 2), Leaf(2, 3))))
        self.assertEqual(merged.frequency, 5)
        self.assertNotEqual(merged, Leaf(0, 5))

    def test_sort_by_symbol(self):
        symbols = SymbolList([Leaf(9, 1), Leaf(3, 7), Leaf(5, 2)])
        symbols.sort(key=by_symbol)
        self.assertEqual([node.symbol for node in symbols], [3, 5, 9])

    def test_sort_empty_and_single(self):
        symbols = SymbolList()
        symbols.sort()
        self.assertEqual(len(symbols), 0)

        symbols = SymbolList([Leaf(7, 7)])
        symbols.sort()
        self.assertEqual(symbols.frequencies(), [(7, 7)])


class TestFrequencyAnalysis(unittest.TestCase):
    def test_counts_in_first_seen_order(self):
        symbols, length = count_frequencies(b"abracadabra")
        self.assertEqual(length, 11)
        self.assertEqual(symbols.frequencies(),
                         [(ord('a'), 5), (ord('b'), 2), (ord('r'), 2),
                          (ord('c'), 1), (ord('d'), 1)])

    def test_empty(self):
        symbols, length = count_frequencies(b"")
        self.assertEqual(length, 0)
        self.assertEqual(len(symbols), 0)

    def test_rejects_input_longer_than_length_field(self):
        class HugeInput(bytes):
            def __len__(self):
                return MAX_ORIGINAL_LENGTH + 1

        with self.assertRaises(UnsupportedInputError):
            count_frequencies(HugeInput(b"x"))


class TestTreeBuilder(unittest.TestCase):
    def test_tie_merges_lower_symbol_first(self):
        for _ in range(3):
            root = build_tree(sorted_symbols([(ord('a'), 5), (ord('b'), 5), (ord('c'), 2)]))

            self.assertEqual(root.frequency, 12)
            self.assertEqual(root.low, Leaf(ord('b'), 5))
            self.assertFalse(root.high.is_leaf)
            self.assertEqual(root.high.frequency, 7)
            self.assertEqual(root.high.low, Leaf(ord('c'), 2))
            self.assertEqual(root.high.high, Leaf(ord('a'), 5))

    def test_consumes_sequence(self):
        symbols = sorted_symbols([(1, 1), (2, 2), (3, 3)])
        root = build_tree(symbols)
        self.assertEqual(len(symbols), 1)
        self.assertIs(symbols.front(), root)

    def test_single_symbol_is_leaf(self):
        root = build_tree(sorted_symbols([(ord('Z'), 5)]))
        self.assertTrue(root.is_leaf)
        self.assertEqual(root.symbol, ord('Z'))

    def test_empty_is_rejected(self):
        with self.assertRaises(UnsupportedInputError):
            build_tree(SymbolList())


class TestCodeGenerator(unittest.TestCase):
    def test_scenario_codes(self):
        tree = HuffmanTree.from_data(b"AAAAABBBCC")
        self.assertEqual([(code.symbol, code.bits) for code in tree.codes],
                         [(ord('C'), '00'), (ord('B'), '01'), (ord('A'), '1')])
        lengths = {code.symbol: code.length for code in tree.codes}
        self.assertEqual(lengths, {ord('A'): 1, ord('B'): 2, ord('C'): 2})

    def test_single_symbol_has_empty_code(self):
        tree = HuffmanTree.from_data(b"ZZZZZ")
        self.assertEqual(tree.codes, [HuffmanCode(ord('Z'), '')])
        self.assertEqual(tree.codes[0].length, 0)

    def test_codes_are_prefix_free(self):
        random.seed(7)
        samples = [
            b"The quick brown fox jumps over the lazy dog",
            bytes(range(256)),
            bytes(random.choice(b"aaaaaaabbbbccd\x00\xff") for _ in range(2000)),
        ]

        for data in samples:
            codes = list(codes_by_symbol(data).values())
            self.assertEqual(len(codes), len(set(data)))
            for a in codes:
                self.assertGreater(len(a), 0)
                for b in codes:
                    if a is not b:
                        self.assertFalse(b.startswith(a), f"{a} is a prefix of {b}")

    def test_lower_frequency_never_gets_shorter_code(self):
        data = (b"a" * 40 + b"b" * 20 + b"c" * 10 + b"d" * 5 +
                b"e" * 3 + b"f" * 2 + b"g" + b"h")
        frequencies, _ = count_frequencies(data)
        counts = {node.symbol: node.frequency for node in frequencies}
        codes = codes_by_symbol(data)

        for low in counts:
            for high in counts:
                if counts[low] < counts[high]:
                    self.assertGreaterEqual(len(codes[low]), len(codes[high]))

    def test_deep_tree_codes(self):
        root = Leaf(0, 1)
        for symbol in range(1, 71):
            root = Internal(Leaf(symbol, 1), root)

        codes = {code.symbol: code.bits for code in build_codes(root)}
        self.assertEqual(codes[0], '1' * 70)
        self.assertEqual(codes[70], '0')
        self.assertEqual(codes[1], '1' * 69 + '0')


class TestBitPacking(unittest.TestCase):
    def test_msb_first_with_zero_padding(self):
        writer = BitWriter()
        writer.write_bits('1')
        writer.write_bits('01')
        self.assertEqual(writer.to_bytes(), b'\xa0')

    def test_whole_byte_needs_no_padding(self):
        writer = BitWriter()
        writer.write_bits('1100')
        writer.write_bits('0011')
        self.assertEqual(writer.to_bytes(), b'\xc3')

    def test_nothing_written(self):
        writer = BitWriter()
        writer.write_bits('')
        self.assertEqual(writer.to_bytes(), b'')

    def test_codes_longer_than_64_bits(self):
        writer = BitWriter()
        writer.write_bits('1' * 7)
        writer.write(1, 100)
        self.assertEqual(writer.to_bytes(), b'\xfe' + b'\x00' * 12 + b'\x20')

    def test_decoder_reads_msb_first(self):
        root = Internal(Leaf(1, 1), Leaf(2, 1))
        self.assertEqual(HuffmanEncoder.decode(root, b'\x81', 8),
                         bytes([2, 1, 1, 1, 1, 1, 1, 2]))

        with self.assertRaises(MalformedArchiveError):
            HuffmanEncoder.decode(root, b'\x81', 9)

    def test_decoder_stops_inside_byte(self):
        root = Internal(Leaf(1, 1), Leaf(2, 1))
        self.assertEqual(HuffmanEncoder.decode(root, b'\x81\xff', 3), bytes([2, 1, 1]))
        self.assertEqual(HuffmanEncoder.decode(root, b'', 0), b'')

    def test_decoder_crosses_byte_boundaries(self):
        data = bytes(random.Random(3).randint(0, 255) for _ in range(20000))
        tree = HuffmanTree.from_data(data)
        self.assertEqual(tree.decode(tree.encode(data)), data)

    def test_scenario_bitstream(self):
        tree = HuffmanTree.from_data(b"AAAAABBBCC")
        self.assertEqual(tree.encode(b"AAAAABBBCC"), b'\xfa\xa0')

    def test_decoder_ignores_padding(self):
        tree = HuffmanTree.from_data(b"AAAAABBBCC")
        self.assertEqual(tree.decode(b'\xfa\xa0\xff\xff'), b"AAAAABBBCC")

    def test_deep_tree_round_trip(self):
        root = Leaf(0, 1)
        for symbol in range(1, 71):
            root = Internal(Leaf(symbol, 1), root)

        data = bytes([0, 70, 35, 0, 1, 0])
        bitstream = HuffmanEncoder.encode(data, build_codes(root))
        self.assertEqual(HuffmanEncoder.decode(root, bitstream, len(data)), data)

    def test_single_symbol_reads_no_bits(self):
        root = Leaf(ord('Z'), 5)
        self.assertEqual(HuffmanEncoder.decode(root, b'', 5), b"ZZZZZ")


class TestArchiveFormat(unittest.TestCase):
    def test_scenario_archive_bytes(self):
        archive = compress(b"AAAAABBBCC")
        self.assertEqual(archive, SCENARIO_ARCHIVE)

        header, bitstream = ArchiveFormat.read_archive(archive)
        self.assertEqual(header.original_length, 10)
        self.assertEqual(bitstream, b'\xfa\xa0')

    def test_header_round_trip(self):
        header = ArchiveHeader(original_length=7, frequencies=[(200, 1), (3, 2), (9, 4)])
        data = header.serialize()
        self.assertEqual(len(data), header.size)
        self.assertEqual(ArchiveHeader.deserialize(data), header)

    def test_header_order_is_ascending(self):
        header, _ = ArchiveFormat.read_archive(compress(b"mississippi river"))
        keys = [(frequency, symbol) for symbol, frequency in header.frequencies]
        self.assertEqual(keys, sorted(keys))

    def test_integers_are_little_endian(self):
        archive = compress(b"x" * 258)
        self.assertEqual(archive[:5], b'x' + struct.pack('<I', 258))
        self.assertEqual(archive[10:14], b'\x02\x01\x00\x00')

    def test_to_symbols_is_sorted(self):
        header = ArchiveHeader(original_length=9, frequencies=[(5, 4), (2, 4), (1, 1)])
        self.assertEqual(header.to_symbols().frequencies(), [(1, 1), (2, 4), (5, 4)])

    def test_missing_terminator(self):
        with self.assertRaises(MalformedArchiveError):
            ArchiveFormat.read_archive(b'A\x05\x00\x00\x00')

    def test_truncated_entry(self):
        with self.assertRaises(MalformedArchiveError):
            ArchiveFormat.read_archive(b'A\x05\x00')

    def test_truncated_length(self):
        with self.assertRaises(MalformedArchiveError):
            ArchiveFormat.read_archive(b'A\x05\x00\x00\x00' + b'\x00' * 5 + b'\x05\x00')

    def test_too_many_symbols(self):
        table = b''.join(struct.pack('<BI', i % 256, 1) for i in range(257))
        archive = table + b'\x00' * 5 + struct.pack('<I', 257)
        with self.assertRaises(MalformedArchiveError):
            ArchiveFormat.read_archive(archive)

    def test_duplicate_symbol(self):
        archive = b'A\x01\x00\x00\x00' * 2 + b'\x00' * 5 + b'\x02\x00\x00\x00'
        with self.assertRaises(MalformedArchiveError):
            ArchiveFormat.read_archive(archive)

    def test_frequencies_below_length(self):
        archive = b'A\x05\x00\x00\x00' + b'\x00' * 5 + b'\x06\x00\x00\x00'
        with self.assertRaises(MalformedArchiveError):
            ArchiveFormat.read_archive(archive)

    def test_frequencies_may_exceed_length(self):
        archive = b'A\x06\x00\x00\x00' + b'\x00' * 5 + b'\x05\x00\x00\x00'
        header, bitstream = ArchiveFormat.read_archive(archive)
        self.assertEqual(header.original_length, 5)
        self.assertEqual(header.frequencies, [(ord('A'), 6)])
        self.assertEqual(bitstream, b'')
        self.assertEqual(decompress(archive), b"AAAAA")

    def test_empty_table_with_length(self):
        with self.assertRaises(MalformedArchiveError):
            decompress(b'\x00' * 5 + b'\x05\x00\x00\x00')

    def test_malformed_is_value_error(self):
        with self.assertRaises(ValueError):
            decompress(b'')


class TestHuffmanCodec(unittest.TestCase):
    def test_scenario(self):
        self.assertEqual(decompress(compress(b"AAAAABBBCC")), b"AAAAABBBCC")

    def test_single_symbol(self):
        archive = compress(b"ZZZZZ")
        self.assertEqual(archive, b'Z\x05\x00\x00\x00' + b'\x00' * 5 + b'\x05\x00\x00\x00')
        self.assertEqual(decompress(archive), b"ZZZZZ")
        self.assertEqual(decompress(archive + b'\xff\x00'), b"ZZZZZ")

    def test_empty(self):
        archive = compress(b"")
        self.assertEqual(archive, b'\x00' * 9)
        self.assertEqual(decompress(archive), b"")

    def test_one_byte(self):
        self.assertEqual(decompress(compress(b"A")), b"A")

    def test_two_symbols(self):
        self.assertEqual(decompress(compress(b"AB")), b"AB")

    def test_text(self):
        data = b"Lorem ipsum dolor sit amet " * 200
        compressed = compress(data)
        self.assertLess(len(compressed), len(data))
        self.assertEqual(decompress(compressed), data)

    def test_all_bytes(self):
        data = bytes(range(256)) * 4
        self.assertEqual(decompress(compress(data)), data)

    def test_random_data(self):
        random.seed(42)
        data = bytes(random.randint(0, 255) for _ in range(5000))
        self.assertEqual(decompress(compress(data)), data)

    def test_skewed_data(self):
        data = b"".join(bytes([i]) * (1 << i) for i in range(12))
        self.assertEqual(decompress(compress(data)), data)

    def test_archive_records_length(self):
        data = b"self describing archive\n" * 13
        tree, _ = read_archive(compress(data))
        self.assertEqual(tree.original_length, len(data))
        self.assertEqual(len(decompress(compress(data))), len(data))

    def test_truncated_bitstream(self):
        with self.assertRaises(MalformedArchiveError):
            decompress(SCENARIO_ARCHIVE[:-1])

    def test_archive_with_counted_end_of_file_symbol(self):
        # Старые архивы .huf учитывают в таблице лишний нулевой символ в конце файла
        archive = bytes.fromhex(
            '0001000000'
            '4302000000'
            '4203000000'
            '4105000000'
            '0000000000'
            '0a000000'
            '07f6d0'
        )
        header, _ = ArchiveFormat.read_archive(archive)
        self.assertEqual(sum(frequency for _, frequency in header.frequencies), 11)
        self.assertEqual(decompress(archive), b"AAAAABBBCC")


def run_tests():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestSymbolList))
    suite.addTests(loader.loadTestsFromTestCase(TestFrequencyAnalysis))
    suite.addTests(loader.loadTestsFromTestCase(TestTreeBuilder))
    suite.addTests(loader.loadTestsFromTestCase(TestCodeGenerator))
    suite.addTests(loader.loadTestsFromTestCase(TestBitPacking))
    suite.addTests(loader.loadTestsFromTestCase(TestArchiveFormat))
    suite.addTests(loader.loadTestsFromTestCase(TestHuffmanCodec))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(run_tests())
